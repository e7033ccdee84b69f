"""Validation for new moments and for links against the working set."""

import logging
from collections.abc import Iterable

from recognition_field.errors import InputError, ValidationError
from recognition_field.models import Link, LinkInput, MomentInput

logger = logging.getLogger(__name__)


def check_moment_input(
    node: MomentInput,
    link: LinkInput,
    min_content_length: int = 10,
) -> dict[str, str]:
    """Return per-field error messages for a new moment. Empty when valid."""
    errors: dict[str, str] = {}

    if not node.title.strip():
        errors["title"] = "Title is required"

    if not node.content.strip():
        errors["content"] = "Content is required"
    elif len(node.content) < min_content_length:
        errors["content"] = f"Content should be at least {min_content_length} characters"

    if link.target is None:
        errors["target"] = "Connection is required"

    return errors


def validate_new_moment(
    node: MomentInput,
    link: LinkInput,
    min_content_length: int = 10,
) -> None:
    """Raise InputError if the moment or its link is incomplete."""
    errors = check_moment_input(node, link, min_content_length)
    if errors:
        raise InputError(errors)


def check_link(link: Link, node_ids: set[int]) -> None:
    """Raise ValidationError if either endpoint is not in node_ids."""
    for endpoint in (link.source, link.target):
        if endpoint not in node_ids:
            raise ValidationError(
                f"Link {link.source}->{link.target} ({link.kind.value}) "
                f"references unknown node {endpoint}",
                node_id=endpoint,
            )


def split_links(
    links: Iterable[Link],
    node_ids: set[int],
) -> tuple[list[Link], list[ValidationError]]:
    """Partition links into resolvable ones and validation errors for the rest."""
    valid: list[Link] = []
    rejected: list[ValidationError] = []
    for link in links:
        try:
            check_link(link, node_ids)
        except ValidationError as e:
            logger.warning("Skipping link: %s", e)
            rejected.append(e)
            continue
        valid.append(link)
    return valid, rejected
