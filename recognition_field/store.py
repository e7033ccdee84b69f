"""SQLite-backed key-value store holding the field's moments and links.

Values are JSON arrays stored under the same keys the browser build used for
local storage, so an exported store can be loaded back verbatim.
"""

import json
import logging
import sqlite3
from pathlib import Path

import pydantic

from recognition_field.config import Config
from recognition_field.errors import StorageError, ValidationError
from recognition_field.models import GraphData, Link, LinkInput, Moment, MomentInput
from recognition_field.seed import SEED_LINKS, SEED_MOMENTS
from recognition_field.validation import validate_new_moment

logger = logging.getLogger(__name__)

NODES_KEY = "recognitionField_nodes"
LINKS_KEY = "recognitionField_links"

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);
"""


def _dumps(value: list[dict]) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


class GraphStore:
    """Persistent working set of moments and links."""

    def __init__(self, config: Config) -> None:
        self.db_path: Path = config.resolved_db_path
        self._conn: sqlite3.Connection | None = None
        self.last_known_good: GraphData | None = None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Store not initialized. Call init_db() first.")
        return self._conn

    def init_db(self) -> None:
        """Create database and tables."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.executescript(SCHEMA_SQL)
        except (OSError, sqlite3.Error) as e:
            raise StorageError(f"Cannot open store at {self.db_path}: {e}") from e
        logger.info("Store initialized at %s", self.db_path)

    def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None

    # --- Raw key-value access ---

    def get_item(self, key: str) -> str | None:
        try:
            row = self.conn.execute(
                "SELECT value FROM kv WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Error reading {key}: {e}", key=key) from e
        return row["value"] if row else None

    def set_items(self, items: dict[str, str]) -> None:
        """Write several keys in one transaction."""
        try:
            with self.conn:
                for key, value in items.items():
                    self.conn.execute(
                        """INSERT INTO kv (key, value) VALUES (?, ?)
                           ON CONFLICT(key) DO UPDATE SET
                               value = excluded.value,
                               updated_at = datetime('now')""",
                        (key, value),
                    )
        except sqlite3.Error as e:
            raise StorageError(f"Error writing {', '.join(items)}: {e}") from e
        logger.debug("Stored %s", ", ".join(items))

    def _load_json(self, key: str) -> list[dict] | None:
        raw = self.get_item(key)
        if raw is None:
            return None
        try:
            value = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt value under {key}: {e}", key=key) from e
        if not isinstance(value, list):
            raise StorageError(f"Expected a list under {key}, got {type(value).__name__}", key=key)
        return value

    # --- Moment and link access ---

    def get_nodes(self) -> list[Moment]:
        """Stored moments, or the seed moments if nothing has been stored yet."""
        stored = self._load_json(NODES_KEY)
        records = SEED_MOMENTS if stored is None else stored
        try:
            moments = [Moment(**r) for r in records]
        except (pydantic.ValidationError, TypeError) as e:
            raise StorageError(f"Invalid moment under {NODES_KEY}: {e}", key=NODES_KEY) from e
        seen: set[int] = set()
        for m in moments:
            if m.id in seen:
                raise StorageError(f"Duplicate moment id {m.id} under {NODES_KEY}", key=NODES_KEY)
            seen.add(m.id)
        return moments

    def get_links(self) -> list[Link]:
        """Stored links, or the seed links if nothing has been stored yet."""
        stored = self._load_json(LINKS_KEY)
        records = SEED_LINKS if stored is None else stored
        try:
            return [Link(**r) for r in records]
        except (pydantic.ValidationError, TypeError) as e:
            raise StorageError(f"Invalid link under {LINKS_KEY}: {e}", key=LINKS_KEY) from e

    def load_graph(self) -> GraphData:
        """Load the full working set. Raises StorageError if the store is unreadable."""
        graph = GraphData(nodes=self.get_nodes(), links=self.get_links())
        self.last_known_good = graph.model_copy(deep=True)
        return graph

    def add_node_and_link(self, node: MomentInput, link: LinkInput) -> GraphData:
        """Append a moment and its link; returns the updated working set.

        The new moment gets id = max(existing ids, default 0) + 1 and the link's
        source is rewritten to that id, whatever was passed in.
        """
        validate_new_moment(node, link, min_content_length=1)

        current = self.load_graph()
        node_ids = {n.id for n in current.nodes}
        if link.target not in node_ids:
            raise ValidationError(
                f"Cannot link to unknown node {link.target}", node_id=link.target,
            )

        new_id = max(node_ids, default=0) + 1
        new_moment = Moment(id=new_id, title=node.title, content=node.content)
        new_link = Link(source=new_id, target=link.target, kind=link.kind)

        updated = GraphData(
            nodes=[*current.nodes, new_moment],
            links=[*current.links, new_link],
        )
        self._write(updated)
        logger.info("Added moment %d (%r) linked to %d as %s",
                    new_id, node.title, link.target, link.kind.value)
        return updated

    def reset_graph(self) -> GraphData:
        """Replace the working set with the seed dataset."""
        self.set_items({
            NODES_KEY: _dumps(SEED_MOMENTS),
            LINKS_KEY: _dumps(SEED_LINKS),
        })
        logger.info("Reset store to seed dataset")
        return self.load_graph()

    def _write(self, graph: GraphData) -> None:
        self.set_items({
            NODES_KEY: _dumps([n.model_dump(mode="json") for n in graph.nodes]),
            LINKS_KEY: _dumps([k.model_dump(mode="json", by_alias=True) for k in graph.links]),
        })
        self.last_known_good = graph.model_copy(deep=True)
