"""The recognition field: store, layout engine and interaction layer wired together."""

import logging

from recognition_field.config import Config
from recognition_field.errors import InputError, StorageError, ValidationError
from recognition_field.interaction import InteractionController, ViewState
from recognition_field.models import GraphData, LinkInput, LinkKind, MomentInput, Node
from recognition_field.output.frame import Frame, build_frame
from recognition_field.simulation.engine import LayoutEngine
from recognition_field.store import GraphStore
from recognition_field.validation import validate_new_moment

logger = logging.getLogger(__name__)


class RecognitionField:
    """Owns one engine and one interaction controller over a store's working set."""

    def __init__(self, config: Config, store: GraphStore) -> None:
        self.config = config
        self.store = store
        self.engine = LayoutEngine(config.simulation)
        self.interaction = InteractionController(self.engine, config.interaction)
        self.last_error: StorageError | None = None

    def _apply(self, graph: GraphData) -> None:
        self.engine.set_graph(graph.nodes, graph.links)
        self.engine.set_alpha_target(self.config.simulation.alpha_target)
        self.engine.reheat(self.config.simulation.alpha)
        self.interaction.state = ViewState()

    def load(self) -> GraphData:
        """Load the working set into the engine.

        On a storage failure the error is kept in last_error and the field falls
        back to the last working set read successfully, or an empty one.
        """
        try:
            graph = self.store.load_graph()
            self.last_error = None
        except StorageError as e:
            logger.error("Could not load graph: %s", e)
            self.last_error = e
            graph = self.store.last_known_good or GraphData()
        self._apply(graph)
        logger.info("Field loaded: %d moments, %d links", len(graph.nodes), len(graph.links))
        return graph

    def add_moment(
        self,
        title: str,
        content: str,
        target: int | None,
        kind: LinkKind | str = LinkKind.RESONANCE,
    ) -> Node:
        """Validate, persist and lay out a new moment linked to `target`."""
        try:
            kind = LinkKind(kind)
        except ValueError:
            raise InputError({"type": f"Unknown connection type {kind!r}"}) from None
        node = MomentInput(title=title, content=content)
        link = LinkInput(target=target, kind=kind)
        validate_new_moment(node, link, self.config.interaction.min_content_length)
        if not self.engine.has_node(target):
            raise ValidationError(f"Cannot link to unknown node {target}", node_id=target)

        try:
            graph = self.store.add_node_and_link(node, link)
        except StorageError as e:
            self.last_error = e
            raise

        new_node = self.engine.add_node(graph.nodes[-1])
        self.engine.add_link(graph.links[-1])
        if self.interaction.state.selected is None:
            self.engine.reheat()
        else:
            # Layout stays frozen until deselect, which restarts stepping.
            self.engine.alpha = self.config.simulation.reheat_alpha
        return new_node

    def reset(self) -> GraphData:
        """Restore the seed dataset in the store and the engine."""
        try:
            graph = self.store.reset_graph()
        except StorageError as e:
            self.last_error = e
            raise
        self._apply(graph)
        return graph

    def run_frames(self, frames: int) -> int:
        """Drive the host loop for up to `frames` frames. Returns steps taken."""
        steps = 0
        for _ in range(frames):
            if self.engine.on_frame():
                steps += 1
        return steps

    def settle(self, max_frames: int = 1000) -> int:
        """Run frames until the engine cools and stops, or max_frames is reached."""
        steps = 0
        while self.engine.running and steps < max_frames:
            self.engine.on_frame()
            steps += 1
        return steps

    def frame(self) -> Frame:
        return build_frame(self.interaction)
