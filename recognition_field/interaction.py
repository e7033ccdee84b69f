"""Interaction layer: pointer events in, view state and view updates out.

Each operation returns a Transition holding the new ViewState and the list of
view updates a renderer should apply. Node pin and orbit-freeze flags and the
engine's run state are the only things mutated outside the returned state.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field, replace

from recognition_field.config import InteractionConfig
from recognition_field.errors import ValidationError
from recognition_field.models import (
    KIND_DESCRIPTIONS,
    Link,
    LinkKind,
    Node,
    RelatedMoment,
    Tooltip,
)
from recognition_field.simulation.engine import LayoutEngine

logger = logging.getLogger(__name__)


# --- Events ---


@dataclass(frozen=True)
class HoverEnter:
    node_id: int


@dataclass(frozen=True)
class HoverLeave:
    pass


@dataclass(frozen=True)
class DragStart:
    node_id: int
    x: float
    y: float


@dataclass(frozen=True)
class Drag:
    node_id: int
    x: float
    y: float


@dataclass(frozen=True)
class DragEnd:
    node_id: int
    x: float
    y: float


@dataclass(frozen=True)
class Select:
    node_id: int


@dataclass(frozen=True)
class Deselect:
    pass


@dataclass(frozen=True)
class CentralToggle:
    pass


Event = HoverEnter | HoverLeave | DragStart | Drag | DragEnd | Select | Deselect | CentralToggle


# --- State ---


@dataclass(frozen=True)
class ViewState:
    hovered: int | None = None
    selected: int | None = None
    dragging: int | None = None
    show_all: bool = False
    highlighted_nodes: frozenset[int] = frozenset()
    highlighted_links: frozenset[int] = frozenset()  # indices into engine.links
    tooltip: Tooltip | None = None
    related: tuple[RelatedMoment, ...] = ()


@dataclass(frozen=True)
class ViewUpdate:
    """One change for the renderer: target is node, link, label, tooltip or detail."""

    target: str
    target_id: int | None = None
    attrs: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class Transition:
    state: ViewState
    updates: list[ViewUpdate] = field(default_factory=list)


# --- Queries ---


def connected_ids(node_id: int, links: list[Link]) -> tuple[set[int], set[int], Counter[str]]:
    """Single pass over links: neighbour ids, link indices and counts by kind."""
    neighbours: set[int] = set()
    link_ids: set[int] = set()
    by_kind: Counter[str] = Counter()
    for i, link in enumerate(links):
        if link.source == node_id:
            other = link.target
        elif link.target == node_id:
            other = link.source
        else:
            continue
        neighbours.add(other)
        link_ids.add(i)
        by_kind[link.kind.value] += 1
    neighbours.discard(node_id)
    return neighbours, link_ids, by_kind


def related_moments(node_id: int, nodes: list[Node], links: list[Link]) -> list[RelatedMoment]:
    """Moments connected to node_id with kind and direction, in link order."""
    titles = {n.id: n.title for n in nodes}
    related: list[RelatedMoment] = []
    for link in links:
        if link.source == node_id:
            other, direction = link.target, "outgoing"
        elif link.target == node_id:
            other, direction = link.source, "incoming"
        else:
            continue
        if other not in titles:
            continue
        related.append(RelatedMoment(
            id=other,
            title=titles[other],
            kind=link.kind,
            direction=direction,
            description=KIND_DESCRIPTIONS[link.kind],
        ))
    return related


# --- Controller ---


class InteractionController:
    """Drives hover, drag, selection and the show-all toggle for one engine."""

    def __init__(self, engine: LayoutEngine, config: InteractionConfig | None = None) -> None:
        self.engine = engine
        self.config = config or InteractionConfig()
        self.state = ViewState()
        self._handlers = {
            HoverEnter: lambda e: self.on_hover_enter(e.node_id),
            HoverLeave: lambda e: self.on_hover_leave(),
            DragStart: lambda e: self.on_drag_start(e.node_id, (e.x, e.y)),
            Drag: lambda e: self.on_drag(e.node_id, (e.x, e.y)),
            DragEnd: lambda e: self.on_drag_end(e.node_id, (e.x, e.y)),
            Select: lambda e: self.on_select(e.node_id),
            Deselect: lambda e: self.on_deselect(),
            CentralToggle: lambda e: self.on_central_toggle(),
        }

    def handle(self, event: Event) -> Transition:
        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f"Unsupported event {event!r}")
        return handler(event)

    # --- Opacity and size rules ---

    def link_opacity(self, index: int, state: ViewState | None = None) -> float:
        state = state or self.state
        if state.hovered is not None and index in state.highlighted_links:
            return self.config.highlight_link_opacity
        return self.config.dim_link_opacity if state.show_all else 0.0

    def label_opacity(self, node_id: int, state: ViewState | None = None) -> float:
        state = state or self.state
        if state.hovered is not None and (
            node_id == state.hovered or node_id in state.highlighted_nodes
        ):
            return self.config.highlight_label_opacity
        return self.config.dim_label_opacity if state.show_all else 0.0

    def node_radius(self, node_id: int, state: ViewState | None = None) -> float:
        state = state or self.state
        if node_id == state.selected:
            return self.config.selected_radius
        if node_id == state.hovered:
            return self.config.hover_radius
        return self.config.node_radius

    def _opacity_updates(self, state: ViewState) -> list[ViewUpdate]:
        updates = [
            ViewUpdate("link", i, {"opacity": self.link_opacity(i, state)})
            for i in range(len(self.engine.links))
        ]
        updates.extend(
            ViewUpdate("label", n.id, {"opacity": self.label_opacity(n.id, state)})
            for n in self.engine.nodes
        )
        return updates

    def _commit(self, state: ViewState, updates: list[ViewUpdate]) -> Transition:
        self.state = state
        return Transition(state=state, updates=updates)

    def _require(self, node_id: int) -> Node:
        if not self.engine.has_node(node_id):
            raise ValidationError(f"Unknown node {node_id}", node_id=node_id)
        return self.engine.node(node_id)

    def _release_orbit(self, node_id: int | None) -> None:
        if node_id is not None and self.engine.has_node(node_id):
            self.engine.node(node_id).orbit_frozen = False

    # --- Hover ---

    def on_hover_enter(self, node_id: int) -> Transition:
        node = self._require(node_id)
        self._release_orbit(self.state.hovered)
        node.orbit_frozen = True
        neighbours, link_ids, by_kind = connected_ids(node_id, self.engine.links)
        tooltip = Tooltip(
            title=node.title,
            connected_count=len(neighbours),
            connection_counts_by_kind={k.value: by_kind.get(k.value, 0) for k in LinkKind},
        )
        state = replace(
            self.state,
            hovered=node_id,
            highlighted_nodes=frozenset(neighbours),
            highlighted_links=frozenset(link_ids),
            tooltip=tooltip,
        )
        updates = self._opacity_updates(state)
        updates.append(ViewUpdate("node", node_id, {
            "radius": self.node_radius(node_id, state), "stroke_width": 2.5,
        }))
        updates.append(ViewUpdate("tooltip", node_id, tooltip.model_dump()))
        return self._commit(state, updates)

    def on_hover_leave(self) -> Transition:
        previous = self.state.hovered
        self._release_orbit(previous)
        state = replace(
            self.state,
            hovered=None,
            highlighted_nodes=frozenset(),
            highlighted_links=frozenset(),
            tooltip=None,
        )
        updates = self._opacity_updates(state)
        if previous is not None:
            updates.append(ViewUpdate("node", previous, {
                "radius": self.node_radius(previous, state), "stroke_width": 1.5,
            }))
        updates.append(ViewUpdate("tooltip", None, {"visible": False}))
        return self._commit(state, updates)

    # --- Drag ---

    def on_drag_start(self, node_id: int, pointer: tuple[float, float]) -> Transition:
        node = self._require(node_id)
        node.pinned = True
        node.x, node.y = pointer
        # A selection freezes the whole layout; dragging only moves the node then.
        if self.state.selected is None:
            self.engine.set_alpha_target(self.engine.config.drag_alpha_target)
            self.engine.start()
        state = replace(self.state, dragging=node_id)
        return self._commit(state, [ViewUpdate("node", node_id, {"x": node.x, "y": node.y})])

    def on_drag(self, node_id: int, pointer: tuple[float, float]) -> Transition:
        if self.state.dragging != node_id:
            logger.debug("Ignoring drag for %s; dragging %s", node_id, self.state.dragging)
            return Transition(state=self.state)
        node = self.engine.node(node_id)
        node.x, node.y = pointer
        return self._commit(self.state, [ViewUpdate("node", node_id, {"x": node.x, "y": node.y})])

    def on_drag_end(self, node_id: int, pointer: tuple[float, float]) -> Transition:
        if self.state.dragging != node_id:
            logger.debug("Ignoring drag end for %s; dragging %s", node_id, self.state.dragging)
            return Transition(state=self.state)
        node = self.engine.node(node_id)
        node.x, node.y = pointer
        self.engine.set_alpha_target(0.0)
        if node_id != self.state.selected:
            node.pinned = False
        state = replace(self.state, dragging=None)
        return self._commit(state, [ViewUpdate("node", node_id, {"x": node.x, "y": node.y})])

    # --- Selection ---

    def on_select(self, node_id: int) -> Transition:
        node = self._require(node_id)
        previous = self.state.selected
        if previous is not None and previous != node_id:
            self.engine.node(previous).pinned = False
        node.pinned = True
        self.engine.stop()
        related = tuple(related_moments(node_id, self.engine.nodes, self.engine.links))
        state = replace(self.state, selected=node_id, related=related)
        updates = []
        if previous is not None and previous != node_id:
            updates.append(ViewUpdate("node", previous, {"radius": self.node_radius(previous, state)}))
        updates.append(ViewUpdate("node", node_id, {"radius": self.node_radius(node_id, state)}))
        updates.append(ViewUpdate("detail", node_id, {
            "title": node.title,
            "content": node.content,
            "related": [r.model_dump(mode="json") for r in related],
        }))
        logger.debug("Selected node %d; layout frozen", node_id)
        return self._commit(state, updates)

    def on_deselect(self) -> Transition:
        previous = self.state.selected
        if previous is None:
            return Transition(state=self.state)
        for node in self.engine.nodes:
            if node.id != self.state.dragging:
                node.pinned = False
        self.engine.set_alpha_target(0.0)
        self.engine.reheat()
        state = replace(self.state, selected=None, related=())
        updates = [
            ViewUpdate("node", previous, {"radius": self.node_radius(previous, state)}),
            ViewUpdate("detail", None, {"visible": False}),
        ]
        return self._commit(state, updates)

    # --- Central symbol ---

    def on_central_toggle(self) -> Transition:
        state = replace(self.state, show_all=not self.state.show_all)
        return self._commit(state, self._opacity_updates(state))
