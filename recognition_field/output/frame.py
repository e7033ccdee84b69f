"""Per-frame render payload: positions plus the interaction layer's opacities."""

from pydantic import BaseModel, Field

from recognition_field.interaction import InteractionController
from recognition_field.models import KIND_COLORS, LinkKind, Tooltip


class FrameNode(BaseModel):
    id: int
    x: float
    y: float
    title: str
    radius: float
    label_opacity: float
    pinned: bool = False


class FrameLink(BaseModel):
    source: int
    target: int
    source_x: float
    source_y: float
    target_x: float
    target_y: float
    kind: LinkKind
    color: str
    dashed: bool
    opacity: float


class Frame(BaseModel):
    nodes: list[FrameNode] = Field(default_factory=list)
    links: list[FrameLink] = Field(default_factory=list)
    tooltip: Tooltip | None = None
    selected: int | None = None
    show_all: bool = False
    alpha: float = 0.0
    running: bool = False


def build_frame(controller: InteractionController) -> Frame:
    """Snapshot the engine's positions with the current view state applied.

    Links whose endpoints are not in the working set are left out.
    """
    engine = controller.engine
    state = controller.state

    nodes = [
        FrameNode(
            id=n.id,
            x=n.x,
            y=n.y,
            title=n.title,
            radius=controller.node_radius(n.id),
            label_opacity=controller.label_opacity(n.id),
            pinned=n.pinned,
        )
        for n in engine.nodes
    ]

    links: list[FrameLink] = []
    for i, link in enumerate(engine.links):
        if not (engine.has_node(link.source) and engine.has_node(link.target)):
            continue
        s = engine.node(link.source)
        t = engine.node(link.target)
        links.append(FrameLink(
            source=link.source,
            target=link.target,
            source_x=s.x,
            source_y=s.y,
            target_x=t.x,
            target_y=t.y,
            kind=link.kind,
            color=KIND_COLORS[link.kind],
            dashed=link.kind == LinkKind.EVOLUTION,
            opacity=controller.link_opacity(i),
        ))

    return Frame(
        nodes=nodes,
        links=links,
        tooltip=state.tooltip,
        selected=state.selected,
        show_all=state.show_all,
        alpha=engine.alpha,
        running=engine.running,
    )
