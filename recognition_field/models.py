"""Data models for the recognition field."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class LinkKind(str, Enum):
    RESONANCE = "resonance"
    TENSION = "tension"
    EVOLUTION = "evolution"


KIND_DESCRIPTIONS: dict[LinkKind, str] = {
    LinkKind.RESONANCE: "Resonance - concepts that echo and amplify each other",
    LinkKind.TENSION: "Tension - productive contradictions creating creative friction",
    LinkKind.EVOLUTION: "Evolution - transformation of concepts over time",
}

KIND_COLORS: dict[LinkKind, str] = {
    LinkKind.RESONANCE: "#f4a261",
    LinkKind.TENSION: "#e76f51",
    LinkKind.EVOLUTION: "#8a5cf5",
}


# --- Stored models (what goes into the store) ---


class Moment(BaseModel):
    """A recognition moment as persisted."""
    id: int
    title: str
    content: str


class Link(BaseModel):
    """A typed relation between two moments. Stored with the key ``type``."""
    model_config = ConfigDict(populate_by_name=True)

    source: int
    target: int
    kind: LinkKind = Field(alias="type")


class GraphData(BaseModel):
    """The full working set returned by every store operation."""
    nodes: list[Moment] = Field(default_factory=list)
    links: list[Link] = Field(default_factory=list)


# --- Input models (what the add form submits) ---


class MomentInput(BaseModel):
    title: str = ""
    content: str = ""


class LinkInput(BaseModel):
    """Link for a new moment. ``source`` is overwritten with the new id."""
    model_config = ConfigDict(populate_by_name=True)

    source: int | None = None
    target: int | None = None
    kind: LinkKind = Field(default=LinkKind.RESONANCE, alias="type")


# --- View models ---


class Tooltip(BaseModel):
    title: str
    connected_count: int
    connection_counts_by_kind: dict[str, int]


class RelatedMoment(BaseModel):
    """A moment connected to the selected one, as shown in the detail view."""
    id: int
    title: str
    kind: LinkKind
    direction: str  # 'outgoing' or 'incoming'
    description: str


# --- Simulation state ---


@dataclass
class Node:
    """A moment positioned in the layout, with its physical state."""

    id: int
    title: str = ""
    content: str = ""
    x: float | None = None
    y: float | None = None
    vx: float = 0.0
    vy: float = 0.0
    pinned: bool = False
    orbit_frozen: bool = False
    orbital_radius: float = 0.0
    orbital_speed: float = 0.0
    orbital_phase: float = 0.0

    @classmethod
    def from_moment(cls, moment: Moment) -> "Node":
        return cls(id=moment.id, title=moment.title, content=moment.content)

    @property
    def has_position(self) -> bool:
        return self.x is not None and self.y is not None
