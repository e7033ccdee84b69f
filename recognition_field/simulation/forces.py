"""Force contributions for one layout step.

Every function reads node positions as they stood at the start of the step and
writes only into a ForceBuffer; nothing here moves a node. The engine commits
the buffer once all forces have run.
"""

import hashlib
import math
from dataclasses import dataclass, field

from recognition_field.config import SimulationConfig
from recognition_field.models import Node


@dataclass
class ForceBuffer:
    """Per-node velocity deltas and positional shifts accumulated in one step."""

    dvx: list[float]
    dvy: list[float]
    shift_x: list[float]
    shift_y: list[float]
    applied: list[str] = field(default_factory=list)

    @classmethod
    def zeros(cls, n: int) -> "ForceBuffer":
        return cls([0.0] * n, [0.0] * n, [0.0] * n, [0.0] * n)


@dataclass(frozen=True)
class ResolvedLink:
    """A link whose endpoints have been mapped to node indices."""

    source: int
    target: int
    strength: float


def _deterministic_jitter(key: str, scale: float = 1e-6) -> tuple[float, float]:
    """Small reproducible offset used to separate coincident nodes."""
    h = hashlib.md5(key.encode()).hexdigest()
    x_val = int(h[:8], 16) / 0xFFFFFFFF
    y_val = int(h[8:16], 16) / 0xFFFFFFFF
    return (x_val * 2 * scale - scale, y_val * 2 * scale - scale)


def _separation(a: Node, b: Node) -> tuple[float, float]:
    """Vector from a to b, jittered when the two nodes coincide."""
    dx = b.x - a.x
    dy = b.y - a.y
    if dx == 0 and dy == 0:
        dx, dy = _deterministic_jitter(f"{a.id}:{b.id}")
    return dx, dy


def centroid(nodes: list[Node]) -> tuple[float, float]:
    n = len(nodes)
    return (sum(node.x for node in nodes) / n, sum(node.y for node in nodes) / n)


def apply_repulsion(nodes: list[Node], buf: ForceBuffer, alpha: float, strength: float) -> None:
    """Many-body force: every pair pushes apart with strength * alpha / distance."""
    if strength == 0:
        return
    n = len(nodes)
    for i in range(n):
        a = nodes[i]
        for j in range(i + 1, n):
            b = nodes[j]
            dx, dy = _separation(a, b)
            l2 = max(dx * dx + dy * dy, 1.0)
            w = strength * alpha / l2
            buf.dvx[i] += dx * w
            buf.dvy[i] += dy * w
            buf.dvx[j] -= dx * w
            buf.dvy[j] -= dy * w
    buf.applied.append("repulsion")


def apply_centering(
    nodes: list[Node],
    buf: ForceBuffer,
    strength: float,
    origin: tuple[float, float] = (0.0, 0.0),
) -> None:
    """Shift all nodes so the centroid moves toward origin by `strength` of the gap."""
    if strength == 0:
        return
    cx, cy = centroid(nodes)
    sx = (origin[0] - cx) * strength
    sy = (origin[1] - cy) * strength
    for i in range(len(nodes)):
        buf.shift_x[i] += sx
        buf.shift_y[i] += sy
    buf.applied.append("centering")


def apply_link_attraction(
    nodes: list[Node],
    links: list[ResolvedLink],
    buf: ForceBuffer,
    alpha: float,
    distance: float,
) -> None:
    """Spring force pulling linked nodes toward `distance` apart.

    The correction is split between endpoints by degree so that hubs move less.
    """
    if not links:
        return
    degree = [0] * len(nodes)
    for link in links:
        degree[link.source] += 1
        degree[link.target] += 1

    for link in links:
        if link.strength == 0:
            continue
        s, t = nodes[link.source], nodes[link.target]
        dx, dy = _separation(s, t)
        length = math.sqrt(dx * dx + dy * dy)
        k = (length - distance) / length * alpha * link.strength
        dx *= k
        dy *= k
        bias = degree[link.source] / (degree[link.source] + degree[link.target])
        buf.dvx[link.target] -= dx * bias
        buf.dvy[link.target] -= dy * bias
        buf.dvx[link.source] += dx * (1 - bias)
        buf.dvy[link.source] += dy * (1 - bias)
    buf.applied.append("link")


def apply_collision(nodes: list[Node], buf: ForceBuffer, radius: float, strength: float) -> None:
    """Push apart any pair closer than two radii, proportional to the overlap."""
    if radius <= 0 or strength == 0:
        return
    min_sep = 2 * radius
    n = len(nodes)
    for i in range(n):
        a = nodes[i]
        for j in range(i + 1, n):
            b = nodes[j]
            dx, dy = _separation(a, b)
            l2 = dx * dx + dy * dy
            if l2 >= min_sep * min_sep:
                continue
            length = math.sqrt(l2)
            f = (min_sep - length) / length * strength * 0.5
            buf.dvx[i] -= dx * f
            buf.dvy[i] -= dy * f
            buf.dvx[j] += dx * f
            buf.dvy[j] += dy * f
    buf.applied.append("collision")


def clamp_radius(radius: float, config: SimulationConfig) -> float:
    return min(max(radius, config.orbital_min_radius), config.orbital_max_radius)


def apply_orbital_drift(
    nodes: list[Node],
    buf: ForceBuffer,
    alpha: float,
    config: SimulationConfig,
) -> None:
    """Nudge each free node toward its point on a slowly widening orbit.

    Advances the node's phase by orbital_speed * alpha, grows its radius by the
    spiral factor and clamps it to the configured band. Pinned nodes and
    nodes with a frozen orbit keep their orbit where it is.
    """
    cx, cy = centroid(nodes)
    strength = config.orbital_strength * alpha
    for i, node in enumerate(nodes):
        if node.pinned or node.orbit_frozen:
            continue
        node.orbital_phase = (node.orbital_phase + node.orbital_speed * alpha) % (2 * math.pi)
        node.orbital_radius = clamp_radius(node.orbital_radius * (1 + config.spiral_factor), config)
        if strength == 0:
            continue
        tx = cx + node.orbital_radius * math.cos(node.orbital_phase)
        ty = cy + node.orbital_radius * math.sin(node.orbital_phase)
        buf.dvx[i] += (tx - node.x) * strength
        buf.dvy[i] += (ty - node.y) * strength
    buf.applied.append("orbit")


def compute_forces(
    nodes: list[Node],
    links: list[ResolvedLink],
    alpha: float,
    config: SimulationConfig,
) -> ForceBuffer:
    """Run every force in order against the current positions."""
    buf = ForceBuffer.zeros(len(nodes))
    apply_repulsion(nodes, buf, alpha, config.charge_strength)
    apply_centering(nodes, buf, config.center_strength, (config.center_x, config.center_y))
    apply_link_attraction(nodes, links, buf, alpha, config.link_distance)
    apply_collision(nodes, buf, config.collision_radius, config.collision_strength)
    apply_orbital_drift(nodes, buf, alpha, config)
    return buf
