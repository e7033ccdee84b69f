"""Force-directed layout engine for the recognition field."""

import logging
import math
import random
from collections.abc import Iterable

from recognition_field.config import SimulationConfig
from recognition_field.errors import ValidationError
from recognition_field.models import Link, Moment, Node
from recognition_field.simulation.forces import ResolvedLink, clamp_radius, compute_forces
from recognition_field.validation import split_links

logger = logging.getLogger(__name__)

INITIAL_RADIUS = 10.0
INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))


class LayoutEngine:
    """Owns the positioned nodes and links and advances them one frame at a time.

    The host loop calls on_frame() once per frame; it steps while the engine is
    running and stops the engine once alpha has cooled below alpha_min.
    """

    def __init__(self, config: SimulationConfig | None = None, rng: random.Random | None = None) -> None:
        self.config = config or SimulationConfig()
        self.rng = rng or random.Random(self.config.seed)
        self.nodes: list[Node] = []
        self.links: list[Link] = []
        self.alpha: float = self.config.alpha
        self.alpha_target: float = self.config.alpha_target
        self.running: bool = False
        self.steps: int = 0
        self.warnings: list[ValidationError] = []
        self._index: dict[int, int] = {}
        self._resolved: list[ResolvedLink] | None = None

    # --- Working set ---

    def set_graph(self, moments: Iterable[Moment | Node], links: Iterable[Link]) -> None:
        """Replace the working set. Moments become nodes with fresh orbits."""
        self.nodes = []
        self._index = {}
        self.links = []
        for m in moments:
            self.add_node(m)
        for link in links:
            self.add_link(link)
        logger.debug("Engine loaded %d nodes, %d links", len(self.nodes), len(self.links))

    def add_node(self, item: Moment | Node) -> Node:
        """Add a node, placing it and assigning its orbit. Returns the engine's node."""
        node = item if isinstance(item, Node) else Node.from_moment(item)
        if node.id in self._index:
            raise ValueError(f"Duplicate node id {node.id}")
        if not node.has_position:
            self._place(node, len(self.nodes))
        self._assign_orbit(node)
        self._index[node.id] = len(self.nodes)
        self.nodes.append(node)
        self._resolved = None
        return node

    def add_link(self, link: Link) -> None:
        self.links.append(link)
        self._resolved = None

    def node(self, node_id: int) -> Node:
        try:
            return self.nodes[self._index[node_id]]
        except KeyError:
            raise KeyError(f"Unknown node {node_id}") from None

    def has_node(self, node_id: int) -> bool:
        return node_id in self._index

    def positions(self) -> dict[int, tuple[float, float]]:
        return {n.id: (n.x, n.y) for n in self.nodes}

    def _place(self, node: Node, i: int) -> None:
        """Phyllotaxis placement around the layout origin."""
        radius = INITIAL_RADIUS * math.sqrt(0.5 + i)
        angle = i * INITIAL_ANGLE
        node.x = self.config.center_x + radius * math.cos(angle)
        node.y = self.config.center_y + radius * math.sin(angle)

    def _assign_orbit(self, node: Node) -> None:
        cfg = self.config
        node.orbital_radius = clamp_radius(
            cfg.orbital_base_radius + self.rng.random() * cfg.orbital_radius_jitter, cfg,
        )
        node.orbital_speed = cfg.orbital_speed * (1 - self.rng.random() * cfg.orbital_speed_jitter)
        node.orbital_phase = math.atan2(node.y - cfg.center_y, node.x - cfg.center_x) % (2 * math.pi)

    def _resolve_links(self) -> list[ResolvedLink]:
        if self._resolved is None:
            valid, self.warnings = split_links(self.links, set(self._index))
            self._resolved = [
                ResolvedLink(
                    source=self._index[link.source],
                    target=self._index[link.target],
                    strength=self.config.link_strength(link.kind.value),
                )
                for link in valid
            ]
        return self._resolved

    # --- Run control ---

    def start(self) -> None:
        """Resume stepping. A no-op if already running; alpha is left as is."""
        if self.running:
            return
        self.running = True
        logger.debug("Engine started at alpha=%.4f", self.alpha)

    def stop(self) -> None:
        """Stop stepping. Idempotent."""
        if not self.running:
            return
        self.running = False
        logger.debug("Engine stopped at alpha=%.4f after %d steps", self.alpha, self.steps)

    def reheat(self, alpha: float | None = None) -> None:
        """Set alpha back up and resume stepping."""
        self.alpha = self.config.reheat_alpha if alpha is None else alpha
        self.start()

    def set_alpha_target(self, value: float) -> None:
        self.alpha_target = value

    # --- Stepping ---

    def step(self) -> None:
        """Advance the layout by one step, mutating x, y, vx, vy in place."""
        if not self.nodes:
            return
        cfg = self.config
        self.alpha += (self.alpha_target - self.alpha) * cfg.alpha_decay
        buf = compute_forces(self.nodes, self._resolve_links(), self.alpha, cfg)

        keep = 1 - cfg.velocity_decay
        for i, node in enumerate(self.nodes):
            if node.pinned:
                node.vx = 0.0
                node.vy = 0.0
                continue
            node.vx = (node.vx + buf.dvx[i]) * keep
            node.vy = (node.vy + buf.dvy[i]) * keep
            node.x += node.vx + buf.shift_x[i]
            node.y += node.vy + buf.shift_y[i]
        self.steps += 1

    def tick(self, iterations: int = 1) -> None:
        """Run steps directly, regardless of the running flag."""
        for _ in range(iterations):
            self.step()

    def on_frame(self) -> bool:
        """Host-loop hook. Steps if running; returns whether a step happened."""
        if not self.running:
            return False
        self.step()
        if self.alpha < self.config.alpha_min and self.alpha_target < self.config.alpha_min:
            self.stop()
        return True
