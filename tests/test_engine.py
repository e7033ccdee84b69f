"""Tests for the layout engine and its forces."""

import math

import pytest

from recognition_field.config import SimulationConfig
from recognition_field.models import Link, Moment, Node
from recognition_field.simulation.engine import LayoutEngine
from recognition_field.simulation.forces import compute_forces


def _pair_distance(engine: LayoutEngine) -> float:
    a, b = engine.nodes
    return math.hypot(b.x - a.x, b.y - a.y)


def _two_nodes(config: SimulationConfig, ax: float, bx: float, links: list[Link] | None = None) -> LayoutEngine:
    engine = LayoutEngine(config)
    engine.set_graph([Node(id=1, x=ax, y=0.0), Node(id=2, x=bx, y=0.0)], links or [])
    return engine


class TestStep:
    def test_empty_is_noop(self):
        engine = LayoutEngine()
        engine.step()
        assert engine.nodes == []
        assert engine.alpha == 0.3
        assert engine.steps == 0

    def test_alpha_decays_geometrically(self, seeded_engine):
        seeded_engine.step()
        assert seeded_engine.alpha == pytest.approx(0.297)
        seeded_engine.step()
        assert seeded_engine.alpha == pytest.approx(0.3 * 0.99 ** 2)

    def test_moves_free_nodes(self, seeded_engine):
        before = seeded_engine.positions()
        seeded_engine.tick(5)
        after = seeded_engine.positions()
        assert any(before[i] != after[i] for i in before)

    def test_deterministic_for_same_seed(self):
        from recognition_field.seed import seed_graph

        runs = []
        for _ in range(2):
            graph = seed_graph()
            engine = LayoutEngine(SimulationConfig(seed=7))
            engine.set_graph(graph.nodes, graph.links)
            engine.tick(50)
            runs.append(engine.positions())
        assert runs[0] == runs[1]


class TestComputeForces:
    def test_reads_positions_without_moving_nodes(self, seeded_engine):
        before = seeded_engine.positions()
        velocities = [(n.vx, n.vy) for n in seeded_engine.nodes]
        buf = compute_forces(
            seeded_engine.nodes, seeded_engine._resolve_links(), 0.3, seeded_engine.config,
        )
        assert seeded_engine.positions() == before
        assert [(n.vx, n.vy) for n in seeded_engine.nodes] == velocities
        assert buf.applied == ["repulsion", "centering", "link", "collision", "orbit"]
        assert any(v != 0.0 for v in buf.dvx)

    def test_pair_forces_are_symmetric(self, forces_only):
        engine = _two_nodes(forces_only(charge_strength=-120.0, collision_strength=1.0), -5.0, 5.0)
        buf = compute_forces(engine.nodes, [], 0.3, engine.config)
        assert buf.dvx[0] == pytest.approx(-buf.dvx[1])
        assert buf.dvx[0] < 0


class TestCentering:
    def test_centroid_converges_monotonically(self, forces_only):
        engine = LayoutEngine(forces_only(center_strength=0.1))
        engine.set_graph(
            [Node(id=i, x=200.0 + 10 * i, y=-150.0 + 5 * i) for i in range(1, 6)], [],
        )

        def centroid_distance() -> float:
            cx = sum(n.x for n in engine.nodes) / len(engine.nodes)
            cy = sum(n.y for n in engine.nodes) / len(engine.nodes)
            return math.hypot(cx, cy)

        distances = [centroid_distance()]
        for _ in range(60):
            engine.step()
            distances.append(centroid_distance())

        for prev, cur in zip(distances, distances[1:]):
            assert cur <= prev + 1e-9
        assert distances[-1] < distances[0] * 0.01

    def test_custom_origin(self, forces_only):
        engine = LayoutEngine(forces_only(center_strength=0.5, center_x=100.0, center_y=50.0))
        engine.set_graph([Node(id=1, x=0.0, y=0.0), Node(id=2, x=20.0, y=0.0)], [])
        engine.tick(40)
        cx = sum(n.x for n in engine.nodes) / 2
        cy = sum(n.y for n in engine.nodes) / 2
        assert cx == pytest.approx(100.0, abs=1e-6)
        assert cy == pytest.approx(50.0, abs=1e-6)


class TestForces:
    def test_repulsion_pushes_apart(self, forces_only):
        engine = _two_nodes(forces_only(charge_strength=-120.0), -5.0, 5.0)
        engine.step()
        assert _pair_distance(engine) > 10.0

    def test_link_pulls_toward_distance(self, forces_only):
        cfg = forces_only(link_strengths={"resonance": 0.7, "tension": 0.5, "evolution": 0.3})
        engine = _two_nodes(cfg, -200.0, 200.0, [Link(source=1, target=2, kind="resonance")])
        engine.step()
        d = _pair_distance(engine)
        assert 150.0 < d < 400.0

    def test_link_pushes_out_when_too_close(self, forces_only):
        cfg = forces_only(link_strengths={"resonance": 0.7, "tension": 0.5, "evolution": 0.3})
        engine = _two_nodes(cfg, -30.0, 30.0, [Link(source=1, target=2, kind="tension")])
        engine.step()
        assert _pair_distance(engine) > 60.0

    def test_link_strength_per_kind(self, forces_only):
        cfg = forces_only(link_strengths={"resonance": 0.9, "tension": 0.5, "evolution": 0.1})
        strong = _two_nodes(cfg, -200.0, 200.0, [Link(source=1, target=2, kind="resonance")])
        weak = _two_nodes(cfg, -200.0, 200.0, [Link(source=1, target=2, kind="evolution")])
        strong.step()
        weak.step()
        assert _pair_distance(strong) < _pair_distance(weak)

    def test_collision_separates_overlap(self, forces_only):
        engine = _two_nodes(forces_only(collision_strength=1.0), -5.0, 5.0)
        engine.step()
        assert _pair_distance(engine) > 10.0

    def test_collision_ignores_distant_pairs(self, forces_only):
        engine = _two_nodes(forces_only(collision_strength=1.0), -100.0, 100.0)
        engine.step()
        assert _pair_distance(engine) == pytest.approx(200.0)

    def test_coincident_nodes_separate(self, forces_only):
        engine = _two_nodes(forces_only(charge_strength=-120.0, collision_strength=1.0), 0.0, 0.0)
        engine.tick(3)
        assert _pair_distance(engine) > 0.0


class TestPinned:
    def test_pinned_position_invariant(self, seeded_engine):
        node = seeded_engine.node(1)
        node.pinned = True
        node.x, node.y = 40.0, -30.0
        seeded_engine.tick(200)
        assert (node.x, node.y) == (40.0, -30.0)
        assert (node.vx, node.vy) == (0.0, 0.0)

    def test_unpinned_resumes(self, seeded_engine):
        node = seeded_engine.node(2)
        node.pinned = True
        seeded_engine.tick(10)
        held = (node.x, node.y)
        node.pinned = False
        seeded_engine.tick(10)
        assert (node.x, node.y) != held


class TestOrbit:
    def test_assigned_on_add(self, seeded_engine):
        cfg = seeded_engine.config
        for node in seeded_engine.nodes:
            assert cfg.orbital_min_radius <= node.orbital_radius <= cfg.orbital_max_radius
            assert 0 < node.orbital_speed <= cfg.orbital_speed
            assert 0 <= node.orbital_phase < 2 * math.pi

    def test_added_node_gets_orbit_before_stepping(self):
        engine = LayoutEngine()
        node = engine.add_node(Moment(id=1, title="t", content="c"))
        assert node.orbital_radius > 0
        assert node.has_position

    @pytest.mark.parametrize("spiral", [0.05, -0.05, 0.002])
    def test_radius_stays_in_band(self, seeded_engine, spiral):
        seeded_engine.config = seeded_engine.config.model_copy(update={"spiral_factor": spiral})
        for _ in range(500):
            seeded_engine.step()
            for node in seeded_engine.nodes:
                assert 50.0 <= node.orbital_radius <= 250.0

    def test_phase_advances(self, seeded_engine):
        before = {n.id: n.orbital_phase for n in seeded_engine.nodes}
        seeded_engine.step()
        assert all(n.orbital_phase != before[n.id] for n in seeded_engine.nodes)


class TestLinks:
    def test_unknown_endpoint_skipped(self):
        engine = LayoutEngine()
        engine.set_graph(
            [Moment(id=1, title="a", content="aaa"), Moment(id=2, title="b", content="bbb")],
            [Link(source=1, target=2, kind="resonance"), Link(source=1, target=99, kind="tension")],
        )
        engine.tick(3)
        assert len(engine.warnings) == 1
        assert engine.warnings[0].node_id == 99

    def test_duplicate_id_rejected(self, seeded_engine):
        with pytest.raises(ValueError):
            seeded_engine.add_node(Moment(id=3, title="dup", content="dup"))

    def test_unknown_node_lookup(self, seeded_engine):
        with pytest.raises(KeyError):
            seeded_engine.node(42)


class TestRunControl:
    def test_stop_is_idempotent(self, seeded_engine):
        seeded_engine.stop()
        seeded_engine.start()
        seeded_engine.stop()
        seeded_engine.stop()
        assert seeded_engine.running is False

    def test_start_keeps_alpha(self, seeded_engine):
        seeded_engine.start()
        seeded_engine.on_frame()
        alpha = seeded_engine.alpha
        seeded_engine.stop()
        seeded_engine.start()
        seeded_engine.start()
        assert seeded_engine.alpha == alpha

    def test_on_frame_only_when_running(self, seeded_engine):
        assert seeded_engine.on_frame() is False
        assert seeded_engine.steps == 0
        seeded_engine.start()
        assert seeded_engine.on_frame() is True
        assert seeded_engine.steps == 1

    def test_cools_and_stops(self, seeded_engine):
        seeded_engine.start()
        frames = 0
        while seeded_engine.on_frame():
            frames += 1
            assert frames < 2000
        assert seeded_engine.running is False
        assert seeded_engine.alpha < seeded_engine.config.alpha_min

    def test_alpha_target_keeps_running(self, seeded_engine):
        seeded_engine.set_alpha_target(0.3)
        seeded_engine.start()
        for _ in range(1000):
            seeded_engine.on_frame()
        assert seeded_engine.running is True
        assert seeded_engine.alpha == pytest.approx(0.3)

    def test_reheat(self, seeded_engine):
        seeded_engine.tick(100)
        seeded_engine.reheat()
        assert seeded_engine.alpha == 0.3
        assert seeded_engine.running is True
