"""Shared test fixtures for recognition field tests."""

import pytest

from recognition_field.config import Config, InteractionConfig, OutputConfig, SimulationConfig
from recognition_field.field import RecognitionField
from recognition_field.interaction import InteractionController
from recognition_field.seed import seed_graph
from recognition_field.simulation.engine import LayoutEngine
from recognition_field.store import GraphStore


@pytest.fixture()
def config(tmp_path):
    return Config(
        db_path=str(tmp_path / "test.db"),
        simulation=SimulationConfig(),
        interaction=InteractionConfig(),
        output=OutputConfig(output_dir=str(tmp_path / "output")),
    )


@pytest.fixture()
def tmp_store(config):
    """Create a GraphStore backed by a temp file."""
    store = GraphStore(config)
    store.init_db()
    yield store
    store.close()


@pytest.fixture()
def seeded_engine():
    """Engine holding the 5 seed moments and 6 seed links, not yet running."""
    graph = seed_graph()
    engine = LayoutEngine(SimulationConfig())
    engine.set_graph(graph.nodes, graph.links)
    return engine


@pytest.fixture()
def controller(seeded_engine):
    return InteractionController(seeded_engine, InteractionConfig())


@pytest.fixture()
def field(config, tmp_store):
    """RecognitionField loaded from an empty store (seed dataset)."""
    f = RecognitionField(config, tmp_store)
    f.load()
    return f


@pytest.fixture()
def forces_only():
    """Factory for a SimulationConfig with every force off except the overrides."""

    def _make(**overrides) -> SimulationConfig:
        values = dict(
            charge_strength=0.0,
            center_strength=0.0,
            link_strengths={"resonance": 0.0, "tension": 0.0, "evolution": 0.0},
            collision_strength=0.0,
            orbital_strength=0.0,
            spiral_factor=0.0,
        )
        values.update(overrides)
        return SimulationConfig(**values)

    return _make
