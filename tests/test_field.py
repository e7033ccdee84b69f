"""Tests for RecognitionField: store, engine and interaction wired together."""

import json

import pytest

from recognition_field.errors import InputError, StorageError, ValidationError
from recognition_field.field import RecognitionField
from recognition_field.models import LinkKind
from recognition_field.store import NODES_KEY, GraphStore


class TestLoad:
    def test_loads_seed_and_starts(self, field):
        assert [n.id for n in field.engine.nodes] == [1, 2, 3, 4, 5]
        assert len(field.engine.links) == 6
        assert field.engine.running is True
        assert field.engine.alpha == 0.3
        assert field.last_error is None

    def test_corrupt_store_falls_back_to_empty(self, config):
        store = GraphStore(config)
        store.init_db()
        try:
            store.set_items({NODES_KEY: "{broken"})
            f = RecognitionField(config, store)
            graph = f.load()
            assert graph.nodes == []
            assert f.engine.nodes == []
            assert isinstance(f.last_error, StorageError)
        finally:
            store.close()

    def test_corrupt_store_keeps_last_known_good(self, field, tmp_store):
        tmp_store.set_items({NODES_KEY: "{broken"})
        graph = field.load()
        assert len(graph.nodes) == 5
        assert field.last_error is not None

    def test_duplicate_ids_keep_last_known_good(self, field, tmp_store):
        tmp_store.set_items({
            NODES_KEY: json.dumps([
                {"id": 1, "title": "a", "content": "aaa"},
                {"id": 1, "title": "b", "content": "bbb"},
            ]),
        })
        graph = field.load()
        assert [n.id for n in graph.nodes] == [1, 2, 3, 4, 5]
        assert [n.id for n in field.engine.nodes] == [1, 2, 3, 4, 5]
        assert isinstance(field.last_error, StorageError)

    def test_reload_clears_view_state(self, field):
        field.interaction.on_select(2)
        field.load()
        assert field.interaction.state.selected is None


class TestAddMoment:
    def test_adds_to_store_and_engine(self, field, tmp_store):
        node = field.add_moment("Y", "Y is a long enough moment", 3, "tension")
        assert node.id == 6
        assert field.engine.has_node(6)
        assert node.orbital_radius > 0
        link = field.engine.links[-1]
        assert (link.source, link.target, link.kind) == (6, 3, LinkKind.TENSION)
        assert [n.id for n in tmp_store.load_graph().nodes][-1] == 6

    def test_reheats(self, field):
        field.settle(2000)
        assert field.engine.running is False
        field.add_moment("Y", "Y is a long enough moment", 1)
        assert field.engine.running is True
        assert field.engine.alpha == 0.3

    def test_selection_stays_frozen(self, field):
        field.interaction.on_select(2)
        before = {n.id: (n.x, n.y) for n in field.engine.nodes}
        field.add_moment("Y", "Y is a long enough moment", 3)
        assert field.engine.running is False
        assert field.engine.alpha == 0.3
        assert field.run_frames(5) == 0
        assert {i: p for i, p in field.engine.positions().items() if i in before} == before

        field.interaction.on_deselect()
        assert field.engine.running is True
        assert field.engine.node(6).pinned is False

    def test_short_content_rejected(self, field):
        with pytest.raises(InputError) as exc:
            field.add_moment("Y", "Y...", 3, "tension")
        assert "content" in exc.value.errors
        assert len(field.engine.nodes) == 5

    def test_missing_target_rejected(self, field):
        with pytest.raises(InputError) as exc:
            field.add_moment("Y", "Y is a long enough moment", None)
        assert "target" in exc.value.errors

    def test_unknown_kind_rejected(self, field):
        with pytest.raises(InputError) as exc:
            field.add_moment("Y", "Y is a long enough moment", 3, "love")
        assert "type" in exc.value.errors

    def test_unknown_target_rejected(self, field, tmp_store):
        with pytest.raises(ValidationError):
            field.add_moment("Y", "Y is a long enough moment", 42)
        assert tmp_store.get_item(NODES_KEY) is None


class TestReset:
    def test_restores_seed(self, field):
        field.add_moment("Y", "Y is a long enough moment", 3)
        graph = field.reset()
        assert len(graph.nodes) == 5
        assert [n.id for n in field.engine.nodes] == [1, 2, 3, 4, 5]
        assert field.engine.running is True


class TestFrames:
    def test_run_frames_counts_steps(self, field):
        assert field.run_frames(10) == 10
        assert field.engine.steps == 10

    def test_run_frames_stops_counting_when_cool(self, field):
        steps = field.run_frames(3000)
        assert 0 < steps < 3000
        assert field.engine.running is False

    def test_settle(self, field):
        field.settle(2000)
        assert field.engine.running is False

    def test_settle_respects_limit(self, field):
        assert field.settle(5) == 5
        assert field.engine.running is True

    def test_frame_snapshot(self, field):
        frame = field.frame()
        assert len(frame.nodes) == 5
        assert len(frame.links) == 6
        assert frame.running is True
