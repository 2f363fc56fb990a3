"""
Unit Tests for State Store
==========================

Tests for component editing, plot caching and JSON persistence.
"""

import json

import pytest
from pydantic import ValidationError

from wavesynth.core.state.store import ComponentNotFoundError, StateStore
from wavesynth.models.schemas import (
    AppState,
    ComponentCreate,
    ComponentKind,
    ComponentUpdate,
    PlotSettings,
    PlotSettingsUpdate,
)


class TestComponentEditing:
    """Test component CRUD on the store."""

    def test_add_component_defaults(self, store):
        component = store.add_default_component(ComponentKind.SAWTOOTH)

        assert component.name == "Sawtooth"
        assert component.frequency == 100.0
        assert component.amplitude == 1.0
        assert component.phase == 0.0
        assert [c.id for c in store.list_components()] == [component.id]

    def test_add_component_with_fields(self, store):
        component = store.add_component(
            ComponentCreate(kind=ComponentKind.SINE, name="Hum", frequency=50.0, amplitude=0.2)
        )

        assert store.get_component(component.id) == component
        assert component.name == "Hum"

    def test_ids_unique(self, store):
        ids = {store.add_default_component(ComponentKind.SINE).id for _ in range(20)}
        assert len(ids) == 20

    def test_update_component(self, store):
        component = store.add_default_component(ComponentKind.SQUARE)
        updated = store.update_component(component.id, ComponentUpdate(frequency=25.0, phase=0.5))

        assert updated.frequency == 25.0
        assert updated.phase == 0.5
        assert updated.amplitude == component.amplitude
        assert store.get_component(component.id).frequency == 25.0

    def test_empty_name_falls_back_to_kind(self, store):
        component = store.add_component(ComponentCreate(kind=ComponentKind.SQUARE, name="Clock"))
        updated = store.update_component(component.id, ComponentUpdate(name=""))

        assert updated.name == "Square"

    def test_update_rejects_out_of_range(self):
        with pytest.raises(ValidationError):
            ComponentUpdate(phase=1.5)
        with pytest.raises(ValidationError):
            ComponentUpdate(frequency=0.0)

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_values_rejected(self, value):
        with pytest.raises(ValidationError):
            ComponentCreate(kind=ComponentKind.SINE, amplitude=value)
        with pytest.raises(ValidationError):
            ComponentUpdate(frequency=value)
        with pytest.raises(ValidationError):
            PlotSettingsUpdate(sample_rate=value)

    def test_remove_component(self, store):
        keep = store.add_default_component(ComponentKind.SINE)
        drop = store.add_default_component(ComponentKind.SQUARE)

        removed = store.remove_component(drop.id)

        assert removed.id == drop.id
        assert [c.id for c in store.list_components()] == [keep.id]

    def test_unknown_component(self, store):
        with pytest.raises(ComponentNotFoundError) as exc_info:
            store.get_component("missing")

        assert exc_info.value.component_id == "missing"
        assert "missing" in str(exc_info.value)

        with pytest.raises(ComponentNotFoundError):
            store.update_component("missing", ComponentUpdate(amplitude=1.0))
        with pytest.raises(ComponentNotFoundError):
            store.remove_component("missing")

    def test_returned_components_are_copies(self, store):
        component = store.add_default_component(ComponentKind.SINE)
        store.list_components()[0].frequency = 999.0
        component.amplitude = 5.0

        stored = store.get_component(component.id)
        assert stored.frequency == 100.0
        assert stored.amplitude == 1.0


class TestSettingsAndReplace:
    """Test sampling settings and whole-state replacement."""

    def test_update_settings(self, store):
        settings = store.update_settings(PlotSettingsUpdate(sample_rate=8000.0))

        assert settings.sample_rate == 8000.0
        assert settings.n_samples == 1000
        assert store.settings() == settings

    def test_settings_bounds(self):
        with pytest.raises(ValidationError):
            PlotSettingsUpdate(n_samples=65536)
        with pytest.raises(ValidationError):
            PlotSettingsUpdate(sample_rate=0.0)

    def test_replace(self, store, sample_state):
        store.add_default_component(ComponentKind.SINE)
        replaced = store.replace(sample_state)

        assert replaced == sample_state
        assert store.snapshot() == sample_state

    def test_snapshot_isolated(self, store, sample_state):
        store.replace(sample_state)
        snapshot = store.snapshot()
        snapshot.components.clear()
        sample_state.components.clear()

        assert len(store.list_components()) == 3


class TestPlotCaching:
    """Test that plot data is only recomputed after changes."""

    def test_plot_data_cached(self, store):
        store.add_default_component(ComponentKind.SINE)

        first = store.plot_data()
        assert store.plot_data() is first

    def test_mutation_invalidates(self, store):
        component = store.add_default_component(ComponentKind.SINE)
        first = store.plot_data()

        store.update_component(component.id, ComponentUpdate(frequency=200.0))
        second = store.plot_data()

        assert second is not first
        assert second.markers[0].frequency == 200.0

    def test_settings_change_invalidates(self, store):
        first = store.plot_data()
        store.update_settings(PlotSettingsUpdate(n_samples=10))

        assert len(store.plot_data().waveform) == 10
        assert len(first.waveform) == 1000

    def test_empty_update_keeps_cache(self, store):
        first = store.plot_data()
        store.update_settings(PlotSettingsUpdate())

        assert store.plot_data() is first

    def test_compute_stats(self, store):
        for _ in range(3):
            store.plot_data()

        stats = store.compute_stats()
        assert stats.total == 3
        assert len(stats.history) == 3
        assert stats.mean_ms >= 0.0


class TestPersistence:
    """Test JSON persistence of the state."""

    def test_changes_are_saved(self, tmp_path):
        state_file = tmp_path / "state.json"
        store = StateStore(state_file=state_file)
        component = store.add_default_component(ComponentKind.SQUARE)

        saved = json.loads(state_file.read_text())
        assert saved["components"][0]["id"] == component.id
        assert not state_file.with_suffix(".tmp").exists()

    def test_load_round_trip(self, tmp_path, sample_state):
        state_file = tmp_path / "state.json"
        StateStore(state_file=state_file).replace(sample_state)

        loaded = StateStore.load(state_file)

        assert loaded.snapshot() == sample_state
        assert loaded.state_file == state_file

    def test_load_missing_file_uses_defaults(self, tmp_path):
        defaults = PlotSettings(sample_rate=44100.0, n_samples=2048)
        store = StateStore.load(tmp_path / "absent.json", defaults)

        assert store.settings() == defaults
        assert store.list_components() == []

    def test_load_corrupt_file_uses_defaults(self, tmp_path):
        state_file = tmp_path / "state.json"
        state_file.write_text("{not json")

        store = StateStore.load(state_file, PlotSettings(sample_rate=500.0))

        assert store.settings().sample_rate == 500.0
        assert store.list_components() == []

    def test_load_undecodable_file_uses_defaults(self, tmp_path):
        """Bytes that are not UTF-8 count as unreadable state."""
        state_file = tmp_path / "state.json"
        state_file.write_bytes(b'{"sample_rate": 1000, "name": "\xff\xfe"}')

        store = StateStore.load(state_file, PlotSettings(sample_rate=750.0))

        assert store.settings().sample_rate == 750.0
        assert store.list_components() == []

    def test_missing_fields_take_defaults(self, tmp_path):
        state_file = tmp_path / "state.json"
        state_file.write_text(json.dumps({"components": [{"kind": "sine", "frequency": 7.0}]}))

        store = StateStore.load(state_file, PlotSettings(sample_rate=200.0, n_samples=64))

        assert store.settings() == PlotSettings(sample_rate=200.0, n_samples=64)
        assert store.list_components()[0].frequency == 7.0

    def test_no_state_file(self):
        store = StateStore(AppState())
        store.add_default_component(ComponentKind.SINE)
        store.save()

        assert store.state_file is None
