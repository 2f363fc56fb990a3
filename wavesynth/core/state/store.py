"""
State Store
===========

Thread-safe holder of the application state. Every mutation invalidates the
cached plot data and, when a state file is configured, persists the state as
JSON so it survives restarts.
"""

import threading
import time
from pathlib import Path
from typing import Any, List, Optional

from wavesynth.config.logging import get_logger
from wavesynth.core.signal.cache import Cache
from wavesynth.core.signal.history import ComputeHistory
from wavesynth.core.signal.waveform import compute_plot_data
from wavesynth.models.schemas import (
    AppState,
    Component,
    ComponentCreate,
    ComponentKind,
    ComponentUpdate,
    ComputeStats,
    PlotData,
    PlotSettings,
    PlotSettingsUpdate,
)

logger = get_logger(__name__)


class StateError(Exception):
    """Exception raised for invalid state operations."""

    pass


class ComponentNotFoundError(StateError):
    """Exception raised when a component id is unknown."""

    def __init__(self, component_id: str) -> None:
        super().__init__(f"Component not found: {component_id}")
        self.component_id = component_id


class StateStore:
    """Application state with cached plot data and optional JSON persistence."""

    def __init__(
        self,
        state: Optional[AppState] = None,
        state_file: Optional[Path] = None,
    ) -> None:
        self._state = state if state is not None else AppState()
        self.state_file = state_file
        self._lock = threading.RLock()
        self._plot_cache: Cache[PlotData] = Cache()
        self.history = ComputeHistory()
        self.logger: Any = logger.bind(component="state_store")

    @classmethod
    def load(cls, state_file: Path, defaults: Optional[PlotSettings] = None) -> "StateStore":
        """
        Load persisted state, falling back to defaults.

        Args:
            state_file: JSON file written by save()
            defaults: Sampling settings used when nothing usable is persisted

        Returns:
            StateStore bound to ``state_file``
        """
        defaults = defaults or PlotSettings()
        fallback = AppState(sample_rate=defaults.sample_rate, n_samples=defaults.n_samples)

        if not state_file.exists():
            logger.info("No persisted state, starting fresh", state_file=str(state_file))
            return cls(fallback, state_file)

        try:
            raw = state_file.read_text(encoding="utf-8")
            # Fields missing from older files take the configured defaults
            state = AppState.model_validate_json(raw)
            if "sample_rate" not in state.model_fields_set:
                state.sample_rate = defaults.sample_rate
            if "n_samples" not in state.model_fields_set:
                state.n_samples = defaults.n_samples
        # ValidationError and UnicodeDecodeError are both ValueErrors
        except (OSError, ValueError) as e:
            logger.warning(
                "Persisted state unreadable, using defaults",
                state_file=str(state_file),
                error=str(e),
            )
            return cls(fallback, state_file)

        logger.info(
            "Persisted state loaded",
            state_file=str(state_file),
            components=len(state.components),
        )
        return cls(state, state_file)

    def save(self) -> None:
        """Write the state to the state file, if one is configured."""
        if self.state_file is None:
            return
        with self._lock:
            payload = self._state.model_dump_json(indent=2)
        self.state_file.parent.mkdir(parents=True, exist_ok=True)
        tmp_file = self.state_file.with_suffix(".tmp")
        tmp_file.write_text(payload, encoding="utf-8")
        tmp_file.replace(self.state_file)
        self.logger.debug("State saved", state_file=str(self.state_file))

    def _changed(self) -> None:
        self._plot_cache.invalidate()
        try:
            self.save()
        except OSError as e:
            self.logger.error("Failed to persist state", error=str(e))

    # Queries

    def snapshot(self) -> AppState:
        with self._lock:
            return self._state.model_copy(deep=True)

    def settings(self) -> PlotSettings:
        with self._lock:
            return PlotSettings(
                sample_rate=self._state.sample_rate, n_samples=self._state.n_samples
            )

    def list_components(self) -> List[Component]:
        with self._lock:
            return [c.model_copy() for c in self._state.components]

    def get_component(self, component_id: str) -> Component:
        with self._lock:
            return self._find(component_id).model_copy()

    def _find(self, component_id: str) -> Component:
        for component in self._state.components:
            if component.id == component_id:
                return component
        raise ComponentNotFoundError(component_id)

    # Mutations

    def add_component(self, request: ComponentCreate) -> Component:
        """Append a new component with the requested shape and parameters."""
        component = Component(
            kind=request.kind,
            name=request.name or "",
            frequency=request.frequency,
            amplitude=request.amplitude,
            phase=request.phase,
        )
        with self._lock:
            self._state.components.append(component)
            self._changed()
        self.logger.info("Component added", component_id=component.id, kind=component.kind.value)
        return component.model_copy()

    def add_default_component(self, kind: ComponentKind) -> Component:
        return self.add_component(ComponentCreate(kind=kind))

    def update_component(self, component_id: str, update: ComponentUpdate) -> Component:
        """Apply the fields set in ``update`` to one component."""
        changes = update.model_dump(exclude_none=True)
        with self._lock:
            current = self._find(component_id)
            # Re-validate so an empty name falls back to the shape name
            updated = Component.model_validate({**current.model_dump(), **changes})
            index = self._state.components.index(current)
            self._state.components[index] = updated
            if changes:
                self._changed()
        self.logger.info("Component updated", component_id=component_id, fields=sorted(changes))
        return updated.model_copy()

    def remove_component(self, component_id: str) -> Component:
        with self._lock:
            component = self._find(component_id)
            self._state.components.remove(component)
            self._changed()
        self.logger.info("Component removed", component_id=component_id)
        return component

    def update_settings(self, update: PlotSettingsUpdate) -> PlotSettings:
        changes = update.model_dump(exclude_none=True)
        with self._lock:
            for field, value in changes.items():
                setattr(self._state, field, value)
            if changes:
                self._changed()
        self.logger.info("Settings updated", **changes)
        return self.settings()

    def replace(self, state: AppState) -> AppState:
        """Swap in a whole new state, e.g. from an imported document."""
        with self._lock:
            self._state = state.model_copy(deep=True)
            self._changed()
        self.logger.info("State replaced", components=len(state.components))
        return self.snapshot()

    # Plotting

    def plot_data(self) -> PlotData:
        """Return plot data, recomputing only after a mutation."""
        started = time.perf_counter()
        with self._lock:
            state = self._state
            data = self._plot_cache.get_or_init(
                lambda: compute_plot_data(state.components, state.sample_rate, state.n_samples)
            )
            self.history.add(time.monotonic(), time.perf_counter() - started)
        return data

    def compute_stats(self) -> ComputeStats:
        with self._lock:
            return ComputeStats(
                total=self.history.total(),
                mean_ms=self.history.mean_ms(),
                history=self.history.points(),
            )
