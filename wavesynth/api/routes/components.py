"""
Component Routes
================

FastAPI routes for editing the sampling settings and waveform components.
"""

from typing import List

from fastapi import APIRouter, Depends, Response

from wavesynth.api.dependencies import get_store
from wavesynth.config.logging import get_logger
from wavesynth.core.state.store import StateStore
from wavesynth.models.schemas import (
    Component,
    ComponentCreate,
    ComponentUpdate,
    PlotSettings,
    PlotSettingsUpdate,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Components"])


@router.get("/settings", response_model=PlotSettings)
def get_plot_settings(store: StateStore = Depends(get_store)) -> PlotSettings:
    """Current sample rate and sample count."""
    return store.settings()


@router.put("/settings", response_model=PlotSettings)
def update_plot_settings(
    update: PlotSettingsUpdate, store: StateStore = Depends(get_store)
) -> PlotSettings:
    """Change the sample rate and/or sample count."""
    return store.update_settings(update)


@router.get("/components", response_model=List[Component])
def list_components(store: StateStore = Depends(get_store)) -> List[Component]:
    return store.list_components()


@router.post("/components", response_model=Component, status_code=201)
def add_component(
    request: ComponentCreate, store: StateStore = Depends(get_store)
) -> Component:
    """
    Add a component.

    Only ``kind`` is required; the rest default to 100 Hz, amplitude 1, phase 0
    and a name matching the kind.
    """
    return store.add_component(request)


@router.get("/components/{component_id}", response_model=Component)
def get_component(component_id: str, store: StateStore = Depends(get_store)) -> Component:
    return store.get_component(component_id)


@router.patch("/components/{component_id}", response_model=Component)
def update_component(
    component_id: str, update: ComponentUpdate, store: StateStore = Depends(get_store)
) -> Component:
    return store.update_component(component_id, update)


@router.delete("/components/{component_id}", status_code=204)
def remove_component(component_id: str, store: StateStore = Depends(get_store)) -> Response:
    store.remove_component(component_id)
    return Response(status_code=204)
