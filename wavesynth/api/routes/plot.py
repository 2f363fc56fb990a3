"""
Plot Routes
===========

FastAPI routes returning waveform and spectrum data, as JSON or PNG.
"""

from enum import Enum
from typing import Optional

from fastapi import APIRouter, Depends, Response

from wavesynth.api.dependencies import get_current_settings, get_store
from wavesynth.config.logging import get_logger
from wavesynth.config.settings import Settings
from wavesynth.core.rendering.plot_image import render_plot_png
from wavesynth.core.signal.waveform import compute_plot_data
from wavesynth.core.state.store import StateStore
from wavesynth.models.schemas import AppState, PlotData

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Plot"])


class PlotKind(str, Enum):
    WAVEFORM = "waveform"
    SPECTRUM = "spectrum"


@router.get("/plot", response_model=PlotData)
def get_plot(store: StateStore = Depends(get_store)) -> PlotData:
    """Plot data for the current state, recomputed only after changes."""
    return store.plot_data()


@router.post("/plot", response_model=PlotData)
def compute_plot(state: AppState) -> PlotData:
    """Plot data for a posted state; the stored state is left untouched."""
    logger.info(
        "Stateless plot requested",
        components=len(state.components),
        sample_rate=state.sample_rate,
        n_samples=state.n_samples,
    )
    return compute_plot_data(state.components, state.sample_rate, state.n_samples)


@router.get(
    "/plot/{kind}.png",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}},
)
def get_plot_image(
    kind: PlotKind,
    width: Optional[int] = None,
    height: Optional[int] = None,
    store: StateStore = Depends(get_store),
    settings: Settings = Depends(get_current_settings),
) -> Response:
    """Render the waveform or the spectrum (with component markers) as PNG."""
    data = store.plot_data()
    width = width if width is not None else settings.plot_width
    height = height if height is not None else settings.plot_height

    if kind == PlotKind.WAVEFORM:
        png = render_plot_png(data.waveform, width, height)
    else:
        png = render_plot_png(
            data.spectrum, width, height, markers=data.markers, x_range=(0.0, data.fmax)
        )

    return Response(content=png, media_type="image/png", headers={"Cache-Control": "no-store"})
