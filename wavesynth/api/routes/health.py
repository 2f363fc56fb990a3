"""
Health Routes
=============

FastAPI routes for health check endpoints.
"""

from fastapi import APIRouter, Depends

from wavesynth import __version__
from wavesynth.config.settings import Settings
from wavesynth.core.state.store import StateStore
from wavesynth.api.dependencies import get_current_settings, get_store
from wavesynth.models.schemas import HealthStatus

router = APIRouter(prefix="/api/v1", tags=["Health"])


def check_health(settings: Settings, store: StateStore) -> HealthStatus:
    """
    Build the health document.

    Missing static assets only degrade the service; the API keeps working.
    """
    static_assets = (settings.server_root / "index.html").is_file()
    return HealthStatus(
        status="healthy" if static_assets else "degraded",
        version=__version__,
        static_assets=static_assets,
        components=len(store.list_components()),
    )


@router.get("/health", response_model=HealthStatus)
async def health_check(
    settings: Settings = Depends(get_current_settings),
    store: StateStore = Depends(get_store),
) -> HealthStatus:
    """Basic health check endpoint."""
    return check_health(settings, store)
