"""
Status Routes
=============

FastAPI routes for plot computation statistics and version information.
"""

import time
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from wavesynth.api.dependencies import get_store, get_version_info
from wavesynth.core.state.store import StateStore
from wavesynth.models.schemas import VersionInfo

router = APIRouter(prefix="/api/v1", tags=["Status"])


@router.get("/status")
async def system_status(request: Request, store: StateStore = Depends(get_store)) -> Dict[str, Any]:
    """Plot computation history, component count and uptime."""
    return {
        "compute": store.compute_stats().model_dump(),
        "components": len(store.list_components()),
        "uptime": round(time.monotonic() - request.app.state.started_at, 3),
    }


@router.get("/version", response_model=VersionInfo)
async def version(info: VersionInfo = Depends(get_version_info)) -> VersionInfo:
    """Version and commit hash of the served build."""
    return info
