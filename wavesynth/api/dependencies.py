"""
API Dependencies
================

FastAPI dependencies resolving per-application objects stored on ``app.state``.
"""

from fastapi import Request

from wavesynth.config.settings import Settings
from wavesynth.core.state.store import StateStore
from wavesynth.models.schemas import VersionInfo


def get_store(request: Request) -> StateStore:
    """Dependency to get the application state store."""
    return request.app.state.store


def get_current_settings(request: Request) -> Settings:
    """Dependency to get the settings the application was created with."""
    return request.app.state.settings


def get_version_info(request: Request) -> VersionInfo:
    return request.app.state.version_info
