"""
FastAPI Application
==================

Application factory combining the REST API with the static file server.
The built front-end is served from the server root at ``/``; the API lives
under ``/api/v1``.
"""

from contextlib import asynccontextmanager
import time
from typing import AsyncGenerator, Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from wavesynth import __version__
from wavesynth.config.settings import get_settings, Settings
from wavesynth.config.logging import get_logger
from wavesynth.api.middleware import install_middleware
from wavesynth.api.routes import components, health, plot, state, status
from wavesynth.api.static import FallbackStaticFiles
from wavesynth.core.build.builder import read_manifest
from wavesynth.core.presets.parser import StateDocumentError, get_validation_suggestions
from wavesynth.core.rendering.plot_image import PlotRenderError
from wavesynth.core.state.store import ComponentNotFoundError, StateStore
from wavesynth.models.schemas import AppState, ErrorResponse, PlotSettings, VersionInfo

logger = get_logger(__name__)


def _error_response(
    request: Request,
    status_code: int,
    error: str,
    error_code: str,
    details: Optional[dict[str, Any]] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    error_response = ErrorResponse(
        error=error,
        error_code=error_code,
        details=details,
        request_id=getattr(request.state, "request_id", None),
    )
    return JSONResponse(
        status_code=status_code,
        content=error_response.model_dump(mode="json"),
        headers=headers,
    )


def create_store(settings: Settings) -> StateStore:
    """State store for the application, loaded from disk when persistence is on."""
    defaults = PlotSettings(
        sample_rate=settings.default_sample_rate, n_samples=settings.default_n_samples
    )
    if settings.persist_state:
        return StateStore.load(settings.state_file, defaults)
    return StateStore(AppState(sample_rate=defaults.sample_rate, n_samples=defaults.n_samples))


def resolve_version_info(settings: Settings) -> VersionInfo:
    """Version of the served build: manifest first, then the configured hash."""
    manifest = read_manifest(settings.server_root)
    git_hash = manifest.git_hash if manifest else (settings.git_hash or "unknown")
    commit_url = None
    if settings.repository_url and git_hash != "unknown":
        commit_url = f"{settings.repository_url.rstrip('/')}/commit/{git_hash}"
    return VersionInfo(
        version=__version__,
        git_hash=git_hash,
        commit_url=commit_url,
        build_mode=manifest.mode if manifest else None,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain errors to structured error responses."""

    @app.exception_handler(StarletteHTTPException)
    async def custom_http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Custom HTTP exception handler with structured error response."""
        logger.warning(
            "HTTP exception",
            status_code=exc.status_code,
            detail=exc.detail,
            path=request.url.path,
            request_id=getattr(request.state, "request_id", None),
        )
        return _error_response(
            request,
            exc.status_code,
            str(exc.detail),
            str(exc.status_code),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
            for err in exc.errors()
        ]
        return _error_response(
            request, 422, "Request validation failed", "VALIDATION_ERROR", {"errors": errors}
        )

    @app.exception_handler(ComponentNotFoundError)
    async def component_not_found_handler(
        request: Request, exc: ComponentNotFoundError
    ) -> JSONResponse:
        return _error_response(
            request,
            404,
            str(exc),
            "COMPONENT_NOT_FOUND",
            {"component_id": exc.component_id},
        )

    @app.exception_handler(StateDocumentError)
    async def state_document_exception_handler(
        request: Request, exc: StateDocumentError
    ) -> JSONResponse:
        logger.error(
            "State document rejected",
            errors=exc.errors[:5],
            request_id=getattr(request.state, "request_id", None),
        )
        return _error_response(
            request,
            400,
            str(exc),
            "INVALID_STATE_DOCUMENT",
            {
                "errors": exc.errors,
                "suggestions": get_validation_suggestions("", exc.errors),
            },
        )

    @app.exception_handler(PlotRenderError)
    async def plot_render_exception_handler(
        request: Request, exc: PlotRenderError
    ) -> JSONResponse:
        logger.error("Plot rendering error", error=str(exc))
        return _error_response(request, 400, str(exc), "PLOT_RENDER_ERROR")

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """General exception handler for unexpected errors."""
        settings: Settings = request.app.state.settings
        logger.error(
            "Unhandled exception",
            exception=str(exc),
            request_id=getattr(request.state, "request_id", None),
            exc_info=True,
        )
        return _error_response(
            request,
            500,
            "Internal server error",
            "INTERNAL_ERROR",
            {"exception": str(exc)} if settings.debug else None,
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Application factory.

    Args:
        settings: Settings to use; the global settings when omitted

    Returns:
        FastAPI application serving the API and the static front-end
    """
    settings = settings or get_settings()
    store = create_store(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan manager."""
        logger.info(
            "Starting server",
            port=settings.port,
            server_root=str(settings.server_root),
            https_promote=settings.https_promote,
            enable_logging=settings.enable_logging,
        )
        try:
            yield
        finally:
            logger.info("Shutting down server")
            try:
                store.save()
            except OSError as e:
                logger.error("Error saving state", error=str(e))

    app = FastAPI(
        title="wavesynth",
        description="Periodic waveform composer with FFT spectrum view",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.enable_docs else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.enable_docs else None,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.version_info = resolve_version_info(settings)
    app.state.started_at = time.monotonic()

    app.add_middleware(GZipMiddleware, minimum_size=1000)
    install_middleware(app, settings)
    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(status.router)
    app.include_router(components.router)
    app.include_router(plot.router)
    app.include_router(state.router)

    if settings.enable_health:

        @app.get("/health", tags=["Health"])
        async def root_health() -> dict[str, Any]:
            """Liveness probe answered even on plain HTTP."""
            result = health.check_health(settings, store)
            return result.model_dump(mode="json")

    # Static files last so API routes take precedence
    if settings.server_root.is_dir():
        app.mount(
            "/",
            FallbackStaticFiles(directory=settings.server_root, fallback=settings.fallback),
            name="static",
        )
    else:
        logger.warning(
            "Server root missing, serving the API only", server_root=str(settings.server_root)
        )

    return app


def run_server(settings: Optional[Settings] = None) -> None:
    """Run the server with uvicorn; access logging is handled by our middleware."""
    settings = settings or get_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        access_log=False,
        proxy_headers=False,
    )
