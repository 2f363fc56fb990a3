"""
State Routes
============

FastAPI routes for validating, importing and exporting state documents.
"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool

from wavesynth.api.dependencies import get_store
from wavesynth.config.logging import get_logger
from wavesynth.core.presets.parser import (
    StateDocumentError,
    export_state_document,
    get_validation_suggestions,
    parse_state_document,
    validate_state_syntax,
)
from wavesynth.core.state.store import StateStore
from wavesynth.models.schemas import (
    DocumentFormat,
    StateDocumentRequest,
    StateImportResponse,
    StateValidationResponse,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/state", tags=["State"])

MEDIA_TYPES = {
    DocumentFormat.JSON: "application/json",
    DocumentFormat.YAML: "application/yaml",
}


@router.post("/validate", response_model=StateValidationResponse)
async def validate_state(request: StateDocumentRequest) -> StateValidationResponse:
    """Validate a state document without applying it."""
    logger.info("State validation requested", content_length=len(request.content))

    if not await validate_state_syntax(request.content, request.format):
        parse_result = await parse_state_document(request.content, request.format)
        return StateValidationResponse(
            valid=False,
            errors=parse_result.errors,
            warnings=[],
            suggestions=get_validation_suggestions(request.content, parse_result.errors),
        )

    parse_result = await parse_state_document(request.content, request.format)
    response = StateValidationResponse(
        valid=parse_result.success,
        errors=parse_result.errors,
        warnings=parse_result.warnings,
        suggestions=get_validation_suggestions(request.content, parse_result.errors),
    )
    logger.info("State validation completed", valid=response.valid, errors=len(response.errors))
    return response


@router.post("/import", response_model=StateImportResponse)
async def import_state(
    request: StateDocumentRequest, store: StateStore = Depends(get_store)
) -> StateImportResponse:
    """Replace the whole state with the one described by the document."""
    parse_result = await parse_state_document(request.content, request.format)

    if not parse_result.success or parse_result.state is None:
        raise StateDocumentError("State document is invalid", errors=parse_result.errors)

    state = await run_in_threadpool(store.replace, parse_result.state)
    return StateImportResponse(state=state, warnings=parse_result.warnings)


@router.get("/export", response_class=PlainTextResponse)
async def export_state(
    format: DocumentFormat = Query(DocumentFormat.JSON, description="Document format"),
    store: StateStore = Depends(get_store),
) -> PlainTextResponse:
    """Download the current state as a JSON or YAML document."""
    content = export_state_document(store.snapshot(), format)
    extension = "yaml" if format == DocumentFormat.YAML else "json"
    return PlainTextResponse(
        content,
        media_type=MEDIA_TYPES[format],
        headers={"Content-Disposition": f'attachment; filename="wavesynth.{extension}"'},
    )
