"""
Pydantic Models and Schemas
===========================

Core data models for signal components, application state, API requests/responses
and build artefacts. All models include validation and type hints.
"""

from typing import Optional, List, Dict, Any, Literal, Tuple
from datetime import datetime, timezone
from enum import Enum
import uuid

from pydantic import BaseModel, ConfigDict, Field, model_validator


# Highest frequency shown on the spectrum is sample_rate / FMAX_SCALE
FMAX_SCALE = 2.56

MIN_FREQUENCY = 1e-2
MAX_SAMPLES = 65535


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Enums
class ComponentKind(str, Enum):
    """Periodic waveform shapes."""
    SINE = "sine"
    SQUARE = "square"
    SAWTOOTH = "sawtooth"


class BuildMode(str, Enum):
    """Asset build modes."""
    RELEASE = "release"
    DEBUG = "debug"


class DocumentFormat(str, Enum):
    """Supported state document formats."""
    JSON = "json"
    YAML = "yaml"


# Base Models
class BaseIdentified(BaseModel):
    """Base model with ID field."""
    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])


# Signal Models
class Component(BaseIdentified):
    """One periodic component of the composed waveform."""
    model_config = ConfigDict(allow_inf_nan=False)

    kind: ComponentKind = Field(..., description="Waveform shape")
    name: str = Field("", max_length=200, description="Label used for the spectrum marker")
    frequency: float = Field(100.0, ge=MIN_FREQUENCY, description="Frequency in Hz")
    amplitude: float = Field(1.0, ge=0.0, description="Peak amplitude")
    phase: float = Field(0.0, ge=0.0, le=1.0, description="Phase as a fraction of one period")

    @model_validator(mode="after")
    def default_name(self) -> "Component":
        """Name unnamed components after their shape."""
        if not self.name:
            self.name = self.kind.value.title()
        return self

    def is_above_nyquist(self, sample_rate: float) -> bool:
        return self.frequency * FMAX_SCALE > sample_rate


class ComponentCreate(BaseModel):
    """Request model for adding a component."""
    model_config = ConfigDict(allow_inf_nan=False)

    kind: ComponentKind = Field(..., description="Waveform shape")
    name: Optional[str] = Field(None, max_length=200, description="Component label")
    frequency: float = Field(100.0, ge=MIN_FREQUENCY, description="Frequency in Hz")
    amplitude: float = Field(1.0, ge=0.0, description="Peak amplitude")
    phase: float = Field(0.0, ge=0.0, le=1.0, description="Phase as a fraction of one period")


class ComponentUpdate(BaseModel):
    """Partial update of a component; omitted fields are kept."""
    model_config = ConfigDict(allow_inf_nan=False)

    name: Optional[str] = Field(None, max_length=200)
    frequency: Optional[float] = Field(None, ge=MIN_FREQUENCY)
    amplitude: Optional[float] = Field(None, ge=0.0)
    phase: Optional[float] = Field(None, ge=0.0, le=1.0)


class PlotSettings(BaseModel):
    """Sampling settings shared by all components."""
    model_config = ConfigDict(allow_inf_nan=False)

    sample_rate: float = Field(3000.0, gt=0, description="Sample rate in Hz")
    n_samples: int = Field(1000, ge=0, le=MAX_SAMPLES, description="Number of samples")


class PlotSettingsUpdate(BaseModel):
    """Partial update of the sampling settings."""
    model_config = ConfigDict(allow_inf_nan=False)

    sample_rate: Optional[float] = Field(None, gt=0)
    n_samples: Optional[int] = Field(None, ge=0, le=MAX_SAMPLES)


class AppState(PlotSettings):
    """Complete application state, persisted between runs."""
    components: List[Component] = Field(default_factory=list, description="Waveform components")


# Plot Models
class SpectrumMarker(BaseModel):
    """Vertical marker drawn at a component frequency on the spectrum."""
    name: str
    frequency: float
    above_nyquist: bool = False


class PlotData(BaseModel):
    """Waveform and spectrum points ready for plotting."""
    waveform: List[Tuple[float, float]] = Field(default_factory=list, description="(t, x) pairs")
    spectrum: List[Tuple[float, float]] = Field(
        default_factory=list, description="(frequency, magnitude) pairs"
    )
    markers: List[SpectrumMarker] = Field(default_factory=list)
    sample_rate: float
    n_samples: int
    fmax: float = Field(..., description="Highest frequency kept on the spectrum")
    resolution: Optional[float] = Field(None, description="Spectrum bin width in Hz")
    peak_frequency: Optional[float] = Field(None, description="Strongest non-DC spectrum bin")


class ComputeStats(BaseModel):
    """Plot computation timing history."""
    total: int = Field(0, ge=0, description="Plot computations served since start")
    mean_ms: float = Field(0.0, ge=0.0, description="Mean computation time in milliseconds")
    history: List[Tuple[int, float]] = Field(default_factory=list, description="(index, ms) pairs")


class VersionInfo(BaseModel):
    """Build version information."""
    version: str
    git_hash: str
    commit_url: Optional[str] = None
    build_mode: Optional[BuildMode] = None


# State Document Models
class ParseResult(BaseModel):
    """Result of state document parsing."""
    success: bool = Field(..., description="Whether parsing succeeded")
    state: Optional[AppState] = Field(None, description="Parsed state")
    format: Optional[DocumentFormat] = Field(None, description="Detected document format")
    errors: List[str] = Field(default_factory=list, description="Parsing errors")
    warnings: List[str] = Field(default_factory=list, description="Parsing warnings")
    processing_time: Optional[float] = Field(None, description="Parsing time in seconds")


class StateDocumentRequest(BaseModel):
    """Request model carrying a JSON or YAML state document."""
    content: str = Field(..., min_length=1, description="Document content")
    format: Optional[DocumentFormat] = Field(None, description="Format override")


class StateImportResponse(BaseModel):
    """Response model for a successful state import."""
    state: AppState
    warnings: List[str] = Field(default_factory=list, description="Parsing warnings")


class StateValidationResponse(BaseModel):
    """Response model for state document validation."""
    valid: bool = Field(..., description="Whether the document is valid")
    errors: List[str] = Field(default_factory=list, description="Validation errors")
    warnings: List[str] = Field(default_factory=list, description="Validation warnings")
    suggestions: List[str] = Field(default_factory=list, description="Improvement suggestions")


# Build Models
class AssetInfo(BaseModel):
    """One file written by the asset builder."""
    size: int = Field(..., ge=0)
    sha256: str


class BuildManifest(BaseModel):
    """Description of a finished asset build, written as manifest.json."""
    mode: BuildMode
    version: str
    git_hash: str
    built_at: datetime = Field(default_factory=_utcnow)
    entrypoints: Dict[str, str] = Field(default_factory=dict, description="Logical name to file")
    files: Dict[str, AssetInfo] = Field(default_factory=dict)


# Health Check Models
class HealthStatus(BaseModel):
    """Health check status."""
    status: Literal["healthy", "unhealthy", "degraded"] = Field(..., description="Overall status")
    timestamp: datetime = Field(default_factory=_utcnow, description="Check timestamp")
    version: str = Field(..., description="Application version")
    static_assets: bool = Field(..., description="Server root holds an index.html")
    components: int = Field(0, ge=0, description="Number of waveform components")


# Error Models
class ErrorResponse(BaseModel):
    """Standard error response model."""
    error: str = Field(..., description="Error message")
    error_code: Optional[str] = Field(None, description="Error code")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
    timestamp: datetime = Field(default_factory=_utcnow, description="Error timestamp")
    request_id: Optional[str] = Field(None, description="Request identifier for tracking")
