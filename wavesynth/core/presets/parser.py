"""
State Document Parser
=====================

Parses JSON and YAML documents describing a complete application state
(sampling settings plus waveform components). Documents are validated with
Cerberus schemas before conversion to ``AppState``.
"""

from typing import Dict, List, Any, Optional
import json
import yaml  # type: ignore[import-untyped]
import time
from abc import ABC, abstractmethod
from cerberus import Validator  # type: ignore[import-untyped]
from pydantic import ValidationError

from wavesynth.config.logging import get_logger
from wavesynth.models.schemas import (
    AppState,
    Component,
    ComponentKind,
    DocumentFormat,
    ParseResult,
    FMAX_SCALE,
    MAX_SAMPLES,
    MIN_FREQUENCY,
)

logger = get_logger(__name__)

DOCUMENT_VERSION = "1"


class StateDocumentError(Exception):
    """Exception raised when a state document cannot be used."""

    def __init__(self, message: str, errors: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class StateDocumentValidator:
    """State document validation using Cerberus schemas."""

    def __init__(self) -> None:
        self.logger: Any = logger.bind(component="validator")
        self._setup_schemas()

    def _setup_schemas(self) -> None:
        """Setup validation schemas."""
        self.component_schema = {
            "id": {"type": "string", "nullable": True},
            "kind": {
                "type": "string",
                "required": True,
                "allowed": [k.value for k in ComponentKind],
            },
            "name": {"type": "string", "nullable": True, "maxlength": 200},
            "frequency": {"type": "number", "min": MIN_FREQUENCY},
            "amplitude": {"type": "number", "min": 0.0},
            "phase": {"type": "number", "min": 0.0, "max": 1.0},
        }

        self.document_schema: Dict[str, Any] = {
            "version": {"type": ["string", "integer"], "nullable": True},
            "sample_rate": {"type": "number"},
            "n_samples": {"type": "integer", "min": 0, "max": MAX_SAMPLES},
            "components": {
                "type": "list",
                "schema": {"type": "dict", "schema": self.component_schema},
            },
        }

    def validate_document(self, data: Dict[str, Any]) -> tuple[bool, List[str], List[str]]:
        """
        Validate state document structure.

        Args:
            data: Document data to validate

        Returns:
            Tuple of (is_valid, errors, warnings)
        """
        validator = Validator(self.document_schema)  # type: ignore[misc]
        validator.allow_unknown = True

        is_valid = validator.validate(data)  # type: ignore[misc]
        errors: List[str] = []
        warnings: List[str] = []

        if not is_valid:
            errors.extend(self._format_validation_errors(validator.errors))  # type: ignore[attr-defined]

        custom_errors, custom_warnings = self._perform_custom_validations(data)
        errors.extend(custom_errors)
        warnings.extend(custom_warnings)

        return bool(is_valid) and not custom_errors, errors, warnings

    def _format_validation_errors(self, errors: Any, path: str = "") -> List[str]:
        """Format Cerberus validation errors into readable messages."""
        formatted_errors: List[str] = []

        for field, error_info in errors.items():
            current_path = f"{path}.{field}" if path else str(field)
            if isinstance(field, int):
                current_path = f"{path}[{field}]"

            if isinstance(error_info, list):
                for error in error_info:
                    if isinstance(error, dict):
                        formatted_errors.extend(self._format_validation_errors(error, current_path))
                    else:
                        formatted_errors.append(f"{current_path}: {error}")
            elif isinstance(error_info, dict):
                formatted_errors.extend(self._format_validation_errors(error_info, current_path))

        return formatted_errors

    def _perform_custom_validations(self, data: Dict[str, Any]) -> tuple[List[str], List[str]]:
        """Checks Cerberus schemas cannot express."""
        errors: List[str] = []
        warnings: List[str] = []

        sample_rate = data.get("sample_rate")
        if isinstance(sample_rate, (int, float)) and not isinstance(sample_rate, bool):
            if sample_rate <= 0:
                errors.append("sample_rate: must be greater than 0")
                sample_rate = None
        else:
            sample_rate = None

        components = data.get("components") or []
        if not isinstance(components, list):
            return errors, warnings

        seen_ids: set[str] = set()
        for i, component in enumerate(components):
            if not isinstance(component, dict):
                continue
            component_id = component.get("id")
            # Non-string ids are already reported by the schema
            if isinstance(component_id, str) and component_id:
                if component_id in seen_ids:
                    errors.append(f"components[{i}].id: duplicate id '{component_id}'")
                seen_ids.add(component_id)

            frequency = component.get("frequency", 100.0)
            if (
                sample_rate is not None
                and isinstance(frequency, (int, float))
                and frequency * FMAX_SCALE > sample_rate
            ):
                warnings.append(
                    f"components[{i}]: frequency {frequency} Hz is above the Nyquist limit "
                    f"for sample rate {sample_rate} Hz"
                )

            if component.get("amplitude") == 0:
                warnings.append(f"components[{i}]: amplitude is 0, component is silent")

        if not components:
            warnings.append("Document has no components, the waveform will be flat")

        return errors, warnings


class BaseStateParser(ABC):
    """Abstract base class for state document parsers."""

    format: DocumentFormat

    def __init__(self) -> None:
        self.logger: Any = logger.bind(parser=self.format.value)
        self.validator = StateDocumentValidator()

    @abstractmethod
    def load(self, content: str) -> Any:
        """Decode raw content into Python data."""
        pass

    @abstractmethod
    async def validate_syntax(self, content: str) -> bool:
        """Validate document syntax without full parsing."""
        pass

    async def parse(self, content: str) -> ParseResult:
        """
        Parse document content into an AppState.

        Args:
            content: Raw document content as string

        Returns:
            ParseResult containing the parsed state or errors
        """
        start_time = time.time()

        def failed(errors: List[str], warnings: Optional[List[str]] = None) -> ParseResult:
            return ParseResult(
                success=False,
                state=None,
                format=self.format,
                errors=errors,
                warnings=warnings or [],
                processing_time=time.time() - start_time,
            )

        try:
            self.logger.info("Parsing state document")
            raw_data = self.load(content)
        except StateDocumentError as e:
            self.logger.error("Document parsing failed", error=str(e))
            return failed([str(e)])

        if raw_data is None:
            return failed(["Empty document"])

        if not isinstance(raw_data, dict):
            return failed([f"Document must be a mapping/object, got {type(raw_data).__name__}"])

        is_valid, errors, warnings = self.validator.validate_document(raw_data)
        if not is_valid:
            return failed(errors, warnings)

        try:
            state = self._convert_to_state(raw_data)
        except ValidationError as e:
            errors = [
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            ]
            return failed(errors, warnings)

        return ParseResult(
            success=True,
            state=state,
            format=self.format,
            errors=[],
            warnings=warnings,
            processing_time=time.time() - start_time,
        )

    def _convert_to_state(self, raw_data: Dict[str, Any]) -> AppState:
        """Convert validated document data to AppState."""
        components: List[Component] = []
        for component_data in raw_data.get("components") or []:
            fields = {k: v for k, v in component_data.items() if v is not None}
            components.append(Component.model_validate(fields))

        state_fields: Dict[str, Any] = {"components": components}
        for key in ("sample_rate", "n_samples"):
            if key in raw_data:
                state_fields[key] = raw_data[key]
        return AppState.model_validate(state_fields)


class JSONStateParser(BaseStateParser):
    """JSON state document parser."""

    format = DocumentFormat.JSON

    def load(self, content: str) -> Any:
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise StateDocumentError(
                f"Invalid JSON syntax at line {e.lineno}, column {e.colno}: {e.msg}"
            )

    async def validate_syntax(self, content: str) -> bool:
        try:
            json.loads(content)
            return True
        except json.JSONDecodeError:
            return False


class YAMLStateParser(BaseStateParser):
    """YAML state document parser."""

    format = DocumentFormat.YAML

    def load(self, content: str) -> Any:
        try:
            return yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise StateDocumentError(f"Invalid YAML syntax: {e}")

    async def validate_syntax(self, content: str) -> bool:
        try:
            yaml.safe_load(content)
            return True
        except yaml.YAMLError:
            return False


class StateParserFactory:
    """Factory for creating state document parsers based on format."""

    _parsers = {
        DocumentFormat.JSON: JSONStateParser,
        DocumentFormat.YAML: YAMLStateParser,
    }

    @classmethod
    def create_parser(cls, document_format: DocumentFormat) -> BaseStateParser:
        if document_format not in cls._parsers:
            raise ValueError(f"Unsupported document format: {document_format}")
        return cls._parsers[document_format]()

    @classmethod
    def detect_format(cls, content: str) -> DocumentFormat:
        """Guess the document format from its content."""
        content = content.strip()
        if content.startswith(("{", "[")):
            return DocumentFormat.JSON
        try:
            json.loads(content)
            return DocumentFormat.JSON
        except json.JSONDecodeError:
            return DocumentFormat.YAML


async def parse_state_document(
    content: str, document_format: Optional[DocumentFormat] = None
) -> ParseResult:
    """
    Parse a state document using the appropriate parser.

    Args:
        content: Raw document content
        document_format: Optional format override

    Returns:
        ParseResult containing the parsed state or errors
    """
    if not content or not content.strip():
        return ParseResult(
            success=False, state=None, errors=["Empty document provided"], processing_time=0.0
        )

    if document_format is None:
        document_format = StateParserFactory.detect_format(content)

    parser = StateParserFactory.create_parser(document_format)
    return await parser.parse(content)


async def validate_state_syntax(
    content: str, document_format: Optional[DocumentFormat] = None
) -> bool:
    """Check document syntax without validating its structure."""
    if not content or not content.strip():
        return False

    if document_format is None:
        document_format = StateParserFactory.detect_format(content)

    parser = StateParserFactory.create_parser(document_format)
    return await parser.validate_syntax(content)


def get_validation_suggestions(content: str, errors: List[str]) -> List[str]:
    """
    Generate suggestions for fixing the given errors.

    Args:
        content: Raw document content
        errors: Validation errors

    Returns:
        At most five suggestions, most relevant first
    """
    suggestions: List[str] = []

    for error in errors:
        if "JSON syntax" in error:
            suggestions.extend(
                [
                    "Check for missing commas between object properties",
                    "Ensure all strings are properly quoted",
                    "Verify bracket and brace matching",
                ]
            )
        elif "YAML syntax" in error:
            suggestions.extend(
                [
                    "Check indentation consistency (use spaces, not tabs)",
                    "Ensure proper key-value separator usage (:)",
                ]
            )
        elif ".kind" in error:
            kinds = ", ".join(k.value for k in ComponentKind)
            suggestions.append(f"Component kind must be one of: {kinds}")
        elif ".phase" in error:
            suggestions.append("Phase is a fraction of one period between 0 and 1")
        elif ".frequency" in error:
            suggestions.append(f"Frequency must be at least {MIN_FREQUENCY} Hz")
        elif "sample_rate" in error:
            suggestions.append("Sample rate must be a positive number of samples per second")
        elif "n_samples" in error:
            suggestions.append(f"Sample count must be an integer between 0 and {MAX_SAMPLES}")

    if "components" not in content:
        suggestions.append("State document should contain a 'components' list")

    unique_suggestions: List[str] = []
    for suggestion in suggestions:
        if suggestion not in unique_suggestions:
            unique_suggestions.append(suggestion)

    return unique_suggestions[:5]


def state_to_document(state: AppState) -> Dict[str, Any]:
    """Plain-data form of a state, as written by export_state_document()."""
    return {
        "version": DOCUMENT_VERSION,
        "sample_rate": state.sample_rate,
        "n_samples": state.n_samples,
        "components": [
            {
                "id": c.id,
                "kind": c.kind.value,
                "name": c.name,
                "frequency": c.frequency,
                "amplitude": c.amplitude,
                "phase": c.phase,
            }
            for c in state.components
        ],
    }


def export_state_document(state: AppState, document_format: DocumentFormat) -> str:
    """Serialize a state as a JSON or YAML document."""
    document = state_to_document(state)
    if document_format == DocumentFormat.JSON:
        return json.dumps(document, indent=2)
    if document_format == DocumentFormat.YAML:
        return yaml.safe_dump(document, sort_keys=False)
    raise ValueError(f"Unsupported document format: {document_format}")
