"""DocuGuard custom exception hierarchy."""

from pathlib import Path
from typing import Any


class DocuGuardError(Exception):
    """Base exception for all DocuGuard errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class ConfigurationError(DocuGuardError):
    """Raised when configuration is invalid or missing."""

    pass


class ValidationError(DocuGuardError):
    """Raised when input is malformed. Checked before any side effect."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)
        self.field = field


class InvalidResolutionError(ValidationError):
    """Raised when a resolution value is not one of the accepted values."""

    def __init__(
        self,
        message: str,
        resolution: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if resolution is not None:
            details["resolution"] = resolution
        super().__init__(message, field="resolution", details=details)
        self.resolution = resolution


class AnalysisInProgressError(ValidationError):
    """Raised when an analysis run is requested while another is in flight."""

    pass


class NotFoundError(DocuGuardError):
    """Raised when an operation references an unknown id."""

    def __init__(
        self,
        message: str,
        entity: str | None = None,
        entity_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if entity:
            details["entity"] = entity
        if entity_id:
            details["id"] = entity_id
        super().__init__(message, details)
        self.entity = entity
        self.entity_id = entity_id


class DocumentNotFoundError(NotFoundError):
    """Raised when a document id is unknown."""

    def __init__(self, message: str, document_id: str | None = None) -> None:
        super().__init__(message, entity="document", entity_id=document_id)
        self.document_id = document_id


class ConflictNotFoundError(NotFoundError):
    """Raised when a conflict id is unknown."""

    def __init__(self, message: str, conflict_id: str | None = None) -> None:
        super().__init__(message, entity="conflict", entity_id=conflict_id)
        self.conflict_id = conflict_id


class DuplicateIdError(DocuGuardError):
    """Raised when an inserted record's id collides with an existing one."""

    def __init__(
        self,
        message: str,
        entity_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if entity_id:
            details["id"] = entity_id
        super().__init__(message, details)
        self.entity_id = entity_id


class AnalyzerError(DocuGuardError):
    """Raised when the analyzer call fails or returns malformed data."""

    def __init__(
        self,
        message: str,
        document_ids: tuple[str, str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if document_ids:
            details["documents"] = "|".join(document_ids)
        super().__init__(message, details)
        self.document_ids = document_ids


class PersistenceError(DocuGuardError):
    """Raised when the state snapshot cannot be read or written."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        path: Path | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if operation:
            details["operation"] = operation
        if path:
            details["path"] = str(path)
        super().__init__(message, details)
        self.operation = operation
        self.path = path
