"""DocuGuard core: constants, configuration, exceptions and id sources."""

from docuguard.core.config import (
    AnalyzerConfig,
    DocuGuardConfig,
    GraphConfig,
    ServerConfig,
    StorageConfig,
)
from docuguard.core.exceptions import (
    AnalysisInProgressError,
    AnalyzerError,
    ConfigurationError,
    ConflictNotFoundError,
    DocuGuardError,
    DocumentNotFoundError,
    DuplicateIdError,
    InvalidResolutionError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from docuguard.core.ids import SequentialIds, new_id, utc_now

__all__ = [
    # Config
    "AnalyzerConfig",
    "DocuGuardConfig",
    "GraphConfig",
    "ServerConfig",
    "StorageConfig",
    # Exceptions
    "AnalysisInProgressError",
    "AnalyzerError",
    "ConfigurationError",
    "ConflictNotFoundError",
    "DocuGuardError",
    "DocumentNotFoundError",
    "DuplicateIdError",
    "InvalidResolutionError",
    "NotFoundError",
    "PersistenceError",
    "ValidationError",
    # Ids
    "SequentialIds",
    "new_id",
    "utc_now",
]
