"""Document ingestion from the filesystem."""

from docuguard.ingestion.files import (
    IngestedFile,
    IngestionResult,
    RejectedFile,
    is_text_file,
    read_text_files,
    to_documents,
)

__all__ = [
    "IngestedFile",
    "IngestionResult",
    "RejectedFile",
    "is_text_file",
    "read_text_files",
    "to_documents",
]
