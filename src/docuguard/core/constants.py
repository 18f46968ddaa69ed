"""DocuGuard system constants and default values."""

from pathlib import Path
from typing import Final


# Directory structure
DOCUGUARD_ROOT_DIR: Final[str] = ".docuguard"
SNAPSHOT_FILE: Final[str] = "state.json"
CONFIG_FILE: Final[str] = "config.json"
REPORTS_DIR: Final[str] = "reports"

# Analysis
MIN_BATCH_DOCUMENTS: Final[int] = 2
TEXT_MIME_TYPE: Final[str] = "text/plain"

# Analyzer service
DEFAULT_ANALYZER_MODEL: Final[str] = "gemini-2.5-flash"
DEFAULT_ANALYZER_ENDPOINT: Final[str] = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_ANALYZER_API_KEY_ENV: Final[str] = "DOCUGUARD_API_KEY"
DEFAULT_ANALYZER_TIMEOUT_SECONDS: Final[float] = 60.0
DEFAULT_MAX_DOCUMENT_CHARS: Final[int] = 20000

# Graph layout (graph-space units)
DEFAULT_CANVAS_WIDTH: Final[float] = 800.0
DEFAULT_CANVAS_HEIGHT: Final[float] = 600.0
DEFAULT_LAYOUT_RADIUS: Final[float] = 250.0
NODE_RADIUS: Final[float] = 40.0
NODE_LABEL_MAX_LENGTH: Final[int] = 12
MAX_EDGE_STROKE: Final[float] = 5.0
DIMMED_OPACITY: Final[float] = 0.2

# Viewport
ZOOM_STEP: Final[float] = 1.1
MIN_ZOOM: Final[float] = 0.2
MAX_ZOOM: Final[float] = 5.0

# Persistence
DEFAULT_SAVE_DEBOUNCE_MS: Final[int] = 300

# Reports
REPORT_TITLE: Final[str] = "DocuGuard Conflict Report"
REPORT_FILE_PREFIX: Final[str] = "DocuGuard_Report_"
REPORT_BANNER: Final[str] = "=" * 50
REPORT_RULE: Final[str] = "-" * 50

# User profile defaults
DEFAULT_PROFILE_NAME: Final[str] = "Guest User"

# HTTP API
DEFAULT_HOST: Final[str] = "127.0.0.1"
DEFAULT_PORT: Final[int] = 7480

# Severity ordering for sorting
SEVERITY_RANKS: Final[dict[str, int]] = {
    "High": 3,
    "Medium": 2,
    "Low": 1,
}


def get_docuguard_root(base_path: Path | None = None) -> Path:
    """Get the .docuguard root directory path."""
    base = base_path or Path.cwd()
    return base / DOCUGUARD_ROOT_DIR


def get_snapshot_path(base_path: Path | None = None) -> Path:
    """Get the path of the persisted state snapshot."""
    return get_docuguard_root(base_path) / SNAPSHOT_FILE


def get_config_path(base_path: Path | None = None) -> Path:
    """Get the path of the configuration file."""
    return get_docuguard_root(base_path) / CONFIG_FILE


def get_reports_dir(base_path: Path | None = None) -> Path:
    """Get the directory exported reports are written to."""
    return get_docuguard_root(base_path) / REPORTS_DIR
