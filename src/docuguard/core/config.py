"""DocuGuard configuration loading and validation."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Self

from docuguard.core.constants import (
    DEFAULT_ANALYZER_API_KEY_ENV,
    DEFAULT_ANALYZER_ENDPOINT,
    DEFAULT_ANALYZER_MODEL,
    DEFAULT_ANALYZER_TIMEOUT_SECONDS,
    DEFAULT_CANVAS_HEIGHT,
    DEFAULT_CANVAS_WIDTH,
    DEFAULT_HOST,
    DEFAULT_LAYOUT_RADIUS,
    DEFAULT_MAX_DOCUMENT_CHARS,
    DEFAULT_PORT,
    DEFAULT_SAVE_DEBOUNCE_MS,
    MAX_ZOOM,
    MIN_ZOOM,
    ZOOM_STEP,
    get_config_path,
)
from docuguard.core.exceptions import ConfigurationError


@dataclass(frozen=True)
class AnalyzerConfig:
    """External analyzer service configuration."""

    model: str = DEFAULT_ANALYZER_MODEL
    endpoint: str = DEFAULT_ANALYZER_ENDPOINT
    api_key_env: str = DEFAULT_ANALYZER_API_KEY_ENV
    timeout_seconds: float = DEFAULT_ANALYZER_TIMEOUT_SECONDS
    max_document_chars: int = DEFAULT_MAX_DOCUMENT_CHARS
    temperature: float = 0.0

    @property
    def api_key(self) -> str | None:
        """Read the API key from the configured environment variable."""
        return os.environ.get(self.api_key_env) or None


@dataclass(frozen=True)
class GraphConfig:
    """Graph layout and viewport configuration."""

    width: float = DEFAULT_CANVAS_WIDTH
    height: float = DEFAULT_CANVAS_HEIGHT
    radius: float = DEFAULT_LAYOUT_RADIUS
    zoom_step: float = ZOOM_STEP
    min_zoom: float = MIN_ZOOM
    max_zoom: float = MAX_ZOOM

    def __post_init__(self) -> None:
        if self.min_zoom <= 0 or self.min_zoom > self.max_zoom:
            raise ValueError(f"Invalid zoom bounds: {self.min_zoom}..{self.max_zoom}")
        if self.zoom_step <= 1.0:
            raise ValueError(f"zoom_step must be greater than 1, got {self.zoom_step}")

    @property
    def center(self) -> tuple[float, float]:
        """Get the canvas centre the layout circle is drawn around."""
        return self.width / 2, self.height / 2


@dataclass(frozen=True)
class StorageConfig:
    """Snapshot persistence configuration."""

    snapshot_file: str = "state.json"
    save_debounce_ms: int = DEFAULT_SAVE_DEBOUNCE_MS


@dataclass(frozen=True)
class ServerConfig:
    """HTTP API server configuration."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = "info"


@dataclass(frozen=True)
class DocuGuardConfig:
    """Complete DocuGuard configuration."""

    version: str = "1.0"
    analyzer: AnalyzerConfig = field(default_factory=AnalyzerConfig)
    graph: GraphConfig = field(default_factory=GraphConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create config from dictionary."""
        return cls(
            version=data.get("version", "1.0"),
            analyzer=AnalyzerConfig(**data.get("analyzer", {})),
            graph=GraphConfig(**data.get("graph", {})),
            storage=StorageConfig(**data.get("storage", {})),
            server=ServerConfig(**data.get("server", {})),
        )

    @classmethod
    def load(cls, base_path: Path | None = None) -> Self:
        """Load configuration from file or use defaults."""
        config_path = get_config_path(base_path)

        if not config_path.exists():
            return cls()

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return cls.from_dict(data)
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in config file: {e}",
                details={"path": str(config_path)},
            ) from e
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Invalid configuration values: {e}",
                details={"path": str(config_path)},
            ) from e

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "version": self.version,
            "analyzer": {
                "model": self.analyzer.model,
                "endpoint": self.analyzer.endpoint,
                "api_key_env": self.analyzer.api_key_env,
                "timeout_seconds": self.analyzer.timeout_seconds,
                "max_document_chars": self.analyzer.max_document_chars,
                "temperature": self.analyzer.temperature,
            },
            "graph": {
                "width": self.graph.width,
                "height": self.graph.height,
                "radius": self.graph.radius,
                "zoom_step": self.graph.zoom_step,
                "min_zoom": self.graph.min_zoom,
                "max_zoom": self.graph.max_zoom,
            },
            "storage": {
                "snapshot_file": self.storage.snapshot_file,
                "save_debounce_ms": self.storage.save_debounce_ms,
            },
            "server": {
                "host": self.server.host,
                "port": self.server.port,
                "log_level": self.server.log_level,
            },
        }

    def save(self, base_path: Path | None = None) -> None:
        """Save configuration to file."""
        config_path = get_config_path(base_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
