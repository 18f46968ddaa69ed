"""Tests for configuration loading and the exception hierarchy."""

import json

import pytest

from docuguard.core.config import DocuGuardConfig, GraphConfig
from docuguard.core.constants import get_config_path
from docuguard.core.exceptions import (
    AnalysisInProgressError,
    AnalyzerError,
    ConfigurationError,
    ConflictNotFoundError,
    DocuGuardError,
    InvalidResolutionError,
    NotFoundError,
    ValidationError,
)


class TestDocuGuardConfig:
    """Tests for DocuGuardConfig."""

    def test_defaults(self):
        """Test default values."""
        config = DocuGuardConfig()

        assert config.analyzer.api_key_env == "DOCUGUARD_API_KEY"
        assert config.graph.radius == 250.0
        assert config.graph.center == (400.0, 300.0)
        assert config.storage.save_debounce_ms == 300

    def test_load_missing_file(self, temp_dir):
        """Test defaults are used when no config file exists."""
        assert DocuGuardConfig.load(temp_dir) == DocuGuardConfig()

    def test_save_and_load(self, temp_dir):
        """Test a saved config loads back equal."""
        config = DocuGuardConfig.from_dict({
            "analyzer": {"model": "custom-model"},
            "graph": {"width": 1000.0},
            "server": {"port": 9000},
        })

        config.save(temp_dir)

        assert get_config_path(temp_dir).exists()
        assert DocuGuardConfig.load(temp_dir) == config

    def test_partial_sections(self, temp_dir):
        """Test missing keys fall back to defaults."""
        path = get_config_path(temp_dir)
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"storage": {"save_debounce_ms": 50}}), encoding="utf-8")

        config = DocuGuardConfig.load(temp_dir)
        assert config.storage.save_debounce_ms == 50
        assert config.analyzer == DocuGuardConfig().analyzer

    @pytest.mark.parametrize(
        "content",
        [
            "{not json",
            json.dumps({"graph": {"colour": "red"}}),
            json.dumps({"graph": {"min_zoom": 0}}),
        ],
    )
    def test_invalid_file(self, temp_dir, content):
        """Test malformed config is a configuration error."""
        path = get_config_path(temp_dir)
        path.parent.mkdir(parents=True)
        path.write_text(content, encoding="utf-8")

        with pytest.raises(ConfigurationError):
            DocuGuardConfig.load(temp_dir)

    def test_api_key_from_environment(self, monkeypatch):
        """Test the key is read at access time."""
        config = DocuGuardConfig()

        monkeypatch.delenv("DOCUGUARD_API_KEY", raising=False)
        assert config.analyzer.api_key is None

        monkeypatch.setenv("DOCUGUARD_API_KEY", "secret")
        assert config.analyzer.api_key == "secret"

    def test_invalid_zoom_step(self):
        """Test zoom steps must enlarge."""
        with pytest.raises(ValueError):
            GraphConfig(zoom_step=1.0)


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_details_in_str(self):
        """Test details are rendered after the message."""
        error = ConflictNotFoundError("Conflict not found", conflict_id="c9")

        assert str(error) == "Conflict not found (entity=conflict, id=c9)"
        assert error.message == "Conflict not found"

    def test_hierarchy(self):
        """Test the families callers catch on."""
        assert issubclass(ConflictNotFoundError, NotFoundError)
        assert issubclass(InvalidResolutionError, ValidationError)
        assert issubclass(AnalysisInProgressError, ValidationError)
        assert issubclass(AnalyzerError, DocuGuardError)

    def test_invalid_resolution_details(self):
        """Test the offending value and field are recorded."""
        error = InvalidResolutionError("bad", resolution="maybe")

        assert error.details == {"resolution": "maybe", "field": "resolution"}
        assert error.field == "resolution"

    def test_analyzer_error_pair(self):
        """Test the analyzed pair is kept."""
        error = AnalyzerError("failed", document_ids=("d1", "d2"))

        assert error.document_ids == ("d1", "d2")
        assert error.details["documents"] == "d1|d2"
