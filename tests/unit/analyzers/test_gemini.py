"""Tests for the Gemini conflict analyzer."""

import json

import httpx
import pytest

from docuguard.analyzers import GeminiConflictAnalyzer, HeuristicConflictAnalyzer, create_analyzer
from docuguard.core.config import AnalyzerConfig
from docuguard.core.exceptions import AnalyzerError, ConfigurationError
from docuguard.models.conflict import Severity
from docuguard.models.document import Document


FIRST = Document(id="d1", title="handbook.txt", content="Notice is 2 weeks.")
SECOND = Document(id="d2", title="memo.txt", content="Notice is 4 weeks.")

FINDING = {
    "excerpt1": "Notice is 2 weeks.",
    "excerpt2": "Notice is 4 weeks.",
    "explanation": "The notice periods differ.",
    "severity": "High",
}


def _gemini_body(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def _analyzer(handler, **config) -> GeminiConflictAnalyzer:
    return GeminiConflictAnalyzer(
        AnalyzerConfig(**config),
        api_key="test-key",
        transport=httpx.MockTransport(handler),
    )


class TestConstruction:
    """Tests for analyzer setup."""

    def test_requires_api_key(self, monkeypatch):
        """Test a missing key is a configuration error."""
        monkeypatch.delenv("DOCUGUARD_API_KEY", raising=False)

        with pytest.raises(ConfigurationError):
            GeminiConflictAnalyzer(AnalyzerConfig())

    def test_key_from_environment(self, monkeypatch):
        """Test the key is read from the configured variable."""
        monkeypatch.setenv("DOCUGUARD_API_KEY", "env-key")
        assert isinstance(GeminiConflictAnalyzer(AnalyzerConfig()), GeminiConflictAnalyzer)

    def test_url(self):
        """Test the generateContent endpoint."""
        analyzer = GeminiConflictAnalyzer(
            AnalyzerConfig(endpoint="https://example.test/v1beta/", model="m1"),
            api_key="k",
        )
        assert analyzer.url == "https://example.test/v1beta/models/m1:generateContent"

    def test_create_analyzer_fallback(self, monkeypatch):
        """Test the heuristic analyzer is used without a key."""
        monkeypatch.delenv("DOCUGUARD_API_KEY", raising=False)
        assert isinstance(create_analyzer(AnalyzerConfig()), HeuristicConflictAnalyzer)

        monkeypatch.setenv("DOCUGUARD_API_KEY", "k")
        assert isinstance(create_analyzer(AnalyzerConfig()), GeminiConflictAnalyzer)


class TestAnalyze:
    """Tests for GeminiConflictAnalyzer.analyze."""

    @pytest.mark.asyncio
    async def test_returns_candidates_for_pair(self):
        """Test a well-formed response becomes candidates for the pair."""
        analyzer = _analyzer(lambda request: httpx.Response(200, json=_gemini_body(json.dumps([FINDING]))))

        candidates = await analyzer.analyze(FIRST, SECOND)

        assert len(candidates) == 1
        candidate = candidates[0]
        assert candidate.document_ids == ("d1", "d2")
        assert candidate.document_titles == ("handbook.txt", "memo.txt")
        assert candidate.excerpts == ("Notice is 2 weeks.", "Notice is 4 weeks.")
        assert candidate.severity is Severity.HIGH

    @pytest.mark.asyncio
    async def test_request_shape(self):
        """Test the request carries key header, prompt and JSON mime type."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(200, json=_gemini_body("[]"))

        await _analyzer(handler, temperature=0.2).analyze(FIRST, SECOND)

        request = seen["request"]
        body = json.loads(request.content)
        prompt = body["contents"][0]["parts"][0]["text"]
        assert request.headers["x-goog-api-key"] == "test-key"
        assert request.url.path.endswith(":generateContent")
        assert body["generationConfig"] == {"temperature": 0.2, "responseMimeType": "application/json"}
        assert "Title: handbook.txt" in prompt
        assert "Notice is 4 weeks." in prompt

    @pytest.mark.asyncio
    async def test_long_content_truncated(self):
        """Test documents are cut to the configured length."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["prompt"] = json.loads(request.content)["contents"][0]["parts"][0]["text"]
            return httpx.Response(200, json=_gemini_body("[]"))

        long_doc = Document(id="d3", title="long.txt", content="x" * 50)
        await _analyzer(handler, max_document_chars=10).analyze(long_doc, SECOND)

        assert "x" * 10 + "..." in seen["prompt"]
        assert "x" * 11 not in seen["prompt"]

    @pytest.mark.asyncio
    async def test_code_fence_is_stripped(self):
        """Test fenced JSON is accepted."""
        text = "```json\n" + json.dumps([FINDING]) + "\n```"
        analyzer = _analyzer(lambda request: httpx.Response(200, json=_gemini_body(text)))

        assert len(await analyzer.analyze(FIRST, SECOND)) == 1

    @pytest.mark.asyncio
    async def test_empty_array(self):
        """Test no conflicts."""
        analyzer = _analyzer(lambda request: httpx.Response(200, json=_gemini_body("[]")))
        assert await analyzer.analyze(FIRST, SECOND) == []

    @pytest.mark.asyncio
    async def test_lowercase_severity(self):
        """Test severities are parsed case-insensitively."""
        finding = {**FINDING, "severity": "medium"}
        analyzer = _analyzer(lambda request: httpx.Response(200, json=_gemini_body(json.dumps([finding]))))

        candidates = await analyzer.analyze(FIRST, SECOND)
        assert candidates[0].severity is Severity.MEDIUM

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "text",
        [
            "not json at all",
            json.dumps({"excerpt1": "a"}),
            json.dumps(["just a string"]),
            json.dumps([{**FINDING, "severity": "Critical"}]),
            json.dumps([{k: v for k, v in FINDING.items() if k != "explanation"}]),
        ],
    )
    async def test_malformed_output(self, text):
        """Test anything but an array of complete items is an error."""
        analyzer = _analyzer(lambda request: httpx.Response(200, json=_gemini_body(text)))

        with pytest.raises(AnalyzerError) as exc_info:
            await analyzer.analyze(FIRST, SECOND)
        assert exc_info.value.document_ids == ("d1", "d2")

    @pytest.mark.asyncio
    async def test_missing_candidates(self):
        """Test a response without candidate text."""
        analyzer = _analyzer(lambda request: httpx.Response(200, json={"promptFeedback": {}}))

        with pytest.raises(AnalyzerError):
            await analyzer.analyze(FIRST, SECOND)

    @pytest.mark.asyncio
    async def test_http_error(self):
        """Test non-2xx responses."""
        analyzer = _analyzer(lambda request: httpx.Response(429, json={"error": "quota"}))

        with pytest.raises(AnalyzerError, match="HTTP 429"):
            await analyzer.analyze(FIRST, SECOND)

    @pytest.mark.asyncio
    async def test_transport_error(self):
        """Test connection failures."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(AnalyzerError):
            await _analyzer(handler).analyze(FIRST, SECOND)

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        """Test a body that is not JSON."""
        analyzer = _analyzer(lambda request: httpx.Response(200, text="<html>oops</html>"))

        with pytest.raises(AnalyzerError):
            await analyzer.analyze(FIRST, SECOND)
