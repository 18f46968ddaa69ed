"""Conflict analyzer backed by the Gemini generateContent API.

The model is asked for a JSON array of excerpt pairs with an explanation and
a severity. Anything that is not a well-formed array of such items is an
``AnalyzerError``; there are no retries.
"""

import json
import logging
from typing import Any

import httpx

from docuguard.core.config import AnalyzerConfig
from docuguard.core.exceptions import AnalyzerError, ConfigurationError
from docuguard.models.conflict import ConflictCandidate, Severity
from docuguard.models.document import Document


logger = logging.getLogger(__name__)


CONFLICT_PROMPT = """You are a meticulous compliance analyst. Compare the two documents below
and find statements that directly contradict each other (different numbers,
deadlines, obligations, permissions or facts about the same subject).

## Document 1
Title: {title1}
Content:
{content1}

## Document 2
Title: {title2}
Content:
{content2}

## Response Format

Respond with a JSON array only, no other text. Each item:
{{
  "excerpt1": "exact quote from Document 1",
  "excerpt2": "exact quote from Document 2",
  "explanation": "one or two sentences on why they contradict",
  "severity": "High|Medium|Low"
}}

Return [] if the documents do not contradict each other.
Differences in wording that mean the same thing are not conflicts.
"""


class GeminiConflictAnalyzer:
    """Detects conflicts by prompting a Gemini model.

    Example:
        analyzer = GeminiConflictAnalyzer(AnalyzerConfig())
        candidates = await analyzer.analyze(doc_a, doc_b)
    """

    def __init__(
        self,
        config: AnalyzerConfig | None = None,
        api_key: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the analyzer.

        Args:
            config: Analyzer configuration.
            api_key: API key; read from the configured environment variable
                when omitted.
            transport: Optional httpx transport (used by tests).

        Raises:
            ConfigurationError: If no API key is available.
        """
        self._config = config or AnalyzerConfig()
        self._api_key = api_key or self._config.api_key
        if not self._api_key:
            raise ConfigurationError(
                f"No analyzer API key configured; set {self._config.api_key_env}",
                details={"env": self._config.api_key_env},
            )
        self._transport = transport

    @property
    def url(self) -> str:
        """Get the generateContent endpoint URL."""
        endpoint = self._config.endpoint.rstrip("/")
        return f"{endpoint}/models/{self._config.model}:generateContent"

    async def analyze(self, first: Document, second: Document) -> list[ConflictCandidate]:
        """Analyze one document pair.

        Raises:
            AnalyzerError: On transport errors, HTTP errors or malformed output.
        """
        document_ids = (first.id, second.id)
        payload = {
            "contents": [{"parts": [{"text": self._build_prompt(first, second)}]}],
            "generationConfig": {
                "temperature": self._config.temperature,
                "responseMimeType": "application/json",
            },
        }

        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    self.url,
                    headers={"x-goog-api-key": self._api_key},
                    json=payload,
                )
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPStatusError as e:
            raise AnalyzerError(
                f"Analyzer returned HTTP {e.response.status_code}",
                document_ids=document_ids,
            ) from e
        except httpx.RequestError as e:
            raise AnalyzerError(
                f"Analyzer request failed: {e}",
                document_ids=document_ids,
            ) from e
        except json.JSONDecodeError as e:
            raise AnalyzerError(
                f"Analyzer response is not JSON: {e}",
                document_ids=document_ids,
            ) from e

        text = self._extract_text(body, document_ids)
        items = self._parse_response(text, document_ids)
        candidates = [self._to_candidate(item, first, second) for item in items]
        logger.debug(
            f"Analyzer found {len(candidates)} conflicts between {first.id} and {second.id}"
        )
        return candidates

    def _build_prompt(self, first: Document, second: Document) -> str:
        return CONFLICT_PROMPT.format(
            title1=first.title,
            content1=self._truncate_content(first.content),
            title2=second.title,
            content2=self._truncate_content(second.content),
        )

    def _truncate_content(self, content: str) -> str:
        """Truncate content to maximum length."""
        if len(content) <= self._config.max_document_chars:
            return content
        return content[:self._config.max_document_chars] + "..."

    def _extract_text(self, body: Any, document_ids: tuple[str, str]) -> str:
        try:
            parts = body["candidates"][0]["content"]["parts"]
            return "".join(part.get("text", "") for part in parts)
        except (KeyError, IndexError, TypeError) as e:
            raise AnalyzerError(
                "Analyzer response has no candidate text",
                document_ids=document_ids,
            ) from e

    def _parse_response(self, response: str, document_ids: tuple[str, str]) -> list[dict[str, Any]]:
        """Parse the model output into a list of conflict items.

        Args:
            response: Raw model text, possibly wrapped in a code fence.
            document_ids: Ids of the analyzed pair, for error reporting.

        Returns:
            The validated items.
        """
        response = response.strip()
        if response.startswith("```json"):
            response = response[7:]
        if response.startswith("```"):
            response = response[3:]
        if response.endswith("```"):
            response = response[:-3]
        response = response.strip()

        try:
            data = json.loads(response)
        except json.JSONDecodeError as e:
            raise AnalyzerError(
                f"Failed to parse analyzer output as JSON: {e}",
                document_ids=document_ids,
            ) from e

        if not isinstance(data, list):
            raise AnalyzerError(
                "Analyzer output must be a JSON array",
                document_ids=document_ids,
            )

        for item in data:
            if not isinstance(item, dict):
                raise AnalyzerError(
                    "Analyzer output items must be objects",
                    document_ids=document_ids,
                )
            for key in ("excerpt1", "excerpt2", "explanation", "severity"):
                if not isinstance(item.get(key), str):
                    raise AnalyzerError(
                        f"Analyzer output item is missing '{key}'",
                        document_ids=document_ids,
                    )
            try:
                Severity.parse(item["severity"])
            except ValueError as e:
                raise AnalyzerError(str(e), document_ids=document_ids) from e

        return data

    def _to_candidate(
        self,
        item: dict[str, Any],
        first: Document,
        second: Document,
    ) -> ConflictCandidate:
        return ConflictCandidate(
            document_ids=(first.id, second.id),
            document_titles=(first.title, second.title),
            excerpts=(item["excerpt1"], item["excerpt2"]),
            explanation=item["explanation"],
            severity=Severity.parse(item["severity"]),
        )
