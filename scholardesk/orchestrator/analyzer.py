"""Document analysis — prompts the generation service and caches results."""

from __future__ import annotations

import logging

from pydantic import ValidationError as PayloadError

from scholardesk.backends.base import GenerationBackend, parse_json_response
from scholardesk.errors import InvalidAIResponse, ValidationError
from scholardesk.models.analysis import AnalysisResult, CitedPassage
from scholardesk.models.common import isoformat, parse_timestamp, utcnow
from scholardesk.models.payloads import AnalysisPayload

logger = logging.getLogger(__name__)

ANALYSIS_PROMPT = """\
You are analyzing a research document.

Document Name: {document_name}
File Type: {file_type}

Return ONLY valid JSON in this structure:
{{
  "documentName": "{document_name}",
  "summary": "short summary of the document",
  "keyInsights": ["insight 1", "insight 2"],
  "citations": [
    {{ "text": "citation text", "page": 1, "confidence": 0.92 }}
  ],
  "topics": ["topic1", "topic2"],
  "analysisDate": "{now}"
}}

Rules:
- page is a positive integer, confidence a number between 0 and 1.
- No Markdown code fences.\
"""


class Analyzer:
    """Requests a structured analysis for a document from the generation service.

    Only the document name and type are sent, so the analysis is not grounded
    in the document's content.
    """

    def __init__(self, backend: GenerationBackend, model: str | None = None) -> None:
        self.backend = backend
        self.model = model or None

    async def analyze(self, document_name: str, file_type: str) -> AnalysisResult:
        if not document_name or not document_name.strip():
            raise ValidationError("No document name provided")
        file_type = (file_type or "").strip() or "pdf"

        requested_at = utcnow()
        prompt = ANALYSIS_PROMPT.format(
            document_name=document_name,
            file_type=file_type,
            now=isoformat(requested_at),
        )
        logger.info("Requesting analysis of %s via %s", document_name, self.backend.name)
        raw_text = await self.backend.generate(prompt, model=self.model)
        logger.debug("Raw AI response: %s", raw_text)
        return self._parse_analysis(document_name, raw_text, requested_at)

    def _parse_analysis(self, document_name, raw_text, requested_at) -> AnalysisResult:
        parsed = parse_json_response(raw_text)
        try:
            payload = AnalysisPayload.model_validate(parsed)
        except PayloadError as exc:
            logger.error("Analysis response has the wrong shape: %s\n%s", exc, raw_text)
            raise InvalidAIResponse(str(exc), raw_text=raw_text) from exc

        topics = [t.strip() for t in payload.topics if t.strip()]
        return AnalysisResult(
            document_name=document_name,
            summary=payload.summary,
            key_insights=list(payload.key_insights),
            citations=[
                CitedPassage(text=c.text, page=c.page, confidence=c.confidence)
                for c in payload.citations
            ],
            topics=list(dict.fromkeys(topics)),
            analysis_date=parse_timestamp(payload.analysis_date) or requested_at,
        )


class AnalysisResultCache:
    """Most recent analysis per document name.

    A re-analysis replaces the cached result wholesale; nothing is merged.
    """

    def __init__(self, analyzer: Analyzer) -> None:
        self.analyzer = analyzer
        self._results: dict[str, AnalysisResult] = {}

    async def request_analysis(self, document_name: str, file_type: str) -> AnalysisResult:
        """Ask the generation service for a fresh analysis. Does not cache it."""
        return await self.analyzer.analyze(document_name, file_type)

    def put(self, result: AnalysisResult) -> AnalysisResult | None:
        """Store ``result`` as current for its document; return the one replaced."""
        previous = self._results.get(result.document_name)
        self._results[result.document_name] = result
        if previous is not None:
            logger.info(
                "Replaced analysis %s of %s with %s",
                previous.id, result.document_name, result.id,
            )
        return previous

    def get(self, document_name: str) -> AnalysisResult | None:
        return self._results.get(document_name)

    def __contains__(self, document_name: object) -> bool:
        return document_name in self._results

    def __len__(self) -> int:
        return len(self._results)
