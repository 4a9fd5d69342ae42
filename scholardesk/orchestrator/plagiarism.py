"""Plagiarism and AI-authorship checks over extracted document text."""

from __future__ import annotations

import logging
import re

from pydantic import ValidationError as PayloadError

from scholardesk.backends.base import GenerationBackend, parse_json_response
from scholardesk.errors import InvalidAIResponse, ValidationError
from scholardesk.models.common import isoformat, utcnow
from scholardesk.models.payloads import PlagiarismPayload
from scholardesk.models.plagiarism import (
    MAX_MATCHED_SOURCES,
    AIDetection,
    MatchedSource,
    PlagiarismResult,
    PlagiarismScore,
)

logger = logging.getLogger(__name__)

EMPTY_TEXT_ERROR = "No text provided for plagiarism check"

PLAGIARISM_PROMPT = """\
You are a plagiarism + AI writing detector.

INPUT
- Document Name: {document_name}
- File Type: {file_type}
- Current Time: {now}

DOCUMENT TEXT
---------------- BEGIN ----------------
{file_text}
----------------- END -----------------

TASKS
1. Plagiarism Check:
   - plagiarism.score: integer 0-100 (higher = more copied/unoriginal)
   - plagiarism.matchedSources: up to {max_sources} overlaps, each with {{source, overlapSnippet, similarity 0-1}}
   - plagiarism.reasoning: 1 short paragraph explanation
2. AI Writing Detection:
   - aiDetection.isAI: true/false (likely AI-generated?)
   - aiDetection.confidence: 0-1 number
   - aiDetection.comment: short explanation
3. Word Count:
   - wordCount: number of words in document

RULES
- Don't invent URLs. Use general names only (e.g., "Wikipedia", "Nature 2020").
- If uncertain about plagiarism, keep matchedSources empty and score low.
- Confidence must be numeric 0-1.
- Return ONLY valid JSON. No markdown fences.\
"""

_WORD_RE = re.compile(r"\S+")


def count_words(text: str) -> int:
    return len(_WORD_RE.findall(text))


class PlagiarismChecker:
    """Sends the full document text to the generation service for checking."""

    def __init__(self, backend: GenerationBackend, model: str | None = None) -> None:
        self.backend = backend
        self.model = model or None

    async def check(
        self, document_name: str, file_type: str, file_text: str
    ) -> PlagiarismResult:
        if not file_text or not file_text.strip():
            raise ValidationError(EMPTY_TEXT_ERROR)

        prompt = PLAGIARISM_PROMPT.format(
            document_name=document_name or "untitled",
            file_type=file_type or "txt",
            now=isoformat(utcnow()),
            file_text=file_text,
            max_sources=MAX_MATCHED_SOURCES,
        )
        logger.info(
            "Checking %s for plagiarism (%d chars) via %s",
            document_name, len(file_text), self.backend.name,
        )
        raw_text = await self.backend.generate(prompt, model=self.model)
        logger.debug("Raw AI plagiarism response: %s", raw_text)

        parsed = parse_json_response(raw_text)
        try:
            payload = PlagiarismPayload.model_validate(parsed)
        except PayloadError as exc:
            logger.error("Plagiarism response has the wrong shape: %s\n%s", exc, raw_text)
            raise InvalidAIResponse(str(exc), raw_text=raw_text) from exc

        sources = payload.plagiarism.matched_sources
        if len(sources) > MAX_MATCHED_SOURCES:
            logger.warning(
                "Dropping %d matched sources over the limit of %d",
                len(sources) - MAX_MATCHED_SOURCES, MAX_MATCHED_SOURCES,
            )

        word_count = payload.word_count
        if word_count is None:
            word_count = count_words(file_text)

        return PlagiarismResult(
            plagiarism=PlagiarismScore(
                score=round(payload.plagiarism.score),
                matched_sources=[
                    MatchedSource(
                        source=m.source,
                        overlap_snippet=m.overlap_snippet,
                        similarity=m.similarity,
                    )
                    for m in sources[:MAX_MATCHED_SOURCES]
                ],
                reasoning=payload.plagiarism.reasoning,
            ),
            ai_detection=AIDetection(
                is_ai=payload.ai_detection.is_ai,
                confidence=payload.ai_detection.confidence,
                comment=payload.ai_detection.comment,
            ),
            word_count=word_count,
        )
