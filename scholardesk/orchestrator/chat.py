"""Follow-up questions about an analyzed document."""

from __future__ import annotations

import logging

from pydantic import ValidationError as PayloadError

from scholardesk.backends.base import GenerationBackend, parse_json_response
from scholardesk.errors import InvalidAIResponse, ValidationError
from scholardesk.models.chat import ChatAnswer, ChatSource
from scholardesk.models.payloads import ChatPayload

logger = logging.getLogger(__name__)

CHAT_PROMPT = """\
You are answering questions about a research document.

Question: {question}
Document ID: {document_id}
Context: {context}

Please provide:
1. A comprehensive answer to the question
2. A confidence score (0-1)
3. 2 relevant source citations with page numbers

Return ONLY valid JSON:
{{
  "answer": "detailed answer string",
  "confidence": 0.8,
  "sources": [
    {{"page": 1, "text": "relevant citation text"}}
  ]
}}\
"""


class ChatService:
    """Answers a question about one document."""

    def __init__(self, backend: GenerationBackend, model: str | None = None) -> None:
        self.backend = backend
        self.model = model or None

    async def ask(
        self, question: str, document_id: str, context: str | None = None
    ) -> ChatAnswer:
        if not question or not question.strip():
            raise ValidationError("No question provided")
        if not document_id or not document_id.strip():
            raise ValidationError("No document selected")

        prompt = CHAT_PROMPT.format(
            question=question.strip(),
            document_id=document_id,
            context=context or "No additional context provided",
        )
        raw_text = await self.backend.generate(prompt, model=self.model)
        logger.debug("Raw AI chat response: %s", raw_text)

        parsed = parse_json_response(raw_text)
        try:
            payload = ChatPayload.model_validate(parsed)
        except PayloadError as exc:
            logger.error("Chat response has the wrong shape: %s\n%s", exc, raw_text)
            raise InvalidAIResponse(str(exc), raw_text=raw_text) from exc

        return ChatAnswer(
            answer=payload.answer,
            confidence=payload.confidence,
            sources=[ChatSource(page=s.page, text=s.text) for s in payload.sources],
        )
