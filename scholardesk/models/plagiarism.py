"""Plagiarism and AI-authorship check data model."""

from __future__ import annotations

from dataclasses import dataclass, field

MAX_MATCHED_SOURCES = 10


@dataclass
class MatchedSource:
    source: str
    overlap_snippet: str
    similarity: float


@dataclass
class PlagiarismScore:
    score: int
    matched_sources: list[MatchedSource] = field(default_factory=list)
    reasoning: str = ""


@dataclass
class AIDetection:
    is_ai: bool
    confidence: float
    comment: str = ""


@dataclass
class PlagiarismResult:
    """Outcome of one plagiarism check. Held for display only."""

    plagiarism: PlagiarismScore
    ai_detection: AIDetection
    word_count: int

    def to_dict(self) -> dict:
        return {
            "plagiarism": {
                "score": self.plagiarism.score,
                "matchedSources": [
                    {
                        "source": m.source,
                        "overlapSnippet": m.overlap_snippet,
                        "similarity": m.similarity,
                    }
                    for m in self.plagiarism.matched_sources
                ],
                "reasoning": self.plagiarism.reasoning,
            },
            "aiDetection": {
                "isAI": self.ai_detection.is_ai,
                "confidence": self.ai_detection.confidence,
                "comment": self.ai_detection.comment,
            },
            "wordCount": self.word_count,
        }
