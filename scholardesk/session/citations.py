"""Citation record store — search, filter, favorites, formatting and export."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from datetime import timezone

from scholardesk.errors import NotFound, ValidationError
from scholardesk.models.citation import Citation, CitationStyle

logger = logging.getLogger(__name__)

# No author metadata is ever extracted from documents.
PLACEHOLDER_AUTHOR = "Author, A."

ALL = "all"
FAVORITES = "favorites"

_EXTENSION_RE = re.compile(r"\.[^/.]+$")


def _coerce_style(style: CitationStyle | str) -> CitationStyle:
    if isinstance(style, CitationStyle):
        return style
    try:
        return CitationStyle(str(style).lower())
    except ValueError:
        raise ValidationError(
            f"Unknown citation style {style!r}; expected apa, mla or chicago"
        ) from None


def format_citation(citation: Citation, style: CitationStyle | str) -> str:
    """Render a citation in APA, MLA or Chicago style."""
    style = _coerce_style(style)
    date_added = citation.date_added
    if date_added.tzinfo is not None:
        date_added = date_added.astimezone(timezone.utc)
    year = date_added.year
    title = _EXTENSION_RE.sub("", citation.document_name)

    if style is CitationStyle.APA:
        return f"{PLACEHOLDER_AUTHOR} ({year}). {title}. p. {citation.page}."
    if style is CitationStyle.MLA:
        return f'{PLACEHOLDER_AUTHOR} "{title}." {year}, p. {citation.page}.'
    return f'{PLACEHOLDER_AUTHOR}, "{title}," {year}, {citation.page}.'


class CitationStore:
    """All citations collected in a session, in insertion order.

    Ingestion only appends: analysing the same document twice yields two
    parallel sets of citations with different ids.
    """

    def __init__(self) -> None:
        self._citations: list[Citation] = []
        self._by_id: dict[str, Citation] = {}

    def ingest(self, citations: Iterable[Citation]) -> int:
        """Append citations; return how many were added."""
        added = 0
        for citation in citations:
            self._citations.append(citation)
            self._by_id[citation.id] = citation
            added += 1
        logger.info("Ingested %d citations (%d total)", added, len(self._citations))
        return added

    def get(self, citation_id: str) -> Citation:
        try:
            return self._by_id[citation_id]
        except KeyError:
            raise NotFound(f"Citation {citation_id} not found") from None

    def search(self, term: str) -> list[Citation]:
        """Case-insensitive substring match over citation text or document name."""
        needle = (term or "").lower()
        return [
            c
            for c in self._citations
            if needle in c.text.lower() or needle in c.document_name.lower()
        ]

    def filter(self, category: str = ALL) -> list[Citation]:
        """Citations in ``category``, or all favorites, or everything."""
        return [c for c in self._citations if self._in_category(c, category)]

    def query(self, term: str = "", category: str = ALL) -> list[Citation]:
        """Search and filter combined, as shown in the citation list."""
        return [c for c in self.search(term) if self._in_category(c, category)]

    def toggle_favorite(self, citation_id: str) -> Citation:
        citation = self.get(citation_id)
        citation.is_favorite = not citation.is_favorite
        return citation

    def categories(self) -> list[str]:
        """Distinct categories in the order they first appear."""
        return list(dict.fromkeys(c.category for c in self._citations if c.category))

    def export(
        self,
        style: CitationStyle | str,
        term: str = "",
        category: str = ALL,
    ) -> tuple[str, bytes]:
        """Format the filtered citations as a downloadable text file."""
        style = _coerce_style(style)
        body = "\n\n".join(
            format_citation(c, style) for c in self.query(term, category)
        )
        return f"citations-{style.value}.txt", body.encode("utf-8")

    @staticmethod
    def _in_category(citation: Citation, category: str | None) -> bool:
        if not category or category == ALL:
            return True
        if category == FAVORITES:
            return citation.is_favorite
        return citation.category == category

    def __len__(self) -> int:
        return len(self._citations)

    def __iter__(self):
        return iter(self._citations)
