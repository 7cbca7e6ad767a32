from __future__ import annotations

"""Citation helpers for attaching document sources to model answers."""

import logging
from typing import Sequence

from qa_app.rag.relevance import MAX_SOURCES, count_word_matches, split_sentences, truncate
from qa_app.rag.types import Document, SourceExcerpt

logger = logging.getLogger(__name__)

EXCERPT_MAX_CHARS = 250
KEYWORD_OCCURRENCE_WEIGHT = 2


def attribution_keywords(question: str) -> list[str]:
    """Return lower-cased question words longer than three characters."""
    return [word for word in question.lower().split(" ") if len(word) > 3]


def mentioned_documents(answer: str, documents: Sequence[Document]) -> list[Document]:
    """Return documents whose name, with or without extension, appears in the answer."""
    lowered = answer.lower()
    mentioned: list[Document] = []
    for document in documents:
        name = document.name.lower()
        stem = document.stem
        if (name and name in lowered) or (stem and stem in lowered):
            mentioned.append(document)
    return mentioned


def rank_documents_by_keywords(
    keywords: list[str], documents: Sequence[Document], limit: int = MAX_SOURCES
) -> list[Document]:
    """Rank documents by whole-word keyword occurrences and keep the top ones."""
    scored: list[tuple[Document, int]] = []
    for document in documents:
        content = document.content.lower()
        score = sum(
            count_word_matches(keyword, content) * KEYWORD_OCCURRENCE_WEIGHT for keyword in keywords
        )
        if score > 0:
            scored.append((document, score))
    scored.sort(key=lambda item: item[1], reverse=True)
    return [document for document, _ in scored[:limit]]


def best_excerpt(document: Document, keywords: list[str]) -> str | None:
    """Return the sentence containing the most keywords, or None when nothing matches."""

    def _hits(sentence: str) -> int:
        lowered = sentence.lower()
        return sum(1 for keyword in keywords if keyword in lowered)

    relevant = [sentence for sentence in split_sentences(document.content) if _hits(sentence)]
    if not relevant:
        return None
    relevant.sort(key=_hits, reverse=True)
    return truncate(relevant[0], EXCERPT_MAX_CHARS)


def attribute_sources(
    question: str, answer: str, documents: Sequence[Document]
) -> list[SourceExcerpt]:
    """Pick the documents a model answer relies on and an excerpt from each."""
    keywords = attribution_keywords(question)
    cited = mentioned_documents(answer, documents)
    mentioned = bool(cited)
    if not cited:
        cited = rank_documents_by_keywords(keywords, documents)
    sources: list[SourceExcerpt] = []
    for document in cited:
        excerpt = best_excerpt(document, keywords)
        if excerpt is None:
            continue
        sources.append(SourceExcerpt(document=document.name, excerpt=excerpt))
    logger.info(
        "sources_attributed",
        extra={
            "mentioned": mentioned,
            "cited": len(cited),
            "sources": len(sources),
        },
    )
    return sources[:MAX_SOURCES]
