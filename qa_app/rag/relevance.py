from __future__ import annotations

"""Keyword-overlap relevance engine used when no model answer is available.

Documents are cut into sentence or paragraph units, every unit is scored
against the question keywords and the best units become the answer and its
sources. Scoring is fixed-weight counting: no stemming, no IDF, no positional
boosts beyond the literal question-prefix bonus.
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, Literal

from qa_app.rag.types import Document, MatchCandidate, SourceExcerpt

ASK_MORE_SPECIFIC = "Please ask a more specific question with keywords found in your documents."

QUESTION_STOP_WORDS = frozenset(
    {"what", "where", "when", "who", "how", "does", "this", "that", "with", "from"}
)

MAX_SOURCES = 3

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")
_PUNCTUATION_RE = re.compile(r"[?.,!]")
_MIN_SENTENCE_CHARS = 20


@dataclass(frozen=True)
class RelevanceProfile:
    """Tunable weights and segmentation rules for one engine flavour."""
    segmentation: Literal["sentence", "paragraph"] = "sentence"
    stop_words: frozenset[str] = field(default_factory=frozenset)
    strip_punctuation: bool = False
    min_keyword_length: int = 3
    keyword_weight: int = 3
    word_match_weight: int = 0
    phrase_bonus: int = 10
    phrase_chars: int = 15
    match_count_weight: int = 2
    excerpt_max_chars: int = 300
    combine_answer: bool = False
    unique_sources: bool = False
    answer_separator: str = "\n\n...\n\n"
    not_found_answer: str = (
        "I couldn't find specific information about your question in the uploaded documents."
    )


SERVER_PROFILE = RelevanceProfile()

LOCAL_PROFILE = RelevanceProfile(
    segmentation="paragraph",
    stop_words=QUESTION_STOP_WORDS,
    strip_punctuation=True,
    keyword_weight=1,
    word_match_weight=1,
    phrase_bonus=0,
    match_count_weight=0,
    combine_answer=True,
    unique_sources=True,
    not_found_answer="I couldn't find any information dealing with that in your uploaded documents.",
)


@dataclass(frozen=True)
class RelevanceResult:
    """Outcome of a relevance search."""
    answer: str
    sources: list[SourceExcerpt]
    primary_document: str | None = None


def split_sentences(content: str) -> list[str]:
    """Split text on sentence punctuation and keep spans longer than 20 chars."""
    spans = (span.strip() for span in _SENTENCE_SPLIT_RE.split(content))
    return [span for span in spans if len(span) > _MIN_SENTENCE_CHARS]


def split_paragraphs(content: str) -> list[str]:
    """Split text on blank lines."""
    spans = (span.strip() for span in _PARAGRAPH_SPLIT_RE.split(content))
    return [span for span in spans if span]


def count_word_matches(keyword: str, text: str) -> int:
    """Count whole-word occurrences of a keyword in already lower-cased text."""
    return len(re.findall(rf"\b{re.escape(keyword)}\b", text))


def truncate(text: str, limit: int) -> str:
    return text.strip()[:limit]


@dataclass(frozen=True)
class LexicalRelevanceEngine:
    """Rank document units against a question using keyword overlap."""
    profile: RelevanceProfile = SERVER_PROFILE

    def extract_keywords(self, question: str) -> list[str]:
        """Return usable question keywords in order of appearance."""
        lowered = question.lower()
        if self.profile.strip_punctuation:
            lowered = _PUNCTUATION_RE.sub("", lowered)
        return [
            token
            for token in lowered.split()
            if len(token) > self.profile.min_keyword_length
            and token not in self.profile.stop_words
        ]

    def segment(self, content: str) -> list[str]:
        if self.profile.segmentation == "paragraph":
            return split_paragraphs(content)
        return split_sentences(content)

    def score_unit(self, unit: str, keywords: list[str], question: str) -> tuple[int, int]:
        """Return ``(score, match_count)`` for a single unit."""
        profile = self.profile
        lowered = unit.lower()
        score = 0
        match_count = 0
        for keyword in keywords:
            if keyword not in lowered:
                continue
            score += profile.keyword_weight
            match_count += 1
            if profile.word_match_weight:
                score += profile.word_match_weight * count_word_matches(keyword, lowered)
        if profile.phrase_bonus:
            phrase = question.lower()[: profile.phrase_chars]
            if phrase and phrase in lowered:
                score += profile.phrase_bonus
        score += profile.match_count_weight * match_count
        return score, match_count

    def rank(self, question: str, documents: Iterable[Document]) -> list[MatchCandidate]:
        """Score every unit of every document and return positive matches, best first."""
        keywords = self.extract_keywords(question)
        if not keywords:
            return []
        candidates: list[MatchCandidate] = []
        for document in documents:
            for unit in self.segment(document.content):
                score, match_count = self.score_unit(unit, keywords, question)
                if score > 0:
                    candidates.append(
                        MatchCandidate(
                            document=document,
                            text=unit,
                            score=score,
                            match_count=match_count,
                        )
                    )
        # list.sort is stable, so exact ties keep document/unit order
        candidates.sort(key=lambda item: (-item.score, -item.match_count))
        return candidates

    def search(self, question: str, documents: Iterable[Document]) -> RelevanceResult:
        """Answer a question from the best matching units."""
        if not self.extract_keywords(question):
            return RelevanceResult(answer=ASK_MORE_SPECIFIC, sources=[])
        candidates = self.rank(question, documents)
        if not candidates:
            return RelevanceResult(answer=self.profile.not_found_answer, sources=[])
        top = candidates[:MAX_SOURCES]
        return RelevanceResult(
            answer=self._build_answer(top),
            sources=self._build_sources(top),
            primary_document=top[0].document.name,
        )

    def _build_answer(self, top: list[MatchCandidate]) -> str:
        limit = self.profile.excerpt_max_chars
        if self.profile.combine_answer:
            return self.profile.answer_separator.join(candidate.text.strip() for candidate in top)
        return truncate(top[0].text, limit)

    def _build_sources(self, top: list[MatchCandidate]) -> list[SourceExcerpt]:
        limit = self.profile.excerpt_max_chars
        sources: list[SourceExcerpt] = []
        seen: set[int | str] = set()
        for candidate in top:
            if self.profile.unique_sources:
                if candidate.document.id in seen:
                    continue
                seen.add(candidate.document.id)
            sources.append(
                SourceExcerpt(
                    document=candidate.document.name,
                    excerpt=truncate(candidate.text, limit),
                )
            )
        return sources
