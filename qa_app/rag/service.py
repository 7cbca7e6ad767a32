from __future__ import annotations

"""Answer orchestration: remote model first, keyword fallback on any failure."""

import hashlib
import logging
from dataclasses import dataclass, field
from typing import Sequence

from qa_app.rag.attribution import attribute_sources
from qa_app.rag.errors import UpstreamModelError, ValidationError
from qa_app.rag.llm import CompletionClient, build_system_prompt
from qa_app.rag.relevance import LOCAL_PROFILE, SERVER_PROFILE, LexicalRelevanceEngine
from qa_app.rag.types import AnswerMethod, AnswerResult, Document

logger = logging.getLogger(__name__)

MODEL_CONFIDENCE = 0.95
FALLBACK_CONFIDENCE = 0.7


def validate_question(question: str | None, documents: Sequence[Document]) -> str:
    """Reject blank questions and empty document sets before any work is done."""
    if question is None or not question.strip():
        raise ValidationError("Question is required")
    if not documents:
        raise ValidationError("No documents uploaded")
    return question


def question_hash(question: str) -> str:
    return hashlib.sha256(question.encode("utf-8")).hexdigest()[:16]


@dataclass
class AnswerService:
    """Answer questions with a completion client, degrading to keyword search."""
    client: CompletionClient
    engine: LexicalRelevanceEngine = field(
        default_factory=lambda: LexicalRelevanceEngine(SERVER_PROFILE)
    )
    model_confidence: float = MODEL_CONFIDENCE
    fallback_confidence: float = FALLBACK_CONFIDENCE

    async def answer(self, question: str | None, documents: Sequence[Document]) -> AnswerResult:
        """Answer a question over the given documents; only ValidationError escapes."""
        question = validate_question(question, documents)
        documents = list(documents)
        system_prompt = build_system_prompt(documents)
        logger.info(
            "llm_request_started",
            extra={
                "question_hash": question_hash(question),
                "documents": len(documents),
                "prompt_length": len(system_prompt),
            },
        )
        try:
            answer = await self.client.complete(system_prompt, question)
        except UpstreamModelError as exc:
            logger.warning("llm_request_failed", extra={"detail": str(exc)})
            return self.fallback(question, documents)
        except Exception as exc:
            logger.exception("llm_request_crashed", extra={"error_type": type(exc).__name__})
            return self.fallback(question, documents)

        sources = attribute_sources(question, answer, documents)
        logger.info(
            "model_answer_generated",
            extra={"answer_length": len(answer), "sources": len(sources)},
        )
        return AnswerResult(
            answer=answer,
            sources=sources,
            confidence=self.model_confidence,
            method=AnswerMethod.MODEL,
        )

    def fallback(self, question: str, documents: Sequence[Document]) -> AnswerResult:
        """Answer with the keyword engine."""
        result = self.engine.search(question, documents)
        logger.info(
            "fallback_answer_generated",
            extra={
                "sources": len(result.sources),
                "primary_document": result.primary_document,
            },
        )
        return AnswerResult(
            answer=result.answer,
            sources=result.sources,
            confidence=self.fallback_confidence,
            method=AnswerMethod.FALLBACK,
        )


@dataclass
class LocalAnswerService:
    """Answer questions from locally held documents with the keyword engine only."""
    engine: LexicalRelevanceEngine = field(
        default_factory=lambda: LexicalRelevanceEngine(LOCAL_PROFILE)
    )
    confidence: float = FALLBACK_CONFIDENCE

    def answer(self, question: str | None, documents: Sequence[Document]) -> AnswerResult:
        question = validate_question(question, documents)
        result = self.engine.search(question, documents)
        return AnswerResult(
            answer=result.answer,
            sources=result.sources,
            confidence=self.confidence,
            method=AnswerMethod.FALLBACK,
        )
