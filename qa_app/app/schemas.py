from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from qa_app.rag.types import AnswerResult, Document


class AskRequest(BaseModel):
    question: str | None = None


class SourceOut(BaseModel):
    document: str
    excerpt: str


class AskResponse(BaseModel):
    question: str
    answer: str
    sources: list[SourceOut]
    confidence: float
    method: str

    @classmethod
    def from_result(cls, question: str, result: AnswerResult) -> "AskResponse":
        return cls(
            question=question,
            answer=result.answer,
            sources=[
                SourceOut(document=source.document, excerpt=source.excerpt)
                for source in result.sources
            ],
            confidence=result.confidence,
            method=result.method.value,
        )


class DocumentOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int | str
    name: str
    filename: str | None = None
    size: int
    content: str
    uploaded_at: datetime = Field(alias="uploadedAt")

    @classmethod
    def from_document(cls, document: Document) -> "DocumentOut":
        return cls(
            id=document.id,
            name=document.name,
            filename=document.filename,
            size=document.size,
            content=document.content,
            uploaded_at=document.uploaded_at,
        )


class UploadResponse(BaseModel):
    message: str
    document: DocumentOut


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str
