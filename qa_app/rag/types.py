from __future__ import annotations

"""Core data types for documents, match candidates and answers."""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Document:
    """Uploaded text document held by a document store."""
    id: int | str
    name: str
    content: str
    size: int
    uploaded_at: datetime = field(default_factory=utc_now)
    filename: str | None = None
    path: str | None = None

    @property
    def stem(self) -> str:
        """Return the name up to the first dot, lower-cased."""
        return self.name.split(".")[0].lower()

    def to_record(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible record."""
        return {
            "id": self.id,
            "name": self.name,
            "content": self.content,
            "size": self.size,
            "uploadedAt": self.uploaded_at.isoformat(),
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Document":
        """Build a document from a persisted record."""
        raw_uploaded = record.get("uploadedAt")
        if isinstance(raw_uploaded, str) and raw_uploaded:
            uploaded_at = datetime.fromisoformat(raw_uploaded.replace("Z", "+00:00"))
        else:
            uploaded_at = utc_now()
        content = str(record.get("content") or "")
        return cls(
            id=record["id"],
            name=str(record.get("name") or ""),
            content=content,
            size=int(record.get("size") or len(content.encode("utf-8"))),
            uploaded_at=uploaded_at,
        )


@dataclass(frozen=True)
class MatchCandidate:
    """Scored sentence or paragraph taken from a document."""
    document: Document
    text: str
    score: int
    match_count: int


@dataclass(frozen=True)
class SourceExcerpt:
    """Document name paired with the excerpt that supports an answer."""
    document: str
    excerpt: str


class AnswerMethod(str, Enum):
    MODEL = "model"
    FALLBACK = "fallback_search"


@dataclass(frozen=True)
class AnswerResult:
    """Final answer with attributed sources."""
    answer: str
    sources: list[SourceExcerpt]
    confidence: float
    method: AnswerMethod

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["method"] = self.method.value
        return payload
