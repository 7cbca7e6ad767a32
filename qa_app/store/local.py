from __future__ import annotations

"""Locally persisted document store used by the standalone client mode."""

import json
import logging
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from qa_app.rag.errors import StorageIOError
from qa_app.rag.types import Document

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "qa_app_documents"


class DocumentPersistence(Protocol):
    """Key-value port used to load and save the document list."""

    def load(self) -> list[dict[str, Any]]:
        ...

    def save(self, records: list[dict[str, Any]]) -> None:
        ...


@dataclass
class MemoryPersistence:
    """Persistence port keeping records in a dict, mostly for tests."""
    data: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    key: str = DEFAULT_STORAGE_KEY

    def load(self) -> list[dict[str, Any]]:
        return [dict(record) for record in self.data.get(self.key, [])]

    def save(self, records: list[dict[str, Any]]) -> None:
        self.data[self.key] = [dict(record) for record in records]


@dataclass
class JsonFilePersistence:
    """Persistence port storing records under one key of a JSON file."""
    path: Path
    key: str = DEFAULT_STORAGE_KEY

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("Local store file must contain a JSON object")
        return data

    def load(self) -> list[dict[str, Any]]:
        """Load stored records; unreadable or corrupt files load as empty."""
        try:
            records = self._read_all().get(self.key) or []
        except (OSError, ValueError) as exc:
            logger.error(
                "local_store_load_failed",
                extra={"path": str(self.path), "detail": str(exc)},
            )
            return []
        if not isinstance(records, list):
            return []
        return [record for record in records if isinstance(record, dict)]

    def save(self, records: list[dict[str, Any]]) -> None:
        try:
            data = self._read_all()
        except (OSError, ValueError):
            data = {}
        data[self.key] = records
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as exc:
            raise StorageIOError(f"Unable to write {self.path}: {exc}") from exc


class LocalDocumentStore:
    """Document list mirrored to a persistence port after every mutation."""

    def __init__(self, persistence: DocumentPersistence) -> None:
        self.persistence = persistence
        self.documents: list[Document] = []
        for record in persistence.load():
            try:
                self.documents.append(Document.from_record(record))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("local_record_skipped", extra={"detail": str(exc)})

    def add(self, name: str, content: str, size: int | None = None) -> Document:
        document = Document(
            id=uuid.uuid4().hex,
            name=name,
            content=content,
            size=len(content.encode("utf-8")) if size is None else size,
        )
        self.documents.append(document)
        self._persist()
        return document

    def list(self) -> list[Document]:
        return list(self.documents)

    def get(self, doc_id: int | str) -> Document | None:
        for document in self.documents:
            if document.id == doc_id:
                return document
        return None

    def delete(self, doc_id: int | str) -> Document | None:
        """Remove a document by id; unknown ids leave the store untouched."""
        document = self.get(doc_id)
        if document is None:
            return None
        self.documents.remove(document)
        self._persist()
        return document

    def _persist(self) -> None:
        try:
            self.persistence.save([document.to_record() for document in self.documents])
        except StorageIOError as exc:
            logger.error("local_store_save_failed", extra={"detail": str(exc)})
