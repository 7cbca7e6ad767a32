from __future__ import annotations

"""In-memory document store backing the HTTP service."""

import itertools
import logging
from dataclasses import dataclass, field

from qa_app.rag.errors import StorageIOError
from qa_app.rag.types import Document
from qa_app.store.uploads import UploadDirectory

logger = logging.getLogger(__name__)


@dataclass
class InMemoryDocumentStore:
    """Process-local list of documents; cleared on restart.

    Not guarded against concurrent writers: uploads and deletes from
    overlapping requests may interleave.
    """
    uploads: UploadDirectory | None = None
    documents: list[Document] = field(default_factory=list)
    _ids: itertools.count = field(default_factory=lambda: itertools.count(1), repr=False)

    def add(
        self,
        name: str,
        content: str,
        size: int,
        filename: str | None = None,
        path: str | None = None,
    ) -> Document:
        """Assign an id, append the document and return it."""
        document = Document(
            id=next(self._ids),
            name=name,
            content=content,
            size=size,
            filename=filename,
            path=path,
        )
        self.documents.append(document)
        return document

    def list(self) -> list[Document]:
        return list(self.documents)

    def get(self, doc_id: int | str) -> Document | None:
        for document in self.documents:
            if document.id == doc_id:
                return document
        return None

    def delete(self, doc_id: int | str) -> Document | None:
        """Remove a document and its stored file; unknown ids are a no-op."""
        document = self.get(doc_id)
        if document is None:
            return None
        self.documents.remove(document)
        if self.uploads is not None and document.path:
            try:
                self.uploads.remove(document.path)
            except StorageIOError as exc:
                logger.error(
                    "upload_file_delete_failed",
                    extra={"document_id": document.id, "detail": str(exc)},
                )
        return document
