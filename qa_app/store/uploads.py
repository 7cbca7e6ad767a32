from __future__ import annotations

"""Upload directory holding the raw files behind server-side documents."""

import logging
import random
import time
from dataclasses import dataclass
from pathlib import Path

from qa_app.rag.errors import StorageIOError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredFile:
    filename: str
    path: Path


def unique_filename(original_name: str, fieldname: str = "file") -> str:
    """Return ``<field>-<epoch ms>-<random>`` keeping the original extension."""
    suffix = Path(original_name).suffix
    unique = f"{int(time.time() * 1000)}-{random.randint(0, 999_999_999)}"
    return f"{fieldname}-{unique}{suffix}"


@dataclass
class UploadDirectory:
    """Filesystem directory where uploaded files are written."""
    root: Path

    def resolve(self) -> Path:
        """Create the directory if needed and return it."""
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.error(
                "upload_dir_create_failed",
                extra={"path": str(self.root), "detail": str(exc)},
            )
        return self.root

    def save(self, original_name: str, data: bytes) -> StoredFile:
        """Write uploaded bytes under a unique name."""
        filename = unique_filename(original_name)
        path = self.resolve() / filename
        try:
            path.write_bytes(data)
        except OSError as exc:
            raise StorageIOError(f"Unable to store {original_name}: {exc}") from exc
        return StoredFile(filename=filename, path=path)

    def remove(self, path: Path | str | None) -> bool:
        """Delete a stored file; missing files are ignored."""
        if not path:
            return False
        target = Path(path)
        try:
            if not target.exists():
                return False
            target.unlink()
        except OSError as exc:
            raise StorageIOError(f"Unable to delete {target}: {exc}") from exc
        return True
