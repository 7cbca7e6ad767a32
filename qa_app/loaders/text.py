from __future__ import annotations

"""Plain text loading for uploaded and local documents."""

import asyncio
from pathlib import Path

from qa_app.rag.errors import StorageIOError

TEXT_SUFFIXES = {".txt", ".text", ".md", ".markdown", ".json", ".csv"}


def decode_text_bytes(data: bytes) -> str:
    """Decode uploaded bytes as UTF-8, replacing undecodable sequences."""
    return data.decode("utf-8", errors="replace")


def load_text_file(path: Path) -> str:
    """Read a text file from disk."""
    try:
        return decode_text_bytes(path.read_bytes())
    except OSError as exc:
        raise StorageIOError(f"Unable to read {path}: {exc}") from exc


async def read_text_file(path: Path) -> str:
    """Read a text file in a worker thread."""
    return await asyncio.to_thread(load_text_file, path)


def collect_text_files(paths: list[Path]) -> list[Path]:
    """Expand directories into their text files, keeping explicit files as given."""
    collected: list[Path] = []
    for path in paths:
        if path.is_dir():
            collected.extend(
                sorted(
                    child
                    for child in path.rglob("*")
                    if child.is_file() and child.suffix.lower() in TEXT_SUFFIXES
                )
            )
        else:
            collected.append(path)
    return collected
