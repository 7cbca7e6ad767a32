from __future__ import annotations

"""CLI utility to ask a question over local text files with keyword search."""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from qa_app.loaders.text import collect_text_files, read_text_file
from qa_app.rag.errors import StorageIOError, ValidationError
from qa_app.rag.relevance import LOCAL_PROFILE, SERVER_PROFILE, LexicalRelevanceEngine
from qa_app.rag.service import LocalAnswerService
from qa_app.rag.types import Document

PROFILES = {"local": LOCAL_PROFILE, "server": SERVER_PROFILE}


async def load_documents(paths: list[Path]) -> list[Document]:
    """Read every file concurrently and wrap it as a document."""
    files = collect_text_files(paths)
    contents = await asyncio.gather(*(read_text_file(path) for path in files))
    return [
        Document(id=index, name=path.name, content=content, size=len(content.encode("utf-8")))
        for index, (path, content) in enumerate(zip(files, contents), start=1)
    ]


def main() -> None:
    """Answer one question from the given files or directories."""
    parser = argparse.ArgumentParser(description="Ask a question over local text documents.")
    parser.add_argument("question", help="Question to answer.")
    parser.add_argument("paths", nargs="+", type=Path, help="Files or directories to search.")
    parser.add_argument(
        "--profile",
        choices=sorted(PROFILES),
        default="local",
        help="Segmentation and scoring profile.",
    )
    parser.add_argument("--json", action="store_true", help="Print the result as JSON.")
    args = parser.parse_args()

    try:
        documents = asyncio.run(load_documents(args.paths))
    except StorageIOError as exc:
        raise SystemExit(str(exc)) from exc

    service = LocalAnswerService(engine=LexicalRelevanceEngine(PROFILES[args.profile]))
    try:
        result = service.answer(args.question, documents)
    except ValidationError as exc:
        raise SystemExit(str(exc)) from exc

    if args.json:
        json.dump(result.to_dict(), sys.stdout, indent=2)
        print()
        return
    print(result.answer)
    for source in result.sources:
        print(f"\n[{source.document}] {source.excerpt}")


if __name__ == "__main__":
    main()
