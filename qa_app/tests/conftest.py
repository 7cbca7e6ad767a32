from __future__ import annotations

"""Shared pytest fixtures and test environment defaults."""

import os
import sys
import tempfile
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ["QA_LLM_PROVIDER"] = "none"
os.environ.pop("OPENAI_API_KEY", None)
os.environ.setdefault("QA_UPLOAD_DIR", tempfile.mkdtemp(prefix="qa-app-uploads-"))
os.environ.setdefault("QA_METRICS_ENABLED", "true")
os.environ.setdefault("QA_LOCAL_STORE_PATH", str(Path(tempfile.mkdtemp()) / "documents.json"))

from qa_app.rag.types import Document  # noqa: E402

POLICY_CONTENT = (
    "Vacation requests must be submitted 2 weeks in advance. "
    "Approval is manager discretion."
)


@pytest.fixture
def policy_document() -> Document:
    return Document(id=1, name="policy.txt", content=POLICY_CONTENT, size=len(POLICY_CONTENT))


@pytest.fixture
def handbook_documents(policy_document: Document) -> list[Document]:
    expenses = (
        "Expense reports are due on the fifth business day of each month. "
        "Receipts are required for every purchase above twenty dollars."
    )
    security = (
        "Laptops must be locked whenever they are left unattended in the office. "
        "Passwords are rotated every ninety days by the security team."
    )
    return [
        policy_document,
        Document(id=2, name="expenses.md", content=expenses, size=len(expenses)),
        Document(id=3, name="security.txt", content=security, size=len(security)),
    ]


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
