from __future__ import annotations

"""Helpers for the Streamlit UI: formatting and thin API calls."""

from typing import Any

import httpx

DEFAULT_API_URL = "http://localhost:9000"

_SIZE_UNITS = ["Bytes", "KB", "MB"]


def format_file_size(size: int) -> str:
    """Render a byte count as ``0 Bytes``, ``512 Bytes``, ``1.5 KB`` or ``2.25 MB``."""
    if size <= 0:
        return "0 Bytes"
    index = 0
    while size >= 1024 ** (index + 1) and index < len(_SIZE_UNITS) - 1:
        index += 1
    value = round(size / (1024**index), 2)
    if value == int(value):
        value = int(value)
    return f"{value} {_SIZE_UNITS[index]}"


def format_uploaded_at(value: str | None) -> str:
    """Trim an ISO timestamp to ``YYYY-MM-DD HH:MM``."""
    if not value:
        return ""
    return value.replace("T", " ")[:16]


def document_rows(documents: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Build display rows for a document list."""
    return [
        {
            "id": str(document.get("id", "")),
            "name": str(document.get("name", "")),
            "size": format_file_size(int(document.get("size") or 0)),
            "uploaded": format_uploaded_at(document.get("uploadedAt")),
        }
        for document in documents
    ]


def source_chips(sources: list[dict[str, Any]]) -> list[str]:
    """Return one chip label per distinct source document, in order."""
    seen: set[str] = set()
    chips: list[str] = []
    for source in sources:
        name = str(source.get("document", "")).strip()
        if not name or name in seen:
            continue
        seen.add(name)
        chips.append(name)
    return chips


def method_label(method: str | None) -> str:
    if method == "model":
        return "Answered by the language model"
    if method == "fallback_search":
        return "Answered by keyword search"
    return ""


def _url(api_url: str, path: str) -> str:
    return api_url.rstrip("/") + path


def fetch_documents(api_url: str, client: httpx.Client) -> list[dict[str, Any]]:
    response = client.get(_url(api_url, "/api/documents"))
    response.raise_for_status()
    return response.json()


def upload_document(
    api_url: str, client: httpx.Client, name: str, data: bytes, content_type: str | None
) -> httpx.Response:
    files = {"file": (name, data, content_type or "text/plain")}
    return client.post(_url(api_url, "/api/upload"), files=files)


def delete_document(api_url: str, client: httpx.Client, doc_id: str) -> httpx.Response:
    return client.delete(_url(api_url, f"/api/documents/{doc_id}"))


def ask_question(api_url: str, client: httpx.Client, question: str) -> httpx.Response:
    return client.post(_url(api_url, "/api/ask"), json={"question": question})


def health_check(api_url: str, client: httpx.Client) -> tuple[bool, str]:
    """Return backend health status and a human-readable message."""
    try:
        response = client.get(_url(api_url, "/api/health"))
    except httpx.HTTPError as exc:
        return False, f"API connection failed: {exc}"
    if response.status_code == 200:
        return True, "API is reachable."
    return False, f"API responded with status {response.status_code}."


def error_detail(response: httpx.Response) -> str:
    """Extract the error message from an API error response."""
    try:
        payload = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(payload, dict) and payload.get("detail"):
        return str(payload["detail"])
    return f"HTTP {response.status_code}"
