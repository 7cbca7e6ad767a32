from __future__ import annotations

"""Streamlit UI for uploading documents and asking questions about them.

Server mode talks to the FastAPI backend; local mode keeps documents in a
JSON file on this machine and answers with keyword search only.
"""

from typing import Any

import httpx
import streamlit as st

from qa_app.app.settings import settings
from qa_app.loaders.text import decode_text_bytes
from qa_app.rag.errors import ValidationError
from qa_app.rag.service import LocalAnswerService
from qa_app.store.local import JsonFilePersistence, LocalDocumentStore
from qa_app.ui.helpers import (
    DEFAULT_API_URL,
    ask_question,
    delete_document,
    document_rows,
    error_detail,
    fetch_documents,
    format_file_size,
    health_check,
    method_label,
    source_chips,
    upload_document,
)


@st.cache_resource
def _local_store() -> LocalDocumentStore:
    return LocalDocumentStore(JsonFilePersistence(settings.local_store_path))


def _render_answer(payload: dict[str, Any]) -> None:
    """Render answer text, method caption and source chips."""
    st.subheader("Answer")
    st.write(payload.get("answer", ""))
    label = method_label(payload.get("method"))
    if label:
        st.caption(f"{label} (confidence {payload.get('confidence', 0):.2f})")
    sources = payload.get("sources") or []
    chips = source_chips(sources)
    if chips:
        st.markdown("**Sources:** " + " ".join(f"`{chip}`" for chip in chips))
    for source in sources:
        with st.expander(source.get("document", "")):
            st.write(source.get("excerpt", ""))


def _render_server_mode(api_url: str, timeout: float | None) -> None:
    with httpx.Client(timeout=timeout) as client:
        uploaded = st.file_uploader("Upload a text document", type=["txt", "md", "json", "csv"])
        if st.button("Upload", disabled=uploaded is None) and uploaded is not None:
            response = upload_document(
                api_url, client, uploaded.name, uploaded.getvalue(), uploaded.type
            )
            if response.status_code == 200:
                st.success("File uploaded successfully")
            else:
                st.error(error_detail(response))

        try:
            documents = fetch_documents(api_url, client)
        except httpx.HTTPError as exc:
            st.error(f"API connection failed: {exc}")
            return

        st.subheader(f"Documents ({len(documents)})")
        for row in document_rows(documents):
            left, right = st.columns([5, 1])
            left.markdown(f"**{row['name']}** · {row['size']} · {row['uploaded']}")
            if right.button("Delete", key=f"delete-{row['id']}"):
                response = delete_document(api_url, client, row["id"])
                if response.status_code == 200:
                    st.rerun()
                st.error(error_detail(response))

        question = st.text_area("Question", placeholder="Ask something about your documents...")
        if st.button("Get Answer", type="primary"):
            try:
                response = ask_question(api_url, client, question)
            except httpx.HTTPError as exc:
                st.error(f"API connection failed: {exc}")
                return
            if response.status_code != 200:
                st.error(error_detail(response))
                return
            _render_answer(response.json())


def _render_local_mode() -> None:
    store = _local_store()
    uploaded = st.file_uploader("Add a text document", type=["txt", "md", "json", "csv"])
    if st.button("Add", disabled=uploaded is None) and uploaded is not None:
        data = uploaded.getvalue()
        store.add(uploaded.name, decode_text_bytes(data), size=len(data))
        st.success("File processed and stored locally!")

    documents = store.list()
    st.subheader(f"Documents ({len(documents)})")
    for document in documents:
        left, right = st.columns([5, 1])
        left.markdown(f"**{document.name}** · {format_file_size(document.size)}")
        if right.button("Delete", key=f"delete-{document.id}"):
            store.delete(document.id)
            st.rerun()

    question = st.text_area("Question", placeholder="Ask something about your documents...")
    if st.button("Get Answer", type="primary"):
        try:
            result = LocalAnswerService().answer(question, documents)
        except ValidationError as exc:
            st.warning(str(exc))
            return
        _render_answer(result.to_dict())


st.set_page_config(page_title="Private Document Q&A", layout="wide")
st.title("Private Document Q&A")
st.caption("Answers come only from the documents you upload.")

with st.sidebar:
    st.header("Mode")
    mode = st.radio("Answer with", ["Server", "Local"], index=0)
    api_url = st.text_input("API base URL", value=DEFAULT_API_URL)
    request_timeout = st.number_input(
        "Request timeout (seconds, 0 = no timeout)",
        min_value=0,
        max_value=3600,
        value=60,
        step=5,
    )
    if mode == "Server" and st.button("Health Check"):
        with httpx.Client(timeout=5.0) as health_client:
            ok, message = health_check(api_url, health_client)
        if ok:
            st.success(message)
        else:
            st.error(message)

if mode == "Server":
    _render_server_mode(api_url, None if request_timeout == 0 else float(request_timeout))
else:
    _render_local_mode()

st.divider()
st.caption("Tip: Start the API with `uvicorn qa_app.app.main:app --port 9000`.")
