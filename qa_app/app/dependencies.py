from __future__ import annotations

from functools import lru_cache

from qa_app.app.settings import settings
from qa_app.rag.llm import CompletionClient, build_completion_client
from qa_app.rag.relevance import SERVER_PROFILE, LexicalRelevanceEngine
from qa_app.rag.service import AnswerService
from qa_app.store.memory import InMemoryDocumentStore
from qa_app.store.uploads import UploadDirectory


@lru_cache
def get_upload_directory() -> UploadDirectory:
    uploads = UploadDirectory(settings.upload_dir)
    uploads.resolve()
    return uploads


@lru_cache
def get_document_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore(uploads=get_upload_directory())


@lru_cache
def get_completion_client() -> CompletionClient:
    return build_completion_client(
        settings.provider,
        openai_api_key=settings.openai_api_key,
        openai_base_url=settings.openai_base_url,
        openai_model=settings.openai_chat_model,
        ollama_base_url=settings.ollama_base_url,
        ollama_model=settings.ollama_model,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
        timeout=settings.llm_timeout,
    )


@lru_cache
def get_answer_service() -> AnswerService:
    return AnswerService(
        client=get_completion_client(),
        engine=LexicalRelevanceEngine(SERVER_PROFILE),
    )


def reset_caches() -> None:
    """Drop cached stores and clients so the next request builds fresh ones."""
    get_answer_service.cache_clear()
    get_completion_client.cache_clear()
    get_document_store.cache_clear()
    get_upload_directory.cache_clear()
