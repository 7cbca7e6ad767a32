from __future__ import annotations

"""Remote completion clients and the document-grounded system prompt."""

from dataclasses import dataclass
import logging
from typing import Protocol, Sequence

import httpx

from qa_app.rag.errors import UpstreamModelError
from qa_app.rag.types import Document

logger = logging.getLogger(__name__)


_SYSTEM_PROMPT_TEMPLATE = """You are a document-focused assistant. Your job is to answer questions ONLY based on the provided documents.

CRITICAL RULES:
1. ONLY use information directly from the documents below
2. Do NOT use any external knowledge or training data
3. Always cite the specific document name that contains your answer
4. If information is not in ANY document, say: "This information is not available in the provided documents."
5. Quote directly from the documents when possible
6. Format your answer as: "According to [DOCUMENT NAME]: [your answer]"
7. Be precise and factual - quote exact text when relevant

DOCUMENTS:
{documents}

Remember: Use ONLY the document content to answer. No external knowledge. Always include document name in your answer."""


def build_document_block(documents: Sequence[Document]) -> str:
    """Concatenate documents with a marker line naming each one."""
    parts: list[str] = []
    for document in documents:
        parts.append(f"\n========== Document: {document.name} ==========\n")
        parts.append(document.content + "\n")
    return "".join(parts)


def build_system_prompt(documents: Sequence[Document]) -> str:
    """Return the system prompt that restricts the model to the given documents."""
    return _SYSTEM_PROMPT_TEMPLATE.format(documents=build_document_block(documents))


class CompletionClient(Protocol):
    """Anything that turns a system prompt and a user message into text."""

    async def complete(self, system_prompt: str, user_message: str) -> str:
        ...


@dataclass(frozen=True)
class OpenAICompletionClient:
    """Completion client backed by OpenAI-compatible chat completions."""
    api_key: str
    base_url: str
    model: str
    temperature: float
    max_tokens: int
    timeout: float
    http_client: httpx.AsyncClient | None = None

    async def complete(self, system_prompt: str, user_message: str) -> str:
        """Request a chat completion and return the message content."""
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        data = await _post_json(
            f"{self.base_url}/chat/completions",
            payload,
            headers=headers,
            timeout=self.timeout,
            client=self.http_client,
        )
        choices = data.get("choices") or []
        if not choices:
            raise UpstreamModelError("Invalid OpenAI response")
        message = choices[0].get("message") or {}
        content = message.get("content")
        if not isinstance(content, str) or not content.strip():
            raise UpstreamModelError("Invalid OpenAI response content")
        return content


@dataclass(frozen=True)
class OllamaCompletionClient:
    """Completion client backed by the Ollama chat API."""
    base_url: str
    model: str
    temperature: float
    max_tokens: int
    timeout: float
    http_client: httpx.AsyncClient | None = None

    async def complete(self, system_prompt: str, user_message: str) -> str:
        """Request a chat completion from Ollama."""
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
            "stream": False,
            "options": {
                "temperature": self.temperature,
                "num_predict": self.max_tokens,
            },
        }
        data = await _post_json(
            f"{self.base_url}/api/chat",
            payload,
            headers={},
            timeout=self.timeout,
            client=self.http_client,
        )
        message = data.get("message") or {}
        content = message.get("content")
        if not isinstance(content, str) or not content.strip():
            raise UpstreamModelError("Invalid LLM response")
        return content


@dataclass(frozen=True)
class DisabledCompletionClient:
    """Placeholder used when no model is configured; every call fails."""
    reason: str = "No completion provider configured"

    async def complete(self, system_prompt: str, user_message: str) -> str:
        raise UpstreamModelError(self.reason)


async def _post_json(
    url: str,
    payload: dict[str, object],
    *,
    headers: dict[str, str],
    timeout: float,
    client: httpx.AsyncClient | None,
) -> dict[str, object]:
    """POST a JSON payload and decode a JSON object response."""
    try:
        if client is not None:
            response = await client.post(url, json=payload, headers=headers, timeout=timeout)
            response.raise_for_status()
            data = response.json()
        else:
            async with httpx.AsyncClient(timeout=timeout) as owned:
                response = await owned.post(url, json=payload, headers=headers)
                response.raise_for_status()
                data = response.json()
    except httpx.HTTPStatusError as exc:
        raise UpstreamModelError(f"HTTP {exc.response.status_code} from {url}") from exc
    except httpx.HTTPError as exc:
        raise UpstreamModelError(str(exc) or type(exc).__name__) from exc
    except ValueError as exc:
        raise UpstreamModelError("LLM response is not valid JSON") from exc
    if not isinstance(data, dict):
        raise UpstreamModelError("LLM response is not a JSON object")
    return data


def build_completion_client(
    provider: str,
    *,
    openai_api_key: str | None,
    openai_base_url: str,
    openai_model: str,
    ollama_base_url: str,
    ollama_model: str,
    temperature: float,
    max_tokens: int,
    timeout: float,
) -> OpenAICompletionClient | OllamaCompletionClient | DisabledCompletionClient:
    """Factory for completion clients based on provider."""
    normalized = provider.strip().lower()
    if normalized == "openai":
        if not openai_api_key:
            logger.warning("llm_not_configured", extra={"provider": normalized})
            return DisabledCompletionClient("OPENAI_API_KEY is required for OpenAI provider")
        return OpenAICompletionClient(
            api_key=openai_api_key,
            base_url=openai_base_url.rstrip("/"),
            model=openai_model,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
        )
    if normalized == "ollama":
        return OllamaCompletionClient(
            base_url=ollama_base_url.rstrip("/"),
            model=ollama_model,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
        )
    if normalized not in {"none", "disabled", ""}:
        logger.warning("llm_provider_unknown", extra={"provider": normalized})
    return DisabledCompletionClient()
