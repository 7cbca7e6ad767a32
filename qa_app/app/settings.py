from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _default_upload_dir() -> str:
    # serverless hosts only allow writes under /tmp
    if os.getenv("VERCEL"):
        return str(Path("/tmp") / "uploads")
    return "uploads"


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes"}


@dataclass(frozen=True)
class Settings:
    llm_provider: str = os.getenv("QA_LLM_PROVIDER", "openai")
    openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
    openai_base_url: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    openai_chat_model: str = os.getenv("OPENAI_CHAT_MODEL", "gpt-3.5-turbo")
    ollama_base_url: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
    ollama_model: str = os.getenv("OLLAMA_MODEL", "llama3")
    llm_temperature: float = float(os.getenv("QA_LLM_TEMPERATURE", "0.3"))
    llm_max_tokens: int = int(os.getenv("QA_LLM_MAX_TOKENS", "600"))
    llm_timeout: float = float(os.getenv("QA_LLM_TIMEOUT", "30"))
    upload_dir_raw: str = os.getenv("QA_UPLOAD_DIR", _default_upload_dir())
    file_max_bytes: int = int(os.getenv("QA_FILE_MAX_BYTES", "5242880"))
    metrics_enabled: bool = _env_bool("QA_METRICS_ENABLED", "true")
    log_level: str = os.getenv("QA_LOG_LEVEL", "INFO")
    local_store_path_raw: str = os.getenv(
        "QA_LOCAL_STORE_PATH", str(Path.home() / ".qa_app" / "documents.json")
    )
    port: int = int(os.getenv("PORT", "9000"))

    @property
    def upload_dir(self) -> Path:
        return Path(os.getenv("QA_UPLOAD_DIR", self.upload_dir_raw)).expanduser()

    @property
    def local_store_path(self) -> Path:
        return Path(os.getenv("QA_LOCAL_STORE_PATH", self.local_store_path_raw)).expanduser()

    @property
    def provider(self) -> str:
        return os.getenv("QA_LLM_PROVIDER", self.llm_provider)


settings = Settings()
