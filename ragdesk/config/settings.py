"""Application settings loaded from environment variables via pydantic-settings.

Two sources, in priority order:

  1. Environment variables, e.g. ``OLLAMA_BASE_URL=http://gpu-box:11434``
  2. A ``.env`` file in the working directory

Field ``chat_model`` maps to env var ``CHAT_MODEL`` and so on.  Defaults
apply when neither source provides a value.
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """ragdesk application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Model runtime (Ollama) ===
    ollama_base_url: str = "http://localhost:11434"
    chat_model: str = "deepseek-r1"
    embedding_model: str = "nomic-embed-text"
    chat_num_ctx: int = 4096
    chat_temperature: float = 0.7
    chat_keep_alive: str = "60m"
    chat_timeout_seconds: float = 300.0
    embedding_timeout_seconds: float = 60.0

    # === Ingestion ===
    chunk_size: int = Field(default=500, gt=0)
    chunk_overlap: int = Field(default=100, ge=0)
    # 1 = embed chunks one after another
    embedding_concurrency: int = Field(default=1, ge=1)
    upload_dir: str = "data/uploads"
    max_upload_bytes: int = 50 * 1024 * 1024

    # === Retrieval ===
    vector_store_path: str = "data/vectors/store.json"
    rag_top_k: int = Field(default=5, gt=0)
    rag_min_similarity: float = 0.3

    # === Conversations ===
    conversation_db_path: str = "data/conversations.db"
    history_limit: int = Field(default=20, gt=0)

    # === Tools ===
    tools_enabled: bool = False
    plugin_root_dir: str = "data/files"

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _check_chunk_window(self) -> "Settings":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")
        return self
