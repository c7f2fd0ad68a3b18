"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_PORT = 8080


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # Service
    app_env: Literal["development", "test", "production"] = "development"
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    log_level: str = Field(default="", description="Root log level; derived from app_env when empty")

    # Google Drive / Docs
    google_drive_watch_folder_id: str = Field(
        default="", description="Drive folder whose files may be ingested (empty = any)"
    )
    google_drive_webhook_secret: str = Field(
        default="", description="Expected X-Goog-Channel-Token value on webhook calls"
    )
    google_service_account_email: str = ""
    google_service_account_key: str = Field(
        default="", description="PEM private key, service-account JSON, or base64-encoded JSON"
    )
    google_pubsub_topic: str = ""

    # Vector store
    vector_store_backend: Literal["auto", "supabase", "postgres", "chroma", "noop"] = "auto"
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_anon_key: str = ""
    supabase_direct_url: str = Field(default="", description="Direct Postgres connection string")
    supabase_schema: str = "public"
    supabase_document_table: str = "documents"
    supabase_chunk_table: str = "document_chunks"
    supabase_match_function: str = "match_document_chunks"
    supabase_embedding_dimensions: int = 1536

    chroma_host: str = "localhost"
    chroma_port: int = 8000
    chroma_collection: str = "document_chunks"

    # Embedding
    embedding_provider: str = Field(default="openai", description="openai | huggingface | hash")
    openai_api_key: str = ""
    openai_embedding_model: str = "text-embedding-3-small"
    openai_base_url: str = ""
    embedding_batch_size: int = 64
    huggingface_embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2"

    ingestion_queue_name: str = "google-docs-ingest"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @field_validator("port", mode="before")
    @classmethod
    def _normalise_port(cls, value: object) -> int:
        try:
            port = int(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return DEFAULT_PORT
        return port if port > 0 else DEFAULT_PORT

    @field_validator("app_env", mode="before")
    @classmethod
    def _normalise_env(cls, value: object) -> str:
        if value in ("test", "production"):
            return value  # type: ignore[return-value]
        return "development"

    @property
    def effective_log_level(self) -> str:
        if self.log_level:
            return self.log_level.upper()
        return "WARNING" if self.app_env == "test" else "INFO"


# Singleton — import `settings` wherever needed.
settings = Settings()
