"""FastAPI application: health, semantic search, and the Google Drive webhook."""

from __future__ import annotations

import json
import logging
import math
from typing import Any
from urllib.parse import urlparse

from fastapi import Body, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel, field_validator

from gdocs_vector.config import Settings
from gdocs_vector.config import settings as default_settings
from gdocs_vector.errors import EmbeddingDimensionError, EmbeddingError
from gdocs_vector.ingestion.models import IngestionRequest
from gdocs_vector.logging_utils import configure_logging
from gdocs_vector.services import AppServices, create_app_services

logger = logging.getLogger(__name__)


# ── Request / Response schemas ────────────────────────────────────────
class SearchRequest(BaseModel):
    """Free-text query with an optional result count."""

    query: str | None = None
    limit: int | None = None

    @field_validator("limit", mode="before")
    @classmethod
    def _finite_limit(cls, value: object) -> int | None:
        # Anything but a finite number means "use the default".
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        if not math.isfinite(value):
            return None
        return int(value)


class SearchResponse(BaseModel):
    results: list[dict[str, Any]]


# ── Helpers ───────────────────────────────────────────────────────────
def _error(status_code: int, code: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": code})


def _parse_json_object(raw: bytes) -> dict[str, Any] | None:
    if not raw:
        return None
    try:
        parsed = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return parsed if isinstance(parsed, dict) else None


def extract_file_id(body: dict[str, Any] | None, resource_uri: str | None) -> str | None:
    """Pick the document id from the payload, else the resource URI's last path segment."""
    if body:
        for key in ("fileId", "id", "resourceId"):
            value = body.get(key)
            if value is not None:
                if isinstance(value, str) and value:
                    return value
                break

    if resource_uri:
        segments = [s for s in urlparse(resource_uri).path.split("/") if s]
        if segments:
            return segments[-1]
    return None


# ── App factory ───────────────────────────────────────────────────────
def create_app(settings: Settings | None = None, services: AppServices | None = None) -> FastAPI:
    """Build the FastAPI app; *services* may be injected by tests."""
    settings = settings or default_settings
    configure_logging(settings.effective_log_level)

    app = FastAPI(
        title="Google Docs Vector Search API",
        version="0.1.0",
        description=(
            "Health checks, Google Drive ingestion webhooks, and semantic search "
            "over the vector store."
        ),
    )
    app.state.settings = settings
    app.state.services = services or create_app_services(settings)

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        logger.error("route error on %s %s", request.method, request.url.path, exc_info=exc)
        return _error(500, "internal_error")

    # ── Routes ────────────────────────────────────────────────────────
    @app.get("/healthz")
    async def health() -> dict[str, str]:
        """Liveness probe."""
        return {"status": "ok"}

    @app.post("/search", response_model=SearchResponse)
    def search(payload: SearchRequest | None = Body(default=None)) -> Any:
        """Embed the query and return the closest chunks."""
        if payload is None or not payload.query or not payload.query.strip():
            return _error(400, "missing_query")

        try:
            results = app.state.services.search.search(payload.query, limit=payload.limit)
        except (EmbeddingError, EmbeddingDimensionError):
            logger.exception("Query embedding failed")
            return _error(500, "embedding_failure")

        return {"results": [r.model_dump(by_alias=True) for r in results]}

    @app.post("/webhooks/google-drive", status_code=202)
    async def google_drive_webhook(request: Request) -> Any:
        """Re-ingest the document named by a Drive push notification."""
        secret = app.state.settings.google_drive_webhook_secret
        if secret and request.headers.get("x-goog-channel-token") != secret:
            return _error(401, "invalid_token")

        body = _parse_json_object(await request.body())
        file_id = extract_file_id(body, request.headers.get("x-goog-resource-uri"))
        if not file_id:
            return _error(400, "missing_file_id")

        ingestion_request = IngestionRequest(
            file_id=file_id,
            resource_id=request.headers.get("x-goog-resource-id"),
            resource_state=request.headers.get("x-goog-resource-state"),
            message_number=request.headers.get("x-goog-message-number"),
            history_id=request.headers.get("x-goog-changed"),
        )
        await run_in_threadpool(app.state.services.ingestion.enqueue, ingestion_request)
        return {"accepted": True, "fileId": file_id}

    return app


def main() -> None:
    """Run the service with uvicorn."""
    import uvicorn

    app = create_app()
    uvicorn.run(app, host=default_settings.host, port=default_settings.port, log_config=None)


if __name__ == "__main__":
    main()
