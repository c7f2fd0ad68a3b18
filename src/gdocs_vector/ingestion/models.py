"""Domain models for fetched documents and ingestion requests."""

from __future__ import annotations

from pydantic import BaseModel, Field


class DocumentHeading(BaseModel):
    """A heading normalised from the source document's paragraph style.

    Attributes
    ----------
    level:
        Heading depth (``HEADING_2`` → ``2``).
    text:
        The heading paragraph's text.
    id:
        Stable anchor id, used to deep-link into the document.
    """

    level: int = Field(gt=0)
    text: str
    id: str | None = None


class DocumentSegment(BaseModel):
    """A contiguous block of text (paragraph or table cell) in source order."""

    text: str
    heading: DocumentHeading | None = None


class DocumentContent(BaseModel):
    """Result of fetching one Google Doc, rebuilt on every ingestion."""

    document_id: str
    title: str
    revision_id: str | None = None
    version: str | None = None
    modified_time: str | None = None
    text: str = ""
    segments: list[DocumentSegment] = Field(default_factory=list)


class IngestionRequest(BaseModel):
    """A request to (re)ingest one document, usually from a Drive webhook."""

    file_id: str = ""
    resource_id: str | None = None
    resource_state: str | None = None
    message_number: str | None = None
    history_id: str | None = None


class IngestionResult(BaseModel):
    """Outcome of a completed ingestion cycle."""

    document_id: str
    chunk_count: int
