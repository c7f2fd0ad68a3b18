"""Heading-aware text chunking for Google Doc segments."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel

from gdocs_vector.ingestion.models import DocumentHeading, DocumentSegment

DEFAULT_CHUNK_SIZE = 1200
DEFAULT_OVERLAP = 200


class DocumentChunk(BaseModel):
    """One chunk of document text, ready for embedding."""

    content: str
    ordering: int
    heading: DocumentHeading | None = None


class _ChunkAccumulator:
    """Word buffer and emitted chunks for a single chunking pass."""

    def __init__(self, overlap: int) -> None:
        self.overlap = overlap
        self.words: list[str] = []
        self.heading: DocumentHeading | None = None
        self.chunks: list[DocumentChunk] = []

    def joined_length(self) -> int:
        return len(" ".join(self.words))

    def flush(self) -> None:
        if not self.words:
            return
        content = " ".join(self.words).strip()
        if not content:
            self.words = []
            return

        self.chunks.append(
            DocumentChunk(content=content, ordering=len(self.chunks), heading=self.heading)
        )
        # Carry the tail of the emitted chunk into the next one.
        if self.overlap > 0:
            self.words = content[-self.overlap :].split()
        else:
            self.words = []


def chunk_segments(
    segments: Iterable[DocumentSegment],
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_OVERLAP,
) -> list[DocumentChunk]:
    """Split *segments* into overlapping, heading-scoped chunks.

    Words are appended one at a time; a chunk is emitted as soon as the
    space-joined buffer reaches *chunk_size* characters, so a chunk can
    run over by up to one word.  A heading segment closes the current
    chunk before its own text starts a new one.

    Parameters
    ----------
    segments:
        Document segments in source order.
    chunk_size:
        Character-length threshold that triggers emission.
    overlap:
        Number of trailing characters of each chunk carried into the next.

    Returns
    -------
    list[DocumentChunk]
        Chunks with dense ``ordering`` starting at 0.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be greater than zero")
    if overlap < 0:
        raise ValueError("overlap must not be negative")

    acc = _ChunkAccumulator(overlap)
    for segment in segments:
        text = (segment.text or "").strip()
        if not text:
            continue

        if segment.heading is not None:
            acc.flush()
            acc.heading = segment.heading
            acc.words = []

        for word in text.split():
            acc.words.append(word)
            if acc.joined_length() >= chunk_size:
                acc.flush()

    acc.flush()
    return acc.chunks
