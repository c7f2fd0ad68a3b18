"""Unit tests for the chunker module."""

import pytest

from gdocs_vector.ingestion.chunker import chunk_segments
from gdocs_vector.ingestion.models import DocumentHeading, DocumentSegment


def _words(n: int, prefix: str = "word") -> str:
    return " ".join(f"{prefix}{i}" for i in range(n))


def test_short_document_yields_single_chunk() -> None:
    """Text shorter than chunk_size becomes exactly one chunk."""
    chunks = chunk_segments([DocumentSegment(text="Intro text")], chunk_size=1200)
    assert len(chunks) == 1
    assert chunks[0].content == "Intro text"
    assert chunks[0].ordering == 0
    assert chunks[0].heading is None


def test_empty_input() -> None:
    """An empty list should return an empty list."""
    assert chunk_segments([]) == []


def test_whitespace_only_segments_yield_nothing() -> None:
    segments = [DocumentSegment(text="   "), DocumentSegment(text="\n\t"), DocumentSegment(text="")]
    assert chunk_segments(segments) == []


@pytest.mark.parametrize("chunk_size", [0, -5])
def test_non_positive_chunk_size_raises(chunk_size: int) -> None:
    with pytest.raises(ValueError, match="chunk_size"):
        chunk_segments([DocumentSegment(text="x")], chunk_size=chunk_size)


def test_long_text_is_split() -> None:
    """A segment longer than chunk_size should be split."""
    chunks = chunk_segments([DocumentSegment(text=_words(300))], chunk_size=200, overlap=0)
    assert len(chunks) > 1


def test_ordering_is_dense_and_content_non_empty() -> None:
    segments = [
        DocumentSegment(text=_words(120, "a")),
        DocumentSegment(text="  "),
        DocumentSegment(text="B", heading=DocumentHeading(level=2, text="B")),
        DocumentSegment(text=_words(90, "b")),
    ]
    chunks = chunk_segments(segments, chunk_size=150, overlap=40)
    assert [c.ordering for c in chunks] == list(range(len(chunks)))
    assert all(c.content.strip() for c in chunks)


def test_chunk_may_exceed_size_by_one_word() -> None:
    """Flush happens after the word that crosses the threshold, never mid-word."""
    text = "aaaa bbbb cccccccccc dddd"
    chunks = chunk_segments([DocumentSegment(text=text)], chunk_size=12, overlap=0)
    assert chunks[0].content == "aaaa bbbb cccccccccc"
    assert chunks[1].content == "dddd"


def test_no_overlap_means_disjoint_chunks() -> None:
    chunks = chunk_segments([DocumentSegment(text=_words(60))], chunk_size=50, overlap=0)
    joined = " ".join(c.content for c in chunks)
    assert joined == _words(60)


def test_overlap_tail_reappears_in_next_chunk() -> None:
    """The tail of chunk k seeds the start of chunk k+1."""
    overlap = 20
    chunks = chunk_segments([DocumentSegment(text=_words(200))], chunk_size=100, overlap=overlap)
    assert len(chunks) >= 2
    for current, following in zip(chunks, chunks[1:]):
        carried = " ".join(current.content[-overlap:].split())
        assert following.content.startswith(carried)


def test_heading_propagates_until_next_heading() -> None:
    setup = DocumentHeading(level=1, text="Setup", id="h.setup")
    usage = DocumentHeading(level=2, text="Usage")
    segments = [
        DocumentSegment(text="Preamble before any heading."),
        DocumentSegment(text="Setup", heading=setup),
        DocumentSegment(text="Install things."),
        DocumentSegment(text="Usage", heading=usage),
        DocumentSegment(text="Run things."),
    ]
    chunks = chunk_segments(segments, chunk_size=1200, overlap=200)

    assert [c.content for c in chunks] == [
        "Preamble before any heading.",
        "Setup Install things.",
        "Usage Run things.",
    ]
    assert chunks[0].heading is None
    assert chunks[1].heading == setup
    assert chunks[2].heading == usage


def test_heading_flush_drops_overlap_carry() -> None:
    """Text after a heading never starts with overlap from the previous section."""
    segments = [
        DocumentSegment(text="alpha beta gamma"),
        DocumentSegment(text="Next", heading=DocumentHeading(level=1, text="Next")),
    ]
    chunks = chunk_segments(segments, chunk_size=1200, overlap=200)
    assert chunks[1].content == "Next"


def test_first_heading_with_long_section() -> None:
    """Leading heading: the pre-heading flush is a no-op and every chunk carries the heading."""
    heading = DocumentHeading(level=1, text="Setup")
    segments = [
        DocumentSegment(text="Setup", heading=heading),
        DocumentSegment(text=" ".join(["step one step two"] * 60)),
    ]
    chunks = chunk_segments(segments, chunk_size=200, overlap=50)
    assert len(chunks) > 1
    assert chunks[0].ordering == 0
    assert all(c.heading == heading for c in chunks)


def test_defaults_match_documented_values() -> None:
    text = _words(400)
    chunks = chunk_segments([DocumentSegment(text=text)])
    assert all(len(c.content) < 1200 + 20 for c in chunks)
    assert len(chunks) >= 2
