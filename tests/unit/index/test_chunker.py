"""Tests for TextChunker."""

from __future__ import annotations

import math

import pytest

from ragindex.errors import InvalidConfiguration
from ragindex.index.chunker import TextChunker
from ragindex.index.models import Chunk, Document


def _doc(text: str) -> Document:
    return Document(filename="doc.txt", content=text)


def test_chunker_default_settings():
    chunker = TextChunker()
    assert chunker.chunk_size == 500
    assert chunker.overlap_size == 150


@pytest.mark.parametrize(
    "chunk_size, overlap",
    [(4, 4), (4, 5), (10, 0), (10, -1), (0, 0)],
)
def test_chunker_rejects_invalid_config(chunk_size, overlap):
    with pytest.raises(InvalidConfiguration):
        TextChunker(chunk_size=chunk_size, overlap_size=overlap)


def test_invalid_configuration_is_value_error():
    with pytest.raises(ValueError):
        TextChunker(chunk_size=2, overlap_size=5)


def test_chunker_empty_document():
    assert TextChunker(4, 2).chunk(_doc("")) == []


def test_chunker_abcdefghij_scenario():
    chunks = TextChunker(chunk_size=4, overlap_size=2).chunk(_doc("ABCDEFGHIJ"))
    assert [(c.start_index, c.end_index, c.content) for c in chunks] == [
        (0, 4, "ABCD"),
        (2, 6, "CDEF"),
        (4, 8, "EFGH"),
        (6, 10, "GHIJ"),
        (8, 10, "IJ"),
    ]
    assert [c.chunk_index for c in chunks] == [0, 1, 2, 3, 4]


def test_chunker_short_text_single_chunk():
    chunks = TextChunker(chunk_size=500, overlap_size=150).chunk(_doc("Short text."))
    assert len(chunks) == 1
    assert chunks[0].start_index == 0
    assert chunks[0].end_index == len("Short text.")
    assert chunks[0].content == "Short text."


def test_chunker_text_between_step_and_chunk_size():
    # step=2 < len=3 < chunk_size=4: the walk still emits a tail chunk at offset 2
    chunks = TextChunker(chunk_size=4, overlap_size=2).chunk(_doc("xyz"))
    assert [(c.start_index, c.end_index, c.content) for c in chunks] == [
        (0, 3, "xyz"),
        (2, 3, "z"),
    ]


def test_chunker_text_at_most_step_single_chunk():
    chunks = TextChunker(chunk_size=4, overlap_size=2).chunk(_doc("xy"))
    assert [(c.start_index, c.end_index) for c in chunks] == [(0, 2)]


def test_chunker_whitespace_is_not_stripped():
    chunks = TextChunker(chunk_size=10, overlap_size=2).chunk(_doc("   "))
    assert len(chunks) == 1
    assert chunks[0].content == "   "


@pytest.mark.parametrize("length", [1, 3, 7, 8, 9, 50, 123])
@pytest.mark.parametrize("chunk_size, overlap", [(4, 2), (5, 1), (10, 3), (8, 7)])
def test_chunker_count_and_coverage(length, chunk_size, overlap):
    text = "".join(chr(ord("a") + i % 26) for i in range(length))
    chunks = TextChunker(chunk_size, overlap).chunk(_doc(text))

    # one chunk starts at every multiple of the step below the text length
    assert len(chunks) == math.ceil(length / (chunk_size - overlap))

    covered = set()
    for c in chunks:
        assert 0 <= c.start_index < c.end_index <= length
        assert c.content == text[c.start_index:c.end_index]
        covered.update(range(c.start_index, c.end_index))
    assert covered == set(range(length))

    for prev, nxt in zip(chunks, chunks[1:]):
        assert nxt.start_index == prev.start_index + (chunk_size - overlap)
        assert nxt.chunk_index == prev.chunk_index + 1
    # a full-size chunk overlaps its successor by exactly `overlap` characters;
    # only chunks cut short by the end of the text overlap by less
    for prev, nxt in zip(chunks, chunks[1:]):
        if prev.end_index - prev.start_index == chunk_size:
            assert prev.end_index - nxt.start_index == overlap
        else:
            assert prev.end_index == length


def test_chunker_sets_document_fields():
    doc = _doc("x" * 30)
    chunks = TextChunker(10, 2).chunk(doc)
    assert all(isinstance(c, Chunk) for c in chunks)
    assert all(c.document_id == doc.id for c in chunks)
    assert all(c.document_filename == "doc.txt" for c in chunks)


def test_chunker_ids_are_fresh_per_call():
    doc = _doc("same text for both runs")
    first = TextChunker(10, 2).chunk(doc)
    second = TextChunker(10, 2).chunk(doc)
    assert len({c.id for c in first}) == len(first)
    assert {c.id for c in first}.isdisjoint({c.id for c in second})
