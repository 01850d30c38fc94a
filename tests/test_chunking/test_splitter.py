"""Tests for RecursiveCharacterTextSplitter and to_chunks."""

import pytest

from vectorspace.chunking.splitter import RecursiveCharacterTextSplitter, to_chunks


@pytest.fixture
def splitter() -> RecursiveCharacterTextSplitter:
    return RecursiveCharacterTextSplitter(chunk_size=1000, chunk_overlap=20)


def _assert_overlap(chunks: list[str], overlap: int) -> None:
    for prev, nxt in zip(chunks, chunks[1:]):
        assert prev[-overlap:] == nxt[:overlap]


class TestSplitText:
    """Tests for RecursiveCharacterTextSplitter.split_text()."""

    def test_3000_char_document(self, splitter):
        text = "".join(chr(ord("a") + i % 26) for i in range(3000))

        chunks = splitter.split_text(text)

        assert len(chunks) >= 3
        assert all(len(c) <= 1000 for c in chunks)
        _assert_overlap(chunks, 20)

    def test_prose_breaks_on_separators(self, splitter):
        sentence = "Vector search finds passages by meaning. "
        text = sentence * 75  # ~3000 characters

        chunks = splitter.split_text(text)

        assert len(chunks) >= 3
        assert all(len(c) <= 1000 for c in chunks)
        assert all(c.endswith(". ") for c in chunks[:-1])
        _assert_overlap(chunks, 20)

    def test_paragraphs_preferred(self, splitter):
        para = ("x" * 599) + "\n\n"
        chunks = splitter.split_text(para * 3)

        assert chunks[0].endswith("\n\n")

    def test_short_text_single_chunk(self, splitter):
        assert splitter.split_text("hello") == ["hello"]

    def test_exact_size_single_chunk(self, splitter):
        text = "a" * 1000
        assert splitter.split_text(text) == [text]

    def test_empty_text(self, splitter):
        assert splitter.split_text("") == []

    def test_chunks_cover_whole_text(self, splitter):
        text = "word " * 900
        chunks = splitter.split_text(text)

        rebuilt = chunks[0] + "".join(c[20:] for c in chunks[1:])
        assert rebuilt == text

    def test_zero_overlap(self):
        splitter = RecursiveCharacterTextSplitter(chunk_size=10, chunk_overlap=0)
        assert splitter.split_text("a" * 25) == ["a" * 10, "a" * 10, "a" * 5]

    @pytest.mark.parametrize(
        "size,overlap",
        [(0, 0), (10, -1), (10, 10), (10, 15)],
    )
    def test_invalid_parameters(self, size, overlap):
        with pytest.raises(ValueError):
            RecursiveCharacterTextSplitter(chunk_size=size, chunk_overlap=overlap)

    def test_properties(self, splitter):
        assert splitter.chunk_size == 1000
        assert splitter.chunk_overlap == 20


class TestToChunks:
    def test_partitions(self):
        assert to_chunks(list(range(5)), 2) == [[0, 1], [2, 3], [4]]

    def test_empty(self):
        assert to_chunks([], 500) == []

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            to_chunks([1], 0)
