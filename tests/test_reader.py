"""Tests for chunked file reads."""

from __future__ import annotations

from pathlib import Path

import pytest

from filepeek.errors import InvalidRange, NotAFile, NotFound, TooLarge
from filepeek.preview.reader import read_chunk, trim_to_boundary


def _read_all(path: Path, limit: int, **kwargs) -> tuple[str, int]:
    """Replay next_offset from 0 until has_more is false."""
    offset = 0
    parts = []
    calls = 0
    while True:
        chunk = read_chunk(path, offset, limit, **kwargs)
        parts.append(chunk.content)
        calls += 1
        if not chunk.has_more:
            return "".join(parts), calls
        assert chunk.next_offset > offset
        offset = chunk.next_offset


class TestWholeFile:
    """Reads without offset or limit."""

    def test_entire_content(self, tmp_path: Path) -> None:
        """Small files come back whole."""
        target = tmp_path / "a.txt"
        target.write_text("hello world")

        chunk = read_chunk(target)

        assert chunk.content == "hello world"
        assert chunk.offset == 0
        assert chunk.size == 11
        assert chunk.next_offset == 11
        assert chunk.has_more is False
        assert chunk.name == "a.txt"

    def test_empty_file(self, tmp_path: Path) -> None:
        """Empty files produce an empty final chunk."""
        target = tmp_path / "empty.txt"
        target.write_bytes(b"")

        chunk = read_chunk(target)

        assert chunk.content == ""
        assert chunk.size == 0
        assert chunk.has_more is False

    def test_too_large_without_limit(self, tmp_path: Path) -> None:
        """Files above the ceiling require an explicit limit."""
        target = tmp_path / "big.log"
        target.write_bytes(b"x" * 200)

        with pytest.raises(TooLarge) as excinfo:
            read_chunk(target, preview_max=100)

        assert excinfo.value.size == 200
        assert excinfo.value.max_size == 100
        assert excinfo.value.to_dict()["code"] == "TOO_LARGE"
        assert excinfo.value.to_dict()["size"] == 200
        assert excinfo.value.to_dict()["max"] == 100

    def test_zero_limit_counts_as_unspecified(self, tmp_path: Path) -> None:
        """limit=0 behaves like no limit."""
        target = tmp_path / "big.log"
        target.write_bytes(b"x" * 200)

        with pytest.raises(TooLarge):
            read_chunk(target, 0, 0, preview_max=100)

    def test_too_large_with_explicit_limit_pages(self, tmp_path: Path) -> None:
        """An explicit limit pages through oversized files."""
        target = tmp_path / "big.log"
        target.write_bytes(b"x" * 200)

        chunk = read_chunk(target, 0, 50, preview_max=100)

        assert len(chunk.content) == 50
        assert chunk.has_more is True


class TestPaging:
    """Offset/limit reads."""

    def test_window(self, tmp_path: Path) -> None:
        """Reads exactly limit bytes from offset."""
        target = tmp_path / "digits.txt"
        target.write_text("0123456789")

        chunk = read_chunk(target, 3, 4)

        assert chunk.content == "3456"
        assert chunk.offset == 3
        assert chunk.limit == 4
        assert chunk.next_offset == 7
        assert chunk.has_more is True

    def test_last_window(self, tmp_path: Path) -> None:
        """The final window is short and has no more."""
        target = tmp_path / "digits.txt"
        target.write_text("0123456789")

        chunk = read_chunk(target, 8, 4)

        assert chunk.content == "89"
        assert chunk.limit == 2
        assert chunk.has_more is False

    def test_offset_past_end_is_clamped(self, tmp_path: Path) -> None:
        """Offsets beyond the end yield an empty final chunk."""
        target = tmp_path / "digits.txt"
        target.write_text("0123456789")

        chunk = read_chunk(target, 50, 4)

        assert chunk.offset == 10
        assert chunk.content == ""
        assert chunk.has_more is False

    def test_offset_only_uses_chunk_size(self, tmp_path: Path) -> None:
        """Without a limit, paged reads use the default chunk size."""
        target = tmp_path / "digits.txt"
        target.write_text("0123456789")

        chunk = read_chunk(target, 2, chunk_size=3)

        assert chunk.content == "234"
        assert chunk.has_more is True

    def test_limit_capped_at_preview_max(self, tmp_path: Path) -> None:
        """Explicit limits never exceed the preview ceiling."""
        target = tmp_path / "digits.txt"
        target.write_text("0123456789")

        chunk = read_chunk(target, 0, 1000, preview_max=4)

        assert chunk.content == "0123"
        assert chunk.limit == 4

    @pytest.mark.parametrize(("offset", "limit"), [(-1, 10), (0, -5)])
    def test_negative_values(self, tmp_path: Path, offset: int, limit: int) -> None:
        """Negative offsets or limits are rejected."""
        target = tmp_path / "a.txt"
        target.write_text("abc")

        with pytest.raises(InvalidRange):
            read_chunk(target, offset, limit)

    def test_idempotent(self, tmp_path: Path) -> None:
        """Identical calls on an unmodified file return identical chunks."""
        target = tmp_path / "a.txt"
        target.write_text("some repeated content " * 20)

        assert read_chunk(target, 17, 33) == read_chunk(target, 17, 33)

    def test_fresh_stat_per_call(self, tmp_path: Path) -> None:
        """Each chunk reflects the file size at read time."""
        target = tmp_path / "grow.log"
        target.write_text("abc")
        first = read_chunk(target, 0, 2)

        target.write_text("abcdef")
        second = read_chunk(target, first.next_offset, 2)

        assert first.size == 3
        assert second.size == 6
        assert second.content == "cd"


class TestSequentialReads:
    """Concatenating sequential chunks reproduces the file."""

    @pytest.mark.parametrize("limit", [1, 2, 3, 7, 64, 4096])
    def test_ascii(self, tmp_path: Path, limit: int) -> None:
        """ASCII content, content length advances the offset."""
        text = "".join(f"line {i}\n" for i in range(200))
        target = tmp_path / "lines.txt"
        target.write_text(text)

        content, _ = _read_all(target, limit)

        assert content == text

    @pytest.mark.parametrize("limit", [4, 5, 7, 16])
    def test_multibyte(self, tmp_path: Path, limit: int) -> None:
        """Windows never split a UTF-8 sequence."""
        text = "héllo wörld ✓ 日本語 🎉 end\n" * 5
        target = tmp_path / "utf8.txt"
        target.write_text(text, encoding="utf-8")

        content, _ = _read_all(target, limit)

        assert content == text
        assert "�" not in content

    def test_next_offset_matches_encoded_length(self, tmp_path: Path) -> None:
        """next_offset - offset equals the encoded content length."""
        target = tmp_path / "utf8.txt"
        target.write_text("aé日🎉" * 10, encoding="utf-8")

        chunk = read_chunk(target, 0, 5)

        assert chunk.next_offset - chunk.offset == len(chunk.content.encode("utf-8"))

    def test_invalid_bytes_are_replaced(self, tmp_path: Path) -> None:
        """Undecodable bytes become replacement characters, offsets stay byte-based."""
        target = tmp_path / "mixed.bin"
        target.write_bytes(b"ok\xff\xfeok")

        chunk = read_chunk(target)

        assert chunk.content == "ok��ok"
        assert chunk.next_offset == 6


class TestErrors:
    """Stat-time failures."""

    def test_missing(self, tmp_path: Path) -> None:
        """Missing files raise NotFound."""
        with pytest.raises(NotFound):
            read_chunk(tmp_path / "missing.txt")

    def test_directory(self, tmp_path: Path) -> None:
        """Directories raise NotAFile."""
        with pytest.raises(NotAFile):
            read_chunk(tmp_path)


class TestTrimToBoundary:
    """Test trim_to_boundary helper."""

    def test_complete_sequences_untouched(self) -> None:
        """Complete characters are kept."""
        data = "aé日🎉".encode("utf-8")

        assert trim_to_boundary(data) == data

    @pytest.mark.parametrize("cut", [1, 2, 3])
    def test_partial_sequence_dropped(self, cut: int) -> None:
        """A truncated 4-byte sequence is removed."""
        data = "a🎉".encode("utf-8")[: 1 + cut]

        assert trim_to_boundary(data) == b"a"

    def test_never_empties(self) -> None:
        """A lone partial sequence is kept rather than returning nothing."""
        data = "🎉".encode("utf-8")[:2]

        assert trim_to_boundary(data) == data
