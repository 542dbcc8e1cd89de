"""Unit tests for the RIFF container module."""

import struct

import pytest

from wavkit.format.errors import MalformedContainer
from wavkit.format.riff import Chunk, Container, parse, read_chunk_header, serialize


class TestReadChunkHeader:
    """Tests for read_chunk_header."""

    def test_reads_id_and_size(self) -> None:
        """Test that the FourCC and little-endian size are returned."""
        data = b"junk" + b"data" + struct.pack("<I", 1234)
        assert read_chunk_header(data, 4) == (b"data", 1234)

    def test_short_header(self) -> None:
        """Test that fewer than 8 bytes is an error."""
        with pytest.raises(MalformedContainer):
            read_chunk_header(b"data\x00\x00", 0)


class TestParse:
    """Tests for parse."""

    def test_parses_leaf_chunks_in_order(self, make_stream) -> None:
        """Test that leaf chunks keep stream order and payloads."""
        stream = make_stream([(b"fmt ", b"A" * 16), (b"data", b"\x01\x02")])

        root = parse(stream)

        assert root.chunk_id == b"RIFF"
        assert root.form_type == b"WAVE"
        assert root.children == [Chunk(b"fmt ", b"A" * 16), Chunk(b"data", b"\x01\x02")]

    def test_payloads_are_independent_bytes(self, make_stream) -> None:
        """Test that chunk payloads are copies, not views into the input."""
        stream = bytearray(make_stream([(b"data", b"\x01\x02")]))

        root = parse(stream)
        stream[-2:] = b"\xff\xff"

        payload = root.children[0].payload
        assert type(payload) is bytes
        assert payload == b"\x01\x02"

    def test_skips_pad_byte_after_odd_chunk(self, make_stream) -> None:
        """Test that an odd-sized chunk is followed by a pad byte."""
        stream = make_stream([(b"odd ", b"\x07\x08\x09"), (b"data", b"\x00\x00")])

        root = parse(stream)

        assert root.children[0] == Chunk(b"odd ", b"\x07\x08\x09")
        assert root.children[1] == Chunk(b"data", b"\x00\x00")

    def test_parses_list_container(self, make_stream) -> None:
        """Test that LIST chunks become nested containers."""
        info_body = b"INFO" + b"INAM" + struct.pack("<I", 4) + b"Test"
        stream = make_stream([(b"LIST", info_body), (b"data", b"")])

        root = parse(stream)

        nested = root.children[0]
        assert isinstance(nested, Container)
        assert nested.chunk_id == b"LIST"
        assert nested.form_type == b"INFO"
        assert nested.children == [Chunk(b"INAM", b"Test")]
        assert root.leaves() == [Chunk(b"data", b"")]

    def test_not_riff(self) -> None:
        """Test that a non-RIFF stream is rejected."""
        with pytest.raises(MalformedContainer, match="Not a RIFF stream"):
            parse(b"RIFX" + struct.pack("<I", 4) + b"WAVE")

    def test_too_small(self) -> None:
        """Test that a stream shorter than the RIFF header is rejected."""
        with pytest.raises(MalformedContainer):
            parse(b"RIFF\x04\x00")

    def test_chunk_overruns_stream(self) -> None:
        """Test that a chunk claiming more bytes than remain is rejected."""
        body = b"WAVE" + b"data" + struct.pack("<I", 100) + b"\x00" * 10
        stream = b"RIFF" + struct.pack("<I", len(body)) + body

        with pytest.raises(MalformedContainer) as excinfo:
            parse(stream)
        assert excinfo.value.field == "data"

    def test_overstated_riff_size_is_tolerated(self) -> None:
        """Test that a RIFF size larger than the stream is clamped."""
        body = b"WAVE" + b"data" + struct.pack("<I", 2) + b"\x01\x00"
        stream = b"RIFF" + struct.pack("<I", 0xFFFFFFF0) + body

        root = parse(stream)

        assert root.children == [Chunk(b"data", b"\x01\x00")]

    def test_ignores_trailing_partial_header(self, make_stream) -> None:
        """Test that fewer than 8 trailing bytes inside the RIFF body are ignored."""
        stream = make_stream([(b"data", b"\x00\x00")])
        body = stream[8:] + b"\x00\x00\x00"
        stream = b"RIFF" + struct.pack("<I", len(body)) + body

        root = parse(stream)

        assert root.children == [Chunk(b"data", b"\x00\x00")]


class TestSerialize:
    """Tests for serialize."""

    def test_header_and_sizes(self) -> None:
        """Test the RIFF header, chunk headers and total size."""
        root = Container(b"RIFF", b"WAVE", [Chunk(b"data", b"\x01\x02\x03\x04")])

        stream = serialize(root)

        assert stream[:4] == b"RIFF"
        assert struct.unpack("<I", stream[4:8])[0] == len(stream) - 8
        assert stream[8:12] == b"WAVE"
        assert stream[12:16] == b"data"
        assert struct.unpack("<I", stream[16:20])[0] == 4
        assert stream[20:] == b"\x01\x02\x03\x04"

    def test_pads_odd_payload(self) -> None:
        """Test that odd payloads get a pad byte not counted in the chunk size."""
        root = Container(b"RIFF", b"WAVE", [Chunk(b"odd ", b"\xaa")])

        stream = serialize(root)

        assert struct.unpack("<I", stream[16:20])[0] == 1
        assert stream[20:] == b"\xaa\x00"
        assert len(stream) % 2 == 0

    def test_nested_container(self) -> None:
        """Test that nested containers serialize and parse back identically."""
        root = Container(
            b"RIFF",
            b"WAVE",
            [
                Chunk(b"fmt ", b"\x00" * 16),
                Container(b"LIST", b"INFO", [Chunk(b"ICMT", b"hello")]),
                Chunk(b"data", b"\x01"),
            ],
        )

        assert parse(serialize(root)) == root

    def test_rejects_bad_fourcc(self) -> None:
        """Test that identifiers must be exactly four bytes."""
        root = Container(b"RIFF", b"WAVE", [Chunk(b"fmt", b"")])

        with pytest.raises(MalformedContainer):
            serialize(root)
