"""Shared fixtures for building WAV streams by hand."""

import struct
from collections.abc import Callable, Sequence

import pytest

ChunkSpec = tuple[bytes, bytes]
StreamBuilder = Callable[..., bytes]


def fmt_payload(
    format_code: int = 1,
    channels: int = 1,
    sample_rate: int = 44100,
    bits_per_sample: int = 16,
) -> bytes:
    """Build a 16-byte fmt payload with consistent byte rate and block align."""
    block_align = channels * bits_per_sample // 8
    return struct.pack(
        "<HHIIHH",
        format_code,
        channels,
        sample_rate,
        sample_rate * block_align,
        block_align,
        bits_per_sample,
    )


def build_stream(chunks: Sequence[ChunkSpec], form_type: bytes = b"WAVE") -> bytes:
    """Build a RIFF stream from (chunk_id, payload) pairs, padding odd payloads."""
    body = bytearray(form_type)
    for chunk_id, payload in chunks:
        body.extend(chunk_id)
        body.extend(struct.pack("<I", len(payload)))
        body.extend(payload)
        if len(payload) % 2:
            body.append(0)
    return b"RIFF" + struct.pack("<I", len(body)) + bytes(body)


def chunk_ids(stream: bytes) -> list[bytes]:
    """List the top-level chunk identifiers of a RIFF stream, in order."""
    ids = []
    offset = 12
    while offset + 8 <= len(stream):
        chunk_id = stream[offset : offset + 4]
        size = struct.unpack("<I", stream[offset + 4 : offset + 8])[0]
        ids.append(chunk_id)
        offset += 8 + size + (size % 2)
    return ids


@pytest.fixture
def make_fmt() -> Callable[..., bytes]:
    """Factory for fmt chunk payloads."""
    return fmt_payload


@pytest.fixture
def make_stream() -> StreamBuilder:
    """Factory for RIFF/WAVE byte streams."""
    return build_stream


@pytest.fixture
def list_chunk_ids() -> Callable[[bytes], list[bytes]]:
    """Helper that lists the top-level chunk ids of a stream."""
    return chunk_ids
