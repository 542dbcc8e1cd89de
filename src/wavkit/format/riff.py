"""RIFF container parsing and serialization.

This module knows nothing about audio. It turns a byte stream into a tree of
named chunks and back:

    Container(chunk_id=b"RIFF", form_type=b"WAVE", children=[
        Chunk(b"fmt ", payload),
        Chunk(b"data", payload),
        Container(chunk_id=b"LIST", form_type=b"INFO", children=[...]),
    ])

Each chunk payload is copied out of the input once, as its own bytes object;
the rest of the stream is walked through a memoryview without copying.
"""

import logging
import struct
from dataclasses import dataclass, field

from wavkit.format.errors import MalformedContainer
from wavkit.utils import UINT32_MAX, fourcc_repr

logger = logging.getLogger(__name__)

# FourCC identifiers
RIFF_ID = b"RIFF"
LIST_ID = b"LIST"
WAVE_ID = b"WAVE"
FMT_ID = b"fmt "
FACT_ID = b"fact"
DATA_ID = b"data"
PEAK_ID = b"PEAK"

CONTAINER_IDS = (RIFF_ID, LIST_ID)

_HEADER = struct.Struct("<4sI")


@dataclass
class Chunk:
    """A leaf chunk: identifier plus raw payload (without pad byte)."""

    chunk_id: bytes
    payload: bytes


@dataclass
class Container:
    """A RIFF or LIST chunk holding a form type and child chunks."""

    chunk_id: bytes
    form_type: bytes
    children: list["Chunk | Container"] = field(default_factory=list)

    def leaves(self) -> list[Chunk]:
        """Get the direct leaf children, in stream order."""
        return [child for child in self.children if isinstance(child, Chunk)]


Node = Chunk | Container


def read_chunk_header(data: bytes | memoryview, offset: int) -> tuple[bytes, int]:
    """Read a RIFF chunk header (FourCC + size).

    Args:
        data: The stream being parsed.
        offset: Position of the chunk header.

    Returns:
        Tuple of (chunk_id, chunk_size).

    Raises:
        MalformedContainer: If fewer than 8 bytes remain.
    """
    if len(data) - offset < _HEADER.size:
        raise MalformedContainer(f"Unexpected end of stream reading chunk header at {offset}")
    chunk_id, chunk_size = _HEADER.unpack_from(data, offset)
    return bytes(chunk_id), chunk_size


def parse(data: bytes) -> Container:
    """Parse a RIFF byte stream into a chunk tree.

    Args:
        data: The complete RIFF stream.

    Returns:
        The root container.

    Raises:
        MalformedContainer: If the stream is not RIFF or a chunk overruns it.
    """
    view = memoryview(data)
    if len(view) < 12:
        raise MalformedContainer("Stream too small to be a RIFF file")

    chunk_id, riff_size = read_chunk_header(view, 0)
    if chunk_id != RIFF_ID:
        raise MalformedContainer(f"Not a RIFF stream (found {fourcc_repr(chunk_id)})")

    # Producers that never patch the size field are tolerated.
    end = min(8 + riff_size, len(view))
    if end < 12:
        raise MalformedContainer(f"RIFF size {riff_size} is too small to hold a form type")

    form_type = bytes(view[8:12])
    root = Container(RIFF_ID, form_type, _parse_children(view, 12, end))
    logger.debug("Parsed RIFF %s with %d chunks", fourcc_repr(form_type), len(root.children))
    return root


def _parse_children(view: memoryview, offset: int, end: int) -> list[Node]:
    children: list[Node] = []
    while offset < end:
        # Trailing garbage shorter than a header is ignored.
        if end - offset < _HEADER.size:
            logger.debug("Ignoring %d trailing bytes at offset %d", end - offset, offset)
            break

        chunk_id, chunk_size = read_chunk_header(view, offset)
        body_start = offset + _HEADER.size
        body_end = body_start + chunk_size
        if body_end > end:
            raise MalformedContainer(
                f"Chunk {fourcc_repr(chunk_id)} at offset {offset} declares {chunk_size} "
                f"bytes but only {end - body_start} remain",
                field=chunk_id.decode("latin-1"),
            )

        if chunk_id in CONTAINER_IDS:
            if chunk_size < 4:
                raise MalformedContainer(
                    f"{fourcc_repr(chunk_id)} chunk at offset {offset} has no form type",
                    field=chunk_id.decode("latin-1"),
                )
            form_type = bytes(view[body_start : body_start + 4])
            nested = _parse_children(view, body_start + 4, body_end)
            children.append(Container(chunk_id, form_type, nested))
        else:
            children.append(Chunk(chunk_id, bytes(view[body_start:body_end])))

        # Skip to next chunk (with word alignment padding)
        offset = body_end + (chunk_size % 2)

    return children


def serialize(root: Container) -> bytes:
    """Serialize a chunk tree into a RIFF byte stream.

    Args:
        root: The root container; its chunk_id should be ``RIFF``.

    Returns:
        The complete stream, with pad bytes after odd-sized chunks.

    Raises:
        MalformedContainer: If an identifier is not four bytes or a size overflows.
    """
    out = bytearray()
    _write_node(out, root)
    return bytes(out)


def _write_node(out: bytearray, node: Node) -> None:
    _check_fourcc(node.chunk_id)

    if isinstance(node, Container):
        _check_fourcc(node.form_type)
        body = bytearray(node.form_type)
        for child in node.children:
            _write_node(body, child)
        payload: bytes | bytearray = body
    else:
        payload = node.payload

    size = len(payload)
    if size > UINT32_MAX:
        raise MalformedContainer(
            f"Chunk {fourcc_repr(node.chunk_id)} is {size} bytes, larger than RIFF allows",
            field=node.chunk_id.decode("latin-1"),
        )

    out.extend(_HEADER.pack(node.chunk_id, size))
    out.extend(payload)
    if size % 2:
        out.append(0)


def _check_fourcc(four_cc: bytes) -> None:
    if len(four_cc) != 4:
        raise MalformedContainer(f"Chunk identifier {four_cc!r} is not four bytes")
