"""Chunk assembly: WAVE chunk trees to and from the Wave model.

Decoding gathers every top-level chunk into a lookup before interpreting
anything, because the ``data`` payload cannot be decoded until the ``fmt ``
chunk is known and producers do not always write ``fmt `` first.

Encoding always emits chunks in this order:

    +----------------------------------------+
    | RIFF header ("WAVE")                   |
    +----------------------------------------+
    | fmt  chunk (16 bytes)                  |
    +----------------------------------------+
    | fact chunk (optional, frame count)     |
    +----------------------------------------+
    | data chunk (encoded samples)           |
    +----------------------------------------+
    | PEAK chunk (optional, channel peaks)   |
    +----------------------------------------+
"""

import logging
from dataclasses import dataclass

from wavkit.format.codec import decode_samples, encode_samples
from wavkit.format.errors import InvalidFormat, MissingDataChunk, MissingFormatChunk
from wavkit.format.extended import (
    PeakChunk,
    build_fact_chunk,
    build_peak_chunk,
    parse_fact_chunk,
    parse_peak_chunk,
)
from wavkit.format.model import Wave
from wavkit.format.riff import (
    DATA_ID,
    FACT_ID,
    FMT_ID,
    PEAK_ID,
    RIFF_ID,
    WAVE_ID,
    Chunk,
    Container,
)
from wavkit.format.types import EncodeOptions, FormatDescriptor
from wavkit.utils import fourcc_repr

logger = logging.getLogger(__name__)

KNOWN_CHUNK_IDS = (FMT_ID, FACT_ID, DATA_ID, PEAK_ID)


@dataclass
class ExtendedMetadata:
    """Optional chunks found in a decoded stream."""

    frame_count: int | None = None
    """Frame count stored in the ``fact`` chunk, if present."""

    peak: PeakChunk | None = None
    """Contents of the ``PEAK`` chunk, if present."""


def collect_chunks(root: Container) -> dict[bytes, Chunk]:
    """Index the top-level leaf chunks of a WAVE container by identifier.

    A later chunk with the same identifier replaces an earlier one.

    Raises:
        InvalidFormat: If the root form type is not ``WAVE``.
    """
    if root.form_type != WAVE_ID:
        raise InvalidFormat(
            f"Not a WAVE stream (form type {fourcc_repr(root.form_type)})", field="form_type"
        )

    lookup: dict[bytes, Chunk] = {}
    for child in root.children:
        if isinstance(child, Container):
            logger.debug("Skipping %s container", fourcc_repr(child.form_type))
            continue
        if child.chunk_id not in KNOWN_CHUNK_IDS:
            logger.debug("Skipping unrecognized chunk %s", fourcc_repr(child.chunk_id))
        lookup[child.chunk_id] = child
    return lookup


def interpret_chunks(root: Container) -> Wave:
    """Build a Wave from a parsed WAVE chunk tree.

    Raises:
        InvalidFormat: If the root is not a WAVE container.
        MissingFormatChunk: If there is no ``fmt `` chunk.
        MissingDataChunk: If there is no ``data`` chunk.
        UnsupportedFormatCode, UnsupportedBitDepth: From the ``fmt `` chunk.
        TruncatedData: If ``data`` is not a whole number of samples.
    """
    lookup = collect_chunks(root)

    fmt_chunk = lookup.get(FMT_ID)
    if fmt_chunk is None:
        raise MissingFormatChunk()
    descriptor = FormatDescriptor.from_fmt_payload(fmt_chunk.payload)

    data_chunk = lookup.get(DATA_ID)
    if data_chunk is None:
        raise MissingDataChunk()
    samples = decode_samples(data_chunk.payload, descriptor)

    return Wave(descriptor=descriptor, samples=samples)


def read_extended_metadata(root: Container) -> ExtendedMetadata:
    """Read the optional ``fact`` and ``PEAK`` chunks of a WAVE chunk tree.

    The ``PEAK`` chunk is sized by the channel count, so a ``fmt `` chunk must
    be present when ``PEAK`` is.

    Raises:
        InvalidFormat: If the root is not a WAVE container.
        MissingFormatChunk: If ``PEAK`` is present without ``fmt ``.
        MalformedContainer: If either payload is too short.
    """
    lookup = collect_chunks(root)
    metadata = ExtendedMetadata()

    fact_chunk = lookup.get(FACT_ID)
    if fact_chunk is not None:
        metadata.frame_count = parse_fact_chunk(fact_chunk.payload)

    peak_chunk = lookup.get(PEAK_ID)
    if peak_chunk is not None:
        fmt_chunk = lookup.get(FMT_ID)
        if fmt_chunk is None:
            raise MissingFormatChunk()
        descriptor = FormatDescriptor.from_fmt_payload(fmt_chunk.payload)
        metadata.peak = parse_peak_chunk(peak_chunk.payload, descriptor.channels)

    return metadata


def assemble_chunks(wave: Wave, options: EncodeOptions | None = None) -> Container:
    """Build the WAVE chunk tree for a Wave.

    Args:
        wave: The audio to encode.
        options: Optional chunks to include (default: none).

    Returns:
        A RIFF/WAVE container holding fmt, [fact], data, [PEAK] in that order.

    Raises:
        UnsupportedFormatCode, UnsupportedBitDepth: If the descriptor is invalid.
        FormatNotImplemented: If the sample format cannot be encoded.
    """
    options = options or EncodeOptions()

    # Encode first so an unencodable format fails before any chunk is built
    data_payload = encode_samples(wave.samples, wave.descriptor)

    children: list[Chunk | Container] = [Chunk(FMT_ID, wave.descriptor.to_fmt_payload())]
    if options.include_fact:
        children.append(Chunk(FACT_ID, build_fact_chunk(wave.samples, wave.channels)))
    children.append(Chunk(DATA_ID, data_payload))
    if options.include_peak:
        if options.peak_timestamp is None:
            raise ValueError("peak_timestamp is required when include_peak is set")
        # Peaks describe the stored data, after quantization and clamping
        stored = decode_samples(data_payload, wave.descriptor)
        children.append(
            Chunk(PEAK_ID, build_peak_chunk(stored, wave.channels, options.peak_timestamp))
        )

    return Container(RIFF_ID, WAVE_ID, children)
