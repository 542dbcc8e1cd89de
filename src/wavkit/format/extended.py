"""Builders and readers for the optional ``fact`` and ``PEAK`` chunks.

Neither chunk is stored on the Wave model: both are derived from the samples
whenever a file is written.

PEAK payload layout (little-endian):

    u32 version (always 1)
    u32 timestamp (seconds since the Unix epoch, supplied by the caller)
    per channel:
        f32 peak magnitude
        u32 frame position of the first occurrence of that peak
"""

import struct
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from wavkit.format.errors import MalformedContainer

PEAK_VERSION = 1

_FACT = struct.Struct("<I")
_PEAK_HEADER = struct.Struct("<II")
_PEAK_ENTRY = struct.Struct("<fI")


@dataclass(frozen=True)
class PeakEntry:
    """Peak amplitude of one channel."""

    value: float
    """Absolute value of the most extreme sample."""

    position: int
    """0-based frame index where the peak first occurs."""


@dataclass
class PeakChunk:
    """Decoded ``PEAK`` chunk."""

    timestamp: int
    peaks: list[PeakEntry] = field(default_factory=list)
    version: int = PEAK_VERSION


def frame_count(samples: NDArray[np.float64], channels: int) -> int:
    """Get the number of complete frames in an interleaved sample array."""
    return len(samples) // channels


def build_fact_chunk(samples: NDArray[np.float64], channels: int) -> bytes:
    """Build the ``fact`` payload: the frame count as a u32."""
    return _FACT.pack(frame_count(samples, channels))


def parse_fact_chunk(payload: bytes) -> int:
    """Read the frame count from a ``fact`` payload.

    Raises:
        MalformedContainer: If the payload is shorter than 4 bytes.
    """
    if len(payload) < _FACT.size:
        raise MalformedContainer(f"fact chunk too small: {len(payload)} bytes", field="fact")
    return _FACT.unpack_from(payload)[0]


def compute_peaks(samples: NDArray[np.float64], channels: int) -> list[PeakEntry]:
    """Find the peak magnitude and its first frame position for each channel.

    Args:
        samples: Channel-interleaved normalized samples.
        channels: Number of channels.

    Returns:
        One PeakEntry per channel, in channel order. A channel without samples
        reports a zero peak at frame 0. NaN samples count as silence.
    """
    magnitudes = np.abs(np.asarray(samples, dtype=np.float64))
    magnitudes[np.isnan(magnitudes)] = 0.0
    peaks = []
    for channel in range(channels):
        channel_magnitudes = magnitudes[channel::channels]
        if channel_magnitudes.size == 0:
            peaks.append(PeakEntry(value=0.0, position=0))
            continue
        # argmax returns the first index on ties
        position = int(np.argmax(channel_magnitudes))
        peaks.append(PeakEntry(value=float(channel_magnitudes[position]), position=position))
    return peaks


def build_peak_chunk(samples: NDArray[np.float64], channels: int, timestamp: int) -> bytes:
    """Build the ``PEAK`` payload for a sample array.

    Args:
        samples: Channel-interleaved normalized samples.
        channels: Number of channels.
        timestamp: Unix timestamp to record in the chunk.

    Returns:
        The payload bytes (8 + 8 * channels bytes).
    """
    payload = bytearray(_PEAK_HEADER.pack(PEAK_VERSION, timestamp))
    for peak in compute_peaks(samples, channels):
        # Peaks beyond float32 range are stored as inf
        payload.extend(_PEAK_ENTRY.pack(float(np.float32(peak.value)), peak.position))
    return bytes(payload)


def parse_peak_chunk(payload: bytes, channels: int) -> PeakChunk:
    """Read a ``PEAK`` payload written for ``channels`` channels.

    Raises:
        MalformedContainer: If the payload is too short for the channel count.
    """
    expected = _PEAK_HEADER.size + _PEAK_ENTRY.size * channels
    if len(payload) < expected:
        raise MalformedContainer(
            f"PEAK chunk too small: {len(payload)} bytes, need {expected} "
            f"for {channels} channels",
            field="PEAK",
        )

    version, timestamp = _PEAK_HEADER.unpack_from(payload)
    peaks = []
    for channel in range(channels):
        offset = _PEAK_HEADER.size + channel * _PEAK_ENTRY.size
        value, position = _PEAK_ENTRY.unpack_from(payload, offset)
        peaks.append(PeakEntry(value=value, position=position))
    return PeakChunk(timestamp=timestamp, peaks=peaks, version=version)
