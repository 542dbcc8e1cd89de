"""Python types for WAV format metadata.

These types describe how samples are laid out on disk, with conversion
to/from the 16-byte ``fmt `` chunk payload.
"""

import struct
from dataclasses import dataclass
from enum import Enum, IntEnum

from wavkit.format.errors import (
    InvalidFormat,
    MalformedContainer,
    UnsupportedBitDepth,
    UnsupportedFormatCode,
)
from wavkit.utils import UINT16_MAX, UINT32_MAX

_FMT = struct.Struct("<HHIIHH")

FMT_PAYLOAD_SIZE = _FMT.size


class FormatCode(IntEnum):
    """WAVE format tags understood by the codec."""

    PCM = 1
    """Linear integer PCM."""

    IEEE_FLOAT = 3
    """IEEE-754 floating point."""

    @classmethod
    def from_raw(cls, format_code: int) -> "FormatCode":
        """Convert a raw format tag, rejecting anything unsupported."""
        try:
            return cls(format_code)
        except ValueError:
            raise UnsupportedFormatCode(format_code) from None


class SampleFormat(Enum):
    """Closed set of supported (format code, bit depth) pairs."""

    PCM_U8 = (FormatCode.PCM, 8)
    PCM_S16 = (FormatCode.PCM, 16)
    PCM_S24 = (FormatCode.PCM, 24)
    PCM_S32 = (FormatCode.PCM, 32)
    FLOAT32 = (FormatCode.IEEE_FLOAT, 32)
    FLOAT64 = (FormatCode.IEEE_FLOAT, 64)

    @property
    def format_code(self) -> FormatCode:
        return self.value[0]

    @property
    def bits_per_sample(self) -> int:
        return self.value[1]

    @property
    def sample_width(self) -> int:
        """Bytes occupied by one sample."""
        return self.value[1] // 8

    @property
    def is_float(self) -> bool:
        return self.value[0] == FormatCode.IEEE_FLOAT

    @property
    def display_name(self) -> str:
        """Human-readable name for this format."""
        if self.is_float:
            return f"{self.bits_per_sample}-bit IEEE float"
        return f"{self.bits_per_sample}-bit PCM"


def resolve_sample_format(format_code: int, bits_per_sample: int) -> SampleFormat:
    """Map a raw format code and bit depth onto a supported sample format.

    Raises:
        UnsupportedFormatCode: If the code is neither PCM nor IEEE float.
        UnsupportedBitDepth: If the bit depth is not valid for the code.
    """
    code = FormatCode.from_raw(format_code)
    for sample_format in SampleFormat:
        if sample_format.value == (code, bits_per_sample):
            return sample_format
    raise UnsupportedBitDepth(bits_per_sample, format_code)


@dataclass(frozen=True)
class FormatDescriptor:
    """The interpreted ``fmt `` chunk.

    Construction validates the descriptor, so an instance always names a
    supported sample format.
    """

    format_code: int
    """Raw 16-bit format tag (1 = PCM, 3 = IEEE float)."""

    channels: int
    """Number of interleaved channels."""

    sample_rate: int
    """Frames per second."""

    bits_per_sample: int
    """Bits per sample: 8/16/24/32 for PCM, 32/64 for IEEE float."""

    def __post_init__(self) -> None:
        resolve_sample_format(self.format_code, self.bits_per_sample)
        if not 1 <= self.channels <= UINT16_MAX:
            raise InvalidFormat(
                f"channels must be between 1 and {UINT16_MAX}, got {self.channels}",
                field="channels",
            )
        if not 1 <= self.sample_rate <= UINT32_MAX:
            raise InvalidFormat(
                f"sample_rate must be > 0, got {self.sample_rate}", field="sample_rate"
            )

    @classmethod
    def for_format(
        cls, sample_format: SampleFormat, channels: int, sample_rate: int
    ) -> "FormatDescriptor":
        """Create a descriptor for a known sample format."""
        return cls(
            format_code=int(sample_format.format_code),
            channels=channels,
            sample_rate=sample_rate,
            bits_per_sample=sample_format.bits_per_sample,
        )

    @property
    def sample_format(self) -> SampleFormat:
        return resolve_sample_format(self.format_code, self.bits_per_sample)

    @property
    def bytes_per_sample(self) -> int:
        return self.bits_per_sample // 8

    @property
    def block_align(self) -> int:
        """Bytes per interleaved frame."""
        return self.channels * self.bytes_per_sample

    @property
    def byte_rate(self) -> int:
        """Bytes per second of audio."""
        return self.sample_rate * self.block_align

    @classmethod
    def from_fmt_payload(cls, payload: bytes) -> "FormatDescriptor":
        """Create from a raw ``fmt `` chunk payload.

        The stored byte rate and block align are not trusted; they are
        recomputed from the other fields.

        Raises:
            MalformedContainer: If the payload is shorter than 16 bytes.
            UnsupportedFormatCode: If the format code is unsupported.
            UnsupportedBitDepth: If the bit depth is unsupported.
            InvalidFormat: If channels or sample rate is zero.
        """
        if len(payload) < FMT_PAYLOAD_SIZE:
            raise MalformedContainer(
                f"fmt chunk too small: {len(payload)} bytes, need {FMT_PAYLOAD_SIZE}",
                field="fmt ",
            )
        format_code, channels, sample_rate, _, _, bits_per_sample = _FMT.unpack_from(payload)
        return cls(
            format_code=format_code,
            channels=channels,
            sample_rate=sample_rate,
            bits_per_sample=bits_per_sample,
        )

    def to_fmt_payload(self) -> bytes:
        """Convert to the 16-byte ``fmt `` chunk payload.

        Raises:
            InvalidFormat: If block align or byte rate overflow their fields.
        """
        if self.block_align > UINT16_MAX:
            raise InvalidFormat(
                f"block align {self.block_align} does not fit in 16 bits", field="channels"
            )
        if self.byte_rate > UINT32_MAX:
            raise InvalidFormat(
                f"byte rate {self.byte_rate} does not fit in 32 bits", field="sample_rate"
            )
        return _FMT.pack(
            self.format_code,
            self.channels,
            self.sample_rate,
            self.byte_rate,
            self.block_align,
            self.bits_per_sample,
        )


def parse_format_chunk(payload: bytes) -> FormatDescriptor:
    """Interpret a raw ``fmt `` payload. See :meth:`FormatDescriptor.from_fmt_payload`."""
    return FormatDescriptor.from_fmt_payload(payload)


@dataclass(frozen=True)
class EncodeOptions:
    """Optional chunks to emit when encoding."""

    include_fact: bool = False
    """Emit a ``fact`` chunk with the frame count."""

    include_peak: bool = False
    """Emit a ``PEAK`` chunk with per-channel peaks."""

    peak_timestamp: int | None = None
    """Unix timestamp stored in the ``PEAK`` chunk; required with include_peak."""

    def __post_init__(self) -> None:
        if self.include_peak and self.peak_timestamp is None:
            raise ValueError("peak_timestamp is required when include_peak is set")
        if self.peak_timestamp is not None and not 0 <= self.peak_timestamp <= UINT32_MAX:
            raise ValueError(
                f"peak_timestamp must fit in 32 unsigned bits, got {self.peak_timestamp}"
            )
