"""WAV codec module.

This module decodes RIFF/WAVE streams into normalized samples and encodes them
back, covering 8/16/24/32-bit PCM and 32/64-bit IEEE float.

Format Overview
---------------
    +----------------------------------------+
    | RIFF Header ("WAVE")                   |
    +----------------------------------------+
    | fmt  chunk (format, channels, rate)    |
    +----------------------------------------+
    | fact chunk (optional frame count)      |
    +----------------------------------------+
    | data chunk (interleaved samples)       |
    +----------------------------------------+
    | PEAK chunk (optional channel peaks)    |
    +----------------------------------------+

Example Usage
-------------
>>> from wavkit.format import EncodeOptions, SampleFormat, Wave, decode, encode
>>> wave = Wave.from_samples([0.0, 0.5, -0.5], sample_rate=44100)
>>> data = encode(wave, EncodeOptions(include_fact=True))
>>> decoded = decode(data)
>>> decoded.sample_format
<SampleFormat.PCM_S16: (<FormatCode.PCM: 1>, 16)>
"""

from wavkit.format.chunks import (
    ExtendedMetadata,
    assemble_chunks,
    interpret_chunks,
    read_extended_metadata,
)
from wavkit.format.codec import decode_samples, encode_samples
from wavkit.format.errors import (
    FormatNotImplemented,
    InvalidFormat,
    MalformedContainer,
    MissingDataChunk,
    MissingFormatChunk,
    TruncatedData,
    UnsupportedBitDepth,
    UnsupportedBits,
    UnsupportedFormatCode,
    WaveError,
)
from wavkit.format.extended import PeakChunk, PeakEntry, compute_peaks
from wavkit.format.model import Wave
from wavkit.format.types import (
    EncodeOptions,
    FormatCode,
    FormatDescriptor,
    SampleFormat,
    parse_format_chunk,
)
from wavkit.format.validation import ValidationResult, validate_wave
from wavkit.format.wave import (
    decode,
    decode_with_metadata,
    encode,
    load_wav,
    release,
    save_wav,
)

__all__ = [
    # Types
    "FormatCode",
    "SampleFormat",
    "FormatDescriptor",
    "EncodeOptions",
    "Wave",
    "PeakEntry",
    "PeakChunk",
    "ExtendedMetadata",
    # Codec
    "decode",
    "decode_with_metadata",
    "encode",
    "release",
    "load_wav",
    "save_wav",
    "decode_samples",
    "encode_samples",
    "parse_format_chunk",
    "compute_peaks",
    "interpret_chunks",
    "assemble_chunks",
    "read_extended_metadata",
    # Validation
    "validate_wave",
    "ValidationResult",
    # Errors
    "WaveError",
    "MalformedContainer",
    "InvalidFormat",
    "MissingFormatChunk",
    "MissingDataChunk",
    "UnsupportedFormatCode",
    "UnsupportedBitDepth",
    "UnsupportedBits",
    "TruncatedData",
    "FormatNotImplemented",
]
