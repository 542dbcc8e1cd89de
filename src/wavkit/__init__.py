"""wavkit - WAV decoding and encoding without a multimedia framework.

This package converts RIFF/WAVE streams to and from channel-interleaved
normalized samples held in numpy arrays.

Example Usage
-------------
>>> from wavkit import EncodeOptions, SampleFormat, Wave, load_wav, save_wav
>>> import numpy as np
>>>
>>> samples = np.sin(np.linspace(0, 2 * np.pi, 64))
>>> wave = Wave.from_samples(samples, sample_rate=48000, sample_format=SampleFormat.PCM_S24)
>>> save_wav("sine.wav", wave, EncodeOptions(include_peak=True, peak_timestamp=0))
>>>
>>> loaded = load_wav("sine.wav")
>>> print(f"Loaded: {loaded.num_frames} frames at {loaded.sample_rate} Hz")
"""

# Re-export format module for convenience
from wavkit.format import (
    EncodeOptions,
    FormatCode,
    FormatDescriptor,
    FormatNotImplemented,
    InvalidFormat,
    MalformedContainer,
    MissingDataChunk,
    MissingFormatChunk,
    SampleFormat,
    TruncatedData,
    UnsupportedBitDepth,
    UnsupportedBits,
    UnsupportedFormatCode,
    Wave,
    WaveError,
    decode,
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
    # Codec
    "decode",
    "encode",
    "release",
    "load_wav",
    "save_wav",
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
