"""Sample codec: raw ``data`` payloads to and from normalized samples.

All on-disk values are little-endian. Normalized samples are float64 so every
supported width survives a round trip without loss from the container dtype.

Normalization (decode divides, encode multiplies):

    8-bit PCM   unsigned   / 255.0
    16-bit PCM  signed     / 32767.0
    24-bit PCM  signed     / 8388607.0
    32-bit PCM  signed     / 2147483647.0
    32/64-bit float        passthrough

8-bit PCM is scaled without recentring on 128, so silence (128) decodes to
about 0.502 rather than 0.0.
"""

from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray

from wavkit.format.errors import FormatNotImplemented, InvalidFormat, TruncatedData
from wavkit.format.types import FormatDescriptor, SampleFormat, resolve_sample_format
from wavkit.utils import assert_exhaustiveness

Samples = NDArray[np.float64]

# Scale factor and representable integer range per PCM width
PCM_U8_MAX = 255.0
PCM_S16_MAX = 32767.0
PCM_S24_MAX = 8388607.0
PCM_S32_MAX = 2147483647.0


def pcm_limits(sample_format: SampleFormat) -> tuple[float, float, float]:
    """Get (scale, lowest, highest) for a PCM sample format.

    Signed ranges are asymmetric: the lowest value is one unit further from
    zero than the highest.
    """
    if sample_format is SampleFormat.PCM_U8:
        return PCM_U8_MAX, 0.0, PCM_U8_MAX
    elif sample_format is SampleFormat.PCM_S16:
        return PCM_S16_MAX, -PCM_S16_MAX - 1, PCM_S16_MAX
    elif sample_format is SampleFormat.PCM_S24:
        return PCM_S24_MAX, -PCM_S24_MAX - 1, PCM_S24_MAX
    elif sample_format is SampleFormat.PCM_S32:
        return PCM_S32_MAX, -PCM_S32_MAX - 1, PCM_S32_MAX
    raise ValueError(f"{sample_format.display_name} is not an integer PCM format")


def decode_samples(payload: bytes, descriptor: FormatDescriptor) -> Samples:
    """Decode a raw ``data`` payload into normalized samples.

    Args:
        payload: Raw sample bytes, channel-interleaved. Borrowed, not retained.
        descriptor: Layout of the payload.

    Returns:
        A new float64 array with one value per stored sample.

    Raises:
        TruncatedData: If the payload is not a whole number of samples.
    """
    sample_format = resolve_sample_format(descriptor.format_code, descriptor.bits_per_sample)
    width = sample_format.sample_width
    if len(payload) % width:
        raise TruncatedData(len(payload), width)

    if sample_format is SampleFormat.PCM_U8:
        raw: NDArray[np.generic] = np.frombuffer(payload, dtype=np.uint8)
        return raw.astype(np.float64) / PCM_U8_MAX
    elif sample_format is SampleFormat.PCM_S16:
        raw = np.frombuffer(payload, dtype="<i2")
        return raw.astype(np.float64) / PCM_S16_MAX
    elif sample_format is SampleFormat.PCM_S24:
        return _unpack_24bit(payload).astype(np.float64) / PCM_S24_MAX
    elif sample_format is SampleFormat.PCM_S32:
        raw = np.frombuffer(payload, dtype="<i4")
        return raw.astype(np.float64) / PCM_S32_MAX
    elif sample_format is SampleFormat.FLOAT32:
        return np.frombuffer(payload, dtype="<f4").astype(np.float64)
    elif sample_format is SampleFormat.FLOAT64:
        return np.frombuffer(payload, dtype="<f8").astype(np.float64)
    else:
        assert_exhaustiveness(sample_format)


def encode_samples(
    samples: Sequence[float] | NDArray[np.floating], descriptor: FormatDescriptor
) -> bytes:
    """Encode normalized samples into a raw ``data`` payload.

    PCM samples are scaled, clamped to the representable range, then rounded
    to the nearest integer (ties to even). NaN encodes as zero. Float samples
    are written unscaled.

    Args:
        samples: Normalized samples, channel-interleaved.
        descriptor: Target layout; re-validated before encoding.

    Returns:
        The raw payload bytes.

    Raises:
        UnsupportedFormatCode: If the descriptor's format code is unsupported.
        UnsupportedBitDepth: If the descriptor's bit depth is unsupported.
        FormatNotImplemented: For 64-bit float, which is decode-only.
        InvalidFormat: If the sample count is not a whole number of frames.
    """
    sample_format = resolve_sample_format(descriptor.format_code, descriptor.bits_per_sample)
    values = np.asarray(samples, dtype=np.float64).reshape(-1)
    if len(values) % descriptor.channels:
        raise InvalidFormat(
            f"{len(values)} samples do not fill whole {descriptor.channels}-channel frames",
            field="samples",
        )

    if sample_format is SampleFormat.PCM_U8:
        return _quantize(values, sample_format).astype(np.uint8).tobytes()
    elif sample_format is SampleFormat.PCM_S16:
        return _quantize(values, sample_format).astype("<i2").tobytes()
    elif sample_format is SampleFormat.PCM_S24:
        return _pack_24bit(_quantize(values, sample_format))
    elif sample_format is SampleFormat.PCM_S32:
        return _quantize(values, sample_format).astype("<i4").tobytes()
    elif sample_format is SampleFormat.FLOAT32:
        return values.astype("<f4").tobytes()
    elif sample_format is SampleFormat.FLOAT64:
        raise FormatNotImplemented(
            "64-bit IEEE float is supported for decoding only", field="bits_per_sample"
        )
    else:
        assert_exhaustiveness(sample_format)


def _quantize(values: Samples, sample_format: SampleFormat) -> NDArray[np.int64]:
    """Scale, clamp and round normalized samples to integer sample values."""
    scale, lowest, highest = pcm_limits(sample_format)
    scaled = np.nan_to_num(values * scale, nan=0.0, posinf=highest, neginf=lowest)
    # Clamp before the integer cast so out-of-range input never wraps
    clamped = np.clip(scaled, lowest, highest)
    # Round to nearest, ties to even
    return np.rint(clamped).astype(np.int64)


def _unpack_24bit(payload: bytes) -> NDArray[np.int32]:
    """Unpack little-endian 24-bit signed integers into int32."""
    triplets = np.frombuffer(payload, dtype=np.uint8).reshape(-1, 3)
    widened = np.empty((len(triplets), 4), dtype=np.uint8)
    widened[:, :3] = triplets
    # Sign-extend: fill the top byte with 0xFF when bit 23 is set
    widened[:, 3] = (triplets[:, 2] >> 7) * 0xFF
    return widened.view("<i4").reshape(-1)


def _pack_24bit(values: NDArray[np.int64]) -> bytes:
    """Pack integers into little-endian 24-bit two's complement."""
    unsigned = values & 0xFFFFFF
    out = np.empty(unsigned.size * 3, dtype=np.uint8)
    out[0::3] = (unsigned & 0xFF).astype(np.uint8)
    out[1::3] = ((unsigned >> 8) & 0xFF).astype(np.uint8)
    out[2::3] = ((unsigned >> 16) & 0xFF).astype(np.uint8)
    return out.tobytes()
