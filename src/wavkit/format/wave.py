"""Public WAV encode/decode entry points.

``decode`` and ``encode`` are pure in-memory transformations; ``load_wav`` and
``save_wav`` wrap them with file I/O.
"""

from pathlib import Path

from wavkit.format import riff
from wavkit.format.chunks import (
    ExtendedMetadata,
    assemble_chunks,
    interpret_chunks,
    read_extended_metadata,
)
from wavkit.format.model import Wave
from wavkit.format.types import EncodeOptions


def decode(data: bytes) -> Wave:
    """Decode a complete WAV byte stream.

    Args:
        data: The RIFF/WAVE stream.

    Returns:
        A Wave that exclusively owns its decoded samples.

    Raises:
        WaveError: The subclass names the constraint that failed.
    """
    return interpret_chunks(riff.parse(data))


def encode(wave: Wave, options: EncodeOptions | None = None) -> bytes:
    """Encode a Wave as a WAV byte stream.

    Encoding the same Wave with the same options always yields identical bytes.

    Args:
        wave: The audio to encode.
        options: Optional ``fact``/``PEAK`` chunk selection.

    Returns:
        The complete RIFF/WAVE stream.

    Raises:
        WaveError: The subclass names the constraint that failed.
    """
    return riff.serialize(assemble_chunks(wave, options))


def release(wave: Wave) -> None:
    """Release the sample buffer owned by a Wave."""
    wave.release()


def load_wav(path: Path | str) -> Wave:
    """Load and decode a WAV file.

    Raises:
        OSError: If the file cannot be read.
        WaveError: If the contents cannot be decoded.
    """
    return decode(Path(path).read_bytes())


def save_wav(path: Path | str, wave: Wave, options: EncodeOptions | None = None) -> None:
    """Encode a Wave and write it to a file, creating parent directories.

    The stream is fully encoded before the file is opened, so an encode
    failure leaves no partial file behind.
    """
    path = Path(path)
    data = encode(wave, options)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


def decode_with_metadata(data: bytes) -> tuple[Wave, ExtendedMetadata]:
    """Decode a WAV byte stream and also read its ``fact`` and ``PEAK`` chunks.

    Raises:
        WaveError: The subclass names the constraint that failed.
    """
    root = riff.parse(data)
    return interpret_chunks(root), read_extended_metadata(root)
