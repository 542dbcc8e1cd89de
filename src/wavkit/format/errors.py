"""Error taxonomy for the WAV codec.

Every failure raised by ``wavkit.format`` derives from :class:`WaveError`, so
callers can catch the whole family at once or single out the exact constraint
that failed. Errors are terminal: a decode either yields a complete ``Wave`` or
raises one of these.
"""


class WaveError(Exception):
    """Base class for WAV encode/decode failures."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class MalformedContainer(WaveError):
    """The RIFF structure or a chunk payload does not have the required shape."""


class InvalidFormat(WaveError):
    """The stream is RIFF but not a usable WAVE stream."""


class MissingFormatChunk(WaveError):
    """No ``fmt `` chunk was found in the WAVE container."""

    def __init__(self, message: str = "fmt chunk not found in WAVE container") -> None:
        super().__init__(message, field="fmt ")


class MissingDataChunk(WaveError):
    """No ``data`` chunk was found in the WAVE container."""

    def __init__(self, message: str = "data chunk not found in WAVE container") -> None:
        super().__init__(message, field="data")


class UnsupportedFormatCode(WaveError):
    """The format code is neither PCM nor IEEE float."""

    def __init__(self, format_code: int) -> None:
        self.format_code = format_code
        super().__init__(
            f"Unsupported format code: 0x{format_code:04X} (expected PCM or IEEE float)",
            field="format_code",
        )


class UnsupportedBitDepth(WaveError):
    """The bit depth is not valid for the declared format code."""

    def __init__(self, bits_per_sample: int, format_code: int) -> None:
        self.bits_per_sample = bits_per_sample
        self.format_code = format_code
        super().__init__(
            f"Unsupported bit depth {bits_per_sample} for format code 0x{format_code:04X}",
            field="bits_per_sample",
        )


UnsupportedBits = UnsupportedBitDepth


class TruncatedData(WaveError):
    """The data payload length is not a whole number of samples."""

    def __init__(self, length: int, sample_width: int) -> None:
        self.length = length
        self.sample_width = sample_width
        super().__init__(
            f"data chunk has {length} bytes, not a multiple of the "
            f"{sample_width}-byte sample width",
            field="data",
        )


class FormatNotImplemented(WaveError, NotImplementedError):
    """A recognized format combination has no implementation in this direction."""
