"""The in-memory WAV model: a format descriptor plus normalized samples."""

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from wavkit.format.types import FormatDescriptor, SampleFormat


@dataclass
class Wave:
    """Decoded audio: on-disk layout plus channel-interleaved normalized samples.

    Samples are held as a flat float64 array in storage order
    (frame 0 channel 0, frame 0 channel 1, ...). Sequences are converted on
    construction; a float64 array is adopted as-is, so the caller hands over
    ownership of it.
    """

    descriptor: FormatDescriptor
    """Sample layout used when the audio is encoded."""

    samples: NDArray[np.float64]
    """Flat, channel-interleaved normalized samples."""

    def __post_init__(self) -> None:
        self.samples = np.asarray(self.samples, dtype=np.float64).reshape(-1)

    @classmethod
    def from_samples(
        cls,
        samples: Sequence[float] | NDArray[np.floating],
        *,
        sample_rate: int,
        channels: int = 1,
        sample_format: SampleFormat = SampleFormat.PCM_S16,
    ) -> "Wave":
        """Build a Wave from interleaved samples and a target sample format."""
        descriptor = FormatDescriptor.for_format(sample_format, channels, sample_rate)
        return cls(descriptor=descriptor, samples=np.asarray(samples, dtype=np.float64))

    @property
    def channels(self) -> int:
        return self.descriptor.channels

    @property
    def sample_rate(self) -> int:
        return self.descriptor.sample_rate

    @property
    def bits_per_sample(self) -> int:
        return self.descriptor.bits_per_sample

    @property
    def sample_format(self) -> SampleFormat:
        return self.descriptor.sample_format

    @property
    def num_frames(self) -> int:
        """Number of complete frames."""
        return len(self.samples) // self.channels

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        return self.num_frames / self.sample_rate

    @property
    def released(self) -> bool:
        return self.samples.size == 0

    def frames(self) -> NDArray[np.float64]:
        """Get the complete frames as a (num_frames, channels) view."""
        usable = self.num_frames * self.channels
        return self.samples[:usable].reshape(self.num_frames, self.channels)

    def release(self) -> None:
        """Drop the sample buffer. Safe to call more than once."""
        self.samples = np.empty(0, dtype=np.float64)
