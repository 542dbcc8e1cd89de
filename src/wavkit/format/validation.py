"""Consistency checks for decoded WAV files.

Decoding already rejects anything that cannot be represented. These checks
report softer problems that a decoded file can still have, such as samples
outside the nominal range or a ``fact`` chunk that disagrees with the data.
"""

from dataclasses import dataclass

import numpy as np

from wavkit.format.chunks import ExtendedMetadata
from wavkit.format.extended import PeakChunk, compute_peaks
from wavkit.format.model import Wave

# Stored PEAK values are float32
PEAK_TOLERANCE = 1e-6


@dataclass
class ValidationResult:
    """Result of validation with optional warnings."""

    valid: bool
    errors: list[str]
    warnings: list[str]

    @classmethod
    def success(cls, warnings: list[str] | None = None) -> "ValidationResult":
        """Create a successful validation result."""
        return cls(valid=True, errors=[], warnings=warnings or [])

    @classmethod
    def failure(cls, errors: list[str], warnings: list[str] | None = None) -> "ValidationResult":
        """Create a failed validation result."""
        return cls(valid=False, errors=errors, warnings=warnings or [])


def validate_wave(wave: Wave, metadata: ExtendedMetadata | None = None) -> ValidationResult:
    """Check a decoded Wave and its optional chunks for consistency.

    Errors:
    - samples contain NaN or Infinity

    Warnings:
    - trailing samples that do not fill a whole frame
    - float samples outside [-1, 1]
    - ``fact`` frame count differs from the data
    - ``PEAK`` entries differ from the peaks of the data

    Args:
        wave: The decoded audio.
        metadata: Optional chunks read alongside it.

    Returns:
        ValidationResult with errors and warnings.
    """
    errors: list[str] = []
    warnings: list[str] = []
    samples = wave.samples

    if not np.all(np.isfinite(samples)):
        nan_count = int(np.sum(np.isnan(samples)))
        inf_count = int(np.sum(np.isinf(samples)))
        first_bad_idx = int(np.where(~np.isfinite(samples))[0][0])
        errors.append(
            f"samples contain non-finite values ({nan_count} NaN, {inf_count} Inf); "
            f"first at sample index {first_bad_idx}"
        )

    leftover = len(samples) % wave.channels
    if leftover:
        warnings.append(
            f"data ends with {leftover} samples that do not fill a "
            f"{wave.channels}-channel frame"
        )

    if wave.sample_format.is_float and samples.size and np.all(np.isfinite(samples)):
        max_abs = float(np.max(np.abs(samples)))
        if max_abs > 1.0:
            warnings.append(f"samples exceed [-1, 1] range, max |sample| = {max_abs:.4f}")

    if metadata is not None:
        if metadata.frame_count is not None and metadata.frame_count != wave.num_frames:
            warnings.append(
                f"fact chunk declares {metadata.frame_count} frames, data holds {wave.num_frames}"
            )
        if metadata.peak is not None:
            warnings.extend(_check_peaks(wave, metadata.peak))

    if errors:
        return ValidationResult.failure(errors, warnings)
    return ValidationResult.success(warnings)


def _check_peaks(wave: Wave, peak: PeakChunk) -> list[str]:
    if len(peak.peaks) != wave.channels:
        return [f"PEAK chunk lists {len(peak.peaks)} channels, data has {wave.channels}"]

    warnings = []
    actual = compute_peaks(wave.samples, wave.channels)
    for channel, (stored, computed) in enumerate(zip(peak.peaks, actual, strict=True)):
        if abs(stored.value - computed.value) > PEAK_TOLERANCE * max(1.0, computed.value):
            warnings.append(
                f"PEAK channel {channel}: stored value {stored.value:.6f}, "
                f"data peak {computed.value:.6f}"
            )
        elif stored.position != computed.position:
            warnings.append(
                f"PEAK channel {channel}: stored position {stored.position}, "
                f"data peak at frame {computed.position}"
            )
    return warnings
