import json
import logging
import sys
import time
from pathlib import Path
from typing import Annotated, Any

from cyclopts import App, Parameter
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from wavkit.cli.validators import validate_bit_depth, validate_timestamp
from wavkit.format import (
    EncodeOptions,
    ExtendedMetadata,
    FormatCode,
    FormatDescriptor,
    Wave,
    WaveError,
    compute_peaks,
    decode_with_metadata,
    save_wav,
    validate_wave,
)
from wavkit.format.types import resolve_sample_format

app = App(name="wavkit", help="A utility for inspecting and converting WAV files")
console = Console()
logger = logging.getLogger(__name__)


def print_error(message: str) -> None:
    """Print an error message in red."""
    console.print(message, style="bold red")


def print_success(message: str) -> None:
    """Print a success message in green."""
    console.print(message, style="bold green")


def print_warning(message: str) -> None:
    """Print a warning message in yellow."""
    console.print(message, style="bold yellow")


def print_json(payload: object) -> None:
    """Print a JSON document without wrapping or markup."""
    console.print(json.dumps(payload, indent=2), soft_wrap=True, markup=False, highlight=False)


def configure_logging(verbose: bool) -> None:
    """Send library log records to stderr through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def load_with_metadata(file: Path) -> tuple[Wave, ExtendedMetadata]:
    """Read and decode a WAV file along with its optional chunks."""
    data = file.read_bytes()
    logger.debug("Read %d bytes from %s", len(data), file)
    return decode_with_metadata(data)


def describe_error(error: WaveError) -> str:
    """Format a codec error with its class name and offending field."""
    message = f"{type(error).__name__}: {error}"
    if error.field:
        message += f" (field: {error.field!r})"
    return message


def summarize(wave: Wave, metadata: ExtendedMetadata) -> dict[str, Any]:
    """Build a JSON-serializable summary of a decoded file."""
    summary: dict[str, Any] = {
        "format": wave.sample_format.display_name,
        "format_code": wave.descriptor.format_code,
        "bits_per_sample": wave.bits_per_sample,
        "channels": wave.channels,
        "sample_rate": wave.sample_rate,
        "byte_rate": wave.descriptor.byte_rate,
        "block_align": wave.descriptor.block_align,
        "num_frames": wave.num_frames,
        "duration_seconds": wave.duration,
        "fact_frame_count": metadata.frame_count,
        "peak": None,
    }
    if metadata.peak is not None:
        summary["peak"] = {
            "version": metadata.peak.version,
            "timestamp": metadata.peak.timestamp,
            "channels": [
                {"value": entry.value, "position": entry.position}
                for entry in metadata.peak.peaks
            ],
        }
    return summary


@app.command
def info(
    file: Path,
    output_json: Annotated[bool, Parameter(name=["--json"])] = False,
    verbose: bool = False,
) -> int:
    """
    Display the format and optional chunks of a WAV file.

    Parameters
    ----------
    file: Path
        The path to the .wav file
    output_json: bool
        Output results as JSON (default: False)
    verbose: bool
        Log chunk-level details to stderr
    """
    configure_logging(verbose)

    if not file.exists():
        print_error(f"Error: File not found: {file}")
        return 1

    try:
        wave, metadata = load_with_metadata(file)
    except WaveError as e:
        print_error(f"Error decoding file: {describe_error(e)}")
        return 1
    except OSError as e:
        print_error(f"Error reading file: {e}")
        return 1

    summary = summarize(wave, metadata)
    if output_json:
        print_json(summary)
        return 0

    console.print(f"[bold]WAV file: {file}[/bold]")
    console.print(f"  Format: {summary['format']} (code {summary['format_code']})")
    console.print(f"  Channels: {wave.channels}")
    console.print(f"  Sample rate: {wave.sample_rate} Hz")
    console.print(f"  Byte rate: {summary['byte_rate']:,}")
    console.print(f"  Block align: {summary['block_align']}")
    console.print(f"  Frames: {wave.num_frames:,}")
    console.print(f"  Duration: {wave.duration:.3f}s")

    if metadata.frame_count is not None:
        console.print(f"  fact frame count: {metadata.frame_count:,}")

    if metadata.peak is not None:
        console.print(f"  PEAK timestamp: {metadata.peak.timestamp}")
        for channel, entry in enumerate(metadata.peak.peaks):
            console.print(
                f"    Channel {channel}: peak={entry.value:.6f} at frame {entry.position:,}"
            )

    return 0


@app.command
def validate(
    file: Path,
    strict: bool = False,
    output_json: Annotated[bool, Parameter(name=["--json"])] = False,
    verbose: bool = False,
) -> int:
    """
    Validate a WAV file.

    Decodes the file, reporting the exact constraint that fails, then checks
    the fact and PEAK chunks against the sample data.

    Parameters
    ----------
    file: Path
        The path to the .wav file to validate
    strict: bool
        Treat warnings as errors (default: False)
    output_json: bool
        Output results as JSON (default: False)
    verbose: bool
        Log chunk-level details to stderr
    """
    configure_logging(verbose)

    results: dict[str, object] = {
        "file": str(file),
        "valid": True,
        "errors": [],
        "warnings": [],
    }

    def fail(message: str) -> int:
        results["valid"] = False
        results["errors"] = [message]
        if output_json:
            print_json(results)
        else:
            print_error(f"[FAIL] {message}")
        return 1

    if not file.exists():
        return fail(f"File not found: {file}")

    try:
        wave, metadata = load_with_metadata(file)
    except WaveError as e:
        return fail(describe_error(e))
    except OSError as e:
        return fail(f"Error reading file: {e}")

    result = validate_wave(wave, metadata)
    errors = list(result.errors)
    warnings = list(result.warnings)

    # In strict mode, warnings become errors
    if strict and warnings:
        errors.extend(f"Strict mode: {w}" for w in warnings)

    results["valid"] = not errors
    results["errors"] = errors
    results["warnings"] = warnings

    if output_json:
        print_json(results)
        return 0 if results["valid"] else 1

    if results["valid"]:
        print_success(f"[PASS] {file}")
        console.print(f"  Format: {wave.sample_format.display_name}")
        console.print(f"  Channels: {wave.channels}")
        console.print(f"  Frames: {wave.num_frames:,}")

        if warnings:
            console.print("")
            for warning in warnings:
                print_warning(f"  [WARN] {warning}")
    else:
        print_error(f"[FAIL] {file}")
        for error in errors:
            console.print(f"  {error}")

    return 0 if results["valid"] else 1


@app.command
def convert(
    source: Path,
    output: Path,
    bits: Annotated[int | None, Parameter(validator=validate_bit_depth)] = None,
    use_float: Annotated[bool, Parameter(name=["--float"])] = False,
    fact: bool = False,
    peak: bool = False,
    timestamp: Annotated[int | None, Parameter(validator=validate_timestamp)] = None,
    dry_run: bool = False,
    verbose: bool = False,
) -> int:
    """
    Re-encode a WAV file with a different sample format.

    Channel layout and sample rate are preserved; only the on-disk sample
    encoding and the optional chunks change.

    Parameters
    ----------
    source: Path
        The source WAV file
    output: Path
        Output path for the converted file
    bits: int | None
        Target bits per sample (default: keep the source bit depth)
    use_float: bool
        Write IEEE float samples instead of integer PCM (default: False)
    fact: bool
        Include a fact chunk with the frame count (default: False)
    peak: bool
        Include a PEAK chunk with per-channel peaks (default: False)
    timestamp: int | None
        Unix timestamp for the PEAK chunk (default: now)
    dry_run: bool
        Preview the conversion without writing output (default: False)
    verbose: bool
        Log chunk-level details to stderr
    """
    configure_logging(verbose)

    if not source.exists():
        print_error(f"Error: Source file not found: {source}")
        console.print("  Suggestion: Check the file path and try again.")
        return 1

    try:
        wave, _ = load_with_metadata(source)
    except WaveError as e:
        print_error(f"Error decoding file: {describe_error(e)}")
        return 1
    except OSError as e:
        print_error(f"Error reading file: {e}")
        return 1

    format_code = FormatCode.IEEE_FLOAT if use_float else FormatCode.PCM
    target_bits = bits if bits is not None else wave.bits_per_sample
    try:
        target_format = resolve_sample_format(format_code, target_bits)
    except WaveError as e:
        print_error(f"Error: {describe_error(e)}")
        return 1

    if peak and timestamp is None:
        timestamp = int(time.time())
    options = EncodeOptions(include_fact=fact, include_peak=peak, peak_timestamp=timestamp)

    leftover = len(wave.samples) % wave.channels
    if leftover:
        print_warning(f"Dropping {leftover} trailing samples that do not fill a frame")

    target = Wave(
        descriptor=FormatDescriptor.for_format(target_format, wave.channels, wave.sample_rate),
        samples=wave.frames().reshape(-1),
    )

    console.print(
        f"Converting {source} ({wave.sample_format.display_name}) "
        f"to {target_format.display_name}..."
    )
    if dry_run:
        console.print("[cyan]Dry run: no output written[/cyan]")
        return 0

    try:
        save_wav(output, target, options)
    except WaveError as e:
        print_error(f"Error encoding file: {describe_error(e)}")
        return 1
    except OSError as e:
        print_error(f"Error writing file: {e}")
        return 1

    print_success(f"Wrote {target.num_frames:,} frames to {output}")
    return 0


@app.command
def peaks(
    file: Path,
    output_json: Annotated[bool, Parameter(name=["--json"])] = False,
) -> int:
    """
    Show the peak amplitude of each channel.

    Peaks are computed from the decoded samples, not read from a PEAK chunk.

    Parameters
    ----------
    file: Path
        The path to the .wav file
    output_json: bool
        Output results as JSON (default: False)
    """
    if not file.exists():
        print_error(f"Error: File not found: {file}")
        return 1

    try:
        wave, _ = load_with_metadata(file)
    except WaveError as e:
        print_error(f"Error decoding file: {describe_error(e)}")
        return 1
    except OSError as e:
        print_error(f"Error reading file: {e}")
        return 1

    entries = compute_peaks(wave.samples, wave.channels)

    if output_json:
        payload = [
            {"channel": channel, "value": entry.value, "position": entry.position}
            for channel, entry in enumerate(entries)
        ]
        print_json(payload)
        return 0

    table = Table(show_header=True, header_style="bold")
    table.add_column("Channel", justify="right")
    table.add_column("Peak", justify="right")
    table.add_column("Frame", justify="right")
    table.add_column("Time (s)", justify="right")

    for channel, entry in enumerate(entries):
        table.add_row(
            str(channel),
            f"{entry.value:.6f}",
            f"{entry.position:,}",
            f"{entry.position / wave.sample_rate:.3f}",
        )

    console.print(table)
    return 0


if __name__ == "__main__":
    sys.exit(app())
