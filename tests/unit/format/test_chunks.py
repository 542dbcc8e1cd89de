"""Unit tests for chunk collection and assembly."""

import logging
import struct

import numpy as np
import pytest

from wavkit.format.chunks import (
    assemble_chunks,
    collect_chunks,
    interpret_chunks,
    read_extended_metadata,
)
from wavkit.format.errors import (
    FormatNotImplemented,
    InvalidFormat,
    MissingDataChunk,
    MissingFormatChunk,
    UnsupportedFormatCode,
)
from wavkit.format.model import Wave
from wavkit.format.riff import Chunk, Container, parse
from wavkit.format.types import EncodeOptions, SampleFormat


class TestCollectChunks:
    """Tests for collect_chunks."""

    def test_rejects_non_wave_form(self, make_stream) -> None:
        """Test that a RIFF stream of another form type is rejected."""
        root = parse(make_stream([(b"data", b"")], form_type=b"AVI "))

        with pytest.raises(InvalidFormat) as excinfo:
            collect_chunks(root)
        assert excinfo.value.field == "form_type"

    def test_later_duplicate_wins(self, make_stream) -> None:
        """Test that a repeated chunk id replaces the earlier one."""
        root = parse(make_stream([(b"data", b"\x01\x00"), (b"data", b"\x02\x00")]))

        lookup = collect_chunks(root)

        assert lookup[b"data"] == Chunk(b"data", b"\x02\x00")

    def test_skips_nested_containers(self, make_stream) -> None:
        """Test that LIST containers are not indexed."""
        info = b"INFO" + b"INAM" + struct.pack("<I", 2) + b"hi"
        root = parse(make_stream([(b"LIST", info), (b"data", b"")]))

        lookup = collect_chunks(root)

        assert list(lookup) == [b"data"]

    def test_logs_unknown_chunks(self, make_stream, caplog) -> None:
        """Test that unrecognized chunks are logged at debug level."""
        root = parse(make_stream([(b"bext", b"\x00\x00"), (b"data", b"")]))

        with caplog.at_level(logging.DEBUG, logger="wavkit.format.chunks"):
            collect_chunks(root)

        assert "bext" in caplog.text


class TestInterpretChunks:
    """Tests for interpret_chunks."""

    def test_data_before_fmt(self, make_stream, make_fmt) -> None:
        """Test that chunk order in the stream does not matter."""
        stream = make_stream([(b"data", struct.pack("<h", 32767)), (b"fmt ", make_fmt())])

        wave = interpret_chunks(parse(stream))

        assert wave.samples.tolist() == [1.0]

    def test_missing_fmt(self, make_stream) -> None:
        """Test that a stream without fmt is rejected."""
        with pytest.raises(MissingFormatChunk) as excinfo:
            interpret_chunks(parse(make_stream([(b"data", b"\x00\x00")])))
        assert excinfo.value.field == "fmt "

    def test_missing_data(self, make_stream, make_fmt) -> None:
        """Test that a stream without data is rejected."""
        with pytest.raises(MissingDataChunk) as excinfo:
            interpret_chunks(parse(make_stream([(b"fmt ", make_fmt())])))
        assert excinfo.value.field == "data"

    def test_missing_both_reports_fmt(self, make_stream) -> None:
        """Test that fmt is checked before data."""
        with pytest.raises(MissingFormatChunk):
            interpret_chunks(parse(make_stream([(b"junk", b"")])))

    def test_unsupported_code(self, make_stream, make_fmt) -> None:
        """Test that WAVE_FORMAT_EXTENSIBLE is rejected."""
        stream = make_stream([(b"fmt ", make_fmt(format_code=0xFFFE)), (b"data", b"")])

        with pytest.raises(UnsupportedFormatCode):
            interpret_chunks(parse(stream))


class TestReadExtendedMetadata:
    """Tests for read_extended_metadata."""

    def test_absent_chunks(self, make_stream, make_fmt) -> None:
        """Test that missing fact and PEAK chunks read as None."""
        root = parse(make_stream([(b"fmt ", make_fmt()), (b"data", b"")]))

        metadata = read_extended_metadata(root)

        assert metadata.frame_count is None
        assert metadata.peak is None

    def test_peak_without_fmt(self, make_stream) -> None:
        """Test that PEAK cannot be read without a channel count."""
        peak = struct.pack("<IIfI", 1, 0, 0.5, 0)
        root = parse(make_stream([(b"PEAK", peak), (b"data", b"")]))

        with pytest.raises(MissingFormatChunk):
            read_extended_metadata(root)


class TestAssembleChunks:
    """Tests for assemble_chunks."""

    @pytest.fixture
    def stereo(self) -> Wave:
        return Wave.from_samples(
            [0.5, -0.25, -1.0, 0.125], sample_rate=48000, channels=2
        )

    def test_default_order(self, stereo: Wave) -> None:
        """Test that only fmt and data are emitted by default."""
        root = assemble_chunks(stereo)

        assert isinstance(root, Container)
        assert root.chunk_id == b"RIFF"
        assert root.form_type == b"WAVE"
        assert [child.chunk_id for child in root.children] == [b"fmt ", b"data"]

    def test_full_order(self, stereo: Wave) -> None:
        """Test that fact precedes data and PEAK follows it."""
        options = EncodeOptions(include_fact=True, include_peak=True, peak_timestamp=0)

        root = assemble_chunks(stereo, options)

        assert [child.chunk_id for child in root.children] == [
            b"fmt ",
            b"fact",
            b"data",
            b"PEAK",
        ]

    def test_fact_payload(self, stereo: Wave) -> None:
        """Test that fact records the frame count."""
        root = assemble_chunks(stereo, EncodeOptions(include_fact=True))

        fact = root.children[1]
        assert isinstance(fact, Chunk)
        assert fact.payload == struct.pack("<I", 2)

    def test_peak_reflects_stored_samples(self) -> None:
        """Test that PEAK values describe clamped, quantized data."""
        wave = Wave.from_samples([0.1, -3.0], sample_rate=8000)
        options = EncodeOptions(include_peak=True, peak_timestamp=7)

        root = assemble_chunks(wave, options)
        metadata = read_extended_metadata(root)

        assert metadata.peak is not None
        assert metadata.peak.timestamp == 7
        entry = metadata.peak.peaks[0]
        assert entry.position == 1
        assert entry.value == pytest.approx(32768 / 32767, rel=1e-6)

    def test_unencodable_format(self) -> None:
        """Test that 64-bit float fails before any chunk is built."""
        wave = Wave.from_samples(
            np.zeros(4), sample_rate=44100, sample_format=SampleFormat.FLOAT64
        )

        with pytest.raises(FormatNotImplemented):
            assemble_chunks(wave)

    def test_partial_frame_builds_nothing(self) -> None:
        """Test that samples short of a whole frame are rejected before fact is built."""
        wave = Wave.from_samples([0.1, 0.2, 0.3], sample_rate=8000, channels=2)

        with pytest.raises(InvalidFormat) as excinfo:
            assemble_chunks(wave, EncodeOptions(include_fact=True))
        assert excinfo.value.field == "samples"

    def test_peak_requires_timestamp(self, stereo: Wave) -> None:
        """Test that PEAK output without a timestamp is refused."""
        options = EncodeOptions(include_peak=True, peak_timestamp=0)
        object.__setattr__(options, "peak_timestamp", None)

        with pytest.raises(ValueError, match="peak_timestamp"):
            assemble_chunks(stereo, options)
