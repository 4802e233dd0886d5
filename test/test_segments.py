"""
Tests for the segment table and segment body decoding.
"""

import struct
import pytest
import sys
import os

# Add the parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, os.path.dirname(__file__))

from civ_anim.codec.animated_headers import read_animated_headers
from civ_anim.codec.animation import AnimatedChannelHeader
from civ_anim.codec.bit_reader import ByteReader
from civ_anim.codec.errors import InconsistentError, TruncatedError
from civ_anim.codec.header import AC11_OFFSET, V1_BASE, V1_DATA_START, parse_v1_header
from civ_anim.codec.segment_body import SegmentBodyDecoder
from civ_anim.codec.segments import read_segment_table
from blob_builder import build_reference_blob, build_two_segment_blob


def make_body_decoder(blob):
    """Build a SegmentBodyDecoder over a test blob."""
    reader = ByteReader(blob)
    v1 = parse_v1_header(blob)
    segments = read_segment_table(reader, v1, 1 + v1.last_frame)
    headers = read_animated_headers(reader, v1.section_start(3), v1.total_animated)
    return SegmentBodyDecoder(reader, v1, segments, headers)


class TestSegmentTable:
    """Test segment boundaries and records."""

    def test_single_segment_covers_all_frames(self):
        """Test that one segment implies a boundary list of [0]."""
        blob = build_reference_blob()
        segments = read_segment_table(ByteReader(blob), parse_v1_header(blob), 4)
        assert len(segments) == 1
        assert (segments[0].frame_start, segments[0].frame_end) == (0, 4)
        assert segments[0].animated_bits == 24

    def test_segments_are_contiguous(self):
        """Test that segments partition the frame range without gaps."""
        blob = build_two_segment_blob()
        segments = read_segment_table(ByteReader(blob), parse_v1_header(blob), 6)
        assert [s.index for s in segments] == [0, 1]
        assert segments[0].frame_start == 0
        for prev, cur in zip(segments, segments[1:]):
            assert prev.frame_end == cur.frame_start
        assert segments[-1].frame_end == 6
        assert sum(s.frame_count for s in segments) == 6

    def test_record_fields(self):
        """Test rotation and non-rotation bit counts."""
        blob = build_two_segment_blob()
        first = read_segment_table(ByteReader(blob), parse_v1_header(blob), 6)[0]
        assert first.animated_bits == 30
        assert first.rot_check == 12
        assert first.other_check == 18

    def test_zero_segments(self):
        """Test that a segment count of zero yields no segments."""
        blob = build_reference_blob()
        struct.pack_into('<I', blob, AC11_OFFSET + 0x20, 0)
        assert read_segment_table(ByteReader(blob), parse_v1_header(blob), 4) == []

    def test_first_boundary_must_be_zero(self):
        """Test rejection of a table that does not start at frame 0."""
        blob = build_two_segment_blob()
        struct.pack_into('<I', blob, V1_DATA_START, 1)
        with pytest.raises(InconsistentError):
            read_segment_table(ByteReader(blob), parse_v1_header(blob), 6)

    def test_boundaries_must_increase(self):
        """Test rejection of repeated boundaries."""
        blob = build_two_segment_blob()
        struct.pack_into('<I', blob, V1_DATA_START + 4, 0)
        with pytest.raises(InconsistentError):
            read_segment_table(ByteReader(blob), parse_v1_header(blob), 6)

    def test_boundary_past_frame_count(self):
        """Test rejection of a boundary at or beyond the frame count."""
        blob = build_two_segment_blob()
        struct.pack_into('<I', blob, V1_DATA_START + 4, 6)
        with pytest.raises(InconsistentError):
            read_segment_table(ByteReader(blob), parse_v1_header(blob), 6)

    def test_records_past_blob(self):
        """Test that a section 0 offset past the blob is truncated."""
        blob = build_two_segment_blob()
        struct.pack_into('<I', blob, AC11_OFFSET + 0x44, len(blob))
        with pytest.raises(TruncatedError):
            read_segment_table(ByteReader(blob), parse_v1_header(blob), 6)


class TestDequantize:
    """Test the animated channel dequantization formula."""

    def setup_method(self):
        """Set up a channel header."""
        self.header = AnimatedChannelHeader(offset=(1.0, -2.0, 0.0), scale=(4.0, 2.0, 1.0))

    def test_zero_maps_to_offset(self):
        """Test q = 0 gives the offset."""
        assert self.header.dequantize((0, 0, 0), 7) == pytest.approx((1.0, -2.0, 0.0))

    def test_max_maps_to_offset_plus_scale(self):
        """Test q = 2^w - 1 gives offset + scale."""
        assert self.header.dequantize((127, 127, 127), 7) == pytest.approx((5.0, 0.0, 1.0))

    def test_zero_width_is_offset(self):
        """Test that width 0 gives the offset."""
        assert self.header.dequantize((0, 0, 0), 0) == (1.0, -2.0, 0.0)

    def test_full_width(self):
        """Test the 32-bit extreme."""
        value = self.header.dequantize((0xFFFFFFFF, 0, 0), 32)
        assert value[0] == pytest.approx(5.0)


class TestSegmentBody:
    """Test bit width tables and bitstream decoding."""

    def test_quantized_samples_within_width(self):
        """Test that every sample fits its channel's bit width."""
        decoder = make_body_decoder(build_two_segment_blob())
        for index in range(2):
            widths, frames = decoder.decode_quantized(index)
            for frame in frames:
                for width, triplet in zip(widths, frame):
                    for q in triplet:
                        assert 0 <= q <= (1 << width) - 1

    def test_quantized_values(self):
        """Test exact sample values across segments and init data."""
        decoder = make_body_decoder(build_two_segment_blob())

        widths, frames = decoder.decode_quantized(0)
        assert widths == [4, 6]
        assert frames[0] == [(0, 15, 7), (0, 63, 31)]
        assert frames[2] == [(5, 5, 5), (10, 20, 30)]

        widths, frames = decoder.decode_quantized(1)
        assert widths == [0, 5]
        assert [f[0] for f in frames] == [(0, 0, 0)] * 3
        assert [f[1] for f in frames] == [(0, 31, 16), (16, 15, 16), (31, 0, 16)]

    def test_stream_region_ends_at_next_body(self):
        """Test that the first bitstream ends where the second body begins."""
        decoder = make_body_decoder(build_two_segment_blob())
        widths = decoder.read_bit_widths(0)
        start, length = decoder.stream_region(0, widths)
        assert length == 12
        assert start + length == V1_BASE + decoder.segments[1].body_offset

    def test_last_stream_ends_at_block_end(self):
        """Test that the last bitstream ends at the end of the AC11 block."""
        decoder = make_body_decoder(build_two_segment_blob())
        start, length = decoder.stream_region(1, decoder.read_bit_widths(1))
        assert start + length == decoder.v1.block_end

    def test_dequantized_reference_samples(self):
        """Test the reference segment's dequantized samples."""
        decoded = make_body_decoder(build_reference_blob()).decode(0)
        assert decoded.bit_widths == [8]
        xs = [samples[0][0] for samples in decoded.samples]
        assert xs == pytest.approx([0.0, 10.0 / 3.0, 20.0 / 3.0, 10.0])

    def test_width_over_32_rejected(self):
        """Test that an impossible bit width is inconsistent."""
        blob = build_two_segment_blob()
        decoder = make_body_decoder(blob)
        blob[V1_BASE + decoder.segments[0].body_offset] = 33
        with pytest.raises(InconsistentError):
            decoder.read_bit_widths(0)

    def test_stream_overlapping_widths_rejected(self):
        """Test that widths too large for the body are inconsistent."""
        blob = build_two_segment_blob()
        decoder = make_body_decoder(blob)
        blob[V1_BASE + decoder.segments[1].body_offset + 1] = 32
        with pytest.raises(InconsistentError):
            decoder.decode_quantized(1)

    def test_block_end_past_blob_rejected(self):
        """Test a data size that points beyond the blob."""
        blob = build_two_segment_blob()
        struct.pack_into('<I', blob, AC11_OFFSET, len(blob) * 2)
        decoder = make_body_decoder(blob)
        with pytest.raises(InconsistentError):
            decoder.decode_quantized(1)

    def test_segment_without_bits_has_no_body(self):
        """Test that a zero bit count skips the segment."""
        blob = build_reference_blob()
        decoder = make_body_decoder(blob)
        struct.pack_into('<I', blob, decoder.v1.section_start(0), 0)
        decoder = make_body_decoder(blob)
        assert decoder.decode(0) is None

    def test_empty_next_segment_still_bounds_stream(self):
        """Test the overlap check when the following segment carries no data."""
        blob = build_two_segment_blob()
        decoder = make_body_decoder(blob)
        record = decoder.v1.section_start(0) + 16
        first_body = decoder.segments[0].body_offset
        # second segment: no bits, body right after the first width table
        struct.pack_into('<I', blob, record, 0)
        struct.pack_into('<I', blob, record + 12, first_body + 2)
        decoder = make_body_decoder(blob)
        assert decoder.decode(1) is None
        with pytest.raises(InconsistentError):
            decoder.decode(0)
