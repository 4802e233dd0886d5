"""
Tests for the civ_anim bit and byte readers.
"""

import pytest
import sys
import os

# Add the parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, os.path.dirname(__file__))

from civ_anim.codec.bit_reader import BitReader, ByteReader
from civ_anim.codec.errors import TruncatedError
from blob_builder import BitWriter


class TestBitReader:
    """Test LSB-first variable-width reads."""

    def test_reads_lsb_first_within_byte(self):
        """Test that the lowest bit of a byte is read first."""
        reader = BitReader(bytes([0b10110001]))
        assert reader.read_lsb(1) == 1
        assert reader.read_lsb(3) == 0b000
        assert reader.read_lsb(4) == 0b1011
        assert reader.bit_position == 8

    def test_reads_across_byte_boundary(self):
        """Test a value spanning two bytes."""
        # value 0x1FF in 9 bits starting at bit 4
        reader = BitReader(bytes([0xF0, 0x1F]))
        reader.read_lsb(4)
        assert reader.read_lsb(9) == 0x1FF
        assert reader.bit_position == 13

    def test_full_32_bit_read(self):
        """Test reading a full 32-bit word."""
        reader = BitReader(bytes([0x78, 0x56, 0x34, 0x12]))
        assert reader.read_lsb(32) == 0x12345678

    def test_zero_width_read_consumes_nothing(self):
        """Test that a zero-bit read returns 0 and keeps the cursor."""
        reader = BitReader(bytes([0xFF]))
        assert reader.read_lsb(0) == 0
        assert reader.bit_position == 0

    def test_start_offset(self):
        """Test that reading begins at the given byte offset."""
        reader = BitReader(bytes([0xAA, 0x05]), start=1)
        assert reader.read_lsb(4) == 5

    def test_past_end_reads_zero(self):
        """Test that bits past the buffer read as zero without raising."""
        reader = BitReader(bytes([0xFF]))
        assert reader.read_lsb(12) == 0xFF
        assert reader.read_lsb(8) == 0
        assert reader.bit_position == 20

    def test_bytes_consumed_rounds_up(self):
        """Test byte accounting of partial bytes."""
        reader = BitReader(bytes(4))
        reader.read_lsb(9)
        assert reader.bytes_consumed == 2

    def test_rejects_width_over_32(self):
        """Test that widths above 32 are a programming error."""
        with pytest.raises(ValueError):
            BitReader(bytes(8)).read_lsb(33)

    def test_mixed_widths_match_writer(self):
        """Test a sequence of mixed widths packed by the test writer."""
        values = [(5, 3), (0, 1), (1023, 10), (7, 3), (123456, 17), (1, 1)]
        writer = BitWriter()
        for value, width in values:
            writer.write(value, width)
        reader = BitReader(writer.to_bytes())
        assert [reader.read_lsb(width) for _, width in values] == [v for v, _ in values]


class TestByteReader:
    """Test bounds-checked absolute reads."""

    def test_u32_little_endian(self):
        """Test u32 byte order."""
        reader = ByteReader(bytes([0xB0, 0x6A, 0xB0, 0x6A]))
        assert reader.u32(0) == 0x6AB06AB0

    def test_read_past_end_raises_truncated(self):
        """Test that out-of-range reads raise TruncatedError with the offset."""
        reader = ByteReader(bytes(6))
        with pytest.raises(TruncatedError) as exc:
            reader.u32(4, "field")
        assert exc.value.offset == 4

    def test_negative_offset_raises_truncated(self):
        """Test that negative offsets are rejected."""
        with pytest.raises(TruncatedError):
            ByteReader(bytes(16)).require(-4, 4)

    def test_u32_array(self):
        """Test reading several u32 values."""
        reader = ByteReader(bytes([1, 0, 0, 0, 2, 0, 0, 0]))
        assert reader.u32_array(0, 2) == (1, 2)
