"""
Segment body decoding.

Body layout at BASE + body_offset:

    [bit widths: one byte per animated channel]
    [per-segment init data, variable]
    [bitstream: frames * sum(widths) * 3 bits, LSB first]

The bitstream length is not stored. Its end is the next segment's body
(or the end of the AC11 block for the last segment), and its start is
found by subtracting the expected byte length from that end.
"""

import logging
from typing import List, Optional, Tuple

from civ_anim.codec.animation import AnimatedChannelHeader, DecodedSegment, Segment
from civ_anim.codec.bit_reader import BitReader, ByteReader
from civ_anim.codec.errors import InconsistentError
from civ_anim.codec.header import V1Header, V1_BASE

logger = logging.getLogger(__name__)

MAX_BIT_WIDTH = 32

QuantizedFrame = List[Tuple[int, int, int]]


class SegmentBodyDecoder:
    """
    Decodes the animated samples of each segment.

    Usage:
        decoder = SegmentBodyDecoder(reader, v1, segments, headers)
        for index in range(len(segments)):
            decoded = decoder.decode(index)
    """

    def __init__(self, reader: ByteReader, v1: V1Header, segments: List[Segment],
                 headers: List[AnimatedChannelHeader], log: Optional[logging.Logger] = None):
        self.reader = reader
        self.v1 = v1
        self.segments = segments
        self.headers = headers
        self.channel_count = len(headers)
        self.logger = log or logger

    def has_body(self, index: int) -> bool:
        """Whether a segment carries animated data."""
        segment = self.segments[index]
        return segment.animated_bits != 0 and segment.frame_count > 0 and self.channel_count > 0

    def read_bit_widths(self, index: int) -> List[int]:
        """Read the per-channel bit widths of a segment."""
        segment = self.segments[index]
        start = V1_BASE + segment.body_offset
        widths = list(self.reader.bytes_at(start, self.channel_count, "segment bit widths"))
        for channel, width in enumerate(widths):
            if width > MAX_BIT_WIDTH:
                raise InconsistentError(
                    f"Segment {index} channel {channel} has bit width {width}", start + channel)
        return widths

    def stream_region(self, index: int, widths: List[int]) -> Tuple[int, int]:
        """
        Locate the bitstream of a segment.

        Returns:
            (absolute start offset, length in bytes)

        Raises:
            InconsistentError: The inferred region overlaps the width table
                or lies outside the blob
        """
        segment = self.segments[index]
        bits_per_frame = sum(widths) * 3
        stream_bytes = (bits_per_frame * segment.frame_count + 7) // 8

        if index < len(self.segments) - 1:
            end = V1_BASE + self.segments[index + 1].body_offset
        else:
            end = self.v1.block_end

        widths_end = V1_BASE + segment.body_offset + self.channel_count
        start = end - stream_bytes

        if end > len(self.reader):
            raise InconsistentError(
                f"Segment {index} bitstream ends past the blob ({end} > {len(self.reader)})", end)
        if start < widths_end:
            raise InconsistentError(
                f"Segment {index} bitstream of {stream_bytes} bytes overlaps its width table", start)

        return start, stream_bytes

    def decode_quantized(self, index: int) -> Tuple[List[int], List[QuantizedFrame]]:
        """
        Read the raw quantized triplets of a segment.

        Zero-width channels consume no bits and yield (0, 0, 0).

        Returns:
            (bit widths, frames[frame][channel] = (qx, qy, qz))
        """
        segment = self.segments[index]
        widths = self.read_bit_widths(index)
        start, _ = self.stream_region(index, widths)

        bits = BitReader(self.reader.data, start)
        frames: List[QuantizedFrame] = []
        for _ in range(segment.frame_count):
            frame: QuantizedFrame = []
            for width in widths:
                if width == 0:
                    frame.append((0, 0, 0))
                    continue
                frame.append((bits.read_lsb(width), bits.read_lsb(width), bits.read_lsb(width)))
            frames.append(frame)

        return widths, frames

    def decode(self, index: int) -> Optional[DecodedSegment]:
        """
        Decode and dequantize one segment.

        Returns:
            DecodedSegment, or None when the segment has no animated data
        """
        if not self.has_body(index):
            return None

        widths, frames = self.decode_quantized(index)
        self.logger.debug(
            f"  segment {index}: frames {self.segments[index].frame_start}-"
            f"{self.segments[index].frame_end} bits/frame={sum(widths) * 3}")
        decoded = DecodedSegment(segment=self.segments[index], bit_widths=widths)
        for frame in frames:
            decoded.samples.append([
                header.dequantize(quantized, width)
                for header, quantized, width in zip(self.headers, frame, widths)
            ])
        return decoded
