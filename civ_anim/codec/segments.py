"""
Segment table.

With two or more segments, the frame boundaries follow the V1 sub-header
as segment_count u32 values plus one sentinel. The 16-byte segment records
live at section 0: [animated_bits, rot_check, other_check, body_offset].
"""

from typing import List

from civ_anim.codec.animation import Segment
from civ_anim.codec.bit_reader import ByteReader
from civ_anim.codec.errors import InconsistentError
from civ_anim.codec.header import V1Header, V1_DATA_START

SEGMENT_RECORD_SIZE = 16


def read_frame_boundaries(reader: ByteReader, v1: V1Header) -> List[int]:
    """Read the first frame of every segment."""
    if v1.segment_count >= 2:
        bounds = reader.u32_array(V1_DATA_START, v1.segment_count, "segment frame boundaries")
        # one sentinel u32 follows
        reader.require(V1_DATA_START + v1.segment_count * 4, 4, "segment boundary sentinel")
        return list(bounds)
    return [0]


def read_segment_table(reader: ByteReader, v1: V1Header, frame_count: int) -> List[Segment]:
    """
    Read segment boundaries and records.

    Returns:
        Segments partitioning [0, frame_count) in increasing order

    Raises:
        TruncatedError: Table runs past the blob
        InconsistentError: Boundaries do not start at 0, are not strictly
            increasing, or reach past the frame count
    """
    count = v1.segment_count
    if count == 0:
        return []

    bounds = read_frame_boundaries(reader, v1)
    if bounds[0] != 0:
        raise InconsistentError(f"First segment starts at frame {bounds[0]}, expected 0")
    for prev, cur in zip(bounds, bounds[1:]):
        if cur <= prev:
            raise InconsistentError(f"Segment boundaries not increasing: {prev} -> {cur}")
    if bounds[-1] >= frame_count:
        raise InconsistentError(
            f"Segment boundary {bounds[-1]} outside frame range {frame_count}")

    start = v1.section_start(0)
    records = reader.u32_array(start, count * 4, "segment records")

    segments = []
    for i in range(count):
        bits, rot_check, other_check, body_offset = records[i * 4:i * 4 + 4]
        frame_end = bounds[i + 1] if i < count - 1 else frame_count
        segments.append(Segment(
            index=i,
            frame_start=bounds[i],
            frame_end=frame_end,
            animated_bits=bits,
            rot_check=rot_check,
            other_check=other_check,
            body_offset=body_offset,
        ))
    return segments
