"""
Per-channel dequantization headers (section 3).

One 24-byte record per animated channel: offset xyz, scale xyz. Channels
are ordered rotation, then position, then scale, each in bone order.
"""

from typing import List

from civ_anim.codec.animation import AnimatedChannelHeader
from civ_anim.codec.bit_reader import ByteReader

HEADER_RECORD_SIZE = 24


def read_animated_headers(reader: ByteReader, start: int, count: int) -> List[AnimatedChannelHeader]:
    """Read count dequantization records starting at an absolute offset."""
    reader.require(start, count * HEADER_RECORD_SIZE, "animated channel headers")
    headers = []
    cursor = start
    for _ in range(count):
        values = reader.vec6(cursor, "animated channel header")
        headers.append(AnimatedChannelHeader(offset=values[0:3], scale=values[3:6]))
        cursor += HEADER_RECORD_SIZE
    return headers
