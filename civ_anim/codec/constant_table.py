"""
Constant channel values.

Three flat arrays follow the classification bitfield, 12 bytes per entry:
rotations (x, y, z of a unit quaternion), positions (stored at 0.1 scale)
and scales.
"""

from typing import Tuple

from civ_anim.codec.animation import ConstantTables
from civ_anim.codec.bit_reader import ByteReader
from civ_anim.codec.quat import from_smallest_three

ENTRY_SIZE = 12
POSITION_SCALE = 10.0


def read_constant_tables(reader: ByteReader, cursor: int,
                         counts: Tuple[int, int, int]) -> Tuple[ConstantTables, int]:
    """
    Read the constant rotation, position and scale arrays.

    Args:
        reader: Reader over the blob
        cursor: Absolute offset right after the bitfield
        counts: (rotation, position, scale) entry counts

    Returns:
        (ConstantTables, offset after the last entry)

    Raises:
        TruncatedError: An entry lies past the end of the blob
    """
    rot_count, pos_count, scale_count = counts
    reader.require(cursor, (rot_count + pos_count + scale_count) * ENTRY_SIZE, "constant tables")
    tables = ConstantTables()

    for _ in range(rot_count):
        x, y, z = reader.vec3(cursor, "constant rotation")
        tables.rotations.append(from_smallest_three(x, y, z))
        cursor += ENTRY_SIZE

    for _ in range(pos_count):
        x, y, z = reader.vec3(cursor, "constant position")
        tables.positions.append((x * POSITION_SCALE, y * POSITION_SCALE, z * POSITION_SCALE))
        cursor += ENTRY_SIZE

    for _ in range(scale_count):
        tables.scales.append(reader.vec3(cursor, "constant scale"))
        cursor += ENTRY_SIZE

    return tables, cursor
