"""
Channel classification bitfield.

Two bits per channel, packed sixteen to a little-endian u32 word with the
first channel in the most significant pair. Each group (rotation, position,
scale) starts on a word boundary:

    word 0 .. k-1      rotation  (k = ceil(bones / 16))
    word k .. 2k-1     position
    word 2k .. 3k-1    scale

Values: 0 identity, 1 constant, 2 animated.
"""

from typing import List, Optional

from civ_anim.codec.animation import ChannelClassification, ChannelKind
from civ_anim.codec.bit_reader import ByteReader
from civ_anim.codec.errors import TruncatedError
from civ_anim.config import DecoderConfig

PAIRS_PER_WORD = 16


def unpack_word(word: int) -> List[int]:
    """Split a u32 into sixteen 2-bit values, most significant pair first."""
    return [(word >> (30 - i * 2)) & 3 for i in range(PAIRS_PER_WORD)]


def group_stride(bone_count: int) -> int:
    """Number of 2-bit slots reserved per channel group."""
    return -(-bone_count // PAIRS_PER_WORD) * PAIRS_PER_WORD


def _to_kind(value: int) -> ChannelKind:
    if value == ChannelKind.CONSTANT:
        return ChannelKind.CONSTANT
    if value == ChannelKind.ANIMATED:
        return ChannelKind.ANIMATED
    return ChannelKind.IDENTITY


def classify_channels(reader: ByteReader, start: int, size: int, bone_count: int,
                      config: Optional[DecoderConfig] = None) -> ChannelClassification:
    """
    Decode the classification bitfield.

    Args:
        reader: Reader over the blob
        start: Absolute offset of the bitfield
        size: Bitfield size in bytes (section 2 offset minus section 1 offset)
        bone_count: Bones per channel group

    Returns:
        ChannelClassification with one kind per bone per group

    Raises:
        TruncatedError: Size is negative, implausibly large, too small for
            bone_count, or past the blob
    """
    config = config or DecoderConfig()
    if size < 0 or size > config.max_bitfield_bytes:
        raise TruncatedError(f"Implausible bitfield size {size}", start)

    stride = group_stride(bone_count)
    needed = 3 * stride // 4
    if size < needed:
        raise TruncatedError(
            f"Bitfield of {size} bytes cannot classify {bone_count} bones ({needed} needed)", start)

    word_count = -(-size // 4)
    words = reader.u32_array(start, word_count, "channel bitfield")

    values: List[int] = []
    for word in words:
        values.extend(unpack_word(word))

    def group(base: int) -> List[ChannelKind]:
        return [_to_kind(values[base + b]) for b in range(bone_count)]

    return ChannelClassification(
        rotation=group(0),
        position=group(stride),
        scale=group(2 * stride),
    )
