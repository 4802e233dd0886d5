"""
Animation header parsing.

Outer header (0x60 bytes, little-endian):
  0x00  u32  magic (0x6AB06AB0)
  0x08  f32  fps
  0x0C  u32  frame count
  0x10  u32  bone field (full value for V0, low 16 bits for V1)
  0x48  u32  0xFFFFFFFF for V0, offset of the AC11 block for V1
  0x50  u32  name string offset

V1 sub-header (AC = 0x60, offsets relative to AC):
  +0x00 data size        +0x20 segment count      +0x34 const rot count
  +0x04 hash             +0x24 total animated     +0x38 const pos count
  +0x08 magic 0xAC11AC11 +0x28 animated rot       +0x3C const scale count
  +0x0C version          +0x2C animated pos       +0x40 sentinel
  +0x10 bone count       +0x30 animated scale     +0x44 section offsets[4]
  +0x14 last frame
  +0x18 fps
  +0x1C flags

Section offsets and segment body offsets are relative to BASE = AC + 0x20.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from civ_anim.codec.animation import FormatVersion
from civ_anim.codec.bit_reader import ByteReader
from civ_anim.codec.errors import BadMagicError, TruncatedError
from civ_anim.config import DecoderConfig

logger = logging.getLogger(__name__)

ANIM_MAGIC = 0x6AB06AB0
AC11_MAGIC = 0xAC11AC11
V0_SENTINEL = 0xFFFFFFFF

HEADER_SIZE = 0x60
AC11_OFFSET = 0x60
V1_BASE = AC11_OFFSET + 0x20
V1_HEADER_SIZE = 0x54
V1_DATA_START = AC11_OFFSET + V1_HEADER_SIZE


@dataclass(frozen=True)
class V1Header:
    """AC11 sub-header fields."""
    data_size: int
    anim_hash: int
    inner_magic: int
    version: int
    bone_count: int
    last_frame: int
    fps: float
    flags: int
    segment_count: int
    total_animated: int
    animated_counts: Tuple[int, int, int]
    constant_counts: Tuple[int, int, int]
    section_offsets: Tuple[int, int, int, int]

    @property
    def block_end(self) -> int:
        """Absolute offset one past the AC11 data block."""
        return AC11_OFFSET + self.data_size

    def section_start(self, index: int) -> int:
        """Absolute offset of a section."""
        return V1_BASE + self.section_offsets[index]


@dataclass(frozen=True)
class AnimationHeader:
    """Common animation header."""
    magic: int
    fps: float
    frame_count: int
    bone_count: int
    format_version: FormatVersion
    name_offset: int
    name: str = ""
    v1: Optional[V1Header] = None

    @property
    def is_v0(self) -> bool:
        return self.format_version == FormatVersion.V0

    @property
    def duration(self) -> float:
        return self.frame_count / self.fps if self.fps > 0 else 0.0


def _read_name(data, offset: int, max_length: int) -> str:
    """Read a NUL-terminated ASCII name, empty when out of range."""
    if offset <= 0 or offset >= len(data):
        return ""
    end = bytes(data).find(b'\x00', offset)
    if end <= offset:
        return ""
    end = min(end, offset + max_length)
    return bytes(data[offset:end]).decode('ascii', errors='replace')


def parse_header(data, config: Optional[DecoderConfig] = None) -> AnimationHeader:
    """
    Parse the common header.

    Args:
        data: Raw animation blob
        config: Decoder limits

    Returns:
        AnimationHeader; the V1 sub-header is not parsed here

    Raises:
        TruncatedError: Blob shorter than the 96-byte header
        BadMagicError: Signature mismatch
    """
    config = config or DecoderConfig()
    if len(data) < HEADER_SIZE:
        raise TruncatedError(f"Animation blob is {len(data)} bytes, header needs {HEADER_SIZE}")

    reader = ByteReader(data)
    magic = reader.u32(0x00)
    if magic != ANIM_MAGIC:
        raise BadMagicError(f"Invalid animation magic: {magic:08X}", 0)

    fps = reader.f32(0x08)
    frame_count = reader.u32(0x0C)
    bone_field = reader.u32(0x10)
    sentinel = reader.u32(0x48)
    name_offset = reader.u32(0x50)

    version = FormatVersion.V0 if sentinel == V0_SENTINEL else FormatVersion.V1
    bone_count = bone_field if version == FormatVersion.V0 else bone_field & 0xFFFF

    return AnimationHeader(
        magic=magic,
        fps=fps,
        frame_count=frame_count,
        bone_count=bone_count,
        format_version=version,
        name_offset=name_offset,
        name=_read_name(data, name_offset, config.max_name_length),
    )


def parse_v1_header(data, log: Optional[logging.Logger] = None) -> V1Header:
    """
    Parse the AC11 sub-header that follows the common header.

    Raises:
        TruncatedError: Sub-header runs past the blob
    """
    log = log or logger
    reader = ByteReader(data)
    reader.require(AC11_OFFSET, V1_HEADER_SIZE, "V1 sub-header")

    ac = AC11_OFFSET
    fields = reader.u32_array(ac, V1_HEADER_SIZE // 4, "V1 sub-header")

    inner_magic = fields[0x08 // 4]
    if inner_magic != AC11_MAGIC:
        log.warning(f"V1 sub-header magic is {inner_magic:08X}, expected {AC11_MAGIC:08X}")

    return V1Header(
        data_size=fields[0x00 // 4],
        anim_hash=fields[0x04 // 4],
        inner_magic=inner_magic,
        version=fields[0x0C // 4],
        bone_count=fields[0x10 // 4],
        last_frame=fields[0x14 // 4],
        fps=reader.f32(ac + 0x18),
        flags=fields[0x1C // 4],
        segment_count=fields[0x20 // 4],
        total_animated=fields[0x24 // 4],
        animated_counts=(fields[0x28 // 4], fields[0x2C // 4], fields[0x30 // 4]),
        constant_counts=(fields[0x34 // 4], fields[0x38 // 4], fields[0x3C // 4]),
        section_offsets=(fields[0x44 // 4], fields[0x48 // 4], fields[0x4C // 4], fields[0x50 // 4]),
    )
