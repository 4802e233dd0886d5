"""
Low-level readers over an immutable animation blob.

ByteReader does bounds-checked little-endian reads at absolute offsets.
BitReader walks a packed LSB-first bitstream.
"""

import struct
from typing import Tuple

from civ_anim.codec.errors import TruncatedError

Vec3 = Tuple[float, float, float]

_U32 = struct.Struct('<I')
_F32 = struct.Struct('<f')
_VEC3 = struct.Struct('<3f')
_VEC6 = struct.Struct('<6f')


class ByteReader:
    """Bounds-checked reads at absolute offsets."""

    def __init__(self, data):
        self._data = data

    def __len__(self) -> int:
        return len(self._data)

    @property
    def data(self):
        return self._data

    def require(self, offset: int, size: int, what: str = "data"):
        """Raise TruncatedError unless [offset, offset + size) is inside the buffer."""
        if offset < 0 or size < 0 or offset + size > len(self._data):
            raise TruncatedError(f"{what} needs {size} bytes", offset)

    def u32(self, offset: int, what: str = "u32") -> int:
        self.require(offset, 4, what)
        return _U32.unpack_from(self._data, offset)[0]

    def f32(self, offset: int, what: str = "f32") -> float:
        self.require(offset, 4, what)
        return _F32.unpack_from(self._data, offset)[0]

    def vec3(self, offset: int, what: str = "vec3") -> Vec3:
        self.require(offset, 12, what)
        return _VEC3.unpack_from(self._data, offset)

    def vec6(self, offset: int, what: str = "vec6") -> Tuple[float, ...]:
        self.require(offset, 24, what)
        return _VEC6.unpack_from(self._data, offset)

    def u32_array(self, offset: int, count: int, what: str = "u32 array") -> Tuple[int, ...]:
        self.require(offset, count * 4, what)
        return struct.unpack_from(f'<{count}I', self._data, offset)

    def bytes_at(self, offset: int, count: int, what: str = "bytes") -> bytes:
        self.require(offset, count, what)
        return bytes(self._data[offset:offset + count])


class BitReader:
    """
    Variable-width bit reader, least significant bit first within each byte.

    Bits past the end of the buffer read as zero. Callers check the region
    bounds before trusting decoded values.
    """

    __slots__ = ('_data', '_start', '_bit_pos')

    def __init__(self, data, start: int = 0):
        self._data = data
        self._start = start
        self._bit_pos = 0

    @property
    def bit_position(self) -> int:
        return self._bit_pos

    @property
    def bytes_consumed(self) -> int:
        return (self._bit_pos + 7) >> 3

    def read_lsb(self, n: int) -> int:
        """Read an n-bit unsigned value (0 <= n <= 32)."""
        if n < 0 or n > 32:
            raise ValueError(f"bit count out of range: {n}")

        data = self._data
        size = len(data)
        value = 0
        shift = 0
        pos = self._bit_pos
        remaining = n

        while remaining > 0:
            byte_index = self._start + (pos >> 3)
            bit_index = pos & 7
            take = min(8 - bit_index, remaining)
            if 0 <= byte_index < size:
                chunk = (data[byte_index] >> bit_index) & ((1 << take) - 1)
                value |= chunk << shift
            shift += take
            pos += take
            remaining -= take

        self._bit_pos = pos
        return value
