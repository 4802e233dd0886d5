"""
Error taxonomy for the animation codec.

Every failure caused by the content of a blob is reported through one of
these types. Nothing else (struct.error, IndexError) should escape the
decoder for corrupt input.
"""

from typing import Optional


class FormatError(ValueError):
    """Base class for malformed animation data."""

    def __init__(self, message: str, offset: Optional[int] = None):
        if offset is not None:
            message = f"{message} (at 0x{offset:X})"
        super().__init__(message)
        self.offset = offset


class BadMagicError(FormatError):
    """The blob does not start with the animation signature."""


class TruncatedError(FormatError):
    """A read would run past the end of the buffer."""


class InconsistentError(FormatError):
    """Derived values contradict each other."""


__all__ = [
    'FormatError',
    'BadMagicError',
    'TruncatedError',
    'InconsistentError',
]
