"""
USTAR header checksum.

The checksum is the unsigned byte sum of the 512-byte header with the checksum
field itself held as six spaces, a NUL and a space while summing. It is stored
as six octal digits followed by a NUL and a space.
"""

from __future__ import annotations

from . import octal
from .constants import (
    BLOCK_SIZE,
    CHKSUM,
    CHECKSUM_DIGITS,
    CHECKSUM_PLACEHOLDER,
    POSIX_CHECKSUM_PLACEHOLDER,
    NUL,
    SPACE,
    field_slice,
)
from .result import Decoded


_CHK = field_slice(CHKSUM)


def _sum_with(block: bytes, placeholder: bytes) -> int:
    if len(block) != BLOCK_SIZE:
        raise ValueError(f"header block must be {BLOCK_SIZE} bytes, got {len(block)}")
    return sum(block[: _CHK.start]) + sum(placeholder) + sum(block[_CHK.stop :])


def compute(block: bytes) -> int:
    return _sum_with(block, CHECKSUM_PLACEHOLDER)


def format_checksum(value: int) -> bytes:
    return octal.encode(CHECKSUM_DIGITS, value, field="chksum") + NUL + SPACE


def stored_checksum(block: bytes) -> Decoded:
    return octal.parse(block[_CHK], pad=b"")


def verify(block: bytes) -> bool:
    """Check the stored checksum against the computed one.

    Headers written by POSIX tar sum the field as eight spaces; either
    convention is accepted.
    """
    stored = stored_checksum(block)
    if stored.fallback:
        return False
    return stored.value in (compute(block), _sum_with(block, POSIX_CHECKSUM_PLACEHOLDER))
