"""
512-byte block alignment.
"""

from __future__ import annotations

from .constants import BLOCK_SIZE, NUL, TERMINATOR_SIZE


TERMINATOR = NUL * TERMINATOR_SIZE
ZERO_BLOCK = NUL * BLOCK_SIZE


def padded_length(n: int) -> int:
    if n < 0:
        raise ValueError("length must be non-negative")
    rem = n % BLOCK_SIZE
    return n if rem == 0 else n + (BLOCK_SIZE - rem)


def pad_bytes(content: bytes) -> bytes:
    return bytes(content) + NUL * (padded_length(len(content)) - len(content))


def unpad(buf: bytes, declared_length: int) -> bytes:
    """Drop the zero filler that follows ``declared_length`` content bytes."""
    return bytes(buf[:declared_length])


def is_zero_block(block: bytes) -> bool:
    return len(block) == BLOCK_SIZE and block == ZERO_BLOCK
