from __future__ import annotations

from typing import Union

from .constants import DEFAULT_ENCODING, NUL
from .result import Decoded


def normalize(width: int, text: Union[str, bytes], encoding: str = DEFAULT_ENCODING) -> bytes:
    """Truncate to ``width`` bytes, then NUL-pad to exactly ``width``.

    Text is cut on a character boundary, so a multi-byte character that would
    straddle the field end is dropped whole.
    """
    if isinstance(text, str):
        raw = text.encode(encoding)[:width].decode(encoding, "ignore").encode(encoding)
    else:
        raw = bytes(text)[:width]
    return raw.ljust(width, NUL)


def parse(raw: bytes, default: str = "", encoding: str = DEFAULT_ENCODING) -> Decoded:
    # Every NUL is dropped, not just the trailing run
    stripped = bytes(raw).replace(NUL, b"")
    try:
        return Decoded(stripped.decode(encoding))
    except UnicodeDecodeError:
        return Decoded(default, fallback=True)


def denormalize(raw: bytes, encoding: str = DEFAULT_ENCODING) -> str:
    return parse(raw, encoding=encoding).value
