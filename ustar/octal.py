"""
Fixed-width octal digit fields (sizes, ids, timestamps, checksum).
"""

from __future__ import annotations

from typing import Optional

from .constants import ZERO
from .errors import FieldOverflow
from .result import Decoded


_OCTAL_DIGITS = b"01234567"
_STRIP = b" \t\n\r\x00"


def encode(width: int, value: int, field: Optional[str] = None) -> bytes:
    """Encode ``value`` as exactly ``width`` ASCII octal digits.

    Raises:
        FieldOverflow: if ``value`` is negative or needs more than ``width`` digits.
    """
    name = field or "octal field"
    if value < 0:
        raise FieldOverflow(f"{name}: negative value {value} cannot be stored")
    digits = format(value, "o").encode("ascii")
    if len(digits) > width:
        raise FieldOverflow(f"{name}: value {value} needs {len(digits)} octal digits, field holds {width}")
    return digits.rjust(width, ZERO)


def parse(raw: bytes, pad: bytes = ZERO) -> Decoded:
    """Parse the leading octal digit run of a numeric field.

    One leading ``pad`` character is dropped, then surrounding whitespace and
    NULs. Anything after the digit run is ignored.
    """
    text = bytes(raw)
    if pad and text.startswith(pad):
        text = text[len(pad):]
    text = text.strip(_STRIP)
    end = 0
    while end < len(text) and text[end] in _OCTAL_DIGITS:
        end += 1
    if end == 0:
        # a field of nothing but pad characters is a legitimate zero
        stripped = bytes(raw).strip(_STRIP)
        if stripped and not stripped.strip(ZERO):
            return Decoded(0)
        return Decoded(0, fallback=True)
    return Decoded(int(text[:end], 8))


def decode(raw: bytes, pad: bytes = ZERO, default: int = 0) -> int:
    res = parse(raw, pad)
    return default if res.fallback else res.value
