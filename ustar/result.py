from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Decoded:
    """Outcome of a lenient field decode.

    ``fallback`` is True when the raw bytes could not be parsed and ``value``
    holds the substituted default instead.
    """

    value: Any
    fallback: bool = False
