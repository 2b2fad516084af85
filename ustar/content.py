"""
Entry payloads: a text variant and a raw binary variant.

Both variants become plain bytes only when the assembler pads them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .constants import DEFAULT_ENCODING


@dataclass(frozen=True)
class TextContent:
    text: str
    encoding: str = DEFAULT_ENCODING

    def to_bytes(self) -> bytes:
        return self.text.encode(self.encoding)


@dataclass(frozen=True)
class BinaryContent:
    data: bytes

    def to_bytes(self) -> bytes:
        return bytes(self.data)

    def text(self, encoding: str = DEFAULT_ENCODING) -> str:
        return bytes(self.data).decode(encoding)


Content = Union[TextContent, BinaryContent]


def as_content(value: Union[Content, str, bytes, bytearray, memoryview]) -> Content:
    if isinstance(value, (TextContent, BinaryContent)):
        return value
    if isinstance(value, str):
        return TextContent(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return BinaryContent(bytes(value))
    raise TypeError(f"unsupported content type: {type(value).__name__}")
