from __future__ import annotations

import dataclasses
from typing import Iterable, List, Optional, Tuple, Union

from .blocks import TERMINATOR, pad_bytes
from .content import BinaryContent, Content, TextContent, as_content
from .header import encode_header
from .metadata import FileMetadata


EntryLike = Tuple[FileMetadata, Union[Content, str, bytes]]


def encode_entry(meta: FileMetadata, content: Union[Content, str, bytes]) -> bytes:
    """Header block plus padded content for one entry.

    The header size is taken from the content; the caller's ``meta.size`` is
    ignored and ``meta`` itself is left untouched.
    """
    payload = as_content(content).to_bytes()
    sized = dataclasses.replace(meta, size=len(payload))
    return encode_header(sized) + pad_bytes(payload)


def assemble(entries: Iterable[EntryLike]) -> bytes:
    """Serialize ``(metadata, content)`` pairs into a complete archive.

    Entries are written in the order given and followed by two zero blocks.
    """
    out = bytearray()
    for meta, content in entries:
        out += encode_entry(meta, content)
    out += TERMINATOR
    return bytes(out)


class ArchiveWriter:
    """Collects entries in memory and assembles them on finalize."""

    def __init__(self, out_path: Optional[str] = None):
        self.out_path = out_path
        self.entries: List[Tuple[FileMetadata, Content]] = []
        self._data: Optional[bytes] = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None and self._data is None:
            self.finalize()

    def add(self, meta: FileMetadata, content: Union[Content, str, bytes]) -> None:
        if self._data is not None:
            raise RuntimeError("archive already finalized")
        self.entries.append((meta, as_content(content)))

    def add_text(self, filename: str, text: str, *, encoding: str = "utf-8", **fields) -> FileMetadata:
        meta = FileMetadata(filename=filename, **fields)
        self.add(meta, TextContent(text, encoding=encoding))
        return meta

    def add_bytes(self, filename: str, data: bytes, **fields) -> FileMetadata:
        meta = FileMetadata(filename=filename, **fields)
        self.add(meta, BinaryContent(bytes(data)))
        return meta

    def finalize(self) -> bytes:
        if self._data is None:
            self._data = assemble(self.entries)
            if self.out_path:
                with open(self.out_path, "wb") as fh:
                    fh.write(self._data)
        return self._data

    def getvalue(self) -> bytes:
        return self.finalize()
