from __future__ import annotations

from typing import Iterator, List, Optional, Tuple

from . import checksum
from .blocks import is_zero_block, padded_length, unpad
from .constants import BLOCK_SIZE
from .content import BinaryContent
from .errors import ChecksumMismatch, MalformedHeader, TruncatedArchive, UnparsableLength
from .header import decode_header, decode_size, is_header
from .metadata import FileMetadata


Entry = Tuple[FileMetadata, BinaryContent]


def _check_terminator(data: bytes, offset: int) -> None:
    block = data[offset : offset + BLOCK_SIZE]
    if not is_zero_block(block):
        raise MalformedHeader(f"block at offset {offset} is neither a ustar header nor a zero block")
    nxt = data[offset + BLOCK_SIZE : offset + 2 * BLOCK_SIZE]
    if len(nxt) < BLOCK_SIZE:
        raise TruncatedArchive(f"archive ends after a single zero block at offset {offset}")
    if not is_zero_block(nxt):
        raise MalformedHeader(f"zero block at offset {offset} is not followed by a second zero block")


def iter_entries(data: bytes, *, strict: bool = False) -> Iterator[Entry]:
    """Yield ``(metadata, content)`` pairs in archive order.

    Scanning stops at the first block whose magic is not "ustar" (normally the
    terminator) or when less than one block remains. With ``strict`` the
    checksum, the size field, content completeness and the two-block
    terminator are all enforced.
    """
    data = bytes(data)
    n = len(data)
    offset = 0
    while offset + BLOCK_SIZE <= n:
        block = data[offset : offset + BLOCK_SIZE]
        if not is_header(block):
            if strict:
                _check_terminator(data, offset)
            return
        if strict:
            if not checksum.verify(block):
                raise ChecksumMismatch(f"header checksum mismatch at offset {offset}")
            if decode_size(block).fallback:
                raise UnparsableLength(f"size field at offset {offset} is not an octal number")
        meta = decode_header(block)
        start = offset + BLOCK_SIZE
        end = start + padded_length(meta.size)
        body = data[start:end]
        if strict and len(body) < meta.size:
            raise TruncatedArchive(
                f"entry {meta.full_name!r} declares {meta.size} bytes, only {len(body)} present"
            )
        yield meta, BinaryContent(unpad(body, meta.size))
        offset = end
    if strict:
        raise TruncatedArchive("archive ends without a terminator")


def extract(data: bytes, *, strict: bool = False) -> List[Entry]:
    return list(iter_entries(data, strict=strict))


class ArchiveReader:
    """Read-only view over an in-memory or on-disk archive."""

    def __init__(self, path: Optional[str] = None, *, data: Optional[bytes] = None, strict: bool = False):
        if path is None and data is None:
            raise ValueError("Either path or data must be provided")
        self.path = path
        self.strict = strict
        self._data = bytes(data) if data is not None else None
        self.entries: List[Entry] = []

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def open(self):
        if self._data is None:
            with open(self.path, "rb") as fh:
                self._data = fh.read()
        self.entries = extract(self._data, strict=self.strict)

    def close(self):
        self.entries = []
        if self.path is not None:
            self._data = None

    def list(self) -> List[FileMetadata]:
        return [meta for meta, _ in self.entries]

    def read(self, name: str) -> bytes:
        """Content of the first entry whose full name equals ``name``."""
        for meta, content in self.entries:
            if meta.full_name == name:
                return content.to_bytes()
        raise KeyError(name)

    def extract(self, meta: FileMetadata, out_path: str) -> None:
        for m, content in self.entries:
            if m is meta:
                with open(out_path, "wb") as fh:
                    fh.write(content.to_bytes())
                return
        raise KeyError(meta.full_name)
