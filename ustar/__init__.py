"""
ustar: an in-memory codec for USTAR tape archives.

- Fixed 512-byte headers with octal numeric fields, NUL-padded string fields
  and the USTAR checksum
- Zero padding of entry content to 512-byte blocks, two zero blocks as the
  archive terminator
- ``assemble()`` turns ``(FileMetadata, content)`` pairs into archive bytes;
  ``extract()`` turns archive bytes back into pairs
- Lenient decoding by default (unparsable sizes read as 0, the first non-header
  block ends the archive) and an opt-in strict mode
- A small CLI (create/list/extract) in ustar.cli

Compression, sparse files, GNU/PAX extensions and multi-volume archives are
not supported.
"""

from .content import BinaryContent, TextContent, as_content
from .errors import (
    UstarError,
    FieldOverflow,
    MalformedHeader,
    UnparsableLength,
    ChecksumMismatch,
    TruncatedArchive,
)
from .header import decode_header, encode_header, is_header
from .metadata import FileMetadata, FileMode, LinkIndicator, Permission, SpecialBits
from .reader import ArchiveReader, extract, iter_entries
from .writer import ArchiveWriter, assemble

__version__ = "0.1"

__all__ = [
    "ArchiveReader",
    "ArchiveWriter",
    "BinaryContent",
    "ChecksumMismatch",
    "FieldOverflow",
    "FileMetadata",
    "FileMode",
    "LinkIndicator",
    "MalformedHeader",
    "Permission",
    "SpecialBits",
    "TextContent",
    "TruncatedArchive",
    "UnparsableLength",
    "UstarError",
    "as_content",
    "assemble",
    "decode_header",
    "encode_header",
    "extract",
    "is_header",
    "iter_entries",
]
