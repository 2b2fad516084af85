"""
Single 512-byte USTAR header block.

Field offsets and widths live in ``ustar.constants.HEADER_LAYOUT``; every
encoder below must emit exactly its field's width, so the assembled header is
512 bytes by construction.
"""

from __future__ import annotations

from . import checksum, octal, strfield
from .constants import (
    BLOCK_SIZE,
    CHKSUM,
    CHECKSUM_PLACEHOLDER,
    DEVICE_DIGITS,
    DEVMAJOR,
    DEVMINOR,
    GID,
    GNAME,
    ID_DIGITS,
    LINKNAME,
    MAGIC,
    MAGIC_FIELD,
    MODE,
    MTIME,
    MTIME_DIGITS,
    NAME,
    NUL,
    PREFIX,
    SIZE,
    SIZE_DIGITS,
    SPACE,
    TYPEFLAG,
    UID,
    UNAME,
    UNKNOWN_FILENAME,
    USTAR_MAGIC,
    VERSION,
    VERSION_FIELD,
    ZERO,
    field_slice,
)
from .metadata import FileMetadata, FileMode, LinkIndicator, Permission
from .result import Decoded


def _put(buf: bytearray, loc, data: bytes, name: str) -> None:
    off, width = loc
    if len(data) != width:
        raise ValueError(f"{name} encodes to {len(data)} bytes, field is {width}")
    buf[off : off + width] = data


def encode_mode(mode: FileMode) -> bytes:
    # The special-bits byte is always a space; setuid/setgid/sticky are not stored.
    return (
        ZERO * 3
        + Permission(int(mode.owner)).digit
        + Permission(int(mode.group)).digit
        + Permission(int(mode.other)).digit
        + SPACE
        + NUL
    )


def _id_field(value: int, name: str) -> bytes:
    return octal.encode(ID_DIGITS, value, field=name) + SPACE + NUL


def _time_field(value: int, digits: int, name: str) -> bytes:
    return octal.encode(digits, value, field=name) + SPACE


def encode_header(meta: FileMetadata) -> bytes:
    """Lay out ``meta`` as one 512-byte header block.

    Raises:
        FieldOverflow: when a numeric value does not fit its octal field.
    """
    buf = bytearray(BLOCK_SIZE)
    _put(buf, NAME, strfield.normalize(NAME[1], meta.filename), "filename")
    _put(buf, MODE, encode_mode(meta.mode), "mode")
    _put(buf, UID, _id_field(meta.uid, "uid"), "uid")
    _put(buf, GID, _id_field(meta.gid, "gid"), "gid")
    _put(buf, SIZE, _time_field(meta.size, SIZE_DIGITS, "size"), "size")
    _put(buf, MTIME, _time_field(int(meta.mtime), MTIME_DIGITS, "mtime"), "mtime")
    _put(buf, CHKSUM, CHECKSUM_PLACEHOLDER, "chksum")
    _put(buf, TYPEFLAG, LinkIndicator(meta.link).flag, "typeflag")
    _put(buf, LINKNAME, strfield.normalize(LINKNAME[1], meta.linkname), "linkname")
    _put(buf, MAGIC, MAGIC_FIELD, "magic")
    _put(buf, VERSION, VERSION_FIELD, "version")
    _put(buf, UNAME, strfield.normalize(UNAME[1], meta.uname), "uname")
    _put(buf, GNAME, strfield.normalize(GNAME[1], meta.gname), "gname")
    _put(buf, DEVMAJOR, ZERO * DEVICE_DIGITS + SPACE + NUL, "devmajor")
    _put(buf, DEVMINOR, ZERO * DEVICE_DIGITS + SPACE, "devminor")
    _put(buf, PREFIX, strfield.normalize(PREFIX[1], meta.prefix), "prefix")
    _put(buf, CHKSUM, checksum.format_checksum(checksum.compute(bytes(buf))), "chksum")
    return bytes(buf)


def is_header(block: bytes) -> bool:
    """True iff the magic bytes read "ustar". The checksum is not consulted."""
    return bytes(block[MAGIC[0] : MAGIC[0] + len(USTAR_MAGIC)]) == USTAR_MAGIC


def decode_filename(block: bytes) -> Decoded:
    res = strfield.parse(block[field_slice(NAME)], default=UNKNOWN_FILENAME)
    if not res.fallback and not res.value:
        return Decoded(UNKNOWN_FILENAME, fallback=True)
    return res


def decode_size(block: bytes) -> Decoded:
    return octal.parse(block[field_slice(SIZE)])


def decode_header(block: bytes) -> FileMetadata:
    """Inverse of :func:`encode_header`.

    Lenient: unparsable numbers decode as 0 and a missing or undecodable
    filename as ``"unknownFileName"``. Typeflags other than normal file,
    hard link and symbolic link are kept in ``other_type``. Mode is read as
    an octal number, so conventional ``0000644`` fields decode as well as
    this codec's own.
    """
    if len(block) != BLOCK_SIZE:
        raise ValueError(f"header block must be {BLOCK_SIZE} bytes, got {len(block)}")
    mode = octal.decode(block[field_slice(MODE)])
    flag = block[field_slice(TYPEFLAG)]
    link = LinkIndicator.parse(flag)
    return FileMetadata(
        filename=decode_filename(block).value,
        mode=FileMode.from_octal(mode & 0o7777),
        uid=octal.decode(block[field_slice(UID)]),
        gid=octal.decode(block[field_slice(GID)]),
        size=decode_size(block).value,
        mtime=octal.decode(block[field_slice(MTIME)]),
        link=LinkIndicator.NORMAL if link is None else link,
        linkname=strfield.denormalize(block[field_slice(LINKNAME)]),
        uname=strfield.denormalize(block[field_slice(UNAME)]),
        gname=strfield.denormalize(block[field_slice(GNAME)]),
        prefix=strfield.denormalize(block[field_slice(PREFIX)]),
        other_type=None if link is not None else bytes(flag).decode("ascii", errors="replace"),
    )
