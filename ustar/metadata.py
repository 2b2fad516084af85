from __future__ import annotations

import enum
import time
from dataclasses import dataclass, field
from typing import Optional

from .constants import UNKNOWN_FILENAME


class Permission(enum.IntFlag):
    NONE = 0
    EXECUTE = 1
    WRITE = 2
    READ = 4

    @property
    def digit(self) -> bytes:
        """Single ASCII digit: '0' + read(4) + write(2) + execute(1)."""
        return bytes([ord("0") + (int(self) & 0o7)])


RWX = Permission.READ | Permission.WRITE | Permission.EXECUTE
RW = Permission.READ | Permission.WRITE
RX = Permission.READ | Permission.EXECUTE


class SpecialBits(enum.IntFlag):
    NONE = 0
    STICKY = 1
    SETGID = 2
    SETUID = 4


class LinkIndicator(enum.Enum):
    NORMAL = "0"
    HARD_LINK = "1"
    SYMBOLIC_LINK = "2"

    @property
    def flag(self) -> bytes:
        return self.value.encode("ascii")

    @classmethod
    def parse(cls, raw: bytes) -> Optional["LinkIndicator"]:
        """Indicator for a typeflag byte, or None for kinds this codec does not model."""
        ch = bytes(raw[:1])
        # NUL is the pre-POSIX spelling of a regular file
        if ch in (b"", b"\x00"):
            return cls.NORMAL
        for li in cls:
            if li.flag == ch:
                return li
        return None

    @classmethod
    def from_flag(cls, raw: bytes) -> "LinkIndicator":
        li = cls.parse(raw)
        return cls.NORMAL if li is None else li


@dataclass(frozen=True)
class FileMode:
    owner: Permission = RW
    group: Permission = Permission.READ
    other: Permission = Permission.READ
    special: SpecialBits = SpecialBits.NONE

    @classmethod
    def from_octal(cls, value: int) -> "FileMode":
        return cls(
            owner=Permission((value >> 6) & 0o7),
            group=Permission((value >> 3) & 0o7),
            other=Permission(value & 0o7),
            special=SpecialBits((value >> 9) & 0o7),
        )

    def to_octal(self) -> int:
        return (int(self.special) << 9) | (int(self.owner) << 6) | (int(self.group) << 3) | int(self.other)

    def __str__(self) -> str:
        return format(self.to_octal(), "04o")


@dataclass
class FileMetadata:
    """Header fields of one archive entry.

    Attributes:
        filename: Entry name, at most 100 bytes once encoded.
        mode: Permission triples plus setuid/setgid/sticky flags.
        uid, gid: Numeric owner and group ids.
        size: Content length in bytes. The assembler overwrites it.
        mtime: Last modification time in POSIX seconds.
        link: Entry kind (normal file, hard link or symbolic link).
        linkname: Link target for link entries.
        uname, gname: Owner user and group names (32 bytes each).
        prefix: Leading path part for names longer than 100 bytes. Never
            filled in automatically; see ``pathutil.split_path``.
        other_type: Typeflag read from an archive when it is not a normal
            file, hard link or symbolic link (e.g. "5" for a directory);
            ``link`` is then NORMAL. Not written by ``encode_header``.
    """

    filename: str = UNKNOWN_FILENAME
    mode: FileMode = field(default_factory=FileMode)
    uid: int = 0
    gid: int = 0
    size: int = 0
    mtime: int = field(default_factory=lambda: int(time.time()))
    link: LinkIndicator = LinkIndicator.NORMAL
    linkname: str = ""
    uname: str = ""
    gname: str = ""
    prefix: str = ""
    other_type: Optional[str] = None

    @property
    def full_name(self) -> str:
        if self.prefix:
            return f"{self.prefix.rstrip('/')}/{self.filename}"
        return self.filename

    @property
    def is_link(self) -> bool:
        return self.link is not LinkIndicator.NORMAL

    @property
    def is_directory(self) -> bool:
        return self.other_type == "5"
