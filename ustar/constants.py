# Block geometry
BLOCK_SIZE = 512
TERMINATOR_SIZE = 2 * BLOCK_SIZE

# Magic and version
USTAR_MAGIC = b"ustar"           # compared by is_header()
MAGIC_FIELD = USTAR_MAGIC + b"\x00"
VERSION_FIELD = b"00"

# Pad bytes
NUL = b"\x00"
SPACE = b" "
ZERO = b"0"

# Checksum field is held as this value while summing
CHECKSUM_PLACEHOLDER = SPACE * 6 + NUL + SPACE
# Sum convention used by POSIX tar (all eight bytes as spaces)
POSIX_CHECKSUM_PLACEHOLDER = SPACE * 8


# Header layout: field -> (offset, width)
NAME = (0, 100)
MODE = (100, 8)
UID = (108, 8)
GID = (116, 8)
SIZE = (124, 12)
MTIME = (136, 12)
CHKSUM = (148, 8)
TYPEFLAG = (156, 1)
LINKNAME = (157, 100)
MAGIC = (257, 6)
VERSION = (263, 2)
UNAME = (265, 32)
GNAME = (297, 32)
DEVMAJOR = (329, 8)   # "000000 \0"
DEVMINOR = (337, 7)   # "000000 "
PREFIX = (344, 168)

HEADER_LAYOUT = (
    ("name", NAME),
    ("mode", MODE),
    ("uid", UID),
    ("gid", GID),
    ("size", SIZE),
    ("mtime", MTIME),
    ("chksum", CHKSUM),
    ("typeflag", TYPEFLAG),
    ("linkname", LINKNAME),
    ("magic", MAGIC),
    ("version", VERSION),
    ("uname", UNAME),
    ("gname", GNAME),
    ("devmajor", DEVMAJOR),
    ("devminor", DEVMINOR),
    ("prefix", PREFIX),
)

# Octal digit counts inside the numeric fields
ID_DIGITS = 6
SIZE_DIGITS = 11
MTIME_DIGITS = 11
CHECKSUM_DIGITS = 6
DEVICE_DIGITS = 6

# Lenient decode placeholders
UNKNOWN_FILENAME = "unknownFileName"
DEFAULT_ENCODING = "utf-8"


def field_slice(loc) -> slice:
    off, width = loc
    return slice(off, off + width)
