class UstarError(Exception):
    """Base class for ustar codec errors."""


# Encode side
class FieldOverflow(UstarError, ValueError):
    """A value does not fit its fixed-width header field."""


# Decode side (raised in strict mode only)
class MalformedHeader(UstarError):
    pass


class UnparsableLength(UstarError):
    pass


class ChecksumMismatch(UstarError):
    pass


class TruncatedArchive(UstarError):
    pass
