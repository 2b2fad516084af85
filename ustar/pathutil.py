from __future__ import annotations

from typing import Tuple

from .constants import NAME, PREFIX
from .errors import FieldOverflow


def norm_path(p: str) -> str:
    """Normalize archive paths to a canonical forward-slash form.

    Rules:
    - Convert backslashes to slashes
    - Strip leading/trailing slashes
    - Remove empty and '.' segments
    - Reject '..' segments
    """
    p = p.replace("\\", "/").strip("/")
    parts = [q for q in p.split("/") if q not in ("", ".")]
    for q in parts:
        if q == "..":
            raise ValueError("Path may not contain '..'")
    return "/".join(parts)


def split_path(path: str) -> Tuple[str, str]:
    """Split a long path into (prefix, filename) header fields.

    Paths that fit the filename field come back with an empty prefix. The
    split happens at a '/' so that ``FileMetadata.full_name`` rebuilds the
    path.

    Raises:
        FieldOverflow: if no '/' gives a prefix and filename that both fit.
    """
    path = norm_path(path)
    if len(path.encode("utf-8")) <= NAME[1]:
        return "", path
    slashes = [i for i, ch in enumerate(path) if ch == "/"]
    for i in reversed(slashes):
        prefix, name = path[:i], path[i + 1 :]
        if len(name.encode("utf-8")) > NAME[1]:
            break
        if len(prefix.encode("utf-8")) <= PREFIX[1]:
            return prefix, name
    raise FieldOverflow(f"path too long for ustar prefix/filename fields: {path!r}")
