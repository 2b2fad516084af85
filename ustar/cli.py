from __future__ import annotations

import os
import sys
import time
import argparse

from pathlib import Path
from typing import List, Optional, Tuple

from ustar.content import BinaryContent
from ustar.errors import UstarError
from ustar.metadata import FileMetadata, FileMode, LinkIndicator
from ustar.pathutil import norm_path, split_path
from ustar.reader import ArchiveReader
from ustar.writer import ArchiveWriter


def _safe_chmod(path: str, mode: Optional[int]) -> None:
    """Best-effort chmod that never raises.

    Args:
        path: Destination filesystem path to update.
        mode: POSIX mode to apply (e.g., 0o755). If None, no change is made.
    """
    if mode is None:
        return
    try:
        os.chmod(path, mode)
    except OSError as exc:
        print(f"Warning: failed to set mode on {path}: {exc}", file=sys.stderr)


def _safe_utime(path: str, mtime: Optional[float]) -> None:
    if mtime is None:
        return
    try:
        os.utime(path, (mtime, mtime), follow_symlinks=False)
    except (OSError, NotImplementedError) as exc:
        print(f"Warning: failed to set timestamps on {path}: {exc}", file=sys.stderr)


def _next_nonconflicting_path(path: str) -> str:
    if not os.path.lexists(path):
        return path
    base_dir = os.path.dirname(path)
    root, ext = os.path.splitext(os.path.basename(path))
    i = 1
    while True:
        candidate = os.path.join(base_dir, f"{root} ({i}){ext}")
        if not os.path.lexists(candidate):
            return candidate
        i += 1


def _metadata_for(arc: str, fs_path: str) -> FileMetadata:
    st = os.lstat(fs_path)
    prefix, name = split_path(arc)
    meta = FileMetadata(
        filename=name,
        prefix=prefix,
        mode=FileMode.from_octal(st.st_mode & 0o7777),
        uid=getattr(st, "st_uid", 0),
        gid=getattr(st, "st_gid", 0),
        mtime=int(st.st_mtime),
    )
    if os.path.islink(fs_path):
        meta.link = LinkIndicator.SYMBOLIC_LINK
        meta.linkname = os.readlink(fs_path)
    return meta


def _collect(inputs: List[str]) -> List[Tuple[str, str]]:
    """Expand inputs into (archive name, filesystem path) pairs."""
    found: List[Tuple[str, str]] = []
    for raw in inputs:
        p = Path(raw)
        if p.is_dir() and not p.is_symlink():
            base = p.name
            for root, dirnames, filenames in os.walk(str(p)):
                dirnames.sort()
                for d in dirnames:
                    sub = os.path.join(root, d)
                    if os.path.islink(sub):
                        rel = os.path.relpath(sub, start=str(p))
                        found.append((norm_path(os.path.join(base, rel)), sub))
                # prune symlink directories to avoid walking into them
                dirnames[:] = [d for d in dirnames if not os.path.islink(os.path.join(root, d))]
                for f in sorted(filenames):
                    full = os.path.join(root, f)
                    rel = os.path.relpath(full, start=str(p))
                    found.append((norm_path(os.path.join(base, rel)), full))
        else:
            found.append((norm_path(p.name), str(p)))
    return found


def cmd_create(output: str, inputs: List[str], *, quiet: bool = False) -> bool:
    """Create a ustar archive from filesystem paths.

    Directories are walked recursively and stored as their files; symlinks are
    stored as symbolic-link entries without content.
    """
    t0 = time.time()
    total = 0
    with ArchiveWriter(output) as w:
        for arc, full in _collect(inputs):
            meta = _metadata_for(arc, full)
            if meta.is_link:
                w.add(meta, BinaryContent(b""))
            else:
                with open(full, "rb") as fh:
                    data = fh.read()
                w.add(meta, BinaryContent(data))
                total += len(data)
            if not quiet:
                print(f"  adding: {arc}")
        n = len(w.entries)
    dt = max(0.000001, time.time() - t0)
    print(f"Done: {n} entries, {total} bytes in {dt:.1f}s")
    return True


def cmd_list(archive: str, *, strict: bool = False) -> bool:
    with ArchiveReader(archive, strict=strict) as r:
        entries = r.list()
    for e in entries:
        if e.is_directory:
            print(f"dir\t{e.full_name}")
        elif e.other_type is not None:
            print(f"other({e.other_type})\t{e.size}\t{e.full_name}")
        elif e.link is LinkIndicator.SYMBOLIC_LINK:
            print(f"symlink\t-> {e.linkname}\t{e.full_name}")
        elif e.link is LinkIndicator.HARD_LINK:
            print(f"hardlink\t-> {e.linkname}\t{e.full_name}")
        else:
            print(f"file\t{e.size}\t{e.full_name}")
    return True


def _within(root: str, path: str) -> bool:
    """True if resolved ``path`` is ``root`` or lies below it."""
    return path == root or path.startswith(root.rstrip(os.sep) + os.sep)


def cmd_extract(archive: str, *, outdir: str = ".", exists: str = "rename", strict: bool = False, quiet: bool = False) -> bool:
    """Extract archive entries below ``outdir``.

    Entries whose destination, after resolving symlinks already on disk,
    falls outside ``outdir`` are skipped with a warning, as are symlinks and
    hard links pointing outside it and entry types other than regular files,
    links and directories.

    Args:
        archive: Path to a ustar archive.
        outdir: Destination directory.
        exists: Policy for existing destinations: overwrite, skip, rename or fail.
        strict: Enforce checksums and the two-block terminator.
        quiet: Only print the summary line.
    """
    root = os.path.realpath(outdir or ".")
    extracted = skipped = renamed = 0

    def _skip(rel: str, reason: str) -> None:
        nonlocal skipped
        print(f"Warning: skipping {rel}: {reason}", file=sys.stderr)
        skipped += 1

    with ArchiveReader(archive, strict=strict) as r:
        for meta, content in r.entries:
            rel = norm_path(meta.full_name)
            if not rel:
                _skip(repr(meta.full_name), "empty entry name")
                continue
            if meta.other_type is not None and not meta.is_directory:
                _skip(rel, f"unsupported entry type {meta.other_type!r}")
                continue
            dst = os.path.join(root, rel)
            if not _within(root, os.path.realpath(os.path.dirname(dst))):
                _skip(rel, f"path resolves outside {root}")
                continue

            if meta.is_directory:
                if os.path.lexists(dst) and not os.path.isdir(dst):
                    _skip(rel, "exists and is not a directory")
                    continue
                if not _within(root, os.path.realpath(dst)):
                    _skip(rel, f"path resolves outside {root}")
                    continue
                os.makedirs(dst, exist_ok=True)
                _safe_chmod(dst, meta.mode.to_octal() | 0o700)
                extracted += 1
                if not quiet:
                    print(f"    creating: {rel}/")
                continue

            os.makedirs(os.path.dirname(dst), exist_ok=True)
            actual_dst = dst
            if os.path.lexists(actual_dst):
                if exists == "overwrite":
                    if os.path.isdir(actual_dst) and not os.path.islink(actual_dst):
                        raise RuntimeError(f"Cannot overwrite directory with file: {actual_dst}")
                    os.remove(actual_dst)
                elif exists == "skip":
                    print(f"    skipping: {rel} (exists)")
                    skipped += 1
                    continue
                elif exists == "rename":
                    actual_dst = _next_nonconflicting_path(actual_dst)
                else:
                    raise RuntimeError(f"Destination exists: {actual_dst}")

            if meta.link is LinkIndicator.SYMBOLIC_LINK:
                resolved = os.path.realpath(os.path.join(os.path.dirname(actual_dst), meta.linkname))
                if os.path.isabs(meta.linkname) or not _within(root, resolved):
                    _skip(rel, f"symlink target {meta.linkname!r} points outside {root}")
                    continue
                try:
                    os.symlink(meta.linkname, actual_dst)
                except (OSError, NotImplementedError, AttributeError) as exc:
                    _skip(rel, f"cannot create symlink: {exc}")
                    continue
            elif meta.link is LinkIndicator.HARD_LINK:
                target = os.path.realpath(os.path.join(root, meta.linkname.lstrip("/")))
                if not _within(root, target):
                    _skip(rel, f"hard link target {meta.linkname!r} points outside {root}")
                    continue
                try:
                    os.link(target, actual_dst)
                except OSError as exc:
                    _skip(rel, f"cannot create hard link: {exc}")
                    continue
            else:
                with open(actual_dst, "wb") as fh:
                    fh.write(content.to_bytes())
                _safe_chmod(actual_dst, meta.mode.to_octal())
                _safe_utime(actual_dst, float(meta.mtime))

            extracted += 1
            if not quiet:
                print(f"  extracting: {rel}")
            if actual_dst != dst:
                print(f"       note: renamed to {actual_dst}")
                renamed += 1
    print(f"Done: extracted {extracted} entries; skipped={skipped} renamed={renamed}")
    return True


def main(argv: List[str] | None = None):
    ap = argparse.ArgumentParser(prog="ustar", description="USTAR archive tool")
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_create = sub.add_parser("create", help="Create archive")
    ap_create.add_argument("output", help="Output .tar path")
    ap_create.add_argument("inputs", nargs="+", help="Input files/directories")
    ap_create.add_argument("--quiet", help="limit outputs to summaries only", action="store_true")

    ap_list = sub.add_parser("list", help="List archive contents")
    ap_list.add_argument("archive", help="Archive path")
    ap_list.add_argument("--strict", action="store_true", help="Verify checksums and the terminator")

    ap_extract = sub.add_parser("extract", help="Extract files")
    ap_extract.add_argument("archive", help="Archive path")
    ap_extract.add_argument("--outdir", default=".", help="Output directory")
    ap_extract.add_argument("--strict", action="store_true", help="Verify checksums and the terminator")
    ap_extract.add_argument("--quiet", help="limit outputs to summaries only", action="store_true")
    ap_extract.add_argument(
        "--exists",
        choices=["overwrite", "skip", "rename", "fail"],
        default="rename",
        help=(
            "What to do if a destination file exists: overwrite (replace), "
            "skip (do not extract that entry), rename (append ' (n)' before extension), or fail (abort). "
            "Default: rename"
        ),
    )

    args = ap.parse_args(argv)
    try:
        if args.cmd == "create":
            cmd_create(args.output, args.inputs, quiet=args.quiet)
        elif args.cmd == "list":
            cmd_list(args.archive, strict=args.strict)
        elif args.cmd == "extract":
            cmd_extract(args.archive, outdir=args.outdir, exists=args.exists, strict=args.strict, quiet=args.quiet)
        else:
            raise RuntimeError("Unknown command")
    except (UstarError, ValueError, RuntimeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
