from __future__ import annotations

import io
import os
import subprocess
import sys
import tarfile
import tempfile
import unittest
from pathlib import Path

from ustar.metadata import FileMetadata, LinkIndicator
from ustar.reader import extract
from ustar.writer import assemble


def _build_fixture_tree(root: Path) -> dict:
    files = {}
    (root / "docs" / "notes").mkdir(parents=True)
    content = b"hello world\n" * 20
    (root / "docs" / "readme.txt").write_bytes(content)
    files["docs/readme.txt"] = content
    bin_data = os.urandom(2048)
    (root / "docs" / "notes" / "binary.bin").write_bytes(bin_data)
    files["docs/notes/binary.bin"] = bin_data
    (root / "docs" / "notes" / "empty.txt").write_bytes(b"")
    files["docs/notes/empty.txt"] = b""
    return files


class CLIIntegrationTests(unittest.TestCase):
    def run_cli(self, args, *, expect: int | None = 0):
        cmd = [sys.executable, "-m", "ustar.cli"] + list(args)
        env = os.environ.copy()
        repo_root = Path(__file__).resolve().parent
        existing = env.get("PYTHONPATH", "")
        env["PYTHONPATH"] = str(repo_root) if not existing else f"{repo_root}{os.pathsep}{existing}"
        proc = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True, env=env)
        if expect is not None and proc.returncode != expect:
            raise AssertionError(
                f"CLI exited {proc.returncode}, expected {expect}\nCommand: {' '.join(cmd)}\nSTDOUT:\n{proc.stdout}\nSTDERR:\n{proc.stderr}"
            )
        return proc

    def test_create_list_extract_roundtrip(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            src = root / "src"
            files = _build_fixture_tree(src)
            archive = root / "out.tar"
            self.run_cli(["create", str(archive), str(src / "docs")])

            entries = extract(archive.read_bytes(), strict=True)
            self.assertEqual(
                sorted(m.full_name for m, _ in entries),
                sorted(files),
            )

            listing = self.run_cli(["list", str(archive), "--strict"])
            self.assertIn("docs/readme.txt", listing.stdout)
            self.assertIn(f"file\t{len(files['docs/readme.txt'])}\t", listing.stdout)

            out = root / "out"
            out.mkdir()
            self.run_cli(["extract", str(archive), "--outdir", str(out), "--strict"])
            for rel, data in files.items():
                self.assertEqual((out / rel).read_bytes(), data, rel)

    def test_conflict_policies(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            file_path = root / "file.txt"
            file_path.write_text("alpha")
            archive = root / "arc.tar"
            self.run_cli(["create", str(archive), str(file_path)])

            out_skip = root / "ex_skip"
            out_skip.mkdir()
            (out_skip / "file.txt").write_text("beta")
            skip_proc = self.run_cli(["extract", str(archive), "--outdir", str(out_skip), "--exists", "skip"])
            self.assertIn("skipping: file.txt", skip_proc.stdout)
            self.assertEqual((out_skip / "file.txt").read_text(), "beta")

            out_rename = root / "ex_rename"
            out_rename.mkdir()
            (out_rename / "file.txt").write_text("beta")
            rename_proc = self.run_cli(["extract", str(archive), "--outdir", str(out_rename), "--exists", "rename"])
            self.assertIn("renamed to", rename_proc.stdout)
            self.assertEqual((out_rename / "file (1).txt").read_text(), "alpha")

            out_overwrite = root / "ex_overwrite"
            out_overwrite.mkdir()
            (out_overwrite / "file.txt").write_text("beta")
            self.run_cli(["extract", str(archive), "--outdir", str(out_overwrite), "--exists", "overwrite"])
            self.assertEqual((out_overwrite / "file.txt").read_text(), "alpha")

            out_fail = root / "ex_fail"
            out_fail.mkdir()
            (out_fail / "file.txt").write_text("beta")
            fail_proc = self.run_cli(["extract", str(archive), "--outdir", str(out_fail), "--exists", "fail"], expect=2)
            self.assertIn("Destination exists", fail_proc.stderr)

    def test_strict_list_reports_corruption(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            f = root / "a.txt"
            f.write_text("data")
            archive = root / "a.tar"
            self.run_cli(["create", str(archive), str(f), "--quiet"])
            raw = bytearray(archive.read_bytes())
            raw[0] ^= 0x20
            archive.write_bytes(bytes(raw))

            lenient = self.run_cli(["list", str(archive)])
            self.assertIn("A.txt", lenient.stdout)
            strict = self.run_cli(["list", str(archive), "--strict"], expect=2)
            self.assertIn("checksum", strict.stderr)

    def test_missing_archive(self):
        with tempfile.TemporaryDirectory() as tmp:
            proc = self.run_cli(["list", str(Path(tmp) / "nope.tar")], expect=2)
            self.assertIn("Error:", proc.stderr)

    def _write_archive(self, path: Path, entries) -> None:
        path.write_bytes(assemble(entries))

    @unittest.skipUnless(hasattr(os, "symlink"), "symlinks not supported")
    def test_extract_refuses_absolute_symlink_then_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            outside = root / "outside"
            outside.mkdir()
            archive = root / "esc.tar"
            self._write_archive(archive, [
                (FileMetadata(filename="esc", link=LinkIndicator.SYMBOLIC_LINK, linkname=str(outside), mtime=0), b""),
                (FileMetadata(filename="pwned.txt", prefix="esc", mtime=0), b"owned"),
            ])
            out = root / "out"
            out.mkdir()
            proc = self.run_cli(["extract", str(archive), "--outdir", str(out)])
            self.assertIn("points outside", proc.stderr)
            self.assertFalse((outside / "pwned.txt").exists())
            self.assertFalse((out / "esc").is_symlink())
            self.assertEqual((out / "esc" / "pwned.txt").read_bytes(), b"owned")

    @unittest.skipUnless(hasattr(os, "symlink"), "symlinks not supported")
    def test_extract_refuses_relative_escaping_symlink(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            outside = root / "outside"
            outside.mkdir()
            archive = root / "esc.tar"
            self._write_archive(archive, [
                (FileMetadata(filename="a.txt", mtime=0), b"inside"),
                (FileMetadata(filename="inner", link=LinkIndicator.SYMBOLIC_LINK, linkname="a.txt", mtime=0), b""),
                (FileMetadata(filename="esc", link=LinkIndicator.SYMBOLIC_LINK, linkname="../outside", mtime=0), b""),
                (FileMetadata(filename="pwned.txt", prefix="esc", mtime=0), b"owned"),
            ])
            out = root / "out"
            out.mkdir()
            proc = self.run_cli(["extract", str(archive), "--outdir", str(out)])
            self.assertIn("points outside", proc.stderr)
            self.assertFalse((outside / "pwned.txt").exists())
            self.assertEqual(os.readlink(out / "inner"), "a.txt")
            self.assertEqual((out / "inner").read_bytes(), b"inside")

    @unittest.skipUnless(hasattr(os, "symlink"), "symlinks not supported")
    def test_extract_skips_entry_below_existing_escaping_symlink(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            outside = root / "outside"
            outside.mkdir()
            out = root / "out"
            out.mkdir()
            os.symlink(str(outside), str(out / "esc"))
            archive = root / "esc.tar"
            self._write_archive(archive, [
                (FileMetadata(filename="pwned.txt", prefix="esc", mtime=0), b"owned"),
            ])
            proc = self.run_cli(["extract", str(archive), "--outdir", str(out)])
            self.assertIn("resolves outside", proc.stderr)
            self.assertIn("skipped=1", proc.stdout)
            self.assertFalse((outside / "pwned.txt").exists())

    def test_directory_entries_are_created_not_written_as_files(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            archive = root / "dirs.tar"
            with tarfile.open(str(archive), mode="w", format=tarfile.USTAR_FORMAT) as tf:
                d = tarfile.TarInfo("d")
                d.type = tarfile.DIRTYPE
                d.mode = 0o755
                tf.addfile(d)
                payload = b"in a directory\n"
                f = tarfile.TarInfo("d/f.txt")
                f.size = len(payload)
                tf.addfile(f, io.BytesIO(payload))
                fifo = tarfile.TarInfo("pipe")
                fifo.type = tarfile.FIFOTYPE
                tf.addfile(fifo)

            listing = self.run_cli(["list", str(archive)])
            self.assertIn("dir\td/", listing.stdout)
            self.assertIn("other(6)", listing.stdout)

            out = root / "out"
            out.mkdir()
            proc = self.run_cli(["extract", str(archive), "--outdir", str(out)])
            self.assertTrue((out / "d").is_dir())
            self.assertEqual((out / "d" / "f.txt").read_bytes(), payload)
            self.assertFalse((out / "pipe").exists())
            self.assertIn("unsupported entry type '6'", proc.stderr)


if __name__ == "__main__":
    unittest.main()
