# app/services/volume.py
from __future__ import annotations

import logging
import os
import shutil
import stat
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, List, Optional, Tuple

from pydantic import BaseModel, Field

from app.errors import BadRequest, Forbidden, IOFailure, NotFound, os_errors
from app.services import paths

logger = logging.getLogger(__name__)

COPY_CHUNK = 1024 * 1024


class DirEntry(BaseModel):
    name: str
    is_dir: bool = Field(..., serialization_alias="isDir")
    size: int = 0
    ext: str = ""


@dataclass(frozen=True)
class EditDocument:
    name: str
    content: str


class VolumeService:
    """
    Sandbox all file operations inside the mounted volume.

    Every request path goes through `resolve`; names coming from the outside
    world (upload filenames, edit targets, archive entries) are re-resolved
    against their own directory with the same boundary check.
    """

    def __init__(self, root: Path, max_upload_bytes: int = 100 * 1024 * 1024):
        self.root = Path(os.path.realpath(root))
        if not self.root.is_dir():
            raise ValueError(f"Volume root is not a directory: {self.root}")
        self.max_upload_bytes = max_upload_bytes

    # ---------- Paths ----------

    def resolve(self, request_path: str) -> Path:
        return paths.resolve(self.root, request_path)

    def display_path(self, path: Path) -> str:
        return paths.relative(self.root, path)

    def is_root(self, path: Path) -> bool:
        return os.path.normpath(str(path)) == str(self.root)

    def kind(self, path: Path) -> str:
        """'dir' or 'file'; NotFound when nothing is there."""
        with os_errors("stat"):
            st = path.stat()
        return "dir" if stat.S_ISDIR(st.st_mode) else "file"

    # ---------- Read ----------

    def list_dir(self, path: Path) -> List[DirEntry]:
        entries: List[DirEntry] = []
        with os_errors("list"):
            with os.scandir(path) as it:
                for entry in it:
                    try:
                        is_dir = entry.is_dir()
                        size = 0 if is_dir else entry.stat().st_size
                    except OSError:
                        # dangling symlink: list it, without a size
                        logger.debug("stat failed for %s", entry.path)
                        is_dir, size = False, 0
                    ext = "" if is_dir else os.path.splitext(entry.name)[1]
                    entries.append(DirEntry(name=entry.name, is_dir=is_dir, size=size, ext=ext))
        entries.sort(key=lambda e: e.name)
        return entries

    def read_text(self, path: Path) -> str:
        with os_errors("read"):
            return path.read_bytes().decode("utf-8", "replace")

    def edit_target(self, path: Path, name: str) -> Path:
        """
        Locate the file an `edit=<name>` refers to.
        `name` lives in the directory at `path`, or next to the file at `path`;
        a path whose own basename is `name` is the target itself.
        """
        if path.is_dir():
            directory = path
        elif path.name == name:
            return path
        elif path.is_file():
            directory = path.parent
        else:
            raise NotFound(f"directory not found: {self.display_path(path)}")
        return paths.resolve(directory, name)

    def read_edit(self, path: Path, name: str) -> EditDocument:
        target = self.edit_target(path, name)
        if not target.is_file():
            raise NotFound(f"file not found: {self.display_path(target)}")
        return EditDocument(name=name, content=self.read_text(target))

    # ---------- Write ----------

    def write_file(self, path: Path, data: bytes) -> int:
        """Replace the whole file content, creating parents as needed."""
        with os_errors("write"):
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
            written = path.stat().st_size
        if written != len(data):
            raise IOFailure(f"short write to {self.display_path(path)}: {written}/{len(data)} bytes")
        return written

    def write_edit(self, path: Path, name: str, data: bytes) -> Path:
        target = self.edit_target(path, name)
        self.write_file(target, data)
        return target

    def upload_dir(self, path: Path) -> Path:
        """Directory an upload to `path` lands in; created when missing."""
        with os_errors("upload"):
            if path.is_dir():
                return path
            if path.exists():
                return path.parent
            path.mkdir(parents=True, exist_ok=True)
        return path

    def save_upload(self, path: Path, filename: Optional[str], source: BinaryIO,
                    expected_size: Optional[int] = None) -> Tuple[Path, int]:
        if not filename:
            raise BadRequest("upload has no filename")
        directory = self.upload_dir(path)
        target = paths.resolve(directory, filename)
        if target.parent != directory:
            raise BadRequest(f"upload filename must be a plain file name: {filename!r}")
        size = self._copy_verified(source, target, expected_size)
        return target, size

    def mkdir(self, path: Path) -> None:
        with os_errors("mkdir"):
            path.mkdir(parents=True, exist_ok=True)

    def delete(self, path: Path) -> bool:
        """Remove `path` recursively. Returns False when there was nothing to remove."""
        if self.is_root(path):
            raise Forbidden("refusing to delete the volume root")
        with os_errors("delete"):
            if not os.path.lexists(path):
                return False
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path)
            else:
                path.unlink()
        return True

    # ---------- Archives ----------

    def extract(self, archive: Path) -> Tuple[Path, int]:
        """
        Extract a zip archive into its containing directory.

        All entry names are validated before the first byte is written; an
        I/O failure midway leaves the entries written so far in place.
        """
        destination = archive.parent
        if archive.is_dir():
            raise BadRequest(f"not an archive: {self.display_path(archive)}")
        count = 0
        with os_errors("extract"):
            try:
                with zipfile.ZipFile(archive) as zf:
                    plan = [
                        (info, paths.resolve(destination, info.filename.replace("\\", "/")))
                        for info in zf.infolist()
                    ]
                    for info, target in plan:
                        if info.flag_bits & 0x1:
                            raise BadRequest(f"encrypted entry not supported: {info.filename}")
                        if target == archive:
                            raise BadRequest(f"entry would overwrite the archive itself: {info.filename}")
                    for info, target in plan:
                        if info.is_dir():
                            target.mkdir(parents=True, exist_ok=True)
                            continue
                        target.parent.mkdir(parents=True, exist_ok=True)
                        mode = (info.external_attr >> 16) & 0o777
                        with zf.open(info) as src:
                            self._copy_verified(src, target, info.file_size, mode or None)
                        count += 1
            except (zipfile.BadZipFile, NotImplementedError) as e:
                raise BadRequest(f"bad archive {self.display_path(archive)}: {e}") from e
        return destination, count

    # ---------- Internals ----------

    def _copy_verified(self, source: BinaryIO, target: Path,
                       expected: Optional[int] = None, mode: Optional[int] = None) -> int:
        copied = 0
        with os_errors("write"):
            with open(target, "wb") as out:
                while True:
                    chunk = source.read(COPY_CHUNK)
                    if not chunk:
                        break
                    out.write(chunk)
                    copied += len(chunk)
                out.flush()
                os.fsync(out.fileno())
            if mode:
                os.chmod(target, mode | stat.S_IRUSR | stat.S_IWUSR)
            written = target.stat().st_size
        if written != copied or (expected is not None and copied != expected):
            raise IOFailure(
                f"incomplete write to {self.display_path(target)}: "
                f"{written} written, {copied} copied, {expected} expected"
            )
        return copied
