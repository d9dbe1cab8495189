# app/services/paths.py
import os
import posixpath
from pathlib import Path, PurePosixPath

from app.errors import BoundaryViolation


def clean(request_path: str) -> str:
    """
    Normalize an untrusted, slash-delimited path into a relative one.
    Leading separators are dropped so the result never replaces the root on join;
    `..` segments that climb above the start survive and are caught by `resolve`.
    """
    if "\x00" in request_path:
        raise BoundaryViolation("NUL byte in path")
    cleaned = posixpath.normpath(request_path.lstrip("/"))
    return "" if cleaned == "." else cleaned


def is_within(root: str, candidate: str) -> bool:
    # Component boundary, not string prefix: /data2 is not inside /data
    if candidate == root:
        return True
    prefix = root if root.endswith(os.sep) else root + os.sep
    return candidate.startswith(prefix)


def resolve(root: Path, request_path: str) -> Path:
    """
    Join `request_path` onto `root` and guarantee the result stays inside it.
    Pure path arithmetic: nothing on disk is consulted.
    """
    base = os.path.normpath(str(root))
    cleaned = clean(request_path)
    # Climbing above the start is rejected even if the path would re-enter the root
    if cleaned == ".." or cleaned.startswith("../"):
        raise BoundaryViolation(f"path escapes {base}: {request_path!r}")
    target = os.path.normpath(os.path.join(base, cleaned)) if cleaned else base
    if not is_within(base, target):
        raise BoundaryViolation(f"path escapes {base}: {request_path!r}")
    return Path(target)


def relative(root: Path, path: Path) -> str:
    """Render a resolved path as a '/'-rooted request path."""
    rel = os.path.relpath(os.path.normpath(str(path)), os.path.normpath(str(root)))
    if rel == ".":
        return "/"
    return "/" + PurePosixPath(*Path(rel).parts).as_posix()
