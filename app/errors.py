# app/errors.py
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator


class VolumeError(Exception):
    """
    Base for every failure surfaced by a volume operation.
    `status_code` is the HTTP status the transport should answer with.
    """
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BoundaryViolation(VolumeError):
    """A request path or archive entry escapes its sandbox directory."""
    status_code = 403


class Forbidden(VolumeError):
    status_code = 403


class NotFound(VolumeError):
    status_code = 404


class BadRequest(VolumeError):
    status_code = 400


class TooLarge(VolumeError):
    status_code = 413


class IOFailure(VolumeError):
    status_code = 500


@contextmanager
def os_errors(action: str) -> Iterator[None]:
    """
    Translate OSError raised inside the block into the VolumeError taxonomy.
    """
    try:
        yield
    except (FileNotFoundError, NotADirectoryError) as e:
        raise NotFound(f"{action}: {e.strerror or e}") from e
    except (IsADirectoryError, FileExistsError) as e:
        raise BadRequest(f"{action}: {e.strerror or e}") from e
    except OSError as e:
        raise IOFailure(f"{action}: {e.strerror or e}") from e
