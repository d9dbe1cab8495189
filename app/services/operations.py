# app/services/operations.py
from __future__ import annotations

from enum import Enum
from typing import Mapping, Optional

from app.errors import BadRequest


class Operation(str, Enum):
    BROWSE = "browse"          # directory listing or file download
    EDIT_VIEW = "edit_view"
    UPLOAD = "upload"
    EDIT_SAVE = "edit_save"
    EXTRACT = "extract"
    MKDIR = "mkdir"
    DELETE = "delete"


WRITE_METHODS = {"POST", "PUT"}


def select_operation(method: str, query: Mapping[str, str], content_type: Optional[str] = None) -> Operation:
    """
    Pick the operation for a request from its verb, query tags and content type.

    Precedence for POST/PUT: extract=true, then edit=<name>, then a multipart body.
    Anything else on a write verb is a malformed upload.
    """
    method = method.upper()
    if method == "GET":
        return Operation.EDIT_VIEW if query.get("edit") else Operation.BROWSE
    if method == "MKCOL":
        return Operation.MKDIR
    if method == "DELETE":
        return Operation.DELETE
    if method in WRITE_METHODS:
        if query.get("extract") == "true":
            return Operation.EXTRACT
        if query.get("edit"):
            return Operation.EDIT_SAVE
        if (content_type or "").lower().startswith("multipart/form-data"):
            return Operation.UPLOAD
        raise BadRequest("expected a multipart/form-data upload, ?edit=<name> or ?extract=true")
    raise ValueError(f"Unsupported method: {method}")
