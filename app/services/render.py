# app/services/render.py
import posixpath
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote

from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.services.volume import DirEntry, EditDocument

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
)


def _href(current_path: str, name: str, is_dir: bool = False) -> str:
    href = posixpath.join(quote(current_path), quote(name, safe=""))
    return href + "/" if is_dir else href


def _parent(current_path: str) -> Optional[str]:
    if current_path == "/":
        return None
    return posixpath.dirname(current_path.rstrip("/")) or "/"


def render_browser(
    current_path: str,
    entries: List[DirEntry],
    edit: Optional[EditDocument] = None,
    title: str = "Volume File Manager",
) -> str:
    """
    Render the interactive file manager for one directory.
    Pure function of its arguments; `edit` opens the editor on that file.
    """
    rows = [
        {
            "name": e.name,
            "is_dir": e.is_dir,
            "size": e.size,
            "is_zip": e.ext.lower() == ".zip",
            "href": _href(current_path, e.name, e.is_dir),
        }
        for e in entries
    ]
    template = _env.get_template("browser.html")
    return template.render(
        title=title,
        current_path=current_path,
        base_href=quote(current_path),
        parent=_parent(current_path),
        entries=rows,
        edit=edit,
    )
