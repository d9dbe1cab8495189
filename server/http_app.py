# server/http_app.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional
from urllib.parse import quote

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse, RedirectResponse, Response
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import Headers, UploadFile

from app.config import Settings
from app.di import Container, build_container
from app.errors import BadRequest, TooLarge, VolumeError
from app.logging import configure_logging, log_failure, log_operation
from app.services.operations import Operation, select_operation
from app.services.render import render_browser
from app.services.volume import VolumeService

logger = logging.getLogger("volume.http")

METHODS = ["GET", "POST", "PUT", "DELETE", "MKCOL"]

Handler = Callable[[Request, Path], Awaitable[Response]]


def _error_body(status: int, message: str) -> Dict[str, Any]:
    return {"error": {"code": status, "message": message}}


def _wants_html(request: Request) -> bool:
    return "text/html" in request.headers.get("accept", "")


# ---------- Upload ceiling ----------

class UploadLimitMiddleware:
    """
    Reject request bodies above `max_bytes` before anything buffers them:
    up front from Content-Length, and while streaming for chunked bodies.
    """

    def __init__(self, app, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        message = f"request body exceeds {self.max_bytes} bytes"
        length = Headers(scope=scope).get("content-length", "")
        if length.isdigit() and int(length) > self.max_bytes:
            log_failure(logger, scope["method"], scope["path"], 413, message)
            response = JSONResponse(_error_body(413, message), status_code=413)
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive():
            nonlocal received
            msg = await receive()
            if msg["type"] == "http.request":
                received += len(msg.get("body", b""))
                if received > self.max_bytes:
                    raise TooLarge(message)
            return msg

        await self.app(scope, limited_receive, send)


# ---------- Operation handlers ----------

class VolumeHandlers:
    """
    One named coroutine per Operation.
    Filesystem work is blocking, so it runs in the thread pool.
    """

    def __init__(self, volume: VolumeService, title: str):
        self.volume = volume
        self.title = title

    def table(self) -> Dict[Operation, Handler]:
        return {
            Operation.BROWSE: self.browse,
            Operation.EDIT_VIEW: self.edit_view,
            Operation.UPLOAD: self.upload,
            Operation.EDIT_SAVE: self.edit_save,
            Operation.EXTRACT: self.extract,
            Operation.MKDIR: self.mkdir,
            Operation.DELETE: self.delete,
        }

    async def browse(self, request: Request, target: Path) -> Response:
        shown = self.volume.display_path(target)
        kind = await run_in_threadpool(self.volume.kind, target)
        if kind == "file":
            log_operation(logger, "download", shown)
            return FileResponse(target)

        entries = await run_in_threadpool(self.volume.list_dir, target)
        log_operation(logger, "list", shown, entries=len(entries))
        if _wants_html(request):
            return HTMLResponse(render_browser(shown, entries, title=self.title))
        return JSONResponse([e.model_dump(by_alias=True) for e in entries])

    async def edit_view(self, request: Request, target: Path) -> Response:
        name = request.query_params["edit"]
        doc = await run_in_threadpool(self.volume.read_edit, target, name)
        log_operation(logger, "edit_view", self.volume.display_path(target), name=name)
        if not _wants_html(request):
            return JSONResponse({"name": doc.name, "content": doc.content})

        directory = target if target.is_dir() else target.parent
        entries = await run_in_threadpool(self.volume.list_dir, directory)
        html = render_browser(self.volume.display_path(directory), entries, edit=doc, title=self.title)
        return HTMLResponse(html)

    async def upload(self, request: Request, target: Path) -> Response:
        form = await request.form()
        try:
            upload = form.get("file")
            if not isinstance(upload, UploadFile):
                raise BadRequest("multipart form has no 'file' field")
            saved, size = await run_in_threadpool(
                self.volume.save_upload, target, upload.filename, upload.file, upload.size
            )
        finally:
            await form.close()

        shown = self.volume.display_path(saved)
        log_operation(logger, "upload", shown, size=size)
        if _wants_html(request):
            return RedirectResponse(url=quote(self.volume.display_path(saved.parent)), status_code=303)
        return JSONResponse({"name": saved.name, "path": shown, "size": size}, status_code=201)

    async def edit_save(self, request: Request, target: Path) -> Response:
        name = request.query_params["edit"]
        body = await request.body()
        saved = await run_in_threadpool(self.volume.write_edit, target, name, body)
        log_operation(logger, "edit_save", self.volume.display_path(saved), size=len(body))
        return Response(status_code=204)

    async def extract(self, request: Request, target: Path) -> Response:
        destination, count = await run_in_threadpool(self.volume.extract, target)
        shown = self.volume.display_path(destination)
        log_operation(logger, "extract", self.volume.display_path(target), files=count, into=shown)
        return JSONResponse({"extracted": count, "destination": shown})

    async def mkdir(self, request: Request, target: Path) -> Response:
        await run_in_threadpool(self.volume.mkdir, target)
        log_operation(logger, "mkdir", self.volume.display_path(target))
        return Response(status_code=201)

    async def delete(self, request: Request, target: Path) -> Response:
        existed = await run_in_threadpool(self.volume.delete, target)
        log_operation(logger, "delete", self.volume.display_path(target), existed=existed)
        return Response(status_code=204)


# ---------- App factory ----------

def create_app(container: Optional[Container] = None) -> FastAPI:
    """
    Build the HTTP app over one volume.
    A single catch-all route maps every path under the volume root.
    """
    container = container or build_container()
    settings = container.settings
    volume = container.volume_service
    configure_logging(settings.LOG_LEVEL)

    # No docs routes: every path belongs to the volume
    app = FastAPI(title=settings.SERVER_NAME, version="0.1.0",
                  docs_url=None, redoc_url=None, openapi_url=None)
    app.add_middleware(UploadLimitMiddleware, max_bytes=volume.max_upload_bytes)

    handlers = VolumeHandlers(volume, settings.SERVER_NAME).table()

    @app.exception_handler(VolumeError)
    async def volume_error_handler(request: Request, exc: VolumeError):
        log_failure(logger, request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse(_error_body(exc.status_code, exc.message), status_code=exc.status_code)

    @app.api_route("/{path:path}", methods=METHODS)
    async def volume_endpoint(path: str, request: Request):
        op = select_operation(request.method, request.query_params, request.headers.get("content-type"))
        target = volume.resolve(path)
        return await handlers[op](request, target)

    return app


def main():
    settings = Settings()
    configure_logging(settings.LOG_LEVEL)
    logger.info("starting volume file manager port=%s volume=%s", settings.PORT, settings.VOLUME_ROOT)
    uvicorn.run(
        "server.http_app:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        reload=False,
    )


if __name__ == "__main__":
    main()
