"""Dynamic serving: registers one route per page and pass-through asset on a FastAPI app."""

import logging
import os
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from fastapi import FastAPI, Request
from fastapi.responses import FileResponse, HTMLResponse
from fastapi.staticfiles import StaticFiles

from polysite.models.website import PageEntry, TemplateData

logger = logging.getLogger(__name__)

TemplateDataFactory = Callable[[Request, TemplateData], Mapping[str, Any]]


class RequestRenderer:
    """Renders pages per request.

    *make_template_data* may add request-specific values (a CSRF token, the
    cart…) to the template context.  Its result is merged over the page's own
    :class:`TemplateData` context; on a key collision the returned value wins.
    """

    def __init__(
        self,
        app: FastAPI,
        content_root: Path,
        make_template_data: Optional[TemplateDataFactory] = None,
    ) -> None:
        self.app = app
        self.content_root = Path(content_root)
        self.make_template_data = make_template_data

    def add_static(self, name: str) -> None:
        src = self.content_root / name
        if src.is_dir():
            self.app.mount(
                f"/{name}",
                StaticFiles(directory=os.path.realpath(src), follow_symlink=True),
                name=f"static-{name}",
            )
        else:
            self.app.add_api_route(
                f"/{name}",
                _file_endpoint(src),
                methods=["GET"],
                include_in_schema=False,
            )

    def add_page(self, path: str, entry: PageEntry) -> None:
        self.app.add_api_route(
            f"/{path}",
            _page_endpoint(path, entry, self.make_template_data),
            methods=["GET"],
            response_class=HTMLResponse,
            include_in_schema=False,
        )


def _file_endpoint(src: Path):
    def serve_file() -> FileResponse:
        return FileResponse(src)

    return serve_file


def _page_endpoint(
    path: str, entry: PageEntry, make_template_data: Optional[TemplateDataFactory]
):
    def serve_page(request: Request) -> HTMLResponse:
        # Each request gets its own context dict; the template itself is read-only.
        try:
            context = entry.data.context()
            if make_template_data is not None:
                context.update(make_template_data(request, entry.data))
            body = entry.template.render(context)
        except Exception:
            logger.exception("Error executing page template %s", path)
            return HTMLResponse("Internal Server Error", status_code=500)
        return HTMLResponse(body)

    return serve_page
