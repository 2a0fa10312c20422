"""Development server answering each request from the source tree.

Every response is computed on demand with the same resolver and wrapper the
bundler uses, so nothing is written to a build directory.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.routing import Route

from ..bundle.templates import TEMPLATE_SUFFIX, loader_footer, render_page, script_tags
from ..bundle.utils import encode_text, url_path
from ..mimes import SCRIPT_MIMETYPE, guess_type
from ..project import Project

logger = logging.getLogger(__name__)

NAMESPACE = "__jah__"
DEV_ASSET_URL = f"/{NAMESPACE}/assets"
HEADER_NAME = "header.js"
FOOTER_NAME = "footer.js"
NOT_FOUND_BODY = "File not found"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 4000


class DevServer:
    """Request handlers bound to one loaded project."""

    def __init__(self, project: Project) -> None:
        self.project = project

    def header(self) -> str:
        return self.project.header(DEV_ASSET_URL)

    def footer(self) -> str:
        return loader_footer()

    def script_urls(self) -> List[str]:
        urls = [url_path(NAMESPACE, HEADER_NAME)]
        urls.extend(url_path(NAMESPACE, "modules", source.mount) for source in self.project.iter_sources())
        urls.append(url_path(NAMESPACE, FOOTER_NAME))
        return urls

    def scripts_html(self) -> str:
        return "\n        " + script_tags(self.script_urls(), separator="\n        ")

    # Handlers

    def index(self, request: Request) -> Response:
        return self.serve_public("index.html")

    def public(self, request: Request) -> Response:
        return self.serve_public(request.path_params.get("path") or "index.html")

    def namespace(self, request: Request) -> Response:
        path = request.path_params.get("path", "")
        logger.info("Request %s", request.url.path)
        if path.startswith("modules/"):
            return self.serve_module(path[len("modules/"):])
        if path.startswith("assets/"):
            return self.serve_asset(path[len("assets/"):])
        if path == HEADER_NAME:
            return Response(self.header(), media_type=SCRIPT_MIMETYPE)
        if path == FOOTER_NAME:
            return Response(self.footer(), media_type=SCRIPT_MIMETYPE)
        return not_found(path)

    def serve_public(self, relative: str) -> Response:
        public_dir = self.project.public_dir.resolve()
        target = (public_dir / relative).resolve()
        if target != public_dir and public_dir not in target.parents:
            return not_found(relative)

        mimetype = guess_type(target)
        if target.is_file():
            logger.info("Serving file %s", target)
            return Response(target.read_bytes(), media_type=mimetype)

        template = target.with_name(target.name + TEMPLATE_SUFFIX)
        if template.is_file():
            logger.info("Rendering template %s", template)
            text = render_page(template.read_text(encoding="utf-8"), self.scripts_html())
            return Response(text, media_type=mimetype)
        return not_found(relative)

    def serve_module(self, virtual_path: str) -> Response:
        match = self.project.resolver.resolve(virtual_path)
        if match is None or not match.path.is_file():
            return not_found(virtual_path)
        logger.info("Serving script %s", match.path)
        resource = self.project.wrapper.wrap(match.path, match.mount, tight=True)
        return Response(encode_text(resource.render()), media_type=SCRIPT_MIMETYPE)

    def serve_asset(self, virtual_path: str) -> Response:
        match = self.project.resolver.resolve(virtual_path)
        if match is None or not match.path.is_file():
            return not_found(virtual_path)
        logger.info("Serving resource %s", match.path)
        return Response(match.path.read_bytes(), media_type=guess_type(match.path))

    def routes(self) -> List[Route]:
        return [
            Route("/", self.index, methods=["GET"]),
            Route("/index.html", self.index, methods=["GET"]),
            Route("/public", self.index, methods=["GET"]),
            Route("/public/{path:path}", self.public, methods=["GET"]),
            Route(f"/{NAMESPACE}/{{path:path}}", self.namespace, methods=["GET"]),
        ]


def not_found(path: Optional[str] = None) -> PlainTextResponse:
    logger.warning("404 File not found: %s", path)
    return PlainTextResponse(NOT_FOUND_BODY, status_code=404)


def _http_not_found(request: Request, exc: HTTPException) -> Response:
    return not_found(request.url.path)


def create_app(project: Project, *, debug: bool = False) -> Starlette:
    server = DevServer(project)
    app = Starlette(
        debug=debug,
        routes=server.routes(),
        exception_handlers={404: _http_not_found},
    )
    app.state.dev_server = server
    return app


def run_server(
    config_path: Path | str,
    *,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    log_level: str = "info",
) -> None:
    import uvicorn

    project = Project.load(config_path)
    app = create_app(project)
    logger.info("Serving from http://%s:%s/", host, port)
    uvicorn.run(app, host=host, port=int(port), log_level=log_level)


__all__ = [
    "DEV_ASSET_URL",
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "DevServer",
    "NAMESPACE",
    "create_app",
    "not_found",
    "run_server",
]
