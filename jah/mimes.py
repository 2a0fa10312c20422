"""Mimetype lookup used to pick how a file is wrapped."""

from __future__ import annotations

import mimetypes
from pathlib import PurePath

SCRIPT_MIMETYPE = "application/javascript"
DEFAULT_MIMETYPE = "application/octet-stream"
SCRIPT_EXTENSION = "js"

_OVERRIDES = {
    ".js": SCRIPT_MIMETYPE,
    ".mjs": SCRIPT_MIMETYPE,
    ".json": "application/json",
    ".html": "text/html",
    ".css": "text/css",
    ".svg": "image/svg+xml",
    ".txt": "text/plain",
    ".tmx": "application/xml",
    ".glsl": "text/plain",
}

_TEXT_APPLICATION_TYPES = {
    "application/json",
    "application/xml",
    "application/xhtml+xml",
}


def guess_type(filename: str | PurePath) -> str:
    """Return the mimetype for ``filename`` based on its extension."""

    suffix = PurePath(filename).suffix.lower()
    if suffix in _OVERRIDES:
        return _OVERRIDES[suffix]
    mimetype, _ = mimetypes.guess_type(PurePath(filename).name)
    return mimetype or DEFAULT_MIMETYPE


def extension_of(filename: str | PurePath) -> str:
    return PurePath(filename).suffix.lower().lstrip(".")


def is_script(mimetype: str) -> bool:
    return mimetype in (SCRIPT_MIMETYPE, "text/javascript")


def is_image(mimetype: str) -> bool:
    return mimetype.startswith("image/")


def is_text(mimetype: str) -> bool:
    return mimetype.startswith("text/") or mimetype in _TEXT_APPLICATION_TYPES
