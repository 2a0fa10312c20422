"""Shared helpers used by bundle tooling."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

# Module bodies are opaque bytes: undecodable bytes survive as lone
# surrogates and are restored when encoded with the same handler.
SOURCE_ERRORS = "surrogateescape"


def write_text(path: Path, content: str, *, newline: Optional[str] = None) -> None:
    """Write text to file ensuring parent directories exist."""

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8", errors=SOURCE_ERRORS, newline=newline)


def encode_text(content: str) -> bytes:
    return content.encode("utf-8", SOURCE_ERRORS)


def url_path(*parts: str) -> str:
    """Join URL path segments into a root-absolute path."""

    segments = [segment for part in parts for segment in part.replace("\\", "/").split("/")]
    cleaned = [segment for segment in segments if segment and segment != "."]
    return "/" + "/".join(cleaned)
