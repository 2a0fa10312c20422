"""Error taxonomy shared by the bundler, the dev server and the CLI."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Sequence


class JahError(Exception):
    """Base class for every error raised by jah."""


class ConfigParseError(JahError, ValueError):
    """Raised when a config file is still malformed after lenient parsing."""

    def __init__(self, path: Optional[Path], reason: str) -> None:
        self.path = path
        self.reason = reason
        location = f"{path}: " if path else ""
        super().__init__(f"Invalid config {location}{reason}")


class LibraryNotFoundError(JahError, LookupError):
    """Raised when a declared library cannot be located on disk."""

    def __init__(self, name: str, candidates: Iterable[Path] = ()) -> None:
        self.name = name
        self.candidates: Sequence[Path] = list(candidates)
        searched = ", ".join(str(path) for path in self.candidates) or "none"
        super().__init__(f"Unable to find location of library '{name}' (searched: {searched})")


class MountNotFound(JahError, LookupError):
    """Raised when a virtual path resolves to no existing file."""

    def __init__(self, virtual_path: str) -> None:
        self.virtual_path = virtual_path
        super().__init__(f"No file mounted at {virtual_path}")


class CopyFailure(JahError, OSError):
    """Raised when copying a file into the build directory fails."""

    def __init__(self, source: Path, destination: Path, cause: OSError) -> None:
        self.source = source
        self.destination = destination
        self.cause = cause
        super().__init__(f"Failed to copy {source} -> {destination}: {cause}")


__all__ = [
    "JahError",
    "ConfigParseError",
    "LibraryNotFoundError",
    "MountNotFound",
    "CopyFailure",
]
