"""Resolve declared library names to package roots on disk."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ..config.loader import CONFIG_FILENAME, PACKAGE_FILENAME
from ..errors import LibraryNotFoundError

logger = logging.getLogger(__name__)

DEPENDENCY_DIRNAME = "node_modules"


class LibraryLocator:
    """Finds library packages by name.

    Candidates are tried in order: the project's dependency directory, the
    user-global one, the install-prefix one, then the packages enclosing the
    runtime when the runtime itself is installed as a dependency.
    """

    def __init__(
        self,
        project_root: Path,
        *,
        runtime_root: Path,
        user_dir: Optional[Path] = None,
        prefix_dir: Optional[Path] = None,
    ) -> None:
        self.project_root = Path(project_root)
        self.runtime_root = Path(runtime_root)
        self.user_dir = user_dir if user_dir is not None else Path.home() / f".{DEPENDENCY_DIRNAME}"
        self.prefix_dir = (
            prefix_dir if prefix_dir is not None else Path(sys.prefix) / "lib" / DEPENDENCY_DIRNAME
        )

    def candidates(self, name: str) -> List[Path]:
        paths = [
            self.project_root / DEPENDENCY_DIRNAME / name,
            self.user_dir / name,
            self.prefix_dir / name,
        ]
        paths.extend(self._enclosing_packages())
        return paths

    def locate(self, name: str) -> Path:
        """Return the root of library ``name`` or raise :class:`LibraryNotFoundError`."""

        candidates = self.candidates(name)
        for candidate in candidates:
            if self._is_library(candidate, name):
                logger.debug("Located library %s at %s", name, candidate)
                return candidate.resolve()
        raise LibraryNotFoundError(name, candidates)

    def _enclosing_packages(self) -> List[Path]:
        found: List[Path] = []
        dependency_dir = self.runtime_root.parent
        package = dependency_dir.parent
        while dependency_dir.name == DEPENDENCY_DIRNAME and (package / PACKAGE_FILENAME).is_file():
            found.append(package)
            dependency_dir = package.parent
            package = dependency_dir.parent
        return found

    @staticmethod
    def _is_library(candidate: Path, name: str) -> bool:
        config_path = candidate / CONFIG_FILENAME
        package_path = candidate / PACKAGE_FILENAME
        if not (config_path.is_file() and package_path.is_file()):
            return False
        try:
            payload = json.loads(package_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.warning("Ignoring unreadable package metadata at %s", package_path)
            return False
        return isinstance(payload, dict) and payload.get("name") == name


__all__ = ["DEPENDENCY_DIRNAME", "LibraryLocator"]
