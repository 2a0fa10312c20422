"""Mount resolution and source tree walking.

Both the bundler and the dev server turn virtual paths into files through
:class:`MountResolver`, so a URL valid against a static build is also valid
against the live server.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Collection, Iterator, List, Optional, Tuple

from ..config.schema import ProjectConfig, normalise_mount
from ..errors import MountNotFound
from .queue import BuildQueue

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MountMatch:
    path: Path
    mount: str


@dataclass(frozen=True, slots=True)
class SourceFile:
    path: Path
    mount: str


def join_mount(mount: str, *parts: str) -> str:
    joined = posixpath.join(mount or "/", *(part.lstrip("/") for part in parts if part))
    return normalise_mount(posixpath.normpath(joined))


def mount_contains(mount: str, virtual_path: str) -> bool:
    """Return True when ``virtual_path`` lies at or below ``mount``."""

    if mount == "/":
        return True
    return virtual_path == mount or virtual_path.startswith(mount + "/")


class MountResolver:
    """Maps virtual paths to files across the build queue.

    Queue entries are tried in insertion order and the first whose mount
    contains the path wins; there is no longest-prefix selection. The
    project's legacy ``paths`` come next, then the project source directory.
    """

    def __init__(self, config: ProjectConfig, queue: BuildQueue) -> None:
        self.config = config
        self.queue = queue

    def candidates(self) -> List[Tuple[str, Path]]:
        """Return ``(mount, source directory)`` pairs in resolution order."""

        pairs: List[Tuple[str, Path]] = []
        for entry in self.queue:
            if not entry.has_config:
                continue
            pairs.append((entry.mount, entry.source_path))
        for source, mount in self.config.paths.items():
            pairs.append((normalise_mount(mount), (self.config.root / source).resolve()))
        return pairs

    def resolve(self, virtual_path: str) -> Optional[MountMatch]:
        virtual = normalise_mount(posixpath.normpath("/" + virtual_path.lstrip("/")))

        match: Optional[MountMatch] = None
        for mount, source_path in self.candidates():
            if mount_contains(mount, virtual):
                remainder = virtual[len(mount):] if mount != "/" else virtual
                match = MountMatch(
                    path=source_path / remainder.lstrip("/"),
                    mount=join_mount(mount, remainder),
                )
                break

        if match is None:
            remainder = virtual
            project_mount = self.config.mount or "/"
            if project_mount != "/" and mount_contains(project_mount, virtual):
                remainder = virtual[len(project_mount):]
            match = MountMatch(
                path=self.config.source_path / remainder.lstrip("/"),
                mount=virtual,
            )

        if not match.path.exists():
            logger.debug("Nothing mounted at %s (looked for %s)", virtual, match.path)
            return None
        return match

    def require(self, virtual_path: str) -> MountMatch:
        match = self.resolve(virtual_path)
        if match is None:
            raise MountNotFound(virtual_path)
        return match


def _is_skipped(mount: str, skip: Collection[str], *, is_file: bool) -> bool:
    for skipped in skip:
        skipped = skipped.rstrip("/") or "/"
        if mount == skipped:
            return True
        if is_file and not skipped.endswith(".js") and mount == f"{skipped}.js":
            return True
    return False


def walk_tree(
    root: Path,
    mount: str,
    *,
    accepts: Optional[Callable[[Path], bool]] = None,
    skip: Collection[str] = (),
) -> Iterator[SourceFile]:
    """Yield every file below ``root`` depth-first with its mount path.

    Dotfiles are ignored, names are visited in sorted order, and subtrees or
    files whose mount is listed in ``skip`` are left out.
    """

    if root.is_file():
        if not _is_skipped(mount, skip, is_file=True) and (accepts is None or accepts(root)):
            yield SourceFile(path=root, mount=mount)
        return

    if _is_skipped(mount, skip, is_file=False):
        logger.debug("Skipping subtree %s", mount)
        return

    for child in sorted(root.iterdir(), key=lambda item: item.name):
        if child.name.startswith("."):
            continue
        child_mount = join_mount(mount, child.name)
        if child.is_dir():
            yield from walk_tree(child, child_mount, accepts=accepts, skip=skip)
        elif not _is_skipped(child_mount, skip, is_file=True):
            if accepts is None or accepts(child):
                yield SourceFile(path=child, mount=child_mount)


__all__ = [
    "MountMatch",
    "MountResolver",
    "SourceFile",
    "join_mount",
    "mount_contains",
    "walk_tree",
]
