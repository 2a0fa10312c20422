"""The ordered set of packages contributing to a build."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from typing import Dict, FrozenSet, Iterator, List, Optional

from ..config.loader import CONFIG_FILENAME, load_config
from ..config.schema import ProjectConfig, normalise_mount
from .locator import LibraryLocator

logger = logging.getLogger(__name__)

RUNTIME_NAME = "jah"


@dataclass
class BuildQueueEntry:
    """One external package: the runtime or a library."""

    root: Path
    output_filename: str
    mount_override: Optional[str] = None
    name: Optional[str] = None
    is_runtime: bool = field(default=False, compare=False)

    @cached_property
    def config(self) -> ProjectConfig:
        return load_config(self.root / CONFIG_FILENAME)

    @property
    def has_config(self) -> bool:
        return (self.root / CONFIG_FILENAME).is_file()

    @property
    def mount(self) -> str:
        if self.mount_override:
            return self.mount_override
        config = self.config
        if config.mount:
            return config.mount
        return normalise_mount(config.package_name or self.name or self.root.name)

    @property
    def source_path(self) -> Path:
        return self.config.source_path


class BuildQueue:
    """Insertion-ordered build queue keyed by package root."""

    def __init__(self) -> None:
        self._entries: Dict[Path, BuildQueueEntry] = {}

    def add(
        self,
        root: Path,
        output_filename: str,
        *,
        mount: Optional[str] = None,
        name: Optional[str] = None,
        is_runtime: bool = False,
    ) -> BuildQueueEntry:
        key = Path(root).resolve()
        existing = self._entries.get(key)
        if existing is not None:
            return existing
        entry = BuildQueueEntry(
            root=key,
            output_filename=output_filename,
            mount_override=normalise_mount(mount) if mount else None,
            name=name,
            is_runtime=is_runtime,
        )
        self._entries[key] = entry
        logger.debug("Queued %s -> %s", key, output_filename)
        return entry

    def __iter__(self) -> Iterator[BuildQueueEntry]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, root: object) -> bool:
        if not isinstance(root, (str, Path)):
            return False
        return Path(root).resolve() in self._entries

    @property
    def entries(self) -> List[BuildQueueEntry]:
        return list(self._entries.values())

    @property
    def package_names(self) -> FrozenSet[str]:
        return frozenset(entry.name for entry in self._entries.values() if entry.name)

    @classmethod
    def for_project(
        cls,
        config: ProjectConfig,
        locator: LibraryLocator,
        *,
        runtime_root: Path,
        include_runtime: bool = True,
    ) -> "BuildQueue":
        """Queue the runtime and every declared library of ``config``.

        Libraries go to the main bundle unless ``externalize`` names a bundle
        for them. A missing library raises before anything is queued for
        output, aborting the build.
        """

        queue = cls()
        main_bundle = config.main_bundle
        if include_runtime:
            queue.add(
                runtime_root,
                config.externalize.get(RUNTIME_NAME) or main_bundle,
                name=RUNTIME_NAME,
                is_runtime=True,
            )
        for library in config.libs:
            root = locator.locate(library.name)
            queue.add(
                root,
                config.externalize.get(library.name) or main_bundle,
                mount=library.mount,
                name=library.name,
            )
        return queue


__all__ = ["BuildQueue", "BuildQueueEntry", "RUNTIME_NAME"]
