"""A loaded project: configuration, build queue, resolver and wrapper.

The bundler and the dev server both work from a :class:`Project`, which is
built once per invocation and never mutated afterwards.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Collection, Iterator, Optional

from .bundle.locator import LibraryLocator
from .bundle.mounts import MountResolver, SourceFile, walk_tree
from .bundle.queue import BuildQueue, BuildQueueEntry
from .bundle.templates import bootstrap_header
from .bundle.wrapper import ResourceWrapper
from .config.loader import load_config
from .config.schema import ProjectConfig, normalise_mount
from .mimes import extension_of

logger = logging.getLogger(__name__)

RUNTIME_ROOT = Path(__file__).resolve().parent / "runtime"
PUBLIC_DIRNAME = "public"


def _accepts(config: ProjectConfig) -> Callable[[Path], bool]:
    return lambda path: config.accepts(extension_of(path))


class Project:
    def __init__(
        self,
        config: ProjectConfig,
        *,
        runtime_root: Path = RUNTIME_ROOT,
        locator: Optional[LibraryLocator] = None,
    ) -> None:
        self.config = config
        self.runtime_root = Path(runtime_root).resolve()
        self.is_runtime = config.root.resolve() == self.runtime_root
        self.locator = locator or LibraryLocator(config.root, runtime_root=self.runtime_root)
        self.queue = BuildQueue.for_project(
            config,
            self.locator,
            runtime_root=self.runtime_root,
            include_runtime=not self.is_runtime,
        )
        self.resolver = MountResolver(config, self.queue)
        self.wrapper = ResourceWrapper(config)

    @classmethod
    def load(cls, config_path: Path | str, **kwargs) -> "Project":
        config = load_config(config_path)
        logger.info("Using config %s", config.config_path)
        return cls(config, **kwargs)

    @property
    def root(self) -> Path:
        return self.config.root

    @property
    def public_dir(self) -> Path:
        return self.root / PUBLIC_DIRNAME

    @property
    def runtime_bundle(self) -> str:
        """Name of the bundle carrying the bootstrap header and loader."""

        for entry in self.queue:
            if entry.is_runtime:
                return entry.output_filename
        return self.config.main_bundle

    def header(self, asset_url: str) -> str:
        return bootstrap_header(
            asset_url,
            resource_url=self.config.resource_url,
            main_module=self.config.main_module,
        )

    def package_sources(self, entry: BuildQueueEntry) -> Iterator[SourceFile]:
        yield from walk_tree(entry.source_path, entry.mount, accepts=_accepts(entry.config))

    def project_sources(self, skip: Collection[str] = ()) -> Iterator[SourceFile]:
        accepts = _accepts(self.config)
        yield from walk_tree(
            self.config.source_path,
            self.config.mount or "/",
            accepts=accepts,
            skip=skip,
        )
        for source, mount in self.config.paths.items():
            yield from walk_tree(
                (self.root / source).resolve(),
                normalise_mount(mount),
                accepts=accepts,
                skip=skip,
            )

    def iter_sources(self) -> Iterator[SourceFile]:
        """Every file reachable through the build, in bundle order."""

        for entry in self.queue:
            yield from self.package_sources(entry)
        yield from self.project_sources()


__all__ = ["PUBLIC_DIRNAME", "Project", "RUNTIME_ROOT"]
