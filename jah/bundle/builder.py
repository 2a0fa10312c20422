"""Bundle assembly orchestration."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Collection, Dict, Iterable, List, Optional

from .. import events
from ..events import ObservableCell
from ..mimes import extension_of
from .copy import CopyQueue
from .mounts import MountMatch, SourceFile, walk_tree
from .queue import RUNTIME_NAME, BuildQueueEntry
from .templates import TEMPLATE_SUFFIX, loader_footer, package_scope, render_page, script_tags
from .utils import url_path, write_text
from .wrapper import WrappedResource

if TYPE_CHECKING:
    from ..project import Project

logger = logging.getLogger(__name__)

DEFAULT_BUILD_DIR = Path("build")


@dataclass(slots=True)
class BuildResult:
    """Files produced by :meth:`Bundler.write`."""

    build_dir: Path
    bundles: Dict[str, Path] = field(default_factory=dict)
    scripts: List[str] = field(default_factory=list)
    public_files: List[Path] = field(default_factory=list)
    assets: List[Path] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "build_dir": str(self.build_dir),
            "bundles": {name: str(path) for name, path in self.bundles.items()},
            "scripts": self.scripts,
            "public_files": [str(path) for path in self.public_files],
            "assets": [str(path) for path in self.assets],
        }


class Bundler:
    """Walks every package of a project and assembles its bundles.

    Emits ``package`` (entry), ``resource`` (wrapped resource) and ``bundle``
    (name, path) events on itself through :mod:`jah.events`.
    """

    def __init__(self, project: "Project") -> None:
        self.project = project
        self.config = project.config
        self.current_package: ObservableCell[Optional[str]] = ObservableCell(None)

    def build(self) -> Dict[str, str]:
        """Return the text of every bundle keyed by output filename."""

        config = self.config
        queue = self.project.queue
        main_bundle = config.main_bundle
        parts: Dict[str, List[str]] = {main_bundle: []}

        for entry in queue:
            parts.setdefault(entry.output_filename, []).append(self.build_package(entry))

        subtrees = config.externalized_subtrees(queue.package_names | {RUNTIME_NAME})
        parts[main_bundle].append(self.build_project(skip=subtrees.keys()))

        def accepts(path: Path) -> bool:
            return config.accepts(extension_of(path))

        for subtree, target in subtrees.items():
            match = self._resolve_externalized(subtree)
            if match is None:
                logger.warning("Externalized path %s not found; no bundle written for it", subtree)
                continue
            self.current_package.set(subtree)
            resources = self.wrap_all(walk_tree(match.path, match.mount, accepts=accepts))
            parts.setdefault(target, []).append(package_scope(self._join(resources)))

        return {name: "\n".join(chunks) for name, chunks in parts.items()}

    def build_package(self, entry: BuildQueueEntry) -> str:
        self.current_package.set(entry.name or str(entry.root))
        events.trigger(self, "package", entry)
        logger.info("Building package %s => %s", entry.root, entry.mount)

        code = self._join(self.wrap_all(self.project.package_sources(entry)))
        if entry.is_runtime:
            code = self.header() + code + self.footer()
        return package_scope(code)

    def build_project(self, skip: Collection[str] = ()) -> str:
        self.current_package.set(self.config.package_name or str(self.project.root))
        logger.info("Building project %s", self.config.source_path)

        code = self._join(self.wrap_all(self.project.project_sources(skip=skip)))
        if self.project.is_runtime:
            code = self.header() + code + self.footer()
        return package_scope(code)

    def wrap_all(self, sources: Iterable[SourceFile]) -> List[WrappedResource]:
        wrapped: List[WrappedResource] = []
        for source in sources:
            resource = self.project.wrapper.wrap(source.path, source.mount)
            events.trigger(self, "resource", resource)
            wrapped.append(resource)
        return wrapped

    def header(self) -> str:
        return self.project.header(url_path(self.config.resources_output))

    def footer(self) -> str:
        return loader_footer()

    def bundle_order(self, bundle_names: Iterable[str]) -> List[str]:
        """Order bundles for inclusion, the runtime bundle always first."""

        names = list(bundle_names)
        runtime_bundle = self.project.runtime_bundle
        ordered = [runtime_bundle] if runtime_bundle in names else []
        ordered.extend(name for name in names if name != runtime_bundle)
        return ordered

    def script_urls(self, bundle_names: Iterable[str]) -> List[str]:
        return [url_path(self.config.script_output, name) for name in self.bundle_order(bundle_names)]

    def remote_assets(self) -> List[SourceFile]:
        """Non-script files the wrapper leaves remote, to be copied verbatim."""

        wrapper = self.project.wrapper
        return [source for source in self.project.iter_sources() if wrapper.is_remote(source.path)]

    def write(self, build_dir: Path | str = DEFAULT_BUILD_DIR) -> BuildResult:
        """Build every bundle and write it, the public folder and remote assets."""

        build_dir = Path(build_dir)
        if not build_dir.is_absolute():
            build_dir = self.project.root / build_dir
        result = BuildResult(build_dir=build_dir)

        bundles = self.build()
        code_dir = build_dir / self.config.script_output
        for name, text in bundles.items():
            path = code_dir / name
            logger.info("Writing file %s", path)
            write_text(path, text)
            result.bundles[name] = path
            events.trigger(self, "bundle", name, path)

        result.scripts = self.script_urls(bundles)
        scripts_html = script_tags(result.scripts)

        public = CopyQueue(label="public files")
        public_dir = self.project.public_dir
        if public_dir.is_dir():
            for source in sorted(path for path in public_dir.rglob("*") if path.is_file()):
                destination = build_dir / "public" / source.relative_to(public_dir)
                if source.name.endswith(TEMPLATE_SUFFIX):
                    public.schedule(
                        source,
                        destination.with_name(destination.name[: -len(TEMPLATE_SUFFIX)]),
                        render=lambda text: render_page(text, scripts_html),
                    )
                else:
                    public.schedule(source, destination)
        result.public_files = public.run()

        assets = CopyQueue(label="assets")
        asset_dir = build_dir / self.config.resources_output
        for source in self.remote_assets():
            assets.schedule(source.path, asset_dir / source.mount.lstrip("/"))
        result.assets = assets.run()

        return result

    def _resolve_externalized(self, subtree: str) -> Optional[MountMatch]:
        match = self.project.resolver.resolve(subtree)
        if match is None and not subtree.endswith(".js"):
            match = self.project.resolver.resolve(f"{subtree}.js")
        return match

    @staticmethod
    def _join(resources: Iterable[WrappedResource]) -> str:
        return "\n".join(resource.render() for resource in resources)


__all__ = ["BuildResult", "Bundler", "DEFAULT_BUILD_DIR"]
