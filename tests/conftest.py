from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Mapping, Optional, Union

import pytest

from jah.bundle.locator import LibraryLocator
from jah.config.loader import CONFIG_FILENAME, PACKAGE_FILENAME
from jah.project import RUNTIME_ROOT, Project

FileContent = Union[str, bytes]

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR" + bytes(range(16))


def write_files(root: Path, files: Mapping[str, FileContent]) -> None:
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")


def create_package(
    root: Path,
    *,
    config: str = "{}",
    name: Optional[str] = None,
    files: Optional[Mapping[str, FileContent]] = None,
) -> Path:
    """Lay out a package root with a config file and optional metadata."""

    root.mkdir(parents=True, exist_ok=True)
    (root / CONFIG_FILENAME).write_text(config, encoding="utf-8")
    if name is not None:
        (root / PACKAGE_FILENAME).write_text(json.dumps({"name": name}), encoding="utf-8")
    write_files(root, files or {})
    return root


def create_library(parent: Path, name: str, files: Mapping[str, FileContent], *, config: str = "{}") -> Path:
    return create_package(parent / name, config=config, name=name, files=files)


@pytest.fixture()
def locator_dirs(tmp_path: Path) -> Mapping[str, Path]:
    user_dir = tmp_path / "home" / ".node_modules"
    prefix_dir = tmp_path / "prefix" / "lib" / "node_modules"
    return {"user_dir": user_dir, "prefix_dir": prefix_dir}


@pytest.fixture()
def load_project(locator_dirs: Mapping[str, Path]) -> Callable[..., Project]:
    """Load a project whose global library directories live under ``tmp_path``."""

    def _load(root: Path) -> Project:
        locator = LibraryLocator(root, runtime_root=RUNTIME_ROOT, **locator_dirs)
        return Project.load(root / CONFIG_FILENAME, locator=locator)

    return _load
