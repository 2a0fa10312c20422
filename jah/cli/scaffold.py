"""Render the bundled project skeleton for ``jah new``."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from string import Template
from typing import Dict

from .. import __version__
from ..bundle.templates import TEMPLATES_DIR
from ..bundle.utils import write_text

logger = logging.getLogger(__name__)

SKELETON_DIR = TEMPLATES_DIR / "skeleton"


def camel_case(value: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in re.split(r"[_\s-]+", value) if part)


def snake_case(value: str) -> str:
    value = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", value)
    value = re.sub(r"([a-z\d])([A-Z])", r"\1_\2", value)
    return value.replace("-", "_").lower()


def titleize(value: str) -> str:
    return " ".join(part.capitalize() for part in value.split("_") if part)


def skeleton_values(app_path: Path) -> Dict[str, str]:
    basename = app_path.name
    classname = camel_case(basename)
    filename = snake_case(classname)
    return {
        "appname": titleize(filename),
        "classname": classname,
        "filename": filename,
        "basename": basename,
        "version": __version__,
    }


def create_project(app_path: Path, *, skeleton_dir: Path = SKELETON_DIR) -> Path:
    """Copy the skeleton into ``app_path``, substituting project names.

    Placeholders the skeleton does not know about, such as ``${scripts}``, are
    left in place for the build to fill.
    """

    target = app_path.expanduser().resolve()
    values = skeleton_values(target)
    logger.info("Creating project %s => %s", values["classname"], target)

    target.mkdir(parents=True, exist_ok=True)
    for source in sorted(skeleton_dir.rglob("*")):
        if source.is_dir():
            continue
        destination = target / source.relative_to(skeleton_dir)
        text = Template(source.read_text(encoding="utf-8")).safe_substitute(values)
        write_text(destination, text)
        logger.info("Created file %s", destination)
    return target


__all__ = ["SKELETON_DIR", "camel_case", "create_project", "skeleton_values", "snake_case", "titleize"]
