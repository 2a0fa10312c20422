"""Load ``jah.json`` files into validated :class:`ProjectConfig` records."""

from __future__ import annotations

import copy
import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from ..errors import ConfigParseError
from .relaxed import read_relaxed_file
from .schema import ProjectConfig

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "jah.json"
PACKAGE_FILENAME = "package.json"

DEFAULT_CONFIG: Dict[str, Any] = {
    "mainModule": "main",
    "resourceURL": "resources",
    "sourcePath": "src",
    "output": ".",
    "assetPath": "assets",
    "packResources": True,
    "externalize": {},
    "libs": [],
    "paths": {},
}

_KEY_ALIASES = {
    "mainModuleName": "mainModule",
    "main_module": "mainModule",
    "packResourcesPolicy": "packResources",
    "pack_resources": "packResources",
    "resourceURLPrefix": "resourceURL",
    "resource_url": "resourceURL",
    "extensionsWhitelist": "extensions",
    "source_path": "sourcePath",
    "asset_path": "assetPath",
    "main_filename": "mainFilename",
    "isLib": "is_lib",
}

_UNSAFE_NAME = re.compile(r"[^a-zA-Z0-9_-]+")


def canonical_keys(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Rename legacy config keys to their canonical spelling."""

    return {_KEY_ALIASES.get(key, key): value for key, value in raw.items()}


def merge_config(defaults: Mapping[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge ``overrides`` over ``defaults``.

    Keys missing from ``overrides`` keep their default. Map-valued keys present
    on both sides are merged one level deep; everything else is replaced.
    """

    merged = copy.deepcopy(dict(defaults))
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = {**current, **value}
        else:
            merged[key] = value
    return merged


def sanitise_output_name(name: str) -> str:
    return _UNSAFE_NAME.sub("_", name).lower()


def read_package_name(root: Path) -> Optional[str]:
    """Return the ``name`` declared in ``root/package.json``, if any."""

    package_path = root / PACKAGE_FILENAME
    if not package_path.is_file():
        return None
    try:
        payload = json.loads(package_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigParseError(package_path, f"invalid package metadata ({exc})") from exc
    if not isinstance(payload, dict):
        raise ConfigParseError(package_path, "package metadata must be an object")
    name = payload.get("name")
    return str(name) if name else None


def default_config(package_name: Optional[str] = None) -> Dict[str, Any]:
    defaults = copy.deepcopy(DEFAULT_CONFIG)
    if package_name:
        output = sanitise_output_name(package_name)
        defaults["output"] = output
        defaults["assetPath"] = f"{output}/assets"
    return defaults


def load_config(config_path: Path | str) -> ProjectConfig:
    """Read, merge and validate the config at ``config_path``."""

    path = Path(config_path).expanduser().resolve()
    logger.debug("Using config %s", path)

    raw = canonical_keys(read_relaxed_file(path))
    package_name = read_package_name(path.parent)
    merged = merge_config(default_config(package_name), raw)

    source_path = Path(str(merged["sourcePath"])).expanduser()
    if not source_path.is_absolute():
        source_path = (path.parent / source_path).resolve()
    merged["sourcePath"] = source_path

    try:
        return ProjectConfig.model_validate(
            {**merged, "config_path": path, "package_name": package_name}
        )
    except ValidationError as exc:
        raise ConfigParseError(path, str(exc)) from exc


__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_CONFIG",
    "PACKAGE_FILENAME",
    "canonical_keys",
    "default_config",
    "load_config",
    "merge_config",
    "read_package_name",
    "sanitise_output_name",
]
