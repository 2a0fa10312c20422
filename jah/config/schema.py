"""Pydantic models describing a validated project configuration."""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Any, Dict, FrozenSet, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from ..mimes import SCRIPT_EXTENSION


def normalise_extension(value: str) -> str:
    return str(value).strip().lower().lstrip(".")


def normalise_mount(value: str) -> str:
    """Return ``value`` as a slash-led mount path without a trailing slash."""

    text = "/" + str(value).strip().replace("\\", "/").lstrip("/")
    if len(text) > 1:
        text = text.rstrip("/")
    return text


class OutputPaths(BaseModel):
    """Map form of the ``output`` key."""

    script: str = "."
    resources: Optional[str] = None

    model_config = ConfigDict(extra="forbid", frozen=True)


class LibrarySpec(BaseModel):
    name: str
    mount: Optional[str] = None

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("mount")
    @classmethod
    def _normalise_mount(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return normalise_mount(value)


PackPolicy = Union[bool, FrozenSet[str]]


class ProjectConfig(BaseModel):
    """Configuration of one package root (project, runtime or library).

    Field names are the canonical config keys; legacy spellings are mapped
    onto them by :mod:`jah.config.loader` before validation.
    """

    config_path: Path = Field(exclude=True)
    package_name: Optional[str] = Field(default=None, exclude=True)

    source_path: Path = Field(alias="sourcePath")
    output: Union[str, OutputPaths] = "."
    asset_path: str = Field(default="assets", alias="assetPath")
    resource_url: str = Field(default="resources", alias="resourceURL")
    main_module: str = Field(default="main", alias="mainModule")
    main_filename: Optional[str] = Field(default=None, alias="mainFilename")
    pack_resources: PackPolicy = Field(default=True, alias="packResources")
    extensions: Optional[FrozenSet[str]] = None
    libs: Tuple[LibrarySpec, ...] = ()
    externalize: Dict[str, str] = Field(default_factory=dict)
    is_lib: bool = False
    paths: Dict[str, str] = Field(default_factory=dict)
    mount: Optional[str] = None

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    @field_validator("pack_resources", mode="before")
    @classmethod
    def _normalise_pack_resources(cls, value: Any) -> PackPolicy:
        # Scripts are always packed, whatever the policy says.
        if value is True or value is None:
            return True
        if value is False:
            return frozenset({SCRIPT_EXTENSION})
        if isinstance(value, str):
            value = [value]
        if isinstance(value, (list, tuple, set, frozenset)):
            return frozenset(normalise_extension(item) for item in value) | {SCRIPT_EXTENSION}
        raise ValueError("packResourcesPolicy must be true, false or a list of extensions")

    @field_validator("extensions", mode="before")
    @classmethod
    def _normalise_extensions(cls, value: Any) -> Optional[FrozenSet[str]]:
        if value is None:
            return None
        if isinstance(value, str):
            value = [value]
        return frozenset(normalise_extension(item) for item in value)

    @field_validator("libs", mode="before")
    @classmethod
    def _coerce_libs(cls, value: Any) -> List[Dict[str, Any]]:
        if value is None:
            return []
        if isinstance(value, dict):
            return [{"name": name, "mount": mount} for name, mount in value.items()]
        specs: List[Dict[str, Any]] = []
        for item in value:
            if isinstance(item, str):
                specs.append({"name": item})
            elif isinstance(item, dict) and len(item) == 1:
                (name, mount), = item.items()
                specs.append({"name": name, "mount": mount})
            elif isinstance(item, (dict, LibrarySpec)):
                specs.append(item)
            else:
                raise ValueError(f"Unsupported library entry: {item!r}")
        return specs

    @field_validator("mount")
    @classmethod
    def _normalise_mount(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return normalise_mount(value)

    @field_validator("source_path")
    @classmethod
    def _absolute_source_path(cls, value: Path, info: ValidationInfo) -> Path:
        if value.is_absolute():
            return value
        config_path = info.data.get("config_path")
        if config_path is None:
            raise ValueError("sourcePath is relative but the config file location is unknown")
        return (Path(config_path).parent / value).resolve()

    @property
    def root(self) -> Path:
        return self.config_path.parent

    @property
    def script_output(self) -> str:
        if isinstance(self.output, OutputPaths):
            return self.output.script
        return self.output

    @property
    def resources_output(self) -> str:
        if isinstance(self.output, OutputPaths) and self.output.resources:
            return self.output.resources
        return self.asset_path

    @property
    def main_bundle(self) -> str:
        if self.main_filename:
            return self.main_filename
        basename = PurePosixPath(self.script_output.replace("\\", "/")).name
        if not basename or basename == ".":
            basename = "main"
        return f"{basename}.js"

    def packs(self, extension: str) -> bool:
        """Return True when files with ``extension`` are embedded in bundles."""

        extension = normalise_extension(extension)
        if extension == SCRIPT_EXTENSION:
            return True
        if self.pack_resources is True:
            return True
        return extension in self.pack_resources

    def accepts(self, extension: str) -> bool:
        if self.extensions is None:
            return True
        return normalise_extension(extension) in self.extensions

    def externalized_subtrees(self, package_names: FrozenSet[str] = frozenset()) -> Dict[str, str]:
        """Externalize entries that name mount subtrees rather than packages."""

        return {
            normalise_mount(key): target
            for key, target in self.externalize.items()
            if key not in package_names
        }


__all__ = [
    "LibrarySpec",
    "OutputPaths",
    "PackPolicy",
    "ProjectConfig",
    "normalise_extension",
    "normalise_mount",
]
