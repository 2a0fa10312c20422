"""Turn source files into registrations for the runtime resource registry."""

from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from ..config.schema import ProjectConfig
from ..mimes import SCRIPT_MIMETYPE, extension_of, guess_type, is_image, is_script, is_text
from .templates import module_factory, registration
from .utils import SOURCE_ERRORS

logger = logging.getLogger(__name__)


class ResourceKind(str, Enum):
    MODULE = "module"
    TEXT = "text"
    IMAGE = "image"
    BINARY = "binary"
    REMOTE = "remote"


class RemoteLoader(str, Enum):
    """Runtime loader used to fetch a remote resource, chosen by mime category."""

    TEXT = "text"
    IMAGE = "image"
    SCRIPT = "script"

    @classmethod
    def for_mimetype(cls, mimetype: str) -> "RemoteLoader":
        if is_image(mimetype):
            return cls.IMAGE
        if is_script(mimetype):
            return cls.SCRIPT
        return cls.TEXT


@dataclass(frozen=True, slots=True)
class WrappedResource:
    mount: str
    mimetype: str
    payload: str
    kind: ResourceKind
    remote: bool = False
    loader: Optional[RemoteLoader] = None
    source: Optional[Path] = None
    tight: bool = False

    def render(self) -> str:
        """Return the registration statement for this resource."""

        code = registration(
            self.mount,
            self.payload,
            self.mimetype,
            remote=self.remote,
            loader=self.loader.value if self.loader else None,
        )
        if self.kind is ResourceKind.MODULE and not self.tight:
            code += f" // END: {self.mount}\n\n"
        return code


class ResourceWrapper:
    """Wraps files according to the active pack-resources policy."""

    def __init__(self, config: ProjectConfig) -> None:
        self.config = config

    def is_remote(self, path: Path, mimetype: Optional[str] = None) -> bool:
        mimetype = mimetype or guess_type(path)
        if is_script(mimetype):
            return False
        return not self.config.packs(extension_of(path))

    def wrap(
        self,
        path: Path,
        mount: str,
        mimetype: Optional[str] = None,
        *,
        tight: bool = False,
    ) -> WrappedResource:
        mimetype = mimetype or guess_type(path)
        logger.debug("Wrapping %s as %s (%s)", path, mount, mimetype)

        if is_script(mimetype):
            return self.wrap_module(path, mount, tight=tight)
        if self.is_remote(path, mimetype):
            loader = RemoteLoader.for_mimetype(mimetype)
            return WrappedResource(
                mount=mount,
                mimetype=mimetype,
                payload=f"__jah__.assetURL + {json.dumps(mount)}",
                kind=ResourceKind.REMOTE,
                remote=True,
                loader=loader,
                source=path,
                tight=tight,
            )

        raw = path.read_bytes()
        if is_text(mimetype):
            try:
                text = raw.decode("utf-8")
            except UnicodeDecodeError:
                logger.warning("%s is not valid UTF-8; embedding as binary", path)
            else:
                return WrappedResource(
                    mount=mount,
                    mimetype=mimetype,
                    payload=json.dumps(text),
                    kind=ResourceKind.TEXT,
                    source=path,
                    tight=tight,
                )

        encoded = base64.b64encode(raw).decode("ascii")
        if is_image(mimetype):
            return WrappedResource(
                mount=mount,
                mimetype=mimetype,
                payload=f"__jah__.imageData({json.dumps(f'data:{mimetype};base64,{encoded}')})",
                kind=ResourceKind.IMAGE,
                source=path,
                tight=tight,
            )
        return WrappedResource(
            mount=mount,
            mimetype=mimetype,
            payload=json.dumps(encoded),
            kind=ResourceKind.BINARY,
            source=path,
            tight=tight,
        )

    def wrap_module(self, path: Path, mount: str, *, tight: bool = False) -> WrappedResource:
        source = path.read_bytes().decode("utf-8", SOURCE_ERRORS)
        if not tight:
            source = f"\n{source}\n"
        return WrappedResource(
            mount=mount,
            mimetype=SCRIPT_MIMETYPE,
            payload=module_factory(source),
            kind=ResourceKind.MODULE,
            source=path,
            tight=tight,
        )


__all__ = ["RemoteLoader", "ResourceKind", "ResourceWrapper", "WrappedResource"]
