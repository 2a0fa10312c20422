"""Reader for the lenient ``jah.json`` dialect.

The dialect is JSON plus ``//`` and ``/* */`` comments, unquoted keys and
trailing commas. Comments are removed by a scanner that understands quoted
strings, and the remainder is handed to PyYAML: YAML flow collections already
accept unquoted keys and trailing commas.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..errors import ConfigParseError

_BARE_WORD = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_$-")

_SURROGATE = re.compile("[\ud800-\udfff]")


class JsonScalarLoader(yaml.SafeLoader):
    """SafeLoader that resolves plain scalars the way JSON does.

    Only ``null``, ``true``/``false`` and JSON numbers are typed; every other
    plain scalar, including YAML 1.1 words such as ``no`` or ``on``, stays a
    string.
    """


JsonScalarLoader.yaml_implicit_resolvers = {}
JsonScalarLoader.add_implicit_resolver("tag:yaml.org,2002:null", re.compile(r"^null$"), ["n"])
JsonScalarLoader.add_implicit_resolver("tag:yaml.org,2002:bool", re.compile(r"^(?:true|false)$"), ["t", "f"])
JsonScalarLoader.add_implicit_resolver(
    "tag:yaml.org,2002:int",
    re.compile(r"^-?(?:0|[1-9][0-9]*)$"),
    list("-0123456789"),
)
JsonScalarLoader.add_implicit_resolver(
    "tag:yaml.org,2002:float",
    re.compile(r"^-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?(?:[eE][-+]?[0-9]+)?$"),
    list("-0123456789"),
)


def _construct_str(loader: JsonScalarLoader, node: yaml.ScalarNode) -> str:
    value = loader.construct_scalar(node)
    # "\uXXXX" escapes arrive one UTF-16 unit at a time; join surrogate pairs.
    if _SURROGATE.search(value):
        value = value.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "surrogatepass")
    return value


JsonScalarLoader.add_constructor("tag:yaml.org,2002:str", _construct_str)


def normalise(text: str) -> str:
    """Return ``text`` with comments removed and bare keys made YAML-safe.

    Content inside single or double quoted strings is copied verbatim.
    """

    out: List[str] = []
    index = 0
    length = len(text)
    quote: Optional[str] = None

    while index < length:
        char = text[index]

        if quote is not None:
            out.append(char)
            if char == "\\" and quote == '"' and index + 1 < length:
                out.append(text[index + 1])
                index += 2
                continue
            if char == quote:
                quote = None
            index += 1
            continue

        if char in ("'", '"'):
            quote = char
            out.append(char)
            index += 1
            continue

        if text.startswith("//", index):
            end = text.find("\n", index)
            index = length if end == -1 else end
            continue

        if text.startswith("/*", index):
            end = text.find("*/", index + 2)
            if end == -1:
                raise ConfigParseError(None, "unterminated block comment")
            # Keep line breaks so parser errors still point at the right line.
            out.append("\n" * text.count("\n", index, end))
            index = end + 2
            continue

        if char == "\t":
            out.append(" ")
            index += 1
            continue

        out.append(char)
        if char == ":" and out[-2:-1] and out[-2] in _BARE_WORD:
            following = text[index + 1] if index + 1 < length else ""
            if following and not following.isspace():
                out.append(" ")
        index += 1

    if quote is not None:
        raise ConfigParseError(None, "unterminated string")
    return "".join(out)


def parse_relaxed(text: str, *, source: Optional[Path] = None) -> Dict[str, Any]:
    """Parse relaxed config text into a mapping."""

    try:
        cleaned = normalise(text)
    except ConfigParseError as exc:
        raise ConfigParseError(source, exc.reason) from None

    try:
        loaded = yaml.load(cleaned, Loader=JsonScalarLoader)
    except yaml.YAMLError as exc:
        raise ConfigParseError(source, str(exc)) from exc

    if not isinstance(loaded, dict):
        raise ConfigParseError(source, f"expected an object at top level, got {type(loaded).__name__}")
    return loaded


def read_relaxed_file(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigParseError(path, f"unable to read file ({exc.strerror or exc})") from exc
    return parse_relaxed(text, source=path)


__all__ = ["JsonScalarLoader", "normalise", "parse_relaxed", "read_relaxed_file"]
