"""Fixed JavaScript text emitted around wrapped resources."""

from __future__ import annotations

import json
from pathlib import Path
from string import Template
from typing import Iterable, Optional

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

MODULE_PREFIX = "function (exports, require, resource, module, __filename, __dirname) {"
MODULE_SUFFIX = "}"

SCRIPT_TAG = Template('<script src="${filename}" type="text/javascript" defer></script>')

SCRIPTS_PLACEHOLDER = "scripts"
TEMPLATE_SUFFIX = ".template"


def module_factory(source: str) -> str:
    """Wrap module source in the fixed-arity factory giving it private bindings."""

    return f"{MODULE_PREFIX}{source}{MODULE_SUFFIX}"


def registration(
    mount: str,
    payload: str,
    mimetype: str,
    *,
    remote: bool,
    loader: Optional[str] = None,
) -> str:
    fields = [
        f"data: {payload}",
        f"mimetype: {json.dumps(mimetype)}",
        f"remote: {'true' if remote else 'false'}",
    ]
    if loader:
        fields.append(f"loader: {json.dumps(loader)}")
    return f"__jah__.resources[{json.dumps(mount)}] = {{{', '.join(fields)}}};"


def package_scope(code: str) -> str:
    return f"(function(){{\n{code}\n}})();"


def bootstrap_header(asset_url: str, *, resource_url: str = "resources", main_module: str = "main") -> str:
    """Initialise the resource registry and record runtime settings."""

    lines = [
        'if (typeof __jah__ == "undefined") window.__jah__ = {resources: {}, paths: ["/"]};',
        f"__jah__.assetURL = {json.dumps(asset_url)};",
        f"__jah__.resourceURL = {json.dumps(resource_url)};",
        f"__jah__.mainModule = {json.dumps(main_module)};",
        "__jah__.imageData = function (uri) { var img = new Image(); img.src = uri; return img; };",
    ]
    return "\n".join(lines) + "\n"


def loader_footer() -> str:
    return (TEMPLATES_DIR / "footer.js").read_text(encoding="utf-8")


def script_tags(urls: Iterable[str], *, separator: str = "\n") -> str:
    return separator.join(SCRIPT_TAG.substitute(filename=url) for url in urls)


def render_page(template_text: str, scripts_html: str) -> str:
    """Substitute the ``${scripts}`` placeholder of a ``.template`` file."""

    return Template(template_text).safe_substitute({SCRIPTS_PLACEHOLDER: scripts_html})


__all__ = [
    "MODULE_PREFIX",
    "MODULE_SUFFIX",
    "SCRIPTS_PLACEHOLDER",
    "TEMPLATE_SUFFIX",
    "TEMPLATES_DIR",
    "bootstrap_header",
    "loader_footer",
    "module_factory",
    "package_scope",
    "registration",
    "render_page",
    "script_tags",
]
