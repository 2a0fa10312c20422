"""Command-line entry point: ``jah build``, ``jah serve`` and ``jah new``."""

from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from .. import events
from ..bundle.builder import DEFAULT_BUILD_DIR, Bundler
from ..config.loader import CONFIG_FILENAME
from ..errors import JahError
from ..events import ChangeEvent
from ..project import Project
from ..server.app import DEFAULT_HOST, DEFAULT_PORT, run_server
from .scaffold import create_project

logger = logging.getLogger("jah")


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)

    try:
        if args.command == "build":
            return _handle_build(args)
        if args.command == "serve":
            return _handle_serve(args)
        if args.command == "new":
            return _handle_new(args)
    except JahError as exc:
        logger.error("%s", exc)
        return 1

    parser.error(f"Unknown command '{args.command}'")
    return 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jah", description="Bundle browser projects and serve them in development.")
    parser.add_argument(
        "--log-level",
        default=os.environ.get("JAH_LOG_LEVEL", "INFO"),
        help="Logging level (default: INFO, or $JAH_LOG_LEVEL).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser("build", help="Build the project bundles.")
    build.add_argument("-c", "--config", default=_default_config(), help="Project configuration file.")
    build.add_argument("--build-dir", default=str(DEFAULT_BUILD_DIR), help="Output directory, relative to the project.")

    serve = subparsers.add_parser("serve", help="Run the development web server.")
    serve.add_argument("-c", "--config", default=_default_config(), help="Project configuration file.")
    serve.add_argument("--host", default=DEFAULT_HOST, help=f"Address to listen on (default: {DEFAULT_HOST}).")
    serve.add_argument("-p", "--port", type=int, default=DEFAULT_PORT, help=f"Port to listen on (default: {DEFAULT_PORT}).")

    new = subparsers.add_parser("new", help="Create a new project.")
    new.add_argument("app_path", metavar="APP_PATH")

    return parser


def _handle_build(args: argparse.Namespace) -> int:
    project = Project.load(args.config)
    bundler = Bundler(project)

    logs: List[str] = []

    def _on_package(event: ChangeEvent) -> None:
        if event.type == "change" and event.new_value:
            logs.append(f"Built {event.new_value}")

    def _on_bundle(name: str, path: Path) -> None:
        logs.append(f"Bundle {name} written to {path}")

    unsubscribe = bundler.current_package.subscribe(_on_package)
    events.add_listener(bundler, "bundle", _on_bundle)
    try:
        result = bundler.write(args.build_dir)
    finally:
        unsubscribe()
        events.unregister(bundler)

    payload = result.to_dict()
    payload["logs"] = logs
    _print_json(payload)
    return 0


def _handle_serve(args: argparse.Namespace) -> int:
    run_server(args.config, host=args.host, port=args.port, log_level=args.log_level.lower())
    return 0


def _handle_new(args: argparse.Namespace) -> int:
    target = create_project(Path(args.app_path))
    _print_json({"project_path": str(target), "config_path": str(target / CONFIG_FILENAME)})
    return 0


def _default_config() -> str:
    return os.environ.get("JAH_CONFIG", CONFIG_FILENAME)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
    )


def _print_json(payload: Mapping[str, object]) -> None:
    print(json.dumps(payload, indent=2, default=str))


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
