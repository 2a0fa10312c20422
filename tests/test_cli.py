from __future__ import annotations

import json
from pathlib import Path

import pytest

from jah import __version__
from jah.cli.main import main
from jah.cli.scaffold import camel_case, skeleton_values, snake_case
from jah.config.loader import load_config

from conftest import PNG_BYTES, create_package


def test_cli_build_outputs_json(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    root = create_package(
        tmp_path / "app",
        name="demo",
        files={"src/main.js": "main()\n", "src/logo.png": PNG_BYTES, "public/index.html.template": "${scripts}"},
    )

    exit_code = main(["build", "--config", str(root / "jah.json")])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["bundles"] == {"demo.js": str(root / "build" / "demo" / "demo.js")}
    assert payload["scripts"] == ["/demo/demo.js"]
    assert payload["assets"] == []
    assert payload["public_files"] == [str(root / "build" / "public" / "index.html")]
    assert "Built jah" in payload["logs"]
    assert "Built demo" in payload["logs"]
    assert (root / "build" / "demo" / "demo.js").is_file()


def test_cli_build_reads_config_from_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    root = create_package(tmp_path / "app", files={"src/main.js": "main()\n"})
    monkeypatch.setenv("JAH_CONFIG", str(root / "jah.json"))

    assert main(["build", "--build-dir", str(tmp_path / "out")]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["build_dir"] == str(tmp_path / "out")
    assert (tmp_path / "out" / "main.js").is_file()


def test_cli_build_reports_errors(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    root = create_package(tmp_path / "app", config="{ libs: [ }")

    assert main(["build", "-c", str(root / "jah.json")]) == 1
    assert "Invalid config" in caplog.text


def test_cli_new_creates_buildable_project(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    app_path = tmp_path / "space-invaders"

    assert main(["new", str(app_path)]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["config_path"] == str(app_path / "jah.json")
    main_js = (app_path / "src" / "main.js").read_text(encoding="utf-8")
    assert "function SpaceInvaders ()" in main_js
    template = (app_path / "public" / "index.html.template").read_text(encoding="utf-8")
    assert "<title>Space Invaders</title>" in template
    assert "${scripts}" in template

    config = load_config(app_path / "jah.json")
    assert config.package_name == "space_invaders"
    assert config.main_bundle == "space_invaders.js"

    assert main(["build", "-c", str(app_path / "jah.json")]) == 0
    assert (app_path / "build" / "space_invaders" / "space_invaders.js").is_file()
    index = (app_path / "build" / "public" / "index.html").read_text(encoding="utf-8")
    assert '<script src="/space_invaders/space_invaders.js"' in index


def test_name_helpers() -> None:
    assert camel_case("space-invaders") == "SpaceInvaders"
    assert snake_case("SpaceInvaders") == "space_invaders"
    assert skeleton_values(Path("/tmp/my_game")) == {
        "appname": "My Game",
        "classname": "MyGame",
        "filename": "my_game",
        "basename": "my_game",
        "version": __version__,
    }
