from __future__ import annotations

import json
from pathlib import Path

import pytest

from jah.config.loader import DEFAULT_CONFIG, load_config, merge_config, sanitise_output_name
from jah.config.relaxed import normalise, parse_relaxed
from jah.config.schema import OutputPaths
from jah.errors import ConfigParseError

from conftest import create_package


def test_parse_relaxed_accepts_comments_bare_keys_and_trailing_commas() -> None:
    text = """
    // project configuration
    {
        sourcePath:"lib",   /* block
                               comment */
        resourceURL: "http://cdn.example.com/a:b", // url keeps its colon
        'libs': ['cocos2d', {box2d: "/physics"},],
        packResourcesPolicy: false,
    }
    """

    parsed = parse_relaxed(text)

    assert parsed == {
        "sourcePath": "lib",
        "resourceURL": "http://cdn.example.com/a:b",
        "libs": ["cocos2d", {"box2d": "/physics"}],
        "packResourcesPolicy": False,
    }


def test_normalise_leaves_strings_untouched() -> None:
    text = '{note: "// not a comment /* either */", path:"a\\"b"}'

    cleaned = normalise(text)

    assert '"// not a comment /* either */"' in cleaned
    assert 'path: "a\\"b"' in cleaned


def test_parse_relaxed_rejects_malformed_text(tmp_path: Path) -> None:
    source = tmp_path / "jah.json"
    with pytest.raises(ConfigParseError) as excinfo:
        parse_relaxed("{ sourcePath: [ }", source=source)
    assert excinfo.value.path == source

    with pytest.raises(ConfigParseError):
        parse_relaxed("[1, 2]")

    with pytest.raises(ConfigParseError):
        parse_relaxed("{ a: 1 /* never closed }")


def test_merge_config_keeps_defaults_and_adopts_overrides() -> None:
    defaults = {"a": 1, "b": "two", "paths": {"x": "/x", "y": "/y"}, "libs": ["one"]}
    overrides = {"b": "three", "paths": {"y": "/why", "z": "/z"}, "libs": ["two"], "c": True}

    merged = merge_config(defaults, overrides)

    assert merged == {
        "a": 1,
        "b": "three",
        "paths": {"x": "/x", "y": "/why", "z": "/z"},
        "libs": ["two"],
        "c": True,
    }
    assert defaults["paths"] == {"x": "/x", "y": "/y"}


def test_merge_config_over_builtin_defaults() -> None:
    merged = merge_config(DEFAULT_CONFIG, {"mainModule": "game"})

    for key, value in DEFAULT_CONFIG.items():
        if key != "mainModule":
            assert merged[key] == value
    assert merged["mainModule"] == "game"


def test_load_config_defaults(tmp_path: Path) -> None:
    root = create_package(tmp_path / "app")

    config = load_config(root / "jah.json")

    assert config.source_path == (root / "src").resolve()
    assert config.source_path.is_absolute()
    assert config.main_module == "main"
    assert config.resource_url == "resources"
    assert config.script_output == "."
    assert config.resources_output == "assets"
    assert config.main_bundle == "main.js"
    assert config.pack_resources is True
    assert config.extensions is None
    assert config.libs == ()
    assert config.mount is None


def test_load_config_uses_package_name_for_output(tmp_path: Path) -> None:
    root = create_package(tmp_path / "app", name="Space Game!")

    config = load_config(root / "jah.json")

    assert sanitise_output_name("Space Game!") == "space_game_"
    assert config.package_name == "Space Game!"
    assert config.script_output == "space_game_"
    assert config.resources_output == "space_game_/assets"
    assert config.main_bundle == "space_game_.js"


def test_load_config_keeps_absolute_source_path(tmp_path: Path) -> None:
    elsewhere = tmp_path / "elsewhere"
    root = create_package(tmp_path / "app", config=json.dumps({"sourcePath": str(elsewhere)}))

    assert load_config(root / "jah.json").source_path == elsewhere


def test_pack_policy_always_includes_scripts(tmp_path: Path) -> None:
    root = create_package(tmp_path / "app", config='{packResourcesPolicy: ["PNG", ".jpg"]}')

    config = load_config(root / "jah.json")

    assert config.pack_resources == frozenset({"png", "jpg", "js"})
    assert config.packs("png")
    assert config.packs("js")
    assert not config.packs("ogg")


def test_pack_policy_false_packs_only_scripts(tmp_path: Path) -> None:
    root = create_package(tmp_path / "app", config="{pack_resources: false}")

    config = load_config(root / "jah.json")

    assert config.pack_resources == frozenset({"js"})
    assert config.packs("js")
    assert not config.packs("png")


def test_legacy_keys_and_extension_whitelist(tmp_path: Path) -> None:
    root = create_package(
        tmp_path / "app",
        config='{mainModuleName: "game", resourceURLPrefix: "res", extensionsWhitelist: ["js", "PNG"]}',
    )

    config = load_config(root / "jah.json")

    assert config.main_module == "game"
    assert config.resource_url == "res"
    assert config.accepts("png")
    assert not config.accepts("txt")


def test_output_map_and_library_forms(tmp_path: Path) -> None:
    root = create_package(
        tmp_path / "app",
        config="""{
            output: {script: "build/js", resources: "static"},
            libs: ["cocos2d", {box2d: "physics/"}],
            mount: "game/",
        }""",
    )

    config = load_config(root / "jah.json")

    assert config.output == OutputPaths(script="build/js", resources="static")
    assert config.script_output == "build/js"
    assert config.resources_output == "static"
    assert config.main_bundle == "js.js"
    assert [(lib.name, lib.mount) for lib in config.libs] == [("cocos2d", None), ("box2d", "/physics")]
    assert config.mount == "/game"


def test_library_map_form(tmp_path: Path) -> None:
    root = create_package(tmp_path / "app", config='{libs: {cocos2d: "/cc"}}')

    config = load_config(root / "jah.json")

    assert [(lib.name, lib.mount) for lib in config.libs] == [("cocos2d", "/cc")]


def test_invalid_values_raise_config_parse_error(tmp_path: Path) -> None:
    root = create_package(tmp_path / "app", config="{packResourcesPolicy: 12}")

    with pytest.raises(ConfigParseError):
        load_config(root / "jah.json")


def test_missing_config_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigParseError):
        load_config(tmp_path / "jah.json")


def test_invalid_package_metadata_raises(tmp_path: Path) -> None:
    root = create_package(tmp_path / "app")
    (root / "package.json").write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigParseError):
        load_config(root / "jah.json")


def test_bare_yaml_words_stay_strings() -> None:
    parsed = parse_relaxed('{externalize: {y: "y.js", no: "no.js", on: "on.js"}, mode: off, label: yes}')

    assert parsed == {
        "externalize": {"y": "y.js", "no": "no.js", "on": "on.js"},
        "mode": "off",
        "label": "yes",
    }


def test_scalars_follow_json_typing() -> None:
    parsed = parse_relaxed(
        '{"scale": 1e3, ratio: -2.5E-1, count: 10, zero: 0, octal: 010, flag: true, off: false, none: null, '
        'face: "\\ud83d\\ude00", when: 2001-12-14}'
    )

    assert parsed == {
        "scale": 1000.0,
        "ratio": -0.25,
        "count": 10,
        "zero": 0,
        "octal": "010",
        "flag": True,
        "off": False,
        "none": None,
        "face": "\U0001F600",
        "when": "2001-12-14",
    }
    assert isinstance(parsed["count"], int)


def test_bare_yaml_word_keys_load_into_config(tmp_path: Path) -> None:
    root = create_package(tmp_path / "app", config='{externalize: {no: "no.js", on: "on.js"}}')

    config = load_config(root / "jah.json")

    assert config.externalize == {"no": "no.js", "on": "on.js"}
