from pathlib import Path

import yaml
from typer.testing import CliRunner

from commoner.entrypoints.cli import app
from tests.consts import APP_ROOT
from tests.utils import write_tree

runner = CliRunner()


def test_compile__on_fixture_file__prints_initializer() -> None:
    result = runner.invoke(
        app, ["compile", str(APP_ROOT / "a" / "b.js"), "--root", str(APP_ROOT)]
    )

    assert result.exit_code == 0, result.output
    assert result.stdout == (
        "var __commoner_module__a$b_2ejs = "
        "__commoner_initialize_module__(function (module, exports) {\n"
        "__commoner_module__a$c_2ejs.run();\n"
        "});\n"
    )


def test_compile__on_output_and_metadata__writes_both(tmp_path: Path) -> None:
    output = tmp_path / "b.out.js"
    metadata = tmp_path / "b.json"

    result = runner.invoke(
        app,
        [
            "compile",
            str(APP_ROOT / "a" / "b.js"),
            "--root",
            str(APP_ROOT),
            "-o",
            str(output),
            "--metadata",
            str(metadata),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "__commoner_module__a$c_2ejs.run();" in output.read_text(encoding="utf-8")
    assert str(APP_ROOT / "a" / "c.js") in metadata.read_text(encoding="utf-8")


def test_compile__on_config_globals__uses_override(source_root: Path) -> None:
    write_tree(
        source_root,
        {
            "commoner.yml": "globals:\n  jquery: jQuery\n",
            "main.js": 'var $ = require("jquery");\n$(document);\n',
        },
    )

    result = runner.invoke(
        app,
        [
            "compile",
            str(source_root / "main.js"),
            "--root",
            str(source_root),
            "--config",
            str(source_root / "commoner.yml"),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "jQuery(document);" in result.stdout


def test_compile__on_root_from_environment__is_accepted() -> None:
    result = runner.invoke(
        app,
        ["compile", str(APP_ROOT / "a" / "c.js")],
        env={"COMMONER_SOURCE_ROOT": str(APP_ROOT)},
    )

    assert result.exit_code == 0, result.output
    assert "Shopify.Cart = exports['default']" in result.stdout


def test_compile__on_escaping_require__exits_with_error() -> None:
    result = runner.invoke(
        app, ["compile", str(APP_ROOT / "a" / "escape.js"), "--root", str(APP_ROOT)]
    )

    assert result.exit_code == 1
    assert "Cannot find module '../../outside/x'" in result.output


def test_bundle__on_two_files__writes_bundle_and_metadata(tmp_path: Path) -> None:
    output = tmp_path / "dist" / "bundle.js"
    metadata = tmp_path / "dist" / "bundle.yml"

    result = runner.invoke(
        app,
        [
            "bundle",
            str(APP_ROOT / "a" / "c.js"),
            str(APP_ROOT / "a" / "b.js"),
            "--root",
            str(APP_ROOT),
            "--output",
            str(output),
            "--metadata",
            str(metadata),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Bundled 2 modules" in result.stdout
    code = output.read_text(encoding="utf-8")
    assert code.startswith("!function() {\n")
    rows = yaml.safe_load(metadata.read_text(encoding="utf-8"))["modules"]
    assert [row["identifier"] for row in rows] == [
        "__commoner_module__a$c_2ejs",
        "__commoner_module__a$b_2ejs",
    ]
