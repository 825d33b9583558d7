import json
from pathlib import Path

import pytest
import yaml

from commoner.loaders.metadata_loader import MetadataLoader
from commoner.loaders.options_loader import OptionsLoader
from commoner.models.options import DEFAULT_EXTENSIONS
from commoner.services.compiler import ModuleCompiler
from tests.consts import APP_ROOT


@pytest.fixture
def compiled_modules():
    compiler = ModuleCompiler(source_root=APP_ROOT)
    return [
        compiler.compile_file(APP_ROOT / "a" / "c.js"),
        compiler.compile_file(APP_ROOT / "a" / "b.js"),
    ]


def test_options_loader__on_globals_and_extensions__builds_options(
    tmp_path: Path,
) -> None:
    config = tmp_path / "commoner.yml"
    config.write_text(
        "extensions: ['.js', '.jsx']\nglobals:\n  jquery: $\n  react: React\n",
        encoding="utf-8",
    )

    options = OptionsLoader(config).load()

    assert options.extensions == (".js", ".jsx")
    assert options.globals == {"jquery": "$", "react": "React"}
    assert options.basedir is None


def test_options_loader__on_empty_file__returns_defaults(tmp_path: Path) -> None:
    config = tmp_path / "commoner.yml"
    config.write_text("", encoding="utf-8")

    options = OptionsLoader(config).load()

    assert options.extensions == DEFAULT_EXTENSIONS
    assert options.globals == {}


@pytest.mark.parametrize(
    "contents",
    ["- .js\n- .jsx\n", "basedir: /tmp\n", "unknown_key: 1\n"],
)
def test_options_loader__on_invalid_contents__raises(
    tmp_path: Path, contents: str
) -> None:
    config = tmp_path / "commoner.yml"
    config.write_text(contents, encoding="utf-8")

    with pytest.raises(ValueError):
        OptionsLoader(config).load()


def test_options_loader__on_missing_file__raises(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        OptionsLoader(tmp_path / "absent.yml").load()


def test_metadata_loader__on_yaml_path__writes_one_row_per_module(
    tmp_path: Path, compiled_modules
) -> None:
    output = tmp_path / "out" / "metadata.yml"

    MetadataLoader(output).load(compiled_modules)

    data = yaml.safe_load(output.read_text(encoding="utf-8"))
    assert [row["identifier"] for row in data["modules"]] == [
        "__commoner_module__a$c_2ejs",
        "__commoner_module__a$b_2ejs",
    ]
    assert data["modules"][0]["expose"] == "Shopify.Cart"
    assert data["modules"][0]["required"] == []
    assert data["modules"][1]["required"] == [str(APP_ROOT / "a" / "c.js")]
    assert data["modules"][1]["commoner_enabled"] is True


def test_metadata_loader__on_json_suffix__writes_json(
    tmp_path: Path, compiled_modules
) -> None:
    output = tmp_path / "metadata.json"

    MetadataLoader(output).load(compiled_modules)

    data = json.loads(output.read_text(encoding="utf-8"))
    assert data["modules"][1]["path"] == str(APP_ROOT / "a" / "b.js")
    assert data["modules"][1]["used_helpers"] == []


def test_metadata_loader__on_explicit_format__overrides_suffix(
    tmp_path: Path, compiled_modules
) -> None:
    output = tmp_path / "metadata.txt"

    MetadataLoader(output, fmt="json").load(compiled_modules[:1])

    assert json.loads(output.read_text(encoding="utf-8"))["modules"][0]["expose"] == (
        "Shopify.Cart"
    )
