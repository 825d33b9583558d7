from pathlib import Path

import pytest
from pydantic import ValidationError

from commoner.errors import CommonerError, JavaScriptSyntaxError
from commoner.models.source_file import SourceFile


def test_from_text__on_valid_source__parses_program() -> None:
    source_file = SourceFile.from_text(Path("/app/ok.js"), "var a = 1;\n")

    assert source_file.root_node.type == "program"
    assert source_file.node_text(source_file.root_node.named_children[0]) == (
        "var a = 1;"
    )


def test_from_text__on_syntax_error__raises_commoner_error_unwrapped() -> None:
    with pytest.raises(JavaScriptSyntaxError) as exc_info:
        SourceFile.from_text(Path("/app/broken.js"), "var a = 1;\nvar = ;\n")

    error = exc_info.value
    assert isinstance(error, CommonerError)
    assert not isinstance(error, ValidationError)
    assert error.path == "/app/broken.js"
    assert error.line == 2


def test_read__on_syntax_error__raises_commoner_error(tmp_path: Path) -> None:
    path = tmp_path / "broken.js"
    path.write_text("function (\n", encoding="utf-8")

    with pytest.raises(JavaScriptSyntaxError):
        SourceFile.read(path)
