from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer

from commoner.loaders.metadata_loader import MetadataLoader
from commoner.loaders.options_loader import OptionsLoader
from commoner.models.options import CommonerOptions, CommonerSettings
from commoner.pipeline import CommonerPipeline
from commoner.services.compiler import ModuleCompiler

app = typer.Typer(
    name="commoner",
    add_completion=False,
    no_args_is_help=True,
    help="Link require() calls between independently compiled JavaScript files.",
)

_settings = CommonerSettings()


def _load_options(config_path: Path | None) -> CommonerOptions:
    """Read project options, falling back to defaults when no file is given.

    Args:
        config_path: Optional YAML file with extensions/globals overrides.

    Returns:
        CommonerOptions: Project-wide options.
    """
    if config_path is None:
        return CommonerOptions()
    return OptionsLoader(config_path).load()


def _fail(error: Exception) -> typer.Exit:
    typer.secho(str(error), fg=typer.colors.RED, err=True)
    return typer.Exit(code=1)


def _write(code: str, output: Path | None) -> None:
    if output is None:
        typer.echo(code, nl=False)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(code, encoding="utf-8")


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log resolutions and rewrites."),
    ] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command("compile")
def compile_file(
    path: Annotated[
        Path,
        typer.Argument(
            help="JavaScript file to compile.",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            resolve_path=True,
        ),
    ],
    root: Annotated[
        Path | None,
        typer.Option(
            "--root",
            help="Source root every required file must live under.",
            envvar="COMMONER_SOURCE_ROOT",
            file_okay=False,
            dir_okay=True,
            resolve_path=True,
        ),
    ] = _settings.source_root,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            help="YAML file with extensions and globals.",
            envvar="COMMONER_CONFIG",
            exists=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ] = _settings.config_path,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the result here instead of stdout."),
    ] = None,
    metadata: Annotated[
        Path | None,
        typer.Option("--metadata", help="Write required paths as YAML or JSON."),
    ] = None,
) -> None:
    """Compile a single file into a module initializer."""
    if root is None:
        raise _fail(ValueError("No source root given, pass --root"))

    try:
        compiler = ModuleCompiler(source_root=root, options=_load_options(config))
        compiled = compiler.compile_file(path)
    except (ValueError, OSError) as e:
        raise _fail(e) from e

    _write(compiled.code, output)
    if metadata is not None:
        MetadataLoader(metadata).load([compiled])


@app.command("bundle")
def bundle(
    files: Annotated[
        list[Path],
        typer.Argument(
            help="Files to compile, concatenated in the given order.",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            resolve_path=True,
        ),
    ],
    root: Annotated[
        Path | None,
        typer.Option(
            "--root",
            help="Source root every required file must live under.",
            envvar="COMMONER_SOURCE_ROOT",
            file_okay=False,
            dir_okay=True,
            resolve_path=True,
        ),
    ] = _settings.source_root,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            help="YAML file with extensions and globals.",
            envvar="COMMONER_CONFIG",
            exists=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ] = _settings.config_path,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the bundle here instead of stdout."),
    ] = None,
    metadata: Annotated[
        Path | None,
        typer.Option("--metadata", help="Write required paths as YAML or JSON."),
    ] = None,
) -> None:
    """Compile several files and wrap them with the runtime prelude."""
    if root is None:
        raise _fail(ValueError("No source root given, pass --root"))

    try:
        pipeline = CommonerPipeline(
            root=root, files=files, options=_load_options(config)
        )
        result = pipeline.run()
    except (ValueError, OSError) as e:
        raise _fail(e) from e

    _write(result.code, output)
    if metadata is not None:
        MetadataLoader(metadata).load(result.modules)
    if output is not None:
        typer.secho(
            f"Bundled {len(result.modules)} modules into {output}",
            fg=typer.colors.GREEN,
        )


def main() -> None:
    """Entry point for executing the Typer application."""
    app()


if __name__ == "__main__":
    main()
