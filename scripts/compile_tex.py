#!/usr/bin/env python3
"""
TeX Compilation CLI

Compiles TeX files (or rendered Jinja2 templates) to PDF with pdflatex and copies
the requested artifacts out of the job's temporary directory.

Commands:
    compile - Compile an existing .tex file
    render  - Render a template with YAML data, then compile it

Examples:\n

    compile_tex.py compile report.tex                                 # Compile to ./texput.pdf

    compile_tex.py compile report.tex --jobname report -e pdf -e log  # Keep PDF and log

    compile_tex.py compile report.tex --preset interaction_nonstop    # Apply argument preset

    compile_tex.py render letter data/letter.yaml -o outs/letters     # Render and compile
"""

import asyncio
import os
import shutil
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import typer
from dotenv import load_dotenv
from jinja2 import TemplateNotFound
from omegaconf import OmegaConf
from typing_extensions import Annotated

from texjob.contexts.rendering import FileExtension, LatexCompiler
from texjob.contexts.rendering.logger import setup_rendering_logger
from texjob.contexts.templating import (
    PresetNotFoundError,
    TemplateRegistry,
    TemplateRenderError,
    apply_presets,
)
from texjob.utils.pdf_processing import page_count
from texjob.utils.timestamp import now

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))


app = typer.Typer(
    help="Compile TeX sources to PDF with automatic cross-reference reruns",
    add_completion=False,
    invoke_without_command=True,
)


ArgumentsOption = Annotated[
    Optional[List[str]],
    typer.Option("--arg", "-a", help="Engine argument as NAME or NAME=VALUE (repeatable)"),
]
PresetsOption = Annotated[
    Optional[List[str]],
    typer.Option("--preset", "-p", help="Argument preset, e.g. interaction_nonstop (repeatable)"),
]
JobnameOption = Annotated[
    Optional[str], typer.Option("--jobname", "-j", help="Base name of generated files")
]
ExtensionsOption = Annotated[
    Optional[List[str]],
    typer.Option("--extension", "-e", help="Artifact to keep: pdf, aux, log, toc (repeatable)"),
]
OutputDirOption = Annotated[
    Path, typer.Option("--output-dir", "-o", help="Directory receiving the artifacts")
]
VerboseOption = Annotated[
    bool, typer.Option("--verbose", "-v", help="Show engine commands and output on the console")
]


def parse_argument(raw: str) -> Tuple[str, Optional[str]]:
    """Split NAME=VALUE; a bare NAME is a flag without value."""
    name, separator, value = raw.partition("=")
    return name, (value if separator else None)


def configure(
    compiler: LatexCompiler,
    arguments: Optional[List[str]],
    presets: Optional[List[str]],
    jobname: Optional[str],
) -> None:
    if presets:
        apply_presets(compiler, presets)
    for raw in arguments or []:
        compiler.add_argument(*parse_argument(raw))
    if jobname:
        compiler.add_argument(LatexCompiler.JOBNAME_PARAMETER, jobname)


async def collect_artifacts(
    compiler: LatexCompiler, extensions: List[FileExtension]
) -> Dict[FileExtension, Optional[Path]]:
    artifacts = {}
    for extension in extensions:
        artifacts[extension] = await compiler.get_file(extension)
    return artifacts


def run_job(
    compiler: LatexCompiler,
    extensions: Optional[List[str]],
    output_dir: Path,
) -> bool:
    """Compile, copy existing artifacts to output_dir and print a summary."""
    try:
        requested = [FileExtension.coerce(ext) for ext in extensions or ["pdf"]]
    except ValueError as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Command: {' '.join(compiler.command())}")
    artifacts = asyncio.run(collect_artifacts(compiler, requested))
    typer.echo("")

    if all(path is None for path in artifacts.values()):
        typer.secho("✗ Compilation failed", fg=typer.colors.RED, bold=True)
        return False

    typer.secho("✓ Compilation succeeded", fg=typer.colors.GREEN, bold=True)
    output_dir.mkdir(parents=True, exist_ok=True)
    for extension, path in artifacts.items():
        if not path.exists():
            typer.secho(f"  {extension.name}: not generated", fg=typer.colors.YELLOW)
            continue
        destination = output_dir / path.name
        shutil.copy2(path, destination)
        typer.echo(f"  {extension.name}: {destination}")
        if extension is FileExtension.PDF:
            typer.echo(f"  Pages: {page_count(destination)}")
    return True


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command("compile")
def compile_command(
    tex_file: Annotated[Path, typer.Argument(help="TeX source file")],
    arguments: ArgumentsOption = None,
    presets: PresetsOption = None,
    jobname: JobnameOption = None,
    extensions: ExtensionsOption = None,
    output_dir: OutputDirOption = Path("."),
    verbose: VerboseOption = False,
):
    """
    Compile an existing TeX file.

    The engine runs in the file's directory so relative \\input and images resolve.

    Examples:\n

        $ compile_tex.py compile report.tex

        $ compile_tex.py compile report.tex --arg=-interaction=nonstopmode -e pdf -e toc
    """
    log_file = setup_rendering_logger(
        LOGS_PATH / f"compile_{now()}", console_level="DEBUG" if verbose else "INFO"
    )
    typer.secho(f"\nCompiling: {tex_file}", fg=typer.colors.BLUE, bold=True)

    try:
        compiler = LatexCompiler.from_file(tex_file)
    except OSError as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    with compiler:
        try:
            configure(compiler, arguments, presets, jobname)
        except PresetNotFoundError as e:
            typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1)
        success = run_job(compiler, extensions, output_dir)

    typer.echo(f"  Log: {log_file}\n")
    raise typer.Exit(code=0 if success else 1)


@app.command("render")
def render_command(
    template_name: Annotated[str, typer.Argument(help="Template name under the templates path")],
    data_file: Annotated[Path, typer.Argument(help="YAML file with template data")],
    templates_path: Annotated[
        Optional[Path], typer.Option("--templates-path", help="Template root directory")
    ] = None,
    source_dir: Annotated[
        Optional[Path],
        typer.Option("--source-dir", "-s", help="Directory with images and styles the source uses"),
    ] = None,
    arguments: ArgumentsOption = None,
    presets: PresetsOption = None,
    jobname: JobnameOption = None,
    extensions: ExtensionsOption = None,
    output_dir: OutputDirOption = Path("."),
    verbose: VerboseOption = False,
):
    """
    Render a Jinja2 template with YAML data and compile the result.

    Examples:\n

        $ compile_tex.py render letter data/letter.yaml --jobname letter
    """
    log_file = setup_rendering_logger(
        LOGS_PATH / f"compile_{now()}", console_level="DEBUG" if verbose else "INFO"
    )
    typer.secho(f"\nRendering: {template_name}", fg=typer.colors.BLUE, bold=True)

    registry = TemplateRegistry(templates_path)
    try:
        data = OmegaConf.to_container(OmegaConf.load(data_file), resolve=True)
        compiler = LatexCompiler.from_template(
            registry.writer(template_name, **data), source_directory=source_dir
        )
    except (OSError, TemplateNotFound, TemplateRenderError) as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    with compiler:
        try:
            configure(compiler, arguments, presets, jobname)
        except PresetNotFoundError as e:
            typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1)
        success = run_job(compiler, extensions, output_dir)

    typer.echo(f"  Log: {log_file}\n")
    raise typer.Exit(code=0 if success else 1)


if __name__ == "__main__":
    app()
