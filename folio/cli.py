"""Command-line interface for Folio.

This module defines the CLI commands using Click framework.

Commands:
- render: Resolve a page (with optional sibling pages) and print its final content.
- filters: List the filters available to a project.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from . import __version__
from .compiler import compile_pages
from .config import load_config, load_config_file
from .context import BuildContext
from .errors import BuildError, RecursionDetected
from .loader import load_page


@click.group()
@click.version_option(version=__version__, prog_name="folio")
def cli():
    """Folio page resolution pipeline."""


@cli.command()
@click.argument(
    "page", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.argument(
    "siblings", nargs=-1, type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Configuration file (defaults to folio.yaml in the current directory)",
)
@click.option(
    "--layouts",
    "layouts_dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Layouts directory (overrides layouts_dir)",
)
@click.option(
    "--lib",
    "lib_dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Filter plugin directory (overrides lib_dir)",
)
@click.option("--quiet", "-q", is_flag=True, help="Only report errors")
@click.option("--verbose", "-v", is_flag=True, help="Report progress")
@click.option("--debug", is_flag=True, help="Report every filter and layout step")
@click.option("--show-path", is_flag=True, help="Print the page's output path to stderr")
def render(
    page: Path,
    siblings: tuple[Path, ...],
    config_path: Path | None,
    layouts_dir: Path | None,
    lib_dir: Path | None,
    quiet: bool,
    verbose: bool,
    debug: bool,
    show_path: bool,
):
    """Resolve PAGE and print its final content.

    SIBLINGS are loaded into the same build so PAGE's filters and layout can
    read them.
    """
    setup_logging(quiet=quiet, verbose=verbose, debug=debug)
    context = _create_context(config_path, layouts_dir, lib_dir, quiet)

    target = load_page(page, context)
    for sibling in siblings:
        if sibling.resolve() != page.resolve():
            load_page(sibling, context)

    try:
        compile_pages(context)
    except BuildError as exc:
        _report_error(exc)
        raise SystemExit(1) from None

    if show_path:
        click.echo(str(target.output_path), err=True)
    content = target.attributes.get("content")
    if content is None:
        click.echo(click.style("No output for this page", fg="yellow"), err=True)
        return
    click.echo(content, nl=False)


@cli.command(name="filters")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Configuration file (defaults to folio.yaml in the current directory)",
)
@click.option(
    "--lib",
    "lib_dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Filter plugin directory (overrides lib_dir)",
)
def list_filters(config_path: Path | None, lib_dir: Path | None):
    """List the available filters."""
    context = _create_context(config_path, None, lib_dir, quiet=True)
    for name in context.filters.names():
        click.echo(name)


def setup_logging(quiet: bool = False, verbose: bool = False, debug: bool = False):
    """Configure logging for the CLI."""
    level = logging.WARNING
    if verbose:
        level = logging.INFO
    if debug:
        level = logging.DEBUG
    if quiet:
        level = logging.ERROR

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        force=True,
    )
    logging.getLogger("folio").setLevel(level)


def _create_context(
    config_path: Path | None,
    layouts_dir: Path | None,
    lib_dir: Path | None,
    quiet: bool,
) -> BuildContext:
    """Load configuration, apply CLI overrides and create the build context."""
    if config_path is not None:
        project_root = config_path.resolve().parent
        config = load_config_file(config_path)
    else:
        project_root = Path.cwd()
        config = load_config(project_root)
    if layouts_dir is not None:
        config["layouts_dir"] = str(layouts_dir.resolve())
    if lib_dir is not None:
        config["lib_dir"] = str(lib_dir.resolve())
    return BuildContext.from_config(config, project_root, quiet=quiet)


def _report_error(exc: BuildError) -> None:
    """Display a build error on stderr."""
    click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
    if exc.source is not None:
        click.echo(click.style(f"  File: {exc.source}", fg="yellow"), err=True)
    click.echo(click.style(f"  Error: {exc.message}", fg="white"), err=True)
    if isinstance(exc, RecursionDetected):
        click.echo("  Page filter stack:", err=True)
        for index, source in enumerate(exc.trace):
            click.echo(f"  {index}  {source}", err=True)


def main():
    """Entry point for the CLI application."""
    cli()
