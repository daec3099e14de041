"""CLI interface for Assay projects."""

from __future__ import annotations

import json
from concurrent.futures import Future
from typing import Any, NoReturn, Optional

import typer

from assay_core.errors import AssayError
from commands.config import AssaySettings, configure_logging, load_settings
from commands.facade import CommandDispatcher, serialize
from project.lifecycle import open_project
from store.repository import ResultStore

app = typer.Typer(help="Assay evaluation workspace CLI")


def _settings(ctx: typer.Context) -> AssaySettings:
    return ctx.obj if isinstance(ctx.obj, AssaySettings) else AssaySettings()


def _fail(message: str) -> NoReturn:
    typer.secho(f"❌ {message}", fg=typer.colors.RED, err=True)
    raise typer.Exit(1)


def _emit(future: Future[Any]) -> None:
    try:
        result = future.result()
    except AssayError as e:
        _fail(str(e))
    typer.echo(json.dumps(serialize(result), indent=2))


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(None, "--config", help="Path to settings YAML"),
) -> None:
    """Manage Assay projects and their eval definitions."""
    try:
        settings = load_settings(config)
    except (FileNotFoundError, ValueError) as e:
        _fail(f"Invalid settings: {e}")
    configure_logging(settings.log_level)
    ctx.obj = settings


@app.command()
def create(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Project root directory"),
    name: str = typer.Argument(..., help="Project name"),
) -> None:
    """Create a new project."""
    with CommandDispatcher(_settings(ctx).max_workers) as dispatcher:
        _emit(dispatcher.create_project(path, name))


@app.command("open")
def open_(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Project root directory"),
) -> None:
    """Open an existing project and initialize its store."""
    with CommandDispatcher(_settings(ctx).max_workers) as dispatcher:
        _emit(dispatcher.open_project(path))


@app.command("list")
def list_(
    ctx: typer.Context,
    root: Optional[str] = typer.Argument(None, help="Directory containing projects"),
) -> None:
    """List the projects under a root directory."""
    settings = _settings(ctx)
    with CommandDispatcher(settings.max_workers) as dispatcher:
        _emit(dispatcher.list_projects(root or settings.projects_root))


@app.command()
def evals(
    ctx: typer.Context,
    project_path: str = typer.Argument(..., help="Project root directory"),
) -> None:
    """List the eval definitions of a project."""
    with CommandDispatcher(_settings(ctx).max_workers) as dispatcher:
        _emit(dispatcher.list_evals(project_path))


def _search(project_path: str, query: str, limit: int) -> list[Any]:
    info = open_project(project_path)
    return ResultStore(info.db_path).search_samples(query, limit=limit)


@app.command()
def search(
    ctx: typer.Context,
    project_path: str = typer.Argument(..., help="Project root directory"),
    query: str = typer.Argument(..., help="Full-text query over sample input and output"),
    limit: int = typer.Option(20, help="Maximum number of samples"),
) -> None:
    """Search recorded samples of a project."""
    with CommandDispatcher(_settings(ctx).max_workers) as dispatcher:
        _emit(dispatcher.submit(_search, project_path, query, limit))


if __name__ == "__main__":
    app()
