"""
Main CLI application entry point.

This module contains the main Typer application and command handlers
for github-x.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional, TypeVar
import asyncio
import logging
import sys

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from github_x import VERSION
from github_x.config.env_loader import EnvFileLoader
from github_x.config.settings import GitHubXSettings, get_settings
from github_x.core.client import (
    AuthenticationError,
    ConfigurationError,
    GitHubApiDriver,
    GitHubApiError,
    create_api_driver,
    create_user_friendly_message,
)
from github_x.core.commit import commit_single_file
from github_x.cli.output import filter_fields, render_result

logger = logging.getLogger(__name__)

T = TypeVar("T")

OBJECT_TYPES = ("project", "branches", "raw")

# Create the main Typer application
app = typer.Typer(
    name="github-x",
    help="github-x: GitHub Executor API Interface",
    add_completion=False,
    rich_markup_mode="rich",
)

# Rich consoles for output; errors go to stderr so stdout stays pipeable
console = Console()
err_console = Console(stderr=True)


@dataclass
class CliState:
    """Options shared by all commands."""
    settings: GitHubXSettings

    @property
    def as_json(self) -> bool:
        return self.settings.json_output


def version_callback(value: bool) -> None:
    """Display version information and exit."""
    if value:
        console.print(f"[bold blue]github-x[/bold blue] version [green]{VERSION}[/green]")
        raise typer.Exit()


def _configure_logging(settings: GitHubXSettings) -> None:
    level = getattr(logging, settings.effective_log_level)
    logging.basicConfig(
        level=level,
        format="%(message)s" if settings.verbose else "%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger().setLevel(level)


def _fail(message: str, exit_code: int = 1) -> typer.Exit:
    err_console.print(f"[red]Error:[/red] {escape(message)}", soft_wrap=True)
    return typer.Exit(exit_code)


@app.callback()
def callback(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    access_token: Optional[str] = typer.Option(
        None, "--access-token", "-t", help="Access token (default: $GITHUB_AT)"
    ),
    url: Optional[str] = typer.Option(
        None, "--url", "-u", help="GitHub API URL (default: $GITHUB_URL)"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Increased console output"),
    json_output: bool = typer.Option(
        False, "--json", help="Always print result as json, even if it is a single value"
    ),
) -> None:
    """
    github-x: GitHub Executor API Interface.

    Query and commit to a GitHub repository from the command line.
    """
    EnvFileLoader().load_env_file()
    try:
        settings = get_settings(
            access_token=access_token,
            url=url,
            verbose=verbose or None,
            json_output=json_output or None,
        )
    except ValidationError as e:
        raise _fail(f"Invalid configuration: {e}")

    _configure_logging(settings)
    if settings.verbose:
        logger.info(f"Arguments: {settings.to_dict()}")
    ctx.obj = CliState(settings=settings)


async def _connect(settings: GitHubXSettings) -> GitHubApiDriver:
    """Create the driver and verify the token against the API root."""
    api = create_api_driver(settings)
    try:
        if not await api.check_access():
            raise GitHubApiError(
                f"API at '{settings.url}' not accessible with given access token"
            )
    except Exception:
        await api.aclose()
        raise
    return api


def _run(state: CliState, action: Callable[[GitHubApiDriver], Awaitable[T]]) -> T:
    """Run an API action, turning client errors into a console message and exit code 1."""

    async def _runner() -> T:
        api = await _connect(state.settings)
        async with api:
            return await action(api)

    try:
        return asyncio.run(_runner())
    except ConfigurationError as e:
        raise _fail(e.message)
    except GitHubApiError as e:
        logger.debug(f"Request failed: {e.to_dict()}")
        err_console.print(f"[red]Error:[/red] {escape(str(e))}", soft_wrap=True)
        if isinstance(e, AuthenticationError):
            err_console.print(f"[dim]{escape(create_user_friendly_message(e))}[/dim]")
        raise typer.Exit(1)
    except OSError as e:
        raise _fail(str(e))


def _print(state: CliState, data: Any, fields: Optional[List[str]]) -> None:
    render_result(console, filter_fields(data, fields or [], state.as_json), state.as_json)


@app.command("get")
def get_command(
    ctx: typer.Context,
    object_type: str = typer.Argument(..., help="Object type: project, branches or raw"),
    identifier: str = typer.Argument(..., help="Project identifier (owner/repo or URL)"),
    parameters: Optional[List[str]] = typer.Argument(
        None, help="Fields to print, or the file path for 'raw'"
    ),
    ref: Optional[str] = typer.Option(None, "--ref", help="Branch to read from (raw only)"),
) -> None:
    """Get a project, its branches, or a raw file."""
    state: CliState = ctx.obj
    parameters = list(parameters or [])

    if object_type == "project":
        logger.debug(f"Doing 'GET' > 'project' with identifier '{identifier}' and fields {parameters}")
        project = _run(state, lambda api: api.get_project(identifier))
        _print(state, project, parameters)

    elif object_type == "branches":
        logger.debug(f"Doing 'GET' > 'branches' with identifier '{identifier}' and fields {parameters}")
        branches = _run(state, lambda api: api.get_branches(identifier))
        _print(state, branches, parameters)

    elif object_type == "raw":
        if len(parameters) != 1:
            raise _fail("wrong number of parameters for 'get raw' action", exit_code=2)
        file_path = parameters[0]
        logger.debug(f"Doing 'GET' > 'raw' with project identifier '{identifier}' and file path '{file_path}'")
        _run(state, lambda api: _stream_raw(api, identifier, file_path, ref))

    else:
        raise _fail(
            f"object type '{object_type}' is not supported (use one of: {', '.join(OBJECT_TYPES)})",
            exit_code=2,
        )


async def _stream_raw(api: GitHubApiDriver, identifier: str, file_path: str, ref: Optional[str]) -> None:
    stdout = typer.get_binary_stream("stdout")
    async for chunk in api.iter_raw_file(identifier, file_path, ref):
        stdout.write(chunk)
    stdout.flush()


@app.command("commit")
def commit_command(
    ctx: typer.Context,
    local_file: Path = typer.Argument(..., help="Local file to commit"),
    project: str = typer.Argument(..., help="Project identifier (owner/repo or URL)"),
    target_file: Optional[str] = typer.Argument(
        None, help="Path in the repository (default: the local file name)"
    ),
    ref: Optional[str] = typer.Option(None, "--ref", help="Target branch (default: the project's default branch)"),
    force: bool = typer.Option(False, "--force", "-f", help="Create the target file if it does not exist"),
    message: Optional[str] = typer.Option(None, "--message", "-m", help="Commit message"),
) -> None:
    """Commit a local file to a branch of a project."""
    state: CliState = ctx.obj
    logger.debug(f"Doing 'COMMIT' with project identifier '{project}' and file path '{local_file}'")

    result = _run(
        state,
        lambda api: commit_single_file(
            api,
            local_file,
            project,
            target_file,
            ref=ref,
            force=force,
            message=message,
        ),
    )

    if state.as_json:
        render_result(console, result.model_dump(), as_json=True)
    else:
        console.print(
            f"[green]✓[/green] Committed {escape(', '.join(result.files))} to "
            f"[cyan]{escape(result.branch)}[/cyan] as [yellow]{result.commit_sha}[/yellow]",
            soft_wrap=True,
        )


@app.command("version")
def version_command(
    ctx: typer.Context,
    fields: Optional[List[str]] = typer.Argument(None, help="Fields to print"),
) -> None:
    """Show API information from the API root endpoint."""
    state: CliState = ctx.obj
    info = _run(state, lambda api: api.get_version())
    _print(state, info, fields)


def main() -> None:
    """Entry point for the CLI application."""
    app()


if __name__ == "__main__":
    main()
