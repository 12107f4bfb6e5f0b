"""lb CLI — send and configure."""

from collections.abc import Iterable
from importlib import metadata
from typing import Annotated

import structlog
import typer
from pydantic import ValidationError
from rich import print as rprint
from rich.markup import escape

from lb.gitlab import GitLabClient, GitLabError
from lb.log import configure_logging
from lb.models import CompleteConfig, Note, RawConfig
from lb.settings import NAMESPACE, ConfigStoreError, get_settings, load_config, validate_config
from lb.wizard import WizardError, run_wizard

logger = structlog.get_logger(__name__)

app = typer.Typer(help="lb: post standard input as a note on a preselected GitLab issue", no_args_is_help=True)

EXIT_SEND_FAILED = 2


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"lb {metadata.version('lb')}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show the version and exit"),
    ] = False,
) -> None:
    try:
        settings = get_settings()
    except ValidationError as exc:
        rprint(f"[red]Invalid LB_* setting: {escape(str(exc))}[/red]")
        raise typer.Exit(1)
    configure_logging(settings.log_level)


def _load() -> RawConfig:
    try:
        return load_config(NAMESPACE)
    except ConfigStoreError as exc:
        rprint(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1)


# ---------------------------------------------------------------------------
# Send helpers
# ---------------------------------------------------------------------------


def read_note_body(stream: Iterable[str]) -> str:
    """Read stream to EOF and join its lines with real newlines (trailing terminator dropped)."""
    return "\n".join(line.rstrip("\r\n") for line in stream)


def read_stdin_lines() -> Iterable[str]:
    """Yield stdin lines decoded as UTF-8; undecodable bytes become U+FFFD."""
    for raw in typer.get_binary_stream("stdin"):
        yield raw.decode("utf-8", errors="replace")


def send_note(cfg: CompleteConfig, body: str) -> Note:
    client = GitLabClient(cfg.gl_instance, cfg.gl_token.get_secret_value())
    return client.create_note(cfg.project, cfg.issue, body)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command("send")
def send() -> None:
    """Post everything on standard input as a note on the configured issue."""
    cfg = validate_config(_load())
    if cfg is None:
        typer.echo("Error: Looks like the configuration is not complete.")
        typer.echo("Hint: Run `lb configure` to generate one.")
        raise typer.Exit(1)

    body = read_note_body(read_stdin_lines())
    logger.debug("read note body", chars=len(body))

    try:
        note = send_note(cfg, body)
    except GitLabError as exc:
        typer.echo("error: attempted to post the note, but GitLab did not accept it", err=True)
        typer.echo(str(exc), err=True)
        if exc.status_code == 401:
            typer.echo("Hint: Run `lb configure` to update the access token.", err=True)
        raise typer.Exit(EXIT_SEND_FAILED)

    rprint(f"[green]✓[/green] Posted note {note.id} on issue #{cfg.issue} of project {cfg.project}")


@app.command("configure")
def configure() -> None:
    """Interactive setup: pick the GitLab instance, project and issue to post to."""
    raw = _load()
    if validate_config(raw) is not None:
        if not typer.confirm("Looks like a config already exists. Want to create a new one?", default=False):
            return

    try:
        run_wizard(NAMESPACE)
    except (WizardError, ConfigStoreError) as exc:
        rprint(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1)
