"""Interactive setup: choose instance, token, project and issue, then persist them."""

from collections import Counter

import click
import structlog
import typer
from rich import print as rprint
from rich.markup import escape
from rich.table import Table

from lb.gitlab import GitLabClient, GitLabError
from lb.models import Issue, Project, RawConfig
from lb.settings import NAMESPACE, store_config

logger = structlog.get_logger(__name__)

DEFAULT_ISSUE = 8


class WizardError(RuntimeError):
    """Setup could not finish. Nothing has been written."""


def project_choices(projects: list[Project]) -> dict[str, int]:
    """Map menu labels to project ids. Duplicate names are suffixed with their id."""
    counts = Counter(p.name for p in projects)
    return {(p.name if counts[p.name] == 1 else f"{p.name} ({p.id})"): p.id for p in projects}


def _prompt_project(projects: list[Project]) -> int:
    choices = project_choices(projects)

    table = Table(title="Projects")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    for label, project_id in choices.items():
        table.add_row(str(project_id), escape(label))
    rprint(table)

    picked = typer.prompt("Select project", type=click.Choice(list(choices)))
    return choices[picked]


def _describe_issue(issue: Issue) -> str:
    number = f"#{issue.iid}" if issue.iid is not None else f"id {issue.id}"
    state = f" ({issue.state})" if issue.state else ""
    return f'{number} "{issue.title}"{state}'


def run_wizard(namespace: str = NAMESPACE) -> RawConfig:
    """Walk the user through setup and write the result to the config store.

    Nothing is persisted until every value has been collected and the issue
    confirmed. Raises WizardError when GitLab can't be queried; an aborted
    prompt raises click.Abort.
    """
    rprint("[bold]lb Setup Wizard[/bold]")
    rprint("")

    # Step 1-2: where and who
    instance = typer.prompt("GitLab instance (e.g. gitlab.com)").strip()
    rprint(f"Create a token at: https://{escape(instance)}/-/user_settings/personal_access_tokens")
    rprint("Required scope: api")
    token = typer.prompt("Paste personal access token", hide_input=True).strip()

    client = GitLabClient(instance, token)

    # Step 3-4: project
    try:
        projects = client.list_projects()
    except GitLabError as exc:
        raise WizardError(f"Could not fetch projects from {instance}: {exc}") from exc
    if not projects:
        raise WizardError(f"No projects on {instance} are visible to this token.")
    logger.debug("fetched projects", count=len(projects))

    project = _prompt_project(projects)

    # Step 5: issue, confirmed by title
    while True:
        issue_number = typer.prompt("Issue number", default=DEFAULT_ISSUE, type=click.IntRange(min=0))
        try:
            issue = client.get_issue(project, issue_number)
        except GitLabError as exc:
            raise WizardError(f"Could not fetch issue {issue_number} of project {project}: {exc}") from exc
        if typer.confirm(f"Select the issue {_describe_issue(issue)}?", default=True):
            break

    # Step 6: persist
    raw = RawConfig(gl_instance=instance, gl_token=token, project=project, issue=issue_number)
    path = store_config(raw, namespace)
    rprint(f"[green]✓[/green] Config written to {escape(str(path))}")
    return raw
