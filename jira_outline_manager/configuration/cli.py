"""Defines the Command Line Interface (CLI) using Typer."""

import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any, Callable, NoReturn

import structlog
import typer
from dotenv import load_dotenv
from typer import Argument, Option
from typing_extensions import Annotated

from jira_outline_manager.configuration.driver import build_sync_config, get_connection_config
from jira_outline_manager.configuration.exceptions import (
    ConfigurationFileError,
    JiraAuthenticationConfigurationUndefinedError,
    RequiredConfigurationElementError,
)
from jira_outline_manager.configuration.models import SyncConfig
from jira_outline_manager.configuration.reconcile import save_config_values
from jira_outline_manager.outline.abc import OutlineDocumentBase
from jira_outline_manager.outline.exceptions import OutlineFileError
from jira_outline_manager.synchronize import actions, fields, navigation
from jira_outline_manager.synchronize.discovery import discover_custom_fields
from jira_outline_manager.synchronize.driver import SyncContext, create_outline_store, create_sync_context, target_heading
from jira_outline_manager.synchronize.exceptions import MissingConfigurationError, OutlineActionError
from jira_outline_manager.synchronize.models import SyncDecision
from jira_outline_manager.synchronize.project import sync_all_projects, sync_project
from jira_outline_manager.synchronize.results import ProjectSyncResult
from jira_outline_manager.utils.constants import LOCATOR_PROJECT_SEPARATOR
from jira_outline_manager.utils.helpers import parse_deadline

load_dotenv()

typer_app = typer.Typer(name="jira-outline", help="Mirror JIRA issues into YAML outline files.", pretty_exceptions_show_locals=False)

LocatorArgument = Annotated[
    str | None,
    Argument(help="Heading ID (issue key, KEY/COMMENT_ID) or PROJECT::Title/Child locator. Defaults to the clocked-in heading."),
]


def configure_logging(debug: bool) -> None:
    """Route structlog through the standard library logger at INFO, or DEBUG with --debug."""
    logging.basicConfig(level=logging.DEBUG if debug else logging.INFO, format="%(message)s", stream=sys.stderr)
    logging.getLogger().setLevel(logging.DEBUG if debug else logging.INFO)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


@typer_app.callback()
def main_callback(
    ctx: typer.Context,
    jira_url: Annotated[str | None, Option(envvar="JIRA_URL", help="JIRA server URL.")] = None,
    jira_username: Annotated[str | None, Option(envvar="JIRA_USERNAME", help="JIRA username for basic authentication.")] = None,
    jira_api_token: Annotated[str | None, Option(envvar="JIRA_API_TOKEN", help="JIRA API token for basic authentication.")] = None,
    jira_pat_token: Annotated[str | None, Option(envvar="JIRA_PAT_TOKEN", help="JIRA Personal Access Token.")] = None,
    projects: Annotated[str | None, Option(envvar="JIRA_PROJECTS", help="Comma separated JIRA project keys.")] = None,
    outline_dir: Annotated[Path | None, Option(envvar="JIRA_OUTLINE_DIR", help="Directory of YAML outline files.")] = None,
    config_file: Annotated[Path | None, Option(envvar="JIRA_CONFIG_FILE", help="Path to the YAML configuration file.")] = None,
    debug: Annotated[bool, Option(envvar="DEBUG", help="Enable debug logging.")] = False,
) -> None:
    """Store the connection and outline options for the current context."""
    configure_logging(debug)
    ctx.ensure_object(dict)
    ctx.obj["jira_url"] = jira_url
    ctx.obj["jira_username"] = jira_username
    ctx.obj["jira_api_token"] = jira_api_token
    ctx.obj["jira_pat_token"] = jira_pat_token
    ctx.obj["projects"] = projects
    ctx.obj["outline_dir"] = outline_dir
    ctx.obj["config_file"] = config_file


def _fail(message: str) -> NoReturn:
    typer.echo(message, err=True)
    raise typer.Exit(1)


def _sync_config(ctx: typer.Context) -> SyncConfig:
    try:
        return build_sync_config(
            projects=ctx.obj["projects"],
            outline_dir=ctx.obj["outline_dir"],
            config_file=ctx.obj["config_file"],
            jira_url=ctx.obj["jira_url"],
        )
    except ConfigurationFileError as exc:
        _fail(f"Error loading configuration file: {exc}")


def _context(ctx: typer.Context) -> SyncContext:
    config = _sync_config(ctx)
    try:
        connection = get_connection_config(
            jira_url=ctx.obj["jira_url"],
            jira_username=ctx.obj["jira_username"],
            jira_api_token=ctx.obj["jira_api_token"],
            jira_pat_token=ctx.obj["jira_pat_token"],
        )
    except (JiraAuthenticationConfigurationUndefinedError, RequiredConfigurationElementError) as exc:
        _fail(str(exc))
    return create_sync_context(connection, config)


def _run(document: OutlineDocumentBase, action: Callable[..., Any], *args: Any) -> Any:
    """Run an action and save the outline if it succeeds."""
    try:
        result = action(*args)
    except (OutlineActionError, OutlineFileError) as exc:
        _fail(f"Error: {exc}")
    document.save()
    return result


def _echo_sync_result(result: ProjectSyncResult) -> None:
    mode = "shallow" if result.shallow else "full"
    typer.echo(
        f"{result.project_key}: {mode} sync created {len(result.created_keys)}, "
        f"updated {len(result.updated_keys)}, resolved {len(result.converged_keys)} issue(s)"
    )
    if result.unconfirmed_keys:
        typer.echo(f"{result.project_key}: not found in JIRA, left untouched: {', '.join(result.unconfirmed_keys)}")


def _echo_decision(locator: str | None, decision: SyncDecision) -> None:
    typer.echo(f"{locator or 'clocked-in heading'}: {decision.value}")


# Project sweep
@typer_app.command(name="sync-project")
def sync_project_cli(
    ctx: typer.Context,
    project_key: Annotated[str, Argument(help="JIRA project key.")],
    shallow: Annotated[bool, Option(help="Only refresh status and assignee of known issues.")] = False,
) -> None:
    """Mirror the unresolved issues of a project and resolve those closed in JIRA."""
    context = _context(ctx)
    result = _run(context.document, sync_project, context.jira, context.document, context.config, project_key, shallow)
    _echo_sync_result(result)


@typer_app.command(name="sync-all")
def sync_all_cli(
    ctx: typer.Context,
    shallow: Annotated[bool, Option(help="Only refresh status and assignee of known issues.")] = False,
) -> None:
    """Run the project sync over every configured project."""
    context = _context(ctx)
    results = _run(context.document, sync_all_projects, context.jira, context.document, context.config, shallow)
    for result in results.results:
        _echo_sync_result(result)


# Single items
@typer_app.command(name="pull")
def pull_cli(ctx: typer.Context, locator: LocatorArgument = None) -> None:
    """Refresh an issue, a comment or a whole project from JIRA."""
    context = _context(ctx)
    heading = _run(context.document, target_heading, context.document, locator)
    result = _run(context.document, actions.pull_item, context.jira, context.document, context.config, heading)
    if isinstance(result, ProjectSyncResult):
        _echo_sync_result(result)
    else:
        _echo_decision(locator, result)


@typer_app.command(name="push")
def push_cli(ctx: typer.Context, locator: LocatorArgument = None) -> None:
    """Send the title and body of an issue heading, or the body of a comment heading, to JIRA."""
    context = _context(ctx)
    heading = _run(context.document, target_heading, context.document, locator)
    _echo_decision(locator, _run(context.document, actions.push_item, context.jira, context.document, context.config, heading))


@typer_app.command(name="add-comment")
def add_comment_cli(
    ctx: typer.Context,
    body: Annotated[str, Argument(help="Comment text (Markdown).")],
    locator: LocatorArgument = None,
) -> None:
    """Add a comment to an issue."""
    context = _context(ctx)
    heading = _run(context.document, target_heading, context.document, locator)
    comment = _run(context.document, actions.add_comment, context.jira, context.document, context.config, heading, body)
    typer.echo(f"Added comment {comment.id}")


@typer_app.command(name="delete-comment")
def delete_comment_cli(ctx: typer.Context, locator: LocatorArgument = None) -> None:
    """Delete a comment in JIRA and remove its heading."""
    context = _context(ctx)
    heading = _run(context.document, target_heading, context.document, locator)
    _run(context.document, actions.delete_comment, context.jira, context.document, heading)
    typer.echo(f"Deleted comment {heading.id}")


@typer_app.command(name="create")
def create_cli(
    ctx: typer.Context,
    locator: LocatorArgument = None,
    issue_type: Annotated[str | None, Option("--type", help="Issue type name. Defaults to the configured task type.")] = None,
) -> None:
    """Create an issue from an unlinked heading."""
    context = _context(ctx)
    heading = _run(context.document, target_heading, context.document, locator)
    issue_key = _run(context.document, actions.create_item_from_heading, context.jira, context.document, context.config, heading, issue_type)
    typer.echo(f"Created {issue_key}")


@typer_app.command(name="promote-task")
def promote_task_cli(ctx: typer.Context, locator: LocatorArgument = None) -> None:
    """Create a task from a heading."""
    context = _context(ctx)
    heading = _run(context.document, target_heading, context.document, locator)
    typer.echo(f"Created {_run(context.document, actions.promote_to_task, context.jira, context.document, context.config, heading)}")


@typer_app.command(name="promote-story")
def promote_story_cli(ctx: typer.Context, locator: LocatorArgument = None) -> None:
    """Create a story from a heading and subtasks from its unlinked child headings."""
    context = _context(ctx)
    heading = _run(context.document, target_heading, context.document, locator)
    story_key, subtask_keys = _run(context.document, actions.promote_to_story, context.jira, context.document, context.config, heading)
    typer.echo(f"Created {story_key}" + (f" with subtasks {', '.join(subtask_keys)}" if subtask_keys else ""))


@typer_app.command(name="promote-subtask")
def promote_subtask_cli(ctx: typer.Context, locator: LocatorArgument = None) -> None:
    """Create a subtask from a heading filed under an issue heading."""
    context = _context(ctx)
    heading = _run(context.document, target_heading, context.document, locator)
    typer.echo(f"Created {_run(context.document, actions.promote_to_subtask, context.jira, context.document, context.config, heading)}")


# Fields
@typer_app.command(name="set-deadline")
def set_deadline_cli(
    ctx: typer.Context,
    deadline: Annotated[str, Argument(help="Due date as YYYY-MM-DD, or 'none' to clear it.")],
    locator: LocatorArgument = None,
) -> None:
    """Set the due date of an issue."""
    try:
        due: date | None = None if deadline.lower() == "none" else parse_deadline(deadline)
    except ValueError:
        _fail(f"Invalid date {deadline!r}; expected YYYY-MM-DD")
    context = _context(ctx)
    heading = _run(context.document, target_heading, context.document, locator)
    _echo_decision(locator, _run(context.document, fields.set_deadline, context.jira, context.document, context.config, heading, due))


@typer_app.command(name="set-priority")
def set_priority_cli(
    ctx: typer.Context,
    priority: Annotated[str, Argument(help="Priority letter (A-E) or JIRA priority name.")],
    locator: LocatorArgument = None,
) -> None:
    """Set the priority of an issue."""
    context = _context(ctx)
    heading = _run(context.document, target_heading, context.document, locator)
    _echo_decision(locator, _run(context.document, fields.set_priority, context.jira, context.document, context.config, heading, priority))


@typer_app.command(name="set-assignee")
def set_assignee_cli(
    ctx: typer.Context,
    assignee: Annotated[str, Argument(help="User id, 'me' for yourself, or 'none' to unassign.")],
    locator: LocatorArgument = None,
) -> None:
    """Set the assignee of an issue."""
    context = _context(ctx)
    heading = _run(context.document, target_heading, context.document, locator)
    user = None if assignee.lower() == "none" else assignee
    _echo_decision(locator, _run(context.document, fields.set_assignee, context.jira, context.document, context.config, heading, user))


@typer_app.command(name="set-type")
def set_type_cli(
    ctx: typer.Context,
    issue_type: Annotated[str, Argument(help="Issue type name.")],
    locator: LocatorArgument = None,
) -> None:
    """Change the type of an issue."""
    context = _context(ctx)
    heading = _run(context.document, target_heading, context.document, locator)
    _echo_decision(locator, _run(context.document, fields.set_issue_type, context.jira, context.document, context.config, heading, issue_type))


@typer_app.command(name="set-epic")
def set_epic_cli(
    ctx: typer.Context,
    epic_key: Annotated[str, Argument(help="Epic issue key, or 'none' to unlink.")],
    locator: LocatorArgument = None,
) -> None:
    """Link an issue to an epic."""
    context = _context(ctx)
    heading = _run(context.document, target_heading, context.document, locator)
    epic = None if epic_key.lower() == "none" else epic_key
    _echo_decision(locator, _run(context.document, fields.set_epic, context.jira, context.document, context.config, heading, epic))


@typer_app.command(name="set-status")
def set_status_cli(
    ctx: typer.Context,
    status: Annotated[str, Argument(help="Target status or transition name.")],
    locator: LocatorArgument = None,
) -> None:
    """Move an issue to another status through a workflow transition."""
    context = _context(ctx)
    heading = _run(context.document, target_heading, context.document, locator)
    _echo_decision(locator, _run(context.document, fields.set_status, context.jira, context.document, context.config, heading, status))


# Local navigation
@typer_app.command(name="focus")
def focus_cli(
    ctx: typer.Context,
    locator: Annotated[str | None, Argument(help="Issue key or PROJECT::Title/Child locator.")] = None,
    active: Annotated[bool, Option("--active", help="Focus the clocked-in heading.")] = False,
) -> None:
    """Print the subtree of an issue, of a located heading, or of the clocked-in heading."""
    document = create_outline_store(_sync_config(ctx))
    try:
        if active or locator is None:
            view = navigation.focus_active(document)
        elif LOCATOR_PROJECT_SEPARATOR in locator:
            view = navigation.focus_heading(document, locator)
        else:
            view = navigation.focus_issue(document, locator)
    except (OutlineActionError, OutlineFileError) as exc:
        _fail(f"Error: {exc}")
    typer.echo(view, nl=False)


@typer_app.command(name="widen")
def widen_cli(ctx: typer.Context, project_key: Annotated[str, Argument(help="JIRA project key.")]) -> None:
    """Print the whole outline of a project."""
    document = create_outline_store(_sync_config(ctx))
    typer.echo(document.widen(project_key), nl=False)


@typer_app.command(name="clock-in")
def clock_in_cli(ctx: typer.Context, locator: Annotated[str, Argument(help="Heading ID or PROJECT::Title/Child locator.")]) -> None:
    """Make a heading the active one."""
    config = _sync_config(ctx)
    document = create_outline_store(config)
    heading = _run(document, target_heading, document, locator)
    _run(document, navigation.clock_in, document, heading)
    typer.echo(f"Clocked in {heading.id}")


@typer_app.command(name="clock-out")
def clock_out_cli(ctx: typer.Context) -> None:
    """Clear the active heading."""
    config = _sync_config(ctx)
    document = create_outline_store(config)
    _run(document, navigation.clock_out, document)
    typer.echo("Clocked out")


@typer_app.command(name="refile")
def refile_cli(
    ctx: typer.Context,
    target: Annotated[str, Argument(help="Issue key of the new parent heading.")],
    locator: LocatorArgument = None,
) -> None:
    """Move a heading under another issue's heading."""
    config = _sync_config(ctx)
    document = create_outline_store(config)
    heading = _run(document, target_heading, document, locator)
    target_heading_ = _run(document, target_heading, document, target)
    _run(document, navigation.refile, document, heading, target_heading_)
    typer.echo(f"Refiled {heading.title!r} under {target}")


# Custom fields
@typer_app.command(name="discover-fields")
def discover_fields_cli(
    ctx: typer.Context,
    project_key: Annotated[str | None, Argument(help="Project to sample issues from. Defaults to the first configured project.")] = None,
    save: Annotated[bool, Option("--save", help="Write the discovered field ids to the configuration file.")] = False,
) -> None:
    """Find the custom field ids used for epic link, sprint and epic name."""
    context = _context(ctx)
    if project_key is None:
        if not context.config.projects:
            _fail(str(MissingConfigurationError("projects", "pass a project key or set JIRA_PROJECTS")))
        project_key = context.config.projects[0]
    result = _run(context.document, discover_custom_fields, context.jira, context.config, project_key)
    for name, value in result.as_config_values().items():
        typer.echo(f"{name}: {value or 'not found'}")
    if save:
        config_file: Path | None = ctx.obj["config_file"]
        if config_file is None:
            _fail("Error: --save needs a configuration file (--config-file or JIRA_CONFIG_FILE)")
        save_config_values(config_file, **result.as_config_values())
        typer.echo(f"Saved field ids to {config_file}")
