"""Contains the actions setting a single field of an issue."""

from datetime import date

import structlog

from jira_outline_manager.configuration.models import SyncConfig
from jira_outline_manager.jira.abc import JiraClientBase
from jira_outline_manager.outline.abc import OutlineDocumentBase
from jira_outline_manager.schemas.outline import Heading
from jira_outline_manager.synchronize.exceptions import OutlineActionError
from jira_outline_manager.synchronize.items import pull_issue, require_issue_key
from jira_outline_manager.synchronize.models import SyncDecision

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

ASSIGN_TO_SELF = "me"


def set_deadline(
    jira: JiraClientBase,
    document: OutlineDocumentBase,
    config: SyncConfig,
    heading: Heading,
    deadline: date | None,
) -> SyncDecision:
    """Set (or clear, with None) the due date of an issue."""
    issue_key = require_issue_key(document, heading, "set the deadline")
    jira.update_issue(issue_key, duedate=deadline.isoformat() if deadline is not None else None)
    return pull_issue(jira, document, config, issue_key)


def set_priority(
    jira: JiraClientBase,
    document: OutlineDocumentBase,
    config: SyncConfig,
    heading: Heading,
    priority: str,
) -> SyncDecision:
    """Set the priority of an issue from a priority letter or a JIRA priority name."""
    issue_key = require_issue_key(document, heading, "set the priority")
    try:
        priority_name = config.priority_name(priority)
    except ValueError as exc:
        raise OutlineActionError(str(exc)) from exc
    jira.update_issue(issue_key, priority={"name": priority_name})
    return pull_issue(jira, document, config, issue_key)


def set_assignee(
    jira: JiraClientBase,
    document: OutlineDocumentBase,
    config: SyncConfig,
    heading: Heading,
    assignee: str | None,
) -> SyncDecision:
    """Assign an issue to a user, to the authenticated user with "me", or to nobody with None."""
    issue_key = require_issue_key(document, heading, "set the assignee")
    if assignee == ASSIGN_TO_SELF:
        assignee = jira.current_user()
    jira.assign_issue(issue_key, assignee)
    return pull_issue(jira, document, config, issue_key)


def set_issue_type(
    jira: JiraClientBase,
    document: OutlineDocumentBase,
    config: SyncConfig,
    heading: Heading,
    issue_type: str,
) -> SyncDecision:
    """Change the type of an issue."""
    issue_key = require_issue_key(document, heading, "set the issue type")
    jira.set_issue_type(issue_key, issue_type)
    return pull_issue(jira, document, config, issue_key)


def set_epic(
    jira: JiraClientBase,
    document: OutlineDocumentBase,
    config: SyncConfig,
    heading: Heading,
    epic_key: str | None,
) -> SyncDecision:
    """Link an issue to an epic, or unlink it with None.

    Uses the discovered epic link custom field when configured, and the issue
    parent otherwise (as team-managed projects do).
    """
    issue_key = require_issue_key(document, heading, "set the epic")
    if config.epic_field:
        jira.update_issue(issue_key, **{config.epic_field: epic_key})
    else:
        jira.update_issue(issue_key, parent={"key": epic_key} if epic_key else None)
    logger.info("Set epic of issue", issue_key=issue_key, epic_key=epic_key, epic_field=config.epic_field)
    return pull_issue(jira, document, config, issue_key)


def set_status(
    jira: JiraClientBase,
    document: OutlineDocumentBase,
    config: SyncConfig,
    heading: Heading,
    status: str,
) -> SyncDecision:
    """Move an issue to a status through the matching workflow transition.

    A transition matches when its name or its target status name equals the
    requested status, ignoring case.
    """
    issue_key = require_issue_key(document, heading, "set the status")
    transitions = jira.transitions(issue_key)
    wanted = status.lower()
    for transition in transitions:
        target = (transition.get("to") or {}).get("name", "")
        if transition.get("name", "").lower() == wanted or target.lower() == wanted:
            jira.transition_issue(issue_key, str(transition["id"]))
            return pull_issue(jira, document, config, issue_key)
    available = sorted(str(t.get("name")) for t in transitions)
    raise OutlineActionError(f"No transition of {issue_key} leads to {status!r}; available transitions: {', '.join(available)}")
