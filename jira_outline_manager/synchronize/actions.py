"""Contains the single-call actions mapping one local heading action to one JIRA request.

Every action dispatches on the kind of item the heading mirrors, sends one
request to JIRA and then refreshes the affected heading from the response (or
from a follow-up fetch of the same item).
"""

from typing import Any

import structlog

from jira_outline_manager.configuration.models import SyncConfig
from jira_outline_manager.jira.abc import JiraClientBase
from jira_outline_manager.markup.converter import markdown_to_jira
from jira_outline_manager.outline.abc import OutlineDocumentBase
from jira_outline_manager.schemas.issue import parse_comment
from jira_outline_manager.schemas.outline import Heading
from jira_outline_manager.synchronize.exceptions import (
    HeadingNotFoundError,
    MissingConfigurationError,
    OutlineActionError,
    UnsupportedItemKindError,
)
from jira_outline_manager.synchronize.items import (
    comment_heading_parts,
    item_kind,
    pull_comment,
    pull_issue,
    require_issue_key,
    upsert_comment,
)
from jira_outline_manager.synchronize.models import ItemKind, SyncDecision
from jira_outline_manager.synchronize.project import sync_project
from jira_outline_manager.synchronize.results import ProjectSyncResult
from jira_outline_manager.utils.constants import PROPERTY_ID, PROPERTY_TYPE, PROPERTY_URL
from jira_outline_manager.utils.helpers import make_comment_id

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def _issue_heading_for_comment(document: OutlineDocumentBase, heading: Heading, action: str) -> tuple[Heading, str]:
    """Return the issue heading (and key) a comment should be attached to."""
    kind = item_kind(document, heading)
    if kind is ItemKind.COMMENT:
        parent = document.find_parent(heading)
        if parent is None:
            raise OutlineActionError(f"Comment heading {heading.title!r} is not under an issue heading")
        heading = parent
    return heading, require_issue_key(document, heading, action)


def _outgoing_body(document: OutlineDocumentBase, heading: Heading, config: SyncConfig) -> str:
    return markdown_to_jira(document.get_body(heading, exclude_titles=config.private_sections))


def _project_key_for(document: OutlineDocumentBase, heading: Heading, config: SyncConfig) -> str:
    """Return the project an unlinked heading belongs to, from its project ancestor."""
    ancestor: Heading | None = heading
    while ancestor is not None:
        if item_kind(document, ancestor) is ItemKind.PROJECT:
            key = document.get_property(ancestor, PROPERTY_ID)
            if key is not None:
                return key
        ancestor = document.find_parent(ancestor)
    if len(config.projects) == 1:
        return config.projects[0]
    raise MissingConfigurationError("project", "file the heading under a project heading or configure exactly one project")


# Comments
def add_comment(
    jira: JiraClientBase,
    document: OutlineDocumentBase,
    config: SyncConfig,
    heading: Heading,
    body: str,
) -> Heading:
    """Add a comment to the issue of a heading and mirror it as a child heading."""
    issue_heading, issue_key = _issue_heading_for_comment(document, heading, "add a comment")
    raw = jira.add_comment(issue_key, markdown_to_jira(body))
    comment = parse_comment(issue_key, raw)
    upsert_comment(document, issue_heading, comment)
    comment_heading_id = make_comment_id(issue_key, comment.id)
    comment_heading = document.find_heading(comment_heading_id)
    if comment_heading is None:
        raise HeadingNotFoundError(comment_heading_id)
    return comment_heading


def delete_comment(jira: JiraClientBase, document: OutlineDocumentBase, heading: Heading) -> None:
    """Delete a comment in JIRA and remove its heading."""
    kind = item_kind(document, heading)
    comment_heading_id = document.get_property(heading, PROPERTY_ID)
    if kind is not ItemKind.COMMENT or comment_heading_id is None:
        raise UnsupportedItemKindError("delete a comment", kind, heading.title)
    issue_key, comment_id = comment_heading_parts(comment_heading_id)
    jira.delete_comment(issue_key, comment_id)
    document.remove_heading(heading)


# Pull and push
def pull_item(
    jira: JiraClientBase,
    document: OutlineDocumentBase,
    config: SyncConfig,
    heading: Heading,
) -> SyncDecision | ProjectSyncResult:
    """Refresh a heading from JIRA: an issue, a comment, or a whole project."""
    kind = item_kind(document, heading)
    if kind is ItemKind.ISSUE:
        return pull_issue(jira, document, config, require_issue_key(document, heading, "pull"))
    elif kind is ItemKind.COMMENT:
        return pull_comment(jira, document, heading)
    elif kind is ItemKind.PROJECT:
        project_key = document.get_property(heading, PROPERTY_ID)
        if project_key is None:
            raise UnsupportedItemKindError("pull", kind, heading.title)
        return sync_project(jira, document, config, project_key)
    else:
        raise UnsupportedItemKindError("pull", kind, heading.title)


def push_item(
    jira: JiraClientBase,
    document: OutlineDocumentBase,
    config: SyncConfig,
    heading: Heading,
) -> SyncDecision:
    """Send a heading's title and body to JIRA, then refresh it from the result."""
    kind = item_kind(document, heading)
    if kind is ItemKind.ISSUE:
        issue_key = require_issue_key(document, heading, "push")
        jira.update_summary_description(issue_key, heading.title, _outgoing_body(document, heading, config))
        return pull_issue(jira, document, config, issue_key)
    elif kind is ItemKind.COMMENT:
        comment_heading_id = document.get_property(heading, PROPERTY_ID)
        issue_heading = document.find_parent(heading)
        if comment_heading_id is None or issue_heading is None:
            raise UnsupportedItemKindError("push", kind, heading.title)
        issue_key, comment_id = comment_heading_parts(comment_heading_id)
        raw = jira.update_comment(issue_key, comment_id, _outgoing_body(document, heading, config))
        return upsert_comment(document, issue_heading, parse_comment(issue_key, raw))
    elif kind is ItemKind.PROJECT:
        raise UnsupportedItemKindError("push", kind, heading.title)
    else:
        raise UnsupportedItemKindError("push", kind, heading.title)


# Creation and promotion
def create_item_from_heading(
    jira: JiraClientBase,
    document: OutlineDocumentBase,
    config: SyncConfig,
    heading: Heading,
    issue_type: str | None = None,
    parent_key: str | None = None,
) -> str:
    """Create an issue from an unlinked heading, stamp its ID and URL, and pull it.

    Returns the key of the new issue.
    """
    kind = item_kind(document, heading)
    if kind is not None or document.get_property(heading, PROPERTY_ID) is not None:
        raise UnsupportedItemKindError("create an issue", kind, heading.title)
    project_key = _project_key_for(document, heading, config)
    extra_fields: dict[str, Any] = {}
    if parent_key is not None:
        extra_fields["parent"] = {"key": parent_key}
    raw = jira.create_issue(
        project_key,
        issue_type or config.task_type_name,
        heading.title,
        description=_outgoing_body(document, heading, config) or None,
        **extra_fields,
    )
    issue_key: str = raw["key"]
    document.set_property(heading, PROPERTY_ID, issue_key)
    document.set_property(heading, PROPERTY_URL, config.issue_url(issue_key))
    document.set_property(heading, PROPERTY_TYPE, ItemKind.ISSUE.value)
    logger.info("Created issue from heading", issue_key=issue_key, title=heading.title, issue_type=issue_type or config.task_type_name)
    pull_issue(jira, document, config, issue_key)
    return issue_key


def promote_to_task(jira: JiraClientBase, document: OutlineDocumentBase, config: SyncConfig, heading: Heading) -> str:
    """Create a task from a heading."""
    return create_item_from_heading(jira, document, config, heading, issue_type=config.task_type_name)


def promote_to_story(jira: JiraClientBase, document: OutlineDocumentBase, config: SyncConfig, heading: Heading) -> tuple[str, list[str]]:
    """Create a story from a heading and a subtask from each of its unlinked child headings.

    Returns the story key and the subtask keys in outline order.
    """
    story_key = create_item_from_heading(jira, document, config, heading, issue_type=config.story_type_name)
    subtask_keys: list[str] = []
    child = heading.children[0] if heading.children else None
    while child is not None:
        if document.get_property(child, PROPERTY_ID) is None:
            subtask_keys.append(
                create_item_from_heading(jira, document, config, child, issue_type=config.subtask_type_name, parent_key=story_key)
            )
        child = document.next_sibling(child)
    logger.info("Created story with subtasks", issue_key=story_key, subtask_keys=subtask_keys)
    return story_key, subtask_keys


def promote_to_subtask(jira: JiraClientBase, document: OutlineDocumentBase, config: SyncConfig, heading: Heading) -> str:
    """Create a subtask from a heading filed under an issue heading."""
    parent = document.find_parent(heading)
    if parent is None:
        raise UnsupportedItemKindError("create a subtask", None, heading.title)
    parent_key = require_issue_key(document, parent, "create a subtask under")
    return create_item_from_heading(jira, document, config, heading, issue_type=config.subtask_type_name, parent_key=parent_key)
