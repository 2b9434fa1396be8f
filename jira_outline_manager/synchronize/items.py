"""Contains the logic mirroring single JIRA issues and comments into outline headings."""

import structlog

from jira_outline_manager.configuration.models import SyncConfig
from jira_outline_manager.jira.abc import JiraClientBase
from jira_outline_manager.markup.converter import jira_to_markdown
from jira_outline_manager.markup.sections import join_body_sections, split_body_sections
from jira_outline_manager.outline.abc import OutlineDocumentBase
from jira_outline_manager.schemas.issue import JiraComment, JiraIssue, parse_comment, parse_issue
from jira_outline_manager.schemas.outline import Heading
from jira_outline_manager.synchronize.exceptions import OutlineActionError, UnsupportedItemKindError
from jira_outline_manager.synchronize.models import ItemKind, SyncDecision
from jira_outline_manager.utils.constants import (
    FULL_ISSUE_FIELDS,
    PROPERTY_ASSIGNEE,
    PROPERTY_CATEGORY,
    PROPERTY_CREATED,
    PROPERTY_EFFORT,
    PROPERTY_EPIC_NAME,
    PROPERTY_ID,
    PROPERTY_ISSUETYPE,
    PROPERTY_REPORTER,
    PROPERTY_SPRINT,
    PROPERTY_STATUS,
    PROPERTY_TYPE,
    PROPERTY_UPDATED,
    PROPERTY_URL,
)
from jira_outline_manager.utils.helpers import format_effort, make_comment_id, split_comment_id

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def full_issue_fields(config: SyncConfig) -> list[str]:
    """Return the field list of a full issue fetch, including configured custom fields."""
    return FULL_ISSUE_FIELDS + config.custom_fields()


def item_kind(document: OutlineDocumentBase, heading: Heading) -> ItemKind | None:
    """Return the kind of item a heading mirrors, or None for a heading not linked to JIRA."""
    value = document.get_property(heading, PROPERTY_TYPE)
    if value is None:
        return None
    try:
        return ItemKind(value)
    except ValueError as exc:
        raise OutlineActionError(f"Heading {heading.title!r} has an unknown TYPE {value!r}") from exc


def require_issue_key(document: OutlineDocumentBase, heading: Heading, action: str) -> str:
    """Return the issue key of an issue heading, rejecting every other kind."""
    kind = item_kind(document, heading)
    key = document.get_property(heading, PROPERTY_ID)
    if kind is not ItemKind.ISSUE or key is None:
        raise UnsupportedItemKindError(action, kind, heading.title)
    return key


def comment_heading_parts(comment_heading_id: str) -> tuple[str, str]:
    """Split a comment heading ID into issue key and comment id, rejecting malformed IDs."""
    try:
        return split_comment_id(comment_heading_id)
    except ValueError as exc:
        raise OutlineActionError(f"Comment heading ID {comment_heading_id!r} is not of the form ISSUE-KEY/COMMENT-ID") from exc


def ensure_project_heading(document: OutlineDocumentBase, project_key: str) -> Heading:
    """Return the root heading of a project, creating it if the outline has none."""
    heading = document.find_heading(project_key)
    if heading is None:
        heading = document.create_heading(project_key, Heading(title=project_key))
        document.set_property(heading, PROPERTY_ID, project_key)
        document.set_property(heading, PROPERTY_TYPE, ItemKind.PROJECT.value)
        logger.info("Created project heading", project=project_key)
    return heading


def _remote_parent(document: OutlineDocumentBase, issue: JiraIssue) -> Heading | None:
    """Return the local heading of the issue's parent (or epic) if it is mirrored."""
    for key in (issue.parent_key, issue.epic_key):
        if key:
            parent = document.find_heading(key)
            if parent is not None:
                return parent
    return None


def _comment_title(comment: JiraComment) -> str:
    return f"Comment: {comment.author}" if comment.author else "Comment"


def upsert_comment(document: OutlineDocumentBase, issue_heading: Heading, comment: JiraComment) -> SyncDecision:
    """Create or refresh the heading of a comment under its issue heading."""
    comment_id = make_comment_id(comment.issue_key, comment.id)
    heading = document.find_heading(comment_id)
    decision = SyncDecision.UPDATE
    if heading is None:
        heading = document.create_heading(comment.issue_key, Heading(title=_comment_title(comment)), parent=issue_heading)
        document.set_property(heading, PROPERTY_ID, comment_id)
        decision = SyncDecision.CREATE
    heading.title = _comment_title(comment)
    document.set_property(heading, PROPERTY_TYPE, ItemKind.COMMENT.value)
    document.set_property(heading, PROPERTY_CREATED, comment.created)
    document.set_property(heading, PROPERTY_UPDATED, comment.updated)
    document.set_body(heading, jira_to_markdown(comment.body))
    return decision


def upsert_issue(document: OutlineDocumentBase, issue: JiraIssue, config: SyncConfig) -> SyncDecision:
    """Create or refresh the heading mirroring an issue, including its comments.

    A new heading goes under its parent (or epic) heading when that is mirrored
    locally, otherwise under the project heading. An existing heading is moved
    only when its remote parent is mirrored locally and differs from the
    current parent, so headings refiled by hand under other headings stay put.
    """
    project = ensure_project_heading(document, issue.project_key)
    remote_parent = _remote_parent(document, issue)
    heading = document.find_heading(issue.key)
    decision = SyncDecision.UPDATE
    if heading is None:
        heading = document.create_heading(issue.project_key, Heading(title=issue.summary or issue.key), parent=remote_parent or project)
        document.set_property(heading, PROPERTY_ID, issue.key)
        decision = SyncDecision.CREATE
        logger.info("Mirrored new JIRA issue", issue_key=issue.key, project=issue.project_key)
    elif remote_parent is not None and document.find_parent(heading) is not remote_parent:
        document.move_heading(heading, remote_parent)
        logger.info("Moved heading under its JIRA parent", issue_key=issue.key, parent=remote_parent.id)

    if issue.summary is not None:
        heading.title = issue.summary
    heading.todo = config.todo_for_status(issue.status, issue.status_category)
    heading.priority = config.priority_letter(issue.priority)
    heading.deadline = issue.deadline

    document.set_property(heading, PROPERTY_URL, config.issue_url(issue.key))
    document.set_property(heading, PROPERTY_TYPE, ItemKind.ISSUE.value)
    document.set_property(heading, PROPERTY_ISSUETYPE, issue.issue_type)
    document.set_property(heading, PROPERTY_CATEGORY, issue.project_key)
    document.set_property(heading, PROPERTY_EFFORT, format_effort(issue.estimate_seconds))
    document.set_property(heading, PROPERTY_STATUS, issue.status)
    document.set_property(heading, PROPERTY_ASSIGNEE, issue.assignee)
    document.set_property(heading, PROPERTY_REPORTER, issue.reporter)
    document.set_property(heading, PROPERTY_CREATED, issue.created)
    document.set_property(heading, PROPERTY_UPDATED, issue.updated)
    document.set_property(heading, PROPERTY_SPRINT, issue.sprint)
    document.set_property(heading, PROPERTY_EPIC_NAME, issue.epic_name)

    # Private sections never leave the outline, so they survive a pull.
    _, private = split_body_sections(heading.body, config.private_sections) if config.private_sections else ("", "")
    document.set_body(heading, join_body_sections(jira_to_markdown(issue.description), private))

    for comment in issue.comments:
        upsert_comment(document, heading, comment)
    return decision


def patch_issue_status(document: OutlineDocumentBase, heading: Heading, issue: JiraIssue, config: SyncConfig) -> None:
    """Refresh only the status and assignee of an existing issue heading."""
    heading.todo = config.todo_for_status(issue.status, issue.status_category)
    document.set_property(heading, PROPERTY_STATUS, issue.status)
    document.set_property(heading, PROPERTY_ASSIGNEE, issue.assignee)


def pull_issue(jira: JiraClientBase, document: OutlineDocumentBase, config: SyncConfig, issue_key: str) -> SyncDecision:
    """Fetch an issue in full and mirror it locally."""
    raw = jira.get_issue(issue_key, fields=full_issue_fields(config))
    return upsert_issue(document, parse_issue(raw, config), config)


def pull_comment(jira: JiraClientBase, document: OutlineDocumentBase, heading: Heading) -> SyncDecision:
    """Fetch a comment and refresh its heading."""
    comment_heading_id = document.get_property(heading, PROPERTY_ID)
    if comment_heading_id is None:
        raise UnsupportedItemKindError("pull", ItemKind.COMMENT, heading.title)
    issue_key, comment_id = comment_heading_parts(comment_heading_id)
    issue_heading = document.find_parent(heading)
    if issue_heading is None:
        raise OutlineActionError(f"Comment heading {heading.title!r} is not under an issue heading")
    raw = jira.get_comment(issue_key, comment_id)
    return upsert_comment(document, issue_heading, parse_comment(issue_key, raw))
