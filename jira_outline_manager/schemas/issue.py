"""Pydantic schema for issue and comment records returned by the JIRA REST API."""

from datetime import date
from typing import Any

from pydantic import BaseModel, Field

from jira_outline_manager.configuration.models import SyncConfig
from jira_outline_manager.utils.helpers import parse_deadline, project_key_from_issue_key


class JiraComment(BaseModel):
    """Pydantic model for a JIRA issue comment."""

    id: str
    issue_key: str
    author: str | None = None
    body: str = ""
    created: str | None = None
    updated: str | None = None


class JiraIssue(BaseModel):
    """Pydantic model for a JIRA issue, reduced to the fields mirrored locally."""

    key: str
    project_key: str
    issue_type: str | None = None
    is_subtask: bool = False
    summary: str | None = None
    description: str | None = None
    status: str | None = None
    status_category: str | None = None
    assignee: str | None = None
    reporter: str | None = None
    priority: str | None = None
    deadline: date | None = None
    parent_key: str | None = None
    epic_key: str | None = None
    epic_name: str | None = None
    sprint: str | None = None
    estimate_seconds: int | None = None
    created: str | None = None
    updated: str | None = None
    comments: list[JiraComment] = Field(default_factory=list)


def _name(value: Any, attribute: str = "name") -> str | None:
    if isinstance(value, dict):
        return value.get(attribute)
    return None


def _user_name(value: Any) -> str | None:
    if not isinstance(value, dict):
        return None
    return value.get("displayName") or value.get("name") or value.get("accountId")


def _sprint_name(value: Any) -> str | None:
    """Return the name of the most recent sprint in a sprint field value."""
    if not value:
        return None
    last = value[-1] if isinstance(value, list) else value
    if isinstance(last, dict):
        return last.get("name")
    if isinstance(last, str):
        # Older servers serialize sprints as "com.atlassian...Sprint@x[id=1,name=Sprint 1,...]"
        for part in last.strip("]").split(","):
            name, _, text = part.partition("=")
            if name.strip() == "name":
                return text
    return None


def parse_comment(issue_key: str, raw: dict[str, Any]) -> JiraComment:
    """Parse a raw comment record."""
    return JiraComment(
        id=str(raw["id"]),
        issue_key=issue_key,
        author=_user_name(raw.get("author")),
        body=raw.get("body") or "",
        created=raw.get("created"),
        updated=raw.get("updated"),
    )


def parse_issue(raw: dict[str, Any], config: SyncConfig) -> JiraIssue:
    """Parse a raw issue record into a JiraIssue.

    Missing fields (as in a shallow search result) are left as None.
    """
    key: str = raw["key"]
    fields: dict[str, Any] = raw.get("fields") or {}

    issue_type = fields.get("issuetype") or {}
    status = fields.get("status") or {}
    parent = fields.get("parent") or {}

    parent_key: str | None = None
    epic_key: str | None = None
    if parent:
        parent_type = _name((parent.get("fields") or {}).get("issuetype"))
        if parent_type == config.epic_type_name and not issue_type.get("subtask", False):
            epic_key = parent.get("key")
        else:
            parent_key = parent.get("key")
    if config.epic_field and fields.get(config.epic_field):
        epic_key = fields[config.epic_field]

    comment_block = fields.get("comment") or {}
    comments = [parse_comment(key, c) for c in comment_block.get("comments", [])]

    project = fields.get("project") or {}
    return JiraIssue(
        key=key,
        project_key=project.get("key") or project_key_from_issue_key(key),
        issue_type=_name(issue_type),
        is_subtask=bool(issue_type.get("subtask", False)),
        summary=fields.get("summary"),
        description=fields.get("description"),
        status=_name(status),
        status_category=_name(status.get("statusCategory"), "key"),
        assignee=_user_name(fields.get("assignee")),
        reporter=_user_name(fields.get("reporter")),
        priority=_name(fields.get("priority")),
        deadline=parse_deadline(fields.get("duedate")),
        parent_key=parent_key,
        epic_key=epic_key,
        epic_name=fields.get(config.epic_name_field) if config.epic_name_field else None,
        sprint=_sprint_name(fields.get(config.sprint_field)) if config.sprint_field else None,
        estimate_seconds=fields.get("timeoriginalestimate"),
        created=fields.get("created"),
        updated=fields.get("updated"),
        comments=comments,
    )
