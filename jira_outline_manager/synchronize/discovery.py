"""Contains the discovery of the custom field ids a JIRA server uses for epics and sprints.

Custom field ids differ between servers, so they are found by display name in
the edit metadata of two sample issues: one epic (for "Epic Name") and one
non-epic (for "Epic Link" and "Sprint"). The result is returned to the caller,
who decides whether to persist it.
"""

from dataclasses import dataclass
from typing import Any

import structlog

from jira_outline_manager.configuration.models import SyncConfig
from jira_outline_manager.jira.abc import JiraClientBase
from jira_outline_manager.synchronize.exceptions import OutlineActionError
from jira_outline_manager.utils.constants import EPIC_LINK_FIELD_NAME, EPIC_NAME_FIELD_NAME, SPRINT_FIELD_NAME
from jira_outline_manager.utils.helpers import jql_quote

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


@dataclass
class FieldDiscoveryResult:
    """Custom field ids found on the server; None where no field matched."""

    epic_field: str | None = None
    sprint_field: str | None = None
    epic_name_field: str | None = None

    def as_config_values(self) -> dict[str, str | None]:
        """Return the result keyed by configuration file key."""
        return {
            "epic_field": self.epic_field,
            "sprint_field": self.sprint_field,
            "epic_name_field": self.epic_name_field,
        }


def find_field_id(edit_metadata: dict[str, Any], display_name: str) -> str | None:
    """Return the id of the field with a display name in an edit metadata response."""
    for field_id, field_info in (edit_metadata.get("fields") or {}).items():
        if field_info.get("name") == display_name:
            return field_id
    return None


def _sample_issue_key(jira: JiraClientBase, jql: str) -> str | None:
    issues = jira.search_issues(jql, fields=["issuetype"], limit=1)
    return issues[0]["key"] if issues else None


def discover_custom_fields(jira: JiraClientBase, config: SyncConfig, project_key: str) -> FieldDiscoveryResult:
    """Find the epic link, sprint and epic name field ids using sample issues of a project."""
    project = jql_quote(project_key)
    epic_type = jql_quote(config.epic_type_name)
    epic_key = _sample_issue_key(jira, f"project = {project} AND issuetype = {epic_type}")
    issue_key = _sample_issue_key(jira, f"project = {project} AND issuetype != {epic_type}")
    if epic_key is None and issue_key is None:
        raise OutlineActionError(f"Project {project_key} has no issues to discover custom fields from")

    result = FieldDiscoveryResult()
    if issue_key is not None:
        metadata = jira.edit_metadata(issue_key)
        result.epic_field = find_field_id(metadata, EPIC_LINK_FIELD_NAME)
        result.sprint_field = find_field_id(metadata, SPRINT_FIELD_NAME)
    if epic_key is not None:
        result.epic_name_field = find_field_id(jira.edit_metadata(epic_key), EPIC_NAME_FIELD_NAME)
    logger.info(
        "Discovered custom fields",
        project=project_key,
        sample_issue=issue_key,
        sample_epic=epic_key,
        **result.as_config_values(),
    )
    return result
