"""Contains the reconciliation sweep keeping a project's outline consistent with JIRA."""

import time

import structlog

from jira_outline_manager.configuration.models import SyncConfig
from jira_outline_manager.jira.abc import JiraClientBase
from jira_outline_manager.outline.abc import OutlineDocumentBase
from jira_outline_manager.schemas.issue import parse_issue
from jira_outline_manager.synchronize.exceptions import MissingConfigurationError
from jira_outline_manager.synchronize.items import full_issue_fields, item_kind, patch_issue_status, pull_issue, upsert_issue
from jira_outline_manager.synchronize.models import ItemKind, SyncDecision
from jira_outline_manager.synchronize.results import AllProjectsSyncResult, ProjectSyncResult
from jira_outline_manager.utils.constants import PROPERTY_ID, SHALLOW_ISSUE_FIELDS
from jira_outline_manager.utils.helpers import is_issue_key, jql_key_list, jql_quote, project_key_from_issue_key

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def unresolved_project_jql(project_key: str) -> str:
    """JQL matching every unresolved issue of a project."""
    return f"project = {jql_quote(project_key)} AND resolution = Unresolved"


def resolved_keys_jql(issue_keys: list[str]) -> str:
    """JQL matching the resolved issues among a set of keys."""
    return f"key in ({jql_key_list(issue_keys)}) AND resolution is not EMPTY"


def locally_unresolved_keys(document: OutlineDocumentBase, config: SyncConfig, project_key: str) -> list[str]:
    """Return the keys of the project's issue headings whose TODO keyword is not a done keyword.

    Every outline file is scanned, since an issue heading may sit under a
    heading of another project.
    """
    keys: list[str] = []
    for outline_project in document.known_projects():
        for heading in document.project_headings(outline_project):
            if item_kind(document, heading) is not ItemKind.ISSUE:
                continue
            key = document.get_property(heading, PROPERTY_ID)
            if key is None or key in keys or not is_issue_key(key) or project_key_from_issue_key(key) != project_key:
                continue
            if not config.is_resolved_keyword(heading.todo):
                keys.append(key)
    return keys


def _apply_search_hits(
    jira: JiraClientBase,
    document: OutlineDocumentBase,
    config: SyncConfig,
    raw_issues: list[dict],
    shallow: bool,
) -> dict[str, SyncDecision]:
    decisions: dict[str, SyncDecision] = {}
    for raw in raw_issues:
        issue = parse_issue(raw, config)
        if not shallow:
            decisions[issue.key] = upsert_issue(document, issue, config)
            continue
        heading = document.find_heading(issue.key)
        if heading is None:
            # Shallow hits carry too little to build a heading from.
            decisions[issue.key] = pull_issue(jira, document, config, issue.key)
        else:
            patch_issue_status(document, heading, issue, config)
            decisions[issue.key] = SyncDecision.UPDATE
    return decisions


def sync_project(
    jira: JiraClientBase,
    document: OutlineDocumentBase,
    config: SyncConfig,
    project_key: str,
    shallow: bool = False,
) -> ProjectSyncResult:
    """Reconcile the outline of one project with JIRA.

    Pass 1 mirrors every issue unresolved remotely. Pass 2 looks up the issues
    still unresolved locally and mirrors those that JIRA reports as resolved.
    Local keys JIRA no longer returns (deleted or moved issues) are reported as
    unconfirmed and left untouched.
    """
    start_time = time.time()
    fields = SHALLOW_ISSUE_FIELDS if shallow else full_issue_fields(config)
    logger.info("Syncing project", project=project_key, shallow=shallow)

    open_issues = jira.search_issues(unresolved_project_jql(project_key), fields=fields)
    decisions = _apply_search_hits(jira, document, config, open_issues, shallow)

    candidates = [key for key in locally_unresolved_keys(document, config, project_key) if key not in decisions]
    converged: dict[str, SyncDecision] = {}
    if candidates:
        # Stale keys must not make JIRA reject the whole query.
        resolved_issues = jira.search_issues(resolved_keys_jql(candidates), fields=fields, validate_query=False)
        converged = _apply_search_hits(jira, document, config, resolved_issues, shallow)
        decisions.update(converged)
    unconfirmed = sorted(key for key in candidates if key not in converged)

    end_time = time.time()
    logger.info(
        "Synced project",
        project=project_key,
        shallow=shallow,
        open_issue_count=len(open_issues),
        converged_issue_count=len(converged),
        unconfirmed_keys=unconfirmed,
        duration=round(end_time - start_time, 2),
    )
    return ProjectSyncResult(
        project_key=project_key,
        shallow=shallow,
        decisions=decisions,
        converged_keys=sorted(converged),
        unconfirmed_keys=unconfirmed,
    )


def sync_all_projects(
    jira: JiraClientBase,
    document: OutlineDocumentBase,
    config: SyncConfig,
    shallow: bool = False,
) -> AllProjectsSyncResult:
    """Run the reconciliation sweep over every configured project."""
    if not config.projects:
        raise MissingConfigurationError("projects", "set JIRA_PROJECTS or the projects key of the config file")
    return AllProjectsSyncResult([sync_project(jira, document, config, project_key, shallow=shallow) for project_key in config.projects])
