"""JIRA client adapter for the jira library."""

from functools import wraps
from typing import Any, Callable, Self, TypeVar

import structlog
from jira import JIRA
from jira.exceptions import JIRAError

from jira_outline_manager.configuration.models import ConnectionConfig
from jira_outline_manager.utils.constants import DEFAULT_JIRA_API_VERSION, SEARCH_PAGE_SIZE

from .abc import JiraClientBase
from .client import get_jira_client

logger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def log_jira_errors(func: F) -> F:
    """Decorator to log JIRA request failures with their details before re-raising them unchanged."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except JIRAError as exc:
            logger.error(
                "JIRA request failed",
                function=func.__name__,
                status_code=exc.status_code,
                url=exc.url,
                text=exc.text,
            )
            raise

    return wrapper  # type: ignore


class JiraAdapter(JiraClientBase):
    """JIRA client adapter for the jira library."""

    def __init__(self, client: JIRA) -> None:
        """Initialize the JIRA client adapter with an already-initialized client."""
        self.client = client

    def _omit_null_parameters(self, **kwargs: Any) -> dict[str, Any]:
        """Omit parameters that are None."""
        return {k: v for k, v in kwargs.items() if v is not None}

    @classmethod
    def create(cls, connection: ConnectionConfig) -> Self:
        """Create a new JIRA client adapter.

        Args:
            connection: Server URL and credentials

        Returns:
            Configured JiraAdapter instance

        Raises:
            RuntimeError: If required credentials for the chosen auth type are missing
        """
        logger.info(
            "Creating client for JIRA server",
            jira_url=connection.jira_url,
            authentication_type=connection.authentication_type.value,
        )
        return cls(get_jira_client(connection))

    # Issue CRUD
    @log_jira_errors
    def create_issue(
        self,
        project_key: str,
        issue_type: str,
        summary: str,
        description: str | None = None,
        **fields: Any,
    ) -> dict[str, Any]:
        """Create an issue in a project."""
        params = self._omit_null_parameters(
            project={"key": project_key},
            issuetype={"name": issue_type},
            summary=summary,
            description=description,
            **fields,
        )
        issue = self.client.create_issue(fields=params)
        logger.info("Created JIRA issue", issue_key=issue.key, project=project_key, issue_type=issue_type)
        return issue.raw

    @log_jira_errors
    def get_issue(self, issue_key: str, fields: list[str] | None = None) -> dict[str, Any]:
        """Get an issue."""
        issue = self.client.issue(issue_key, fields=",".join(fields) if fields else None)
        return issue.raw

    @log_jira_errors
    def update_issue(self, issue_key: str, **fields: Any) -> None:
        """Update fields of an issue."""
        issue = self.client.issue(issue_key, fields="summary")
        issue.update(fields=fields)
        logger.info("Updated JIRA issue", issue_key=issue_key, fields=sorted(fields))

    def update_summary_description(self, issue_key: str, summary: str, description: str) -> None:
        """Update the summary and description of an issue."""
        self.update_issue(issue_key, summary=summary, description=description)

    def set_issue_type(self, issue_key: str, issue_type: str) -> None:
        """Change the type of an issue."""
        self.update_issue(issue_key, issuetype={"name": issue_type})

    @log_jira_errors
    def assign_issue(self, issue_key: str, assignee: str | None) -> None:
        """Assign an issue to a user, or unassign it with None."""
        self.client.assign_issue(issue_key, assignee)
        logger.info("Assigned JIRA issue", issue_key=issue_key, assignee=assignee)

    @log_jira_errors
    def transitions(self, issue_key: str) -> list[dict[str, Any]]:
        """List the workflow transitions available on an issue."""
        return list(self.client.transitions(issue_key))

    @log_jira_errors
    def transition_issue(self, issue_key: str, transition_id: str) -> None:
        """Apply a workflow transition to an issue."""
        self.client.transition_issue(issue_key, transition_id)
        logger.info("Transitioned JIRA issue", issue_key=issue_key, transition_id=transition_id)

    @log_jira_errors
    def edit_metadata(self, issue_key: str) -> dict[str, Any]:
        """Get the edit metadata (editable fields) of an issue."""
        return self.client.editmeta(issue_key)

    # Search
    @log_jira_errors
    def search_issues(
        self,
        jql: str,
        fields: list[str],
        validate_query: bool = True,
        limit: int | None = None,
        page_size: int = SEARCH_PAGE_SIZE,
    ) -> list[dict[str, Any]]:
        """Run a JQL search and return every matching issue (or at most `limit`), handling pagination."""
        all_issues: list[dict[str, Any]] = []
        start_at = 0
        while True:
            response: dict[str, Any] = self.client.search_issues(
                jql,
                startAt=start_at,
                maxResults=page_size if limit is None else min(page_size, limit - start_at),
                validate_query=validate_query,
                fields=fields,
                json_result=True,
            )
            issues: list[dict[str, Any]] = response.get("issues", [])
            all_issues.extend(issues)
            start_at += len(issues)
            if limit is not None and start_at >= limit:
                break
            # Servers may cap maxResults below page_size, so a short page is not the last one.
            if not issues or start_at >= response.get("total", 0):
                break
        logger.debug("Searched JIRA issues", jql=jql, issue_count=len(all_issues))
        return all_issues

    # Comment CRUD
    @log_jira_errors
    def add_comment(self, issue_key: str, body: str) -> dict[str, Any]:
        """Add a comment to an issue."""
        comment = self.client.add_comment(issue_key, body)
        logger.info("Added JIRA comment", issue_key=issue_key, comment_id=comment.id)
        return comment.raw

    @log_jira_errors
    def get_comment(self, issue_key: str, comment_id: str) -> dict[str, Any]:
        """Get a comment of an issue."""
        return self.client.comment(issue_key, comment_id).raw

    @log_jira_errors
    def update_comment(self, issue_key: str, comment_id: str, body: str) -> dict[str, Any]:
        """Replace the body of a comment."""
        comment = self.client.comment(issue_key, comment_id)
        comment.update(body=body)
        logger.info("Updated JIRA comment", issue_key=issue_key, comment_id=comment_id)
        return comment.raw

    @log_jira_errors
    def delete_comment(self, issue_key: str, comment_id: str) -> None:
        """Delete a comment."""
        self.client.comment(issue_key, comment_id).delete()
        logger.info("Deleted JIRA comment", issue_key=issue_key, comment_id=comment_id)

    # Users
    @log_jira_errors
    def current_user(self) -> str:
        """Return the identifier used to assign issues to the authenticated user."""
        myself: dict[str, Any] = self.client.myself()
        return myself.get("accountId") or myself["name"]

    # Raw access
    @log_jira_errors
    def request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Perform an arbitrary authenticated REST call and return the decoded JSON."""
        url = f"{self.client.server_url}/rest/api/{DEFAULT_JIRA_API_VERSION}/{path.lstrip('/')}"
        response = self.client._session.request(method, url, **kwargs)
        if not response.content:
            return None
        return response.json()
