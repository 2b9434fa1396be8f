"""Base ABC for JIRA clients."""

from abc import ABC, abstractmethod
from typing import Any


class JiraClientBase(ABC):
    """Base ABC for JIRA clients.

    Issue and comment operations return the raw REST records (dictionaries).
    """

    # Issue CRUD
    @abstractmethod
    def create_issue(
        self,
        project_key: str,
        issue_type: str,
        summary: str,
        description: str | None = None,
        **fields: Any,
    ) -> dict[str, Any]:
        """Create an issue in a project."""
        pass

    @abstractmethod
    def get_issue(self, issue_key: str, fields: list[str] | None = None) -> dict[str, Any]:
        """Get an issue."""
        pass

    @abstractmethod
    def update_issue(self, issue_key: str, **fields: Any) -> None:
        """Update fields of an issue."""
        pass

    @abstractmethod
    def update_summary_description(self, issue_key: str, summary: str, description: str) -> None:
        """Update the summary and description of an issue."""
        pass

    @abstractmethod
    def set_issue_type(self, issue_key: str, issue_type: str) -> None:
        """Change the type of an issue."""
        pass

    @abstractmethod
    def assign_issue(self, issue_key: str, assignee: str | None) -> None:
        """Assign an issue to a user, or unassign it with None."""
        pass

    @abstractmethod
    def transitions(self, issue_key: str) -> list[dict[str, Any]]:
        """List the workflow transitions available on an issue."""
        pass

    @abstractmethod
    def transition_issue(self, issue_key: str, transition_id: str) -> None:
        """Apply a workflow transition to an issue."""
        pass

    @abstractmethod
    def edit_metadata(self, issue_key: str) -> dict[str, Any]:
        """Get the edit metadata (editable fields) of an issue."""
        pass

    # Search
    @abstractmethod
    def search_issues(self, jql: str, fields: list[str], validate_query: bool = True, limit: int | None = None) -> list[dict[str, Any]]:
        """Run a JQL search and return every matching issue, or at most `limit` issues."""
        pass

    # Comment CRUD
    @abstractmethod
    def add_comment(self, issue_key: str, body: str) -> dict[str, Any]:
        """Add a comment to an issue."""
        pass

    @abstractmethod
    def get_comment(self, issue_key: str, comment_id: str) -> dict[str, Any]:
        """Get a comment of an issue."""
        pass

    @abstractmethod
    def update_comment(self, issue_key: str, comment_id: str, body: str) -> dict[str, Any]:
        """Replace the body of a comment."""
        pass

    @abstractmethod
    def delete_comment(self, issue_key: str, comment_id: str) -> None:
        """Delete a comment."""
        pass

    # Users
    @abstractmethod
    def current_user(self) -> str:
        """Return the identifier used to assign issues to the authenticated user."""
        pass

    # Raw access
    @abstractmethod
    def request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Perform an arbitrary authenticated REST call and return the decoded JSON."""
        pass
