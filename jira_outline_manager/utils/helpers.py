"""General utility functions and helper classes."""

from datetime import date

from jira_outline_manager.utils.constants import COMMENT_ID_SEPARATOR, ISSUE_KEY_PATTERN


def is_issue_key(value: str) -> bool:
    """Return True if the value looks like an issue key (e.g. ABC-123)."""
    return ISSUE_KEY_PATTERN.match(value) is not None


def project_key_from_issue_key(issue_key: str) -> str:
    """Extract the project key from an issue key ('ABC-123' -> 'ABC')."""
    match = ISSUE_KEY_PATTERN.match(issue_key)
    if match is None:
        raise ValueError(f"Not a valid issue key: {issue_key!r}")
    return match.group(1)


def make_comment_id(issue_key: str, comment_id: str) -> str:
    """Build the heading ID for a comment."""
    return f"{issue_key}{COMMENT_ID_SEPARATOR}{comment_id}"


def split_comment_id(heading_id: str) -> tuple[str, str]:
    """Split a comment heading ID into (issue key, comment id)."""
    issue_key, separator, comment_id = heading_id.partition(COMMENT_ID_SEPARATOR)
    if not separator or not issue_key or not comment_id:
        raise ValueError(f"Not a valid comment heading ID: {heading_id!r}")
    return issue_key, comment_id


def format_effort(seconds: int | None) -> str | None:
    """Render an estimate in seconds as H:MM."""
    if seconds is None:
        return None
    minutes = seconds // 60
    return f"{minutes // 60}:{minutes % 60:02d}"


def parse_deadline(value: str | None) -> date | None:
    """Parse an ISO date (YYYY-MM-DD); empty values clear the deadline."""
    if not value:
        return None
    return date.fromisoformat(value[:10])


def jql_quote(value: str) -> str:
    """Quote a value for use inside a JQL string."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def jql_key_list(keys: list[str]) -> str:
    """Render a list of issue keys for a JQL 'key in (...)' clause."""
    return ", ".join(sorted(keys))
