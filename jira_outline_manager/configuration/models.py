"""Models for configuration between CLI arguments, environment variables and the config file."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from jira_outline_manager.utils.constants import (
    DEFAULT_DONE_KEYWORD,
    DEFAULT_DONE_KEYWORDS,
    DEFAULT_EPIC_TYPE_NAME,
    DEFAULT_OUTLINE_DIR,
    DEFAULT_PRIORITIES,
    DEFAULT_STORY_TYPE_NAME,
    DEFAULT_SUBTASK_TYPE_NAME,
    DEFAULT_TASK_TYPE_NAME,
    DEFAULT_TODO_KEYWORD,
    DEFAULT_TODO_STATES,
    STATUS_CATEGORY_DONE,
)


class JiraAuthenticationType(str, Enum):
    """Enum for JIRA authentication types."""

    BASIC = "basic"
    PAT = "pat"


@dataclass
class ConnectionConfig:
    """Connection settings for the JIRA server."""

    jira_url: str
    authentication_type: JiraAuthenticationType
    username: str | None = None
    api_token: str | None = None
    pat_token: str | None = None


@dataclass
class SyncConfig:
    """Settings shared by every sync and query operation.

    Built once per process and passed explicitly to the operations that need it.
    """

    projects: list[str] = field(default_factory=list)
    outline_dir: Path = field(default_factory=lambda: Path(DEFAULT_OUTLINE_DIR))
    jira_url: str = ""
    epic_field: str | None = None
    sprint_field: str | None = None
    epic_name_field: str | None = None
    priorities: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_PRIORITIES))
    todo_states: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_TODO_STATES))
    done_keywords: list[str] = field(default_factory=lambda: list(DEFAULT_DONE_KEYWORDS))
    private_sections: list[str] = field(default_factory=list)
    task_type_name: str = DEFAULT_TASK_TYPE_NAME
    story_type_name: str = DEFAULT_STORY_TYPE_NAME
    epic_type_name: str = DEFAULT_EPIC_TYPE_NAME
    subtask_type_name: str = DEFAULT_SUBTASK_TYPE_NAME

    def custom_fields(self) -> list[str]:
        """Return the configured custom field ids."""
        return [f for f in (self.epic_field, self.sprint_field, self.epic_name_field) if f]

    def todo_for_status(self, status: str | None, status_category: str | None) -> str:
        """Map a JIRA status to a heading TODO keyword."""
        if status is not None and status in self.todo_states:
            return self.todo_states[status]
        if status_category == STATUS_CATEGORY_DONE:
            return self.done_keywords[0] if self.done_keywords else DEFAULT_DONE_KEYWORD
        return DEFAULT_TODO_KEYWORD

    def is_resolved_keyword(self, todo: str | None) -> bool:
        """Return True if the TODO keyword marks a resolved heading."""
        return todo is not None and todo in self.done_keywords

    def priority_letter(self, priority_name: str | None) -> str | None:
        """Map a JIRA priority name to a heading priority letter."""
        if priority_name is None:
            return None
        return self.priorities.get(priority_name)

    def priority_name(self, value: str) -> str:
        """Map a priority letter (or name) to the JIRA priority name."""
        for name, letter in self.priorities.items():
            if value.upper() == letter.upper() or value.lower() == name.lower():
                return name
        raise ValueError(f"Unknown priority {value!r}; expected one of {sorted(self.priorities)} or {sorted(self.priorities.values())}")

    def issue_url(self, issue_key: str) -> str:
        """Return the browse URL of an issue."""
        return f"{self.jira_url.rstrip('/')}/browse/{issue_key}"
