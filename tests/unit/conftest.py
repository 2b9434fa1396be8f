"""Fixtures for unit tests."""

import re
from pathlib import Path
from typing import Any, Generator

import pytest
import structlog

from jira_outline_manager.configuration.models import SyncConfig
from jira_outline_manager.jira.abc import JiraClientBase
from jira_outline_manager.outline.store import YamlOutlineStore

PROJECT_JQL = re.compile(r'^project = "(?P<project>[^"]+)" AND resolution = Unresolved$')
KEYS_JQL = re.compile(r"^key in \((?P<keys>[^)]*)\) AND resolution is not EMPTY$")
ISSUETYPE_JQL = re.compile(r'^project = "(?P<project>[^"]+)" AND issuetype (?P<op>=|!=) "(?P<type>[^"]+)"$')

RESOLVED_STATUSES = {"Done", "Closed", "Resolved"}


class FakeJira(JiraClientBase):
    """In-memory JIRA server understanding the JQL the sync code sends."""

    def __init__(self) -> None:
        self.issues: dict[str, dict[str, Any]] = {}
        self.resolved: set[str] = set()
        self.comments: dict[str, list[dict[str, Any]]] = {}
        self.edit_metadata_by_key: dict[str, dict[str, Any]] = {}
        self.searches: list[dict[str, Any]] = []
        self.calls: list[tuple[Any, ...]] = []
        self._next_comment_id = 10000
        self._next_issue_number: dict[str, int] = {}

    # Seeding
    def add_issue(
        self,
        key: str,
        summary: str,
        status: str = "To Do",
        issue_type: str = "Task",
        description: str | None = None,
        assignee: str | None = None,
        parent: str | None = None,
        priority: str | None = None,
    ) -> dict[str, Any]:
        project = key.split("-")[0]
        number = int(key.split("-")[1])
        self._next_issue_number[project] = max(self._next_issue_number.get(project, 0), number)
        fields: dict[str, Any] = {
            "summary": summary,
            "description": description,
            "issuetype": {"name": issue_type, "subtask": issue_type == "Sub-task"},
            "project": {"key": project},
            "assignee": {"displayName": assignee} if assignee else None,
            "priority": {"name": priority} if priority else None,
            "duedate": None,
            "created": "2024-01-01T10:00:00.000+0000",
            "updated": "2024-01-02T10:00:00.000+0000",
        }
        self.issues[key] = {"key": key, "self": f"https://jira.example.com/rest/api/2/issue/{key}", "fields": fields}
        self.comments.setdefault(key, [])
        self.set_status(key, status)
        if parent is not None:
            self._set_parent(key, parent)
        return self.issues[key]

    def set_status(self, key: str, status: str) -> None:
        category = "done" if status in RESOLVED_STATUSES else "new"
        self.issues[key]["fields"]["status"] = {"name": status, "statusCategory": {"key": category}}
        if status in RESOLVED_STATUSES:
            self.resolved.add(key)
        else:
            self.resolved.discard(key)

    def _set_parent(self, key: str, parent: str | None) -> None:
        if parent is None:
            self.issues[key]["fields"]["parent"] = None
            return
        parent_type = self.issues[parent]["fields"]["issuetype"]["name"] if parent in self.issues else "Story"
        self.issues[key]["fields"]["parent"] = {"key": parent, "fields": {"issuetype": {"name": parent_type}}}

    def _view(self, key: str, fields: list[str] | None) -> dict[str, Any]:
        raw = self.issues[key]
        all_fields = dict(raw["fields"])
        all_fields["comment"] = {"comments": [dict(c) for c in self.comments[key]]}
        if fields:
            all_fields = {name: value for name, value in all_fields.items() if name in fields}
        return {"key": key, "self": raw["self"], "fields": all_fields}

    # Issue CRUD
    def create_issue(self, project_key: str, issue_type: str, summary: str, description: str | None = None, **fields: Any) -> dict[str, Any]:
        number = self._next_issue_number.get(project_key, 0) + 1
        key = f"{project_key}-{number}"
        parent = fields.get("parent", {}).get("key") if fields.get("parent") else None
        self.calls.append(("create_issue", project_key, issue_type, summary, description, fields))
        self.add_issue(key, summary, issue_type=issue_type, description=description, parent=parent)
        return {"key": key, "id": str(number), "self": self.issues[key]["self"]}

    def get_issue(self, issue_key: str, fields: list[str] | None = None) -> dict[str, Any]:
        return self._view(issue_key, fields)

    def update_issue(self, issue_key: str, **fields: Any) -> None:
        self.calls.append(("update_issue", issue_key, fields))
        for name, value in fields.items():
            if name == "parent":
                self._set_parent(issue_key, value["key"] if value else None)
            else:
                self.issues[issue_key]["fields"][name] = value

    def update_summary_description(self, issue_key: str, summary: str, description: str) -> None:
        self.update_issue(issue_key, summary=summary, description=description)

    def set_issue_type(self, issue_key: str, issue_type: str) -> None:
        self.update_issue(issue_key, issuetype={"name": issue_type, "subtask": issue_type == "Sub-task"})

    def assign_issue(self, issue_key: str, assignee: str | None) -> None:
        self.calls.append(("assign_issue", issue_key, assignee))
        self.issues[issue_key]["fields"]["assignee"] = {"displayName": assignee} if assignee else None

    def transitions(self, issue_key: str) -> list[dict[str, Any]]:
        return [
            {"id": "11", "name": "Start Progress", "to": {"name": "In Progress"}},
            {"id": "31", "name": "Close", "to": {"name": "Done"}},
        ]

    def transition_issue(self, issue_key: str, transition_id: str) -> None:
        self.calls.append(("transition_issue", issue_key, transition_id))
        target = next(t["to"]["name"] for t in self.transitions(issue_key) if t["id"] == transition_id)
        self.set_status(issue_key, target)

    def edit_metadata(self, issue_key: str) -> dict[str, Any]:
        return self.edit_metadata_by_key.get(issue_key, {"fields": {}})

    # Search
    def search_issues(self, jql: str, fields: list[str], validate_query: bool = True, limit: int | None = None) -> list[dict[str, Any]]:
        self.searches.append({"jql": jql, "fields": list(fields), "validate_query": validate_query})
        if match := PROJECT_JQL.match(jql):
            keys = [k for k in self.issues if k.startswith(match.group("project") + "-") and k not in self.resolved]
        elif match := KEYS_JQL.match(jql):
            wanted = [k.strip() for k in match.group("keys").split(",")]
            if validate_query and any(k not in self.issues for k in wanted):
                raise AssertionError(f"JQL validation would reject unknown keys in {jql!r}")
            keys = [k for k in wanted if k in self.issues and k in self.resolved]
        elif match := ISSUETYPE_JQL.match(jql):
            in_project = [k for k in self.issues if k.startswith(match.group("project") + "-")]
            is_type = [k for k in in_project if self.issues[k]["fields"]["issuetype"]["name"] == match.group("type")]
            keys = is_type if match.group("op") == "=" else [k for k in in_project if k not in is_type]
        else:
            raise AssertionError(f"Unexpected JQL: {jql!r}")
        keys = sorted(keys, key=lambda k: int(k.split("-")[1]))
        if limit is not None:
            keys = keys[:limit]
        return [self._view(k, fields) for k in keys]

    # Comment CRUD
    def add_comment(self, issue_key: str, body: str) -> dict[str, Any]:
        self._next_comment_id += 1
        comment = {
            "id": str(self._next_comment_id),
            "body": body,
            "author": {"displayName": "Alice"},
            "created": "2024-01-03T10:00:00.000+0000",
            "updated": "2024-01-03T10:00:00.000+0000",
        }
        self.comments[issue_key].append(comment)
        return dict(comment)

    def get_comment(self, issue_key: str, comment_id: str) -> dict[str, Any]:
        return dict(next(c for c in self.comments[issue_key] if c["id"] == comment_id))

    def update_comment(self, issue_key: str, comment_id: str, body: str) -> dict[str, Any]:
        comment = next(c for c in self.comments[issue_key] if c["id"] == comment_id)
        comment["body"] = body
        return dict(comment)

    def delete_comment(self, issue_key: str, comment_id: str) -> None:
        self.calls.append(("delete_comment", issue_key, comment_id))
        self.comments[issue_key] = [c for c in self.comments[issue_key] if c["id"] != comment_id]

    # Users
    def current_user(self) -> str:
        return "alice-account-id"

    def request(self, method: str, path: str, **kwargs: Any) -> Any:
        raise AssertionError("Raw REST calls are not expected in unit tests")


@pytest.fixture(autouse=True)
def configure_structlog_for_caplog() -> Generator[None, None, None]:
    """Configure structlog for use with caplog."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture
def fake_jira() -> FakeJira:
    """An empty in-memory JIRA server."""
    return FakeJira()


@pytest.fixture
def outline_dir(tmp_path: Path) -> Path:
    """Directory for the outline files of a test."""
    return tmp_path / "outline"


@pytest.fixture
def sync_config(outline_dir: Path) -> SyncConfig:
    """Sync configuration for the PROJ and ABC test projects."""
    return SyncConfig(projects=["PROJ"], outline_dir=outline_dir, jira_url="https://jira.example.com")


@pytest.fixture
def store(outline_dir: Path) -> YamlOutlineStore:
    """Outline store over the test outline directory."""
    return YamlOutlineStore(outline_dir)
