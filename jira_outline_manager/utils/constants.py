"""Shared constants used across the application."""

import re

# JIRA Constants
# --------------

DEFAULT_JIRA_API_VERSION = "2"
"""REST API version used for raw authenticated calls."""

ISSUE_KEY_PATTERN = re.compile(r"^([A-Z][A-Z0-9_]*)-(\d+)$")
"""Pattern matching an issue key such as ABC-123."""

COMMENT_ID_SEPARATOR = "/"
"""Separator between the issue key and the comment id in a comment heading ID."""

SEARCH_PAGE_SIZE = 100
"""Number of issues requested per page of a JQL search."""

FULL_ISSUE_FIELDS = [
    "summary",
    "description",
    "status",
    "assignee",
    "reporter",
    "priority",
    "duedate",
    "issuetype",
    "parent",
    "project",
    "comment",
    "timeoriginalestimate",
    "created",
    "updated",
]
"""Fields requested for a full issue fetch. Custom field ids are appended at runtime."""

SHALLOW_ISSUE_FIELDS = ["status", "assignee"]
"""Fields requested for a shallow (status and assignee only) fetch."""

STATUS_CATEGORY_DONE = "done"
"""Status category key JIRA uses for resolved statuses."""

# Custom field display names matched during field discovery
EPIC_LINK_FIELD_NAME = "Epic Link"
SPRINT_FIELD_NAME = "Sprint"
EPIC_NAME_FIELD_NAME = "Epic Name"

# Outline Constants
# -----------------

DEFAULT_OUTLINE_DIR = "outline"
"""Default directory holding one YAML outline file per project."""

OUTLINE_FILE_SUFFIX = ".yaml"

CLOCK_FILE_NAME = ".clock.yaml"
"""File in the outline directory recording the clocked-in heading."""

LOCATOR_PROJECT_SEPARATOR = "::"
"""Separator between the project key and the title path in a heading locator."""

LOCATOR_PATH_SEPARATOR = "/"

# Heading property names
PROPERTY_ID = "ID"
PROPERTY_URL = "URL"
PROPERTY_TYPE = "TYPE"
PROPERTY_ISSUETYPE = "ISSUETYPE"
PROPERTY_CATEGORY = "CATEGORY"
PROPERTY_EFFORT = "EFFORT"
PROPERTY_STATUS = "STATUS"
PROPERTY_ASSIGNEE = "ASSIGNEE"
PROPERTY_REPORTER = "REPORTER"
PROPERTY_CREATED = "CREATED"
PROPERTY_UPDATED = "UPDATED"
PROPERTY_SPRINT = "SPRINT"
PROPERTY_EPIC_NAME = "EPIC_NAME"

# Defaults for the sync configuration
DEFAULT_PRIORITIES = {
    "Highest": "A",
    "High": "B",
    "Medium": "C",
    "Low": "D",
    "Lowest": "E",
}
"""JIRA priority name to heading priority letter."""

DEFAULT_TODO_STATES = {
    "To Do": "TODO",
    "Open": "TODO",
    "Backlog": "TODO",
    "In Progress": "INPROGRESS",
    "In Review": "INPROGRESS",
    "Done": "DONE",
    "Closed": "DONE",
    "Resolved": "DONE",
}
"""JIRA status name to heading TODO keyword."""

DEFAULT_TODO_KEYWORD = "TODO"
DEFAULT_DONE_KEYWORD = "DONE"
DEFAULT_DONE_KEYWORDS = ["DONE"]

DEFAULT_TASK_TYPE_NAME = "Task"
DEFAULT_STORY_TYPE_NAME = "Story"
DEFAULT_EPIC_TYPE_NAME = "Epic"
DEFAULT_SUBTASK_TYPE_NAME = "Sub-task"
