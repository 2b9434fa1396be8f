"""Contains models used by the synchronization logic."""

from enum import Enum


class ItemKind(str, Enum):
    """Kind of JIRA item a heading mirrors, stored in the TYPE property."""

    ISSUE = "issue"
    PROJECT = "project"
    COMMENT = "comment"


class SyncDecision(Enum):
    """Enum for sync decisions."""

    CREATE = "create"
    UPDATE = "update"
