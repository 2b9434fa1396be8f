"""Unit tests for the single-field setters."""

from datetime import date

import pytest

from jira_outline_manager.configuration.models import SyncConfig
from jira_outline_manager.outline.store import YamlOutlineStore
from jira_outline_manager.schemas.outline import Heading
from jira_outline_manager.synchronize.exceptions import OutlineActionError, UnsupportedItemKindError
from jira_outline_manager.synchronize.fields import (
    set_assignee,
    set_deadline,
    set_epic,
    set_issue_type,
    set_priority,
    set_status,
)
from jira_outline_manager.synchronize.items import pull_issue


def _mirrored(fake_jira, store: YamlOutlineStore, sync_config: SyncConfig, key: str = "PROJ-2", **kwargs) -> Heading:
    fake_jira.add_issue(key, kwargs.pop("summary", "Issue"), **kwargs)
    pull_issue(fake_jira, store, sync_config, key)
    heading = store.find_heading(key)
    assert heading is not None
    return heading


@pytest.mark.parametrize(
    "value, expected_name, expected_letter",
    [
        pytest.param("B", "High", "B", id="letter"),
        pytest.param("a", "Highest", "A", id="lowercase letter"),
        pytest.param("low", "Low", "D", id="priority name"),
    ],
)
def test_set_priority(fake_jira, store: YamlOutlineStore, sync_config: SyncConfig, value: str, expected_name: str, expected_letter: str) -> None:
    """Test that a priority letter or name is sent as the JIRA priority name."""
    # Given
    heading = _mirrored(fake_jira, store, sync_config)

    # When
    set_priority(fake_jira, store, sync_config, heading, value)

    # Then
    assert ("update_issue", "PROJ-2", {"priority": {"name": expected_name}}) in fake_jira.calls
    assert heading.priority == expected_letter


def test_set_priority_rejects_unknown_value(fake_jira, store: YamlOutlineStore, sync_config: SyncConfig) -> None:
    """Test that an unknown priority raises OutlineActionError without calling JIRA."""
    # Given
    heading = _mirrored(fake_jira, store, sync_config)

    # When/Then
    with pytest.raises(OutlineActionError):
        set_priority(fake_jira, store, sync_config, heading, "Z")
    assert fake_jira.calls == []


def test_set_deadline_and_clear(fake_jira, store: YamlOutlineStore, sync_config: SyncConfig) -> None:
    """Test that a deadline is sent as an ISO date and None clears it."""
    # Given
    heading = _mirrored(fake_jira, store, sync_config)

    # When
    set_deadline(fake_jira, store, sync_config, heading, date(2024, 5, 1))

    # Then
    assert fake_jira.issues["PROJ-2"]["fields"]["duedate"] == "2024-05-01"
    assert heading.deadline == date(2024, 5, 1)

    # When
    set_deadline(fake_jira, store, sync_config, heading, None)

    # Then
    assert fake_jira.issues["PROJ-2"]["fields"]["duedate"] is None
    assert heading.deadline is None


@pytest.mark.parametrize(
    "assignee, expected_call, expected_property",
    [
        pytest.param("me", "alice-account-id", "alice-account-id", id="self"),
        pytest.param("bob", "bob", "bob", id="named user"),
        pytest.param(None, None, None, id="unassign"),
    ],
)
def test_set_assignee(
    fake_jira,
    store: YamlOutlineStore,
    sync_config: SyncConfig,
    assignee: str | None,
    expected_call: str | None,
    expected_property: str | None,
) -> None:
    """Test assigning to self, to a named user, and to nobody."""
    # Given
    heading = _mirrored(fake_jira, store, sync_config, assignee="Carol")

    # When
    set_assignee(fake_jira, store, sync_config, heading, assignee)

    # Then
    assert ("assign_issue", "PROJ-2", expected_call) in fake_jira.calls
    assert heading.properties.get("ASSIGNEE") == expected_property


def test_set_issue_type(fake_jira, store: YamlOutlineStore, sync_config: SyncConfig) -> None:
    """Test that the issue type is changed and mirrored in ISSUETYPE."""
    # Given
    heading = _mirrored(fake_jira, store, sync_config)

    # When
    set_issue_type(fake_jira, store, sync_config, heading, "Bug")

    # Then
    assert heading.properties["ISSUETYPE"] == "Bug"


def test_set_status_through_matching_transition(fake_jira, store: YamlOutlineStore, sync_config: SyncConfig) -> None:
    """Test that a status is reached through the transition whose target matches, ignoring case."""
    # Given
    heading = _mirrored(fake_jira, store, sync_config)

    # When
    set_status(fake_jira, store, sync_config, heading, "done")

    # Then
    assert ("transition_issue", "PROJ-2", "31") in fake_jira.calls
    assert heading.todo == "DONE"
    assert heading.properties["STATUS"] == "Done"


def test_set_status_by_transition_name(fake_jira, store: YamlOutlineStore, sync_config: SyncConfig) -> None:
    """Test that a transition can also be picked by its own name."""
    # Given
    heading = _mirrored(fake_jira, store, sync_config)

    # When
    set_status(fake_jira, store, sync_config, heading, "Start Progress")

    # Then
    assert heading.todo == "INPROGRESS"


def test_set_status_without_transition_lists_available(fake_jira, store: YamlOutlineStore, sync_config: SyncConfig) -> None:
    """Test that an unreachable status raises OutlineActionError naming the available transitions."""
    # Given
    heading = _mirrored(fake_jira, store, sync_config)

    # When/Then
    with pytest.raises(OutlineActionError) as exc_info:
        set_status(fake_jira, store, sync_config, heading, "Blocked")
    assert "Close, Start Progress" in str(exc_info.value)
    assert heading.todo == "TODO"


@pytest.mark.parametrize(
    "epic_field",
    [
        pytest.param(None, id="issue parent"),
        pytest.param("customfield_10014", id="epic link field"),
    ],
)
def test_set_epic_moves_heading_under_epic(fake_jira, store: YamlOutlineStore, sync_config: SyncConfig, epic_field: str | None) -> None:
    """Test that linking an epic moves the issue heading under the epic heading."""
    # Given
    sync_config.epic_field = epic_field
    epic = _mirrored(fake_jira, store, sync_config, key="PROJ-1", summary="Epic", issue_type="Epic")
    heading = _mirrored(fake_jira, store, sync_config)
    assert store.find_parent(heading) is not epic

    # When
    set_epic(fake_jira, store, sync_config, heading, "PROJ-1")

    # Then
    assert store.find_parent(heading) is epic
    update = next(call for call in fake_jira.calls if call[0] == "update_issue")
    if epic_field:
        assert update == ("update_issue", "PROJ-2", {"customfield_10014": "PROJ-1"})
    else:
        assert update == ("update_issue", "PROJ-2", {"parent": {"key": "PROJ-1"}})


def test_set_epic_none_unlinks(fake_jira, store: YamlOutlineStore, sync_config: SyncConfig) -> None:
    """Test that None clears the epic of an issue."""
    # Given
    heading = _mirrored(fake_jira, store, sync_config)

    # When
    set_epic(fake_jira, store, sync_config, heading, None)

    # Then
    assert ("update_issue", "PROJ-2", {"parent": None}) in fake_jira.calls


@pytest.mark.parametrize(
    "setter, value",
    [
        pytest.param(set_issue_type, "Bug", id="issue type"),
        pytest.param(set_priority, "A", id="priority"),
        pytest.param(set_status, "Done", id="status"),
    ],
)
def test_setters_reject_comment_heading(fake_jira, store: YamlOutlineStore, sync_config: SyncConfig, setter, value: str) -> None:
    """Test that the field setters only accept issue headings."""
    # Given
    issue_heading = _mirrored(fake_jira, store, sync_config)
    comment = store.create_heading("PROJ", Heading(title="Comment", id="PROJ-2/1", properties={"TYPE": "comment"}), parent=issue_heading)

    # When/Then
    with pytest.raises(UnsupportedItemKindError):
        setter(fake_jira, store, sync_config, comment, value)
    assert fake_jira.calls == []
