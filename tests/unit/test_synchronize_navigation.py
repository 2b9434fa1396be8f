"""Unit tests for focusing, clocking and refiling headings."""

import pytest

from jira_outline_manager.outline.store import YamlOutlineStore
from jira_outline_manager.schemas.outline import Heading
from jira_outline_manager.synchronize.exceptions import (
    HeadingNotFoundError,
    NoActiveHeadingError,
    OutlineActionError,
    UnsupportedItemKindError,
)
from jira_outline_manager.synchronize.navigation import clock_in, clock_out, focus_active, focus_heading, focus_issue, refile


def _outline(store: YamlOutlineStore) -> tuple[Heading, Heading, Heading]:
    project = store.create_heading("PROJ", Heading(title="PROJ", id="PROJ", properties={"TYPE": "project"}))
    story = store.create_heading("PROJ", Heading(title="Story", id="PROJ-1", todo="TODO", properties={"TYPE": "issue"}), parent=project)
    task = store.create_heading("PROJ", Heading(title="Task", id="PROJ-2", todo="TODO", properties={"TYPE": "issue"}), parent=project)
    return project, story, task


def test_focus_issue_and_heading(store: YamlOutlineStore) -> None:
    """Test that focusing by key and by locator render the same subtree."""
    # Given
    _outline(store)

    # When
    by_key = focus_issue(store, "PROJ-1")
    by_locator = focus_heading(store, "PROJ::PROJ/Story")

    # Then
    assert by_key == by_locator
    assert by_key.startswith("* TODO Story\n")
    assert "Task" not in by_key


@pytest.mark.parametrize(
    "focus, target",
    [
        pytest.param(focus_issue, "PROJ-404", id="unknown key"),
        pytest.param(focus_heading, "PROJ::PROJ/Nope", id="unknown locator"),
    ],
)
def test_focus_unknown_target(store: YamlOutlineStore, focus, target: str) -> None:
    """Test that focusing on a missing heading raises HeadingNotFoundError."""
    # Given
    _outline(store)

    # When/Then
    with pytest.raises(HeadingNotFoundError):
        focus(store, target)


def test_clock_in_focus_active_and_clock_out(store: YamlOutlineStore) -> None:
    """Test that the clocked-in heading is the active one until clocked out."""
    # Given
    _, story, _ = _outline(store)

    # When
    clock_in(store, story)

    # Then
    assert focus_active(store).startswith("* TODO Story\n")

    # When
    clock_out(store)

    # Then
    with pytest.raises(NoActiveHeadingError):
        focus_active(store)


def test_clock_in_requires_heading_id(store: YamlOutlineStore) -> None:
    """Test that a heading without an ID cannot be clocked in."""
    # Given
    _, story, _ = _outline(store)
    note = store.create_heading("PROJ", Heading(title="Note"), parent=story)

    # When/Then
    with pytest.raises(OutlineActionError):
        clock_in(store, note)


def test_refile_moves_subtree_under_issue(fake_jira, store: YamlOutlineStore) -> None:
    """Test that refiling moves a heading with its children and sends nothing to JIRA."""
    # Given
    _, story, task = _outline(store)
    child = store.create_heading("PROJ", Heading(title="Child"), parent=task)

    # When
    refile(store, task, story)

    # Then
    assert store.find_parent(task) is story
    assert store.find_parent(child) is task
    assert fake_jira.calls == []


def test_refile_rejects_non_issue_target_and_own_subtree(store: YamlOutlineStore) -> None:
    """Test that the refile target must be an issue heading outside the moved subtree."""
    # Given
    project, story, _ = _outline(store)
    sub_issue = store.create_heading("PROJ", Heading(title="Sub", id="PROJ-3", properties={"TYPE": "issue"}), parent=story)

    # When/Then
    with pytest.raises(UnsupportedItemKindError):
        refile(store, story, project)
    with pytest.raises(OutlineActionError):
        refile(store, story, sub_issue)
