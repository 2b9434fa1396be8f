"""Contains the local-only actions: focusing, clocking and refiling headings."""

import structlog

from jira_outline_manager.outline.abc import OutlineDocumentBase
from jira_outline_manager.schemas.outline import Heading
from jira_outline_manager.synchronize.exceptions import HeadingNotFoundError, NoActiveHeadingError, OutlineActionError
from jira_outline_manager.synchronize.items import require_issue_key

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def focus_issue(document: OutlineDocumentBase, issue_key: str) -> str:
    """Narrow the outline to the subtree of an issue."""
    heading = document.find_heading(issue_key)
    if heading is None:
        raise HeadingNotFoundError(issue_key)
    return document.narrow(heading)


def focus_heading(document: OutlineDocumentBase, locator: str) -> str:
    """Narrow the outline to the subtree of the heading a locator points at."""
    heading = document.resolve(locator)
    if heading is None:
        raise HeadingNotFoundError(locator)
    return document.narrow(heading)


def focus_active(document: OutlineDocumentBase) -> str:
    """Narrow the outline to the clocked-in heading."""
    heading = document.clocked_heading()
    if heading is None:
        raise NoActiveHeadingError("No heading is clocked in")
    return document.narrow(heading)


def clock_in(document: OutlineDocumentBase, heading: Heading) -> None:
    """Make a heading the active one."""
    try:
        document.clock_in(heading)
    except ValueError as exc:
        raise OutlineActionError(str(exc)) from exc
    logger.info("Clocked in", heading_id=heading.id, title=heading.title)


def clock_out(document: OutlineDocumentBase) -> None:
    """Clear the active heading."""
    document.clock_out()
    logger.info("Clocked out")


def refile(document: OutlineDocumentBase, heading: Heading, target: Heading) -> None:
    """Move a heading (with its subtree) under another issue's heading. Nothing is sent to JIRA."""
    target_key = require_issue_key(document, target, "refile under")
    try:
        document.move_heading(heading, target)
    except ValueError as exc:
        raise OutlineActionError(str(exc)) from exc
    logger.info("Refiled heading", title=heading.title, heading_id=heading.id, target=target_key)
