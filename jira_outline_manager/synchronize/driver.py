"""Wires the JIRA adapter, the outline store and the sync configuration together."""

from dataclasses import dataclass

import structlog

from jira_outline_manager.configuration.models import ConnectionConfig, SyncConfig
from jira_outline_manager.jira.abc import JiraClientBase
from jira_outline_manager.jira.adapter import JiraAdapter
from jira_outline_manager.outline.abc import OutlineDocumentBase
from jira_outline_manager.outline.store import YamlOutlineStore
from jira_outline_manager.schemas.outline import Heading
from jira_outline_manager.synchronize.exceptions import HeadingNotFoundError, NoActiveHeadingError

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


@dataclass
class SyncContext:
    """The collaborators every action runs against."""

    jira: JiraClientBase
    document: OutlineDocumentBase
    config: SyncConfig


def create_outline_store(config: SyncConfig) -> YamlOutlineStore:
    """Open the outline directory named in the sync configuration."""
    logger.debug("Opening outline directory", outline_dir=str(config.outline_dir))
    return YamlOutlineStore(config.outline_dir)


def create_sync_context(connection: ConnectionConfig, config: SyncConfig) -> SyncContext:
    """Create the JIRA adapter and outline store for a run of an action."""
    return SyncContext(jira=JiraAdapter.create(connection), document=create_outline_store(config), config=config)


def target_heading(document: OutlineDocumentBase, locator: str | None) -> Heading:
    """Resolve the heading an action applies to: the located heading, or the clocked-in one."""
    if locator is None:
        heading = document.clocked_heading()
        if heading is None:
            raise NoActiveHeadingError("No heading given and no heading is clocked in")
        return heading
    heading = document.resolve(locator)
    if heading is None:
        raise HeadingNotFoundError(locator)
    return heading
