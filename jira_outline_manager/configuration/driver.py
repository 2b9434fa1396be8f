"""Driver for configuration reconciliation for the CLI entry point."""

from pathlib import Path

from jira_outline_manager.configuration import reconcile
from jira_outline_manager.configuration.models import ConnectionConfig, SyncConfig


def get_connection_config(
    jira_url: str | None = None,
    jira_username: str | None = None,
    jira_api_token: str | None = None,
    jira_pat_token: str | None = None,
) -> ConnectionConfig:
    """Get the reconciled JIRA connection configuration."""
    return reconcile.reconcile_connection_configuration(
        cli_jira_url=jira_url,
        cli_jira_username=jira_username,
        cli_jira_api_token=jira_api_token,
        cli_jira_pat_token=jira_pat_token,
    )


def build_sync_config(
    projects: str | None = None,
    outline_dir: Path | None = None,
    config_file: Path | None = None,
    jira_url: str | None = None,
) -> SyncConfig:
    """Get the reconciled sync configuration, built once per process."""
    return reconcile.reconcile_sync_configuration(
        cli_projects=projects,
        cli_outline_dir=outline_dir,
        cli_config_file=config_file,
        jira_url=jira_url or reconcile.settings.JIRA_URL or "",
    )
