"""Reconciles configuration between CLI arguments, environment variables and the YAML config file."""

from pathlib import Path

import structlog
from pydantic import ValidationError

from jira_outline_manager.configuration.env import settings
from jira_outline_manager.configuration.exceptions import (
    ConfigurationFileError,
    JiraAuthenticationConfigurationUndefinedError,
    RequiredConfigurationElementError,
)
from jira_outline_manager.configuration.models import ConnectionConfig, JiraAuthenticationType, SyncConfig
from jira_outline_manager.schemas.config_file import ConfigFileModel
from jira_outline_manager.utils.yaml import dump_yaml_to_file, load_yaml_file

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def validate_jira_authentication_configuration(
    jira_username: str | None,
    jira_api_token: str | None,
    jira_pat_token: str | None,
) -> JiraAuthenticationType:
    """Validates the JIRA authentication configuration.

    Args:
        jira_username (str | None): The JIRA username (email on JIRA Cloud).
        jira_api_token (str | None): The JIRA API token paired with the username.
        jira_pat_token (str | None): The JIRA personal access token.

    Raises:
        JiraAuthenticationConfigurationUndefinedError: If neither or both configurations are defined, or basic authentication is incomplete.

    Returns:
        JiraAuthenticationType: The type of JIRA authentication used.
    """
    if jira_pat_token and (jira_username or jira_api_token):
        raise JiraAuthenticationConfigurationUndefinedError(
            "Both PAT and basic authentication configurations are defined. Please use one or the other."
        )

    if jira_pat_token:
        return JiraAuthenticationType.PAT

    if jira_username and jira_api_token:
        return JiraAuthenticationType.BASIC
    elif jira_username or jira_api_token:
        missing_settings: list[dict[str, str]] = []
        if not jira_username:
            missing_settings.append({"name": "JIRA username", "cli_name": "jira_username", "env_name": "JIRA_USERNAME"})
        if not jira_api_token:
            missing_settings.append({"name": "JIRA API token", "cli_name": "jira_api_token", "env_name": "JIRA_API_TOKEN"})
        msg = "Incomplete JIRA basic authentication configuration - missing settings include " + ", ".join(
            f"{setting['name']} (command line option {setting['cli_name']}, environment variable {setting['env_name']})"
            for setting in missing_settings
        )
        raise JiraAuthenticationConfigurationUndefinedError(msg)
    else:
        raise JiraAuthenticationConfigurationUndefinedError(
            "No JIRA authentication configuration provided. Please provide either a PAT or a username and API token."
        )


def reconcile_connection_configuration(
    cli_jira_url: str | None,
    cli_jira_username: str | None,
    cli_jira_api_token: str | None,
    cli_jira_pat_token: str | None,
) -> ConnectionConfig:
    """Reconcile connection settings, preferring CLI values over environment values."""
    jira_url = cli_jira_url or settings.JIRA_URL
    if not jira_url:
        raise RequiredConfigurationElementError(name="JIRA URL", cli_name="jira_url", env_name="JIRA_URL")
    username = cli_jira_username or settings.JIRA_USERNAME
    api_token = cli_jira_api_token or settings.JIRA_API_TOKEN
    pat_token = cli_jira_pat_token or settings.JIRA_PAT_TOKEN
    if cli_jira_pat_token:
        # An explicit PAT on the command line wins over basic credentials from the environment.
        username, api_token = cli_jira_username, cli_jira_api_token
    elif cli_jira_username or cli_jira_api_token:
        pat_token = None
    authentication_type = validate_jira_authentication_configuration(username, api_token, pat_token)
    return ConnectionConfig(
        jira_url=jira_url,
        authentication_type=authentication_type,
        username=username,
        api_token=api_token,
        pat_token=pat_token,
    )


def load_config_file(path: Path) -> ConfigFileModel:
    """Load and validate the YAML configuration file."""
    if not path.exists():
        raise ConfigurationFileError(f"Configuration file not found: {path.absolute()}")
    data = load_yaml_file(path) or {}
    if not isinstance(data, dict):
        raise ConfigurationFileError(f"Configuration file is not a mapping: {path.absolute()}")
    try:
        return ConfigFileModel.model_validate(data)
    except ValidationError as exc:
        logger.error("Configuration file failed validation", path=str(path), errors=exc.errors())
        raise ConfigurationFileError(f"Invalid configuration file {path}: {exc}") from exc


def split_project_list(value: str | None) -> list[str]:
    """Split a comma separated project list."""
    if not value:
        return []
    return [project.strip() for project in value.split(",") if project.strip()]


def reconcile_sync_configuration(
    cli_projects: str | None,
    cli_outline_dir: Path | None,
    cli_config_file: Path | None,
    jira_url: str = "",
) -> SyncConfig:
    """Build the sync configuration from CLI values, environment values and the config file.

    CLI values take precedence over environment values, which take precedence
    over the config file.
    """
    config = SyncConfig(jira_url=jira_url)
    config_file = cli_config_file or settings.JIRA_CONFIG_FILE
    if config_file is not None:
        file_model = load_config_file(config_file)
        for name, value in file_model.model_dump(exclude_none=True).items():
            if name == "outline_dir":
                config.outline_dir = Path(value)
            else:
                setattr(config, name, value)
        logger.debug("Loaded configuration file", path=str(config_file), keys=sorted(file_model.model_dump(exclude_none=True)))

    projects = split_project_list(cli_projects) or split_project_list(settings.JIRA_PROJECTS)
    if projects:
        config.projects = projects

    if cli_outline_dir is not None:
        config.outline_dir = cli_outline_dir
    elif "JIRA_OUTLINE_DIR" in settings.model_fields_set or config_file is None:
        config.outline_dir = settings.JIRA_OUTLINE_DIR
    return config


def save_config_values(path: Path, **values: str | None) -> None:
    """Merge values into the YAML configuration file, creating it if needed."""
    current = load_config_file(path).model_dump(exclude_none=True) if path.exists() else {}
    current.update({k: v for k, v in values.items() if v is not None})
    validated = ConfigFileModel.model_validate(current)
    dump_yaml_to_file(validated.model_dump(exclude_none=True), path)
    logger.info("Saved configuration file", path=str(path), keys=sorted(k for k, v in values.items() if v is not None))
