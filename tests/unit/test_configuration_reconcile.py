"""Unit tests for the configuration.reconcile module."""

from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from jira_outline_manager.configuration.env import Settings
from jira_outline_manager.configuration.exceptions import (
    ConfigurationFileError,
    JiraAuthenticationConfigurationUndefinedError,
    RequiredConfigurationElementError,
)
from jira_outline_manager.configuration.models import JiraAuthenticationType
from jira_outline_manager.configuration.reconcile import (
    load_config_file,
    reconcile_connection_configuration,
    reconcile_sync_configuration,
    save_config_values,
    split_project_list,
    validate_jira_authentication_configuration,
)
from jira_outline_manager.utils.yaml import dump_yaml_to_file, load_yaml_file

SETTINGS_PATH = "jira_outline_manager.configuration.reconcile.settings"


def _settings(**values: Any) -> Settings:
    """Settings as if only the given environment variables were set."""
    return Settings.model_construct(**values)


@pytest.mark.parametrize(
    "username, api_token, pat_token, expected",
    [
        pytest.param(None, None, "pat", JiraAuthenticationType.PAT, id="pat"),
        pytest.param("alice", "token", None, JiraAuthenticationType.BASIC, id="basic"),
    ],
)
def test_validate_authentication(username: str | None, api_token: str | None, pat_token: str | None, expected: JiraAuthenticationType) -> None:
    """Test that a complete PAT or basic configuration is accepted."""
    assert validate_jira_authentication_configuration(username, api_token, pat_token) == expected


@pytest.mark.parametrize(
    "username, api_token, pat_token, message",
    [
        pytest.param("alice", "token", "pat", "Both PAT and basic authentication configurations are defined", id="both"),
        pytest.param("alice", None, None, "JIRA API token (command line option jira_api_token", id="missing token"),
        pytest.param(None, "token", None, "JIRA username (command line option jira_username", id="missing username"),
        pytest.param(None, None, None, "No JIRA authentication configuration provided", id="none"),
    ],
)
def test_validate_authentication_errors(username: str | None, api_token: str | None, pat_token: str | None, message: str) -> None:
    """Test that ambiguous or incomplete authentication configurations are rejected."""
    with pytest.raises(JiraAuthenticationConfigurationUndefinedError) as exc_info:
        validate_jira_authentication_configuration(username, api_token, pat_token)
    assert message in str(exc_info.value)


def test_connection_cli_overrides_environment() -> None:
    """Test that CLI values win, and a CLI PAT replaces basic credentials from the environment."""
    # Given
    env = _settings(JIRA_URL="https://env.example.com", JIRA_USERNAME="env-user", JIRA_API_TOKEN="env-token")

    # When
    with patch(SETTINGS_PATH, env):
        connection = reconcile_connection_configuration("https://cli.example.com", None, None, "cli-pat")

    # Then
    assert connection.jira_url == "https://cli.example.com"
    assert connection.authentication_type == JiraAuthenticationType.PAT
    assert connection.username is None
    assert connection.pat_token == "cli-pat"


def test_connection_cli_basic_replaces_environment_pat() -> None:
    """Test that CLI basic credentials replace a PAT from the environment."""
    # Given
    env = _settings(JIRA_URL="https://env.example.com", JIRA_PAT_TOKEN="env-pat")

    # When
    with patch(SETTINGS_PATH, env):
        connection = reconcile_connection_configuration(None, "alice", "token", None)

    # Then
    assert connection.jira_url == "https://env.example.com"
    assert connection.authentication_type == JiraAuthenticationType.BASIC
    assert connection.pat_token is None


def test_connection_requires_url() -> None:
    """Test that a missing JIRA URL raises RequiredConfigurationElementError."""
    with patch(SETTINGS_PATH, _settings(JIRA_PAT_TOKEN="pat")):
        with pytest.raises(RequiredConfigurationElementError) as exc_info:
            reconcile_connection_configuration(None, None, None, None)
    assert exc_info.value.env_name == "JIRA_URL"


@pytest.mark.parametrize(
    "value, expected",
    [
        pytest.param("PROJ, ABC ,,", ["PROJ", "ABC"], id="spaces and empty items"),
        pytest.param(None, [], id="unset"),
    ],
)
def test_split_project_list(value: str | None, expected: list[str]) -> None:
    """Test splitting a comma separated project list."""
    assert split_project_list(value) == expected


def test_sync_configuration_precedence(tmp_path: Path) -> None:
    """Test that CLI values beat environment values, which beat the config file."""
    # Given
    config_file = tmp_path / "jira-outline.yaml"
    dump_yaml_to_file(
        {"projects": ["FILE"], "outline_dir": "from-file", "epic_field": "customfield_10014", "private_sections": ["Notes"]},
        config_file,
    )

    # When
    with patch(SETTINGS_PATH, _settings(JIRA_PROJECTS="ENV")):
        from_env = reconcile_sync_configuration(None, None, config_file, jira_url="https://jira.example.com")
        from_cli = reconcile_sync_configuration("CLI1,CLI2", tmp_path / "cli", config_file)

    # Then
    assert from_env.projects == ["ENV"]
    assert from_env.outline_dir == Path("from-file")
    assert from_env.epic_field == "customfield_10014"
    assert from_env.private_sections == ["Notes"]
    assert from_env.jira_url == "https://jira.example.com"
    assert from_cli.projects == ["CLI1", "CLI2"]
    assert from_cli.outline_dir == tmp_path / "cli"


def test_sync_configuration_without_file_uses_environment_defaults() -> None:
    """Test that without a config file the environment (or its default) sets the outline directory."""
    with patch(SETTINGS_PATH, _settings(JIRA_PROJECTS="PROJ")):
        config = reconcile_sync_configuration(None, None, None)
    assert config.projects == ["PROJ"]
    assert config.outline_dir == Path("outline")


@pytest.mark.parametrize(
    "content, message",
    [
        pytest.param(None, "not found", id="missing file"),
        pytest.param("- just\n- a list\n", "not a mapping", id="not a mapping"),
        pytest.param("unknown_key: 1\n", "Invalid configuration file", id="unknown key"),
    ],
)
def test_load_config_file_errors(tmp_path: Path, content: str | None, message: str) -> None:
    """Test that unusable configuration files raise ConfigurationFileError."""
    # Given
    path = tmp_path / "jira-outline.yaml"
    if content is not None:
        path.write_text(content, encoding="utf-8")

    # When/Then
    with pytest.raises(ConfigurationFileError) as exc_info:
        load_config_file(path)
    assert message in str(exc_info.value)


def test_save_config_values_merges(tmp_path: Path) -> None:
    """Test that saved values are merged into the existing file and None values are skipped."""
    # Given
    path = tmp_path / "jira-outline.yaml"
    dump_yaml_to_file({"projects": ["PROJ"], "sprint_field": "customfield_1"}, path)

    # When
    save_config_values(path, epic_field="customfield_10014", sprint_field=None)

    # Then
    assert load_yaml_file(path) == {"projects": ["PROJ"], "sprint_field": "customfield_1", "epic_field": "customfield_10014"}
