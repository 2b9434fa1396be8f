"""Sets up the authenticated jira client."""

from jira import JIRA

from jira_outline_manager.configuration.models import ConnectionConfig, JiraAuthenticationType


def get_jira_basic_client(jira_url: str, username: str | None, api_token: str | None) -> JIRA:
    """Returns a JIRA client authenticated with a username and API token."""
    if not (username and api_token):
        raise RuntimeError("JIRA basic authentication requires username and api_token in config.")
    return JIRA(server=jira_url, basic_auth=(username, api_token))


def get_jira_pat_client(jira_url: str, pat_token: str | None) -> JIRA:
    """Returns a JIRA client authenticated with a personal access token."""
    if not pat_token:
        raise RuntimeError("JIRA PAT authentication requires pat_token in config.")
    return JIRA(server=jira_url, token_auth=pat_token)


def get_jira_client(connection: ConnectionConfig) -> JIRA:
    """Returns an authenticated JIRA client using either basic or PAT credentials."""
    if connection.authentication_type == JiraAuthenticationType.BASIC:
        return get_jira_basic_client(connection.jira_url, connection.username, connection.api_token)
    elif connection.authentication_type == JiraAuthenticationType.PAT:
        return get_jira_pat_client(connection.jira_url, connection.pat_token)
    raise RuntimeError(f"Unsupported JIRA authentication type: {connection.authentication_type}")
