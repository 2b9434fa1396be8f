"""Contains results of application execution."""

from jira_outline_manager.synchronize.models import SyncDecision


class ProjectSyncResult:
    """Contains results of the reconciliation sweep of one project."""

    def __init__(
        self,
        project_key: str,
        shallow: bool,
        decisions: dict[str, SyncDecision],
        converged_keys: list[str],
        unconfirmed_keys: list[str],
    ) -> None:
        """Initialize the result with the per-issue decisions and the pass 2 outcome."""
        self.project_key = project_key
        self.shallow = shallow
        self.decisions = decisions
        self.converged_keys = converged_keys
        self.unconfirmed_keys = unconfirmed_keys

    @property
    def created_keys(self) -> list[str]:
        """Keys of issues that had no heading before the sweep."""
        return sorted(key for key, decision in self.decisions.items() if decision == SyncDecision.CREATE)

    @property
    def updated_keys(self) -> list[str]:
        """Keys of issues whose existing heading was refreshed."""
        return sorted(key for key, decision in self.decisions.items() if decision == SyncDecision.UPDATE)


class AllProjectsSyncResult:
    """Contains results of the reconciliation sweep for all configured projects."""

    def __init__(self, results: list[ProjectSyncResult]) -> None:
        """Initialize the result with a list of project sweep results."""
        self.results = results
