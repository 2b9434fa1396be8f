"""Base ABC for outline documents."""

from abc import ABC, abstractmethod
from typing import Iterator

from jira_outline_manager.schemas.outline import Heading


class OutlineDocumentBase(ABC):
    """Base ABC for outline documents mirroring JIRA projects."""

    # Lookup
    @abstractmethod
    def find_heading(self, heading_id: str) -> Heading | None:
        """Find a heading by its ID."""
        pass

    @abstractmethod
    def resolve(self, locator: str) -> Heading | None:
        """Find a heading by ID or by a PROJECT::title/path locator."""
        pass

    @abstractmethod
    def find_parent(self, heading: Heading) -> Heading | None:
        """Return the parent of a heading, or None for a top-level heading."""
        pass

    @abstractmethod
    def next_sibling(self, heading: Heading) -> Heading | None:
        """Return the heading following this one at the same level, if any."""
        pass

    @abstractmethod
    def known_projects(self) -> list[str]:
        """Return the keys of every project with an outline."""
        pass

    @abstractmethod
    def project_headings(self, project_key: str) -> Iterator[Heading]:
        """Iterate over every heading in a project's outline, depth first."""
        pass

    # Structure
    @abstractmethod
    def create_heading(self, project_key: str, heading: Heading, parent: Heading | None = None) -> Heading:
        """Append a heading as the last child of a parent, or as a top-level heading of the project."""
        pass

    @abstractmethod
    def remove_heading(self, heading: Heading) -> None:
        """Remove a heading and its subtree."""
        pass

    @abstractmethod
    def move_heading(self, heading: Heading, new_parent: Heading) -> None:
        """Move a heading and its subtree under a new parent."""
        pass

    # Content
    @abstractmethod
    def get_property(self, heading: Heading, name: str) -> str | None:
        """Read a heading property."""
        pass

    @abstractmethod
    def set_property(self, heading: Heading, name: str, value: str | None) -> None:
        """Write a heading property; None removes it."""
        pass

    @abstractmethod
    def get_body(self, heading: Heading, exclude_titles: list[str] | None = None) -> str:
        """Return the heading body, leaving out the named subheadings."""
        pass

    @abstractmethod
    def set_body(self, heading: Heading, body: str) -> None:
        """Replace the heading body."""
        pass

    # Focus
    @abstractmethod
    def clocked_heading(self) -> Heading | None:
        """Return the currently clocked-in heading."""
        pass

    @abstractmethod
    def clock_in(self, heading: Heading) -> None:
        """Mark a heading as the currently active one."""
        pass

    @abstractmethod
    def clock_out(self) -> None:
        """Clear the currently active heading."""
        pass

    @abstractmethod
    def narrow(self, heading: Heading) -> str:
        """Return a rendered view restricted to a heading's subtree."""
        pass

    @abstractmethod
    def widen(self, project_key: str) -> str:
        """Return a rendered view of a whole project outline."""
        pass

    # Persistence
    @abstractmethod
    def save(self) -> None:
        """Write every modified outline back to storage."""
        pass
