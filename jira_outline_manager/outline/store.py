"""YAML-backed outline document: one outline file per JIRA project.

Each project lives in `<outline_dir>/<PROJECT>.yaml`. Files are loaded lazily on
first access, modified in memory and written back by `save()`. Heading bodies
are Markdown; a body may contain `#`-style sections, and sections named in
`exclude_titles` can be left out when the body is read for pushing.
"""

from pathlib import Path
from typing import Iterator

import structlog
from pydantic import ValidationError

from jira_outline_manager.markup.sections import split_body_sections
from jira_outline_manager.outline.abc import OutlineDocumentBase
from jira_outline_manager.outline.exceptions import OutlineFileError
from jira_outline_manager.schemas.outline import ClockState, Heading, OutlineFile
from jira_outline_manager.utils.constants import (
    CLOCK_FILE_NAME,
    COMMENT_ID_SEPARATOR,
    LOCATOR_PATH_SEPARATOR,
    LOCATOR_PROJECT_SEPARATOR,
    OUTLINE_FILE_SUFFIX,
    PROPERTY_ID,
)
from jira_outline_manager.utils.helpers import is_issue_key, project_key_from_issue_key
from jira_outline_manager.utils.templates import construct_jinja2_template_from_file, render_template
from jira_outline_manager.utils.yaml import dump_yaml_to_file, load_yaml_file

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


class YamlOutlineStore(OutlineDocumentBase):
    """Outline document stored as one YAML file per project."""

    def __init__(self, outline_dir: Path) -> None:
        """Initialize the store rooted at a directory of outline files."""
        self.outline_dir = outline_dir
        self._files: dict[str, OutlineFile] = {}
        self._snapshots: dict[str, dict] = {}
        self._clock: ClockState | None = None
        self._clock_dirty = False

    # Loading
    def _path_for(self, project_key: str) -> Path:
        return self.outline_dir / f"{project_key}{OUTLINE_FILE_SUFFIX}"

    def _outline(self, project_key: str) -> OutlineFile:
        if project_key not in self._files:
            path = self._path_for(project_key)
            if path.exists():
                data = load_yaml_file(path) or {}
                try:
                    self._files[project_key] = OutlineFile.model_validate(data)
                except ValidationError as exc:
                    logger.error("Outline file failed validation", path=str(path), errors=exc.errors())
                    raise OutlineFileError(path, exc.errors()) from exc
                logger.debug("Loaded outline file", path=str(path), project=project_key)
            else:
                self._files[project_key] = OutlineFile()
            self._snapshots[project_key] = self._dump(project_key)
        return self._files[project_key]

    def _dump(self, project_key: str) -> dict:
        return self._files[project_key].model_dump(mode="json", exclude_defaults=True)

    def known_projects(self) -> list[str]:
        """Return the project keys that have an outline file or are loaded."""
        on_disk = {p.stem for p in self.outline_dir.glob(f"*{OUTLINE_FILE_SUFFIX}") if not p.name.startswith(".")} if self.outline_dir.exists() else set()
        return sorted(on_disk | set(self._files))

    def _walk(self, project_key: str) -> Iterator[tuple[Heading, Heading | None, list[Heading]]]:
        """Yield (heading, parent, sibling list) for every heading of a project."""
        stack: list[tuple[list[Heading], Heading | None]] = [(self._outline(project_key).headings, None)]
        while stack:
            siblings, parent = stack.pop()
            for heading in siblings:
                yield heading, parent, siblings
            for heading in reversed(siblings):
                if heading.children:
                    stack.append((heading.children, heading))

    def _locate(self, heading: Heading) -> tuple[str, Heading | None, list[Heading]]:
        for project_key in self.known_projects():
            for candidate, parent, siblings in self._walk(project_key):
                if candidate is heading:
                    return project_key, parent, siblings
        raise ValueError(f"Heading {heading.title!r} is not part of this outline")

    def _candidate_projects(self, heading_id: str) -> list[str]:
        """Project files to search for an ID, most likely first.

        Issue headings can be nested under a parent or epic from another
        project, or refiled there, so every other file is searched after the
        one named by the key.
        """
        issue_part = heading_id.split(COMMENT_ID_SEPARATOR, 1)[0]
        if is_issue_key(issue_part):
            first = project_key_from_issue_key(issue_part)
        elif (self.outline_dir / f"{heading_id}{OUTLINE_FILE_SUFFIX}").exists() or heading_id in self._files:
            first = heading_id
        else:
            return self.known_projects()
        return [first] + [project_key for project_key in self.known_projects() if project_key != first]

    # Lookup
    def find_heading(self, heading_id: str) -> Heading | None:
        """Find a heading by its ID."""
        for project_key in self._candidate_projects(heading_id):
            for heading, _, _ in self._walk(project_key):
                if heading.id == heading_id:
                    return heading
        return None

    def resolve(self, locator: str) -> Heading | None:
        """Find a heading by ID or by a PROJECT::title/path locator."""
        if LOCATOR_PROJECT_SEPARATOR not in locator:
            return self.find_heading(locator)
        project_key, _, path = locator.partition(LOCATOR_PROJECT_SEPARATOR)
        siblings = self._outline(project_key).headings
        heading: Heading | None = None
        for title in path.split(LOCATOR_PATH_SEPARATOR):
            heading = next((h for h in siblings if h.title == title), None)
            if heading is None:
                return None
            siblings = heading.children
        return heading

    def find_parent(self, heading: Heading) -> Heading | None:
        """Return the parent of a heading, or None for a top-level heading."""
        _, parent, _ = self._locate(heading)
        return parent

    def next_sibling(self, heading: Heading) -> Heading | None:
        """Return the heading following this one at the same level, if any."""
        _, _, siblings = self._locate(heading)
        index = next(i for i, h in enumerate(siblings) if h is heading)
        if index + 1 < len(siblings):
            return siblings[index + 1]
        return None

    def project_of(self, heading: Heading) -> str:
        """Return the project key of the outline file holding a heading."""
        project_key, _, _ = self._locate(heading)
        return project_key

    def project_headings(self, project_key: str) -> Iterator[Heading]:
        """Iterate over every heading in a project's outline, depth first."""
        for heading in self._outline(project_key).headings:
            yield from heading.walk()

    # Structure
    def create_heading(self, project_key: str, heading: Heading, parent: Heading | None = None) -> Heading:
        """Append a heading as the last child of a parent, or as a top-level heading of the project."""
        if parent is None:
            self._outline(project_key).headings.append(heading)
        else:
            project_key = self.project_of(parent)
            parent.children.append(heading)
        logger.debug("Created heading", project=project_key, heading_id=heading.id, title=heading.title)
        return heading

    def remove_heading(self, heading: Heading) -> None:
        """Remove a heading and its subtree."""
        project_key, _, siblings = self._locate(heading)
        siblings[:] = [h for h in siblings if h is not heading]
        logger.debug("Removed heading", project=project_key, heading_id=heading.id, title=heading.title)

    def move_heading(self, heading: Heading, new_parent: Heading) -> None:
        """Move a heading and its subtree under a new parent."""
        if any(h is new_parent for h in heading.walk()):
            raise ValueError(f"Cannot move heading {heading.title!r} under its own subtree")
        self.remove_heading(heading)
        new_parent.children.append(heading)

    # Content
    def get_property(self, heading: Heading, name: str) -> str | None:
        """Read a heading property. The ID property is the heading ID."""
        if name == PROPERTY_ID:
            return heading.id
        return heading.properties.get(name)

    def set_property(self, heading: Heading, name: str, value: str | None) -> None:
        """Write a heading property; None removes it."""
        if name == PROPERTY_ID:
            heading.id = value
            return
        if value is None:
            heading.properties.pop(name, None)
            return
        heading.properties[name] = value

    def get_body(self, heading: Heading, exclude_titles: list[str] | None = None) -> str:
        """Return the heading body, leaving out the named subheadings."""
        if not exclude_titles:
            return heading.body.strip("\n")
        kept, _ = split_body_sections(heading.body, exclude_titles)
        return kept

    def set_body(self, heading: Heading, body: str) -> None:
        """Replace the heading body."""
        heading.body = body

    # Focus
    def _clock_state(self) -> ClockState:
        if self._clock is None:
            path = self.outline_dir / CLOCK_FILE_NAME
            self._clock = ClockState.model_validate(load_yaml_file(path) or {}) if path.exists() else ClockState()
        return self._clock

    def clocked_heading(self) -> Heading | None:
        """Return the currently clocked-in heading."""
        heading_id = self._clock_state().heading_id
        if heading_id is None:
            return None
        return self.find_heading(heading_id)

    def clock_in(self, heading: Heading) -> None:
        """Mark a heading as the currently active one."""
        if heading.id is None:
            raise ValueError(f"Heading {heading.title!r} has no ID and cannot be clocked in")
        self._clock_state().heading_id = heading.id
        self._clock_dirty = True

    def clock_out(self) -> None:
        """Clear the currently active heading."""
        self._clock_state().heading_id = None
        self._clock_dirty = True

    def narrow(self, heading: Heading) -> str:
        """Return a rendered view restricted to a heading's subtree."""
        template = construct_jinja2_template_from_file("subtree.j2")
        return render_template(template, headings=[heading])

    def widen(self, project_key: str) -> str:
        """Return a rendered view of a whole project outline."""
        template = construct_jinja2_template_from_file("subtree.j2")
        return render_template(template, headings=self._outline(project_key).headings)

    # Persistence
    def save(self) -> None:
        """Write every modified outline back to storage."""
        for project_key in sorted(self._files):
            data = self._dump(project_key)
            if data == self._snapshots.get(project_key):
                continue
            path = self._path_for(project_key)
            dump_yaml_to_file(data, path)
            self._snapshots[project_key] = data
            logger.info("Saved outline file", path=str(path), project=project_key)
        if self._clock_dirty and self._clock is not None:
            dump_yaml_to_file(self._clock.model_dump(mode="json"), self.outline_dir / CLOCK_FILE_NAME)
            self._clock_dirty = False
