"""Pydantic schema for the YAML outline file structure."""

from datetime import date

from pydantic import BaseModel, Field


class Heading(BaseModel):
    """Pydantic model for a single outline heading and its subtree."""

    title: str
    id: str | None = None
    todo: str | None = None
    priority: str | None = None
    deadline: date | None = None
    tags: list[str] = Field(default_factory=list)
    properties: dict[str, str] = Field(default_factory=dict)
    body: str = ""
    children: list["Heading"] = Field(default_factory=list)

    def walk(self) -> list["Heading"]:
        """Return this heading followed by every descendant, depth first."""
        headings = [self]
        for child in self.children:
            headings.extend(child.walk())
        return headings


class OutlineFile(BaseModel):
    """Pydantic model for one project's outline file."""

    headings: list[Heading] = Field(default_factory=list)


class ClockState(BaseModel):
    """Pydantic model for the clocked-in heading."""

    heading_id: str | None = None
