"""Pydantic schema for the optional YAML configuration file."""

from pydantic import BaseModel, ConfigDict


class ConfigFileModel(BaseModel):
    """Pydantic model for the YAML configuration file.

    Every key is optional; values left out fall back to the built-in defaults.
    """

    model_config = ConfigDict(extra="forbid")

    projects: list[str] | None = None
    outline_dir: str | None = None
    epic_field: str | None = None
    sprint_field: str | None = None
    epic_name_field: str | None = None
    priorities: dict[str, str] | None = None
    todo_states: dict[str, str] | None = None
    done_keywords: list[str] | None = None
    private_sections: list[str] | None = None
    task_type_name: str | None = None
    story_type_name: str | None = None
    epic_type_name: str | None = None
    subtask_type_name: str | None = None
