"""Custom exceptions for the outline module."""

from pathlib import Path
from typing import Any


class OutlineFileError(Exception):
    """Raised when an outline file does not match the outline schema."""

    def __init__(self, path: Path, errors: list[Any]) -> None:
        super().__init__(f"Errors encountered while loading outline file {path}.")
        self.path = path
        self.errors = errors
