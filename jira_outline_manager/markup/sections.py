"""Splits Markdown heading bodies into named sections."""

import re

SECTION_HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.*?)\s*$")


def split_body_sections(body: str, titles: list[str]) -> tuple[str, str]:
    """Split a Markdown body into (kept text, text of the named sections).

    A named section runs from its heading line up to the next heading of the
    same or a higher level.
    """
    kept: list[str] = []
    removed: list[str] = []
    skipping_level: int | None = None
    for line in body.split("\n"):
        match = SECTION_HEADING_PATTERN.match(line)
        if match:
            level = len(match.group(1))
            if skipping_level is not None and level <= skipping_level:
                skipping_level = None
            if skipping_level is None and match.group(2) in titles:
                skipping_level = level
        (removed if skipping_level is not None else kept).append(line)
    return "\n".join(kept).strip("\n"), "\n".join(removed).strip("\n")


def join_body_sections(public: str, private: str) -> str:
    """Append preserved private sections to a body."""
    if not private:
        return public
    if not public:
        return private
    return f"{public}\n\n{private}"
