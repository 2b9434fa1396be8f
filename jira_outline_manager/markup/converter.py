"""Converts heading bodies between Markdown and JIRA wiki markup.

Only the constructs that survive a round trip are handled: headings, bullet
and numbered lists, block quotes, code blocks, inline code, links, bold,
italic and strikethrough. Anything else passes through untouched.
"""

import re
from typing import Callable

MD_FENCE_PATTERN = re.compile(r"^```([\w+-]*)\n(.*?)^```[ \t]*$", re.MULTILINE | re.DOTALL)
JIRA_CODE_PATTERN = re.compile(r"\{(code|noformat)(?::([^}]*))?\}\n?(.*?)\{\1\}", re.DOTALL)

MD_INLINE_CODE_PATTERN = re.compile(r"`([^`\n]+)`")
JIRA_INLINE_CODE_PATTERN = re.compile(r"\{\{(.+?)\}\}")

MD_HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.*)$")
MD_BULLET_PATTERN = re.compile(r"^(\s*)[-+*]\s+(.*)$")
MD_NUMBERED_PATTERN = re.compile(r"^(\s*)\d+\.\s+(.*)$")
MD_QUOTE_PATTERN = re.compile(r"^>\s?(.*)$")

JIRA_HEADING_PATTERN = re.compile(r"^h([1-6])\.\s+(.*)$")
JIRA_BULLET_PATTERN = re.compile(r"^(\*+)\s+(.*)$")
JIRA_NUMBERED_PATTERN = re.compile(r"^(#+)\s+(.*)$")
JIRA_QUOTE_PATTERN = re.compile(r"^bq\.\s+(.*)$")

MD_LINK_PATTERN = re.compile(r"\[([^\]\n]+)\]\(([^)\s]+)\)")
JIRA_LINK_PATTERN = re.compile(r"\[([^\]|\n]+)\|([^\]\s]+)\]")
JIRA_BARE_LINK_PATTERN = re.compile(r"\[((?:https?|mailto):[^\]\s|]+)\]")

MD_BOLD_PATTERN = re.compile(r"\*\*(?!\s)(.+?)(?<!\s)\*\*")
MD_ITALIC_PATTERN = re.compile(r"(?<![*\w])\*(?![\s*])(.+?)(?<![\s*])\*(?![*\w])")
MD_STRIKE_PATTERN = re.compile(r"~~(?!\s)(.+?)(?<!\s)~~")

JIRA_BOLD_PATTERN = re.compile(r"(?<![*\w])\*(?![\s*])(.+?)(?<![\s*])\*(?![*\w])")
JIRA_ITALIC_PATTERN = re.compile(r"(?<![_\w])_(?![\s_])(.+?)(?<![\s_])_(?![_\w])")
JIRA_STRIKE_PATTERN = re.compile(r"(?<![\w-])-(?![\s-])([^\n]+?)(?<![\s-])-(?![\w-])")

PLACEHOLDER = "\x00{}\x00"
PLACEHOLDER_PATTERN = re.compile(r"\x00(\d+)\x00")
BOLD_MARK = "\x01"


class _Protector:
    """Swaps spans that must not be touched by inline rules for placeholders."""

    def __init__(self) -> None:
        self.saved: list[str] = []

    def protect(self, replacement: str) -> str:
        self.saved.append(replacement)
        return PLACEHOLDER.format(len(self.saved) - 1)

    def restore(self, text: str) -> str:
        # Placeholders may nest (inline code inside a protected link), so restore until stable.
        previous = None
        while previous != text:
            previous = text
            text = PLACEHOLDER_PATTERN.sub(lambda m: self.saved[int(m.group(1))], text)
        return text


def _convert_lines(text: str, convert_line: Callable[[str], str]) -> str:
    return "\n".join(convert_line(line) for line in text.split("\n"))


def markdown_to_jira(text: str | None) -> str:
    """Convert a Markdown heading body into JIRA wiki markup."""
    if not text:
        return ""
    protector = _Protector()

    def fence(match: re.Match[str]) -> str:
        language, code = match.group(1), match.group(2)
        opening = f"{{code:{language}}}" if language else "{code}"
        return protector.protect(f"{opening}\n{code}{{code}}")

    text = MD_FENCE_PATTERN.sub(fence, text)
    text = MD_INLINE_CODE_PATTERN.sub(lambda m: protector.protect(f"{{{{{m.group(1)}}}}}"), text)
    text = MD_LINK_PATTERN.sub(lambda m: protector.protect(f"[{m.group(1)}|{m.group(2)}]"), text)

    def convert_line(line: str) -> str:
        if match := MD_HEADING_PATTERN.match(line):
            return f"h{len(match.group(1))}. {match.group(2)}"
        if match := MD_BULLET_PATTERN.match(line):
            depth = len(match.group(1).expandtabs(2)) // 2 + 1
            return f"{'*' * depth} {match.group(2)}"
        if match := MD_NUMBERED_PATTERN.match(line):
            depth = len(match.group(1).expandtabs(2)) // 2 + 1
            return f"{'#' * depth} {match.group(2)}"
        if match := MD_QUOTE_PATTERN.match(line):
            return f"bq. {match.group(1)}"
        return line

    text = _convert_lines(text, convert_line)
    text = MD_BOLD_PATTERN.sub(lambda m: f"{BOLD_MARK}{m.group(1)}{BOLD_MARK}", text)
    text = MD_ITALIC_PATTERN.sub(r"_\1_", text)
    text = text.replace(BOLD_MARK, "*")
    text = MD_STRIKE_PATTERN.sub(r"-\1-", text)
    return protector.restore(text)


def jira_to_markdown(text: str | None) -> str:
    """Convert JIRA wiki markup into a Markdown heading body."""
    if not text:
        return ""
    text = text.replace("\r\n", "\n")
    protector = _Protector()

    def code(match: re.Match[str]) -> str:
        language = match.group(2) if match.group(1) == "code" else None
        body = match.group(3)
        if not body.endswith("\n"):
            body += "\n"
        return protector.protect(f"```{language or ''}\n{body}```")

    text = JIRA_CODE_PATTERN.sub(code, text)
    text = JIRA_INLINE_CODE_PATTERN.sub(lambda m: protector.protect(f"`{m.group(1)}`"), text)
    text = JIRA_LINK_PATTERN.sub(lambda m: protector.protect(f"[{m.group(1)}]({m.group(2)})"), text)
    text = JIRA_BARE_LINK_PATTERN.sub(lambda m: protector.protect(f"<{m.group(1)}>"), text)

    def convert_line(line: str) -> str:
        if match := JIRA_HEADING_PATTERN.match(line):
            return f"{'#' * int(match.group(1))} {match.group(2)}"
        if match := JIRA_BULLET_PATTERN.match(line):
            return f"{'  ' * (len(match.group(1)) - 1)}- {match.group(2)}"
        if match := JIRA_NUMBERED_PATTERN.match(line):
            return f"{'  ' * (len(match.group(1)) - 1)}1. {match.group(2)}"
        if match := JIRA_QUOTE_PATTERN.match(line):
            return f"> {match.group(1)}"
        return line

    text = _convert_lines(text, convert_line)
    text = JIRA_BOLD_PATTERN.sub(lambda m: f"{BOLD_MARK}{m.group(1)}{BOLD_MARK}", text)
    text = JIRA_ITALIC_PATTERN.sub(r"*\1*", text)
    text = text.replace(BOLD_MARK, "**")
    text = JIRA_STRIKE_PATTERN.sub(r"~~\1~~", text)
    return protector.restore(text)
