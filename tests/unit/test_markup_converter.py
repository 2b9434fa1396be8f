"""Unit tests for the Markdown and JIRA wiki markup converters."""

import pytest

from jira_outline_manager.markup.converter import jira_to_markdown, markdown_to_jira
from jira_outline_manager.markup.sections import join_body_sections, split_body_sections


@pytest.mark.parametrize(
    "markdown, jira",
    [
        pytest.param("## Plan", "h2. Plan", id="heading"),
        pytest.param("- one\n  - nested", "* one\n** nested", id="bullets"),
        pytest.param("1. first\n2. second", "# first\n# second", id="numbered"),
        pytest.param("> quoted", "bq. quoted", id="quote"),
        pytest.param("**bold** and *italic*", "*bold* and _italic_", id="emphasis"),
        pytest.param("~~gone~~", "-gone-", id="strikethrough"),
        pytest.param("see [docs](https://example.com/docs)", "see [docs|https://example.com/docs]", id="link"),
        pytest.param("run `make **all**`", "run {{make **all**}}", id="inline code is left alone"),
        pytest.param("```python\nx = 1\n```", "{code:python}\nx = 1\n{code}", id="fenced code"),
    ],
)
def test_markdown_to_jira(markdown: str, jira: str) -> None:
    """Test converting Markdown constructs into JIRA wiki markup."""
    assert markdown_to_jira(markdown) == jira


@pytest.mark.parametrize(
    "jira, markdown",
    [
        pytest.param("h3. Notes", "### Notes", id="heading"),
        pytest.param("* one\n** nested", "- one\n  - nested", id="bullets"),
        pytest.param("*bold* and _italic_", "**bold** and *italic*", id="emphasis"),
        pytest.param("[https://example.com]", "<https://example.com>", id="bare link"),
        pytest.param("{noformat}\nraw *text*\n{noformat}", "```\nraw *text*\n```", id="noformat block"),
        pytest.param("line\r\nnext", "line\nnext", id="windows newlines"),
    ],
)
def test_jira_to_markdown(jira: str, markdown: str) -> None:
    """Test converting JIRA wiki markup into Markdown."""
    assert jira_to_markdown(jira) == markdown


@pytest.mark.parametrize("converter", [markdown_to_jira, jira_to_markdown])
def test_empty_input(converter) -> None:
    """Test that empty and missing bodies convert to an empty string."""
    assert converter(None) == ""
    assert converter("") == ""


def test_split_and_join_private_sections() -> None:
    """Test that a private section is removed with its subsections and can be joined back."""
    # Given
    body = "Intro\n\n# Notes\nmine\n## More\nalso mine\n# Plan\nshared"

    # When
    public, private = split_body_sections(body, ["Notes"])

    # Then
    assert public == "Intro\n\n# Plan\nshared"
    assert private == "# Notes\nmine\n## More\nalso mine"
    assert join_body_sections(public, private) == "Intro\n\n# Plan\nshared\n\n# Notes\nmine\n## More\nalso mine"
    assert join_body_sections("", private) == private
