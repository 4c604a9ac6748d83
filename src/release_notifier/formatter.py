"""Restyle release-notes markdown for a chat embed.

Embeds don't render headings, so:
- H3s become bold and underlined
- H2s become bold
- blank lines are collapsed

The substitutions run in this order and must stay in it: H3 first, so a
"### " line is consumed whole before the H2 pattern could match inside it.
The patterns are not anchored to line starts, and each heading's trailing
newline is consumed along with it.
"""

from __future__ import annotations

import re

H3_PATTERN = re.compile(r"### (.*?)\n")
H2_PATTERN = re.compile(r"## (.*?)\n")
BLANK_LINES_PATTERN = re.compile(r"\n\s*\n")
LINE_BREAKS = re.compile(r"\r\n|\n|\r")


def _heading_text(match: re.Match[str]) -> str:
    return LINE_BREAKS.sub("", match.group(1))


def format_description(description: str) -> str:
    """Apply the embed style to a markdown body."""
    text = H3_PATTERN.sub(lambda m: f"**__{_heading_text(m)}__**", description)
    text = H2_PATTERN.sub(lambda m: f"**{_heading_text(m)}**", text)
    return BLANK_LINES_PATTERN.sub("\n", text)
