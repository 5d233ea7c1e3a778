"""Line-oriented fallback used when the grammar fails on a buffer."""

from __future__ import annotations

from .constants import (
    DEFAULT_LANGUAGE,
    FALLBACK_BLOCKQUOTE_PREFIX,
    FALLBACK_BULLET_PATTERN,
    FALLBACK_HEADING_PATTERN,
    FALLBACK_LIST_PREFIX,
    FALLBACK_ORDERED_PATTERN,
    NEWLINE_PATTERN,
)
from .incomplete import has_open_tail
from .models import Token, TokenKind


def parse_line(line: str, unterminated: bool = False) -> Token:
    """Classify a single non-blank line by its prefix.

    Args:
        line: Line without its trailing newline.
        unterminated: True when the line is the last one of the buffer and no
            newline follows it yet.

    Returns:
        Token: Heading, code block, blockquote, list item, or text token.

    Examples:
        parse_line("## Setup")  # heading, depth 2
        parse_line("```python")  # empty provisional code block, language "python"
        parse_line("3. third")  # ordered list item
        parse_line("    - deep")  # list item, depth 2
    """
    heading = FALLBACK_HEADING_PATTERN.match(line)
    if heading:
        return Token(
            TokenKind.HEADING,
            content=line[heading.end() :].strip(),
            raw=line,
            depth=len(heading.group(1)),
            provisional=unterminated,
        )

    if line.startswith("```"):
        language = line[3:].strip().split()
        return Token(
            TokenKind.CODE_BLOCK,
            raw=line,
            language=language[0].lower() if language else DEFAULT_LANGUAGE,
            provisional=True,
        )

    if line.startswith(">"):
        return Token(
            TokenKind.BLOCKQUOTE,
            content=FALLBACK_BLOCKQUOTE_PREFIX.sub("", line, count=1),
            raw=line,
        )

    stripped = line.lstrip(" ")
    ordered = FALLBACK_ORDERED_PATTERN.match(stripped) is not None
    if ordered or FALLBACK_BULLET_PATTERN.match(stripped):
        return Token(
            TokenKind.LIST_ITEM,
            content=FALLBACK_LIST_PREFIX.sub("", stripped, count=1),
            raw=line,
            # Two spaces of indentation per nesting level.
            depth=(len(line) - len(stripped)) // 2,
            ordered=ordered,
        )

    return Token(TokenKind.TEXT, content=line, raw=line, provisional=has_open_tail(line))


def parse_partial(buffer: str) -> list[Token]:
    """Best-effort parse that classifies each line independently.

    Blank lines are dropped. List depth comes from indentation; tables are
    not recognized. Never raises.

    Args:
        buffer: Full text received so far.

    Returns:
        list[Token]: One token per non-blank line, in order.

    Examples:
        parse_partial("# Title\\n\\n- item\\n**open")
    """
    lines = NEWLINE_PATTERN.sub("\n", buffer).split("\n")
    tokens: list[Token] = []
    for index, line in enumerate(lines):
        if not line.strip():
            continue
        unterminated = index == len(lines) - 1
        tokens.append(parse_line(line, unterminated))
    return tokens
