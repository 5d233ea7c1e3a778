"""Detection of constructs left open at the end of the buffer.

Only the tail of the buffer is inspected. Open fences are reported by the
tokenizer instead, since a fence can span many lines.
"""

from __future__ import annotations

import re
from dataclasses import replace

from .constants import (
    CODE_TAIL_PATTERN,
    EMPHASIS_TAIL_PATTERN,
    FENCE_LINE_PATTERN,
    HEADING_TAIL_PATTERN,
    LINK_TARGET_TAIL_PATTERN,
    LINK_TEXT_TAIL_PATTERN,
    LIST_MARKER_PATTERN,
    NEWLINE_PATTERN,
    STRONG_TAIL_PATTERN,
)
from .models import Token

_STAR_RUN_PATTERN = re.compile(r"\*+")


def is_escaped(text: str, pos: int) -> bool:
    """Determine whether a character is escaped by preceding backslashes.

    Counts consecutive backslashes immediately before `pos`; an odd count marks
    the character as escaped.

    Examples:
        is_escaped("\\\\*", 2)  # False, two backslashes
        is_escaped("\\*", 1)  # True, one backslash
    """
    if pos == 0:
        return False

    backslash_count = 0
    i = pos - 1
    while i >= 0 and text[i] == "\\":
        backslash_count += 1
        i -= 1

    return backslash_count % 2 == 1


def find_inline_code_spans(text: str) -> tuple[list[tuple[int, int]], int | None]:
    """Locate closed inline code spans and the start of an unclosed one.

    Spans start and end with unescaped backtick runs of equal length.

    Returns:
        tuple[list[tuple[int, int]], int | None]: Start (inclusive) and end
            (exclusive) of each closed span, and the offset of a backtick run
            that is never closed, if any.

    Examples:
        find_inline_code_spans("`code`")  # ([(0, 6)], None)
        find_inline_code_spans("a `b")  # ([], 2)
    """
    spans = []
    i = 0

    while i < len(text):
        if text[i] == "`" and not is_escaped(text, i):
            start = i
            backtick_count = 0
            while i < len(text) and text[i] == "`":
                backtick_count += 1
                i += 1

            closed = False
            while i < len(text):
                if text[i] == "`":
                    close_count = 0
                    while i < len(text) and text[i] == "`":
                        close_count += 1
                        i += 1
                    if close_count == backtick_count:
                        spans.append((start, i))
                        closed = True
                        break
                else:
                    i += 1

            if not closed:
                return spans, start
        else:
            i += 1

    return spans, None


def _mask_code_spans(line: str, spans: list[tuple[int, int]]) -> str:
    for start, end in spans:
        line = line[:start] + " " * (end - start) + line[end:]
    return line


def _open_star_runs(line: str) -> tuple[bool, bool]:
    """Return whether strong and emphasis delimiters are unbalanced on a line.

    Runs surrounded by whitespace on both sides can neither open nor close and
    are ignored.
    """
    strong = emphasis = False
    for match in _STAR_RUN_PATTERN.finditer(line):
        start, end = match.span()
        if is_escaped(line, start):
            continue
        before = line[start - 1] if start > 0 else " "
        after = line[end] if end < len(line) else " "
        if before.isspace() and after.isspace():
            continue
        length = end - start
        if length >= 2:
            strong = not strong
        if length % 2 == 1:
            emphasis = not emphasis
    return strong, emphasis


def _open_code(line: str) -> bool:
    if FENCE_LINE_PATTERN.match(line):
        return False
    _, open_at = find_inline_code_spans(line)
    return open_at is not None and CODE_TAIL_PATTERN.search(line, open_at) is not None


def _open_emphasis(line: str) -> tuple[bool, bool]:
    line = LIST_MARKER_PATTERN.sub("", line, count=1)
    spans, _ = find_inline_code_spans(line)
    line = _mask_code_spans(line, spans)
    strong, emphasis = _open_star_runs(line)
    return (
        strong and STRONG_TAIL_PATTERN.search(line) is not None,
        emphasis and EMPHASIS_TAIL_PATTERN.search(line) is not None,
    )


def _open_link(line: str) -> bool:
    for pattern in (LINK_TEXT_TAIL_PATTERN, LINK_TARGET_TAIL_PATTERN):
        match = pattern.search(line)
        if match is not None and not is_escaped(line, match.start()):
            return True
    return False


def open_construct(buffer: str) -> str | None:
    """Name the construct left open at the end of the buffer, if any.

    Signatures are checked in order on the last line: strong, emphasis, inline
    code, link, heading.

    Returns:
        str | None: One of ``"strong"``, ``"emphasis"``, ``"code"``,
            ``"link"``, ``"heading"``, or None when the tail looks closed.

    Examples:
        open_construct("This is **bo")  # "strong"
        open_construct("This is **bold** text.")  # None
        open_construct("# Hel")  # "heading"
    """
    line = NEWLINE_PATTERN.sub("\n", buffer).rsplit("\n", 1)[-1]
    if not line:
        return None

    strong, emphasis = _open_emphasis(line)
    if strong:
        return "strong"
    if emphasis:
        return "emphasis"
    if _open_code(line):
        return "code"
    if _open_link(line):
        return "link"
    if HEADING_TAIL_PATTERN.search(line):
        return "heading"
    return None


def has_open_tail(text: str) -> bool:
    """Check a single line for an open bold, italic, or code span."""
    strong, emphasis = _open_emphasis(text)
    return strong or emphasis or _open_code(text)


def mark_incomplete(tokens: list[Token], buffer: str, enabled: bool = True) -> list[Token]:
    """Flag the last token provisional when the buffer ends mid-construct.

    Args:
        tokens: Tokens produced for `buffer`.
        buffer: Full buffer the tokens were produced from.
        enabled: When False the tokens are returned unchanged.

    Returns:
        list[Token]: New list; the last token is replaced by a provisional copy
            when an open signature matches and the token has content.
    """
    if not enabled or not tokens:
        return tokens

    last = tokens[-1]
    if last.provisional or not last.content or open_construct(buffer) is None:
        return tokens
    return [*tokens[:-1], replace(last, provisional=True)]


def settle_provisional(tokens: list[Token]) -> list[Token]:
    """Keep the provisional flag on the last token only.

    The buffer can only be mid-construct at its end, so a provisional token
    anywhere else is stale.
    """
    if not any(token.provisional for token in tokens[:-1]):
        return tokens
    settled = [
        replace(token, provisional=False) if token.provisional else token for token in tokens[:-1]
    ]
    settled.append(tokens[-1])
    return settled
