from __future__ import annotations

import pytest

from streammark.fallback import parse_line, parse_partial
from streammark.models import TokenKind


@pytest.mark.parametrize(
    ("line", "depth", "content"),
    [("# Title", 1, "Title"), ("### Deep  ", 3, "Deep"), ("###### Six", 6, "Six")],
)
def test_parse_line_heading(line: str, depth: int, content: str):
    token = parse_line(line)
    assert token.kind is TokenKind.HEADING
    assert token.depth == depth
    assert token.content == content
    assert token.provisional is False


def test_unterminated_heading_is_provisional():
    assert parse_line("# Hel", unterminated=True).provisional is True


def test_parse_line_fence_opener():
    token = parse_line("```Python extra")
    assert token.kind is TokenKind.CODE_BLOCK
    assert token.language == "python"
    assert token.content == ""
    assert token.provisional is True


def test_parse_line_untagged_fence():
    assert parse_line("```").language == "text"


def test_parse_line_blockquote():
    token = parse_line(">  quoted")
    assert token.kind is TokenKind.BLOCKQUOTE
    assert token.content == "quoted"


def test_parse_line_stacked_blockquote_markers():
    token = parse_line(">>> nested > quote")
    assert token.kind is TokenKind.BLOCKQUOTE
    assert token.content == "nested > quote"


@pytest.mark.parametrize(
    ("line", "depth", "ordered"),
    [
        ("  - two", 1, False),
        ("    - deep", 2, False),
        ("      3. six", 3, True),
    ],
)
def test_parse_line_indented_list_items(line: str, depth: int, ordered: bool):
    token = parse_line(line)
    assert token.kind is TokenKind.LIST_ITEM
    assert token.depth == depth
    assert token.ordered is ordered
    assert token.raw == line


@pytest.mark.parametrize(
    ("line", "ordered", "content"),
    [
        ("- dash", False, "dash"),
        ("* star", False, "star"),
        ("+ plus", False, "plus"),
        ("12. twelve", True, "twelve"),
    ],
)
def test_parse_line_list_items(line: str, ordered: bool, content: str):
    token = parse_line(line)
    assert token.kind is TokenKind.LIST_ITEM
    assert token.ordered is ordered
    assert token.content == content
    assert token.depth == 0


def test_parse_line_text():
    token = parse_line("just words")
    assert token.kind is TokenKind.TEXT
    assert token.content == "just words"
    assert token.provisional is False


def test_parse_line_text_with_open_bold():
    assert parse_line("**unterminated bold").provisional is True


def test_parse_line_not_a_heading_without_space():
    assert parse_line("#tag").kind is TokenKind.TEXT


def test_parse_partial_classifies_each_line():
    tokens = parse_partial("# Title\n\n- item\n1. first\n> quote\n```py\nplain **open")
    assert [token.kind for token in tokens] == [
        TokenKind.HEADING,
        TokenKind.LIST_ITEM,
        TokenKind.LIST_ITEM,
        TokenKind.BLOCKQUOTE,
        TokenKind.CODE_BLOCK,
        TokenKind.TEXT,
    ]
    assert tokens[0].provisional is False
    assert tokens[2].ordered is True
    assert tokens[4].language == "py"
    assert tokens[-1].provisional is True


def test_parse_partial_final_heading_without_newline():
    tokens = parse_partial("intro\n# Hea")
    assert tokens[-1].kind is TokenKind.HEADING
    assert tokens[-1].provisional is True


def test_parse_partial_final_heading_with_newline():
    tokens = parse_partial("# Done\n")
    assert tokens[-1].provisional is False


@pytest.mark.parametrize("buffer", ["", "\n\n", "   \n\t"])
def test_parse_partial_blank_buffer(buffer: str):
    assert parse_partial(buffer) == []


def test_parse_partial_splits_carriage_returns():
    tokens = parse_partial("# Title\r\n- item\rtext")
    assert [token.content for token in tokens] == ["Title", "item", "text"]
    assert tokens[0].provisional is False
