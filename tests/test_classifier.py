from __future__ import annotations

import pytest

from streammark.classifier import (
    classify,
    looks_like_diagram,
    parse_markdown_table,
    reconcile_row,
    table_from_node,
)
from streammark.config import StreamConfig
from streammark.exceptions import TableFormatError
from streammark.models import Alignment, BlockNode, TokenKind
from streammark.tokenizer import tokenize


def _classified(text: str, config: StreamConfig | None = None) -> list[BlockNode]:
    return classify(tokenize(text, config), config)


@pytest.mark.parametrize(
    "code",
    [
        "graph TD\nA-->B",
        "flowchart LR\n  a --> b",
        "sequenceDiagram\nAlice->>Bob: hi",
        "\n\n  pie title Pets",
        "GANTT\ntitle x",
    ],
)
def test_looks_like_diagram(code: str):
    assert looks_like_diagram(code)


@pytest.mark.parametrize("code", ["print('graph')", "", "x = 1\ngraph TD"])
def test_does_not_look_like_diagram(code: str):
    assert not looks_like_diagram(code)


def test_mermaid_fence_is_diagram():
    (node,) = _classified("```mermaid\ngraph TD\nA-->B\n```")
    assert node.kind is TokenKind.DIAGRAM
    assert node.language == "mermaid"
    assert node.content == "graph TD\nA-->B"


def test_mermaid_tag_wins_over_content():
    (node,) = _classified("```mermaid\nanything at all\n```")
    assert node.kind is TokenKind.DIAGRAM


def test_untagged_fence_with_diagram_keyword_is_diagram():
    (node,) = _classified("```\ngraph TD\nA-->B\n```")
    assert node.kind is TokenKind.DIAGRAM


def test_tagged_fence_is_never_auto_detected():
    (node,) = _classified("```python\ngraph = {}\n```")
    assert node.kind is TokenKind.CODE_BLOCK


def test_auto_detection_can_be_disabled():
    config = StreamConfig(auto_detect_diagrams=False)
    (node,) = _classified("```\ngraph TD\nA-->B\n```", config)
    assert node.kind is TokenKind.CODE_BLOCK


def test_extra_diagram_languages():
    config = StreamConfig(diagram_languages=("mermaid", "dot"))
    (node,) = _classified("```dot\ndigraph { a -> b }\n```", config)
    assert node.kind is TokenKind.DIAGRAM


def test_open_diagram_fence_stays_provisional():
    (node,) = _classified("```mermaid\ngraph TD")
    assert node.kind is TokenKind.DIAGRAM
    assert node.provisional is True


def test_diagram_inside_blockquote():
    (quote,) = _classified("> ```mermaid\n> graph TD\n> ```")
    assert quote.children[0].kind is TokenKind.DIAGRAM


def test_table_is_normalized_to_canonical_form():
    (node,) = _classified("| a | b |\n|---|---|\n| 1 | 2 |")
    assert node.kind is TokenKind.TABLE
    assert node.content == "| a | b |\n| --- | --- |\n| 1 | 2 |"


def test_table_alignment_survives_normalization():
    (node,) = _classified("|a|b|c|\n|:-|:-:|-:|\n|1|2|3|")
    assert node.content.split("\n")[1] == "| --- | :---: | ---: |"


def test_short_table_rows_are_padded():
    (node,) = _classified("| a | b |\n|---|---|\n| 1 |")
    assert node.content.split("\n")[2] == "| 1 |  |"


def test_cell_inline_markup_is_kept():
    (node,) = _classified("| **a** | `b` |\n|---|---|\n| [x](y) | 2 |")
    assert node.content == "| **a** | `b` |\n| --- | --- |\n| [x](y) | 2 |"


def test_escaped_pipe_in_cell_survives():
    (node,) = _classified("| h |\n|---|\n| a \\| b |")
    assert node.content.split("\n")[2] == "| a \\| b |"


def test_classify_does_not_mutate_input():
    nodes = tokenize("```\ngraph TD\n```")
    classify(nodes)
    assert nodes[0].kind is TokenKind.CODE_BLOCK


def test_parse_markdown_table():
    table = parse_markdown_table("| a | b |\n|---|:-:|\n| 1 | 2 |")
    assert table.headers == ["a", "b"]
    assert table.rows == [["1", "2"]]
    assert table.alignment == [Alignment.LEFT, Alignment.CENTER]


def test_parse_markdown_table_without_outer_pipes():
    table = parse_markdown_table("a | b\n--- | ---:\n1 | 2")
    assert table.headers == ["a", "b"]
    assert table.rows == [["1", "2"]]
    assert table.alignment == [Alignment.LEFT, Alignment.RIGHT]


def test_parse_markdown_table_keeps_escaped_pipes():
    table = parse_markdown_table("| expr |\n|---|\n| a \\| b |")
    assert table.rows == [["a | b"]]


def test_parse_markdown_table_pads_and_drops_rows():
    table = parse_markdown_table("| a | b |\n|---|---|\n| 1 |\n| 1 | 2 | 3 |\n| x | y |")
    assert table.rows == [["1", ""], ["x", "y"]]


@pytest.mark.parametrize("markdown", ["", "| a | b |", "| a | b |\n| 1 | 2 |"])
def test_parse_markdown_table_rejects_malformed_tables(markdown: str):
    with pytest.raises(TableFormatError):
        parse_markdown_table(markdown)


def test_reconcile_row():
    assert reconcile_row(["1"], 3) == ["1", "", ""]
    assert reconcile_row(["1", "2"], 2) == ["1", "2"]
    assert reconcile_row(["1", "2", "3"], 2) is None


def test_table_from_raw_node():
    node = BlockNode(TokenKind.TABLE, raw="| h |\n|---|\n| v |")
    table = table_from_node(node)
    assert table.headers == ["h"]
    assert table.rows == [["v"]]


def test_table_from_node_with_plain_cells():
    node = BlockNode(
        TokenKind.TABLE,
        header=["a", "b"],
        rows=[["1", "2"], ["1", "2", "3"]],
        alignment=[Alignment.RIGHT],
    )
    table = table_from_node(node)
    assert table.rows == [["1", "2"]]
    assert table.alignment == [Alignment.RIGHT, Alignment.LEFT]


def test_unreadable_table_keeps_raw_text():
    node = BlockNode(TokenKind.TABLE, raw="| not a table")
    (classified,) = classify([node])
    assert classified.content == "| not a table"


def test_unreadable_table_without_source_uses_placeholder():
    config = StreamConfig(table_error_placeholder="<table?>")
    (classified,) = classify([BlockNode(TokenKind.TABLE)], config)
    assert classified.content == "<table?>"
