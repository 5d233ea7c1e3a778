"""Diagram and table classification of tokenizer output."""

from __future__ import annotations

import logging
import re
from dataclasses import replace

from markdown_it.tree import SyntaxTreeNode

from .config import StreamConfig
from .constants import DEFAULT_LANGUAGE, DIAGRAM_KEYWORDS
from .exceptions import TableFormatError
from .models import Alignment, BlockNode, TableData, TokenKind
from .tokenizer import node_text

logger = logging.getLogger(__name__)

_DIAGRAM_KEYWORDS_FOLDED = tuple(keyword.casefold() for keyword in DIAGRAM_KEYWORDS)
_CELL_SPLIT_PATTERN = re.compile(r"(?<!\\)\|")
_SEPARATOR_CELL_PATTERN = re.compile(r"^:?-+:?$")


def looks_like_diagram(code: str) -> bool:
    """Check whether code starts with a diagram-grammar keyword.

    Only the first non-blank line is inspected, case-insensitively.

    Examples:
        looks_like_diagram("graph TD\\nA-->B")  # True
        looks_like_diagram("\\n  sequenceDiagram")  # True
        looks_like_diagram("print('graph')")  # False
    """
    for line in code.splitlines():
        stripped = line.strip()
        if stripped:
            return stripped.casefold().startswith(_DIAGRAM_KEYWORDS_FOLDED)
    return False


def _is_diagram(node: BlockNode, config: StreamConfig) -> bool:
    language = (node.language or DEFAULT_LANGUAGE).lower()
    if language in config.diagram_languages:
        return True
    if not config.auto_detect_diagrams or language != DEFAULT_LANGUAGE:
        return False
    return looks_like_diagram(node.content)


def _cell_text(cell: object) -> str:
    if isinstance(cell, str):
        return cell.strip()
    if isinstance(cell, SyntaxTreeNode):
        # Cell source keeps its inline markup; pipes are escaped again on output.
        if cell.children and cell.children[0].type == "inline":
            return cell.children[0].content.strip().replace("\\|", "|")
        return node_text(cell).strip()
    text = getattr(cell, "text", None)
    if isinstance(text, str):
        return text.strip()
    return str(cell).strip()


def _split_cells(line: str) -> list[str]:
    stripped = line.strip()
    if stripped.startswith("|"):
        stripped = stripped[1:]
    if stripped.endswith("|") and not stripped.endswith("\\|"):
        stripped = stripped[:-1]
    return [cell.strip().replace("\\|", "|") for cell in _CELL_SPLIT_PATTERN.split(stripped)]


def _parse_alignment(cell: str) -> Alignment:
    if cell.startswith(":") and cell.endswith(":") and len(cell) > 1:
        return Alignment.CENTER
    if cell.endswith(":"):
        return Alignment.RIGHT
    return Alignment.LEFT


def reconcile_row(cells: list[str], width: int) -> list[str] | None:
    """Fit a row to the header width.

    Short rows are padded with empty cells; rows with more cells than the
    header cannot be reconciled and yield None.

    Examples:
        reconcile_row(["1"], 2)  # ["1", ""]
        reconcile_row(["1", "2", "3"], 2)  # None
    """
    if len(cells) > width:
        return None
    return cells + [""] * (width - len(cells))


def parse_markdown_table(markdown: str) -> TableData:
    """Parse a raw pipe-delimited table into normalized form.

    Args:
        markdown: Table text: header line, separator line, and data rows.

    Returns:
        TableData: Headers, rectangular rows, and alignment. Rows whose cell
            count cannot be reconciled with the header are dropped.

    Raises:
        TableFormatError: If the text has no header and separator line.

    Examples:
        parse_markdown_table("| a | b |\\n|---|:-:|\\n| 1 | 2 |")
    """
    lines = [line for line in markdown.strip().split("\n") if line.strip()]
    if len(lines) < 2:
        raise TableFormatError("A table needs a header line and a separator line")

    headers = _split_cells(lines[0])
    separators = _split_cells(lines[1])
    if not all(_SEPARATOR_CELL_PATTERN.match(cell) for cell in separators):
        raise TableFormatError(f"Invalid table separator line: {lines[1]!r}")

    alignment = [_parse_alignment(cell) for cell in separators]
    alignment = (alignment + [Alignment.LEFT] * len(headers))[: len(headers)]

    rows: list[list[str]] = []
    for line in lines[2:]:
        row = reconcile_row(_split_cells(line), len(headers))
        if row is None:
            logger.debug("Dropping table row with too many cells: %r", line)
            continue
        rows.append(row)

    return TableData(headers=headers, rows=rows, alignment=alignment)


def table_from_node(node: BlockNode) -> TableData:
    """Build normalized table data from a table node.

    Structured nodes from the grammar have their cell objects reduced to
    strings; nodes that only carry raw text are parsed from it.

    Raises:
        TableFormatError: If a raw-text node is not a valid table.
    """
    if node.header is None:
        return parse_markdown_table(node.raw or node.content)

    headers = [_cell_text(cell) for cell in node.header]
    rows: list[list[str]] = []
    for row in node.rows or []:
        reconciled = reconcile_row([_cell_text(cell) for cell in row], len(headers))
        if reconciled is None:
            logger.debug("Dropping table row with %d cells for %d headers", len(row), len(headers))
            continue
        rows.append(reconciled)

    alignment = (list(node.alignment) + [Alignment.LEFT] * len(headers))[: len(headers)]
    return TableData(headers=headers, rows=rows, alignment=alignment)


def _classify_table(node: BlockNode, config: StreamConfig) -> BlockNode:
    try:
        table = table_from_node(node)
    except TableFormatError as error:
        logger.debug("Table could not be normalized: %s", error)
        return replace(node, content=node.raw or config.table_error_placeholder)
    return replace(node, content=table.to_markdown())


def classify(nodes: list[BlockNode], config: StreamConfig | None = None) -> list[BlockNode]:
    """Relabel diagrams and normalize tables.

    Args:
        nodes: Block nodes from the tokenizer.
        config: Session configuration (diagram languages, auto-detection,
            table placeholder).

    Returns:
        list[BlockNode]: New list; input nodes are not mutated.

    Examples:
        classify(tokenize("```\\ngraph TD\\nA-->B\\n```"))  # one DIAGRAM node
    """
    config = config or StreamConfig()
    classified: list[BlockNode] = []
    for node in nodes:
        if node.kind is TokenKind.CODE_BLOCK and _is_diagram(node, config):
            node = replace(node, kind=TokenKind.DIAGRAM)
        elif node.kind is TokenKind.TABLE:
            node = _classify_table(node, config)
        elif node.kind is TokenKind.BLOCKQUOTE and node.children:
            node = replace(node, children=classify(node.children, config))
        classified.append(node)
    return classified
