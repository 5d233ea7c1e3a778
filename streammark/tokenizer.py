"""Block tokenization of the accumulated buffer.

The whole buffer is re-parsed on every call. Markdown constructs can change
meaning retroactively as text arrives (a lone ``-`` only becomes a list item
once content follows it), so there is no incremental state to carry between
calls.
"""

from __future__ import annotations

from collections.abc import Callable

from markdown_it import MarkdownIt
from markdown_it.token import Token
from markdown_it.tree import SyntaxTreeNode
from mdit_py_plugins.dollarmath import dollarmath_plugin

from .config import StreamConfig
from .constants import DEFAULT_LANGUAGE, NEWLINE_PATTERN
from .exceptions import TokenizeError
from .models import Alignment, BlockNode, TokenKind

_BREAK_TYPES = frozenset({"softbreak", "hardbreak"})
_LIST_TYPES = frozenset({"bullet_list", "ordered_list"})
_CONTAINER_OPEN_TYPES = frozenset({"blockquote_open", "list_item_open"})


def build_markdown(config: StreamConfig | None = None) -> MarkdownIt:
    """Create the grammar used by a parser session.

    Args:
        config: Session configuration; math support and the nesting limit are
            taken from it.

    Returns:
        MarkdownIt: CommonMark parser with tables and strikethrough enabled,
            plus dollar math when configured.
    """
    config = config or StreamConfig()
    md = MarkdownIt("commonmark", {"maxNesting": config.max_nesting})
    md.enable(["table", "strikethrough"])
    if config.math:
        # "$5 and $10" is prose, not math.
        dollarmath_plugin(md, allow_digits=False, double_inline=True)
    return md


def node_text(node: SyntaxTreeNode) -> str:
    """Return the plain text of a node and all of its descendants.

    Examples:
        node_text(strong_node)  # "bold" for ``**bold**``
    """
    if node.type in _BREAK_TYPES:
        return "\n"
    if node.type == "image":
        return node.content or "".join(node_text(child) for child in node.children)
    if not node.children:
        return node.content or ""
    return "".join(node_text(child) for child in node.children)


def _inline_children(node: SyntaxTreeNode) -> list[SyntaxTreeNode]:
    if node.children and node.children[0].type == "inline":
        return list(node.children[0].children)
    return []


def _source(node: SyntaxTreeNode, lines: list[str]) -> str:
    if not node.map:
        return ""
    start, end = node.map
    return "\n".join(lines[start:end])


def _count_lines(buffer: str) -> int:
    if not buffer:
        return 0
    return buffer.count("\n") + (0 if buffer.endswith("\n") else 1)


def _fence_is_open(node: SyntaxTreeNode, line_count: int) -> bool:
    """Tell whether a fence runs to the end of the buffer without a closer.

    A closed fence spans its opener, its content lines and a closer; an open
    one has no closer, so its content covers every line after the opener.
    """
    if node.type != "fence" or not node.map:
        return False

    start, end = node.map
    if end < line_count:
        return False
    return _count_lines(node.content) == end - start - 1


def _check_nesting(tokens: list[Token], max_nesting: int) -> None:
    """Raise when the grammar hit its nesting limit.

    Past the limit markdown-it silently skips the remaining lines of the
    container, so the content would be lost.
    """
    for token in tokens:
        if token.type in _CONTAINER_OPEN_TYPES and token.level + 1 >= max_nesting:
            raise ValueError(f"Nesting limit of {max_nesting} reached at line {token.map}")


class _Walker:
    """Convert a markdown-it syntax tree into block nodes."""

    def __init__(self, buffer: str):
        self.lines = buffer.split("\n")
        self.line_count = _count_lines(buffer)
        self._handlers: dict[str, Callable[[SyntaxTreeNode], list[BlockNode]]] = {
            "heading": self._heading,
            "paragraph": self._paragraph,
            "fence": self._code,
            "code_block": self._code,
            "math_block": self._math,
            "math_block_label": self._math,
            "hr": self._rule,
            "blockquote": self._blockquote,
            "bullet_list": self._list,
            "ordered_list": self._list,
            "table": self._table,
        }

    def walk(self, nodes: list[SyntaxTreeNode]) -> list[BlockNode]:
        blocks: list[BlockNode] = []
        for node in nodes:
            handler = self._handlers.get(node.type, self._other)
            blocks.extend(handler(node))
        return blocks

    def _heading(self, node: SyntaxTreeNode) -> list[BlockNode]:
        return [
            BlockNode(
                TokenKind.HEADING,
                content=node_text(node).strip(),
                raw=_source(node, self.lines),
                depth=int(node.tag[1]),
                inline=_inline_children(node),
            )
        ]

    def _paragraph(self, node: SyntaxTreeNode) -> list[BlockNode]:
        return [
            BlockNode(
                TokenKind.PARAGRAPH,
                content=node_text(node),
                raw=_source(node, self.lines),
                inline=_inline_children(node),
            )
        ]

    def _code(self, node: SyntaxTreeNode) -> list[BlockNode]:
        content = node.content
        if content.endswith("\n"):
            content = content[:-1]
        info = (node.info or "").strip()
        language = info.split()[0].lower() if info else DEFAULT_LANGUAGE
        return [
            BlockNode(
                TokenKind.CODE_BLOCK,
                content=content,
                raw=_source(node, self.lines),
                language=language,
                provisional=_fence_is_open(node, self.line_count),
            )
        ]

    def _math(self, node: SyntaxTreeNode) -> list[BlockNode]:
        return [
            BlockNode(
                TokenKind.MATH_BLOCK,
                content=node.content.strip(),
                raw=_source(node, self.lines),
            )
        ]

    def _rule(self, node: SyntaxTreeNode) -> list[BlockNode]:
        return [BlockNode(TokenKind.HORIZONTAL_RULE, raw=_source(node, self.lines))]

    def _blockquote(self, node: SyntaxTreeNode) -> list[BlockNode]:
        children = self.walk(node.children)
        return [
            BlockNode(
                TokenKind.BLOCKQUOTE,
                content="\n".join(child.content for child in children if child.content),
                raw=_source(node, self.lines),
                children=children,
            )
        ]

    def _list(self, node: SyntaxTreeNode, level: int = 0) -> list[BlockNode]:
        ordered = node.type == "ordered_list"
        blocks: list[BlockNode] = []
        for item in node.children:
            texts: list[str] = []
            nested: list[BlockNode] = []
            for child in item.children:
                if child.type in _LIST_TYPES:
                    nested.extend(self._list(child, level + 1))
                elif child.type == "paragraph":
                    texts.append(node_text(child))
                else:
                    nested.extend(self.walk([child]))
            blocks.append(
                BlockNode(
                    TokenKind.LIST_ITEM,
                    content="\n".join(texts),
                    raw=_source(item, self.lines),
                    depth=level,
                    ordered=ordered,
                )
            )
            blocks.extend(nested)
        return blocks

    def _table(self, node: SyntaxTreeNode) -> list[BlockNode]:
        header: list[SyntaxTreeNode] = []
        rows: list[list[SyntaxTreeNode]] = []
        for section in node.children:
            for row in section.children:
                if section.type == "thead":
                    header = list(row.children)
                else:
                    rows.append(list(row.children))
        return [
            BlockNode(
                TokenKind.TABLE,
                raw=_source(node, self.lines),
                header=header,
                rows=rows,
                alignment=[_alignment(cell) for cell in header],
            )
        ]

    def _other(self, node: SyntaxTreeNode) -> list[BlockNode]:
        content = node.content if not node.children else node_text(node)
        return [
            BlockNode(
                TokenKind.TEXT,
                content=content.rstrip("\n"),
                raw=_source(node, self.lines),
            )
        ]


def _alignment(cell: SyntaxTreeNode) -> Alignment:
    style = str(cell.attrs.get("style", ""))
    if "center" in style:
        return Alignment.CENTER
    if "right" in style:
        return Alignment.RIGHT
    return Alignment.LEFT


def tokenize(
    buffer: str, config: StreamConfig | None = None, md: MarkdownIt | None = None
) -> list[BlockNode]:
    """Parse the entire buffer into block nodes.

    Args:
        buffer: Full text received so far.
        config: Session configuration, used when `md` is not supplied.
        md: Prebuilt grammar, normally owned by the parser session.

    Returns:
        list[BlockNode]: Block nodes in document order. An unterminated fence
            at the end of the buffer yields a provisional code block.

    Raises:
        TokenizeError: If the grammar fails on the buffer, or reaches its
            nesting limit and would drop the nested content.

    Examples:
        tokenize("# Title\\n\\nSome *text*")
    """
    md = md or build_markdown(config)
    # Line maps count lines the way the grammar does.
    text = NEWLINE_PATTERN.sub("\n", buffer)
    try:
        tokens = md.parse(text)
        _check_nesting(tokens, md.options["maxNesting"])
        root = SyntaxTreeNode(tokens)
        return _Walker(text).walk(root.children)
    except Exception as error:
        raise TokenizeError(len(buffer)) from error
