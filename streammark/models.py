"""Data models for streammark."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class TokenKind(Enum):
    """Closed set of token kinds emitted to the rendering layer.

    Block kinds are laid out top-to-bottom; inline kinds are laid out
    left-to-right within a line (see `is_inline`).
    """

    HEADING = "heading"
    PARAGRAPH = "paragraph"
    TEXT = "text"
    STRONG = "strong"
    EMPHASIS = "emphasis"
    INLINE_CODE = "inline-code"
    CODE_BLOCK = "code-block"
    BLOCKQUOTE = "blockquote"
    LIST_ITEM = "list-item"
    LINK = "link"
    STRIKETHROUGH = "strikethrough"
    HORIZONTAL_RULE = "horizontal-rule"
    TABLE = "table"
    DIAGRAM = "diagram"
    MATH_INLINE = "math-inline"
    MATH_BLOCK = "math-block"

    @property
    def is_inline(self) -> bool:
        return self in _INLINE_KINDS


_INLINE_KINDS = frozenset(
    {
        TokenKind.TEXT,
        TokenKind.STRONG,
        TokenKind.EMPHASIS,
        TokenKind.INLINE_CODE,
        TokenKind.LINK,
        TokenKind.STRIKETHROUGH,
        TokenKind.MATH_INLINE,
    }
)


class Alignment(Enum):
    """Column alignment of a table."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


@dataclass
class Token:
    """Flat unit of parsed content ready for rendering.

    Attributes:
        kind: Token kind.
        content: Semantic payload with delimiter syntax stripped.
        raw: Original source slice, kept for fallback rendering.
        depth: Heading level (1-6) or list nesting (0 for top level).
        ordered: Whether a list item belongs to an ordered list.
        language: Declared language of a code block.
        provisional: True while the closing delimiter has not been seen.
        url: Target of a link token.
    """

    kind: TokenKind
    content: str = ""
    raw: str = ""
    depth: int | None = None
    ordered: bool = False
    language: str | None = None
    provisional: bool = False
    url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly mapping, omitting unset optional fields."""
        data = asdict(self)
        data["kind"] = self.kind.value
        return {key: value for key, value in data.items() if value is not None}


@dataclass
class BlockNode:
    """Intermediate block-level node produced by the tokenizer.

    Attributes:
        kind: Block kind (paragraph, heading, code block, table, ...).
        content: Plain text payload.
        raw: Source slice covered by the node.
        depth: Heading level or list nesting.
        ordered: Whether a list item belongs to an ordered list.
        language: Code block language tag.
        provisional: Set by the tokenizer for fences that are still open.
        inline: Inline children from the grammar, or None when the node only
            carries raw text.
        children: Nested block nodes (blockquotes).
        header: Table header cell objects.
        rows: Table body rows of cell objects.
        alignment: Per-column table alignment.
    """

    kind: TokenKind
    content: str = ""
    raw: str = ""
    depth: int | None = None
    ordered: bool = False
    language: str | None = None
    provisional: bool = False
    inline: list[Any] | None = None
    children: list[BlockNode] = field(default_factory=list)
    header: list[Any] | None = None
    rows: list[list[Any]] | None = None
    alignment: list[Alignment] = field(default_factory=list)


@dataclass
class TableData:
    """Normalized table: rectangular rows with per-column alignment.

    Attributes:
        headers: Header cell texts.
        rows: Body rows, each exactly as long as `headers`.
        alignment: Alignment for every column.
    """

    headers: list[str]
    rows: list[list[str]] = field(default_factory=list)
    alignment: list[Alignment] = field(default_factory=list)

    def to_markdown(self) -> str:
        """Serialize into the canonical pipe-delimited Markdown table.

        Examples:
            TableData(["a", "b"], [["1", "2"]]).to_markdown()
            # "| a | b |\\n| --- | --- |\\n| 1 | 2 |"
        """
        separators = []
        for index in range(len(self.headers)):
            align = self.alignment[index] if index < len(self.alignment) else Alignment.LEFT
            separators.append(_SEPARATORS[align])

        lines = [_format_row(self.headers), _format_row(separators, escape=False)]
        lines.extend(_format_row(row) for row in self.rows)
        return "\n".join(lines)


_SEPARATORS = {
    Alignment.LEFT: "---",
    Alignment.CENTER: ":---:",
    Alignment.RIGHT: "---:",
}


def _format_row(cells: list[str], escape: bool = True) -> str:
    if escape:
        cells = [cell.replace("|", "\\|") for cell in cells]
    return "| " + " | ".join(cells) + " |"
