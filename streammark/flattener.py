"""Flattening of block nodes into non-nested token runs.

The rendering layer lays inline runs out left-to-right and has no use for
nested inline markup, so nesting is discarded here: a mark's content is the
plain text of everything inside it.
"""

from __future__ import annotations

import re
from typing import NamedTuple

from markdown_it.tree import SyntaxTreeNode

from .models import BlockNode, Token, TokenKind
from .tokenizer import node_text

# Inline node types that become a single leaf token.
_LEAF_KINDS = {
    "strong": TokenKind.STRONG,
    "em": TokenKind.EMPHASIS,
    "code_inline": TokenKind.INLINE_CODE,
    "link": TokenKind.LINK,
    "s": TokenKind.STRIKETHROUGH,
    "math_inline": TokenKind.MATH_INLINE,
    "math_inline_double": TokenKind.MATH_INLINE,
}
_TEXT_TYPES = frozenset({"text", "text_special", "html_inline", "softbreak", "hardbreak", "image"})
_MATH_DELIMITERS = {"math_inline": "$", "math_inline_double": "$$"}


class _Pattern(NamedTuple):
    kind: TokenKind
    regex: re.Pattern[str]


# Priority order matters for matches starting at the same offset.
FALLBACK_PATTERNS = (
    _Pattern(TokenKind.STRONG, re.compile(r"\*\*([^*]+)\*\*")),
    _Pattern(TokenKind.STRONG, re.compile(r"__([^_]+)__")),
    _Pattern(TokenKind.EMPHASIS, re.compile(r"\*([^*]+)\*")),
    _Pattern(TokenKind.EMPHASIS, re.compile(r"_([^_]+)_")),
    _Pattern(TokenKind.INLINE_CODE, re.compile(r"`([^`]+)`")),
    _Pattern(TokenKind.LINK, re.compile(r"\[([^\]]+)\]\(([^)]+)\)")),
    _Pattern(TokenKind.STRIKETHROUGH, re.compile(r"~~([^~]+)~~")),
)


def _leaf_raw(node: SyntaxTreeNode, content: str) -> str:
    if node.type == "code_inline":
        return f"{node.markup}{content}{node.markup}"
    if node.type == "link":
        return f"[{content}]({node.attrs.get('href', '')})"
    if node.type in _MATH_DELIMITERS:
        delimiter = _MATH_DELIMITERS[node.type]
        return f"{delimiter}{content}{delimiter}"
    return f"{node.markup}{content}{node.markup}"


def _append_text(tokens: list[Token], text: str, raw: str) -> None:
    if not text:
        return
    if tokens and tokens[-1].kind is TokenKind.TEXT:
        previous = tokens[-1]
        previous.content += text
        previous.raw += raw
        return
    tokens.append(Token(TokenKind.TEXT, content=text, raw=raw))


def flatten_inline(nodes: list[SyntaxTreeNode]) -> list[Token]:
    """Flatten an inline node tree into leaf tokens in reading order.

    Examples:
        flatten_inline(inline_children_of("a **b _c_** d"))
        # [text "a ", strong "b c", text " d"]
    """
    tokens: list[Token] = []
    for node in nodes:
        kind = _LEAF_KINDS.get(node.type)
        if kind is not None:
            content = node_text(node)
            tokens.append(
                Token(
                    kind,
                    content=content,
                    raw=_leaf_raw(node, content),
                    url=node.attrs.get("href") if kind is TokenKind.LINK else None,
                )
            )
        elif node.type in _TEXT_TYPES or not node.children:
            text = node_text(node)
            _append_text(tokens, text, node.content if node.type != "image" else text)
        else:
            for token in flatten_inline(node.children):
                if token.kind is TokenKind.TEXT:
                    _append_text(tokens, token.content, token.raw)
                else:
                    tokens.append(token)
    return tokens


def scan_inline(text: str) -> list[Token]:
    """Derive inline tokens from raw text with independent regex scans.

    Matches of every pattern are collected, sorted by start offset, and emitted
    leftmost-first; a match that starts inside the previous one is skipped.
    Whitespace-only gaps between matches are dropped.

    Examples:
        scan_inline("a **b** `c`")
        # [text "a ", strong "b", inline-code "c"]
    """
    matches = []
    for priority, pattern in enumerate(FALLBACK_PATTERNS):
        for match in pattern.regex.finditer(text):
            matches.append((match.start(), priority, match, pattern.kind))
    matches.sort(key=lambda item: (item[0], item[1]))

    tokens: list[Token] = []
    last_end = 0
    for start, _, match, kind in matches:
        if start < last_end:
            continue
        gap = text[last_end:start]
        if gap.strip():
            tokens.append(Token(TokenKind.TEXT, content=gap, raw=gap))
        tokens.append(
            Token(
                kind,
                content=match.group(1),
                raw=match.group(0),
                url=match.group(2) if kind is TokenKind.LINK else None,
            )
        )
        last_end = match.end()

    tail = text[last_end:]
    if tail.strip():
        tokens.append(Token(TokenKind.TEXT, content=tail, raw=tail))
    return tokens


def _paragraph(node: BlockNode) -> list[Token]:
    if node.inline is not None:
        return flatten_inline(node.inline)
    tokens = scan_inline(node.content or node.raw)
    if tokens:
        return tokens
    return [Token(TokenKind.PARAGRAPH, content=node.content, raw=node.raw)]


def _blockquote(node: BlockNode) -> list[Token]:
    if not node.children:
        return [Token(TokenKind.BLOCKQUOTE, content=node.content, raw=node.raw)]
    tokens: list[Token] = []
    for child in node.children:
        tokens.extend(flatten(child))
    return tokens


def _block(node: BlockNode) -> list[Token]:
    return [
        Token(
            node.kind,
            content=node.content,
            raw=node.raw,
            depth=node.depth,
            ordered=node.ordered,
            language=node.language,
            provisional=node.provisional,
        )
    ]


def flatten(node: BlockNode) -> list[Token]:
    """Turn one block node into a flat token run.

    Paragraph and blockquote nodes descend into their inline children (or
    nested blocks) and yield leaf tokens; every other node maps to exactly one
    token.

    Args:
        node: Classified block node.

    Returns:
        list[Token]: Tokens in document order.
    """
    if node.kind is TokenKind.PARAGRAPH:
        return _paragraph(node)
    if node.kind is TokenKind.BLOCKQUOTE:
        return _blockquote(node)
    return _block(node)


def flatten_all(nodes: list[BlockNode]) -> list[Token]:
    """Flatten every node, preserving document order."""
    tokens: list[Token] = []
    for node in nodes:
        tokens.extend(flatten(node))
    return tokens
