"""Render-time transforms applied to token content.

Diagram-to-ASCII, table pretty-printing and math rendering live outside this
package. They are plain callables from content to replacement content, keyed
by token kind; a failing transform never takes the render loop down.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import replace

from .classifier import parse_markdown_table
from .constants import PLACEHOLDERS
from .exceptions import TransformError
from .models import TableData, Token, TokenKind

logger = logging.getLogger(__name__)

Transform = Callable[[str], str]


def placeholder_for(kind: TokenKind) -> str:
    """Return the placeholder shown when a transform for `kind` fails."""
    return PLACEHOLDERS.get(kind.value, f"[{kind.value.title()} Render Error]")


def apply_transforms(
    tokens: list[Token], transforms: Mapping[TokenKind, Transform], strict: bool = False
) -> list[Token]:
    """Replace token content using per-kind transforms.

    Args:
        tokens: Tokens from a parser session; they are not mutated.
        transforms: Callables keyed by token kind, typically for diagram,
            table, math-inline and math-block tokens.
        strict: Raise instead of substituting a placeholder on failure.

    Returns:
        list[Token]: New token list with transformed content.

    Raises:
        TransformError: If a transform fails and `strict` is True.

    Examples:
        apply_transforms(tokens, {TokenKind.DIAGRAM: render_ascii_diagram})
    """
    transformed: list[Token] = []
    for token in tokens:
        transform = transforms.get(token.kind)
        if transform is None:
            transformed.append(token)
            continue
        try:
            content = transform(token.content)
        except Exception as error:
            if strict:
                raise TransformError(token.kind.value) from error
            logger.warning("Transform for %s tokens failed", token.kind.value, exc_info=True)
            content = placeholder_for(token.kind)
        transformed.append(replace(token, content=content))
    return transformed


def table_data(token: Token) -> TableData:
    """Rebuild structured table data from a table token's canonical content.

    Raises:
        ValueError: If the token is not a table token.
        TableFormatError: If the content is not a valid table.
    """
    if token.kind is not TokenKind.TABLE:
        raise ValueError(f"Expected a table token, got {token.kind.value}")
    return parse_markdown_table(token.content)
