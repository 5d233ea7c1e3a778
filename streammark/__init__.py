"""
streammark: incremental Markdown tokenizer for streamed terminal output.

Markdown arriving chunk by chunk (as from an LLM) is re-parsed on every chunk
into a flat, typed token list; a construct that is still open at the end of
the buffer is marked provisional.

Library Usage:
    from streammark import StreamingParser

    parser = StreamingParser()
    for chunk in stream:
        tokens = parser.add_chunk(chunk)
        render(tokens)

CLI Usage:
    streammark reply.md --chunk-size 8 --steps
"""

from .classifier import classify, parse_markdown_table
from .config import ConfigError, StreamConfig
from .exceptions import StreamMarkError, TableFormatError, TokenizeError, TransformError
from .fallback import parse_partial
from .flattener import flatten
from .incomplete import mark_incomplete
from .models import Alignment, BlockNode, TableData, Token, TokenKind
from .parser import StreamingParser, parse_document
from .preprocess import preprocess
from .stats import StreamStats
from .tokenizer import tokenize
from .transforms import apply_transforms

__version__ = "0.1.0"

__all__ = [
    # Core functionality
    "StreamingParser",
    "parse_document",
    # Pipeline stages
    "preprocess",
    "tokenize",
    "classify",
    "flatten",
    "mark_incomplete",
    "parse_partial",
    # Data models
    "Alignment",
    "BlockNode",
    "StreamConfig",
    "StreamStats",
    "TableData",
    "Token",
    "TokenKind",
    # Utilities
    "apply_transforms",
    "parse_markdown_table",
    # Exceptions
    "ConfigError",
    "StreamMarkError",
    "TableFormatError",
    "TokenizeError",
    "TransformError",
    # Version
    "__version__",
]
