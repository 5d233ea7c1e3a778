"""Package-specific exception types."""

from __future__ import annotations


class StreamMarkError(ValueError):
    """Base class for streammark errors."""


class TokenizeError(StreamMarkError):
    """Raised when the Markdown grammar fails on a buffer.

    Raised by `tokenize`; parser sessions recover from it with the
    line-oriented fallback instead.

    Args:
        buffer_length: Length of the buffer that failed to parse.
    """

    def __init__(self, buffer_length: int):
        self.buffer_length = buffer_length
        super().__init__(f"Failed to tokenize buffer of {buffer_length} characters")


class TableFormatError(StreamMarkError):
    """Raised when text cannot be read as a pipe-delimited Markdown table."""


class TransformError(StreamMarkError):
    """Raised when a render-time transform fails in strict mode.

    Args:
        kind: Value of the token kind whose transform failed.
    """

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"Transform for `{kind}` tokens failed")
