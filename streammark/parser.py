"""Streaming Markdown parser session."""

from __future__ import annotations

import logging
from dataclasses import replace

from .classifier import classify
from .config import StreamConfig, normalize_config, validate_config
from .fallback import parse_partial
from .flattener import flatten_all
from .incomplete import mark_incomplete, settle_provisional
from .models import Token
from .preprocess import preprocess, split_pending
from .stats import StreamStats, StreamStatsTracker
from .tokenizer import build_markdown, tokenize

logger = logging.getLogger(__name__)


class StreamingParser:
    """Turn a growing Markdown buffer into a flat token list.

    Every chunk triggers a full re-parse of the buffer; the previous token
    list is discarded and replaced. At most one token, the last, is
    provisional.

    Args:
        config: Session configuration, fixed for the session's lifetime.

    Raises:
        ConfigError: If the configuration is invalid.

    Examples:
        parser = StreamingParser()
        parser.add_chunk("# Hel")  # [heading "Hel", provisional]
        parser.add_chunk("lo\\n\\nThis is **bo")
        parser.add_chunk("ld** text.")
    """

    def __init__(self, config: StreamConfig | None = None):
        config = normalize_config(config or StreamConfig())
        validate_config(config)
        self._config = config
        self._md = build_markdown(config)
        self._buffer = ""
        self._pending = ""
        self._tokens: list[Token] = []
        self._stats = StreamStatsTracker()

    @property
    def config(self) -> StreamConfig:
        return self._config

    @property
    def tokens(self) -> list[Token]:
        """Most recently emitted token list."""
        return list(self._tokens)

    @property
    def stats(self) -> StreamStats:
        return self._stats.snapshot()

    def progress(self) -> str:
        return self._stats.progress_string()

    def add_chunk(self, chunk: str) -> list[Token]:
        """Append a chunk and re-tokenize the whole buffer.

        Args:
            chunk: Raw text as received from the stream.

        Returns:
            list[Token]: Tokens for the entire buffer. Degrades to the line
                fallback instead of raising when the grammar fails.

        Raises:
            TypeError: If `chunk` is not a string.
        """
        if not isinstance(chunk, str):
            raise TypeError(f"chunk must be str, not {type(chunk).__name__}")

        ready, self._pending = split_pending(self._pending + chunk)
        self._buffer += preprocess(ready)
        self._tokens = self._parse(self.get_buffer())
        self._stats.record_chunk(len(chunk), len(self._tokens))
        return list(self._tokens)

    def _parse(self, buffer: str) -> list[Token]:
        try:
            nodes = classify(tokenize(buffer, md=self._md), self._config)
            tokens = flatten_all(nodes)
            tokens = mark_incomplete(tokens, buffer, self._config.handle_incomplete_markdown)
        except Exception:
            logger.warning(
                "Falling back to line parsing for a %d character buffer", len(buffer), exc_info=True
            )
            self._stats.record_error()
            tokens = parse_partial(buffer)

        if not self._config.handle_incomplete_markdown:
            return [replace(token, provisional=False) for token in tokens]
        return settle_provisional(tokens)

    def get_buffer(self) -> str:
        """Return all text received since the last clear.

        A trailing fragment that may still become an entity reference is
        included as received.
        """
        return self._buffer + self._pending

    def clear(self) -> None:
        """Reset the buffer, tokens, and statistics."""
        self._buffer = ""
        self._pending = ""
        self._tokens = []
        self._stats.reset()


def parse_document(text: str, config: StreamConfig | None = None) -> list[Token]:
    """Tokenize a complete document in one pass.

    Examples:
        parse_document("| a | b |\\n|---|---|\\n| 1 | 2 |")  # one table token
    """
    return StreamingParser(config).add_chunk(text)
