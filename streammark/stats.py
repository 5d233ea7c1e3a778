"""Lightweight statistics for a streaming session."""

from __future__ import annotations

import time
from dataclasses import dataclass


@dataclass
class StreamStats:
    """Snapshot of a session's streaming progress.

    Attributes:
        chunks_received: Number of `add_chunk` calls.
        chars_received: Characters received before preprocessing.
        tokens_emitted: Length of the most recent token list.
        parse_errors: Number of times the grammar failed and the line
            fallback was used.
        elapsed_seconds: Time since the session started or was cleared.
        throughput: Characters per second over `elapsed_seconds`.
    """

    chunks_received: int = 0
    chars_received: int = 0
    tokens_emitted: int = 0
    parse_errors: int = 0
    elapsed_seconds: float = 0.0
    throughput: float = 0.0


class StreamStatsTracker:
    """Accumulate `StreamStats` for one parser session."""

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._started = clock()
        self._stats = StreamStats()

    def record_chunk(self, chars: int, tokens: int) -> None:
        self._stats.chunks_received += 1
        self._stats.chars_received += chars
        self._stats.tokens_emitted = tokens

    def record_error(self) -> None:
        self._stats.parse_errors += 1

    def snapshot(self) -> StreamStats:
        """Return a copy of the current statistics with timing filled in."""
        elapsed = max(self._clock() - self._started, 0.0)
        throughput = self._stats.chars_received / elapsed if elapsed > 0 else 0.0
        return StreamStats(
            chunks_received=self._stats.chunks_received,
            chars_received=self._stats.chars_received,
            tokens_emitted=self._stats.tokens_emitted,
            parse_errors=self._stats.parse_errors,
            elapsed_seconds=elapsed,
            throughput=throughput,
        )

    def progress_string(self) -> str:
        """Format a one-line progress summary.

        Examples:
            tracker.progress_string()  # "12 chunks • 1.2 KB • 3.4 KB/s • 0.4s"
        """
        stats = self.snapshot()
        parts = [
            f"{stats.chunks_received} chunks",
            format_size(stats.chars_received),
            f"{format_size(stats.throughput)}/s",
            f"{stats.elapsed_seconds:.1f}s",
        ]
        if stats.parse_errors:
            parts.append(f"{stats.parse_errors} fallbacks")
        return " • ".join(parts)

    def reset(self) -> None:
        self._started = self._clock()
        self._stats = StreamStats()


def format_size(size: float) -> str:
    """Format a character count with binary units.

    Examples:
        format_size(512)  # "512 B"
        format_size(2048)  # "2.0 KB"
    """
    if size < 1024:
        return f"{size:.0f} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"
