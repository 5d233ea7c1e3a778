"""
Replays a Markdown file through a streaming parser session in fixed-size chunks
and prints the resulting tokens, for inspecting how a stream is tokenized.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click
from .config import ConfigError, build_config
from .constants import DEFAULT_CHUNK_SIZE
from .filesystem import get_max_file_size, read_source
from .models import Token
from .parser import StreamingParser

__all__ = ["cli"]


def split_chunks(text: str, chunk_size: int) -> list[str]:
    """Cut text into consecutive chunks of at most `chunk_size` characters.

    Examples:
        split_chunks("abcde", 2)  # ["ab", "cd", "e"]
    """
    return [text[index : index + chunk_size] for index in range(0, len(text), chunk_size)]


def format_tokens(tokens: list[Token], output_format: str) -> str:
    """Render a token list as JSON or as one readable line per token."""
    if output_format == "json":
        return json.dumps([token.to_dict() for token in tokens], ensure_ascii=False)

    lines = []
    for token in tokens:
        flags = []
        if token.depth is not None:
            flags.append(f"depth={token.depth}")
        if token.language:
            flags.append(f"lang={token.language}")
        if token.ordered:
            flags.append("ordered")
        if token.provisional:
            flags.append("provisional")
        suffix = f" ({', '.join(flags)})" if flags else ""
        lines.append(f"{token.kind.value}{suffix}: {token.content!r}")
    return "\n".join(lines)


@click.command()
@click.version_option(package_name="streammark")
@click.option(
    "--chunk-size",
    type=click.IntRange(min=1),
    default=DEFAULT_CHUNK_SIZE,
    show_default=True,
    help="Characters per simulated chunk",
)
@click.option(
    "--incomplete/--no-incomplete",
    "handle_incomplete",
    default=None,
    help="Flag unterminated constructs as provisional",
)
@click.option("--steps", is_flag=True, help="Print the token list after every chunk")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
    help="Output format",
)
@click.option("--stats", "show_stats", is_flag=True, help="Print stream statistics to stderr")
@click.option("-v", "--verbose", is_flag=True, help="Log parser fallbacks to stderr")
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def cli(
    filepath: Path,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    handle_incomplete: bool | None = None,
    steps: bool = False,
    output_format: str = "text",
    show_stats: bool = False,
    verbose: bool = False,
):
    """
    Entry point for replaying a Markdown file as a token stream.

    Args:
        filepath: Path to the Markdown file to replay.
        chunk_size: Number of characters fed per chunk.
        handle_incomplete: Override for `handle_incomplete_markdown`.
        steps: Print every intermediate token list, not only the final one.
        output_format: ``text`` or ``json``.
        show_stats: Print stream statistics to stderr when done.
        verbose: Enable debug logging.

    Raises:
        click.BadParameter: If the configuration is invalid.
        click.ClickException: If the file cannot be read.

    Examples:
        streammark reply.md --chunk-size 4 --steps
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        config = build_config(
            filepath.resolve().parent, handle_incomplete_markdown=handle_incomplete
        )
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error

    try:
        max_file_size = get_max_file_size()
        text = read_source(filepath, max_file_size)
    except (ValueError, IOError) as error:
        raise click.ClickException(str(error)) from error

    parser = StreamingParser(config)
    tokens: list[Token] = []
    for index, chunk in enumerate(split_chunks(text, chunk_size), start=1):
        tokens = parser.add_chunk(chunk)
        if steps:
            click.echo(f"--- chunk {index}: {chunk!r}")
            click.echo(format_tokens(tokens, output_format))

    if not steps:
        click.echo(format_tokens(tokens, output_format))

    if show_stats:
        click.echo(parser.progress(), err=True)


if __name__ == "__main__":
    cli()
