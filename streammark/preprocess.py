"""Chunk preprocessing: entity decoding and pseudo-tag rewriting."""

from __future__ import annotations

import re

from .constants import (
    ENTITY_PATTERN,
    ITALIC_TAGS,
    MAX_NUMERIC_REFERENCE_DIGITS,
    NAMED_ENTITIES,
    PENDING_ENTITY_PATTERN,
    PENDING_TAG_PATTERN,
)


def _decode_reference(match: re.Match[str]) -> str:
    name = match.group("name")
    if name is not None:
        return NAMED_ENTITIES.get(name, match.group(0))

    digits = match.group("dec")
    base = 10
    if digits is None:
        digits = match.group("hex")
        base = 16

    if len(digits) > MAX_NUMERIC_REFERENCE_DIGITS:
        return match.group(0)

    code_point = int(digits, base)
    if code_point == 0 or 0xD800 <= code_point <= 0xDFFF or code_point > 0x10FFFF:
        return match.group(0)
    return chr(code_point)


def decode_entities(text: str) -> str:
    """Decode the supported HTML entity references in a single pass.

    Named references outside the supported set and numeric references that do
    not denote a valid code point are left untouched.

    Examples:
        decode_entities("a &amp; b")  # "a & b"
        decode_entities("&#x1F600;")  # "😀"
        decode_entities("&#xD800;")  # "&#xD800;"
    """
    if "&" not in text:
        return text
    return ENTITY_PATTERN.sub(_decode_reference, text)


def preprocess(raw: str) -> str:
    """Normalize an incoming chunk before it joins the buffer.

    Rewrites ``{italic}...{/italic}`` into ``_`` emphasis, then decodes HTML
    entities, so a decoded ``{`` never forms a tag. ANSI escape sequences are
    payload and pass through unchanged.

    Args:
        raw: Chunk text as received.

    Returns:
        str: Preprocessed chunk.

    Examples:
        preprocess("{italic}note{/italic} &lt;3")  # "_note_ <3"
    """
    processed = raw
    for tag in ITALIC_TAGS:
        processed = processed.replace(tag, "_")
    return decode_entities(processed)


def split_pending(text: str) -> tuple[str, str]:
    """Split off a trailing fragment that a later chunk may complete.

    A chunk boundary can fall inside ``&amp;`` or ``{italic}``; the fragment is
    held back raw so that it is preprocessed once the next chunk arrives.

    Returns:
        tuple[str, str]: Text ready for preprocessing and the held-back tail.

    Examples:
        split_pending("Tom &am")  # ("Tom ", "&am")
        split_pending("{ital")  # ("", "{ital")
        split_pending("done")  # ("done", "")
    """
    match = PENDING_ENTITY_PATTERN.search(text)
    if match is None:
        match = PENDING_TAG_PATTERN.search(text)
        if match is not None and not any(tag.startswith(match.group(0)) for tag in ITALIC_TAGS):
            match = None

    if match is None:
        return text, ""
    return text[: match.start()], text[match.start() :]
