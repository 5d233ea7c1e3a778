"""Constants used across the streammark package."""

from __future__ import annotations

import re

from .config import StreamConfig

DEFAULT_CONFIG = StreamConfig()

# Chunk preprocessing
NAMED_ENTITIES = {
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "nbsp": " ",
}
ENTITY_PATTERN = re.compile(r"&(?:#(?P<dec>[0-9]+)|#[xX](?P<hex>[0-9a-fA-F]+)|(?P<name>[a-z]+));")
# A chunk tail that may still grow into an entity or a pseudo-tag.
PENDING_ENTITY_PATTERN = re.compile(r"&(?:#[xX]?[0-9a-fA-F]{0,8}|[a-z]{0,6})\Z")
PENDING_TAG_PATTERN = re.compile(r"\{/?[a-z]{0,6}\Z")
ITALIC_TAGS = ("{italic}", "{/italic}")
MAX_NUMERIC_REFERENCE_DIGITS = 8

# Diagram detection
DIAGRAM_KEYWORDS = (
    "graph",
    "flowchart",
    "sequenceDiagram",
    "classDiagram",
    "stateDiagram",
    "journey",
    "gantt",
    "pie",
    "gitgraph",
)
DEFAULT_LANGUAGE = "text"

# Tail signatures, bounded to keep scans linear.
STRONG_TAIL_LIMIT = 100
EMPHASIS_TAIL_LIMIT = 100
CODE_TAIL_LIMIT = 500
LINK_TEXT_TAIL_LIMIT = 200
LINK_TARGET_TAIL_LIMIT = 500
HEADING_TAIL_LIMIT = 200

STRONG_TAIL_PATTERN = re.compile(rf"\*\*[^*\n]{{1,{STRONG_TAIL_LIMIT}}}\Z")
EMPHASIS_TAIL_PATTERN = re.compile(rf"\*[^*\n]{{1,{EMPHASIS_TAIL_LIMIT}}}\Z")
CODE_TAIL_PATTERN = re.compile(rf"`[^`\n]{{1,{CODE_TAIL_LIMIT}}}\Z")
LINK_TEXT_TAIL_PATTERN = re.compile(rf"(?<!\x1b)\[[^\]\n]{{1,{LINK_TEXT_TAIL_LIMIT}}}\Z")
LINK_TARGET_TAIL_PATTERN = re.compile(
    rf"(?<!\x1b)\[[^\]\n]*\]\([^)\n]{{0,{LINK_TARGET_TAIL_LIMIT}}}\Z"
)
HEADING_TAIL_PATTERN = re.compile(rf"^#{{1,6}}\s[^\n]{{1,{HEADING_TAIL_LIMIT}}}\Z")
LIST_MARKER_PATTERN = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s+")
FENCE_LINE_PATTERN = re.compile(r"^\s{0,3}(?:`{3,}|~{3,})")

# Fallback line classification
FALLBACK_HEADING_PATTERN = re.compile(r"^(#{1,6})\s")
FALLBACK_BULLET_PATTERN = re.compile(r"^[-*+]\s")
FALLBACK_ORDERED_PATTERN = re.compile(r"^\d+\.\s")
FALLBACK_BLOCKQUOTE_PREFIX = re.compile(r"^(?:>\s*)+")
FALLBACK_LIST_PREFIX = re.compile(r"^(?:[-*+]|\d+\.)\s*")

# Line endings the grammar treats as a newline.
NEWLINE_PATTERN = re.compile(r"\r\n?")

# Placeholders used when a render-time transform fails.
PLACEHOLDERS = {
    "diagram": "[Diagram Render Error]",
    "table": DEFAULT_CONFIG.table_error_placeholder,
    "math-inline": "[Math Render Error]",
    "math-block": "[Math Render Error]",
}

# CLI defaults
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
DEFAULT_CHUNK_SIZE = 16
