"""Configuration loading and management."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
import tomllib

from .exceptions import StreamMarkError


@dataclass(frozen=True)
class StreamConfig:
    """Configuration for a streaming parser session.

    A session's configuration is fixed at construction; build a new parser to
    change it.

    Attributes:
        handle_incomplete_markdown: Flag the trailing token as provisional when
            the buffer ends inside an unterminated construct.
        math: Recognize ``$...$`` and ``$$...$$`` math.
        auto_detect_diagrams: Relabel untagged code blocks whose first line
            starts with a diagram keyword.
        diagram_languages: Fence language tags that always denote a diagram.
        max_nesting: Maximum block/inline nesting handed to the grammar.
        table_error_placeholder: Content used when a table cannot be
            normalized.

    Examples:
        StreamConfig(handle_incomplete_markdown=False, diagram_languages=("mermaid", "dot"))
    """

    handle_incomplete_markdown: bool = True
    math: bool = True
    auto_detect_diagrams: bool = True
    diagram_languages: tuple[str, ...] = ("mermaid",)

    # Limits
    max_nesting: int = 20

    # Placeholders
    table_error_placeholder: str = "[Table Render Error]"


class ConfigError(StreamMarkError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`max_nesting` must be a positive integer")
    """


def load_config(search_path: Path) -> StreamConfig:
    """Load configuration from the nearest config file.

    Walks parent directories from `search_path` to the filesystem root, reading
    the ``[tool.streammark]`` table from `pyproject.toml` and the
    ``[streammark]`` or ``[tool.streammark]`` table from `.streammark.toml`
    when present. Returns default values when no configuration is found. TOML
    files that cannot be read or decoded are skipped.

    Args:
        search_path: Directory used as the starting point for configuration lookup.

    Returns:
        StreamConfig: Loaded configuration with defaults applied when necessary.

    Raises:
        ConfigError: If the table is present but not a mapping or contains
            unsupported keys.

    Examples:
        load_config(Path("docs"))
    """
    current = search_path.resolve()

    while True:
        pyproject_config = _load_from_file(
            current / "pyproject.toml", table_paths=[("tool", "streammark")]
        )
        if pyproject_config is not None:
            return normalize_config(pyproject_config)

        dotfile_config = _load_from_file(
            current / ".streammark.toml",
            table_paths=[("streammark",), ("tool", "streammark")],
        )
        if dotfile_config is not None:
            return normalize_config(dotfile_config)

        parent = current.parent
        if parent == current:
            break
        current = parent

    return StreamConfig()


_MISSING = object()


def _load_from_file(config_file: Path, table_paths: list[tuple[str, ...]]) -> StreamConfig | None:
    if not config_file.exists():
        return None

    try:
        with open(config_file, "rb") as stream:
            data = tomllib.load(stream)
    except (OSError, tomllib.TOMLDecodeError):
        return None

    for table_path in table_paths:
        raw_config = _extract_table(data, table_path)
        if raw_config is _MISSING:
            continue
        return _build_config_from_raw(raw_config, config_file, table_path)

    return None


def _extract_table(data: object, table_path: tuple[str, ...]) -> object:
    current = data
    for key in table_path:
        if not isinstance(current, dict) or key not in current:
            return _MISSING
        current = current[key]
    return current


def _build_config_from_raw(
    raw_config: object, config_file: Path, table_path: tuple[str, ...]
) -> StreamConfig:
    table_display = ".".join(table_path)

    if raw_config is None:
        return StreamConfig()

    if not isinstance(raw_config, dict):
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}")

    if not raw_config:
        return StreamConfig()

    try:
        return StreamConfig(**raw_config)
    except TypeError as error:
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}") from error


def normalize_config(config: StreamConfig) -> StreamConfig:
    """Coerce TOML-friendly values into their canonical form.

    Lists of diagram languages become lower-cased tuples; a single string is
    treated as a one-element list.
    """
    languages = config.diagram_languages
    if isinstance(languages, str):
        languages = (languages,)
    if isinstance(languages, (list, tuple)):
        languages = tuple(
            language.strip().lower() if isinstance(language, str) else language
            for language in languages
        )
    return replace(config, diagram_languages=languages)


def validate_config(config: StreamConfig) -> None:
    """Validate a `StreamConfig` instance.

    Args:
        config: Configuration to validate.

    Raises:
        ConfigError: If flags are not booleans, the nesting limit is not a
            positive integer, diagram languages are malformed, or the table
            placeholder is empty.

    Examples:
        validate_config(StreamConfig(max_nesting=50))
    """
    config = normalize_config(config)

    for name in ("handle_incomplete_markdown", "math", "auto_detect_diagrams"):
        if not isinstance(getattr(config, name), bool):
            raise ConfigError(f"`{name}` must be a boolean")

    _ensure_integers({"max_nesting": config.max_nesting})
    _ensure_positive({"max_nesting": config.max_nesting})

    if not isinstance(config.diagram_languages, tuple):
        raise ConfigError("`diagram_languages` must be a list of strings")
    for language in config.diagram_languages:
        if not isinstance(language, str) or not language:
            raise ConfigError("`diagram_languages` entries must be non-empty strings")

    if not isinstance(config.table_error_placeholder, str) or not config.table_error_placeholder:
        raise ConfigError("`table_error_placeholder` must not be empty")


def apply_overrides(config: StreamConfig, **overrides: object) -> StreamConfig:
    """Apply override values to a `StreamConfig`.

    Args:
        config: Base configuration to update.
        overrides: Override values keyed by configuration field name; values set to
            None are ignored.

    Returns:
        StreamConfig: New configuration with the provided overrides applied. The
        original configuration is returned when no changes are supplied.

    Raises:
        TypeError: If an override name is not defined on `StreamConfig`.

    Examples:
        updated = apply_overrides(config, handle_incomplete_markdown=False)
    """
    changes = {key: value for key, value in overrides.items() if value is not None}
    if not changes:
        return config
    return replace(config, **changes)


def build_config(search_path: Path, **overrides: object) -> StreamConfig:
    """Load, override, and validate configuration.

    Args:
        search_path: Directory where configuration files are resolved.
        overrides: Override values keyed by configuration attributes; None values
            are ignored.

    Returns:
        StreamConfig: Validated configuration ready for a parser session.

    Raises:
        ConfigError: If configuration loading or validation fails.

    Examples:
        config = build_config(Path.cwd(), handle_incomplete_markdown=False)
    """
    config = load_config(search_path)
    config = apply_overrides(config, **overrides)
    config = normalize_config(config)
    validate_config(config)
    return config


def _ensure_positive(values: dict[str, int]) -> None:
    for key, value in values.items():
        if value <= 0:
            raise ConfigError(f"`{key}` must be a positive integer")


def _ensure_integers(values: dict[str, object]) -> None:
    for key, value in values.items():
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"`{key}` must be an integer")
