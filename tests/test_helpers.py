from __future__ import annotations

import os
from pathlib import Path

import pytest

from streammark.cli import format_tokens, split_chunks
from streammark.filesystem import MAX_FILE_SIZE_ENV_VAR, get_max_file_size, read_source
from streammark.models import Token, TokenKind


def test_get_max_file_size_default(monkeypatch):
    monkeypatch.delenv(MAX_FILE_SIZE_ENV_VAR, raising=False)
    assert get_max_file_size(default=1234) == 1234


def test_get_max_file_size_from_environment(monkeypatch):
    monkeypatch.setenv(MAX_FILE_SIZE_ENV_VAR, "2048")
    assert get_max_file_size() == 2048


def test_get_max_file_size_rejects_non_integer(monkeypatch):
    monkeypatch.setenv(MAX_FILE_SIZE_ENV_VAR, "invalid")
    with pytest.raises(ValueError):
        get_max_file_size()


def test_get_max_file_size_rejects_non_positive(monkeypatch):
    monkeypatch.setenv(MAX_FILE_SIZE_ENV_VAR, "0")
    with pytest.raises(ValueError):
        get_max_file_size()


def test_read_source(tmp_path: Path):
    target = tmp_path / "reply.md"
    target.write_text("# Title\n", encoding="utf-8")
    assert read_source(target, 1024) == "# Title\n"


def test_read_source_missing_file(tmp_path: Path):
    with pytest.raises(IOError):
        read_source(tmp_path / "missing.md", 1024)


def test_read_source_rejects_directory(tmp_path: Path):
    directory = tmp_path / "folder"
    directory.mkdir()
    with pytest.raises(IOError) as exc_info:
        read_source(directory, 1024)
    assert "is not a regular file" in str(exc_info.value)


@pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="mkfifo not available")
def test_read_source_rejects_fifo(tmp_path: Path):
    fifo = tmp_path / "pipe.md"
    try:
        os.mkfifo(fifo)
    except OSError:  # pragma: no cover
        pytest.skip("Unable to create FIFO")

    with pytest.raises(IOError) as exc_info:
        read_source(fifo, 1024)
    assert "is not a regular file" in str(exc_info.value)


def test_read_source_rejects_large_file(tmp_path: Path):
    target = tmp_path / "large.md"
    target.write_text("x" * 100, encoding="utf-8")
    with pytest.raises(IOError) as exc_info:
        read_source(target, 10)
    assert "exceeds the maximum allowed size" in str(exc_info.value)


def test_read_source_rejects_invalid_utf8(tmp_path: Path):
    target = tmp_path / "binary.md"
    target.write_bytes(b"\xff\xfe\xfa")
    with pytest.raises(IOError) as exc_info:
        read_source(target, 1024)
    assert "Invalid UTF-8" in str(exc_info.value)


def test_split_chunks():
    assert split_chunks("abcde", 2) == ["ab", "cd", "e"]
    assert split_chunks("", 4) == []
    assert "".join(split_chunks("streamed text", 3)) == "streamed text"


def test_format_tokens_text():
    tokens = [
        Token(TokenKind.HEADING, content="Title", depth=2),
        Token(TokenKind.LIST_ITEM, content="one", depth=0, ordered=True),
        Token(TokenKind.CODE_BLOCK, content="x", language="py", provisional=True),
    ]
    assert format_tokens(tokens, "text").split("\n") == [
        "heading (depth=2): 'Title'",
        "list-item (depth=0, ordered): 'one'",
        "code-block (lang=py, provisional): 'x'",
    ]


def test_format_tokens_json_keeps_unicode():
    output = format_tokens([Token(TokenKind.TEXT, content="héllo")], "json")
    assert output == (
        '[{"kind": "text", "content": "héllo", "raw": "", "ordered": false, "provisional": false}]'
    )
