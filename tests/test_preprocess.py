from __future__ import annotations

import pytest

from streammark.preprocess import decode_entities, preprocess, split_pending


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("a &amp; b", "a & b"),
        ("&lt;tag&gt;", "<tag>"),
        ("&quot;quoted&quot;", '"quoted"'),
        ("a&nbsp;b", "a b"),
        ("&#65;", "A"),
        ("&#x41;", "A"),
        ("&#X1F600;", "\U0001f600"),
    ],
)
def test_decode_entities_supported_references(text: str, expected: str):
    assert decode_entities(text) == expected


@pytest.mark.parametrize(
    "text",
    [
        "&#0;",
        "&#xD800;",
        "&#xDFFF;",
        "&#x110000;",
        "&#123456789;",
        "&copy;",
        "AT&T",
        "& alone",
    ],
)
def test_decode_entities_leaves_invalid_references_unchanged(text: str):
    assert decode_entities(text) == text


def test_decode_entities_is_single_pass():
    assert decode_entities("&amp;lt;") == "&lt;"


def test_preprocess_rewrites_italic_tags():
    assert preprocess("{italic}note{/italic} &lt;3") == "_note_ <3"


def test_preprocess_rewrites_unpaired_italic_tags():
    assert preprocess("start {italic}") == "start _"
    assert preprocess("end{/italic}") == "end_"


def test_preprocess_decoded_brace_does_not_form_tag():
    assert preprocess("&#123;italic}x") == "{italic}x"
    assert preprocess("&#x7B;/italic}") == "{/italic}"


def test_preprocess_passes_ansi_sequences_through():
    text = "\x1b[1mbold\x1b[0m plain"
    assert preprocess(text) == text


def test_preprocess_without_markup_is_identity():
    assert preprocess("plain *text*") == "plain *text*"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Tom &am", ("Tom ", "&am")),
        ("x &#x1F", ("x ", "&#x1F")),
        ("x &#12", ("x ", "&#12")),
        ("trailing &", ("trailing ", "&")),
        ("{ital", ("", "{ital")),
        ("see {/it", ("see ", "{/it")),
        ("brace {", ("brace ", "{")),
    ],
)
def test_split_pending_holds_back_fragments(text: str, expected: tuple[str, str]):
    assert split_pending(text) == expected


@pytest.mark.parametrize("text", ["done", "a &amp;", "{foo", "{italic}", "", "AT&T"])
def test_split_pending_releases_complete_text(text: str):
    assert split_pending(text) == (text, "")
