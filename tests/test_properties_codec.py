#!/usr/bin/env python3
"""
Tests for the Java .properties codec: separators, continuations,
escapes, comments and ASCII-only output.
"""

import pytest

from locport.codecs import PropertiesCodec
from locport.errors import FormatParseError, KeyConflict
from locport.models import Record

TEST_PROPERTIES = r"""# Greeting shown on start
greeting = Hello
farewell: Goodbye
key\ with\ spaces = value
multi = first \
        second
city = K\u00f6ln
empty=
! bang comment
tab\tkey=v
"""


@pytest.fixture
def codec():
    return PropertiesCodec()


def test_decode(codec):
    records = codec.decode(TEST_PROPERTIES.encode('utf-8'), "de")

    assert [(r.key, r.value) for r in records] == [
        ("greeting", "Hello"),
        ("farewell", "Goodbye"),
        ("key with spaces", "value"),
        ("multi", "first second"),
        ("city", "Köln"),
        ("empty", ""),
        ("tab\tkey", "v"),
    ]
    assert records[0].comment == "Greeting shown on start"
    assert records[-1].comment == "bang comment"


def test_decode_whitespace_separator(codec):
    records = codec.decode(b"greeting Hello world\n", "en")
    assert (records[0].key, records[0].value) == ("greeting", "Hello world")


def test_decode_surrogate_pair(codec):
    records = codec.decode(b"smile=\\ud83d\\ude00\n", "en")
    assert records[0].value == "\U0001F600"


def test_decode_latin1_fallback(codec):
    records = codec.decode(b"city=K\xf6ln\n", "de")
    assert records[0].value == "Köln"


def test_decode_malformed_unicode_escape(codec):
    with pytest.raises(FormatParseError) as exc_info:
        codec.decode(b"a=1\nb=\\u12G4\n", "en")
    assert exc_info.value.line == 2


def test_decode_unpaired_surrogate(codec):
    with pytest.raises(FormatParseError):
        codec.decode(b"a=\\ud83d\n", "en")


def test_encode_escapes_to_ascii(codec):
    records = [
        Record("greeting", "Hello"),
        Record("city", "Köln"),
        Record("key with spaces", "  lead"),
        Record("path", "C:\\"),
        Record("lines", "a\nb"),
        Record("smile", "\U0001F600"),
    ]

    content = codec.encode(records, "de")

    assert content == (
        b"greeting=Hello\n"
        b"city=K\\u00f6ln\n"
        b"key\\ with\\ spaces=\\  lead\n"
        b"path=C:\\\\\n"
        b"lines=a\\nb\n"
        b"smile=\\ud83d\\ude00\n"
    )
    assert [(r.key, r.value) for r in codec.decode(content, "de")] == [
        (r.key, r.value) for r in records
    ]


def test_encode_leading_special_characters(codec):
    records = [Record("#hash", "#value"), Record("a:b", "=x:y")]

    decoded = codec.decode(codec.encode(records, "en"), "en")

    assert [(r.key, r.value) for r in decoded] == [("#hash", "#value"), ("a:b", "=x:y")]


def test_encode_comment(codec):
    content = codec.encode([Record("a", "1", {"comment": "Über\nsecond"})], "de")
    assert content == b"# \\u00dcber\n# second\na=1\n"


def test_encode_duplicate_keys(codec):
    issues = []
    content = codec.encode([Record("a", "1"), Record("a", "2")], "en", issues)

    assert content == b"a=1\n"
    assert isinstance(issues[0], KeyConflict)


def test_encode_empty(codec):
    assert codec.encode([], "en") == b""
    assert codec.decode(b"", "en") == []
