#!/usr/bin/env python3
"""
Tests for the gettext PO codec: header handling, comments, multi-line
strings, plural collapse and escaping.
"""

import pytest

from locport.codecs import PoCodec
from locport.config import Settings
from locport.errors import FormatParseError, KeyConflict, LocaleMismatch
from locport.models import Record

TEST_PO = r'''# Translator header
msgid ""
msgstr ""
"Language: fr\n"
"Plural-Forms: nplurals=2; plural=(n > 1);\n"

#. Shown on the home page
#: src/home.py:10 src/home.py:12
#, fuzzy, python-format
msgctxt "home"
msgid "greeting"
msgstr "Bonjour"

# Two lines
msgid "long"
msgstr ""
"Première ligne\n"
"Seconde ligne"

msgid "items"
msgid_plural "items"
msgstr[0] "%d élément"
msgstr[1] "%d éléments"

#~ msgid "old"
#~ msgstr "ancien"
'''


@pytest.fixture
def codec():
    return PoCodec()


def test_decode(codec):
    records = codec.decode(TEST_PO.encode('utf-8'), "fr")

    assert [(r.key, r.value) for r in records] == [
        ("greeting", "Bonjour"),
        ("long", "Première ligne\nSeconde ligne"),
        ("items", "%d éléments"),
    ]


def test_decode_metadata(codec):
    greeting, long, items = codec.decode(TEST_PO.encode('utf-8'), "fr")

    assert greeting.metadata == {
        'extracted': "Shown on the home page",
        'references': ["src/home.py:10", "src/home.py:12"],
        'flags': ["fuzzy", "python-format"],
        'context': "home",
    }
    assert long.comment == "Two lines"
    assert items.metadata['plural'] == "items"
    assert items.metadata['dropped_plurals'] == ["msgstr[0]"]


def test_decode_plural_uses_header_count(codec):
    content = r'''msgid ""
msgstr "Plural-Forms: nplurals=3; plural=n%10==1 ? 0 : 1;\n"

msgid "file"
msgid_plural "files"
msgstr[0] "plik"
msgstr[1] "pliki"
msgstr[2] "plików"
'''

    records = codec.decode(content.encode('utf-8'), "pl")

    assert records[0].value == "plików"
    assert records[0].metadata['dropped_plurals'] == ["msgstr[0]", "msgstr[1]"]


def test_decode_locale_mismatch(codec):
    with pytest.raises(LocaleMismatch) as exc_info:
        codec.decode(TEST_PO.encode('utf-8'), "de")
    assert exc_info.value.declared == "fr"
    assert exc_info.value.requested == "de"


def test_decode_locale_match_ignores_case_and_separator(codec):
    content = 'msgid ""\nmsgstr "Language: pt_BR\\n"\n\nmsgid "a"\nmsgstr "b"\n'
    records = codec.decode(content.encode('utf-8'), "pt-br")
    assert [(r.key, r.value) for r in records] == [("a", "b")]


def test_decode_without_header(codec):
    records = codec.decode(b'msgid "a"\nmsgstr "b"\n', "de")
    assert [(r.key, r.value) for r in records] == [("a", "b")]


def test_decode_escapes(codec):
    content = r'msgid "esc"' + '\n' + r'msgstr "a\tb\"c\\d\101\x42"' + '\n'
    records = codec.decode(content.encode('utf-8'), "en")
    assert records[0].value == 'a\tb"c\\dAB'


def test_decode_keeps_unicode_line_separators(codec):
    content = 'msgid "a"\nmsgstr "x\u2028y"\n'
    records = codec.decode(content.encode('utf-8'), "en")
    assert records[0].value == "x\u2028y"


@pytest.mark.parametrize("content, line", [
    ('msgid "a"\nmsgstr "b\n', 2),
    ('msgid "a"\nfoo\n', 2),
    ('msgstr "x"\n', 1),
    ('msgid "a"\n', 1),
    ('msgid "a"\nmsgstr "b" extra\n', 2),
    ('msgid "a"\nmsgstr "\\q"\n', 2),
])
def test_decode_malformed(codec, content, line):
    with pytest.raises(FormatParseError) as exc_info:
        codec.decode(content.encode('utf-8'), "en")
    assert exc_info.value.line == line


def test_encode(codec):
    records = [
        Record("greeting", "Bonjour", {"context": "home", "comment": "Home page"}),
        Record('say "hi"', "Dis \"salut\"\n"),
    ]

    text = codec.encode(records, "fr").decode('utf-8')

    assert text.startswith('msgid ""\nmsgstr ""\n"Language: fr\\n"\n')
    assert '# Home page\nmsgctxt "home"\nmsgid "greeting"\nmsgstr "Bonjour"\n' in text
    assert 'msgid "say \\"hi\\""\nmsgstr "Dis \\"salut\\"\\n"\n' in text

    decoded = codec.decode(text.encode('utf-8'), "fr")
    assert [(r.key, r.value) for r in decoded] == [(r.key, r.value) for r in records]
    assert decoded[0].metadata['context'] == "home"


def test_encode_wraps_long_values(codec):
    value = "word " * 40 + "end"
    text = codec.encode([Record("long", value)], "en").decode('utf-8')

    msgstr_lines = text.split('msgstr ""\n')[-1].strip().split('\n')
    assert len(msgstr_lines) > 1
    assert all(len(line) <= 76 for line in msgstr_lines)
    assert codec.decode(text.encode('utf-8'), "en")[0].value == value


def test_encode_splits_after_newlines(codec):
    text = codec.encode([Record("two", "one\ntwo")], "en").decode('utf-8')

    assert 'msgstr ""\n"one\\n"\n"two"\n' in text


def test_encode_wrap_width_setting():
    codec = PoCodec(Settings(po_wrap_width=20))
    text = codec.encode([Record("k", "alpha beta gamma delta")], "en").decode('utf-8')

    assert 'msgstr ""\n"alpha beta gamma "\n"delta"\n' in text


def test_encode_duplicate_keys(codec):
    issues = []
    codec.encode([Record("a", "1"), Record("a", "2")], "en", issues)
    assert [type(i) for i in issues] == [KeyConflict]


def test_encode_same_key_in_different_contexts(codec):
    issues = []
    records = [Record("open", "Ouvrir", {"context": "menu"}), Record("open", "Ouvert", {"context": "state"})]

    codec.encode(records, "fr", issues)

    assert issues == []


def test_encode_empty(codec):
    content = codec.encode([], "fr")

    assert b'"Language: fr\\n"' in content
    assert codec.decode(content, "fr") == []
