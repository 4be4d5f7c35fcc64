#!/usr/bin/env python3
"""
GNU gettext PO codec.

PO format structure:
```
msgid ""
msgstr ""
"Language: tr\\n"
"Plural-Forms: nplurals=2; plural=n != 1;\\n"

# Translator comment
#. Extracted comment
#: file.py:42
#, fuzzy
msgctxt "context"
msgid "greeting"
msgstr "Merhaba"

msgid "items"
msgid_plural "items"
msgstr[0] "%d öğe"
msgstr[1] "%d öğeler"
```

The msgid is the term key and msgstr its value. A plural entry keeps only
its "other" form (the last form, msgstr[nplurals-1]); the remaining forms
are listed under metadata['dropped_plurals'].
"""

import re
from typing import Optional

from ..errors import FormatParseError, KeyConflict, RecordError
from ..models import Record
from .base import Codec, ExportFormat

KEYWORD_PATTERN = re.compile(r'^(msgctxt|msgid_plural|msgid|msgstr(?:\[(\d+)\])?)\s*(.*)$')
NPLURALS_PATTERN = re.compile(r'nplurals\s*=\s*(\d+)')
LINE_BREAK = re.compile(r'\r\n|\r|\n')

SIMPLE_UNESCAPES = {
    'n': '\n', 't': '\t', 'r': '\r', '"': '"', '\\': '\\',
    'a': '\a', 'b': '\b', 'f': '\f', 'v': '\v', "'": "'", '?': '?',
}
ESCAPES = {
    '\\': '\\\\', '"': '\\"', '\n': '\\n', '\t': '\\t', '\r': '\\r',
    '\a': '\\a', '\b': '\\b', '\f': '\\f', '\v': '\\v',
}


class PoCodec(Codec):
    """Codec for GNU gettext PO files."""

    @property
    def format(self) -> ExportFormat:
        return ExportFormat.GETTEXT

    @property
    def file_extension(self) -> str:
        return "po"

    def parse(self, content: str, locale: str) -> list[Record]:
        records = []
        state = {'header_seen': False, 'nplurals': None}
        current = self._new_entry(1)
        field = None

        for line_num, raw_line in enumerate(LINE_BREAK.split(content), 1):
            line = raw_line.strip()

            if not line:
                field = None
                continue

            # Obsolete entries
            if line.startswith('#~'):
                field = None
                continue

            if line.startswith('#'):
                if current['msgstr'] is not None or current['plurals']:
                    self._flush(current, records, state, locale)
                    current = self._new_entry(line_num)
                self._add_comment(current, line)
                field = None
                continue

            match = KEYWORD_PATTERN.match(line)
            if match:
                keyword, index, rest = match.groups()
                value = self._parse_quoted(rest, line_num)

                if keyword in ('msgctxt', 'msgid'):
                    if current['msgstr'] is not None or current['plurals']:
                        self._flush(current, records, state, locale)
                        current = self._new_entry(line_num)
                    if current['msgid'] is not None:
                        raise FormatParseError(f"{keyword} after msgid without msgstr", line=line_num)
                    if keyword == 'msgctxt' and current['msgctxt'] is not None:
                        raise FormatParseError("Duplicate msgctxt", line=line_num)
                    if current['msgid'] is None and current['msgctxt'] is None:
                        current['line'] = line_num
                    current[keyword] = value
                    field = (keyword, None)

                elif keyword == 'msgid_plural':
                    if current['msgid'] is None:
                        raise FormatParseError("msgid_plural without msgid", line=line_num)
                    current['msgid_plural'] = value
                    field = ('msgid_plural', None)

                else:
                    if current['msgid'] is None:
                        raise FormatParseError(f"{keyword} without msgid", line=line_num)
                    if index is None:
                        current['msgstr'] = value
                        field = ('msgstr', None)
                    else:
                        current['plurals'][int(index)] = value
                        field = ('plurals', int(index))
                continue

            if line.startswith('"'):
                if field is None:
                    raise FormatParseError("String continuation without keyword", line=line_num)
                value = self._parse_quoted(line, line_num)
                name, index = field
                if index is None:
                    current[name] += value
                else:
                    current[name][index] += value
                continue

            raise FormatParseError(f"Unexpected content: {line[:40]}", line=line_num)

        if current['msgid'] is None and current['msgctxt'] is not None:
            raise FormatParseError("msgctxt without msgid", line=current['line'])
        self._flush(current, records, state, locale)
        return records

    def _new_entry(self, line_num: int) -> dict:
        return {
            'line': line_num,
            'comment': [],
            'extracted': [],
            'references': [],
            'flags': [],
            'msgctxt': None,
            'msgid': None,
            'msgid_plural': None,
            'msgstr': None,
            'plurals': {},
        }

    def _add_comment(self, entry: dict, line: str) -> None:
        if line.startswith('#.'):
            entry['extracted'].append(line[2:].strip())
        elif line.startswith('#:'):
            entry['references'].extend(line[2:].split())
        elif line.startswith('#,'):
            entry['flags'].extend(f.strip() for f in line[2:].split(',') if f.strip())
        elif line.startswith('#|'):
            # Previous msgid, only meaningful to merge tools
            pass
        else:
            entry['comment'].append(line[1:].strip())

    def _flush(self, entry: dict, records: list[Record], state: dict, locale: str) -> None:
        """Turn a completed entry into a record, or read it as the header."""
        if entry['msgid'] is None:
            return
        if entry['msgstr'] is None and not entry['plurals']:
            raise FormatParseError("msgid without msgstr", line=entry['line'])

        if entry['msgid'] == '' and entry['msgctxt'] is None and not state['header_seen']:
            state['header_seen'] = True
            headers = self._parse_header(entry['msgstr'] or '')
            self.check_locale(headers.get('language'), locale)
            match = NPLURALS_PATTERN.search(headers.get('plural-forms', ''))
            if match:
                state['nplurals'] = int(match.group(1))
            return

        metadata = {}
        if entry['comment']:
            metadata['comment'] = '\n'.join(entry['comment'])
        if entry['extracted']:
            metadata['extracted'] = '\n'.join(entry['extracted'])
        if entry['references']:
            metadata['references'] = entry['references']
        if entry['flags']:
            metadata['flags'] = entry['flags']
        if entry['msgctxt'] is not None:
            metadata['context'] = entry['msgctxt']

        if entry['plurals']:
            value = self._collapse_plurals(entry, state['nplurals'], metadata)
        else:
            value = entry['msgstr']

        records.append(Record(key=entry['msgid'], value=value, metadata=metadata))

    def _collapse_plurals(self, entry: dict, nplurals: Optional[int], metadata: dict) -> str:
        """Keep the "other" plural form and list the forms that were dropped."""
        plurals = entry['plurals']
        if nplurals and (nplurals - 1) in plurals:
            keep = nplurals - 1
        else:
            keep = max(plurals)

        metadata['plural'] = entry['msgid_plural']
        dropped = [f"msgstr[{i}]" for i in sorted(plurals) if i != keep]
        if dropped:
            metadata['dropped_plurals'] = dropped
        return plurals[keep]

    def _parse_header(self, text: str) -> dict[str, str]:
        headers = {}
        for header_line in text.split('\n'):
            if ':' in header_line:
                name, value = header_line.split(':', 1)
                headers[name.strip().lower()] = value.strip()
        return headers

    def _parse_quoted(self, text: str, line_num: int) -> str:
        """Read one C-style quoted string that makes up the whole of `text`."""
        text = text.strip()
        if len(text) < 2 or not text.startswith('"'):
            raise FormatParseError("Expected a quoted string", line=line_num)

        result = []
        i = 1
        while i < len(text):
            char = text[i]
            if char == '"':
                if text[i + 1:].strip():
                    raise FormatParseError("Unexpected content after string", line=line_num)
                return ''.join(result)
            if char != '\\':
                result.append(char)
                i += 1
                continue

            if i + 1 >= len(text):
                break
            escaped = text[i + 1]
            if escaped in SIMPLE_UNESCAPES:
                result.append(SIMPLE_UNESCAPES[escaped])
                i += 2
            elif escaped in '01234567':
                digits = re.match(r'[0-7]{1,3}', text[i + 1:]).group(0)
                result.append(chr(int(digits, 8)))
                i += 1 + len(digits)
            elif escaped == 'x':
                match = re.match(r'[0-9a-fA-F]{1,2}', text[i + 2:])
                if not match:
                    raise FormatParseError("Malformed \\x escape", line=line_num)
                result.append(chr(int(match.group(0), 16)))
                i += 2 + len(match.group(0))
            else:
                raise FormatParseError(f"Unknown escape sequence \\{escaped}", line=line_num)

        raise FormatParseError("Unterminated string", line=line_num)

    def _escape_po_string(self, s: str) -> str:
        """Escape string for PO format."""
        return ''.join(ESCAPES.get(c, c) for c in s)

    def _format_po_string(self, prefix: str, s: str) -> list[str]:
        """
        Format a string for PO output, wrapping long strings.

        Short single-line strings stay on the keyword line. Otherwise the
        keyword gets an empty string and the text follows on continuation
        lines, broken after embedded newlines and, for long lines, after
        spaces. Breaks never fall inside an escape sequence.

        Args:
            prefix: The PO keyword (e.g., 'msgid', 'msgstr')
            s: The string to format

        Returns:
            List of formatted lines
        """
        wrap_width = self.settings.po_wrap_width
        escaped = self._escape_po_string(s)

        single_line = f'{prefix} "{escaped}"'
        if len(single_line) <= wrap_width and '\n' not in s.rstrip('\n'):
            return [single_line]

        lines = [f'{prefix} ""']
        for segment in re.split(r'(?<=\n)', s):
            if not segment:
                continue
            current = ''
            for piece in re.split(r'(?<= )', segment):
                if current and len(self._escape_po_string(current + piece)) > wrap_width - 2:
                    lines.append(f'"{self._escape_po_string(current)}"')
                    current = piece
                else:
                    current += piece
            if current:
                lines.append(f'"{self._escape_po_string(current)}"')
        return lines

    def render(
        self,
        records: list[Record],
        locale: str,
        issues: Optional[list[RecordError]] = None,
    ) -> str:
        lines = [
            'msgid ""',
            'msgstr ""',
            f'"Language: {self._escape_po_string(locale)}\\n"',
            '"MIME-Version: 1.0\\n"',
            '"Content-Type: text/plain; charset=UTF-8\\n"',
            '"Content-Transfer-Encoding: 8bit\\n"',
            '',
        ]

        seen = set()
        for record in records:
            context = record.metadata.get('context')
            if (context, record.key) in seen:
                self.report(issues, KeyConflict(record.key, record.key))
                continue
            seen.add((context, record.key))

            comment = record.metadata.get('comment')
            if comment:
                lines.extend(f'# {c}'.rstrip() for c in comment.split('\n'))
            extracted = record.metadata.get('extracted')
            if extracted:
                lines.extend(f'#. {c}'.rstrip() for c in extracted.split('\n'))
            references = record.metadata.get('references')
            if references:
                lines.append(f'#: {" ".join(references)}')
            flags = record.metadata.get('flags')
            if flags:
                lines.append(f'#, {", ".join(flags)}')

            if context is not None:
                lines.extend(self._format_po_string('msgctxt', context))
            lines.extend(self._format_po_string('msgid', record.key))
            lines.extend(self._format_po_string('msgstr', record.value))
            lines.append('')

        return '\n'.join(lines)
