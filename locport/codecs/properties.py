#!/usr/bin/env python3
"""
Java .properties codec.

Handles the grammar read by java.util.Properties.load:
```
# comment
greeting = Hello
farewell: Goodbye
multi.line = first \\
             second
city = K\\u00f6ln
```

Output is pure ASCII: every non-ASCII character is written as a \\uXXXX
escape (surrogate pairs above the BMP), so the file loads the same way
whether it is read as ISO-8859-1 or UTF-8.
"""

import re
from typing import Optional, Union

from ..errors import FormatParseError, KeyConflict, RecordError
from ..models import Record
from .base import Codec, ExportFormat

WHITESPACE = ' \t\f'
SEPARATORS = '=:'
LINE_BREAK = re.compile(r'\r\n|\r|\n')

UNESCAPES = {'t': '\t', 'n': '\n', 'r': '\r', 'f': '\f'}
ESCAPES = {'\\': '\\\\', '\t': '\\t', '\n': '\\n', '\r': '\\r', '\f': '\\f'}


class PropertiesCodec(Codec):
    """Codec for Java-style .properties files."""

    @property
    def format(self) -> ExportFormat:
        return ExportFormat.PROPERTIES

    @property
    def file_extension(self) -> str:
        return "properties"

    def read_text(self, data: Union[bytes, str]) -> str:
        """UTF-8 first, ISO-8859-1 for legacy files that are not UTF-8."""
        try:
            return super().read_text(data)
        except FormatParseError:
            return data.decode('latin-1')

    def parse(self, content: str, locale: str) -> list[Record]:
        records = []
        comments = []

        for line_num, line in self._logical_lines(content):
            stripped = line.lstrip(WHITESPACE)
            if not stripped:
                comments = []
                continue
            if stripped[0] in '#!':
                comments.append(stripped[1:].strip())
                continue

            key, value = self._split(stripped)
            metadata = {}
            if comments:
                metadata['comment'] = '\n'.join(comments)
                comments = []
            records.append(Record(
                key=self._unescape(key, line_num),
                value=self._unescape(value, line_num),
                metadata=metadata,
            ))

        return records

    def _logical_lines(self, content: str) -> list[tuple[int, str]]:
        """
        Join continuation lines.

        A line continues when it ends with an odd number of backslashes;
        leading whitespace of the continuation is dropped. Comment lines
        never continue.

        Returns:
            List of (starting line number, logical line)
        """
        physical = LINE_BREAK.split(content)
        result = []
        i = 0

        while i < len(physical):
            start = i + 1
            line = physical[i]
            i += 1
            if line.lstrip(WHITESPACE)[:1] in ('#', '!'):
                result.append((start, line))
                continue

            while self._continues(line) and i < len(physical):
                line = line[:-1] + physical[i].lstrip(WHITESPACE)
                i += 1
            if self._continues(line):
                line = line[:-1]
            result.append((start, line))

        return result

    def _continues(self, line: str) -> bool:
        trailing = len(line) - len(line.rstrip('\\'))
        return trailing % 2 == 1

    def _split(self, line: str) -> tuple[str, str]:
        """Split a logical line into raw (still escaped) key and value."""
        i = 0
        while i < len(line):
            char = line[i]
            if char == '\\':
                i += 2
                continue
            if char in SEPARATORS or char in WHITESPACE:
                break
            i += 1

        key = line[:i]
        rest = line[i:].lstrip(WHITESPACE)
        if rest[:1] in ('=', ':'):
            rest = rest[1:].lstrip(WHITESPACE)
        return key, rest

    def _unescape(self, text: str, line_num: int) -> str:
        result = []
        i = 0
        while i < len(text):
            char = text[i]
            if char != '\\':
                result.append(char)
                i += 1
                continue

            if i + 1 >= len(text):
                break
            escaped = text[i + 1]
            if escaped == 'u':
                digits = text[i + 2:i + 6]
                if len(digits) != 4 or not all(c in '0123456789abcdefABCDEF' for c in digits):
                    raise FormatParseError(f"Malformed \\uXXXX escape: \\u{digits}", line=line_num)
                result.append(chr(int(digits, 16)))
                i += 6
            else:
                result.append(UNESCAPES.get(escaped, escaped))
                i += 2

        # Pair up UTF-16 surrogates produced by consecutive \u escapes
        try:
            return ''.join(result).encode('utf-16', 'surrogatepass').decode('utf-16')
        except UnicodeDecodeError:
            raise FormatParseError("Unpaired UTF-16 surrogate in \\u escape", line=line_num)

    def _escape(self, text: str, is_key: bool) -> str:
        result = []
        for i, char in enumerate(text):
            if char in ESCAPES:
                result.append(ESCAPES[char])
            elif char == ' ' and (is_key or i == 0):
                result.append('\\ ')
            elif char in '=:#!' and (is_key or i == 0):
                result.append('\\' + char)
            elif ord(char) < 0x20 or ord(char) > 0x7e:
                result.append(self._unicode_escape(char))
            else:
                result.append(char)
        return ''.join(result)

    def _unicode_escape(self, char: str) -> str:
        code = ord(char)
        if code > 0xFFFF:
            code -= 0x10000
            high = 0xD800 + (code >> 10)
            low = 0xDC00 + (code & 0x3FF)
            return f'\\u{high:04x}\\u{low:04x}'
        return f'\\u{code:04x}'

    def render(
        self,
        records: list[Record],
        locale: str,
        issues: Optional[list[RecordError]] = None,
    ) -> str:
        lines = []
        seen = set()

        for record in records:
            if record.key in seen:
                self.report(issues, KeyConflict(record.key, record.key))
                continue
            seen.add(record.key)

            comment = record.metadata.get('comment')
            if comment:
                for comment_line in comment.split('\n'):
                    lines.append(f'# {self._escape_comment(comment_line)}')
            lines.append(f'{self._escape(record.key, True)}={self._escape(record.value, False)}')

        if not lines:
            return ''
        return '\n'.join(lines) + '\n'

    def _escape_comment(self, text: str) -> str:
        return ''.join(
            self._unicode_escape(c) if ord(c) > 0x7e or ord(c) < 0x20 else c
            for c in text
        )
