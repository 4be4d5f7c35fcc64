#!/usr/bin/env python3
"""
Apple .strings codec.

.strings format structure:
```
/* Comment about the string */
"key.name" = "Value text";

// Another style of comment
greeting = "Hello, %@!";
```

Files may be UTF-8 or UTF-16 (with byte order mark); output is UTF-8.
"""

import re
from typing import Optional

from ..errors import FormatParseError, KeyConflict, RecordError
from ..models import Record
from .base import Codec, ExportFormat

UNQUOTED_PATTERN = re.compile(r'[A-Za-z0-9_.$:/\-]+')
HEX_PATTERN = re.compile(r'[0-9a-fA-F]{4}')

UNESCAPES = {'n': '\n', 't': '\t', 'r': '\r', '0': '\0', '"': '"', '\\': '\\', "'": "'"}
ESCAPES = {'\\': '\\\\', '"': '\\"', '\n': '\\n', '\t': '\\t', '\r': '\\r'}


class _Scanner:
    """Cursor over .strings text that tracks line numbers."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    @property
    def line(self) -> int:
        return self.text.count('\n', 0, self.pos) + 1

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ''

    def error(self, reason: str) -> FormatParseError:
        return FormatParseError(reason, line=self.line)

    def skip_space(self, comments: Optional[list[str]] = None) -> None:
        """Skip whitespace and comments, collecting comment text."""
        while not self.at_end():
            char = self.peek()
            if char.isspace():
                self.pos += 1
            elif self.text.startswith('/*', self.pos):
                end = self.text.find('*/', self.pos + 2)
                if end == -1:
                    raise self.error("Unterminated comment")
                if comments is not None:
                    comments.append(self.text[self.pos + 2:end].strip())
                self.pos = end + 2
            elif self.text.startswith('//', self.pos):
                end = self.text.find('\n', self.pos)
                if end == -1:
                    end = len(self.text)
                if comments is not None:
                    comments.append(self.text[self.pos + 2:end].strip())
                self.pos = end
            else:
                break

    def expect(self, char: str) -> None:
        self.skip_space()
        if self.peek() != char:
            found = self.peek() or 'end of file'
            raise self.error(f"Expected '{char}', found '{found}'")
        self.pos += 1

    def read_string(self) -> str:
        """Read a quoted or bare string token."""
        self.skip_space()
        if self.peek() == '"':
            return self._read_quoted()
        match = UNQUOTED_PATTERN.match(self.text, self.pos)
        if not match:
            found = self.peek() or 'end of file'
            raise self.error(f"Expected a string, found '{found}'")
        self.pos = match.end()
        return match.group(0)

    def _read_quoted(self) -> str:
        start_line = self.line
        result = []
        self.pos += 1

        while not self.at_end():
            char = self.text[self.pos]
            if char == '"':
                self.pos += 1
                return ''.join(result)
            if char != '\\':
                result.append(char)
                self.pos += 1
                continue

            escaped = self.text[self.pos + 1:self.pos + 2]
            if escaped in ('U', 'u'):
                match = HEX_PATTERN.match(self.text, self.pos + 2)
                if not match:
                    raise self.error("Malformed \\U escape")
                result.append(chr(int(match.group(0), 16)))
                self.pos = match.end()
            else:
                result.append(UNESCAPES.get(escaped, escaped))
                self.pos += 2

        raise FormatParseError("Unterminated string", line=start_line)


class StringsCodec(Codec):
    """Codec for Apple .strings files."""

    @property
    def format(self) -> ExportFormat:
        return ExportFormat.STRINGS

    @property
    def file_extension(self) -> str:
        return "strings"

    def parse(self, content: str, locale: str) -> list[Record]:
        records = []
        scanner = _Scanner(content)

        while True:
            comments = []
            scanner.skip_space(comments)
            if scanner.at_end():
                break

            key = scanner.read_string()
            scanner.expect('=')
            value = scanner.read_string()
            scanner.expect(';')

            metadata = {}
            if comments:
                metadata['comment'] = '\n'.join(comments)
            records.append(Record(
                key=self._join_surrogates(key, scanner),
                value=self._join_surrogates(value, scanner),
                metadata=metadata,
            ))

        return records

    def _join_surrogates(self, value: str, scanner: _Scanner) -> str:
        """Combine UTF-16 surrogate pairs written as two \\U escapes."""
        try:
            return value.encode('utf-16', 'surrogatepass').decode('utf-16')
        except UnicodeDecodeError:
            raise scanner.error("Unpaired UTF-16 surrogate in \\U escape")

    def _escape_string(self, s: str) -> str:
        """Escape string for .strings format."""
        result = []
        for char in s:
            if char in ESCAPES:
                result.append(ESCAPES[char])
            elif ord(char) < 0x20:
                result.append(f'\\U{ord(char):04X}')
            else:
                result.append(char)
        return ''.join(result)

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
                lines.append(f'/* {comment.replace("*/", "* /")} */')
            lines.append(f'"{self._escape_string(record.key)}" = "{self._escape_string(record.value)}";')
            lines.append('')

        return '\n'.join(lines)
