#!/usr/bin/env python3
"""
JSON codecs.

jsonflat keeps every key as an opaque string:
```json
{
  "user.greeting": "Hello {{name}}",
  "welcome": "Welcome"
}
```

jsonnested expresses the key hierarchy through nesting, arrays become
indexed segments ("days.0", "days.1"):
```json
{
  "user": {"greeting": "Hello {{name}}"},
  "days": ["Monday", "Tuesday"]
}
```
"""

import json
from typing import Any, Optional

from ..errors import FormatParseError, KeyConflict, RecordError
from ..keypath import scalar_text
from ..models import Record
from .base import Codec, ExportFormat
from .tree import records_from_tree, tree_from_records


class JsonFlatCodec(Codec):
    """Codec for flat JSON objects of key/value strings."""

    @property
    def format(self) -> ExportFormat:
        return ExportFormat.JSON_FLAT

    @property
    def file_extension(self) -> str:
        return "json"

    @property
    def media_type(self) -> str:
        return "application/json; charset=utf-8"

    def load(self, content: str) -> dict:
        """Parse the JSON document, requiring an object at the root."""
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise FormatParseError(f"Invalid JSON: {e.msg}", line=e.lineno)

        if not isinstance(data, dict):
            raise FormatParseError("Root element must be an object", line=1)
        return data

    def parse(self, content: str, locale: str) -> list[Record]:
        data = self.load(content)

        records = []
        for key, value in data.items():
            if isinstance(value, (dict, list)):
                raise FormatParseError(
                    f"Value of '{key}' must be a string, found {type(value).__name__}"
                )
            records.append(Record(key=key, value=scalar_text(value)))
        return records

    def build(self, records: list[Record], issues: Optional[list[RecordError]]) -> Any:
        result = {}
        for record in records:
            if record.key in result:
                self.report(issues, KeyConflict(record.key, record.key))
                continue
            result[record.key] = record.value
        return result

    def render(
        self,
        records: list[Record],
        locale: str,
        issues: Optional[list[RecordError]] = None,
    ) -> str:
        result = self.build(records, issues)
        return json.dumps(result, indent=self.settings.json_indent, ensure_ascii=False)


class JsonNestedCodec(JsonFlatCodec):
    """Codec for nested JSON trees; keys are split on the hierarchy delimiter."""

    nested = True

    @property
    def format(self) -> ExportFormat:
        return ExportFormat.JSON_NESTED

    def parse(self, content: str, locale: str) -> list[Record]:
        return records_from_tree(self.load(content), self.settings.key_delimiter)

    def build(self, records: list[Record], issues: Optional[list[RecordError]]) -> Any:
        return tree_from_records(records, self.settings.key_delimiter, issues)
