#!/usr/bin/env python3
"""
YAML codecs for Rails/Symfony style locale files.

yamlflat:
```yaml
user.greeting: "Hello %{name}"
welcome: Welcome
```

yamlnested:
```yaml
user:
  greeting: "Hello %{name}"
welcome: Welcome
```
"""

import re
from typing import Any, Optional

import yaml

from ..errors import FormatParseError, KeyConflict, RecordError
from ..keypath import scalar_text
from ..models import Record
from .base import Codec, ExportFormat
from .tree import records_from_tree, tree_from_records

# Plain and single-quoted scalars fold these into spaces on load
LINE_SEPARATORS = re.compile("[\x85\u2028\u2029]")


class LocaleDumper(yaml.SafeDumper):
    """SafeDumper that double-quotes strings holding Unicode line separators."""
    pass


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    style = '"' if LINE_SEPARATORS.search(data) else None
    return dumper.represent_scalar('tag:yaml.org,2002:str', data, style=style)


LocaleDumper.add_representer(str, _represent_str)


class YamlFlatCodec(Codec):
    """Codec for a flat YAML mapping of key/value strings."""

    @property
    def format(self) -> ExportFormat:
        return ExportFormat.YAML_FLAT

    @property
    def file_extension(self) -> str:
        return "yaml"

    @property
    def media_type(self) -> str:
        return "application/x-yaml; charset=utf-8"

    def load(self, content: str) -> dict:
        """Parse the YAML document; an empty document is an empty mapping."""
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            mark = getattr(e, 'problem_mark', None)
            line = mark.line + 1 if mark is not None else None
            problem = getattr(e, 'problem', None) or str(e)
            raise FormatParseError(f"Invalid YAML: {problem}", line=line)

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise FormatParseError("YAML root must be a mapping", line=1)
        return data

    def parse(self, content: str, locale: str) -> list[Record]:
        data = self.load(content)

        records = []
        for key, value in data.items():
            if isinstance(value, (dict, list)):
                raise FormatParseError(
                    f"Value of '{key}' must be a string, found {type(value).__name__}"
                )
            records.append(Record(key=scalar_text(key), value=scalar_text(value)))
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
        return yaml.dump(
            result,
            Dumper=LocaleDumper,
            allow_unicode=True,
            default_flow_style=False,
            sort_keys=False,
        )


class YamlNestedCodec(YamlFlatCodec):
    """Codec for nested YAML trees; keys are split on the hierarchy delimiter."""

    nested = True

    @property
    def format(self) -> ExportFormat:
        return ExportFormat.YAML_NESTED

    def parse(self, content: str, locale: str) -> list[Record]:
        return records_from_tree(self.load(content), self.settings.key_delimiter)

    def build(self, records: list[Record], issues: Optional[list[RecordError]]) -> Any:
        return tree_from_records(records, self.settings.key_delimiter, issues)
