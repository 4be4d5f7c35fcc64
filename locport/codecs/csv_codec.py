#!/usr/bin/env python3
"""
CSV codec.

Two columns, RFC 4180 quoting, header row on export:
```
term,translation
greeting,Hello
"farewell.long","Goodbye, ""friend""
see you"
```
"""

import csv
import io
from typing import Optional

from ..errors import FormatParseError, KeyConflict, RecordError
from ..models import Record
from .base import Codec, ExportFormat

HEADER = ['term', 'translation']


class CsvCodec(Codec):
    """Codec for two-column term/translation CSV files."""

    @property
    def format(self) -> ExportFormat:
        return ExportFormat.CSV

    @property
    def file_extension(self) -> str:
        return "csv"

    @property
    def media_type(self) -> str:
        return "text/csv; charset=utf-8"

    def parse(self, content: str, locale: str) -> list[Record]:
        records = []
        first_row = True
        reader = csv.reader(io.StringIO(content, newline=''), strict=True)

        try:
            for row in reader:
                if not row or all(not cell.strip() for cell in row):
                    continue
                if first_row:
                    first_row = False
                    if [cell.strip().lower() for cell in row] == HEADER:
                        continue
                if len(row) == 1:
                    row = [row[0], '']
                if len(row) != 2:
                    raise FormatParseError(
                        f"Expected 2 columns (term, translation), found {len(row)}",
                        line=reader.line_num,
                    )
                records.append(Record(key=row[0], value=row[1]))
        except csv.Error as e:
            raise FormatParseError(f"Invalid CSV: {e}", line=reader.line_num)

        return records

    def render(
        self,
        records: list[Record],
        locale: str,
        issues: Optional[list[RecordError]] = None,
    ) -> str:
        output = io.StringIO()
        writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL, lineterminator='\r\n')
        writer.writerow(HEADER)

        seen = set()
        for record in records:
            if record.key in seen:
                self.report(issues, KeyConflict(record.key, record.key))
                continue
            seen.add(record.key)
            writer.writerow([record.key, record.value])

        return output.getvalue()
