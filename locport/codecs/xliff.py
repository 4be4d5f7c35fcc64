#!/usr/bin/env python3
"""
XLIFF 1.2 codec.

XLIFF structure:
```xml
<?xml version="1.0" encoding="UTF-8"?>
<xliff xmlns="urn:oasis:names:tc:xliff:document:1.2" version="1.2">
  <file original="locport" datatype="plaintext" source-language="en" target-language="fr">
    <body>
      <trans-unit id="greeting">
        <source>greeting</source>
        <target>Bonjour</target>
        <note>Shown on the home screen</note>
      </trans-unit>
      <group id="items" restype="x-gettext-plurals">
        <trans-unit id="items[0]"><source>items</source><target>%d élément</target></trans-unit>
        <trans-unit id="items[1]"><source>items</source><target>%d éléments</target></trans-unit>
      </group>
    </body>
  </file>
</xliff>
```

The unit id (or resname) is the term key and the target its value. The
file's target-language must match the locale being imported.
"""

import re
from typing import Optional, Union
from xml.etree import ElementTree as ET
from xml.sax.saxutils import escape, quoteattr

from ..errors import FormatParseError, InvalidValue, KeyConflict, RecordError
from ..models import Record
from .base import Codec, ExportFormat

XLIFF_NAMESPACE = 'urn:oasis:names:tc:xliff:document:1.2'
PLURAL_RESTYPE = 'x-gettext-plurals'

# Characters XML 1.0 cannot carry, even as character references
INVALID_XML_CHARS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]')
PLURAL_SUFFIX = re.compile(r'\[\d+\]$')


def _local(tag: str) -> str:
    """Tag name without namespace."""
    return tag.rsplit('}', 1)[-1] if isinstance(tag, str) else ''


class XliffCodec(Codec):
    """Codec for XLIFF 1.2 documents."""

    @property
    def format(self) -> ExportFormat:
        return ExportFormat.XLIFF12

    @property
    def file_extension(self) -> str:
        return "xliff"

    @property
    def media_type(self) -> str:
        return "application/x-xliff+xml; charset=utf-8"

    def decode(self, data: bytes, locale: str) -> list[Record]:
        """Parse the raw bytes so the XML declaration decides the encoding."""
        try:
            blank = not self.read_text(data).strip()
        except FormatParseError:
            # Not UTF-8 or UTF-16; the declared encoding applies
            blank = False
        if blank:
            return []
        return self._records(self._load(data), locale)

    def parse(self, content: str, locale: str) -> list[Record]:
        return self._records(self._load(content), locale)

    def _load(self, source: Union[bytes, str]) -> ET.Element:
        try:
            root = ET.fromstring(source)
        except ET.ParseError as e:
            line = e.position[0] if getattr(e, 'position', None) else None
            raise FormatParseError(f"Invalid XML: {e}", line=line)

        if _local(root.tag) != 'xliff':
            raise FormatParseError(f"Root element must be 'xliff', found '{_local(root.tag)}'", line=1)
        version = root.get('version')
        if version and version != '1.2':
            raise FormatParseError(f"Unsupported XLIFF version: {version}", line=1)
        return root

    def _records(self, root: ET.Element, locale: str) -> list[Record]:
        records = []
        for file_elem in root:
            if _local(file_elem.tag) != 'file':
                continue
            self.check_locale(file_elem.get('target-language'), locale)
            for child in file_elem:
                if _local(child.tag) == 'body':
                    self._read_container(child, records)
        return records

    def _read_container(self, container: ET.Element, records: list[Record]) -> None:
        for elem in container:
            tag = _local(elem.tag)
            if tag == 'trans-unit':
                records.append(self._read_unit(elem))
            elif tag == 'group' and elem.get('restype') == PLURAL_RESTYPE:
                record = self._read_plural_group(elem)
                if record is not None:
                    records.append(record)
            elif tag == 'group':
                self._read_container(elem, records)

    def _child(self, elem: ET.Element, name: str) -> Optional[ET.Element]:
        for child in elem:
            if _local(child.tag) == name:
                return child
        return None

    def _text(self, elem: Optional[ET.Element]) -> str:
        """Text content of an element, inline markup flattened."""
        if elem is None:
            return ''
        return ''.join(elem.itertext())

    def _read_unit(self, unit: ET.Element) -> Record:
        source = self._child(unit, 'source')
        key = unit.get('resname') or unit.get('id') or self._text(source)

        metadata = {}
        notes = [self._text(n) for n in unit if _local(n.tag) == 'note']
        if notes:
            metadata['comment'] = '\n'.join(notes)
        return Record(key=key, value=self._text(self._child(unit, 'target')), metadata=metadata)

    def _read_plural_group(self, group: ET.Element) -> Optional[Record]:
        """Collapse a gettext plural group to its last ("other") form."""
        units = [u for u in group if _local(u.tag) == 'trans-unit']
        if not units:
            return None

        kept = self._read_unit(units[-1])
        key = group.get('resname') or group.get('id') or PLURAL_SUFFIX.sub('', kept.key)
        metadata = dict(kept.metadata)
        dropped = [u.get('id') or str(i) for i, u in enumerate(units[:-1])]
        if dropped:
            metadata['dropped_plurals'] = dropped
        return Record(key=key, value=kept.value, metadata=metadata)

    def _escape_text(self, text: str) -> str:
        return escape(text, {'\r': '&#13;'})

    def render(
        self,
        records: list[Record],
        locale: str,
        issues: Optional[list[RecordError]] = None,
    ) -> str:
        lines = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            f'<xliff xmlns="{XLIFF_NAMESPACE}" version="1.2">',
            f'  <file original="locport" datatype="plaintext" '
            f'source-language={quoteattr(self.settings.xliff_source_language)} '
            f'target-language={quoteattr(locale)}>',
            '    <body>',
        ]

        seen = set()
        for record in records:
            if record.key in seen:
                self.report(issues, KeyConflict(record.key, record.key))
                continue
            if INVALID_XML_CHARS.search(record.key) or INVALID_XML_CHARS.search(record.value):
                self.report(issues, InvalidValue(record.key, "contains characters not allowed in XML"))
                continue
            seen.add(record.key)

            lines.append(f'      <trans-unit id={quoteattr(record.key)}>')
            lines.append(f'        <source>{self._escape_text(record.key)}</source>')
            lines.append(f'        <target>{self._escape_text(record.value)}</target>')
            comment = record.metadata.get('comment')
            if comment and not INVALID_XML_CHARS.search(comment):
                lines.append(f'        <note>{self._escape_text(comment)}</note>')
            lines.append('      </trans-unit>')

        lines.extend([
            '    </body>',
            '  </file>',
            '</xliff>',
            '',
        ])
        return '\n'.join(lines)
