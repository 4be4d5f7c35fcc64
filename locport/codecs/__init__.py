#!/usr/bin/env python3
"""
Format codecs for import and export.

Supported formats:
- csv: two-column term/translation CSV
- xliff12: XLIFF 1.2
- jsonflat / jsonnested: JSON, flat keys or nested objects
- yamlflat / yamlnested: YAML, flat keys or nested mappings
- properties: Java .properties
- po: GNU gettext PO
- strings: Apple .strings
"""

from .base import Codec, CodecRegistry, ExportFormat
from .csv_codec import CsvCodec
from .json_codec import JsonFlatCodec, JsonNestedCodec
from .po import PoCodec
from .properties import PropertiesCodec
from .strings import StringsCodec
from .xliff import XliffCodec
from .yaml_codec import YamlFlatCodec, YamlNestedCodec

# Register codecs in ExportFormat order
for _codec_class in (
    CsvCodec,
    XliffCodec,
    JsonFlatCodec,
    JsonNestedCodec,
    YamlFlatCodec,
    YamlNestedCodec,
    PropertiesCodec,
    PoCodec,
    StringsCodec,
):
    CodecRegistry.register(_codec_class)

__all__ = [
    'Codec',
    'CodecRegistry',
    'ExportFormat',
    'CsvCodec',
    'XliffCodec',
    'JsonFlatCodec',
    'JsonNestedCodec',
    'YamlFlatCodec',
    'YamlNestedCodec',
    'PropertiesCodec',
    'PoCodec',
    'StringsCodec',
]
