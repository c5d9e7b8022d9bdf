"""Format detection and the json/yaml/xml codecs."""

from appconfig.formats.codecs import JsonCodec, XmlCodec, YamlCodec, decode, encode, get_codec
from appconfig.formats.fields import detect_format
from appconfig.formats.interfaces import FormatCodec, FormatKind

__all__ = [
    "FormatCodec",
    "FormatKind",
    "JsonCodec",
    "XmlCodec",
    "YamlCodec",
    "decode",
    "detect_format",
    "encode",
    "get_codec",
]
