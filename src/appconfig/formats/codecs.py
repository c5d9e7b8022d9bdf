from __future__ import annotations

import json
import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from appconfig.errors import DecodeError, EncodeError
from appconfig.formats.fields import (
    Shape,
    dump_fields,
    from_tagged,
    skipped_fields,
    struct_fields,
    struct_type,
    to_tagged,
    validate_fields,
)
from appconfig.formats.interfaces import FormatCodec, FormatKind

logger = logging.getLogger(__name__)

_XML_NAME = re.compile(r"^[A-Za-z_][\w.\-]*$")

# Attributes marking a null value and an empty list, which have no element form otherwise
_NIL = "nil"
_EMPTY = "empty"


@dataclass(frozen=True, slots=True)
class JsonCodec:
    indent: int = 2
    kind: FormatKind = FormatKind.JSON

    def encode(self, data: Mapping[str, Any], struct: type) -> bytes:
        text = json.dumps(to_tagged(data, struct, self.kind), indent=self.indent, ensure_ascii=False)
        return (text + "\n").encode("utf-8")

    def decode(self, raw: bytes, struct: type) -> dict[str, Any]:
        data = json.loads(raw)
        return from_tagged(_require_mapping(data, "JSON"), struct, self.kind)


@dataclass(frozen=True, slots=True)
class YamlCodec:
    kind: FormatKind = FormatKind.YAML

    def encode(self, data: Mapping[str, Any], struct: type) -> bytes:
        text = yaml.safe_dump(
            to_tagged(data, struct, self.kind),
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )
        return text.encode("utf-8")

    def decode(self, raw: bytes, struct: type) -> dict[str, Any]:
        data = yaml.safe_load(raw)
        if data is None:
            return {}
        return from_tagged(_require_mapping(data, "YAML"), struct, self.kind)


@dataclass(frozen=True, slots=True)
class XmlCodec:
    """
    Element-per-field XML.

    The root element is named after the structure class. Lists are written as
    repeated elements and mappings as an element with one child per key, so the
    element layout is driven by the field annotations on both sides. `None` is
    an empty element with `nil="true"` and an empty list a single element with
    `empty="true"`. Untyped (`Any`) fields only round-trip when they are `None`.
    """

    indent: int = 2
    kind: FormatKind = FormatKind.XML

    def encode(self, data: Mapping[str, Any], struct: type) -> bytes:
        root = ET.Element(struct.__name__)
        _fill_element(root, data, struct)
        if self.indent:
            ET.indent(root, space=" " * self.indent)
        return ET.tostring(root, encoding="utf-8") + b"\n"

    def decode(self, raw: bytes, struct: type) -> dict[str, Any]:
        try:
            root = ET.fromstring(raw)
        except ET.ParseError as e:
            raise ValueError(f"malformed XML: {e}") from e
        return _read_element(root, struct)


def get_codec(kind: FormatKind, *, indent: int = 2) -> FormatCodec:
    if kind is FormatKind.JSON:
        return JsonCodec(indent=indent)
    if kind is FormatKind.YAML:
        return YamlCodec()
    if kind is FormatKind.XML:
        return XmlCodec(indent=indent)
    raise ValueError(f"Unsupported format: {kind}")


def encode(config: Any, kind: FormatKind, *, indent: int = 2) -> bytes:
    """Serialize a config instance in memory; nothing touches the filesystem."""
    cls = struct_type(config)
    if isinstance(config, type):
        raise EncodeError(kind, f"an instance is required, got the class {cls.__name__}")
    codec = get_codec(kind, indent=indent)
    try:
        return codec.encode(dump_fields(config, cls), cls)
    except (yaml.YAMLError, TypeError, ValueError) as e:
        raise EncodeError(kind, str(e)) from e


def decode(raw: bytes, kind: FormatKind, into: Any) -> Any:
    """
    Parse `raw` and return a new validated instance of `into`'s structure.

    Keys absent from `raw` keep the values `into` currently holds; when `into` is
    a class they fall back to the field defaults. Fields tagged `-` keep the
    objects `into` holds.
    """
    cls = struct_type(into)
    codec = get_codec(kind)
    try:
        loaded = codec.decode(raw, cls)
        if isinstance(into, type):
            base: dict[str, Any] = {}
        else:
            # Fields tagged `-` are carried over as-is; they may hold runtime-only objects
            skipped = skipped_fields(cls, kind)
            base = dump_fields(into, cls, exclude=skipped)
            base.update({name: getattr(into, name) for name in skipped})
        _merge_fields(base, loaded, cls)
        result = validate_fields(cls, base)
    except (ValidationError, yaml.YAMLError, TypeError, ValueError) as e:
        raise DecodeError(kind, str(e)) from e

    logger.debug("appconfig.decoded format=%s keys=%d", kind.value, len(loaded))
    return result


def _merge_fields(base: dict[str, Any], override: Mapping[str, Any], struct: type) -> None:
    """Overlay decoded values; nested structures merge, every other value is replaced."""
    shapes = {spec.name: spec.shape for spec in struct_fields(struct)}
    for k, v in override.items():
        shape = shapes.get(k)
        if shape is not None and shape.kind == "struct" and isinstance(v, Mapping) and isinstance(base.get(k), dict):
            _merge_fields(base[k], v, shape.item)
            continue
        base[k] = v


def _require_mapping(data: Any, label: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise TypeError(f"Top-level {label} must be a mapping, got: {type(data).__name__}")
    return data


def _fill_element(parent: ET.Element, data: Mapping[str, Any], struct: type) -> None:
    for spec in struct_fields(struct):
        key = spec.key_for(FormatKind.XML)
        if key is None or spec.name not in data:
            continue
        _append_value(parent, key, data[spec.name], spec.shape)


def _append_value(parent: ET.Element, tag: str, value: Any, shape: Shape) -> None:
    if not _XML_NAME.match(tag):
        raise ValueError(f"not a valid XML element name: {tag!r}")

    if value is None:
        ET.SubElement(parent, tag, {_NIL: "true"})
    elif shape.kind == "any":
        raise TypeError(f"untyped value of {tag!r} ({type(value).__name__}) cannot be represented in XML")
    elif shape.kind == "struct" and isinstance(value, Mapping):
        _fill_element(ET.SubElement(parent, tag), value, shape.item)
    elif shape.kind == "dict" and isinstance(value, Mapping):
        child = ET.SubElement(parent, tag)
        item_shape = Shape("struct", shape.item) if shape.item else Shape("scalar")
        for k, v in value.items():
            _append_value(child, str(k), v, item_shape)
    elif shape.kind == "list" and isinstance(value, list):
        if not value:
            ET.SubElement(parent, tag, {_EMPTY: "true"})
            return
        item_shape = Shape("struct", shape.item) if shape.item else Shape("scalar")
        for item in value:
            if isinstance(item, list):
                raise TypeError(f"nested lists in {tag!r} cannot be represented in XML")
            _append_value(parent, tag, item, item_shape)
    elif isinstance(value, (Mapping, list)):
        raise TypeError(f"value of {tag!r} ({type(value).__name__}) has no declared XML shape")
    else:
        ET.SubElement(parent, tag).text = _scalar_text(value)


def _scalar_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _is_marked(element: ET.Element, marker: str) -> bool:
    return element.get(marker) == "true" and len(element) == 0 and not element.text


def _read_element(element: ET.Element, struct: type) -> dict[str, Any]:
    out: dict[str, Any] = {}
    children = list(element)
    for spec in struct_fields(struct):
        key = spec.key_for(FormatKind.XML)
        if key is None:
            continue
        matches = [c for c in children if c.tag == key]
        if not matches:
            continue
        shape = spec.shape
        single = matches[0] if len(matches) == 1 else None
        if single is not None and _is_marked(single, _NIL):
            out[spec.name] = None
        elif shape.kind == "list":
            if single is not None and _is_marked(single, _EMPTY):
                out[spec.name] = []
            else:
                out[spec.name] = [_read_item(c, shape.item) for c in matches]
        elif shape.kind == "dict":
            out[spec.name] = {c.tag: _read_item(c, shape.item) for c in matches[-1]}
        else:
            out[spec.name] = _read_item(matches[-1], shape.item)
    return out


def _read_item(element: ET.Element, struct: type | None) -> Any:
    if _is_marked(element, _NIL):
        return None
    if struct is not None:
        return _read_element(element, struct)
    return element.text or ""
