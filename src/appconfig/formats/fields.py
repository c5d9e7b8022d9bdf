from __future__ import annotations

import collections.abc
import dataclasses
import types
import typing
from dataclasses import dataclass
from typing import Any, Literal, Mapping, Optional, Union

from pydantic import BaseModel, TypeAdapter

from appconfig.errors import EmptyStructError, MixedFormatError, NotAStructError, UnsupportedFormatError
from appconfig.formats.interfaces import DETECTION_ORDER, FormatKind

_TAG_KEYS = frozenset(kind.value for kind in FormatKind)

_SEQUENCE_ORIGINS = (
    list,
    tuple,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.MutableSet,
)
_MAPPING_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)

ShapeKind = Literal["scalar", "any", "struct", "list", "dict"]


@dataclass(frozen=True, slots=True)
class Shape:
    kind: ShapeKind
    item: Optional[type] = None


@dataclass(frozen=True, slots=True)
class FieldSpec:
    name: str
    annotation: Any
    tags: Mapping[str, str]

    def key_for(self, kind: FormatKind) -> Optional[str]:
        """On-disk key for this field, or None when the field is skipped."""
        tag = self.tags.get(kind.value, "")
        if tag == "-":
            return None
        return tag or self.name

    @property
    def shape(self) -> Shape:
        return field_shape(self.annotation)


def is_struct_type(obj: Any) -> bool:
    # Parametrized generics such as list[int] pass isinstance(obj, type) on some versions
    if not isinstance(obj, type) or typing.get_origin(obj) is not None:
        return False
    return dataclasses.is_dataclass(obj) or issubclass(obj, BaseModel)


def struct_type(config: Any) -> type:
    """Resolve a config class or instance to its structure class."""
    cls = config if isinstance(config, type) else type(config)
    if not is_struct_type(cls):
        raise NotAStructError(
            f"config must be a struct (a dataclass or pydantic model), got: {cls.__name__}"
        )
    return cls


def struct_fields(cls: type) -> tuple[FieldSpec, ...]:
    if issubclass(cls, BaseModel):
        return tuple(
            FieldSpec(name=name, annotation=info.annotation, tags=_tags(info.json_schema_extra))
            for name, info in cls.model_fields.items()
        )
    hints = _type_hints(cls)
    return tuple(
        FieldSpec(name=f.name, annotation=hints.get(f.name, f.type), tags=_tags(f.metadata))
        for f in dataclasses.fields(cls)
    )


def detect_format(config: Any) -> FormatKind:
    """
    Pick the serialization format from the tags on the first declared field.

    Tags are checked in json, yaml, xml order and the first match wins, even when
    the field is tagged for several formats. Later fields may be untagged, but a
    later field tagged only for other formats is rejected.
    """
    cls = struct_type(config)
    fields = struct_fields(cls)
    if not fields:
        raise EmptyStructError(f"config must have at least one field: {cls.__name__}")

    first = fields[0]
    kind = next((k for k in DETECTION_ORDER if k.value in first.tags), None)
    if kind is None:
        raise UnsupportedFormatError(
            f"unsupported config struct tag on {cls.__name__}.{first.name}; "
            f"expected one of: {', '.join(k.value for k in DETECTION_ORDER)}"
        )

    for spec in fields[1:]:
        if spec.tags and kind.value not in spec.tags:
            raise MixedFormatError(
                f"field {cls.__name__}.{spec.name} is tagged for {sorted(spec.tags)} "
                f"but the config is {kind.value}"
            )
    return kind


def field_shape(annotation: Any) -> Shape:
    annotation = _unwrap_optional(annotation)
    if annotation is Any or annotation is object:
        return Shape("any")
    if is_struct_type(annotation):
        return Shape("struct", annotation)

    origin = typing.get_origin(annotation)
    args = [a for a in typing.get_args(annotation) if a is not Ellipsis]
    if origin in _SEQUENCE_ORIGINS:
        item = _unwrap_optional(args[0]) if args else None
        return Shape("list", item if is_struct_type(item) else None)
    if origin in _MAPPING_ORIGINS:
        item = _unwrap_optional(args[1]) if len(args) == 2 else None
        return Shape("dict", item if is_struct_type(item) else None)
    if annotation in (list, tuple, set, frozenset):
        return Shape("list")
    if annotation is dict:
        return Shape("dict")
    return Shape("scalar")


def dump_fields(config: Any, cls: type, exclude: Optional[set[str]] = None) -> dict[str, Any]:
    if isinstance(config, BaseModel):
        return config.model_dump(mode="json", exclude=exclude)
    return TypeAdapter(cls).dump_python(config, mode="json", exclude=exclude)


def skipped_fields(cls: type, kind: FormatKind) -> set[str]:
    """Names of fields tagged `-` for `kind`; they are never read or written."""
    return {spec.name for spec in struct_fields(cls) if spec.key_for(kind) is None}


def validate_fields(cls: type, data: Mapping[str, Any]) -> Any:
    if issubclass(cls, BaseModel):
        return cls.model_validate(data)
    return TypeAdapter(cls).validate_python(data)


def to_tagged(data: Mapping[str, Any], cls: type, kind: FormatKind) -> dict[str, Any]:
    """Rename field-name keys to tag keys, recursing into nested structures."""
    specs = struct_fields(cls)
    names = {spec.name for spec in specs}
    out: dict[str, Any] = {}
    for spec in specs:
        key = spec.key_for(kind)
        if key is None or spec.name not in data:
            continue
        out[key] = _convert(data[spec.name], spec.shape, kind, to_tagged)
    for name, value in data.items():
        if name not in names:
            out.setdefault(name, value)
    return out


def from_tagged(data: Mapping[str, Any], cls: type, kind: FormatKind) -> dict[str, Any]:
    """Rename tag keys back to field names, recursing into nested structures."""
    specs = struct_fields(cls)
    names = {spec.name for spec in specs}
    consumed: set[str] = set()
    out: dict[str, Any] = {}
    for spec in specs:
        key = spec.key_for(kind)
        if key is None or key not in data:
            continue
        consumed.add(key)
        out[spec.name] = _convert(data[key], spec.shape, kind, from_tagged)
    for key, value in data.items():
        if key not in consumed and key not in names:
            out[key] = value
    return out


def _convert(value: Any, shape: Shape, kind: FormatKind, rename: Any) -> Any:
    if value is None or shape.item is None:
        return value
    if shape.kind == "struct" and isinstance(value, Mapping):
        return rename(value, shape.item, kind)
    if shape.kind == "list" and isinstance(value, list):
        return [rename(v, shape.item, kind) if isinstance(v, Mapping) else v for v in value]
    if shape.kind == "dict" and isinstance(value, Mapping):
        return {k: rename(v, shape.item, kind) if isinstance(v, Mapping) else v for k, v in value.items()}
    return value


def _tags(source: Any) -> dict[str, str]:
    if not isinstance(source, Mapping):
        return {}
    return {k: v for k, v in source.items() if k in _TAG_KEYS and isinstance(v, str)}


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError):
        return {}


def _unwrap_optional(annotation: Any) -> Any:
    origin = typing.get_origin(annotation)
    if origin is Union or origin is getattr(types, "UnionType", None):
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation
