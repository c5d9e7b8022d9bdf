from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Protocol


class FormatKind(str, Enum):
    JSON = "json"
    YAML = "yaml"
    XML = "xml"


# First tag found in this order on the first field decides the format.
DETECTION_ORDER = (FormatKind.JSON, FormatKind.YAML, FormatKind.XML)


class FormatCodec(Protocol):
    """
    Serializes field-name keyed data for one structure type.

    `data` is what pydantic dumps in json mode; codecs translate field names to
    the on-disk keys declared by the structure's tags and back.
    """

    kind: FormatKind

    def encode(self, data: Mapping[str, Any], struct: type) -> bytes:
        ...

    def decode(self, raw: bytes, struct: type) -> dict[str, Any]:
        ...
