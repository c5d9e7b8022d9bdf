"""
Store a user-specific application config in the platform's config directory.

    @dataclass
    class MyConfig:
        name: str = field(default="", metadata={"yaml": "user_name"})
        email: str = field(default="", metadata={"yaml": "user_email"})

    conf = appconfig.load(MyConfig(), "my-app")
    appconfig.update(conf, "my-app")

The file format (json, yaml or xml) is taken from the tags on the first field.
"""

import logging

from appconfig.errors import (
    AppConfigError,
    ConfigRootUnavailableError,
    DecodeError,
    DirectoryCreateError,
    EmptyStructError,
    EncodeError,
    FormatDetectionError,
    MixedFormatError,
    NotAStructError,
    ReadError,
    UnsupportedFormatError,
    WriteError,
)
from appconfig.formats import FormatKind, detect_format
from appconfig.paths import resolve_config_path
from appconfig.settings import StoreSettings
from appconfig.store import UserConfigStore, load, update

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "AppConfigError",
    "ConfigRootUnavailableError",
    "DecodeError",
    "DirectoryCreateError",
    "EmptyStructError",
    "EncodeError",
    "FormatDetectionError",
    "FormatKind",
    "MixedFormatError",
    "NotAStructError",
    "ReadError",
    "StoreSettings",
    "UnsupportedFormatError",
    "UserConfigStore",
    "WriteError",
    "detect_format",
    "load",
    "resolve_config_path",
    "update",
]
