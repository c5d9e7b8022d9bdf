from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from appconfig.formats.interfaces import FormatKind


class AppConfigError(Exception):
    """Base class for every error raised by appconfig."""


class ConfigRootUnavailableError(AppConfigError):
    """The platform could not supply a per-user config directory."""


class DirectoryCreateError(AppConfigError, OSError):
    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Failed to create config directory: {path} ({reason})")
        self.path = path


class FormatDetectionError(AppConfigError, TypeError):
    """The config value cannot be mapped to a supported format."""


class NotAStructError(FormatDetectionError):
    pass


class EmptyStructError(FormatDetectionError):
    pass


class UnsupportedFormatError(FormatDetectionError):
    pass


class MixedFormatError(UnsupportedFormatError):
    """A later field is tagged for a different format than the first one."""


class ReadError(AppConfigError, OSError):
    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Failed to read config file: {path} ({reason})")
        self.path = path


class WriteError(AppConfigError, OSError):
    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Failed to write config file: {path} ({reason})")
        self.path = path


class DecodeError(AppConfigError, ValueError):
    def __init__(self, kind: FormatKind, reason: str) -> None:
        super().__init__(f"Failed to decode {kind.value} config: {reason}")
        self.kind = kind


class EncodeError(AppConfigError, ValueError):
    def __init__(self, kind: FormatKind, reason: str) -> None:
        super().__init__(f"Failed to encode {kind.value} config: {reason}")
        self.kind = kind


__all__ = [
    "AppConfigError",
    "ConfigRootUnavailableError",
    "DecodeError",
    "DirectoryCreateError",
    "EmptyStructError",
    "EncodeError",
    "FormatDetectionError",
    "MixedFormatError",
    "NotAStructError",
    "ReadError",
    "UnsupportedFormatError",
    "WriteError",
]
