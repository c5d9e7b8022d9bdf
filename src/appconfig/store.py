from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Optional, TypeVar

from pydantic import ValidationError

from appconfig.errors import DecodeError, ReadError, WriteError
from appconfig.formats import decode, detect_format, encode
from appconfig.formats.fields import validate_fields
from appconfig.paths import resolve_config_path
from appconfig.settings import StoreSettings

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _write_replace(path: Path, body: bytes, mode: int) -> None:
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
        # A leftover temp file keeps its old bits through O_TRUNC; narrow them before writing
        if hasattr(os, "fchmod"):
            try:
                os.fchmod(fd, mode)
            except OSError:
                os.close(fd)
                raise
        with os.fdopen(fd, "wb") as f:
            f.write(body)
        tmp_path.replace(path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise WriteError(path, str(e)) from e


class UserConfigStore:
    """Reads and writes `<user-config-root>/<app>/config` for one settings object."""

    def __init__(self, settings: Optional[StoreSettings] = None) -> None:
        self.settings = settings or StoreSettings()

    def path_for(self, app_name: str) -> Path:
        return resolve_config_path(app_name, self.settings)

    def load(self, config: T, app_name: str) -> T:
        """
        Load the persisted config for `app_name` on top of `config`.

        A missing file is not an error: an instance is returned untouched, and a
        class yields a default instance.
        Otherwise a new validated instance is returned; `config` is never mutated.
        """
        path = self.path_for(app_name)
        kind = detect_format(config)

        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            logger.debug("appconfig.config_missing path=%s", path)
            if isinstance(config, type):
                try:
                    return validate_fields(config, {})
                except ValidationError as e:
                    raise DecodeError(kind, f"no config file and {config.__name__} has no defaults: {e}") from e
            return config
        except OSError as e:
            raise ReadError(path, str(e)) from e

        loaded = decode(raw, kind, config)
        logger.debug("appconfig.config_loaded path=%s format=%s", path, kind.value)
        return loaded

    def update(self, config: Any, app_name: str) -> Path:
        """Encode `config` and replace the config file for `app_name` with it."""
        path = self.path_for(app_name)
        kind = detect_format(config)

        # Encoding completes before the file is touched.
        body = encode(config, kind, indent=self.settings.indent)
        _write_replace(path, body, self.settings.file_mode)
        logger.info("appconfig.config_written path=%s format=%s bytes=%d", path, kind.value, len(body))
        return path


def load(config: T, app_name: str, settings: Optional[StoreSettings] = None) -> T:
    return UserConfigStore(settings).load(config, app_name)


def update(config: Any, app_name: str, settings: Optional[StoreSettings] = None) -> Path:
    return UserConfigStore(settings).update(config, app_name)
