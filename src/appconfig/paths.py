from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from platformdirs import user_config_dir

from appconfig.errors import ConfigRootUnavailableError, DirectoryCreateError
from appconfig.settings import StoreSettings

logger = logging.getLogger(__name__)


def user_config_root(settings: Optional[StoreSettings] = None) -> Path:
    settings = settings or StoreSettings()
    if settings.config_root is not None:
        raw = settings.config_root
    else:
        try:
            raw = user_config_dir(roaming=True)
        except (KeyError, OSError, RuntimeError) as e:
            raise ConfigRootUnavailableError(f"Unable to determine user config directory: {e}") from e

    root = Path(raw) if raw else None
    if root is None or not root.is_absolute():
        raise ConfigRootUnavailableError(f"User config directory is not an absolute path: {raw!r}")
    return root


def resolve_config_path(app_name: str, settings: Optional[StoreSettings] = None) -> Path:
    """
    Return `<user-config-root>/<app_name>/<file_name>`, creating the app directory.

    The file itself is not created. Calling this repeatedly is safe; an existing
    directory is left as is.
    """
    settings = settings or StoreSettings()
    app_dir = user_config_root(settings) / app_name
    try:
        app_dir.mkdir(mode=settings.dir_mode, parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryCreateError(app_dir, str(e)) from e

    logger.debug("appconfig.config_dir_ready path=%s", app_dir)
    return app_dir / settings.file_name
