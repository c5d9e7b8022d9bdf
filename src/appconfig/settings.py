from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StoreSettings(BaseModel):
    """
    Knobs for where and how the config file is stored.

    The defaults match the conventional layout `<user-config-root>/<app>/config`
    with an owner-only config file.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Overrides the platform user-config root when set
    config_root: Optional[str] = None
    file_name: str = "config"

    # Permission bits
    dir_mode: int = 0o755
    file_mode: int = 0o600

    # Pretty printing for json and xml
    indent: int = Field(default=2, ge=0, le=8)

    @field_validator("file_name")
    @classmethod
    def _bare_file_name(cls, value: str) -> str:
        if not value or "/" in value or "\\" in value or value in (".", ".."):
            raise ValueError(f"file_name must be a bare file name, got: {value!r}")
        return value
