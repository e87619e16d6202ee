"""Client settings.

Values are resolved in order of increasing precedence: model defaults,
the JSON settings file in the user config directory, then environment
variables.
"""

from __future__ import annotations

import json
import os
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, ConfigDict, ValidationError

from .paths import SETTINGS_FILE

DEFAULT_BASE_URL = "https://mv.easytechinnovate.site"

# Environment variable -> settings field
ENV_OVERRIDES = {
    "MV_API_URL": "base_url",
    "MV_API_TIMEOUT": "timeout",
}


class Settings(BaseModel):
    """Connection and authentication settings for :class:`MVClient`."""

    model_config = ConfigDict(extra="ignore")

    base_url: str = DEFAULT_BASE_URL
    refresh_path: str = "/v1/auth/refresh-token"
    login_path: str = "/v1/auth/login"
    timeout: float = 30.0
    unauthorized_statuses: list[int] = [401]
    persist_tokens: bool = True

    def url_for(self, path: str) -> str:
        """Join *path* onto :attr:`base_url`; absolute URLs are returned as is."""
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"


def load_settings(path: Path | None = None) -> Settings:
    """Build :class:`Settings` from the settings file and the environment."""
    path = path or SETTINGS_FILE
    values: dict = {}
    if path.exists():
        try:
            loaded = json.loads(path.read_text(encoding="utf-8"))
            if isinstance(loaded, dict):
                values.update(loaded)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning(f"Ignoring unreadable settings file {path}: {exc}")

    for env_name, field_name in ENV_OVERRIDES.items():
        env_value = os.environ.get(env_name)
        if env_value:
            values[field_name] = env_value

    try:
        return Settings(**values)
    except ValidationError as exc:
        invalid = {str(err["loc"][0]) for err in exc.errors() if err["loc"]}
        logger.warning(f"Ignoring invalid settings: {', '.join(sorted(invalid))}")
        return Settings(**{k: v for k, v in values.items() if k not in invalid})
