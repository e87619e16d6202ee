"""Cross-platform path management for mv-client.

Every persistent file location used by the client is defined here.
Directory creation is deferred to helpers rather than happening at import
time, keeping imports side-effect-free.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Union

from platformdirs import user_config_dir

# ---------------------------------------------------------------------------
# Application identifier
# ---------------------------------------------------------------------------

APP_NAME = "mv-client"

# ---------------------------------------------------------------------------
# Base directories
# ---------------------------------------------------------------------------

CONFIG_DIR: Path = Path(user_config_dir(APP_NAME))

# ---------------------------------------------------------------------------
# Standard file locations
# ---------------------------------------------------------------------------

TOKENS_FILE = CONFIG_DIR / "tokens.json"
SETTINGS_FILE = CONFIG_DIR / "settings.json"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def ensure_parents(path: Path) -> Path:
    """Create all parent directories for *path* if they do not exist.

    Returns *path* unchanged so the call can be used inline.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError:
        pass
    return path


def atomic_write(path: Path, data: Union[str, bytes]) -> None:
    """Write *data* to *path* atomically (write-to-tmp then replace).

    Bytes are decoded as UTF-8; the file is always written in text mode.
    """
    text = data.decode("utf-8") if isinstance(data, bytes) else data
    tmp = path.with_suffix(path.suffix + ".tmp")
    ensure_parents(tmp)
    tmp.write_text(text, encoding="utf-8")
    try:
        os.replace(tmp, path)
    except OSError:
        # Clean up orphaned tmp file before propagating.
        try:
            tmp.unlink()
        except OSError:
            pass
        raise
