"""Persistent storage for the access/refresh credential pair.

Tokens are stored as a JSON file in the platform-specific config
directory (see :data:`paths.TOKENS_FILE`).  All writes go through
:func:`atomic_write` to avoid corrupted files on crash.
"""

from __future__ import annotations

import json
from pathlib import Path

from loguru import logger

from ..models.credentials import CredentialPair
from .paths import TOKENS_FILE, atomic_write


def load_tokens(path: Path | None = None) -> CredentialPair | None:
    """Load saved tokens from disk.

    Returns ``None`` if the file does not exist or cannot be parsed.
    """
    path = path or TOKENS_FILE
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return CredentialPair.model_validate(data)
    except Exception as exc:
        logger.warning(f"Failed to load tokens from {path}: {exc}")
        return None


def save_tokens(pair: CredentialPair, path: Path | None = None) -> None:
    """Persist *pair* to disk atomically."""
    path = path or TOKENS_FILE
    atomic_write(path, pair.model_dump_json(indent=2))
    logger.debug(f"Tokens saved to {path}")


def delete_tokens(path: Path | None = None) -> None:
    """Remove the persisted tokens file, if it exists."""
    path = path or TOKENS_FILE
    try:
        if path.exists():
            path.unlink()
            logger.debug(f"Tokens deleted from {path}")
    except OSError as exc:
        logger.error(f"Failed to delete tokens at {path}: {exc}")
