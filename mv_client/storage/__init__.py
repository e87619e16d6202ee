"""Local persistence: paths, settings, token file and credential store."""

from mv_client.storage.config import Settings, load_settings
from mv_client.storage.credentials import CredentialStore

__all__ = ["CredentialStore", "Settings", "load_settings"]
