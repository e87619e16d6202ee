"""Re-export the client data models for convenient access."""

from mv_client.models.credentials import CredentialPair
from mv_client.models.request import RequestDescriptor

__all__ = [
    "CredentialPair",
    "RequestDescriptor",
]
