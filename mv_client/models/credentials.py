"""Pydantic v2 model for the bearer credential pair."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CredentialPair(BaseModel):
    """Access token plus the (optional) refresh token used to renew it.

    Accepts both the snake_case field names used on disk and the camelCase
    keys returned by the API (``accessToken`` / ``refreshToken``).
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    access_token: str = Field(alias="accessToken")
    refresh_token: str | None = Field(default=None, alias="refreshToken")

    @property
    def can_refresh(self) -> bool:
        """Return ``True`` when a refresh token is available."""
        return bool(self.refresh_token)
