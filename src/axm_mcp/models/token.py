"""OAuth2 bearer token model."""

from datetime import UTC, datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Tokens are treated as expired this long before the server-side expiry
EXPIRY_MARGIN = timedelta(minutes=5)


class Token(BaseModel):
    """Bearer token returned by the OAuth2 token endpoint.

    Tokens are immutable: a refresh produces a new instance. ``issued_at`` is
    not part of the token endpoint response, so it defaults to the moment the
    response is decoded; cached tokens carry the stored value.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    access_token: str
    expires_in: int
    token_type: str = "Bearer"
    issued_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("issued_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        """Treat naive timestamps as UTC."""
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)

    @property
    def expires_at(self) -> datetime:
        """Return the moment after which the token is no longer used."""
        return self.issued_at + timedelta(seconds=self.expires_in) - EXPIRY_MARGIN

    def is_expired_at(self, now: datetime) -> bool:
        """Return True if the token should be refreshed at ``now``."""
        return now >= self.expires_at

    @property
    def is_expired(self) -> bool:
        """Return True once the token is within five minutes of expiry."""
        return self.is_expired_at(datetime.now(UTC))

    @property
    def authorization(self) -> str:
        """Return the Authorization header value for this token."""
        return f"Bearer {self.access_token}"


__all__ = ["EXPIRY_MARGIN", "Token"]
