"""OAuth bearer token model and grant types."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from packages.mirage_core.formatting import duration_description, to_utc, utc_now

if TYPE_CHECKING:
    from .forms import UrlEncodedForm


def _display(value: datetime) -> str:
    return to_utc(value).strftime("%b %d, %Y at %H:%M UTC")


class OAuthToken(BaseModel):
    """Token response from an OAuth authorization server.

    ``created_at`` is stamped locally when the token is built or decoded; it
    is not part of the wire format. A token without both ``created_at`` and
    ``expires_in`` is treated as expired.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    access_token: str | None = None
    id_token: str | None = None
    refresh_token: str | None = None
    expires_in: float | None = None
    created_at: datetime | None = Field(default_factory=utc_now, exclude=True)

    @property
    def expiration(self) -> datetime | None:
        if self.created_at is None or self.expires_in is None:
            return None
        return to_utc(self.created_at) + timedelta(seconds=self.expires_in)

    @property
    def is_expired(self) -> bool:
        if self.created_at is None or self.expires_in is None:
            return True
        elapsed = (utc_now() - to_utc(self.created_at)).total_seconds()
        return elapsed > self.expires_in

    @property
    def description(self) -> str:
        now = utc_now()
        expiration = self.expiration
        if self.created_at is not None and expiration is not None:
            if expiration < now:
                return (
                    f"Created on {_display(self.created_at)}, expired on {_display(expiration)} "
                    f"({duration_description(expiration, now)})"
                )
            return (
                f"Created on {_display(self.created_at)}, expires on {_display(expiration)} "
                f"({duration_description(now, expiration)})"
            )
        if self.is_expired:
            return "Authorization token expired."
        return "Authorization token valid."

    def __str__(self) -> str:
        return self.description


class GrantKind(str, Enum):
    AUTHORIZATION_CODE = "authorization_code"
    REFRESH_TOKEN = "refresh_token"


_GRANT_KEYS = {
    GrantKind.AUTHORIZATION_CODE: "code",
    GrantKind.REFRESH_TOKEN: "refresh_token",
}


@dataclass(frozen=True)
class GrantType:
    """OAuth grant with the credential it carries."""

    kind: GrantKind
    value: str

    @classmethod
    def authorization_code(cls, code: str) -> GrantType:
        return cls(kind=GrantKind.AUTHORIZATION_CODE, value=code)

    @classmethod
    def refresh_token(cls, token: str) -> GrantType:
        return cls(kind=GrantKind.REFRESH_TOKEN, value=token)

    @property
    def name(self) -> str:
        return self.kind.value

    @property
    def key(self) -> str:
        return _GRANT_KEYS[self.kind]

    def apply_to(self, form: UrlEncodedForm) -> UrlEncodedForm:
        """Write ``grant_type`` and the credential field onto ``form``."""
        return form.adding_field("grant_type", self.name).adding_field(self.key, self.value)
