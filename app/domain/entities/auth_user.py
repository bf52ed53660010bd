"""Authenticated actor, as decoded from a verified Firebase ID token."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ProviderIdentity:
    """One linked sign-in provider (e.g. 'password', 'google.com') and the user's id there."""

    provider_id: str
    uid: str


@dataclass(frozen=True)
class AuthUser:
    """The user a request acts for.

    id_token is the raw token the request carried; Firestore calls made on the
    user's behalf send it so Security Rules see the same request.auth.
    """

    uid: str
    email: str | None = None
    email_verified: bool = False
    name: str | None = None
    phone_number: str | None = None
    providers: tuple[ProviderIdentity, ...] = ()
    tenant_id: str | None = None
    id_token: str = field(default="", repr=False, compare=False)

    @property
    def sign_in_provider(self) -> str:
        return self.providers[0].provider_id if self.providers else "custom"

    @classmethod
    def from_claims(cls, claims: dict[str, Any], id_token: str = "") -> "AuthUser":
        """Build from verified ID token claims (sub, email, firebase.identities, ...)."""
        firebase = claims.get("firebase") or {}
        identities = firebase.get("identities") or {}
        providers = tuple(
            ProviderIdentity(provider_id, str(ids[0]))
            for provider_id, ids in identities.items()
            if ids
        )
        return cls(
            uid=claims.get("user_id") or claims["sub"],
            email=claims.get("email"),
            email_verified=bool(claims.get("email_verified", False)),
            name=claims.get("name"),
            phone_number=claims.get("phone_number"),
            providers=providers,
            tenant_id=firebase.get("tenant"),
            id_token=id_token,
        )
