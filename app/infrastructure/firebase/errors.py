"""Structured Firestore permission errors.

A FirestorePermissionError carries a SecurityRuleRequest shaped like the
``request`` object Firestore Security Rules evaluate (request.auth,
request.method, request.path, request.resource.data), so a denied read or
write can be debugged against the rules that rejected it.
"""

from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol

from fastapi.encoders import jsonable_encoder

from app.core.constants import FIRESTORE_RULES_PATH_PREFIX
from app.domain.entities.auth_user import AuthUser
from app.domain.enums import SecurityOperation
from app.domain.exceptions import LyraException
from app.infrastructure.firebase._rest_encoding import _ServerTimestamp

logger = logging.getLogger(__name__)

PERMISSION_DENIED_PREAMBLE = (
    "Missing or insufficient permissions: "
    "The following request was denied by Firestore Security Rules:\n"
)


class IdentityProvider(Protocol):
    """Anything that can say who is acting (FirebaseAuth in the app)."""

    def current_user(self) -> AuthUser | None: ...


@dataclass(frozen=True)
class SecurityRuleContext:
    """What failed: store path (no leading slash), operation, and optional payload."""

    path: str
    operation: SecurityOperation
    request_resource_data: Any = None


@dataclass(frozen=True)
class SecurityRuleAuth:
    """Mirror of request.auth: uid plus the decoded token claims."""

    uid: str
    token: dict[str, Any]

    @classmethod
    def from_user(cls, user: AuthUser) -> SecurityRuleAuth:
        return cls(
            uid=user.uid,
            token={
                "name": user.name,
                "email": user.email,
                "email_verified": user.email_verified,
                "phone_number": user.phone_number,
                "sub": user.uid,
                "firebase": {
                    "identities": {p.provider_id: [p.uid] for p in user.providers},
                    "sign_in_provider": user.sign_in_provider,
                    "tenant": user.tenant_id,
                },
            },
        )

    def to_dict(self) -> dict[str, Any]:
        return {"uid": self.uid, "token": self.token}


@dataclass(frozen=True)
class SecurityRuleRequest:
    """Mirror of the Security Rules request object for one denied operation."""

    auth: SecurityRuleAuth | None
    method: str
    path: str
    resource: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form; 'resource' is omitted when there was no payload."""
        out: dict[str, Any] = {
            "auth": self.auth.to_dict() if self.auth else None,
            "method": self.method,
            "path": self.path,
        }
        if self.resource is not None:
            out["resource"] = self.resource
        return out


def _snapshot_auth(identity: IdentityProvider | None) -> SecurityRuleAuth | None:
    if identity is None:
        return None
    try:
        user = identity.current_user()
    except Exception as e:
        # Auth not configured yet; the request is still worth reporting.
        logger.debug("No auth snapshot for permission error: %s", e)
        return None
    return SecurityRuleAuth.from_user(user) if user else None


def _resource_data(data: Any) -> Any:
    """Write payload as plain JSON; the SERVER_TIMESTAMP sentinel becomes its name."""
    return jsonable_encoder(
        data,
        custom_encoder={
            _ServerTimestamp: repr,
            bytes: lambda b: base64.b64encode(b).decode("ascii"),
        },
    )


def build_request(
    context: SecurityRuleContext, identity: IdentityProvider | None = None
) -> SecurityRuleRequest:
    """Build the rules-shaped request for context, reading the actor from identity.

    The payload is copied in JSON form, so the request (and every record made
    from it) can be sent over a WebSocket or returned from an endpoint as is.
    """
    operation = SecurityOperation(context.operation)
    return SecurityRuleRequest(
        auth=_snapshot_auth(identity),
        method=operation.value,
        path=f"{FIRESTORE_RULES_PATH_PREFIX}/{context.path.strip('/')}",
        resource=(
            {"data": _resource_data(context.request_resource_data)}
            if context.request_resource_data is not None
            else None
        ),
    )


def build_message(request: SecurityRuleRequest) -> str:
    return PERMISSION_DENIED_PREAMBLE + json.dumps(request.to_dict(), indent=2, default=str)


class FirestorePermissionError(LyraException):
    """A Firestore read or write was denied (or failed) for the current actor.

    Construction never fails: identity lookup errors degrade to auth=None.

    Attributes:
        context: The SecurityRuleContext the error was built from.
        request: The rules-shaped SecurityRuleRequest (also in details).
    """

    def __init__(
        self, context: SecurityRuleContext, identity: IdentityProvider | None = None
    ) -> None:
        self.context = context
        self.request = build_request(context, identity)
        super().__init__(
            build_message(self.request), "PERMISSION_DENIED", self.request.to_dict()
        )
