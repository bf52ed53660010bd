"""Firebase Authentication: ID token verification and the current actor.

Tokens are verified with google-auth against Google's public certificates
(no firebase-admin). The verified actor is stored in a context variable by
the API dependencies; current_user() reads it back for code that needs to
know who is acting (e.g. the permission error builder).
"""

from __future__ import annotations

import asyncio
import logging

from google.auth import exceptions as google_auth_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token as google_id_token

from app.domain.entities.auth_user import AuthUser
from app.domain.exceptions import AuthenticationException, AuthServiceUnavailableException
from app.shared.context import get_current_user

logger = logging.getLogger(__name__)


class FirebaseAuth:
    """Verifies Firebase ID tokens for one project.

    Constructed in the lifespan. With an empty project id the service is
    "not provided": every call raises AuthServiceUnavailableException.
    """

    def __init__(self, project_id: str, *, clock_skew_seconds: int = 10) -> None:
        self._project_id = project_id
        self._clock_skew_seconds = clock_skew_seconds
        self._request = google_requests.Request() if project_id else None

    @property
    def project_id(self) -> str:
        return self._project_id

    @property
    def available(self) -> bool:
        return bool(self._project_id)

    def _require_available(self) -> None:
        if not self._project_id:
            raise AuthServiceUnavailableException()

    def _verify(self, token: str) -> dict:
        return google_id_token.verify_firebase_token(
            token,
            self._request,
            audience=self._project_id,
            clock_skew_in_seconds=self._clock_skew_seconds,
        )

    async def verify_id_token(self, token: str) -> AuthUser:
        """Verify a Firebase ID token and return the actor it names.

        Certificate fetch and signature check are blocking (requests), so they
        run in a worker thread.

        Raises:
            AuthServiceUnavailableException: No Firebase project configured.
            AuthenticationException: Token missing, malformed, expired or for
                another project.
        """
        self._require_available()
        if not token:
            raise AuthenticationException("Missing ID token")
        try:
            claims = await asyncio.to_thread(self._verify, token)
        except (ValueError, google_auth_exceptions.GoogleAuthError) as e:
            logger.info("ID token rejected: %s", e)
            raise AuthenticationException("Invalid or expired ID token") from e
        if not claims or not (claims.get("user_id") or claims.get("sub")):
            raise AuthenticationException("ID token has no subject")
        return AuthUser.from_claims(claims, id_token=token)

    def current_user(self) -> AuthUser | None:
        """Return the actor for the current request or task, or None when signed out.

        Raises:
            AuthServiceUnavailableException: No Firebase project configured.
        """
        self._require_available()
        return get_current_user()
