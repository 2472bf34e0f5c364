from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

log = logging.getLogger(__name__)

ALGORITHM = "HS256"


class TokenError(ValueError):
    pass


@dataclass(frozen=True)
class Identity:
    user_id: int
    email: str | None = None
    name: str | None = None
    image: str | None = None


class TokenSigner:
    """Issues and verifies the bearer tokens handed out at sign-in."""

    def __init__(
        self,
        *,
        secret: str | None = None,
        issuer: str | None = None,
        ttl_seconds: int | None = None,
    ) -> None:
        self.secret = secret or os.getenv("AUTH_JWT_SECRET")
        self.issuer = issuer or os.getenv("AUTH_JWT_ISSUER") or "shadowdark-gm-tools"
        if ttl_seconds is None:
            ttl_seconds = int(os.getenv("AUTH_JWT_TTL_SECONDS", "604800"))
        self.ttl_seconds = ttl_seconds

    def _key(self) -> str:
        if not self.secret:
            raise TokenError("AUTH_JWT_SECRET is not configured")
        return self.secret

    def issue(self, identity: Identity) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "sub": str(identity.user_id),
            "email": identity.email,
            "name": identity.name,
            "picture": identity.image,
            "iss": self.issuer,
            "iat": now,
            "exp": now + timedelta(seconds=self.ttl_seconds),
        }
        return jwt.encode(claims, self._key(), algorithm=ALGORITHM)

    def verify(self, authorization: str | None) -> Identity:
        if not authorization:
            raise TokenError("missing Authorization header")

        parts = authorization.split(" ", 1)
        if len(parts) != 2 or parts[0].lower() != "bearer":
            raise TokenError("invalid Authorization header")

        token = parts[1].strip()
        if not token:
            raise TokenError("invalid Authorization header")

        try:
            claims = jwt.decode(
                token,
                self._key(),
                algorithms=[ALGORITHM],
                issuer=self.issuer,
            )
        except JWTError as exc:
            raise TokenError("invalid token") from exc

        subject = claims.get("sub")
        if not subject or not str(subject).isdigit():
            raise TokenError("invalid token: bad sub")

        return Identity(
            user_id=int(subject),
            email=claims.get("email"),
            name=claims.get("name"),
            image=claims.get("picture"),
        )

    def resolve(self, authorization: str | None) -> Identity | None:
        """Like ``verify`` but an unusable header means anonymous."""
        if not authorization:
            return None
        try:
            return self.verify(authorization)
        except TokenError as exc:
            log.info("Rejected bearer token: %s", exc)
            return None
