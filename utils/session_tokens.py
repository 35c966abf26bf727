"""
Session token manager: issues access/refresh token pairs, rotates refresh
tokens and revokes sessions.

- Access tokens are stateless JWTs signed with the access secret.
- Refresh tokens are JWTs signed with a distinct refresh secret AND stored by
  value on the user record; only the stored value is accepted, so a token
  that was rotated away (or replaced by a newer login) is rejected even
  while its signature and expiry still check out.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Optional

from models.identity_store import ANY, IdentityStore, StoreError
from utils.exceptions import InternalError, Unauthorized, ValidationError
from utils.security import TokenError, create_token, decode_token

logger = logging.getLogger(__name__)

ISSUE_FAILED = "Something went wrong while generating refresh and access token"
INVALID_REFRESH = "invalid refresh token"
REFRESH_SUPERSEDED = "refresh token is expired or used"
INVALID_ACCESS = "invalid access token"


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str

    def to_dict(self) -> Dict[str, str]:
        return {"accessToken": self.access_token, "refreshToken": self.refresh_token}


class SessionTokenManager:
    def __init__(
        self,
        store: IdentityStore,
        access_secret: str,
        refresh_secret: str,
        access_expires: timedelta = timedelta(minutes=15),
        refresh_expires: timedelta = timedelta(days=10),
        algorithm: str = "HS256",
        issuer: Optional[str] = None,
    ):
        if access_secret == refresh_secret:
            raise ValueError("access and refresh tokens need distinct secrets")
        self.store = store
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.access_expires = access_expires
        self.refresh_expires = refresh_expires
        self.algorithm = algorithm
        self.issuer = issuer

    @classmethod
    def from_config(cls, store: IdentityStore, config) -> "SessionTokenManager":
        return cls(
            store,
            access_secret=config["ACCESS_TOKEN_SECRET"],
            refresh_secret=config["REFRESH_TOKEN_SECRET"],
            access_expires=config["ACCESS_TOKEN_EXPIRES"],
            refresh_expires=config["REFRESH_TOKEN_EXPIRES"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            issuer=config.get("JWT_ISSUER"),
        )

    def issue(self, identity_id: str) -> TokenPair:
        """
        Mint a new pair for an existing identity and make its refresh token
        the only one accepted from now on.
        """
        return self._issue(identity_id, ANY)

    def rotate(self, presented_refresh_token: str) -> TokenPair:
        """
        Exchange the current refresh token for a new pair.
        Fails closed with Unauthorized on any mismatch; the presented token
        is invalid afterwards whatever the outcome.
        """
        if not isinstance(presented_refresh_token, str) or not presented_refresh_token.strip():
            raise ValidationError("refresh token is required")

        try:
            claims = decode_token(
                presented_refresh_token,
                self.refresh_secret,
                "refresh",
                algorithm=self.algorithm,
                issuer=self.issuer,
            )
        except TokenError as exc:
            logger.info("refresh rejected: %s", exc)
            raise Unauthorized(INVALID_REFRESH)

        identity_id = claims["sub"]
        try:
            identity = self.store.find_by_id(identity_id)
        except StoreError:
            logger.exception("identity lookup failed during refresh")
            raise InternalError(ISSUE_FAILED)
        if identity is None:
            logger.info("refresh rejected: unknown identity")
            raise Unauthorized(INVALID_REFRESH)

        if presented_refresh_token != identity.refresh_token:
            logger.warning("refresh rejected: superseded token presented for user %s", identity_id)
            raise Unauthorized(REFRESH_SUPERSEDED)

        return self._issue(identity_id, presented_refresh_token)

    def revoke(self, identity_id: str) -> None:
        """Forget the current refresh token. Safe to call repeatedly."""
        try:
            self.store.update_current_refresh_token(identity_id, None)
        except StoreError:
            logger.exception("failed to revoke refresh token for user %s", identity_id)
            raise InternalError("Something went wrong while logging out")

    def verify_access_token(self, token: str) -> Dict[str, Any]:
        if not token:
            raise Unauthorized("unauthorized request")
        try:
            return decode_token(
                token, self.access_secret, "access", algorithm=self.algorithm, issuer=self.issuer
            )
        except TokenError:
            raise Unauthorized(INVALID_ACCESS)

    def _issue(self, identity_id: str, expected) -> TokenPair:
        try:
            identity = self.store.find_by_id(identity_id)
        except StoreError:
            logger.exception("identity lookup failed while issuing tokens")
            raise InternalError(ISSUE_FAILED)
        if identity is None:
            logger.error("cannot issue tokens: user %s vanished", identity_id)
            raise InternalError(ISSUE_FAILED)

        access_token = create_token(
            identity.id,
            "access",
            self.access_secret,
            self.access_expires,
            algorithm=self.algorithm,
            issuer=self.issuer,
            claims={
                "username": identity.username,
                "email": identity.email,
                "fullname": identity.fullname,
            },
        )
        refresh_token = create_token(
            identity.id,
            "refresh",
            self.refresh_secret,
            self.refresh_expires,
            algorithm=self.algorithm,
            issuer=self.issuer,
        )

        try:
            written = self.store.update_current_refresh_token(identity.id, refresh_token, expected=expected)
        except StoreError:
            logger.exception("failed to persist refresh token for user %s", identity_id)
            raise InternalError(ISSUE_FAILED)

        if not written:
            if expected is ANY:
                logger.error("refresh token write matched no row for user %s", identity_id)
                raise InternalError(ISSUE_FAILED)
            # another rotation of the same token landed first
            logger.warning("refresh rejected: lost rotation race for user %s", identity_id)
            raise Unauthorized(REFRESH_SUPERSEDED)

        return TokenPair(access_token=access_token, refresh_token=refresh_token)
