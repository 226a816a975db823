from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from bytespark.core.config import AppSettings
from bytespark.schemas.common import TokenResponse

logger = logging.getLogger(__name__)


class AdminAuthService:
    """Issue and verify the bearer tokens that guard the admin API."""

    def __init__(self, settings: AppSettings):
        self._settings = settings

    def issue_token(self, subject: str | None = None) -> TokenResponse:
        subject = subject or self._settings.admin_user_id
        if not subject:
            raise ValueError("ADMIN_USER_ID is not configured.")

        now = datetime.now(timezone.utc)
        payload: dict[str, Any] = {
            "sub": subject,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(seconds=self._settings.access_token_ttl)).timestamp()),
            "iss": self._settings.app_name,
            "jti": secrets.token_hex(16),
        }
        token = jwt.encode(payload, self._secret(), algorithm=self._settings.jwt_algorithm)
        return TokenResponse(
            access_token=token,
            token_type="bearer",  # nosec B106
            expires_in=self._settings.access_token_ttl,
        )

    def verify_token(self, token: str) -> str:
        """Return the token subject, raising ``PermissionError`` unless it is the admin."""
        admin_id = self._settings.admin_user_id
        if not admin_id:
            raise PermissionError("Admin access is not configured.")
        try:
            claims = jwt.decode(
                token,
                self._secret(),
                algorithms=[self._settings.jwt_algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.PyJWTError as exc:
            logger.debug("Rejected admin token: %s", exc)
            raise PermissionError("Invalid or expired token.") from exc

        if claims.get("sub") != admin_id:
            raise PermissionError("Token subject is not an administrator.")
        return admin_id

    def _secret(self) -> str:
        if not self._settings.jwt_secret_key:
            raise ValueError("JWT_SECRET_KEY is not configured.")
        return self._settings.jwt_secret_key.get_secret_value()
