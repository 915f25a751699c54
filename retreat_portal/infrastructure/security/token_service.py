from __future__ import annotations

import hashlib
import hmac
import json
import logging
import math
from datetime import datetime, timezone
from typing import Any

from jwt.utils import base64url_decode, base64url_encode

from retreat_portal.application.dto.auth import IssuedToken
from retreat_portal.application.ports.token_port import TokenPort
from retreat_portal.domain.entities.auth import UserType
from retreat_portal.infrastructure.security.password_hasher import constant_time_equals


logger = logging.getLogger(__name__)

DEFAULT_TOKEN_TTL_SECONDS = 2 * 60 * 60


def _signature(encoded_payload: str, secret: str) -> str:
    mac = hmac.new(secret.encode("utf-8"), encoded_payload.encode("ascii"), hashlib.sha256)
    return base64url_encode(mac.digest()).decode("ascii")


def sign_token(
    claims: dict[str, Any],
    secret: str,
    *,
    now: datetime,
    ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS,
) -> tuple[str, datetime]:
    """Return ``base64url(payload).base64url(hmac)`` and its expiry.

    ``iat`` and ``exp`` are unix seconds and always overwrite caller claims.
    """
    issued_at = int(now.timestamp())
    expires_at = issued_at + ttl_seconds
    payload = {**claims, "iat": issued_at, "exp": expires_at}
    raw = json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8")
    encoded = base64url_encode(raw).decode("ascii")
    token = f"{encoded}.{_signature(encoded, secret)}"
    return token, datetime.fromtimestamp(expires_at, tz=timezone.utc)


def verify_token(
    token: str,
    secret: str,
    *,
    now: datetime | None = None,
    expected_type: str | None = None,
) -> dict[str, Any] | None:
    """Payload of a well-formed, correctly signed, unexpired token, else ``None``."""
    if not isinstance(token, str) or not secret:
        return None
    parts = token.split(".")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        return None
    encoded, signature = parts

    try:
        expected_signature = _signature(encoded, secret)
    except UnicodeEncodeError:
        return None
    if not constant_time_equals(expected_signature, signature):
        return None

    try:
        payload = json.loads(base64url_decode(encoded))
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None

    exp = payload.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)) or not math.isfinite(exp):
        return None
    current = now or datetime.now(timezone.utc)
    if exp <= current.timestamp():
        return None

    if expected_type is not None and payload.get("type") != expected_type:
        return None
    return payload


class HmacTokenService(TokenPort):
    def __init__(
        self,
        *,
        admin_secret: str,
        attendee_secret: str,
        ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS,
    ):
        if not admin_secret or not attendee_secret:
            raise ValueError("Token secrets are required.")
        if admin_secret == attendee_secret:
            logger.info("token_service: admin and attendee tokens share one secret")
        self._secrets: dict[str, str] = {"admin": admin_secret, "attendee": attendee_secret}
        self._ttl_seconds = ttl_seconds

    def issue(self, *, token_type: UserType, claims: dict[str, Any], now: datetime) -> IssuedToken:
        token, expires_at = sign_token(
            {**claims, "type": token_type},
            self._secrets[token_type],
            now=now,
            ttl_seconds=self._ttl_seconds,
        )
        return IssuedToken(token=token, expires_at=expires_at)

    def verify(self, *, token: str, token_type: UserType, now: datetime | None = None) -> dict[str, Any] | None:
        return verify_token(token, self._secrets[token_type], now=now, expected_type=token_type)
