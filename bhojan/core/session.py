import base64
import binascii
import hashlib
import hmac
import json
import logging
import time
from typing import Callable, Optional, Dict, Any

from bhojan.core.config import ADMIN_COOKIE_NAME, SESSION_DURATION_MS, SESSION_MAX_AGE, Settings
from bhojan.core.enums import ErrorKind
from bhojan.core.errors import Result

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b'=').decode('ascii')


def _b64url_decode(segment: str) -> bytes:
    padding = '=' * (-len(segment) % 4)
    return base64.urlsafe_b64decode(segment + padding)


def sign(payload_b64: str, secret: str) -> str:
    digest = hmac.new(secret.encode('utf-8'), payload_b64.encode('ascii'), hashlib.sha256).digest()
    return _b64url_encode(digest)


def create_token(payload: Dict[str, Any], secret: str) -> str:
    """Encode the payload and append its HMAC-SHA256 signature"""
    payload_b64 = _b64url_encode(json.dumps(payload, separators=(',', ':')).encode('utf-8'))
    return f"{payload_b64}.{sign(payload_b64, secret)}"


def decode_token(token: str, secret: str) -> Optional[Dict[str, Any]]:
    """Return the payload of a correctly signed token, else None"""
    parts = token.split('.')
    if len(parts) != 2 or not all(parts):
        return None
    payload_b64, signature = parts
    try:
        expected = sign(payload_b64, secret)
    except UnicodeEncodeError:
        return None
    if not hmac.compare_digest(signature.encode('utf-8'), expected.encode('ascii')):
        return None
    try:
        payload = json.loads(_b64url_decode(payload_b64).decode('utf-8'))
    except (binascii.Error, ValueError):
        return None
    if not isinstance(payload, dict):
        return None
    return payload


class AdminSessionManager:
    """Password check plus signed, time-limited admin tokens.

    Tokens are never revoked server-side: one stays valid until it expires,
    even after logout clears the caller's cookie.
    """

    def __init__(self, settings: Settings, clock: Callable[[], int] = now_ms,
                 duration_ms: int = SESSION_DURATION_MS):
        self.settings = settings
        self.clock = clock
        self.duration_ms = duration_ms

    def authenticate(self, password: str) -> Result:
        admin_password = self.settings.admin_password
        if not admin_password or not self.settings.jwt_secret:
            logger.error("ADMIN_PASSWORD or JWT_SECRET environment variable not set")
            return Result.fail('Admin authentication is not configured.', ErrorKind.CONFIGURATION)

        if not isinstance(password, str) or not hmac.compare_digest(
                password.encode('utf-8'), admin_password.encode('utf-8')):
            logger.info("Admin login rejected")
            return Result.fail('Invalid password.', ErrorKind.AUTHENTICATION)

        now = self.clock()
        payload = {
            'authenticated': True,
            'createdAt': now,
            'expiresAt': now + self.duration_ms,
        }
        logger.info("Admin session created")
        return Result.ok(create_token(payload, self.settings.jwt_secret))

    def verify(self, token: Optional[str]) -> bool:
        if not token or not isinstance(token, str) or not self.settings.jwt_secret:
            return False

        payload = decode_token(token, self.settings.jwt_secret)
        if payload is None:
            return False
        if payload.get('authenticated') is not True:
            return False

        expires_at = payload.get('expiresAt')
        if isinstance(expires_at, bool) or not isinstance(expires_at, (int, float)):
            return False
        return self.clock() <= expires_at

    def set_cookie(self, response, token: str):
        response.set_cookie(
            ADMIN_COOKIE_NAME,
            token,
            max_age=SESSION_MAX_AGE,
            path='/',
            httponly=True,
            secure=self.settings.is_production,
            samesite='Lax',
        )

    def logout(self, response) -> Result:
        """Drop the caller's session cookie; safe to call repeatedly"""
        response.delete_cookie(ADMIN_COOKIE_NAME, path='/')
        logger.info("Admin logged out")
        return Result.ok()
