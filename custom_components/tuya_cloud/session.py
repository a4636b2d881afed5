"""Session and token state for the Tuya OpenAPI."""
from __future__ import annotations

import hashlib
import random
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .const import (
    AUTH_RETRY_BASE,
    AUTH_RETRY_JITTER,
    DEFAULT_ENDPOINT,
    DEFAULT_LANGUAGE,
    RECONNECT_BASE,
    RECONNECT_JITTER,
    TOKEN_REFRESH_MARGIN,
)
from .errors import AuthError


def _now() -> float:
    return time.time()


def md5_hex(text: str) -> str:
    return hashlib.md5(text.encode("utf-8")).hexdigest().lower()


@dataclass
class TuyaSession:
    access_id: str
    access_key: str
    username: str = ""
    password: str = ""
    app_schema: str = ""
    country_code: Optional[str] = None
    endpoint: str = DEFAULT_ENDPOINT
    lang: str = DEFAULT_LANGUAGE
    # Sent as the request nonce and as the realtime link id
    link_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    access_token: str = ""
    refresh_token: str = ""
    uid: str = ""
    # Absolute expiry, epoch seconds
    expire_at: float = 0.0

    @property
    def configured(self) -> bool:
        return bool(self.username and self.password and self.app_schema and self.country_code)

    @property
    def has_token(self) -> bool:
        return bool(self.access_token)

    def login_body(self) -> Dict[str, Any]:
        if not self.configured:
            raise AuthError("country, application schema, login and password are required")
        return {
            "country_code": self.country_code,
            "username": self.username,
            "password": md5_hex(self.password),
            "schema": self.app_schema,
        }

    def store_token(self, result: Dict[str, Any], now: Optional[float] = None) -> float:
        """Apply a login result and return the delay until the next authentication."""
        now = _now() if now is None else now
        expire_time = int(result.get("expire_time") or 0)
        self.access_token = result.get("access_token") or ""
        self.refresh_token = result.get("refresh_token") or ""
        self.uid = result.get("uid") or ""
        platform_url = result.get("platform_url")
        if platform_url:
            self.endpoint = platform_url
        self.expire_at = now + expire_time
        return refresh_delay(expire_time)

    def clear_token(self) -> None:
        self.access_token = ""


def refresh_delay(expire_time: float) -> float:
    """Seconds until the proactive re-authentication, never negative."""
    return max(0.0, float(expire_time) - TOKEN_REFRESH_MARGIN)


def retry_delay(rng: Optional[random.Random] = None) -> int:
    rng = rng or random
    return AUTH_RETRY_BASE + rng.randint(0, AUTH_RETRY_JITTER)


def reconnect_delay(rng: Optional[random.Random] = None) -> int:
    rng = rng or random
    return RECONNECT_BASE + rng.randint(0, RECONNECT_JITTER)
