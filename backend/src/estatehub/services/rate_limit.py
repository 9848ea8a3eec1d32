"""Rate limiting for sensitive auth operations.

Each successful signup, login or OTP resend leaves a short-lived marker keyed
by (action, client IP, email). While the marker exists the same request from
the same source is refused.
"""

import logging
from enum import Enum

from fastapi import Request

from estatehub.services.errors import RateLimited
from estatehub.services.token_store import TokenStore

logger = logging.getLogger(__name__)


class RateLimitAction(str, Enum):
    """Operations guarded by a rate-limit marker. Each has its own namespace."""

    SIGNUP = "signup"
    LOGIN = "login"
    RESEND_OTP = "resend-otp"


RATE_LIMIT_MESSAGES: dict[RateLimitAction, str] = {
    RateLimitAction.SIGNUP: "Too many requests, please try again later",
    RateLimitAction.LOGIN: "Too many requests, please try again later",
    RateLimitAction.RESEND_OTP: "Please wait before resending OTP",
}


def rate_limit_key(action: RateLimitAction, ip: str | None, email: str) -> str:
    return f"{action.value}-rate-limit:{ip or 'unknown'}:{email}"


class RateLimiter:
    """Marker-based limiter over a ``TokenStore``.

    When the store is unavailable the limiter is disabled and every check
    passes.
    """

    def __init__(self, store: TokenStore, window_seconds: int = 60) -> None:
        self.store = store
        self.window_seconds = window_seconds

    @property
    def enabled(self) -> bool:
        return self.store.available

    async def is_limited(self, action: RateLimitAction, ip: str | None, email: str) -> bool:
        if not self.enabled:
            return False
        return await self.store.get(rate_limit_key(action, ip, email)) is not None

    async def check(self, action: RateLimitAction, ip: str | None, email: str) -> None:
        """Raise ``RateLimited`` if a marker exists for this source."""
        if await self.is_limited(action, ip, email):
            logger.info(f"Rate limited {action.value} for {email} from {ip}")
            raise RateLimited(RATE_LIMIT_MESSAGES[action])

    async def mark(self, action: RateLimitAction, ip: str | None, email: str) -> None:
        """Record that ``action`` succeeded for this source."""
        if not self.enabled:
            return
        await self.store.set(rate_limit_key(action, ip, email), "1", self.window_seconds)


def get_client_ip(request: Request) -> str | None:
    """Extract client IP from request headers.

    Checks common headers used by proxies and load balancers.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        # x-forwarded-for can be a comma-separated list, take the first IP
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    cf_connecting_ip = request.headers.get("cf-connecting-ip")
    if cf_connecting_ip:
        return cf_connecting_ip.strip()

    if request.client:
        return request.client.host

    return None
