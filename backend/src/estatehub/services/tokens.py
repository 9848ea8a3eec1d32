"""Session issuance: signed access/refresh tokens and the refresh pointer."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from secrets import token_hex

from jose import JWTError, jwt

from estatehub.config import Settings
from estatehub.constants import REFRESH_TOKEN_KEY_PREFIX
from estatehub.services.errors import InvalidToken, Revoked, Unauthenticated
from estatehub.services.token_store import TokenStore

logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"


@dataclass(frozen=True)
class SessionTokens:
    access_token: str
    refresh_token: str


def refresh_pointer_key(account_id: str) -> str:
    return f"{REFRESH_TOKEN_KEY_PREFIX}{account_id}"


def encode_token(
    account_id: str,
    token_type: str,
    secret: str,
    expires_delta: timedelta,
    algorithm: str = "HS256",
) -> str:
    """Sign a token carrying the account ID as ``sub``."""
    now = datetime.now(UTC)
    payload = {
        "sub": account_id,
        "type": token_type,
        "iat": now,
        "exp": now + expires_delta,
    }
    if token_type == REFRESH:
        # Distinct per issue so a reissued refresh token never equals the previous one
        payload["jti"] = token_hex(16)
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_token(token: str, token_type: str, secret: str, algorithm: str = "HS256") -> dict:
    """Verify signature, expiry and type. Raises ``InvalidToken``."""
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError as e:
        raise InvalidToken(f"Invalid token: {e}") from e

    if payload.get("type") != token_type:
        raise InvalidToken("Invalid token type")
    if not payload.get("sub"):
        raise InvalidToken("Invalid token: missing account ID")
    return payload


class SessionIssuer:
    """Mints session tokens and keeps one valid refresh token per account.

    Issuing a session overwrites the account's refresh pointer, so any refresh
    token handed out earlier stops working.
    """

    def __init__(self, settings: Settings, store: TokenStore) -> None:
        self.settings = settings
        self.store = store

    def create_access_token(self, account_id: str, expires_delta: timedelta | None = None) -> str:
        return encode_token(
            account_id,
            ACCESS,
            self.settings.access_token_secret,
            expires_delta or timedelta(minutes=self.settings.access_token_expire_minutes),
            self.settings.jwt_algorithm,
        )

    def create_refresh_token(self, account_id: str, expires_delta: timedelta | None = None) -> str:
        return encode_token(
            account_id,
            REFRESH,
            self.settings.refresh_token_secret,
            expires_delta or timedelta(days=self.settings.refresh_token_expire_days),
            self.settings.jwt_algorithm,
        )

    def decode_access_token(self, token: str) -> dict:
        return decode_token(token, ACCESS, self.settings.access_token_secret, self.settings.jwt_algorithm)

    def decode_refresh_token(self, token: str) -> dict:
        return decode_token(
            token, REFRESH, self.settings.refresh_token_secret, self.settings.jwt_algorithm
        )

    async def issue(self, account_id: str) -> SessionTokens:
        access_token = self.create_access_token(account_id)
        refresh_token = self.create_refresh_token(account_id)
        await self.store.set(
            refresh_pointer_key(account_id),
            refresh_token,
            self.settings.refresh_token_max_age,
        )
        logger.debug(f"Issued session for account {account_id}")
        return SessionTokens(access_token=access_token, refresh_token=refresh_token)

    async def refresh(self, refresh_token: str | None) -> tuple[str, str]:
        """Exchange a refresh token for a new access token.

        Returns ``(account_id, access_token)``. The refresh token itself is not
        rotated.
        """
        if not refresh_token:
            raise Unauthenticated("Please login, no refresh token found")

        payload = self.decode_refresh_token(refresh_token)
        account_id = payload["sub"]

        stored = await self.store.get(refresh_pointer_key(account_id))
        if stored is None or stored != refresh_token:
            logger.info(f"Rejected superseded refresh token for account {account_id}")
            raise Revoked()

        return account_id, self.create_access_token(account_id)

    async def revoke(self, account_id: str) -> None:
        """Forget the account's refresh token. Idempotent."""
        await self.store.delete(refresh_pointer_key(account_id))
