"""Session cookie helpers."""

from fastapi import Response

from estatehub.config import Settings
from estatehub.constants import ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE
from estatehub.services.tokens import SessionTokens


def _cookie_options(config: Settings) -> dict:
    return {"httponly": True, "secure": config.secure_cookies, "samesite": "none"}


def set_access_cookie(response: Response, token: str, config: Settings) -> None:
    response.set_cookie(
        ACCESS_TOKEN_COOKIE, token, max_age=config.access_token_max_age, **_cookie_options(config)
    )


def set_session_cookies(response: Response, tokens: SessionTokens, config: Settings) -> None:
    set_access_cookie(response, tokens.access_token, config)
    response.set_cookie(
        REFRESH_TOKEN_COOKIE,
        tokens.refresh_token,
        max_age=config.refresh_token_max_age,
        **_cookie_options(config),
    )


def clear_session_cookies(response: Response, config: Settings) -> None:
    for name in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE):
        response.delete_cookie(name, **_cookie_options(config))
