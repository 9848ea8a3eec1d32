"""Account endpoint tests."""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from estatehub.config import settings
from estatehub.context import AppContext
from estatehub.models import Account
from estatehub.services.token_store import UnavailableTokenStore
from tests.conftest import PASSWORD, AuthenticatedClient, RecordingDispatcher, bearer

JO = {"name": "Jo Lee", "email": "jo@x.com", "password": "longpass1", "contact": "9876543210"}


async def login_and_verify(client: AsyncClient, notifier: RecordingDispatcher, email: str):
    response = await client.post("/api/user/login", json={"email": email, "password": PASSWORD})
    assert response.status_code == 200
    return await client.post(
        "/api/user/verify-otp", json={"email": email, "otp": notifier.otps[email]}
    )


async def test_signup_and_verify(client: AsyncClient, notifier: RecordingDispatcher):
    response = await client.post("/api/user/signup", json=JO)
    assert response.status_code == 200
    data = response.json()
    assert "verification link has been sent" in data["message"]
    # Link only exposed in development
    assert data["verification_link"] is None

    token = notifier.verification_tokens["jo@x.com"]
    response = await client.post(f"/api/user/verify/{token}")
    assert response.status_code == 200
    user = response.json()["user"]
    assert user["role"] == "user"
    assert user["email"] == "jo@x.com"
    assert "password_hash" not in user


async def test_signup_link_in_development(
    client: AsyncClient, ctx: AppContext, notifier: RecordingDispatcher
):
    ctx.settings = settings.model_copy(update={"environment": "development"})

    response = await client.post("/api/user/signup", json=JO)

    token = notifier.verification_tokens["jo@x.com"]
    assert response.json()["verification_link"] == f"/api/user/verify/{token}"


async def test_signup_validation_errors(client: AsyncClient):
    response = await client.post(
        "/api/user/signup",
        json={"name": "Jo", "email": "not-an-email", "password": "short", "contact": "12345"},
    )

    assert response.status_code == 400
    data = response.json()
    fields = {e["field"] for e in data["errors"]}
    assert fields == {"name", "email", "password", "contact"}
    assert data["message"] == data["errors"][0]["message"]
    contact = next(e for e in data["errors"] if e["field"] == "contact")
    assert contact["message"] == "Contact must be a valid 10-digit number"


async def test_signup_name_too_long(client: AsyncClient, notifier: RecordingDispatcher):
    response = await client.post("/api/user/signup", json={**JO, "name": "J" * 256})

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "name"
    assert "jo@x.com" not in notifier.verification_tokens


async def test_signup_existing_email(client: AsyncClient, user: Account):
    response = await client.post("/api/user/signup", json={**JO, "email": user.email})
    assert response.status_code == 400
    assert response.json() == {"message": "User already exists"}


async def test_signup_cannot_request_admin(client: AsyncClient):
    response = await client.post("/api/user/signup", json={**JO, "role": "admin"})
    assert response.status_code == 400


async def test_verify_unknown_token(client: AsyncClient):
    response = await client.post("/api/user/verify/unknown")
    assert response.status_code == 400
    assert response.json()["message"] == "Verification link has expired"


async def test_login_flow_sets_cookies(
    client: AsyncClient, notifier: RecordingDispatcher, user: Account
):
    response = await login_and_verify(client, notifier, user.email)

    assert response.status_code == 200
    data = response.json()
    assert data["user"]["id"] == user.id
    assert response.cookies.get("accessToken") == data["token"]
    assert response.cookies.get("refreshToken")

    set_cookie = " ".join(response.headers.get_list("set-cookie")).lower()
    assert "httponly" in set_cookie
    assert "samesite=none" in set_cookie
    assert "secure" in set_cookie


async def test_login_wrong_password(client: AsyncClient, user: Account):
    response = await client.post(
        "/api/user/login", json={"email": user.email, "password": "wrong-password"}
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid credentials"


async def test_login_unknown_email(client: AsyncClient):
    response = await client.post(
        "/api/user/login", json={"email": "ghost@example.com", "password": PASSWORD}
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid credentials"


async def test_login_pending_agent(
    client: AsyncClient, ctx: AppContext, notifier: RecordingDispatcher, pending_agent: Account
):
    response = await client.post(
        "/api/user/login", json={"email": pending_agent.email, "password": PASSWORD}
    )

    assert response.status_code == 403
    assert "pending" in response.json()["message"]
    assert pending_agent.email not in notifier.otps
    assert await ctx.token_store.get(f"otp:{pending_agent.email}") is None


async def test_login_rate_limited(client: AsyncClient, user: Account):
    body = {"email": user.email, "password": PASSWORD}
    assert (await client.post("/api/user/login", json=body)).status_code == 200

    response = await client.post("/api/user/login", json=body)
    assert response.status_code == 429


async def test_rate_limit_uses_forwarded_ip(client: AsyncClient, user: Account):
    body = {"email": user.email, "password": PASSWORD}
    await client.post("/api/user/login", json=body, headers={"X-Forwarded-For": "10.0.0.1"})

    response = await client.post(
        "/api/user/login", json=body, headers={"X-Forwarded-For": "10.0.0.2"}
    )
    assert response.status_code == 200


async def test_verify_wrong_otp(client: AsyncClient, notifier: RecordingDispatcher, user: Account):
    await client.post("/api/user/login", json={"email": user.email, "password": PASSWORD})
    code = notifier.otps[user.email]
    wrong = "999999" if code != "999999" else "999998"

    response = await client.post("/api/user/verify-otp", json={"email": user.email, "otp": wrong})
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid OTP"

    response = await client.post("/api/user/verify-otp", json={"email": user.email, "otp": code})
    assert response.status_code == 200


@pytest.mark.parametrize("otp", ["١٢٣٤٥٦", "12345", "12a456", ""])
async def test_verify_malformed_otp(
    client: AsyncClient, notifier: RecordingDispatcher, user: Account, otp: str
):
    await client.post("/api/user/login", json={"email": user.email, "password": PASSWORD})

    response = await client.post("/api/user/verify-otp", json={"email": user.email, "otp": otp})
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "otp"

    # The outstanding code still works
    response = await client.post(
        "/api/user/verify-otp", json={"email": user.email, "otp": notifier.otps[user.email]}
    )
    assert response.status_code == 200


async def test_resend_otp(client: AsyncClient, notifier: RecordingDispatcher, user: Account):
    response = await client.post("/api/user/resend-otp", json={"email": user.email})
    assert response.status_code == 200
    assert user.email in notifier.otps

    response = await client.post("/api/user/resend-otp", json={"email": user.email})
    assert response.status_code == 429
    assert response.json()["message"] == "Please wait before resending OTP"


async def test_resend_otp_unknown(client: AsyncClient):
    response = await client.post("/api/user/resend-otp", json={"email": "ghost@example.com"})
    assert response.status_code == 404


async def test_refresh_token_flow(client: AsyncClient, notifier: RecordingDispatcher, user: Account):
    await login_and_verify(client, notifier, user.email)

    response = await client.post("/api/user/refresh-token")

    assert response.status_code == 200
    access = response.json()["access_token"]
    assert response.cookies.get("accessToken") == access


async def test_refresh_without_cookie(client: AsyncClient):
    response = await client.post("/api/user/refresh-token")
    assert response.status_code == 401


async def test_refresh_with_garbled_cookie(client: AsyncClient):
    client.cookies.set("refreshToken", "garbage")
    response = await client.post("/api/user/refresh-token")
    assert response.status_code == 401


async def test_old_refresh_token_revoked_by_new_session(
    client: AsyncClient, ctx: AppContext, user: Account
):
    first = await ctx.sessions.issue(user.id)
    await ctx.sessions.issue(user.id)

    client.cookies.set("refreshToken", first.refresh_token)
    response = await client.post("/api/user/refresh-token")

    assert response.status_code == 403
    assert response.json()["message"] == "Invalid or revoked refresh token"


async def test_logout_revokes_refresh(
    client: AsyncClient, notifier: RecordingDispatcher, user: Account
):
    await login_and_verify(client, notifier, user.email)

    response = await client.post("/api/user/logout")
    assert response.status_code == 200
    assert not response.cookies.get("accessToken")

    # Cookies were cleared, so there is nothing left to refresh with
    response = await client.post("/api/user/refresh-token")
    assert response.status_code == 401


async def test_logout_then_replayed_refresh_token(
    client: AsyncClient, ctx: AppContext, user: Account
):
    tokens = await ctx.sessions.issue(user.id)
    headers = bearer(ctx, user)

    await client.post("/api/user/logout", headers=headers)

    client.cookies.set("refreshToken", tokens.refresh_token)
    response = await client.post("/api/user/refresh-token")
    assert response.status_code == 403


async def test_me(authenticated_client: AuthenticatedClient, user: Account):
    response = await authenticated_client.get("/api/user/me")
    assert response.status_code == 200
    assert response.json()["user"]["email"] == user.email


async def test_me_unauthenticated(client: AsyncClient):
    response = await client.get("/api/user/me")
    assert response.status_code == 401
    assert response.json() == {"message": "Please login - No Token"}


async def test_me_expired_token(client: AsyncClient, ctx: AppContext, user: Account):
    token = ctx.sessions.create_access_token(user.id, expires_delta=timedelta(seconds=-1))
    response = await client.get("/api/user/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


async def test_cookie_wins_over_bearer(
    client: AsyncClient, ctx: AppContext, user: Account, admin: Account
):
    client.cookies.set("accessToken", ctx.sessions.create_access_token(user.id))

    response = await client.get("/api/user/me", headers=bearer(ctx, admin))

    assert response.json()["user"]["id"] == user.id


async def test_update_profile(authenticated_client: AuthenticatedClient):
    response = await authenticated_client.put(
        "/api/user/update-profile", json={"city": "Mumbai", "contact": "9123456780"}
    )
    assert response.status_code == 200
    user = response.json()["user"]
    assert user["city"] == "Mumbai"
    assert user["contact"] == "9123456780"


async def test_update_profile_invalid_contact(authenticated_client: AuthenticatedClient):
    response = await authenticated_client.put("/api/user/update-profile", json={"contact": "123"})
    assert response.status_code == 400


@pytest.fixture
def unavailable_ctx(ctx: AppContext) -> AppContext:
    ctx.token_store = UnavailableTokenStore()
    ctx.rate_limiter.store = ctx.token_store
    ctx.sessions.store = ctx.token_store
    return ctx


async def test_cache_down_fails_closed(client: AsyncClient, unavailable_ctx: AppContext, user: Account):
    assert unavailable_ctx.rate_limiter.enabled is False

    response = await client.post("/api/user/signup", json=JO)
    assert response.status_code == 503

    response = await client.post("/api/user/login", json={"email": user.email, "password": PASSWORD})
    assert response.status_code == 503
