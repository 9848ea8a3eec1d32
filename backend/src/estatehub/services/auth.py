"""Authentication service: signup, email verification, login, OTP and sessions."""

import asyncio
import hmac
import logging
import secrets
from dataclasses import dataclass

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from estatehub.constants import OTP_KEY_PREFIX, OTP_LENGTH, VERIFY_EMAIL_KEY_PREFIX, VERIFY_KEY_PREFIX
from estatehub.context import AppContext
from estatehub.models import Account, AccountRole
from estatehub.schemas.auth import ProfileUpdateRequest, SignupRequest
from estatehub.services.errors import (
    AlreadyExists,
    Expired,
    InvalidCredentials,
    InvalidOtp,
    NotFound,
    PendingApproval,
    Unauthenticated,
)
from estatehub.services.rate_limit import RateLimitAction
from estatehub.services.tokens import SessionTokens

logger = logging.getLogger(__name__)

SIGNUP_MESSAGE = "If your email is valid, a verification link has been sent. Valid for 5 minutes."


def _pwd_bytes(password: str, max_len: int = 72) -> bytes:
    # bcrypt only considers the first 72 bytes
    return password.encode("utf-8")[:max_len]


def hash_password(password: str, rounds: int = 10) -> str:
    return bcrypt.hashpw(_pwd_bytes(password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_pwd_bytes(plain), hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def generate_otp() -> str:
    """Six-digit numeric code, never starting with zero."""
    low = 10 ** (OTP_LENGTH - 1)
    return str(low + secrets.randbelow(9 * low))


def verify_key(token: str) -> str:
    return f"{VERIFY_KEY_PREFIX}{token}"


def verify_email_key(email: str) -> str:
    return f"{VERIFY_EMAIL_KEY_PREFIX}{email}"


def otp_key(email: str) -> str:
    return f"{OTP_KEY_PREFIX}{email}"


async def get_account_by_email(session: AsyncSession, email: str) -> Account | None:
    stmt = select(Account).where(Account.email == email.strip().lower())
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_account(session: AsyncSession, account_id: str) -> Account | None:
    stmt = select(Account).where(Account.id == account_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


@dataclass
class SignupResult:
    message: str
    token: str


class AuthService:
    """Account lifecycle from signup to session issuance."""

    def __init__(self, session: AsyncSession, ctx: AppContext):
        self.session = session
        self.ctx = ctx
        self.store = ctx.token_store
        self.settings = ctx.settings

    async def request_signup(self, data: SignupRequest, client_ip: str | None) -> SignupResult:
        """Stage a pending registration and email a verification link."""
        email = data.email
        await self.ctx.rate_limiter.check(RateLimitAction.SIGNUP, client_ip, email)

        if await get_account_by_email(self.session, email):
            raise AlreadyExists()

        password_hash = await asyncio.to_thread(
            hash_password, data.password, self.settings.bcrypt_rounds
        )
        token = secrets.token_hex(32)
        ttl = self.settings.verification_ttl_seconds

        # One live verification link per email
        old_token = await self.store.get(verify_email_key(email))
        if old_token:
            await self.store.delete(verify_key(old_token))

        record = {
            "name": data.name,
            "email": email,
            "password": password_hash,
            "contact": data.contact,
            "role": data.role,
        }
        if data.role == AccountRole.AGENT.value:
            record.update(
                agency_name=data.agency_name or "",
                license_number=data.license_number or "",
                experience=data.experience or 0,
                specialization=data.specialization or [],
            )

        await self.store.set_json(verify_key(token), record, ttl)
        await self.store.set(verify_email_key(email), token, ttl)

        await self.ctx.notifier.send_verification(email, data.name, token)
        await self.ctx.rate_limiter.mark(RateLimitAction.SIGNUP, client_ip, email)

        logger.info(f"Signup requested for {email} (role={data.role})")
        return SignupResult(message=SIGNUP_MESSAGE, token=token)

    async def confirm_signup(self, token: str) -> Account:
        """Promote a pending registration to an account."""
        record = await self.store.get_json(verify_key(token))
        if not record:
            raise Expired("Verification link has expired")

        email = record["email"]
        if await get_account_by_email(self.session, email):
            raise AlreadyExists()

        role = AccountRole(record.get("role") or AccountRole.USER.value)
        account = Account(
            name=record["name"],
            email=email,
            password_hash=record["password"],
            contact=record["contact"],
            role=role,
            # Agents wait for an admin; everyone else is approved on creation
            is_approved=role != AccountRole.AGENT,
        )
        if role == AccountRole.AGENT:
            account.agency_name = record.get("agency_name", "")
            account.license_number = record.get("license_number", "")
            account.experience = record.get("experience", 0)
            account.specialization = record.get("specialization", [])

        self.session.add(account)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise AlreadyExists() from e

        await self.store.delete(verify_key(token))
        if await self.store.get(verify_email_key(email)) == token:
            await self.store.delete(verify_email_key(email))

        logger.info(f"Account created for {email} (role={role.value})")
        return account

    async def login(self, email: str, password: str, client_ip: str | None) -> None:
        """Check the password and email a one-time passcode."""
        email = email.strip().lower()
        await self.ctx.rate_limiter.check(RateLimitAction.LOGIN, client_ip, email)

        account = await get_account_by_email(self.session, email)
        if not account:
            raise InvalidCredentials()

        if not await asyncio.to_thread(verify_password, password, account.password_hash):
            raise InvalidCredentials()

        if account.is_agent and not account.is_approved:
            raise PendingApproval()

        await self._send_otp(account)
        await self.ctx.rate_limiter.mark(RateLimitAction.LOGIN, client_ip, email)

    async def verify_otp(self, email: str, code: str) -> tuple[Account, SessionTokens]:
        """Consume a matching OTP and issue a session."""
        email = email.strip().lower()
        stored = await self.store.get(otp_key(email))
        if stored is None:
            raise Expired("OTP expired or invalid")

        # A wrong code leaves the OTP in place until it expires
        if not hmac.compare_digest(stored.encode(), code.strip().encode()):
            raise InvalidOtp()

        await self.store.delete(otp_key(email))

        account = await get_account_by_email(self.session, email)
        if not account:
            raise NotFound("User not found")

        tokens = await self.ctx.sessions.issue(account.id)
        logger.info(f"Login completed for {email}")
        return account, tokens

    async def resend_otp(self, email: str, client_ip: str | None) -> None:
        email = email.strip().lower()
        await self.ctx.rate_limiter.check(RateLimitAction.RESEND_OTP, client_ip, email)

        account = await get_account_by_email(self.session, email)
        if not account:
            raise NotFound("User not found")

        await self._send_otp(account, resend=True)
        await self.ctx.rate_limiter.mark(RateLimitAction.RESEND_OTP, client_ip, email)

    async def refresh(self, refresh_token: str | None) -> str:
        """Return a new access token for a still-current refresh token."""
        account_id, access_token = await self.ctx.sessions.refresh(refresh_token)
        if not await get_account(self.session, account_id):
            await self.ctx.sessions.revoke(account_id)
            raise Unauthenticated("Account no longer exists")
        return access_token

    async def logout(self, account: Account) -> None:
        await self.ctx.sessions.revoke(account.id)
        logger.info(f"Logged out {account.email}")

    async def update_profile(self, account: Account, data: ProfileUpdateRequest) -> Account:
        """Apply supplied profile fields. Moderation state is untouched."""
        updates = data.model_dump(exclude_none=True)
        agent_only = {"bio", "agency_name", "experience", "specialization"}

        for field, value in updates.items():
            if field in agent_only and not account.is_agent:
                continue
            setattr(account, field, value)

        self.session.add(account)
        await self.session.commit()
        return account

    async def _send_otp(self, account: Account, resend: bool = False) -> None:
        otp = generate_otp()
        # Overwrites any outstanding OTP for this email
        await self.store.set(otp_key(account.email), otp, self.settings.otp_ttl_seconds)
        await self.ctx.notifier.send_otp(account.email, account.name, otp, resend=resend)
