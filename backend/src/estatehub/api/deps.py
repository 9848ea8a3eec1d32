"""FastAPI dependencies for dependency injection."""

import logging
from typing import Annotated

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from estatehub.constants import ACCESS_TOKEN_COOKIE
from estatehub.context import AppContext
from estatehub.database import get_session
from estatehub.models import Account, AccountRole
from estatehub.schemas.common import PaginationParams
from estatehub.services.auth import get_account
from estatehub.services.errors import AppError, Forbidden, Unauthenticated
from estatehub.services.rate_limit import get_client_ip

logger = logging.getLogger(__name__)

# Type alias for database session dependency
SessionDep = Annotated[AsyncSession, Depends(get_session)]

# Security scheme
security = HTTPBearer(auto_error=False)


def get_context(request: Request) -> AppContext:
    return request.app.state.context


ContextDep = Annotated[AppContext, Depends(get_context)]
ClientIP = Annotated[str | None, Depends(get_client_ip)]


def _extract_token(
    request: Request, credentials: HTTPAuthorizationCredentials | None
) -> str | None:
    # Cookie wins over the Authorization header
    token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if token:
        return token
    if credentials:
        return credentials.credentials
    return None


async def get_current_account(
    request: Request,
    session: SessionDep,
    ctx: ContextDep,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Account:
    """Resolve the signed-in account or raise 401."""
    token = _extract_token(request, credentials)
    if not token:
        raise Unauthenticated()

    payload = ctx.sessions.decode_access_token(token)
    account = await get_account(session, payload["sub"])
    if not account:
        raise Unauthenticated("User not found")

    request.state.account = account
    return account


async def get_current_account_optional(
    request: Request,
    session: SessionDep,
    ctx: ContextDep,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Account | None:
    """Get current account if authenticated, None otherwise."""
    try:
        return await get_current_account(request, session, ctx, credentials)
    except AppError:
        # Expected for anonymous visitors and expired tokens
        logger.debug("Token verification failed for optional auth")
        return None


def require_roles(*roles: AccountRole):
    """Build a dependency that admits only the given roles."""

    async def checker(account: Annotated[Account, Depends(get_current_account)]) -> Account:
        if account.role not in roles:
            raise Forbidden()
        return account

    return checker


# Type aliases for common dependencies
CurrentAccount = Annotated[Account, Depends(get_current_account)]
CurrentAccountOptional = Annotated[Account | None, Depends(get_current_account_optional)]
AdminAccount = Annotated[Account, Depends(require_roles(AccountRole.ADMIN))]
AgentAccount = Annotated[Account, Depends(require_roles(AccountRole.AGENT))]
AgentOrAdminAccount = Annotated[
    Account, Depends(require_roles(AccountRole.AGENT, AccountRole.ADMIN))
]


async def get_pagination(
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> PaginationParams:
    return PaginationParams(page=page, limit=limit)


PageDep = Annotated[PaginationParams, Depends(get_pagination)]
