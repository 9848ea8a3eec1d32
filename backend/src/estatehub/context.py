"""Process-wide handles shared by request handlers.

Built once at startup, attached to ``app.state.context`` and closed on
shutdown. Handlers receive it through ``estatehub.api.deps.get_context``.
"""

from dataclasses import dataclass

from estatehub.config import Settings
from estatehub.services.notifications import NotificationDispatcher
from estatehub.services.rate_limit import RateLimiter
from estatehub.services.token_store import TokenStore, connect_token_store
from estatehub.services.tokens import SessionIssuer


@dataclass
class AppContext:
    settings: Settings
    token_store: TokenStore
    rate_limiter: RateLimiter
    notifier: NotificationDispatcher
    sessions: SessionIssuer

    @classmethod
    def create(
        cls,
        settings: Settings,
        token_store: TokenStore,
        notifier: NotificationDispatcher | None = None,
    ) -> "AppContext":
        return cls(
            settings=settings,
            token_store=token_store,
            rate_limiter=RateLimiter(token_store, settings.rate_limit_window_seconds),
            notifier=notifier or NotificationDispatcher(config=settings),
            sessions=SessionIssuer(settings, token_store),
        )

    async def aclose(self) -> None:
        await self.token_store.close()


async def build_context(settings: Settings) -> AppContext:
    token_store = await connect_token_store(settings.cache_backend, settings.redis_url)
    return AppContext.create(settings, token_store)
