"""
Session/auth manager.

Issues server-side sessions on login and resolves them back into a
Principal on every request. The session only stores the user id: role and
establishment are re-read from the user row each time, so a demotion or a
move takes effect on the very next request.
"""
from functools import lru_cache
from typing import Optional, Tuple

from parcinfo.core.config import settings
from parcinfo.core.exceptions import AuthenticationError, IncorrectPasswordError, UserNotFoundError
from parcinfo.core.logging_config import logger
from parcinfo.core.security import generate_session_token, get_password_hash, verify_password
from parcinfo.core.session_store import SessionStore
from parcinfo.db.repository import InventoryRepository
from parcinfo.schemas.auth import Principal


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    # Verified against when the username is unknown so both failures cost one KDF run
    return get_password_hash("parcinfo-dummy-password")


class AuthService:
    def __init__(
        self,
        repository: InventoryRepository,
        store: SessionStore,
        ttl_seconds: Optional[int] = None,
    ):
        self.repository = repository
        self.store = store
        self.ttl_seconds = ttl_seconds or settings.SESSION_TTL_SECONDS

    async def login(
        self,
        username: str,
        password: str,
        previous_token: Optional[str] = None,
    ) -> Tuple[Principal, str]:
        """Verify credentials and open a new session.

        Returns the principal and the new opaque token. Any session the
        client already presented is destroyed first.
        """
        if previous_token:
            await self.store.delete(previous_token)

        user = await self.repository.get_user_by_username(username)
        if user is None:
            verify_password(password, _dummy_hash())
            logger.log_auth_event("login", success=False, username=username, reason="unknown user")
            raise AuthenticationError()

        if not verify_password(password, user.hashed_password):
            logger.log_auth_event("login", success=False, username=username, reason="bad password")
            raise AuthenticationError()

        token = generate_session_token()
        await self.store.set(token, user.id, self.ttl_seconds)
        logger.log_auth_event("login", success=True, username=username, user_id=user.id)
        return Principal.model_validate(user), token

    async def logout(self, token: Optional[str]) -> None:
        """Destroy the session; unknown or missing tokens are ignored"""
        if not token:
            return
        if await self.store.delete(token):
            logger.log_auth_event("logout", success=True)

    async def resolve_principal(self, token: Optional[str]) -> Optional[Principal]:
        if not token:
            return None
        user_id = await self.store.get(token)
        if user_id is None:
            return None

        user = await self.repository.get_user(user_id)
        if user is None:
            # Account deleted while the session was alive
            await self.store.delete(token)
            return None
        return Principal.model_validate(user)

    async def change_password(
        self,
        principal: Principal,
        current_password: str,
        new_password: str,
    ) -> None:
        user = await self.repository.get_user(principal.id)
        if user is None:
            raise UserNotFoundError(principal.id)

        if not verify_password(current_password, user.hashed_password):
            logger.log_auth_event("password_change", success=False, username=user.username,
                                  reason="incorrect current password")
            raise IncorrectPasswordError()

        await self.repository.update_user(user.id, {"hashed_password": get_password_hash(new_password)})
        logger.log_auth_event("password_change", success=True, username=user.username)
