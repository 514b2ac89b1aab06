"""
Session holder: who is logged in to this console process.

Login looks the user up by e-mail and accepts any password; there is no
credential store behind this console yet. The session survives restarts
through the ``auth_session`` key of the local storage area and ends only on
logout or when that entry is cleared.
"""
from datetime import timedelta
from typing import Iterable, Optional

from pydantic import ValidationError

from app.core.entities import utcnow
from app.core.errors import PersistenceUnavailable
from app.core.storage.local import KeyValueStorage
from app.core.store import EntityStore
from app.features.auth.schemas import INVALID_CREDENTIALS, AuthSession, LoginResult
from app.features.users.models import User, UserRole
from app.utils import get_logger


log = get_logger(__name__)


SESSION_KEY = "auth_session"


class SessionHolder:
    """
    Holds the current AuthSession.

    Usage:
        holder = SessionHolder(store, storage)
        await holder.rehydrate()
        result = await holder.login("admin@techcorp.com", "anything")
    """

    def __init__(self, store: EntityStore, storage: KeyValueStorage):
        self._store = store
        self._storage = storage
        self._session: Optional[AuthSession] = None

    async def rehydrate(self) -> None:
        """Load the persisted session, dropping it if it cannot be parsed."""
        try:
            raw = await self._storage.get_item(SESSION_KEY)
        except PersistenceUnavailable as e:
            log.error(f"Failed to load session: {e}")
            self._session = None
            return
        if not raw:
            self._session = None
            return
        try:
            self._session = AuthSession.model_validate_json(raw)
        except ValidationError as e:
            log.error(f"Failed to load session: {e.error_count()} errors")
            await self._clear()
            return
        log.info(f"Session restored for {self._session.user.email}")

    async def refresh(self) -> None:
        await self.rehydrate()

    async def _save(self, session: AuthSession) -> None:
        self._session = session
        try:
            await self._storage.set_item(SESSION_KEY, session.model_dump_json(by_alias=True))
        except PersistenceUnavailable as e:
            log.error(f"Failed to persist session: {e}")

    async def _clear(self) -> None:
        self._session = None
        try:
            await self._storage.remove_item(SESSION_KEY)
        except PersistenceUnavailable as e:
            log.error(f"Failed to clear session: {e}")

    async def login(self, email: str, password: str) -> LoginResult:
        """
        Log in as the user with ``email``.

        The password is not checked. An unknown e-mail yields
        ``LoginResult(success=False, reason="InvalidCredentials")`` and leaves
        any current session untouched.
        """
        await self._store.wait_until_ready()
        user = self._store.get_user_by_email(email)
        if user is None:
            log.info(f"Login failed for {email!r}: unknown email")
            return LoginResult(success=False, error="Invalid credentials", reason=INVALID_CREDENTIALS)

        await self._save(AuthSession(user=user, is_authenticated=True, login_time=utcnow()))
        log.info(f"User {user.id} logged in as {user.role.value}")
        return LoginResult(success=True, user=user)

    async def logout(self) -> None:
        if self._session is not None:
            log.info(f"User {self._session.user.id} logged out")
        await self._clear()

    @property
    def current_session(self) -> Optional[AuthSession]:
        return self._session

    @property
    def current_user(self) -> Optional[User]:
        return self._session.user if self._session else None

    def is_authenticated(self) -> bool:
        return bool(self._session and self._session.is_authenticated)

    def has_role(self, role: UserRole | str) -> bool:
        user = self.current_user
        return user is not None and user.role == UserRole(role)

    def has_any_role(self, roles: Iterable[UserRole | str]) -> bool:
        user = self.current_user
        return user is not None and user.role in {UserRole(role) for role in roles}

    def is_super_admin(self) -> bool:
        return self.has_role(UserRole.SUPER_ADMIN)

    def is_org_admin(self) -> bool:
        return self.has_role(UserRole.ORG_ADMIN)

    def is_org_user(self) -> bool:
        return self.has_role(UserRole.ORG_USER)

    def session_duration(self) -> timedelta:
        if self._session is None:
            return timedelta(0)
        return utcnow() - self._session.login_time
