"""Session/identity provider over Supabase auth.

Holds at most one current identity and notifies subscribers synchronously,
in subscription order, once per transition.
"""
from typing import Callable, List, Optional

from pydantic import BaseModel, ConfigDict
from supabase import AuthError

from storefront.errors import AuthenticationFailed
from storefront.logging import get_logger, sanitize_id_for_logging

logger = get_logger(__name__)


class Identity(BaseModel):
    """Authenticated user handle."""
    model_config = ConfigDict(frozen=True)

    id: str
    email: str = ""

    @classmethod
    def from_auth_user(cls, user) -> "Identity":
        """Build from a supabase auth ``User`` object."""
        return cls(id=str(user.id), email=user.email or "")


IdentityListener = Callable[[Optional[Identity]], None]


class SessionProvider:
    """
    Owns the current identity.

    Subscribers receive the new identity (or None) each time it changes
    between none and present or between two distinct users. Re-setting the
    same identity is not a change.
    """

    def __init__(self, auth=None):
        # supabase AsyncClient.auth; None for a purely local provider
        self._auth = auth
        self._identity: Optional[Identity] = None
        self._listeners: List[IdentityListener] = []

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def is_authenticated(self) -> bool:
        return self._identity is not None

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        """Register a listener. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_identity(self, identity: Optional[Identity]) -> None:
        """
        Switch the current identity and notify listeners.

        Listeners run inline. A subscribed CartManager starts a fetch for a
        new identity, so with one attached call this from a running event loop.
        """
        previous = self._identity
        previous_id = previous.id if previous else None
        new_id = identity.id if identity else None
        if previous_id == new_id:
            return

        self._identity = identity
        logger.info(
            f"Identity changed: {sanitize_id_for_logging(previous_id)} -> "
            f"{sanitize_id_for_logging(new_id)}"
        )
        for listener in list(self._listeners):
            listener(identity)

    async def sign_in(self, email: str, password: str) -> Identity:
        """Sign in with email and password."""
        try:
            response = await self._auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthError as e:
            logger.warning(f"Sign-in rejected: {e}")
            raise AuthenticationFailed(str(e) or None) from e

        if response.user is None:
            raise AuthenticationFailed()
        identity = Identity.from_auth_user(response.user)
        self.set_identity(identity)
        return identity

    async def sign_up(self, email: str, password: str) -> Optional[Identity]:
        """
        Register a new account.

        Returns the identity when the project signs users in immediately, or
        None when email confirmation is pending.
        """
        try:
            response = await self._auth.sign_up({"email": email, "password": password})
        except AuthError as e:
            logger.warning(f"Sign-up rejected: {e}")
            raise AuthenticationFailed(str(e) or None) from e

        if response.user is None or response.session is None:
            return None
        identity = Identity.from_auth_user(response.user)
        self.set_identity(identity)
        return identity

    async def sign_out(self) -> None:
        """Sign out. The local identity is dropped even if the remote call fails."""
        try:
            if self._auth is not None:
                await self._auth.sign_out()
        except AuthError as e:
            logger.warning(f"Remote sign-out failed, clearing local session anyway: {e}")
        finally:
            self.set_identity(None)

    async def restore(self) -> Optional[Identity]:
        """Adopt the identity of a persisted auth session, if any."""
        try:
            response = await self._auth.get_user()
        except AuthError as e:
            logger.info(f"No session to restore: {e}")
            response = None

        user = response.user if response else None
        self.set_identity(Identity.from_auth_user(user) if user else None)
        return self._identity
