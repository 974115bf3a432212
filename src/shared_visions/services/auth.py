"""Sign-up, sign-in and profile maintenance."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

from shared_visions.domain.errors import (
    NotAuthenticatedError,
    ProfileNotFoundError,
    SignInFailedError,
    SignUpFailedError,
)
from shared_visions.domain.models import AuthUser, UserProfile
from shared_visions.services.events import ObservableService, ServiceEvent

MIN_PASSWORD_LENGTH = 8

_logger = logging.getLogger(__name__)


class AuthGateway(Protocol):
    """Interface for the authentication provider."""

    def sign_up(self, email: str, password: str, full_name: str) -> AuthUser | None:
        """Register a user and return it, if the provider created one."""

    def sign_in(self, email: str, password: str) -> AuthUser:
        """Start a session and return the signed-in user."""

    def sign_out(self) -> None:
        """End the current session."""

    def session_user(self) -> AuthUser | None:
        """Return the user of the current session, if any."""

    def reset_password(self, email: str) -> None:
        """Send a password reset email."""

    def user_from_token(self, access_token: str) -> AuthUser | None:
        """Return the user an access token belongs to, if valid."""


class ProfileRepository(Protocol):
    """Persistence interface for profiles."""

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return a profile by user id, if present."""

    def create_profile(self, profile: UserProfile) -> UserProfile:
        """Insert a profile and return it."""

    def upsert_profile(self, profile: UserProfile) -> None:
        """Insert or update a profile."""

    def update_profile(self, user_id: UUID, updates: dict[str, object]) -> None:
        """Update profile columns."""


@dataclass
class AuthService(ObservableService):
    """Application service for the signed-in user."""

    gateway: AuthGateway
    profiles: ProfileRepository
    current_user: UserProfile | None = None
    _tasks: set[asyncio.Task] = field(default_factory=set, init=False, repr=False)

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    async def sign_up(
        self, email: str, password: str, full_name: str
    ) -> UserProfile | None:
        """Create an account and its profile row."""
        try:
            if len(password) < MIN_PASSWORD_LENGTH:
                raise SignUpFailedError(
                    f"Password must be at least {MIN_PASSWORD_LENGTH} characters."
                )
            auth_user = self.gateway.sign_up(email, password, full_name)
            if auth_user is None:
                raise SignUpFailedError()
            profile = self.profiles.create_profile(
                UserProfile(id=auth_user.id, full_name=full_name)
            )
        except Exception as exc:
            self._record_error(exc, "Sign up")
            return None
        self._set_current(profile)
        return profile

    async def sign_in(self, email: str, password: str) -> UserProfile | None:
        """Sign in and load the profile."""
        try:
            try:
                auth_user = self.gateway.sign_in(email, password)
            except Exception as exc:
                raise SignInFailedError() from exc
            self.spawn_profile_upsert(auth_user)
            profile = self.profiles.get_profile(auth_user.id) or UserProfile(
                id=auth_user.id, full_name=auth_user.full_name
            )
        except Exception as exc:
            self._record_error(exc, "Sign in")
            return None
        self._set_current(profile)
        return profile

    async def sign_out(self) -> bool:
        """End the session."""
        try:
            self.gateway.sign_out()
        except Exception as exc:
            self._record_error(exc, "Sign out")
            return False
        self._set_current(None)
        return True

    async def check_session(self) -> bool:
        """Return whether a session exists, loading its profile."""
        try:
            auth_user = self.gateway.session_user()
        except Exception:
            _logger.info("No active session", exc_info=True)
            return False
        if auth_user is None:
            return False
        await self.load_current_user()
        return True

    async def load_current_user(self) -> UserProfile | None:
        """Load the profile of the session user."""
        try:
            auth_user = self.gateway.session_user()
            if auth_user is None:
                raise NotAuthenticatedError()
            profile = self.profiles.get_profile(auth_user.id)
            if profile is None:
                raise ProfileNotFoundError()
        except Exception as exc:
            self._record_error(exc, "Loading current user")
            return None
        self._set_current(profile)
        return profile

    async def update_profile(
        self,
        user_id: UUID,
        username: str | None = None,
        full_name: str | None = None,
    ) -> bool:
        """Update the provided profile fields."""
        updates: dict[str, object] = {}
        if username is not None:
            updates["username"] = username
        if full_name is not None:
            updates["full_name"] = full_name
        if not updates:
            return True
        try:
            self.profiles.update_profile(user_id, updates)
        except Exception as exc:
            self._record_error(exc, "Updating profile")
            return False
        return True

    async def send_password_reset(self, email: str) -> bool:
        """Ask the provider to email a reset link."""
        try:
            self.gateway.reset_password(email)
        except Exception as exc:
            self._record_error(exc, "Password reset")
            return False
        return True

    async def user_id_from_token(self, access_token: str) -> UUID | None:
        """Resolve an access token to a user id."""
        try:
            auth_user = self.gateway.user_from_token(access_token)
        except Exception:
            _logger.info("Rejected access token", exc_info=True)
            return None
        return auth_user.id if auth_user else None

    def spawn_profile_upsert(self, auth_user: AuthUser) -> asyncio.Task:
        """Upsert the profile in a detached task; failures are only logged."""
        task = asyncio.create_task(self._upsert_profile(auth_user))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _upsert_profile(self, auth_user: AuthUser) -> None:
        try:
            self.profiles.upsert_profile(
                UserProfile(id=auth_user.id, full_name=auth_user.full_name)
            )
        except Exception:
            _logger.warning(
                "Background profile upsert failed for %s", auth_user.id, exc_info=True
            )

    def _set_current(self, profile: UserProfile | None) -> None:
        self.current_user = profile
        self.events.publish(
            ServiceEvent(
                kind="session_changed",
                entity_id=profile.id if profile else None,
                payload=profile,
            )
        )
