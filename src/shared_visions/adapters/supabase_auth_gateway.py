"""Supabase Auth adapter."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from shared_visions.domain.models import AuthUser
from shared_visions.services.auth import AuthGateway


@dataclass
class SupabaseAuthGateway(AuthGateway):
    """Authentication backed by Supabase Auth."""

    client: Client

    def sign_up(self, email: str, password: str, full_name: str) -> AuthUser | None:
        """Register with email and password, storing the full name as metadata."""
        response = self.client.auth.sign_up(
            {
                "email": email,
                "password": password,
                "options": {"data": {"full_name": full_name}},
            }
        )
        return _auth_user(response.user)

    def sign_in(self, email: str, password: str) -> AuthUser:
        """Sign in with email and password."""
        response = self.client.auth.sign_in_with_password(
            {"email": email, "password": password}
        )
        user = _auth_user(response.user)
        if user is None:
            raise RuntimeError("Supabase returned no user for sign in")
        return user

    def sign_out(self) -> None:
        """End the current session."""
        self.client.auth.sign_out()

    def session_user(self) -> AuthUser | None:
        """Return the user of the current session, if any."""
        session = self.client.auth.get_session()
        if session is None:
            return None
        return _auth_user(session.user)

    def reset_password(self, email: str) -> None:
        """Send a password reset email."""
        self.client.auth.reset_password_for_email(email)

    def user_from_token(self, access_token: str) -> AuthUser | None:
        """Validate an access token and return its user."""
        response = self.client.auth.get_user(access_token)
        if response is None:
            return None
        return _auth_user(response.user)


def _auth_user(user: object | None) -> AuthUser | None:
    """Map a Supabase user object to an AuthUser."""
    if user is None:
        return None
    metadata = getattr(user, "user_metadata", None) or {}
    return AuthUser(
        id=UUID(str(user.id)),
        email=getattr(user, "email", None),
        full_name=metadata.get("full_name"),
    )
