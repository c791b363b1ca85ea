"""
Identity provider wrapper

Email/password sign-in, registration with verification email, password reset
and the refresh-token / anonymous fallback used when the dashboard starts.
"""
import logging
from typing import Any, Optional

from supabase import AuthError as SupabaseAuthError

from dashboard.models import UserSession

logger = logging.getLogger(__name__)

REGISTERED_MESSAGE = "Registration successful! A verification email has been sent."
RESET_SENT_MESSAGE = "Password reset email sent. Please check your inbox."

_FRIENDLY_MESSAGES = {
    "invalid_credentials": "Invalid email or password. Please try again.",
    "email_exists": "This email is already registered. Please sign in.",
    "user_already_exists": "This email is already registered. Please sign in.",
    "weak_password": "Password is too weak. Please use at least 6 characters.",
}


class AuthFailure(Exception):
    """An auth call failed; message is safe to show to the user"""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


def describe_auth_error(exc: Exception) -> str:
    code = getattr(exc, "code", None)
    if code in _FRIENDLY_MESSAGES:
        return _FRIENDLY_MESSAGES[code]
    return getattr(exc, "message", None) or str(exc)


def to_user_session(user: Any) -> Optional[UserSession]:
    if user is None:
        return None
    return UserSession(
        uid=str(user.id),
        email=getattr(user, "email", None) or None,
        email_verified=getattr(user, "email_confirmed_at", None) is not None,
        is_anonymous=bool(getattr(user, "is_anonymous", False)),
    )


class AuthService:
    """Auth calls against a Supabase client's auth namespace"""

    def __init__(self, client):
        self.client = client

    @property
    def auth(self):
        return self.client.auth

    def sign_in(self, email: str, password: str) -> UserSession:
        try:
            response = self.auth.sign_in_with_password({"email": email, "password": password})
        except SupabaseAuthError as e:
            logger.info(f"Sign-in rejected: {getattr(e, 'code', None)}")
            raise AuthFailure(describe_auth_error(e), getattr(e, "code", None)) from e
        return to_user_session(response.user)

    def register(self, email: str, password: str) -> str:
        """Create the account; Supabase sends the verification email on sign-up"""
        try:
            self.auth.sign_up({"email": email, "password": password})
        except SupabaseAuthError as e:
            logger.info(f"Registration rejected: {getattr(e, 'code', None)}")
            raise AuthFailure(describe_auth_error(e), getattr(e, "code", None)) from e
        return REGISTERED_MESSAGE

    def send_password_reset(self, email: str) -> str:
        try:
            self.auth.reset_password_for_email(email)
        except SupabaseAuthError as e:
            raise AuthFailure(describe_auth_error(e), getattr(e, "code", None)) from e
        return RESET_SENT_MESSAGE

    def restore_session(self, refresh_token: Optional[str] = None) -> Optional[UserSession]:
        """
        Start-up sign-in: use the provided refresh token when there is one,
        otherwise (or if it is rejected) sign in anonymously.
        """
        if refresh_token:
            try:
                response = self.auth.refresh_session(refresh_token)
                return to_user_session(response.user)
            except SupabaseAuthError as e:
                logger.error(f"Token sign-in failed: {describe_auth_error(e)}")
        try:
            response = self.auth.sign_in_anonymously()
        except SupabaseAuthError as e:
            logger.warning(f"Anonymous sign-in unavailable: {describe_auth_error(e)}")
            return None
        return to_user_session(response.user)

    def sign_out(self) -> None:
        try:
            self.auth.sign_out()
        except SupabaseAuthError as e:
            logger.warning(f"Sign-out failed: {describe_auth_error(e)}")
