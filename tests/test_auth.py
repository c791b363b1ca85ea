"""Tests for AuthService with a fake Supabase auth namespace."""

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from supabase import AuthError as SupabaseAuthError

from dashboard.auth import (
    REGISTERED_MESSAGE,
    RESET_SENT_MESSAGE,
    AuthFailure,
    AuthService,
    describe_auth_error,
    to_user_session,
)


class FakeAuthError(SupabaseAuthError):
    def __init__(self, message, code=None):
        Exception.__init__(self, message)
        self.message = message
        self.code = code


def _user(uid="u-1", email="ana@example.com", confirmed=True, anonymous=False):
    return SimpleNamespace(
        id=uid,
        email=email,
        email_confirmed_at=datetime(2026, 1, 1, tzinfo=timezone.utc) if confirmed else None,
        is_anonymous=anonymous,
    )


class FakeAuth:
    def __init__(self, error=None, refresh_error=None):
        self.error = error
        self.refresh_error = refresh_error
        self.calls = []

    def _respond(self, name, user=None):
        self.calls.append(name)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(user=user, session=None)

    def sign_in_with_password(self, credentials):
        return self._respond(("sign_in", credentials["email"]), _user(email=credentials["email"]))

    def sign_up(self, credentials):
        return self._respond(("sign_up", credentials["email"]), _user(confirmed=False))

    def reset_password_for_email(self, email):
        return self._respond(("reset", email))

    def refresh_session(self, refresh_token):
        self.calls.append(("refresh", refresh_token))
        if self.refresh_error is not None:
            raise self.refresh_error
        return SimpleNamespace(user=_user(uid="u-token"), session=None)

    def sign_in_anonymously(self):
        return self._respond("anonymous", _user(uid="anon", email=None, confirmed=False, anonymous=True))

    def sign_out(self):
        return self._respond("sign_out")


def _service(auth):
    return AuthService(SimpleNamespace(auth=auth))


@pytest.mark.parametrize("code, message", [
    ("invalid_credentials", "Invalid email or password. Please try again."),
    ("email_exists", "This email is already registered. Please sign in."),
    ("user_already_exists", "This email is already registered. Please sign in."),
    ("weak_password", "Password is too weak. Please use at least 6 characters."),
    ("over_email_send_rate_limit", "Email rate limit exceeded"),
])
def test_describe_auth_error(code, message):
    assert describe_auth_error(FakeAuthError("Email rate limit exceeded", code)) == message


def test_to_user_session():
    session = to_user_session(_user())
    assert session.uid == "u-1"
    assert session.email == "ana@example.com"
    assert session.email_verified is True
    assert session.is_anonymous is False
    assert to_user_session(None) is None


def test_sign_in_returns_session():
    user = _service(FakeAuth()).sign_in("ana@example.com", "secret1")
    assert user.email == "ana@example.com"


def test_sign_in_maps_error():
    service = _service(FakeAuth(error=FakeAuthError("Invalid login credentials", "invalid_credentials")))
    with pytest.raises(AuthFailure) as excinfo:
        service.sign_in("ana@example.com", "wrong")
    assert excinfo.value.message == "Invalid email or password. Please try again."


def test_register_message():
    auth = FakeAuth()
    assert _service(auth).register("new@example.com", "secret1") == REGISTERED_MESSAGE
    assert auth.calls == [("sign_up", "new@example.com")]


def test_register_weak_password():
    service = _service(FakeAuth(error=FakeAuthError("Password should be at least 6 characters", "weak_password")))
    with pytest.raises(AuthFailure) as excinfo:
        service.register("new@example.com", "123")
    assert excinfo.value.code == "weak_password"


def test_password_reset_message():
    assert _service(FakeAuth()).send_password_reset("ana@example.com") == RESET_SENT_MESSAGE


def test_restore_session_with_token():
    auth = FakeAuth()
    user = _service(auth).restore_session("refresh-123")
    assert user.uid == "u-token"
    assert auth.calls == [("refresh", "refresh-123")]


def test_restore_session_falls_back_to_anonymous():
    auth = FakeAuth(refresh_error=FakeAuthError("Invalid Refresh Token", "refresh_token_not_found"))
    user = _service(auth).restore_session("stale")
    assert user.is_anonymous is True
    assert auth.calls == [("refresh", "stale"), "anonymous"]


def test_restore_session_without_token_is_anonymous():
    user = _service(FakeAuth()).restore_session(None)
    assert user.uid == "anon"


def test_restore_session_when_anonymous_disabled():
    auth = FakeAuth(error=FakeAuthError("Anonymous sign-ins are disabled", "anonymous_provider_disabled"))
    assert _service(auth).restore_session(None) is None
