import pytest
from flask_login import current_user

import actions
import auth
from models import User, db

CREDS = {"email": "user@nextmail.com", "password": "123456"}


def raising(exc):
    def _sign_in(provider, formdata):
        raise exc
    return _sign_in


def test_authenticate_success_returns_none():
    calls = []
    result = actions.authenticate(None, CREDS, sign_in=lambda p, f: calls.append((p, f)))
    assert result is None
    assert calls == [("credentials", CREDS)]


def test_invalid_credentials_message():
    result = actions.authenticate(None, CREDS, sign_in=raising(auth.CredentialsSignin()))
    assert result == "Invalid credentials."


def test_other_auth_errors_are_reported():
    result = actions.authenticate(
        "Invalid credentials.", CREDS, sign_in=raising(auth.AccessDenied("Account email not confirmed"))
    )
    assert result == "Something went wrong. AccessDenied: Account email not confirmed"


def test_non_auth_errors_propagate():
    err = RuntimeError("database down")
    with pytest.raises(RuntimeError) as info:
        actions.authenticate(None, CREDS, sign_in=raising(err))
    assert info.value is err


def test_sign_in_logs_user_in(app, user):
    with app.test_request_context():
        signed_in = auth.sign_in("credentials", CREDS)
        assert signed_in.email == user
        assert current_user.is_authenticated


@pytest.mark.parametrize("creds", [
    {"email": "user@nextmail.com", "password": "wrong-password"},
    {"email": "nobody@nextmail.com", "password": "123456"},
    {"email": "not-an-email", "password": "123456"},
    {"email": "user@nextmail.com", "password": "123"},
    {},
])
def test_sign_in_rejects_bad_credentials(app, user, creds):
    with app.test_request_context():
        with pytest.raises(auth.CredentialsSignin):
            auth.sign_in("credentials", creds)


def test_sign_in_requires_confirmed_account(app, user):
    db.session.query(User).update({"is_confirmed": False})
    db.session.commit()
    with app.test_request_context():
        with pytest.raises(auth.AccessDenied):
            auth.sign_in("credentials", CREDS)


def test_sign_in_unknown_provider(app):
    with pytest.raises(auth.InvalidProvider):
        auth.sign_in("github", CREDS)


def test_authenticate_against_real_provider(app, user):
    with app.test_request_context():
        assert actions.authenticate(None, dict(CREDS, password="nope-nope")) == "Invalid credentials."
        assert actions.authenticate(None, CREDS) is None
