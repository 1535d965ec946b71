import logging
import re

from flask_login import login_user

from models import User

log = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6


class AuthError(Exception):
    """Base for sign-in failures the login form knows how to report."""

    type = "AuthError"

    def __init__(self, detail: str = ""):
        super().__init__(detail)
        self.detail = detail

    def __str__(self):
        return f"{self.type}: {self.detail}" if self.detail else self.type


class CredentialsSignin(AuthError):
    type = "CredentialsSignin"


class AccessDenied(AuthError):
    type = "AccessDenied"


class InvalidProvider(AuthError):
    type = "InvalidProvider"


def _parse_credentials(formdata):
    email = (formdata.get("email") or "").strip().lower()
    password = formdata.get("password") or ""
    if not EMAIL_RE.match(email) or len(password) < MIN_PASSWORD_LENGTH:
        return None
    return email, password


def authorize_credentials(formdata):
    """Return the user matching the submitted email/password, or None."""
    parsed = _parse_credentials(formdata)
    if parsed is None:
        return None
    email, password = parsed
    user = User.query.filter_by(email=email).first()
    if not user or not user.check_password(password):
        return None
    return user


PROVIDERS = {
    "credentials": authorize_credentials,
}


def sign_in(provider: str, formdata):
    """Sign a user in through ``provider``, raising AuthError on failure."""
    authorize = PROVIDERS.get(provider)
    if authorize is None:
        raise InvalidProvider(f"Unknown provider {provider!r}")
    user = authorize(formdata)
    if user is None:
        log.info("Rejected sign-in for %s", (formdata.get("email") or "").strip().lower())
        raise CredentialsSignin()
    if not user.is_confirmed:
        raise AccessDenied("Account email not confirmed")
    login_user(user)
    log.info("User %s signed in", user.id)
    return user
