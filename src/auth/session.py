# src/auth/session.py
"""
Authentication helpers on top of Supabase Auth.

Responsibilities:
- Read the signed-in user (if any) from a client
- Exchange an OAuth / magic-link authorization code for a session
- Verify an emailed one-time code (Streamlit sign-in)
- Session storage adapters the Supabase client can persist into:
    * CookieSessionStorage  (FastAPI request/response cookies)
    * MappingSessionStorage (Streamlit session_state or any dict)

Session handling itself (refresh, PKCE verifier, token format) stays
inside the Supabase client; these adapters only store opaque strings.
"""

from typing import Any, Dict, Mapping, MutableMapping, Optional

from pydantic import BaseModel

from src.utils.logger import get_logger

logger = get_logger(__name__)

SESSION_COOKIE_MAX_AGE = 60 * 60 * 24 * 7


class SessionUser(BaseModel):
    """
    Minimal identity of the signed-in user.
    """
    id: str
    email: Optional[str] = None


# =============================================================================
# USER / CODE EXCHANGE
# =============================================================================

def _to_session_user(user: Any) -> Optional[SessionUser]:
    if user is None or not getattr(user, "id", None):
        return None
    return SessionUser(id=str(user.id), email=getattr(user, "email", None))


def get_current_user(client: Any) -> Optional[SessionUser]:
    """
    Return the signed-in user, or None when there is no valid session.
    """
    try:
        response = client.auth.get_user()
    except Exception as e:
        # Expired / revoked tokens surface as auth errors; treat as signed out
        logger.warning(f"[auth] Could not read current user: {e}")
        return None

    if response is None:
        return None
    return _to_session_user(getattr(response, "user", None))


def exchange_code_for_session(client: Any, code: Optional[str]) -> Optional[SessionUser]:
    """
    Trade a redirect `code` for a session stored in the client's storage.

    Called once per redirect callback. A missing code is a no-op.
    Errors from the auth service propagate to the caller.
    """
    if not code:
        return None

    logger.info("[auth] Exchanging authorization code for session")
    response = client.auth.exchange_code_for_session({"auth_code": code})
    return _to_session_user(getattr(response, "user", None))


def send_magic_link(client: Any, email: str, redirect_to: str) -> None:
    """
    Email a sign-in message. It carries a one-time code (see
    verify_email_code) and a link back to redirect_to.
    """
    logger.info("[auth] Sending sign-in link")
    client.auth.sign_in_with_otp(
        {"email": email, "options": {"email_redirect_to": redirect_to}}
    )


def verify_email_code(client: Any, email: str, token: str) -> Optional[SessionUser]:
    """
    Complete an email sign-in with the one-time code from the same email.

    Unlike following the link, this finishes in the session that asked
    for it, so the session lands in that client's storage.
    Errors from the auth service propagate to the caller.
    """
    logger.info("[auth] Verifying email sign-in code")
    response = client.auth.verify_otp({"email": email, "token": token, "type": "email"})
    return _to_session_user(getattr(response, "user", None))


def sign_out(client: Any) -> None:
    client.auth.sign_out()


# =============================================================================
# STORAGE ADAPTERS
# =============================================================================

class MappingSessionStorage:
    """
    Session storage over any mutable mapping, with a key prefix.
    """

    def __init__(self, store: MutableMapping[str, Any], prefix: str = "sb:"):
        self.store = store
        self.prefix = prefix

    def get_item(self, key: str) -> Optional[str]:
        return self.store.get(self.prefix + key)

    def set_item(self, key: str, value: str) -> None:
        self.store[self.prefix + key] = value

    def remove_item(self, key: str) -> None:
        self.store.pop(self.prefix + key, None)


class CookieSessionStorage:
    """
    Session storage backed by HTTP cookies.

    Reads come from the incoming request's cookies. Writes are recorded
    and replayed onto the outgoing response with apply(); a removal is
    written as an empty cookie with max-age 0.
    """

    def __init__(self, cookies: Mapping[str, str], secure: bool = True):
        self._cookies: Dict[str, str] = dict(cookies)
        self.secure = secure
        self.pending: Dict[str, Optional[str]] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._cookies.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._cookies[key] = value
        self.pending[key] = value

    def remove_item(self, key: str) -> None:
        self._cookies.pop(key, None)
        self.pending[key] = None

    def apply(self, response: Any) -> None:
        """Write pending cookie changes onto a Starlette/FastAPI response."""
        for key, value in self.pending.items():
            if value is None:
                response.set_cookie(key, "", max_age=0, path="/", secure=self.secure, httponly=True, samesite="lax")
            else:
                response.set_cookie(
                    key,
                    value,
                    max_age=SESSION_COOKIE_MAX_AGE,
                    path="/",
                    secure=self.secure,
                    httponly=True,
                    samesite="lax",
                )
        self.pending.clear()
