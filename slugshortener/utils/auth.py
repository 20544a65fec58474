"""Owner authentication: signed session cookies and bearer tokens

There is a single principal, the owner, who proves possession of the shared
secret either directly (`Authorization: Bearer <secret>`) or through a session
cookie previously issued by the login form.

A session value is `<issued-at epoch ms>.<hex HMAC-SHA256(issued-at, secret)>`.
Nothing is stored server-side: the cookie is the whole credential, it expires
TTL.SESSION seconds after issue, and logging out only clears it client-side.

Functions:
    sign_session(timestamp_ms, secret) -> str
    verify_session(value, secret) -> int | None
    session_cookie(secret, secure) -> str
    clear_session_cookie(secure) -> str
    verify_bearer(authorization, secret) -> bool

Example:
    >>> value = sign_session(1760486400000, 'hunter2')
    >>> value.split('.')[0]
    '1760486400000'
"""

import time
import secrets

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac

from slugshortener.constants import TTL, SESSION_COOKIE


def _now_ms() -> int:
    return int(time.time() * 1000)


def _session_hmac(timestamp_ms: int, secret: str) -> hmac.HMAC:
    h = hmac.HMAC(secret.encode('utf-8'), hashes.SHA256())
    h.update(str(timestamp_ms).encode('utf-8'))
    return h


def sign_session(timestamp_ms: int, secret: str) -> str:
    """Return the session value for a session issued at `timestamp_ms`."""
    return f'{timestamp_ms}.{_session_hmac(timestamp_ms, secret).finalize().hex()}'


def verify_session(value: str | None, secret: str) -> int | None:
    """Verify a session value and return its issue timestamp

    The signature is checked with HMAC.verify(), which compares in constant time.

    Returns:
        int | None: issue timestamp (epoch ms) if the value is authentic and
                    younger than TTL.SESSION, None otherwise.
    """
    if not value or not secret:
        return None

    timestamp_str, sep, signature_hex = value.partition('.')
    if not sep or not timestamp_str.isdigit():
        return None

    timestamp_ms = int(timestamp_str)
    if _now_ms() - timestamp_ms > TTL.SESSION * 1000:
        return None

    try:
        signature = bytes.fromhex(signature_hex)
        _session_hmac(timestamp_ms, secret).verify(signature)
    except (ValueError, InvalidSignature):
        return None

    return timestamp_ms


def _cookie(value: str, max_age: int, secure: bool) -> str:
    secure_flag = '; Secure' if secure else ''
    return f'{SESSION_COOKIE}={value}; HttpOnly{secure_flag}; SameSite=Strict; Max-Age={max_age}; Path=/'


def session_cookie(secret: str, secure: bool = True) -> str:
    """Return a Set-Cookie header value carrying a freshly signed session."""
    return _cookie(sign_session(_now_ms(), secret), TTL.SESSION, secure)


def clear_session_cookie(secure: bool = True) -> str:
    """Return a Set-Cookie header value which removes the session cookie."""
    return _cookie('', 0, secure)


def verify_password(password: str | None, secret: str) -> bool:
    if not password or not secret:
        return False
    return secrets.compare_digest(password.encode('utf-8'), secret.encode('utf-8'))


def verify_bearer(authorization: str | None, secret: str) -> bool:
    """Return True if `authorization` is exactly `Bearer <secret>`."""
    if not authorization:
        return False

    parts = authorization.split(' ')
    if len(parts) != 2 or parts[0] != 'Bearer':
        return False
    return verify_password(parts[1], secret)
