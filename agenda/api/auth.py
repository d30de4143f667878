import secrets
from collections.abc import Iterable
from typing import Protocol

from fastapi import Request


class AuthenticationError(Exception):
    """Raised when a request carries no valid session token."""


class SessionVerifier(Protocol):
    """Checks session tokens issued by the authentication service."""

    async def verify(self, token: str) -> bool:
        ...


class StaticTokenVerifier:
    """Accepts a fixed set of tokens, compared in constant time."""

    def __init__(self, tokens: Iterable[str]) -> None:
        self._tokens = frozenset(t for t in tokens if t)

    async def verify(self, token: str) -> bool:
        return any(secrets.compare_digest(token, known) for known in self._tokens)


def _bearer_token(header: str | None) -> str | None:
    if not header:
        return None
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() != "bearer" or not credentials.strip():
        return None
    return credentials.strip()


async def require_session(request: Request) -> None:
    """FastAPI dependency rejecting requests without a valid session token.

    The token is read from the session cookie, falling back to an
    ``Authorization: Bearer`` header.
    """
    verifier: SessionVerifier = request.app.state.session_verifier
    cookie_name: str = request.app.state.session_cookie

    token = request.cookies.get(cookie_name) or _bearer_token(request.headers.get("Authorization"))
    if not token:
        raise AuthenticationError("Session token not provided")
    if not await verifier.verify(token):
        raise AuthenticationError("Invalid or expired session token")
