from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .settings import get_settings

_security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    """The authenticated caller. Only ``user_id`` takes part in ownership checks."""

    user_id: str


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# PUBLIC_INTERFACE
def resolve_token(token: str, tokens: Mapping[str, str]) -> Optional[Identity]:
    """Map a bearer token to an Identity, or None when the token is unknown."""
    user_id = tokens.get(token)
    return Identity(user_id=user_id) if user_id else None


# PUBLIC_INTERFACE
async def get_current_identity(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(_security),
) -> Identity:
    """
    FastAPI dependency resolving ``Authorization: Bearer <token>`` into the
    caller's Identity using the AUTH_TOKENS setting.

    Raises:
        HTTPException(401) if the credential is missing, not a bearer token, or unknown.
    """
    if creds is None or not creds.credentials:
        raise _unauthorized("Not authenticated")

    identity = resolve_token(creds.credentials, get_settings().auth_tokens)
    if identity is None:
        raise _unauthorized("Invalid authentication credentials")
    return identity
