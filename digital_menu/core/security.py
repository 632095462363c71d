"""
Request authentication.

Resolving the caller never fails: a missing, malformed, unknown or expired
bearer token simply yields Anonymous. Routes that need a caller depend on
require_user_id, which turns Anonymous into Unauthorized.
"""

from dataclasses import dataclass
from typing import Optional, Union
import re
from fastapi import Depends, Header
from sqlalchemy.orm import Session
from digital_menu.core.database import get_db
from digital_menu.core.errors import Unauthorized
from digital_menu.services.session_store import SessionStore

_BEARER_RE = re.compile(r"^\s*Bearer\s+(.*)$", re.IGNORECASE)


@dataclass(frozen=True)
class Anonymous:
    pass


@dataclass(frozen=True)
class Authenticated:
    user_id: str


Identity = Union[Anonymous, Authenticated]

ANONYMOUS = Anonymous()


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Pull the token out of an Authorization header value, or None"""
    if not authorization:
        return None

    match = _BEARER_RE.match(authorization)
    if not match:
        return None

    token = match.group(1).strip()
    # Clients without a stored token sometimes send the literal "undefined"
    if not token or token == "undefined":
        return None

    return token


def resolve_identity(db: Session, authorization: Optional[str]) -> Identity:
    token = extract_bearer_token(authorization)
    if token is None:
        return ANONYMOUS

    session = SessionStore(db).find_valid(token)
    if session is None:
        return ANONYMOUS

    return Authenticated(user_id=session.user_id)


async def get_bearer_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    return extract_bearer_token(authorization)


async def get_identity(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db)
) -> Identity:
    return resolve_identity(db, authorization)


async def require_user_id(identity: Identity = Depends(get_identity)) -> str:
    """Gate for protected routes: the caller's user id, or Unauthorized"""
    if isinstance(identity, Authenticated):
        return identity.user_id
    if isinstance(identity, Anonymous):
        raise Unauthorized()
    raise TypeError(f"Unknown identity: {identity!r}")
