from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from jose import jwt

from shiftdesk.core.config import settings
from shiftdesk.core.errors import AuthorizationError

# Account roles that may take part in scheduling at all
STAFF_ROLES = frozenset({"staff", "manager", "admin"})
MANAGER_ROLES = frozenset({"manager", "admin"})


def normalize_roles(roles: Optional[Iterable[str]]) -> frozenset[str]:
    return frozenset(r.strip().lower() for r in (roles or []) if r and r.strip())


@dataclass(frozen=True)
class Actor:
    """The caller, as described by the authentication context."""

    user_id: int
    roles: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_staff(self) -> bool:
        return bool(self.roles & STAFF_ROLES)

    @property
    def is_manager(self) -> bool:
        return bool(self.roles & MANAGER_ROLES)


def require_staff(actor: Actor) -> None:
    if not actor.is_staff:
        raise AuthorizationError("Access denied: Staff role required")


def require_manager(actor: Actor) -> None:
    if not actor.is_manager:
        raise AuthorizationError("Access denied: Manager or Admin role required")


def require_self_or_manager(actor: Actor, staff_id: int) -> None:
    """Staff may only act on their own records; managers on anyone's."""
    require_staff(actor)
    if not actor.is_manager and actor.user_id != staff_id:
        raise AuthorizationError("You can only act on your own records")


def create_access_token(staff_id: int, roles: Iterable[str], expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token. Issuance normally happens in the auth service; used by tooling and tests."""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    to_encode = {"sub": str(staff_id), "roles": sorted(normalize_roles(roles)), "exp": expire}
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode a JWT. Raises jose.JWTError on a bad signature or expiry."""
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])


def actor_from_claims(payload: dict) -> Actor:
    sub = payload.get("sub")
    if sub is None:
        raise ValueError("token has no subject")
    return Actor(user_id=int(sub), roles=normalize_roles(payload.get("roles")))
