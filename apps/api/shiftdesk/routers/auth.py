from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from shiftdesk.core.database import get_db
from shiftdesk.core.security import Actor, actor_from_claims, decode_token
from shiftdesk.models.staff import StaffMember
from shiftdesk.services.presenters import staff_payload

router = APIRouter()
# auto_error off so a missing header is a 401 like a bad token
security = HTTPBearer(auto_error=False)


def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Actor:
    """Build the caller's Actor from the bearer JWT."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        payload = decode_token(credentials.credentials)
        return actor_from_claims(payload)
    except (JWTError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )


@router.get("/me")
def get_me(
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """The caller's identity, plus their staff profile when one exists."""
    member = db.get(StaffMember, actor.user_id)
    return {
        "user_id": actor.user_id,
        "roles": sorted(actor.roles),
        "is_manager": actor.is_manager,
        "profile": staff_payload(member) if member else None,
    }
