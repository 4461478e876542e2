from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shiftdesk.core.database import get_db
from shiftdesk.core.security import Actor
from shiftdesk.routers.auth import get_current_actor
from shiftdesk.services import workflow
from shiftdesk.services.presenters import assignment_payload

router = APIRouter()


@router.get("")
def list_assignments(
    shift_id: Optional[int] = Query(None),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    return [assignment_payload(a) for a in workflow.list_assignments(db, actor, shift_id=shift_id)]


@router.get("/mine")
def my_assignments(
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """The caller's upcoming assignments."""
    return [assignment_payload(a) for a in workflow.my_assignments(db, actor)]


@router.delete("/{assignment_id}")
def remove_assignment(
    assignment_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    workflow.remove_assignment(db, actor, assignment_id)
    return {"status": "removed", "assignment_id": assignment_id}
