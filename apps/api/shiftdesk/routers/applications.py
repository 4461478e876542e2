from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shiftdesk.core.database import get_db
from shiftdesk.core.security import Actor
from shiftdesk.routers.auth import get_current_actor
from shiftdesk.services import workflow
from shiftdesk.services.presenters import application_payload, assignment_payload

router = APIRouter()


@router.get("")
def list_applications(
    status: Optional[str] = Query(None),
    shift_id: Optional[int] = Query(None),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """Managers see every application; staff see their own."""
    rows = workflow.list_applications(db, actor, status=status, shift_id=shift_id)
    return [application_payload(app, has_time_conflict=flag) for app, flag in rows]


@router.delete("/{application_id}")
def withdraw_application(
    application_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    app = workflow.withdraw_application(db, actor, application_id)
    return application_payload(app)


@router.put("/{application_id}/decline")
def decline_application(
    application_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    app = workflow.decline_application(db, actor, application_id)
    return application_payload(app)


@router.put("/{application_id}/approve")
def approve_application(
    application_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    app, assignment = workflow.approve_and_assign(db, actor, application_id)
    return {
        "application": application_payload(app),
        "assignment": assignment_payload(assignment),
    }
