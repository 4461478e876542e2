from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from shiftdesk.core.database import get_db
from shiftdesk.core.security import Actor
from shiftdesk.routers.auth import get_current_actor
from shiftdesk.schemas.time_off import TimeOffCreate
from shiftdesk.services import time_off as time_off_service
from shiftdesk.services.presenters import time_off_payload

router = APIRouter()


@router.get("")
def list_time_off(
    status_filter: Optional[str] = Query(None, alias="status"),
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    requests = time_off_service.list_time_off(db, actor, status_filter, start_date, end_date)
    return [time_off_payload(r) for r in requests]


@router.post("", status_code=status.HTTP_201_CREATED)
def request_time_off(
    payload: TimeOffCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    req = time_off_service.request_time_off(db, actor, payload.start_date, payload.end_date, payload.reason)
    return time_off_payload(req)


@router.delete("/{time_off_id}")
def withdraw_time_off(
    time_off_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    time_off_service.withdraw_time_off(db, actor, time_off_id)
    return {"status": "withdrawn", "time_off_id": time_off_id}


@router.put("/{time_off_id}/approve")
def approve_time_off(
    time_off_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    return time_off_payload(time_off_service.approve_time_off(db, actor, time_off_id))


@router.put("/{time_off_id}/deny")
def deny_time_off(
    time_off_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    return time_off_payload(time_off_service.deny_time_off(db, actor, time_off_id))
