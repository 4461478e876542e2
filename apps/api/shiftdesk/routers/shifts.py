from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from shiftdesk.core.database import get_db
from shiftdesk.core.security import Actor, require_staff
from shiftdesk.routers.auth import get_current_actor
from shiftdesk.schemas.applications import ApplyRequest, AssignRequest
from shiftdesk.schemas.shifts import ShiftCreate, TemplateCreate
from shiftdesk.services import shifts as shift_service
from shiftdesk.services import workflow
from shiftdesk.services.presenters import (
    application_payload,
    assignment_payload,
    shift_payload,
    template_payload,
    weekly_payload,
)

router = APIRouter()


# ---------- templates ----------
@router.get("/templates")
def list_templates(
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    require_staff(actor)
    return [template_payload(t) for t in shift_service.list_templates(db)]


@router.post("/templates", status_code=status.HTTP_201_CREATED)
def create_template(
    payload: TemplateCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    template = shift_service.create_template(db, actor, payload.name, payload.start_time, payload.end_time)
    return template_payload(template)


# ---------- shifts ----------
@router.get("/schedule/weekly")
def weekly_schedule(
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """All shifts in the window grouped by date, one entry per slot (null when no shift exists)."""
    start, end, shifts = shift_service.weekly_schedule(db, actor, start_date, end_date)
    return weekly_payload(shifts, start, end)


@router.get("")
def list_shifts(
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    template_id: Optional[int] = Query(None),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    shifts = shift_service.list_shifts(db, actor, start_date, end_date, template_id)
    return [shift_payload(s, include_applications=actor.is_manager) for s in shifts]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_shift(
    payload: ShiftCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    shift = shift_service.create_shift(
        db,
        actor,
        payload.shift_date,
        payload.template_id,
        requirements=payload.requirements,
        notes=payload.notes,
    )
    return shift_payload(shift)


@router.get("/{shift_id}")
def get_shift(
    shift_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    require_staff(actor)
    shift = shift_service.get_shift(db, shift_id)
    return shift_payload(shift, include_applications=actor.is_manager)


@router.post("/{shift_id}/apply", status_code=status.HTTP_201_CREATED)
def apply_to_shift(
    shift_id: int,
    payload: Optional[ApplyRequest] = None,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    payload = payload or ApplyRequest()
    app = workflow.apply_to_shift(
        db,
        actor,
        shift_id,
        desired_requirement_id=payload.desired_requirement_id,
        staff_id=payload.staff_id,
    )
    return application_payload(app)


@router.post("/{shift_id}/assign", status_code=status.HTTP_201_CREATED)
def assign_staff(
    shift_id: int,
    payload: AssignRequest,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    assignment = workflow.assign_staff(db, actor, shift_id, payload.staff_id, payload.requirement_id)
    return assignment_payload(assignment)
