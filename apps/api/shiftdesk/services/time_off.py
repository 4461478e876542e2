from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from shiftdesk.core.errors import AuthorizationError, NotFoundError, StateError, ValidationError
from shiftdesk.core.security import Actor, require_manager, require_staff
from shiftdesk.models.enums import StaffStatus, TimeOffStatus
from shiftdesk.models.staff import StaffMember
from shiftdesk.models.time_off import TimeOffRequest
from shiftdesk.services.validators import parse_date, parse_id, parse_optional_date, validate_date_range

logger = logging.getLogger(__name__)

MAX_REASON_LENGTH = 500


def _require_request(db: Session, time_off_id) -> TimeOffRequest:
    time_off_id = parse_id(time_off_id, "time_off_id")
    req = db.get(TimeOffRequest, time_off_id)
    if not req:
        raise NotFoundError("Time-off request", time_off_id)
    return req


def request_time_off(db: Session, actor: Actor, start_date, end_date, reason: Optional[str] = None) -> TimeOffRequest:
    require_staff(actor)
    if not start_date or not end_date:
        raise ValidationError("Start date and end date are required", field="start_date")

    start = parse_date(start_date, "start_date")
    end = parse_date(end_date, "end_date")
    validate_date_range(start, end)

    reason = (reason or "").strip() or None
    if reason and len(reason) > MAX_REASON_LENGTH:
        raise ValidationError(f"Reason must be at most {MAX_REASON_LENGTH} characters", field="reason")

    if not db.get(StaffMember, actor.user_id):
        raise NotFoundError("Staff member", actor.user_id)

    req = TimeOffRequest(
        staff_id=actor.user_id,
        start_date=start,
        end_date=end,
        reason=reason,
        status=TimeOffStatus.pending,
    )
    db.add(req)
    db.commit()
    db.refresh(req)
    logger.info("Staff %s requested time-off %s to %s (request %s)", actor.user_id, start, end, req.time_off_id)
    return req


def list_time_off(
    db: Session,
    actor: Actor,
    status: Optional[str] = None,
    start_date=None,
    end_date=None,
) -> list[TimeOffRequest]:
    """Managers see every request, staff their own. The date window keeps requests that overlap it."""
    require_staff(actor)

    stmt = select(TimeOffRequest).options(selectinload(TimeOffRequest.staff))
    if not actor.is_manager:
        stmt = stmt.where(TimeOffRequest.staff_id == actor.user_id)
    if status:
        try:
            stmt = stmt.where(TimeOffRequest.status == TimeOffStatus(status.lower()))
        except ValueError:
            raise ValidationError(f"Invalid status '{status}'", field="status")

    start = parse_optional_date(start_date, "start_date")
    end = parse_optional_date(end_date, "end_date")
    if start:
        stmt = stmt.where(TimeOffRequest.end_date >= start)
    if end:
        stmt = stmt.where(TimeOffRequest.start_date <= end)

    return db.execute(
        stmt.order_by(TimeOffRequest.requested_at.desc(), TimeOffRequest.time_off_id.desc())
    ).scalars().all()


def withdraw_time_off(db: Session, actor: Actor, time_off_id) -> None:
    require_staff(actor)
    req = _require_request(db, time_off_id)
    if not actor.is_manager and req.staff_id != actor.user_id:
        raise AuthorizationError("You can only withdraw your own time-off requests")
    if req.status != TimeOffStatus.pending:
        raise StateError("Only pending time-off requests can be withdrawn", current_status=req.status.value)

    time_off_id = req.time_off_id
    db.delete(req)
    db.commit()
    logger.info("Time-off request %s withdrawn", time_off_id)


def _decide(db: Session, actor: Actor, time_off_id, target: TimeOffStatus) -> TimeOffRequest:
    require_manager(actor)
    req = _require_request(db, time_off_id)
    if not req.status.can_transition_to(target):
        raise StateError(
            f"Time-off request has already been {req.status.value}",
            current_status=req.status.value,
        )

    req.status = target
    req.manager_id = actor.user_id
    req.decided_at = datetime.now(timezone.utc)

    if target == TimeOffStatus.approved:
        member = db.get(StaffMember, req.staff_id)
        if member is not None:
            member.staff_status = StaffStatus.unavailable

    db.commit()
    db.refresh(req)
    logger.info("Time-off request %s %s by %s", req.time_off_id, target.value, actor.user_id)
    return req


def approve_time_off(db: Session, actor: Actor, time_off_id) -> TimeOffRequest:
    return _decide(db, actor, time_off_id, TimeOffStatus.approved)


def deny_time_off(db: Session, actor: Actor, time_off_id) -> TimeOffRequest:
    return _decide(db, actor, time_off_id, TimeOffStatus.denied)
