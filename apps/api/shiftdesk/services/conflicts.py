"""
Conflict detection for staff commitments.

A commitment is an assignment or an approved application. Two commitments
collide when their shifts fall on the same calendar date and their template
intervals overlap. Intervals whose end is earlier than their start run past
midnight and are compared on an extended 0..2880 minute axis, so a 22:00-02:00
slot is treated as 22:00-26:00. Intervals that only touch (one ends at 02:00,
the other starts at 02:00) do not overlap.

Approved time-off blocks every date in its inclusive range.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from shiftdesk.core.errors import ConflictError, NotFoundError
from shiftdesk.models.enums import ApplicationStatus, TimeOffStatus
from shiftdesk.models.shift import Shift
from shiftdesk.models.shift_application import ShiftApplication
from shiftdesk.models.shift_assignment import ShiftAssignment
from shiftdesk.models.shift_template import ShiftTemplate
from shiftdesk.models.time_off import TimeOffRequest
from shiftdesk.services.validators import format_time

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60


# ---------- pure helpers ----------
def _to_minutes(t) -> int:
    if hasattr(t, "hour"):
        return int(t.hour) * 60 + int(t.minute)
    s = str(t)
    hh, mm = s[:5].split(":")
    return int(hh) * 60 + int(mm)


def _normalize(start, end) -> tuple[int, int]:
    start_m = _to_minutes(start)
    end_m = _to_minutes(end)
    if end_m < start_m:
        end_m += MINUTES_PER_DAY
    return start_m, end_m


def overlaps(start1, end1, start2, end2) -> bool:
    """True when the two wall-clock intervals overlap (touching does not count)."""
    a_start, a_end = _normalize(start1, end1)
    b_start, b_end = _normalize(start2, end2)
    return a_start < b_end and b_start < a_end


# ---------- queries ----------
def _commitments_on(
    db: Session,
    staff_id: int,
    shift_date: date,
    exclude_shift_id: Optional[int] = None,
) -> list[tuple[str, Shift]]:
    assigned_stmt = (
        select(Shift)
        .join(ShiftAssignment, ShiftAssignment.shift_id == Shift.shift_id)
        .where(ShiftAssignment.staff_id == staff_id, Shift.shift_date == shift_date)
    )
    approved_stmt = (
        select(Shift)
        .join(ShiftApplication, ShiftApplication.shift_id == Shift.shift_id)
        .where(
            ShiftApplication.staff_id == staff_id,
            ShiftApplication.status == ApplicationStatus.approved,
            Shift.shift_date == shift_date,
        )
    )
    # the candidate shift never collides with itself; same-shift duplicates are separate checks
    if exclude_shift_id is not None:
        assigned_stmt = assigned_stmt.where(Shift.shift_id != exclude_shift_id)
        approved_stmt = approved_stmt.where(Shift.shift_id != exclude_shift_id)

    assigned = db.execute(assigned_stmt).unique().scalars().all()
    approved = db.execute(approved_stmt).unique().scalars().all()

    return [("assignment", s) for s in assigned] + [("application", s) for s in approved]


def find_overlapping_commitment(
    db: Session,
    staff_id: int,
    shift_date: date,
    candidate_template_id: int,
    exclude_shift_id: Optional[int] = None,
) -> Optional[tuple[str, Shift]]:
    candidate = db.get(ShiftTemplate, candidate_template_id)
    if candidate is None:
        raise NotFoundError("Shift template", candidate_template_id)

    for kind, shift in _commitments_on(db, staff_id, shift_date, exclude_shift_id):
        template = shift.template
        if template is None:
            continue
        if overlaps(candidate.start_time, candidate.end_time, template.start_time, template.end_time):
            return kind, shift
    return None


def has_overlapping_commitment(
    db: Session,
    staff_id: int,
    shift_date: date,
    candidate_template_id: int,
    exclude_shift_id: Optional[int] = None,
) -> bool:
    return find_overlapping_commitment(db, staff_id, shift_date, candidate_template_id, exclude_shift_id) is not None


def find_time_off_conflict(db: Session, staff_id: int, shift_date: date) -> Optional[TimeOffRequest]:
    return db.execute(
        select(TimeOffRequest)
        .where(
            TimeOffRequest.staff_id == staff_id,
            TimeOffRequest.status == TimeOffStatus.approved,
            TimeOffRequest.start_date <= shift_date,
            TimeOffRequest.end_date >= shift_date,
        )
        .order_by(TimeOffRequest.start_date)
        .limit(1)
    ).scalar_one_or_none()


def has_time_off_conflict(db: Session, staff_id: int, shift_date: date) -> bool:
    return find_time_off_conflict(db, staff_id, shift_date) is not None


def ensure_no_conflicts(db: Session, staff_id: int, shift: Shift) -> None:
    """Raise ConflictError if the staff member cannot take ``shift``. Overlap is checked before time-off."""
    hit = find_overlapping_commitment(
        db, staff_id, shift.shift_date, shift.template_id, exclude_shift_id=shift.shift_id
    )
    if hit is not None:
        kind, other = hit
        logger.info(
            "Overlap for staff %s on %s: shift %s collides with %s on shift %s",
            staff_id, shift.shift_date, shift.shift_id, kind, other.shift_id,
        )
        raise ConflictError(
            f"Staff member has a conflicting shift on {shift.shift_date.isoformat()}",
            reason="time_overlap",
            details={
                "staff_id": staff_id,
                "shift_date": shift.shift_date.isoformat(),
                "conflicting_shift_id": other.shift_id,
                "conflicting_commitment": kind,
                "conflicting_template": other.template.name.value,
                "conflicting_start_time": format_time(other.template.start_time),
                "conflicting_end_time": format_time(other.template.end_time),
            },
        )

    time_off = find_time_off_conflict(db, staff_id, shift.shift_date)
    if time_off is not None:
        logger.info("Time-off %s blocks staff %s on %s", time_off.time_off_id, staff_id, shift.shift_date)
        raise ConflictError(
            f"Staff member has approved time-off on {shift.shift_date.isoformat()}",
            reason="time_off",
            details={
                "staff_id": staff_id,
                "shift_date": shift.shift_date.isoformat(),
                "time_off_id": time_off.time_off_id,
                "time_off_start_date": time_off.start_date.isoformat(),
                "time_off_end_date": time_off.end_date.isoformat(),
            },
        )
