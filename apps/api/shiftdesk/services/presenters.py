"""Denormalized payloads returned to API callers."""

from collections import Counter
from datetime import date
from typing import Any, Optional

from shiftdesk.models.enums import ShiftTiming
from shiftdesk.models.shift import Shift
from shiftdesk.models.shift_application import ShiftApplication
from shiftdesk.models.shift_assignment import ShiftAssignment
from shiftdesk.models.shift_template import ShiftTemplate
from shiftdesk.models.staff import StaffMember
from shiftdesk.models.time_off import TimeOffRequest
from shiftdesk.services.validators import format_time

UNKNOWN_STAFF = "Unknown Staff"


def _staff_name(staff: Optional[StaffMember]) -> str:
    return staff.display_name if staff is not None else UNKNOWN_STAFF


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def template_payload(template: ShiftTemplate) -> dict[str, Any]:
    return {
        "template_id": template.template_id,
        "name": template.name.value,
        "start_time": format_time(template.start_time),
        "end_time": format_time(template.end_time),
        "crosses_midnight": template.crosses_midnight,
    }


def shift_summary(shift: Optional[Shift]) -> Optional[dict[str, Any]]:
    if shift is None:
        return None
    t = shift.template
    return {
        "shift_id": shift.shift_id,
        "shift_date": shift.shift_date.isoformat(),
        "template": t.name.value if t else None,
        "start_time": format_time(t.start_time) if t else None,
        "end_time": format_time(t.end_time) if t else None,
    }


def application_payload(app: ShiftApplication, has_time_conflict: Optional[bool] = None) -> dict[str, Any]:
    out = {
        "application_id": app.application_id,
        "shift_id": app.shift_id,
        "staff_id": app.staff_id,
        "staff_name": _staff_name(app.staff),
        "staff_worker_roles": list(app.staff.worker_roles or []) if app.staff else [],
        "shift": shift_summary(app.shift),
        "desired_requirement_id": app.desired_requirement_id,
        "desired_role": app.desired_requirement.role_name if app.desired_requirement else None,
        "status": app.status.value,
        "applied_at": _iso(app.applied_at),
    }
    if has_time_conflict is not None:
        out["has_time_conflict"] = has_time_conflict
    return out


def assignment_payload(a: ShiftAssignment) -> dict[str, Any]:
    return {
        "assignment_id": a.assignment_id,
        "shift_id": a.shift_id,
        "requirement_id": a.requirement_id,
        "staff_id": a.staff_id,
        "staff_name": _staff_name(a.staff),
        "role_name": a.requirement.role_name if a.requirement else "Unknown Role",
        "shift": shift_summary(a.shift),
        "assigned_at": _iso(a.assigned_at),
    }


def shift_payload(shift: Shift, include_applications: bool = True) -> dict[str, Any]:
    filled = Counter(a.requirement_id for a in shift.assignments)
    out = {
        "shift_id": shift.shift_id,
        "shift_date": shift.shift_date.isoformat(),
        "template": template_payload(shift.template) if shift.template else None,
        "notes": shift.notes,
        "requirements": [
            {
                "requirement_id": r.requirement_id,
                "role_name": r.role_name,
                "required_count": r.required_count,
                "assigned_count": filled[r.requirement_id],
                "fully_staffed": filled[r.requirement_id] >= r.required_count,
            }
            for r in shift.requirements
        ],
        "assignments": [
            {
                "assignment_id": a.assignment_id,
                "staff_id": a.staff_id,
                "staff_name": _staff_name(a.staff),
                "requirement_id": a.requirement_id,
                "role_name": a.requirement.role_name if a.requirement else "Unknown Role",
                "assigned_at": _iso(a.assigned_at),
            }
            for a in shift.assignments
        ],
    }
    if include_applications:
        out["applications"] = [
            {
                "application_id": app.application_id,
                "staff_id": app.staff_id,
                "staff_name": _staff_name(app.staff),
                "desired_requirement_id": app.desired_requirement_id,
                "status": app.status.value,
                "applied_at": _iso(app.applied_at),
            }
            for app in shift.applications
        ]
    return out


def weekly_payload(shifts: list[Shift], start_date: date, end_date: date) -> dict[str, Any]:
    # Group by date for the weekly view, one key per slot
    by_date: dict[str, dict[str, Any]] = {}
    for shift in shifts:
        key = shift.shift_date.isoformat()
        if key not in by_date:
            by_date[key] = {"date": key, **{slot.value: None for slot in ShiftTiming}}
        by_date[key][shift.template.name.value] = shift_payload(shift, include_applications=False)

    return {
        "start_date": start_date.isoformat(),
        "end_date": end_date.isoformat(),
        "days": list(by_date.values()),
    }


def time_off_payload(req: TimeOffRequest) -> dict[str, Any]:
    return {
        "time_off_id": req.time_off_id,
        "staff_id": req.staff_id,
        "staff_name": _staff_name(req.staff),
        "start_date": req.start_date.isoformat(),
        "end_date": req.end_date.isoformat(),
        "reason": req.reason,
        "status": req.status.value,
        "manager_id": req.manager_id,
        "requested_at": _iso(req.requested_at),
        "decided_at": _iso(req.decided_at),
    }


def staff_payload(member: StaffMember) -> dict[str, Any]:
    return {
        "staff_id": member.staff_id,
        "name": member.display_name,
        "first_name": member.first_name,
        "last_name": member.last_name,
        "email": member.email,
        "phone": member.phone,
        "roles": list(member.roles or []),
        "worker_roles": list(member.worker_roles or []),
        "staff_status": member.staff_status.value if member.staff_status else None,
        "created_at": _iso(member.created_at),
    }
