"""
Shift applications and assignments.

Two ways lead to an assignment:

  * a manager assigns a staff member directly (``assign_staff``)
  * a staff member applies and a manager approves (``apply_to_shift`` then
    ``approve_and_assign``)

Both end in ``commit_assignment``, which reserves one unit of the requirement's
capacity with a conditional UPDATE, inserts the assignment and (on the approval
path) moves the application to approved, all in one transaction. Preconditions
are always evaluated before anything is written.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from shiftdesk.core.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    StateError,
    ValidationError,
)
from shiftdesk.core.security import STAFF_ROLES, Actor, require_manager, require_self_or_manager, require_staff
from shiftdesk.models.enums import ApplicationStatus
from shiftdesk.models.shift import Shift
from shiftdesk.models.shift_application import ShiftApplication
from shiftdesk.models.shift_assignment import ShiftAssignment
from shiftdesk.models.shift_requirement import ShiftRequirement
from shiftdesk.models.staff import StaffMember
from shiftdesk.services.conflicts import ensure_no_conflicts, has_overlapping_commitment, has_time_off_conflict
from shiftdesk.services.validators import parse_id

logger = logging.getLogger(__name__)


# ---------- lookups ----------
def _require_shift(db: Session, shift_id: int) -> Shift:
    shift = db.get(Shift, shift_id)
    if not shift:
        raise NotFoundError("Shift", shift_id)
    return shift


def _require_staff_member(db: Session, staff_id: int) -> StaffMember:
    member = db.get(StaffMember, staff_id)
    if not member:
        raise NotFoundError("Staff member", staff_id)
    return member


def _require_application(db: Session, application_id: int) -> ShiftApplication:
    app = db.get(ShiftApplication, application_id)
    if not app:
        raise NotFoundError("Application", application_id)
    return app


def _requirement_for_shift(db: Session, requirement_id: int, shift_id: int) -> Optional[ShiftRequirement]:
    return db.execute(
        select(ShiftRequirement).where(
            ShiftRequirement.requirement_id == requirement_id,
            ShiftRequirement.shift_id == shift_id,
        )
    ).scalar_one_or_none()


def _existing_assignment(db: Session, shift_id: int, staff_id: int) -> Optional[ShiftAssignment]:
    return db.execute(
        select(ShiftAssignment).where(
            ShiftAssignment.shift_id == shift_id,
            ShiftAssignment.staff_id == staff_id,
        )
    ).scalar_one_or_none()


def _assigned_count(db: Session, requirement_id: int) -> int:
    return db.execute(
        select(func.count(ShiftAssignment.assignment_id)).where(ShiftAssignment.requirement_id == requirement_id)
    ).scalar_one()


# ---------- guards ----------
def _ensure_not_assigned(db: Session, shift_id: int, staff_id: int) -> None:
    existing = _existing_assignment(db, shift_id, staff_id)
    if existing:
        raise ConflictError(
            "Staff member is already assigned to this shift",
            reason="already_assigned",
            details={"shift_id": shift_id, "staff_id": staff_id, "assignment_id": existing.assignment_id},
        )


def _ensure_capacity(db: Session, requirement: ShiftRequirement) -> None:
    assigned = _assigned_count(db, requirement.requirement_id)
    if assigned >= requirement.required_count:
        raise ConflictError(
            f"The '{requirement.role_name}' role is already fully staffed for this shift",
            reason="fully_staffed",
            details={
                "requirement_id": requirement.requirement_id,
                "role_name": requirement.role_name,
                "required_count": requirement.required_count,
                "assigned_count": assigned,
            },
        )


def _ensure_qualified(member: StaffMember, requirement: ShiftRequirement) -> None:
    if not member.is_qualified_for(requirement.role_name):
        raise ConflictError(
            f"Staff member does not have the required '{requirement.role_name}' role",
            reason="not_qualified",
            details={
                "staff_id": member.staff_id,
                "role_name": requirement.role_name,
                "worker_roles": list(member.worker_roles or []),
            },
        )


def _ensure_staff_account(member: StaffMember) -> None:
    roles = {r.lower() for r in (member.roles or [])}
    if not roles & STAFF_ROLES:
        raise ConflictError(
            "Invalid staff member: no staff-level role",
            reason="not_staff",
            details={"staff_id": member.staff_id, "roles": sorted(roles)},
        )


def _transition(app: ShiftApplication, target: ApplicationStatus) -> None:
    if not app.status.can_transition_to(target):
        raise StateError(
            f"Application cannot move from {app.status.value} to {target.value}",
            current_status=app.status.value,
        )
    app.status = target


# ---------- capacity ----------
def reserve_requirement_slot(db: Session, requirement_id: int) -> bool:
    """
    Take one unit of capacity. The UPDATE only matches while filled_count is
    below required_count, so concurrent writers cannot overshoot it.
    Runs inside the caller's transaction.
    """
    result = db.execute(
        update(ShiftRequirement)
        .where(
            ShiftRequirement.requirement_id == requirement_id,
            ShiftRequirement.filled_count < ShiftRequirement.required_count,
        )
        .values(filled_count=ShiftRequirement.filled_count + 1)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def release_requirement_slot(db: Session, requirement_id: int) -> None:
    db.execute(
        update(ShiftRequirement)
        .where(
            ShiftRequirement.requirement_id == requirement_id,
            ShiftRequirement.filled_count > 0,
        )
        .values(filled_count=ShiftRequirement.filled_count - 1)
        .execution_options(synchronize_session=False)
    )


def commit_assignment(
    db: Session,
    shift: Shift,
    requirement: ShiftRequirement,
    member: StaffMember,
    application: Optional[ShiftApplication] = None,
) -> ShiftAssignment:
    """Reserve capacity, insert the assignment and approve ``application`` (if any) atomically."""
    if not reserve_requirement_slot(db, requirement.requirement_id):
        db.rollback()
        raise ConflictError(
            f"The '{requirement.role_name}' role is already fully staffed for this shift",
            reason="fully_staffed",
            details={
                "requirement_id": requirement.requirement_id,
                "role_name": requirement.role_name,
                "required_count": requirement.required_count,
            },
        )

    assignment = ShiftAssignment(
        shift_id=shift.shift_id,
        requirement_id=requirement.requirement_id,
        staff_id=member.staff_id,
    )
    db.add(assignment)
    if application is not None:
        _transition(application, ApplicationStatus.approved)

    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise ConflictError(
            "Staff member is already assigned to this shift",
            reason="already_assigned",
            details={"shift_id": shift.shift_id, "staff_id": member.staff_id},
        )

    db.commit()
    db.refresh(assignment)
    logger.info(
        "Assigned staff %s to shift %s as %s (assignment %s%s)",
        member.staff_id,
        shift.shift_id,
        requirement.role_name,
        assignment.assignment_id,
        f", application {application.application_id}" if application is not None else "",
    )
    return assignment


# ---------- applications ----------
def apply_to_shift(
    db: Session,
    actor: Actor,
    shift_id,
    desired_requirement_id=None,
    staff_id=None,
) -> ShiftApplication:
    """
    Staff apply for themselves; managers may pass ``staff_id`` to apply on
    someone's behalf. The application waits in the applied state for a
    manager decision.
    """
    require_staff(actor)
    shift_id = parse_id(shift_id, "shift_id")
    staff_id = actor.user_id if staff_id is None else parse_id(staff_id, "staff_id")
    require_self_or_manager(actor, staff_id)
    if desired_requirement_id is not None:
        desired_requirement_id = parse_id(desired_requirement_id, "desired_requirement_id")

    shift = _require_shift(db, shift_id)
    _require_staff_member(db, staff_id)

    if _existing_assignment(db, shift_id, staff_id):
        raise ConflictError(
            "You are already assigned to this shift",
            reason="already_assigned",
            details={"shift_id": shift_id, "staff_id": staff_id},
        )

    ensure_no_conflicts(db, staff_id, shift)

    previous = db.execute(
        select(ShiftApplication).where(
            ShiftApplication.shift_id == shift_id,
            ShiftApplication.staff_id == staff_id,
            ShiftApplication.status != ApplicationStatus.withdrawn,
        )
    ).scalars().first()
    if previous:
        raise ConflictError(
            "You have already applied to this shift",
            reason="already_applied",
            details={"application_id": previous.application_id, "status": previous.status.value},
        )

    if desired_requirement_id is not None and not _requirement_for_shift(db, desired_requirement_id, shift_id):
        raise NotFoundError(
            "Requirement",
            desired_requirement_id,
            message="Invalid requirement for this shift",
        )

    app = ShiftApplication(
        shift_id=shift_id,
        staff_id=staff_id,
        desired_requirement_id=desired_requirement_id,
        status=ApplicationStatus.applied,
    )
    db.add(app)
    db.commit()
    db.refresh(app)
    logger.info("Staff %s applied to shift %s (application %s)", staff_id, shift_id, app.application_id)
    return app


def withdraw_application(db: Session, actor: Actor, application_id) -> ShiftApplication:
    require_staff(actor)
    app = _require_application(db, parse_id(application_id, "application_id"))
    if not actor.is_manager and app.staff_id != actor.user_id:
        raise AuthorizationError("You can only withdraw your own applications")

    if _existing_assignment(db, app.shift_id, app.staff_id):
        raise StateError(
            "Cannot withdraw application - staff is already assigned to this shift",
            current_status=app.status.value,
        )

    _transition(app, ApplicationStatus.withdrawn)
    db.commit()
    logger.info("Application %s withdrawn", app.application_id)
    return app


def decline_application(db: Session, actor: Actor, application_id) -> ShiftApplication:
    require_manager(actor)
    app = _require_application(db, parse_id(application_id, "application_id"))

    if _existing_assignment(db, app.shift_id, app.staff_id):
        raise StateError(
            "Cannot decline application - staff is already assigned to this shift",
            current_status=app.status.value,
        )

    _transition(app, ApplicationStatus.rejected)
    db.commit()
    logger.info("Application %s declined by %s", app.application_id, actor.user_id)
    return app


def approve_and_assign(db: Session, actor: Actor, application_id) -> tuple[ShiftApplication, ShiftAssignment]:
    """Approve a pending application and place the applicant into the role they asked for."""
    require_manager(actor)
    app = _require_application(db, parse_id(application_id, "application_id"))

    if not app.status.is_pending:
        raise StateError("Application has already been processed", current_status=app.status.value)

    shift = _require_shift(db, app.shift_id)
    ensure_no_conflicts(db, app.staff_id, shift)
    _ensure_not_assigned(db, app.shift_id, app.staff_id)

    if app.desired_requirement_id is None:
        raise ValidationError("Application does not specify a desired role", field="desired_requirement_id")

    requirement = _requirement_for_shift(db, app.desired_requirement_id, app.shift_id)
    if not requirement:
        raise NotFoundError(
            "Requirement",
            app.desired_requirement_id,
            message="Desired requirement no longer exists for this shift",
        )

    _ensure_capacity(db, requirement)
    member = _require_staff_member(db, app.staff_id)
    _ensure_qualified(member, requirement)

    assignment = commit_assignment(db, shift, requirement, member, application=app)
    return app, assignment


def list_applications(
    db: Session,
    actor: Actor,
    status: Optional[str] = None,
    shift_id=None,
) -> list[tuple[ShiftApplication, Optional[bool]]]:
    """
    Managers see every application, staff only their own. Applications still
    awaiting a decision carry a live conflict flag.
    """
    require_staff(actor)

    stmt = select(ShiftApplication).options(
        selectinload(ShiftApplication.shift),
        selectinload(ShiftApplication.staff),
        selectinload(ShiftApplication.desired_requirement),
    )
    if not actor.is_manager:
        stmt = stmt.where(ShiftApplication.staff_id == actor.user_id)
    if status:
        try:
            stmt = stmt.where(ShiftApplication.status == ApplicationStatus(status.lower()))
        except ValueError:
            raise ValidationError(f"Invalid status '{status}'", field="status")
    if shift_id is not None:
        stmt = stmt.where(ShiftApplication.shift_id == parse_id(shift_id, "shift_id"))

    apps = db.execute(
        stmt.order_by(ShiftApplication.applied_at.desc(), ShiftApplication.application_id.desc())
    ).scalars().all()

    out = []
    for app in apps:
        flag = None
        if app.status.is_pending and app.shift is not None:
            flag = has_overlapping_commitment(
                db, app.staff_id, app.shift.shift_date, app.shift.template_id, exclude_shift_id=app.shift_id
            ) or has_time_off_conflict(db, app.staff_id, app.shift.shift_date)
        out.append((app, flag))
    return out


# ---------- assignments ----------
def assign_staff(db: Session, actor: Actor, shift_id, staff_id, requirement_id) -> ShiftAssignment:
    """Direct manager placement, independent of any application."""
    require_manager(actor)
    shift_id = parse_id(shift_id, "shift_id")
    staff_id = parse_id(staff_id, "staff_id")
    requirement_id = parse_id(requirement_id, "requirement_id")

    shift = _require_shift(db, shift_id)
    requirement = _requirement_for_shift(db, requirement_id, shift_id)
    if not requirement:
        raise NotFoundError("Requirement", requirement_id, message="Invalid requirement for this shift")

    member = _require_staff_member(db, staff_id)
    _ensure_staff_account(member)
    _ensure_not_assigned(db, shift_id, staff_id)
    ensure_no_conflicts(db, staff_id, shift)
    _ensure_capacity(db, requirement)

    return commit_assignment(db, shift, requirement, member)


def remove_assignment(db: Session, actor: Actor, assignment_id) -> None:
    """Delete the assignment and free its slot. Related applications keep their status."""
    require_manager(actor)
    assignment_id = parse_id(assignment_id, "assignment_id")
    assignment = db.get(ShiftAssignment, assignment_id)
    if not assignment:
        raise NotFoundError("Assignment", assignment_id)

    requirement_id = assignment.requirement_id
    db.delete(assignment)
    release_requirement_slot(db, requirement_id)
    db.commit()
    logger.info("Removed assignment %s (requirement %s)", assignment_id, requirement_id)


def _assignment_query():
    return select(ShiftAssignment).options(
        selectinload(ShiftAssignment.shift),
        selectinload(ShiftAssignment.staff),
        selectinload(ShiftAssignment.requirement),
    )


def list_assignments(db: Session, actor: Actor, shift_id=None) -> list[ShiftAssignment]:
    require_manager(actor)
    stmt = _assignment_query()
    if shift_id is not None:
        stmt = stmt.where(ShiftAssignment.shift_id == parse_id(shift_id, "shift_id"))
    return db.execute(
        stmt.order_by(ShiftAssignment.assigned_at.desc(), ShiftAssignment.assignment_id.desc())
    ).scalars().all()


def my_assignments(db: Session, actor: Actor, today: Optional[date] = None) -> list[ShiftAssignment]:
    """
    The caller's upcoming assignments (``today`` onwards). When the caller has
    worker roles configured, only assignments in one of those roles are shown.
    """
    require_staff(actor)
    member = _require_staff_member(db, actor.user_id)
    today = today or date.today()

    rows = db.execute(
        _assignment_query()
        .join(ShiftAssignment.shift)
        .where(ShiftAssignment.staff_id == member.staff_id, Shift.shift_date >= today)
        .order_by(Shift.shift_date, ShiftAssignment.assignment_id)
    ).scalars().all()

    if not member.worker_roles:
        return rows
    return [a for a in rows if a.requirement is not None and member.is_qualified_for(a.requirement.role_name)]
