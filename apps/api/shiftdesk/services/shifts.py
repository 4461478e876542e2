from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from shiftdesk.core.errors import ConflictError, NotFoundError, ValidationError
from shiftdesk.core.security import Actor, require_manager, require_staff
from shiftdesk.models.enums import ShiftTiming
from shiftdesk.models.shift import Shift
from shiftdesk.models.shift_application import ShiftApplication
from shiftdesk.models.shift_assignment import ShiftAssignment
from shiftdesk.models.shift_requirement import ShiftRequirement
from shiftdesk.models.shift_template import ShiftTemplate
from shiftdesk.services.validators import parse_date, parse_id, parse_optional_date, parse_time

logger = logging.getLogger(__name__)


# ---------- templates ----------
def create_template(db: Session, actor: Actor, name: str, start_time, end_time) -> ShiftTemplate:
    require_manager(actor)

    try:
        timing = ShiftTiming((name or "").strip().lower())
    except ValueError:
        raise ValidationError(
            f"Unknown shift template name '{name}'",
            field="name",
            details={"allowed": [t.value for t in ShiftTiming]},
        )
    start = parse_time(start_time, "start_time")
    end = parse_time(end_time, "end_time")
    if start == end:
        raise ValidationError("start_time and end_time must differ", field="end_time")

    existing = db.execute(select(ShiftTemplate).where(ShiftTemplate.name == timing)).scalar_one_or_none()
    if existing:
        raise ConflictError(
            f"Shift template '{timing.value}' already exists",
            reason="duplicate",
            details={"template_id": existing.template_id},
        )

    template = ShiftTemplate(name=timing, start_time=start, end_time=end)
    db.add(template)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Shift template '{timing.value}' already exists", reason="duplicate")
    db.refresh(template)
    logger.info("Created shift template %s (%s-%s)", timing.value, start, end)
    return template


def list_templates(db: Session) -> list[ShiftTemplate]:
    return db.execute(select(ShiftTemplate).order_by(ShiftTemplate.start_time)).scalars().all()


# ---------- shifts ----------
def _shift_query():
    return select(Shift).options(
        selectinload(Shift.requirements),
        selectinload(Shift.applications).selectinload(ShiftApplication.staff),
        selectinload(Shift.assignments).selectinload(ShiftAssignment.staff),
        selectinload(Shift.assignments).selectinload(ShiftAssignment.requirement),
    )


def _clean_requirements(requirements: Iterable) -> list[tuple[str, int]]:
    cleaned: list[tuple[str, int]] = []
    seen: set[str] = set()
    for r in requirements or []:
        role_name = (r.get("role_name") if isinstance(r, dict) else r.role_name) or ""
        required_count = r.get("required_count") if isinstance(r, dict) else r.required_count
        role_name = role_name.strip().lower()
        if not role_name:
            raise ValidationError("role_name is required for every requirement", field="requirements")
        try:
            required_count = int(required_count)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid required_count for role '{role_name}'", field="requirements")
        if required_count < 0:
            raise ValidationError(f"required_count for role '{role_name}' must be >= 0", field="requirements")
        if role_name in seen:
            raise ValidationError(f"Duplicate requirement for role '{role_name}'", field="requirements")
        seen.add(role_name)
        cleaned.append((role_name, required_count))
    return cleaned


def create_shift(
    db: Session,
    actor: Actor,
    shift_date,
    template_id,
    requirements: Iterable = (),
    notes: Optional[str] = None,
) -> Shift:
    """Create a Shift for (date, template) together with its role requirements."""
    require_manager(actor)

    day = parse_date(shift_date, "shift_date")
    template_id = parse_id(template_id, "template_id")
    cleaned = _clean_requirements(requirements)

    template = db.get(ShiftTemplate, template_id)
    if not template:
        raise NotFoundError("Shift template", template_id)

    existing = db.execute(
        select(Shift.shift_id).where(Shift.shift_date == day, Shift.template_id == template_id)
    ).scalar_one_or_none()
    if existing:
        raise ConflictError(
            "Shift already exists for this date and template",
            reason="duplicate",
            details={"shift_id": existing, "shift_date": day.isoformat(), "template_id": template_id},
        )

    shift = Shift(shift_date=day, template_id=template_id, notes=notes or None)
    shift.requirements = [ShiftRequirement(role_name=name, required_count=count) for name, count in cleaned]
    db.add(shift)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Shift already exists for this date and template", reason="duplicate")

    logger.info(
        "Created shift %s on %s (%s) with %d requirement(s)",
        shift.shift_id, day, template.name.value, len(cleaned),
    )
    return get_shift(db, shift.shift_id)


def get_shift(db: Session, shift_id) -> Shift:
    shift_id = parse_id(shift_id, "shift_id")
    shift = db.execute(_shift_query().where(Shift.shift_id == shift_id)).scalar_one_or_none()
    if not shift:
        raise NotFoundError("Shift", shift_id)
    return shift


def list_shifts(
    db: Session,
    actor: Actor,
    start_date=None,
    end_date=None,
    template_id=None,
) -> list[Shift]:
    require_staff(actor)

    start = parse_optional_date(start_date, "start_date")
    end = parse_optional_date(end_date, "end_date")

    stmt = _shift_query().join(Shift.template)
    # the date filter only applies when both ends are given
    if start and end:
        stmt = stmt.where(Shift.shift_date >= start, Shift.shift_date <= end)
    if template_id is not None:
        stmt = stmt.where(Shift.template_id == parse_id(template_id, "template_id"))

    return db.execute(stmt.order_by(Shift.shift_date, ShiftTemplate.start_time)).scalars().all()


def weekly_schedule(db: Session, actor: Actor, start_date, end_date) -> tuple[date, date, list[Shift]]:
    require_staff(actor)
    if not start_date or not end_date:
        raise ValidationError("Start date and end date are required", field="start_date")

    start = parse_date(start_date, "start_date")
    end = parse_date(end_date, "end_date")
    if end < start:
        raise ValidationError("end_date must be >= start_date", field="end_date")

    return start, end, list_shifts(db, actor, start, end)
