from __future__ import annotations

import logging
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shiftdesk.core.errors import ConflictError, NotFoundError, ValidationError
from shiftdesk.core.security import STAFF_ROLES, Actor, normalize_roles, require_manager, require_self_or_manager
from shiftdesk.models.enums import StaffStatus
from shiftdesk.models.staff import StaffMember
from shiftdesk.services.validators import parse_id

logger = logging.getLogger(__name__)


def _clean_worker_roles(worker_roles: Optional[Iterable[str]]) -> list[str]:
    # lower-cased, first occurrence wins
    out: list[str] = []
    for r in worker_roles or []:
        name = (r or "").strip().lower()
        if name and name not in out:
            out.append(name)
    return out


def get_staff(db: Session, actor: Actor, staff_id) -> StaffMember:
    staff_id = parse_id(staff_id, "staff_id")
    require_self_or_manager(actor, staff_id)
    member = db.get(StaffMember, staff_id)
    if not member:
        raise NotFoundError("Staff member", staff_id)
    return member


def list_staff(db: Session, actor: Actor) -> list[StaffMember]:
    require_manager(actor)
    members = db.execute(
        select(StaffMember).order_by(StaffMember.last_name, StaffMember.first_name, StaffMember.staff_id)
    ).scalars().all()
    # roles is a JSON list, filtered here so the query stays portable
    return [m for m in members if normalize_roles(m.roles) & STAFF_ROLES]


def create_staff_member(
    db: Session,
    actor: Actor,
    first_name: str,
    last_name: str,
    email: str,
    phone: Optional[str] = None,
    roles: Optional[Iterable[str]] = None,
    worker_roles: Optional[Iterable[str]] = None,
) -> StaffMember:
    require_manager(actor)

    first_name = (first_name or "").strip()
    last_name = (last_name or "").strip()
    email = (email or "").strip().lower()
    if not first_name or not last_name:
        raise ValidationError("First and last name are required", field="first_name")
    if not email:
        raise ValidationError("email is required", field="email")

    account_roles = sorted(normalize_roles(roles or ["staff"]))

    existing = db.execute(select(StaffMember.staff_id).where(StaffMember.email == email)).scalar_one_or_none()
    if existing:
        raise ConflictError(
            "A staff member with this email already exists",
            reason="duplicate",
            details={"staff_id": existing, "email": email},
        )

    member = StaffMember(
        first_name=first_name,
        last_name=last_name,
        email=email,
        phone=(phone or "").strip() or None,
        roles=account_roles,
        worker_roles=_clean_worker_roles(worker_roles),
        staff_status=StaffStatus.active,
    )
    db.add(member)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("A staff member with this email already exists", reason="duplicate")
    db.refresh(member)
    logger.info("Created staff member %s (%s)", member.staff_id, email)
    return member


def update_worker_roles(db: Session, actor: Actor, staff_id, worker_roles: Iterable[str]) -> StaffMember:
    require_manager(actor)
    staff_id = parse_id(staff_id, "staff_id")
    member = db.get(StaffMember, staff_id)
    if not member:
        raise NotFoundError("Staff member", staff_id)

    member.worker_roles = _clean_worker_roles(worker_roles)
    db.commit()
    db.refresh(member)
    logger.info("Updated worker roles for staff %s: %s", staff_id, member.worker_roles)
    return member
