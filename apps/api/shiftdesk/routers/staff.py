from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from shiftdesk.core.database import get_db
from shiftdesk.core.security import Actor
from shiftdesk.routers.auth import get_current_actor
from shiftdesk.schemas.staff import StaffCreate, WorkerRolesUpdate
from shiftdesk.services import staff as staff_service
from shiftdesk.services.presenters import staff_payload

router = APIRouter()


@router.get("")
def list_staff(
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    return [staff_payload(m) for m in staff_service.list_staff(db, actor)]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_staff_member(
    payload: StaffCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    member = staff_service.create_staff_member(
        db,
        actor,
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        phone=payload.phone,
        roles=payload.roles,
        worker_roles=payload.worker_roles,
    )
    return staff_payload(member)


@router.get("/{staff_id}")
def get_staff_member(
    staff_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    return staff_payload(staff_service.get_staff(db, actor, staff_id))


@router.put("/{staff_id}/worker-roles")
def update_worker_roles(
    staff_id: int,
    payload: WorkerRolesUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    return staff_payload(staff_service.update_worker_roles(db, actor, staff_id, payload.worker_roles))
