from sqlalchemy import JSON, Column, DateTime, Enum, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from shiftdesk.core.database import Base
from shiftdesk.models.enums import StaffStatus

# JSONB on Postgres, plain JSON elsewhere (tests run on SQLite)
RoleList = JSON().with_variant(JSONB(), "postgresql")


class StaffMember(Base):
    __tablename__ = "staff_members"

    staff_id = Column(Integer, primary_key=True, autoincrement=True)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    phone = Column(String(50), nullable=True)

    # account roles issued by the auth service, e.g. ["staff"] or ["manager"]
    roles = Column(RoleList, nullable=False, default=list)
    # qualifications, e.g. ["cook", "server"]
    worker_roles = Column(RoleList, nullable=True)

    staff_status = Column(Enum(StaffStatus, name="staff_status"), nullable=True, index=True, default=StaffStatus.active)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def is_qualified_for(self, role_name: str) -> bool:
        return role_name.strip().lower() in {r.lower() for r in (self.worker_roles or [])}
