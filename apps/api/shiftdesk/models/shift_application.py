from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from shiftdesk.core.database import Base

# IMPORTANT: registers StaffMember before relationships are configured
from shiftdesk.models.staff import StaffMember  # noqa: F401
from shiftdesk.models.enums import ApplicationStatus


class ShiftApplication(Base):
    """A staff member asks to work a shift, optionally naming the role slot they want."""

    __tablename__ = "shift_applications"

    application_id = Column(Integer, primary_key=True, autoincrement=True)

    shift_id = Column(Integer, ForeignKey("shifts.shift_id", ondelete="CASCADE"), nullable=False, index=True)
    staff_id = Column(Integer, ForeignKey("staff_members.staff_id", ondelete="CASCADE"), nullable=False, index=True)

    # NULL means "any role"; approval needs a concrete requirement
    desired_requirement_id = Column(
        Integer,
        ForeignKey("shift_requirements.requirement_id", ondelete="SET NULL"),
        nullable=True,
    )

    status = Column(
        Enum(ApplicationStatus, name="shift_application_status"),
        nullable=False,
        default=ApplicationStatus.applied,
        index=True,
    )
    applied_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    shift = relationship("Shift", back_populates="applications")
    staff = relationship("StaffMember")
    desired_requirement = relationship("ShiftRequirement")
