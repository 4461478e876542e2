from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from shiftdesk.core.database import Base

# IMPORTANT: registers StaffMember before relationships are configured
from shiftdesk.models.staff import StaffMember  # noqa: F401


class ShiftAssignment(Base):
    """A confirmed placement of one staff member into one role slot of a shift."""

    __tablename__ = "shift_assignments"

    assignment_id = Column(Integer, primary_key=True, autoincrement=True)

    # redundant with requirement.shift_id, kept for per-shift queries and uniqueness
    shift_id = Column(Integer, ForeignKey("shifts.shift_id", ondelete="CASCADE"), nullable=False)
    # requirements are only deleted together with their shift
    requirement_id = Column(
        Integer,
        ForeignKey("shift_requirements.requirement_id", ondelete="CASCADE"),
        nullable=False,
    )
    # filled_count is only released by remove_assignment, so staff with assignments cannot be deleted
    staff_id = Column(Integer, ForeignKey("staff_members.staff_id", ondelete="RESTRICT"), nullable=False, index=True)

    assigned_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    shift = relationship("Shift", back_populates="assignments")
    requirement = relationship("ShiftRequirement", back_populates="assignments")
    staff = relationship("StaffMember")

    __table_args__ = (
        UniqueConstraint("shift_id", "staff_id", name="uq_shift_assignments_shift_staff"),
        UniqueConstraint("requirement_id", "staff_id", name="uq_shift_assignments_requirement_staff"),
        Index("ix_shift_assignments_shift_requirement", "shift_id", "requirement_id"),
    )
