from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from shiftdesk.core.database import Base

# IMPORTANT: registers StaffMember before relationships are configured
from shiftdesk.models.staff import StaffMember  # noqa: F401
from shiftdesk.models.enums import TimeOffStatus


class TimeOffRequest(Base):
    __tablename__ = "time_off_requests"

    time_off_id = Column(Integer, primary_key=True, autoincrement=True)

    staff_id = Column(
        Integer,
        ForeignKey("staff_members.staff_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # inclusive on both ends
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    reason = Column(Text, nullable=True)

    status = Column(Enum(TimeOffStatus, name="time_off_status"), nullable=False, default=TimeOffStatus.pending, index=True)

    manager_id = Column(Integer, ForeignKey("staff_members.staff_id", ondelete="SET NULL"), nullable=True)
    requested_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    decided_at = Column(DateTime(timezone=True), nullable=True)

    staff = relationship("StaffMember", foreign_keys=[staff_id])

    def covers(self, day) -> bool:
        return self.start_date <= day <= self.end_date
