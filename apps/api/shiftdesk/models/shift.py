from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from shiftdesk.core.database import Base

# IMPORTANT: registers the related mappers before relationships are configured
from shiftdesk.models.shift_template import ShiftTemplate  # noqa: F401
from shiftdesk.models.shift_requirement import ShiftRequirement  # noqa: F401
from shiftdesk.models.shift_application import ShiftApplication  # noqa: F401
from shiftdesk.models.shift_assignment import ShiftAssignment  # noqa: F401


class Shift(Base):
    __tablename__ = "shifts"

    shift_id = Column(Integer, primary_key=True, autoincrement=True)

    shift_date = Column(Date, nullable=False, index=True)
    template_id = Column(
        Integer,
        ForeignKey("shift_templates.template_id", ondelete="RESTRICT"),
        nullable=False,
    )
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    template = relationship("ShiftTemplate", back_populates="shifts", lazy="joined")
    requirements = relationship(
        "ShiftRequirement",
        back_populates="shift",
        cascade="all, delete-orphan",
        order_by="ShiftRequirement.requirement_id",
    )
    applications = relationship(
        "ShiftApplication",
        back_populates="shift",
        cascade="all, delete-orphan",
        order_by="ShiftApplication.application_id",
    )
    assignments = relationship(
        "ShiftAssignment",
        back_populates="shift",
        cascade="all, delete-orphan",
        order_by="ShiftAssignment.assignment_id",
    )

    __table_args__ = (
        UniqueConstraint("shift_date", "template_id", name="uq_shifts_date_template"),
    )
