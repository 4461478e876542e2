from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from shiftdesk.core.database import Base


class ShiftRequirement(Base):
    __tablename__ = "shift_requirements"

    requirement_id = Column(Integer, primary_key=True, autoincrement=True)

    shift_id = Column(
        Integer,
        ForeignKey("shifts.shift_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    role_name = Column(String(100), nullable=False, index=True)  # e.g. "cook", "server", "host"
    required_count = Column(Integer, nullable=False, default=0)

    # capacity guard: only moved by a conditional UPDATE, see services.workflow
    filled_count = Column(Integer, nullable=False, default=0, server_default="0")

    shift = relationship("Shift", back_populates="requirements")
    assignments = relationship("ShiftAssignment", back_populates="requirement")

    __table_args__ = (
        UniqueConstraint("shift_id", "role_name", name="uq_shift_requirements_shift_role"),
        CheckConstraint("required_count >= 0", name="ck_shift_requirements_required_count"),
        CheckConstraint("filled_count >= 0", name="ck_shift_requirements_filled_count"),
    )

