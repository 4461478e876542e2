from sqlalchemy import Column, Enum, Integer, Time
from sqlalchemy.orm import relationship

from shiftdesk.core.database import Base
from shiftdesk.models.enums import ShiftTiming


class ShiftTemplate(Base):
    __tablename__ = "shift_templates"

    template_id = Column(Integer, primary_key=True, autoincrement=True)

    name = Column(Enum(ShiftTiming, name="shift_timing"), nullable=False, unique=True)
    # end_time < start_time means the slot runs past midnight
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    shifts = relationship("Shift", back_populates="template")

    @property
    def crosses_midnight(self) -> bool:
        return self.end_time < self.start_time
