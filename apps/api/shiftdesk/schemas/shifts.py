from datetime import date
from pydantic import BaseModel, Field
from typing import List, Optional


class TemplateCreate(BaseModel):
    name: str
    start_time: str
    end_time: str


class RequirementIn(BaseModel):
    role_name: str
    required_count: int = Field(ge=0)


class ShiftCreate(BaseModel):
    shift_date: date
    template_id: int
    requirements: List[RequirementIn] = []
    notes: Optional[str] = None
