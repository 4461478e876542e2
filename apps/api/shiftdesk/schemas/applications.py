from pydantic import BaseModel
from typing import Optional


class ApplyRequest(BaseModel):
    desired_requirement_id: Optional[int] = None
    # managers only; staff always apply for themselves
    staff_id: Optional[int] = None


class AssignRequest(BaseModel):
    staff_id: int
    requirement_id: int
