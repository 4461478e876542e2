from pydantic import BaseModel
from typing import Optional


# dates stay strings here so malformed values surface as ValidationError
class TimeOffCreate(BaseModel):
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    reason: Optional[str] = None
