from pydantic import BaseModel, EmailStr
from typing import List, Optional


class StaffCreate(BaseModel):
    first_name: str
    last_name: str
    email: EmailStr
    phone: Optional[str] = None
    roles: List[str] = ["staff"]
    worker_roles: List[str] = []


class WorkerRolesUpdate(BaseModel):
    worker_roles: List[str]
