"""
Pydantic schemas for department endpoints.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.schemas.common import EnvelopeResponse


class DepartmentCreate(BaseModel):
    department_name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None


class DepartmentUpdate(DepartmentCreate):
    is_active: Optional[bool] = None


class DepartmentOut(BaseModel):
    id: int
    department_name: str
    description: Optional[str] = None
    is_active: bool
    created_at: datetime
    user_count: int = 0
    test_count: int = 0


class DepartmentResponse(EnvelopeResponse):
    department: DepartmentOut


class DepartmentListResponse(EnvelopeResponse):
    departments: List[DepartmentOut]
