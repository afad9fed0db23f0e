"""
Department endpoints. Reads need authentication; changes need an admin.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core import departments as department_service
from app.core.auth import get_current_user, require_roles
from app.models import get_db, User, UserRole
from app.schemas.common import EnvelopeResponse
from app.schemas.departments import (
    DepartmentCreate,
    DepartmentListResponse,
    DepartmentResponse,
    DepartmentUpdate,
)

router = APIRouter()

require_admin = require_roles(UserRole.ADMIN)


@router.get("", response_model=DepartmentListResponse)
def list_departments(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return DepartmentListResponse(
        departments=department_service.list_departments(db)
    )


@router.get("/{department_id}", response_model=DepartmentResponse)
def get_department(
    department_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return DepartmentResponse(
        department=department_service.get_department(db, department_id)
    )


@router.post(
    "", response_model=DepartmentResponse, status_code=status.HTTP_201_CREATED
)
def create_department(
    data: DepartmentCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return DepartmentResponse(
        message="Department created successfully",
        department=department_service.create_department(db, data),
    )


@router.put("/{department_id}", response_model=DepartmentResponse)
def update_department(
    department_id: int,
    data: DepartmentUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return DepartmentResponse(
        message="Department updated successfully",
        department=department_service.update_department(db, department_id, data),
    )


@router.delete("/{department_id}", response_model=EnvelopeResponse)
def delete_department(
    department_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    department_service.delete_department(db, department_id)
    return EnvelopeResponse(
        message=(
            "Department deleted successfully. "
            "Users and tests have been unassigned."
        )
    )
