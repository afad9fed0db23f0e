"""
Department management.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db_error_handling import transaction
from app.core.error_responses import ErrorMessages, raise_bad_request, raise_not_found
from app.models import Department, Test, User
from app.schemas.departments import DepartmentCreate, DepartmentUpdate

logger = logging.getLogger(__name__)


def _counts(db: Session, column: Any) -> Dict[int, int]:
    rows = (
        db.query(column, func.count())
        .filter(column.isnot(None))
        .group_by(column)
        .all()
    )
    return {department_id: count for department_id, count in rows}


def _to_dict(
    department: Department, user_counts: Dict[int, int], test_counts: Dict[int, int]
) -> Dict[str, Any]:
    return {
        "id": department.id,
        "department_name": department.department_name,
        "description": department.description,
        "is_active": department.is_active,
        "created_at": department.created_at,
        "user_count": user_counts.get(department.id, 0),
        "test_count": test_counts.get(department.id, 0),
    }


def _get_or_404(db: Session, department_id: int) -> Department:
    department = db.query(Department).filter(Department.id == department_id).first()
    if department is None:
        raise_not_found(ErrorMessages.DEPARTMENT_NOT_FOUND)
    return department


def _clean_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise_bad_request(ErrorMessages.DEPARTMENT_NAME_REQUIRED)
    return cleaned


def _ensure_name_available(
    db: Session, name: str, exclude_id: Optional[int] = None
) -> None:
    query = db.query(Department.id).filter(Department.department_name == name)
    if exclude_id is not None:
        query = query.filter(Department.id != exclude_id)
    if query.first() is not None:
        raise_bad_request(ErrorMessages.DEPARTMENT_NAME_TAKEN)


def list_departments(db: Session) -> List[Dict[str, Any]]:
    """All departments ordered by name, with user and test counts."""
    departments = db.query(Department).order_by(Department.department_name).all()
    user_counts = _counts(db, User.department_id)
    test_counts = _counts(db, Test.department_id)
    return [_to_dict(d, user_counts, test_counts) for d in departments]


def get_department(db: Session, department_id: int) -> Dict[str, Any]:
    department = _get_or_404(db, department_id)
    return _to_dict(
        department, _counts(db, User.department_id), _counts(db, Test.department_id)
    )


def create_department(db: Session, data: DepartmentCreate) -> Dict[str, Any]:
    name = _clean_name(data.department_name)
    _ensure_name_available(db, name)

    with transaction(db, "create department"):
        department = Department(
            department_name=name, description=data.description, is_active=True
        )
        db.add(department)
        try:
            db.flush()
        except IntegrityError:
            # Unique constraint caught a concurrent create with the same name
            raise_bad_request(ErrorMessages.DEPARTMENT_NAME_TAKEN)

    logger.info("Department %s created: %s", department.id, name)
    return _to_dict(department, {}, {})


def update_department(
    db: Session, department_id: int, data: DepartmentUpdate
) -> Dict[str, Any]:
    department = _get_or_404(db, department_id)
    name = _clean_name(data.department_name)
    _ensure_name_available(db, name, exclude_id=department_id)

    with transaction(db, "update department"):
        department.department_name = name
        department.description = data.description
        if data.is_active is not None:
            department.is_active = data.is_active

    return get_department(db, department_id)


def delete_department(db: Session, department_id: int) -> None:
    """
    Delete a department, unassigning its users and tests first.

    The shared Question Bank department cannot be deleted.
    """
    department = _get_or_404(db, department_id)
    if (
        department.department_name.strip().lower()
        == settings.QUESTION_BANK_DEPARTMENT.lower()
    ):
        raise_bad_request(ErrorMessages.QUESTION_BANK_PROTECTED)

    with transaction(db, "delete department"):
        db.query(User).filter(User.department_id == department_id).update(
            {User.department_id: None}, synchronize_session=False
        )
        db.query(Test).filter(Test.department_id == department_id).update(
            {Test.department_id: None}, synchronize_session=False
        )
        db.delete(department)

    logger.info("Department %s deleted; users and tests unassigned", department_id)
