from datetime import datetime
from typing import Annotated, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from educonnect_backend.api.crud import create_db, delete_db, get_id_db, list_db, update_db
from educonnect_backend.api.exceptions import BadRequestException
from educonnect_backend.api.utils import resolve_student, student_filter_id
from educonnect_backend.database import get_db
from educonnect_backend.interface.base import MessageResponse
from educonnect_backend.interface.grades import (
    GradeCreate, GradeGet, GradeInterface, GradeList, GradeQuery, GradeTypeEnum, GradeUpdate
)
from educonnect_backend.model.academics import Assignment, Grade
from educonnect_backend.permissions.auth import get_current_permissions
from educonnect_backend.permissions.core import check_action
from educonnect_backend.permissions.principal import Principal

grades_router = APIRouter()


def _ensure_assignment(db: Session, assignment_id: Optional[str]):
    if assignment_id is not None and db.query(Assignment.id).filter(Assignment.id == assignment_id).first() is None:
        raise BadRequestException(detail=f"Assignment {assignment_id} not found")


def _check_bounds(grade: Grade):
    if grade.grade > grade.max_grade:
        raise BadRequestException(detail="Grade cannot exceed maxGrade")


@grades_router.get("", response_model=list[GradeList])
async def list_grades(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    response: Response,
    student_id: Optional[str] = Query(None, alias="studentId"),
    subject: Optional[str] = Query(None),
    grade_type: Optional[GradeTypeEnum] = Query(None, alias="gradeType"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1),
    db: Session = Depends(get_db),
):
    params = GradeQuery(
        student_id=student_filter_id(db, student_id),
        subject=subject,
        grade_type=grade_type,
        start_date=start_date,
        end_date=end_date,
        skip=skip,
        limit=limit,
    )
    items, total = await list_db(permissions, db, params, GradeInterface)
    response.headers["X-Total-Count"] = str(total)
    return items


@grades_router.get("/{id}", response_model=GradeGet)
async def get_grade(
    id: str,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    return await get_id_db(permissions, db, id, GradeInterface)


@grades_router.post("", response_model=GradeGet, status_code=status.HTTP_201_CREATED)
async def create_grade(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    payload: GradeCreate,
    db: Session = Depends(get_db),
):
    check_action(permissions, Grade, "create")
    student = resolve_student(db, payload.student_id)
    _ensure_assignment(db, payload.assignment_id)

    entity = payload.model_dump(exclude_unset=True)
    entity["student_id"] = student.id
    # author is always the current user
    entity["teacher_id"] = permissions.get_user_id_or_throw()

    return await create_db(permissions, db, entity, GradeInterface.model, GradeInterface.get)


@grades_router.put("/{id}", response_model=GradeGet)
def update_grade(
    id: str,
    payload: GradeUpdate,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    entity = payload.model_dump(exclude_unset=True)

    def validate_merged(grade: Grade, db: Session):
        if entity.get("student_id") is not None:
            grade.student_id = resolve_student(db, entity["student_id"]).id
        _ensure_assignment(db, entity.get("assignment_id"))
        _check_bounds(grade)

    return update_db(permissions, db, id, entity, GradeInterface.model, GradeInterface.get, post_update=validate_merged)


@grades_router.delete("/{id}", response_model=MessageResponse)
def delete_grade(
    id: str,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    return delete_db(permissions, db, id, GradeInterface.model)
