from datetime import date
from typing import Annotated, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from educonnect_backend.api.crud import create_db, delete_db, get_id_db, list_db, update_db
from educonnect_backend.api.exceptions import BadRequestException
from educonnect_backend.api.utils import resolve_student, student_filter_id
from educonnect_backend.database import get_db
from educonnect_backend.interface.attendance import (
    AttendanceCreate, AttendanceGet, AttendanceInterface, AttendanceList,
    AttendanceQuery, AttendanceStatusEnum, AttendanceUpdate
)
from educonnect_backend.interface.base import MessageResponse
from educonnect_backend.model.academics import Attendance
from educonnect_backend.permissions.auth import get_current_permissions
from educonnect_backend.permissions.core import check_action
from educonnect_backend.permissions.principal import Principal

attendance_router = APIRouter()


def _ensure_not_recorded(db: Session, student_id: str, day: date, subject: str, exclude_id: Optional[str] = None):
    # the unique constraint is authoritative; this only yields a clearer message
    query = db.query(Attendance.id).filter(
        Attendance.student_id == student_id,
        Attendance.date == day,
        Attendance.subject == subject,
    )
    if exclude_id is not None:
        query = query.filter(Attendance.id != exclude_id)
    if query.first() is not None:
        label = subject or "the day"
        raise BadRequestException(detail=f"Attendance already recorded for {label} on this date")


@attendance_router.get("", response_model=list[AttendanceList])
async def list_attendance(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    response: Response,
    student_id: Optional[str] = Query(None, alias="studentId"),
    status: Optional[AttendanceStatusEnum] = Query(None),
    subject: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1),
    db: Session = Depends(get_db),
):
    params = AttendanceQuery(
        student_id=student_filter_id(db, student_id),
        status=status,
        subject=subject,
        start_date=start_date,
        end_date=end_date,
        skip=skip,
        limit=limit,
    )
    items, total = await list_db(permissions, db, params, AttendanceInterface)
    response.headers["X-Total-Count"] = str(total)
    return items


@attendance_router.get("/{id}", response_model=AttendanceGet)
async def get_attendance(
    id: str,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    return await get_id_db(permissions, db, id, AttendanceInterface)


@attendance_router.post("", response_model=AttendanceGet, status_code=status.HTTP_201_CREATED)
async def create_attendance(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    payload: AttendanceCreate,
    db: Session = Depends(get_db),
):
    check_action(permissions, Attendance, "create")
    student = resolve_student(db, payload.student_id)
    _ensure_not_recorded(db, student.id, payload.date, payload.subject)

    entity = payload.model_dump()
    entity["student_id"] = student.id
    entity["teacher_id"] = permissions.get_user_id_or_throw()

    return await create_db(permissions, db, entity, AttendanceInterface.model, AttendanceInterface.get)


@attendance_router.put("/{id}", response_model=AttendanceGet)
def update_attendance(
    id: str,
    payload: AttendanceUpdate,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    def check_natural_key(record: Attendance, db: Session):
        _ensure_not_recorded(db, record.student_id, record.date, record.subject, exclude_id=record.id)

    return update_db(permissions, db, id, payload, AttendanceInterface.model, AttendanceInterface.get, post_update=check_natural_key)


@attendance_router.delete("/{id}", response_model=MessageResponse)
def delete_attendance(
    id: str,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    return delete_db(permissions, db, id, AttendanceInterface.model)
