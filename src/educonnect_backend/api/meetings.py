import logging
from datetime import datetime
from typing import Annotated, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from educonnect_backend.api.crud import create_db, delete_db, get_for_mutation, get_id_db, list_db, update_db
from educonnect_backend.api.exceptions import BadRequestException, ForbiddenException
from educonnect_backend.api.utils import resolve_student
from educonnect_backend.database import get_db
from educonnect_backend.interface.base import MessageResponse
from educonnect_backend.interface.meetings import (
    MeetingCreate, MeetingGet, MeetingInterface, MeetingList, MeetingQuery,
    MeetingStatusEnum, MeetingStatusUpdate, MeetingUpdate, is_valid_transition
)
from educonnect_backend.model.auth import User
from educonnect_backend.model.meeting import Meeting
from educonnect_backend.model.student import Student
from educonnect_backend.permissions.auth import get_current_permissions
from educonnect_backend.permissions.core import check_action
from educonnect_backend.permissions.principal import Principal, ROLE_PARENT, ROLE_TEACHER

logger = logging.getLogger(__name__)

meetings_router = APIRouter()


def _active_user_with_role(db: Session, user_id: Optional[str], role: str) -> User:
    user = db.query(User).filter(User.id == user_id).first() if user_id else None
    if user is None or user.role != role or not user.is_active:
        raise BadRequestException(detail=f"A valid {role} is required")
    return user


def resolve_participants(permissions: Principal, payload: MeetingCreate, student: Student, db: Session):
    """Fill in the requester's side and check that the other participant may meet about student.

    Returns (parent_id, teacher_id).
    """
    user_id = permissions.get_user_id_or_throw()

    if permissions.is_parent:
        if payload.parent_id and payload.parent_id != user_id:
            raise ForbiddenException(detail="You can only create meetings as yourself")
        if user_id not in student.parent_ids:
            raise ForbiddenException(detail="Student not associated with your account")
        teacher = _active_user_with_role(db, payload.teacher_id, ROLE_TEACHER)
        return user_id, teacher.id

    if permissions.is_teacher:
        if payload.teacher_id and payload.teacher_id != user_id:
            raise ForbiddenException(detail="You can only create meetings as yourself")
        parent = _active_user_with_role(db, payload.parent_id, ROLE_PARENT)
        if parent.id not in student.parent_ids:
            raise BadRequestException(detail="Parent is not linked to this student")
        return parent.id, user_id

    raise ForbiddenException(detail="Only parents and teachers can request meetings")


@meetings_router.get("", response_model=list[MeetingList])
async def list_meetings(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    response: Response,
    status: Optional[MeetingStatusEnum] = Query(None),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1),
    db: Session = Depends(get_db),
):
    params = MeetingQuery(status=status, start_date=start_date, end_date=end_date, skip=skip, limit=limit)
    items, total = await list_db(permissions, db, params, MeetingInterface)
    response.headers["X-Total-Count"] = str(total)
    return items


@meetings_router.get("/{id}", response_model=MeetingGet)
async def get_meeting(
    id: str,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    return await get_id_db(permissions, db, id, MeetingInterface)


@meetings_router.post("", response_model=MeetingGet, status_code=status.HTTP_201_CREATED)
async def create_meeting(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    payload: MeetingCreate,
    db: Session = Depends(get_db),
):
    check_action(permissions, Meeting, "create")

    student = resolve_student(db, payload.student_id)
    parent_id, teacher_id = resolve_participants(permissions, payload, student, db)

    entity = payload.model_dump(exclude_unset=True)
    entity.update(
        parent_id=parent_id,
        teacher_id=teacher_id,
        student_id=student.id,
        status=MeetingStatusEnum.pending.value,
        requested_by=permissions.role,
    )

    return await create_db(permissions, db, entity, MeetingInterface.model, MeetingInterface.get)


@meetings_router.put("/{id}", response_model=MeetingGet)
def update_meeting(
    id: str,
    payload: MeetingUpdate,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    return update_db(permissions, db, id, payload, MeetingInterface.model, MeetingInterface.get)


@meetings_router.put("/{id}/status", response_model=MeetingGet)
def update_meeting_status(
    id: str,
    payload: MeetingStatusUpdate,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    meeting = get_for_mutation(permissions, db, id, Meeting, "update_status")

    if not is_valid_transition(meeting.status, payload.status):
        raise BadRequestException(detail=f"Cannot change meeting status from {meeting.status} to {payload.status}")

    logger.info("Meeting %s: %s -> %s by %s", meeting.id, meeting.status, payload.status, permissions.user_id)

    return update_db(permissions, db, None, {"status": payload.status}, Meeting, MeetingGet, db_item=meeting)


@meetings_router.delete("/{id}", response_model=MessageResponse)
def delete_meeting(
    id: str,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    return delete_db(permissions, db, id, MeetingInterface.model)
