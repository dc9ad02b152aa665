from typing import Annotated, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from educonnect_backend.api.crud import create_db, delete_db, get_id_db, list_db, update_db
from educonnect_backend.api.utils import resolve_students, student_filter_id
from educonnect_backend.database import get_db
from educonnect_backend.interface.assignments import (
    AssignmentCreate, AssignmentGet, AssignmentInterface, AssignmentList,
    AssignmentQuery, AssignmentStatusEnum, AssignmentUpdate
)
from educonnect_backend.interface.base import MessageResponse, dump_attachments
from educonnect_backend.model.academics import Assignment
from educonnect_backend.permissions.auth import get_current_permissions
from educonnect_backend.permissions.core import check_action
from educonnect_backend.permissions.principal import Principal

assignments_router = APIRouter()


@assignments_router.get("", response_model=list[AssignmentList])
async def list_assignments(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    response: Response,
    student_id: Optional[str] = Query(None, alias="studentId"),
    subject: Optional[str] = Query(None),
    status: Optional[AssignmentStatusEnum] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1),
    db: Session = Depends(get_db),
):
    params = AssignmentQuery(
        student_id=student_filter_id(db, student_id),
        subject=subject,
        status=status,
        skip=skip,
        limit=limit,
    )
    items, total = await list_db(permissions, db, params, AssignmentInterface)
    response.headers["X-Total-Count"] = str(total)
    return items


@assignments_router.get("/{id}", response_model=AssignmentGet)
async def get_assignment(
    id: str,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    return await get_id_db(permissions, db, id, AssignmentInterface)


@assignments_router.post("", response_model=AssignmentGet, status_code=status.HTTP_201_CREATED)
async def create_assignment(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    payload: AssignmentCreate,
    db: Session = Depends(get_db),
):
    check_action(permissions, Assignment, "create")

    entity = payload.model_dump(exclude_unset=True, exclude={"student_ids", "attachments"})
    entity["students"] = resolve_students(db, payload.student_ids)
    entity["attachments"] = dump_attachments(payload.attachments)
    entity["teacher_id"] = permissions.get_user_id_or_throw()

    return await create_db(permissions, db, entity, AssignmentInterface.model, AssignmentInterface.get)


@assignments_router.put("/{id}", response_model=AssignmentGet)
def update_assignment(
    id: str,
    payload: AssignmentUpdate,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    entity = payload.model_dump(exclude_unset=True, exclude={"student_ids", "attachments"})
    if payload.attachments is not None:
        entity["attachments"] = dump_attachments(payload.attachments)

    def update_students(assignment: Assignment, db: Session):
        if payload.student_ids is not None:
            assignment.students = resolve_students(db, payload.student_ids)

    return update_db(permissions, db, id, entity, AssignmentInterface.model, AssignmentInterface.get, post_update=update_students)


@assignments_router.delete("/{id}", response_model=MessageResponse)
def delete_assignment(
    id: str,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    return delete_db(permissions, db, id, AssignmentInterface.model)
