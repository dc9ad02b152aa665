import logging
from typing import Annotated, List, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from educonnect_backend.api.crud import create_db, get_id_db, list_db, update_db
from educonnect_backend.api.exceptions import BadRequestException
from educonnect_backend.api.utils import resolve_users_with_role
from educonnect_backend.database import get_db
from educonnect_backend.interface.students import (
    ChildCreate, LinkStatusEnum, StudentCreate, StudentGet, StudentInterface,
    StudentList, StudentQuery, StudentUpdate
)
from educonnect_backend.model.auth import User
from educonnect_backend.model.student import Student
from educonnect_backend.permissions.auth import get_current_permissions
from educonnect_backend.permissions.core import check_action
from educonnect_backend.permissions.principal import Principal, ROLE_PARENT, ROLE_TEACHER

logger = logging.getLogger(__name__)

students_router = APIRouter()

_RELATION_FIELDS = {"parent_ids", "teacher_ids"}


def link_parents(student: Student, parents: List[User]):
    """Add parents to a student and the student to each parent's children, idempotently"""
    for parent in parents:
        if parent not in student.parents:
            student.parents.append(parent)
        parent.add_associated_id(student.id)


def _ensure_unique_student_id(db: Session, student_id: str):
    if db.query(Student.id).filter(Student.student_id == student_id).first() is not None:
        raise BadRequestException(detail="Student ID already exists")


@students_router.get("", response_model=list[StudentList])
async def list_students(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    response: Response,
    grade: Optional[str] = Query(None),
    section: Optional[str] = Query(None),
    link_status: Optional[LinkStatusEnum] = Query(None, alias="linkStatus"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1),
    db: Session = Depends(get_db),
):
    params = StudentQuery(grade=grade, section=section, link_status=link_status, skip=skip, limit=limit)
    items, total = await list_db(permissions, db, params, StudentInterface)
    response.headers["X-Total-Count"] = str(total)
    return items


@students_router.get("/{id}", response_model=StudentGet)
async def get_student(
    id: str,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    return await get_id_db(permissions, db, id, StudentInterface)


@students_router.post("", response_model=StudentGet, status_code=status.HTTP_201_CREATED)
async def create_student(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    payload: StudentCreate,
    db: Session = Depends(get_db),
):
    check_action(permissions, Student, "create")
    _ensure_unique_student_id(db, payload.student_id)

    def link_relations(student: Student, db: Session):
        link_parents(student, resolve_users_with_role(db, payload.parent_ids, ROLE_PARENT))
        student.teachers = resolve_users_with_role(db, payload.teacher_ids, ROLE_TEACHER)

    entity = payload.model_dump(exclude_unset=True, exclude=_RELATION_FIELDS)
    student = await create_db(permissions, db, entity, Student, StudentGet, post_create=link_relations)

    logger.info("Created student %s linked to %d parent(s)", student.student_id, len(student.parent_ids))
    return student


@students_router.post("/children", response_model=StudentGet, status_code=status.HTTP_201_CREATED)
async def add_child(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    payload: ChildCreate,
    db: Session = Depends(get_db),
):
    """A parent registers their own child, linked to them on creation"""
    check_action(permissions, Student, "add_child")
    _ensure_unique_student_id(db, payload.student_id)

    def link_self(student: Student, db: Session):
        link_parents(student, resolve_users_with_role(db, [permissions.get_user_id_or_throw()], ROLE_PARENT))

    return await create_db(permissions, db, payload, Student, StudentGet, post_create=link_self, action="add_child")


@students_router.put("/{id}", response_model=StudentGet)
def update_student(
    id: str,
    payload: StudentUpdate,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    def update_relations(student: Student, db: Session):
        # parents are only ever added here, never removed
        if payload.parent_ids is not None:
            link_parents(student, resolve_users_with_role(db, payload.parent_ids, ROLE_PARENT))
        if payload.teacher_ids is not None:
            student.teachers = resolve_users_with_role(db, payload.teacher_ids, ROLE_TEACHER)

    entity = payload.model_dump(exclude_unset=True, exclude=_RELATION_FIELDS)
    return update_db(permissions, db, id, entity, Student, StudentGet, post_update=update_relations)
