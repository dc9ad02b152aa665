from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import Field, field_validator
from sqlalchemy.orm import Session
from educonnect_backend.interface.base import (
    Attachment, BaseEntityGet, CamelModel, EntityInterface, ListQuery, StudentRef, UserRef, reject_null
)
from educonnect_backend.model.academics import Assignment
from educonnect_backend.model.student import Student


class AssignmentStatusEnum(str, Enum):
    draft = "draft"
    published = "published"
    closed = "closed"


class AssignmentCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=16384)
    subject: str = Field(min_length=1, max_length=255)
    student_ids: List[str] = Field(default_factory=list, description="Record ids or business studentIds")
    due_date: datetime
    max_grade: float = Field(100, gt=0)
    attachments: List[Attachment] = Field(default_factory=list)
    status: AssignmentStatusEnum = AssignmentStatusEnum.published


class AssignmentUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=16384)
    subject: Optional[str] = Field(None, min_length=1, max_length=255)
    student_ids: Optional[List[str]] = None
    due_date: Optional[datetime] = None
    max_grade: Optional[float] = Field(None, gt=0)
    attachments: Optional[List[Attachment]] = None
    status: Optional[AssignmentStatusEnum] = None

    @field_validator('title', 'subject', 'due_date', 'max_grade', 'attachments', 'status')
    @classmethod
    def reject_null_fields(cls, v):
        return reject_null(v)


class AssignmentGet(BaseEntityGet):
    title: str
    description: Optional[str] = None
    subject: str
    teacher_id: str
    teacher: Optional[UserRef] = None
    student_ids: List[str] = Field(default_factory=list)
    students: List[StudentRef] = Field(default_factory=list)
    due_date: datetime
    max_grade: float
    attachments: List[Attachment] = Field(default_factory=list)
    status: AssignmentStatusEnum


class AssignmentList(AssignmentGet):
    pass


class AssignmentQuery(ListQuery):
    student_id: Optional[str] = None
    subject: Optional[str] = None
    status: Optional[AssignmentStatusEnum] = None


def assignment_search(db: Session, query, params: Optional[AssignmentQuery]):

    if params.student_id is not None:
        query = query.filter(Assignment.students.any(Student.id == params.student_id))
    if params.subject is not None:
        query = query.filter(Assignment.subject == params.subject)
    if params.status is not None:
        query = query.filter(Assignment.status == params.status)
    else:
        # drafts are only listed when asked for explicitly
        query = query.filter(Assignment.status != AssignmentStatusEnum.draft.value)

    return query.order_by(Assignment.due_date.desc())


class AssignmentInterface(EntityInterface):
    create = AssignmentCreate
    get = AssignmentGet
    list = AssignmentList
    update = AssignmentUpdate
    query = AssignmentQuery
    search = assignment_search
    endpoint = "assignments"
    model = Assignment
