from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import Field, field_validator, model_validator
from sqlalchemy.orm import Session
from educonnect_backend.interface.base import (
    BaseEntityGet, CamelModel, EntityInterface, ListQuery, StudentRef, UserRef, reject_null
)
from educonnect_backend.model.academics import Grade


class GradeTypeEnum(str, Enum):
    assignment = "assignment"
    quiz = "quiz"
    exam = "exam"
    project = "project"
    participation = "participation"
    other = "other"


class AssignmentRef(CamelModel):
    id: str
    title: str


class GradeCreate(CamelModel):
    student_id: str = Field(description="Student record id or business studentId")
    subject: str = Field(min_length=1, max_length=255)
    assignment_id: Optional[str] = None
    grade: float = Field(ge=0)
    max_grade: float = Field(100, gt=0)
    grade_type: GradeTypeEnum = GradeTypeEnum.assignment
    comments: Optional[str] = Field(None, max_length=4096)
    date: Optional[datetime] = None

    @model_validator(mode='after')
    def check_grade_bounds(self):
        if self.grade > self.max_grade:
            raise ValueError('Grade cannot exceed maxGrade')
        return self


class GradeUpdate(CamelModel):
    student_id: Optional[str] = None
    subject: Optional[str] = Field(None, min_length=1, max_length=255)
    assignment_id: Optional[str] = None
    grade: Optional[float] = Field(None, ge=0)
    max_grade: Optional[float] = Field(None, gt=0)
    grade_type: Optional[GradeTypeEnum] = None
    comments: Optional[str] = Field(None, max_length=4096)
    date: Optional[datetime] = None

    @field_validator('student_id', 'subject', 'grade', 'max_grade', 'grade_type', 'date')
    @classmethod
    def reject_null_fields(cls, v):
        return reject_null(v)


class GradeGet(BaseEntityGet):
    student_id: str
    teacher_id: str
    assignment_id: Optional[str] = None
    student: Optional[StudentRef] = None
    teacher: Optional[UserRef] = None
    assignment: Optional[AssignmentRef] = None
    subject: str
    grade: float
    max_grade: float
    percentage: float
    grade_type: GradeTypeEnum
    comments: Optional[str] = None
    date: datetime


class GradeList(GradeGet):
    pass


class GradeQuery(ListQuery):
    student_id: Optional[str] = None
    subject: Optional[str] = None
    grade_type: Optional[GradeTypeEnum] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


def grade_search(db: Session, query, params: Optional[GradeQuery]):

    if params.student_id is not None:
        query = query.filter(Grade.student_id == params.student_id)
    if params.subject is not None:
        query = query.filter(Grade.subject == params.subject)
    if params.grade_type is not None:
        query = query.filter(Grade.grade_type == params.grade_type)
    if params.start_date is not None:
        query = query.filter(Grade.date >= params.start_date)
    if params.end_date is not None:
        query = query.filter(Grade.date <= params.end_date)

    return query.order_by(Grade.date.desc())


class GradeInterface(EntityInterface):
    create = GradeCreate
    get = GradeGet
    list = GradeList
    update = GradeUpdate
    query = GradeQuery
    search = grade_search
    endpoint = "grades"
    model = Grade
