from datetime import date, datetime
from enum import Enum
from typing import List, Optional
from pydantic import Field, field_validator
from sqlalchemy.orm import Session
from educonnect_backend.interface.base import BaseEntityGet, CamelModel, EntityInterface, ListQuery, UserRef, reject_null
from educonnect_backend.model.student import Student, LINK_STATUS_LINKED, LINK_STATUS_AWAITING_PARENT


class LinkStatusEnum(str, Enum):
    linked = LINK_STATUS_LINKED
    awaiting_parent = LINK_STATUS_AWAITING_PARENT


class StudentCreate(CamelModel):
    student_id: str = Field(min_length=1, max_length=255, description="Unique school-issued identifier")
    first_name: str = Field(min_length=1, max_length=255)
    last_name: str = Field(min_length=1, max_length=255)
    date_of_birth: date
    grade: str = Field(min_length=1, max_length=63, description="Class level")
    section: Optional[str] = Field(None, max_length=63)
    subjects: List[str] = Field(default_factory=list)
    profile_picture: Optional[str] = Field(None, max_length=2048)
    enrollment_date: Optional[datetime] = None
    parent_ids: List[str] = Field(default_factory=list, description="Parent users linked on creation")
    teacher_ids: List[str] = Field(default_factory=list)

    @field_validator('student_id', 'first_name', 'last_name')
    @classmethod
    def strip_value(cls, v):
        if not v.strip():
            raise ValueError('Value cannot be empty or only whitespace')
        return v.strip()


class ChildCreate(CamelModel):
    """A parent registering one of their own children"""
    student_id: str = Field(min_length=1, max_length=255)
    first_name: str = Field(min_length=1, max_length=255)
    last_name: str = Field(min_length=1, max_length=255)
    date_of_birth: date
    grade: str = Field(min_length=1, max_length=63)
    section: Optional[str] = Field(None, max_length=63)
    subjects: List[str] = Field(default_factory=list)


class StudentUpdate(CamelModel):
    # studentId is immutable and therefore not accepted here
    first_name: Optional[str] = Field(None, min_length=1, max_length=255)
    last_name: Optional[str] = Field(None, min_length=1, max_length=255)
    date_of_birth: Optional[date] = None
    grade: Optional[str] = Field(None, min_length=1, max_length=63)
    section: Optional[str] = Field(None, max_length=63)
    subjects: Optional[List[str]] = None
    profile_picture: Optional[str] = Field(None, max_length=2048)
    enrollment_date: Optional[datetime] = None
    is_active: Optional[bool] = None
    parent_ids: Optional[List[str]] = Field(None, description="Parents to link in addition to the current ones")
    teacher_ids: Optional[List[str]] = None

    @field_validator('first_name', 'last_name', 'date_of_birth', 'grade', 'subjects',
                     'profile_picture', 'enrollment_date', 'is_active')
    @classmethod
    def reject_null_fields(cls, v):
        return reject_null(v)


class StudentGet(BaseEntityGet):
    student_id: str
    first_name: str
    last_name: str
    date_of_birth: date
    grade: str
    section: Optional[str] = None
    subjects: List[str] = Field(default_factory=list)
    profile_picture: Optional[str] = None
    enrollment_date: Optional[datetime] = None
    is_active: bool = True
    parent_ids: List[str] = Field(default_factory=list)
    teacher_ids: List[str] = Field(default_factory=list)
    parents: List[UserRef] = Field(default_factory=list)
    teachers: List[UserRef] = Field(default_factory=list)
    link_status: LinkStatusEnum


class StudentList(StudentGet):
    pass


class StudentQuery(ListQuery):
    grade: Optional[str] = None
    section: Optional[str] = None
    link_status: Optional[LinkStatusEnum] = None


def student_search(db: Session, query, params: Optional[StudentQuery]):

    query = query.filter(Student.is_active.is_(True))

    if params.grade is not None:
        query = query.filter(Student.grade == params.grade)
    if params.section is not None:
        query = query.filter(Student.section == params.section)
    if params.link_status == LINK_STATUS_LINKED:
        query = query.filter(Student.parents.any())
    elif params.link_status == LINK_STATUS_AWAITING_PARENT:
        query = query.filter(~Student.parents.any())

    return query.order_by(Student.last_name, Student.first_name)


class StudentInterface(EntityInterface):
    create = StudentCreate
    get = StudentGet
    list = StudentList
    update = StudentUpdate
    query = StudentQuery
    search = student_search
    endpoint = "students"
    model = Student
