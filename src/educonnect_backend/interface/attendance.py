import datetime as dt
from enum import Enum
from typing import Optional
from pydantic import Field, field_validator
from sqlalchemy.orm import Session
from educonnect_backend.interface.base import (
    BaseEntityGet, CamelModel, EntityInterface, ListQuery, StudentRef, UserRef, reject_null, to_date
)
from educonnect_backend.model.academics import Attendance


class AttendanceStatusEnum(str, Enum):
    present = "present"
    absent = "absent"
    late = "late"
    excused = "excused"


class AttendanceCreate(CamelModel):
    student_id: str = Field(description="Student record id or business studentId")
    date: dt.date
    subject: str = Field('', max_length=255)
    status: AttendanceStatusEnum
    notes: Optional[str] = Field(None, max_length=4096)

    @field_validator('date', mode='before')
    @classmethod
    def normalize_date(cls, v):
        return to_date(v)


class AttendanceUpdate(CamelModel):
    date: Optional[dt.date] = None
    subject: Optional[str] = Field(None, max_length=255)
    status: Optional[AttendanceStatusEnum] = None
    notes: Optional[str] = Field(None, max_length=4096)

    @field_validator('date', mode='before')
    @classmethod
    def normalize_date(cls, v):
        return to_date(v)

    @field_validator('date', 'subject', 'status')
    @classmethod
    def reject_null_fields(cls, v):
        return reject_null(v)


class AttendanceGet(BaseEntityGet):
    student_id: str
    teacher_id: str
    student: Optional[StudentRef] = None
    teacher: Optional[UserRef] = None
    date: dt.date
    subject: str = ''
    status: AttendanceStatusEnum
    notes: Optional[str] = None


class AttendanceList(AttendanceGet):
    pass


class AttendanceQuery(ListQuery):
    student_id: Optional[str] = None
    status: Optional[AttendanceStatusEnum] = None
    subject: Optional[str] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None

    @field_validator('start_date', 'end_date', mode='before')
    @classmethod
    def normalize_date(cls, v):
        return to_date(v)


def attendance_search(db: Session, query, params: Optional[AttendanceQuery]):

    if params.student_id is not None:
        query = query.filter(Attendance.student_id == params.student_id)
    if params.status is not None:
        query = query.filter(Attendance.status == params.status)
    if params.subject is not None:
        query = query.filter(Attendance.subject == params.subject)
    if params.start_date is not None:
        query = query.filter(Attendance.date >= params.start_date)
    if params.end_date is not None:
        query = query.filter(Attendance.date <= params.end_date)

    return query.order_by(Attendance.date.desc())


class AttendanceInterface(EntityInterface):
    create = AttendanceCreate
    get = AttendanceGet
    list = AttendanceList
    update = AttendanceUpdate
    query = AttendanceQuery
    search = attendance_search
    endpoint = "attendance"
    model = Attendance
