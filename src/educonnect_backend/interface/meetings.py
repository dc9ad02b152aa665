from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, Optional
from pydantic import Field, field_validator
from sqlalchemy.orm import Session
from educonnect_backend.interface.base import (
    BaseEntityGet, CamelModel, EntityInterface, ListQuery, StudentRef, UserRef, reject_null
)
from educonnect_backend.model.meeting import Meeting


class MeetingStatusEnum(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"
    completed = "completed"


class MeetingLocationEnum(str, Enum):
    in_person = "in-person"
    online = "online"
    phone = "phone"


# current status -> statuses it may move to; cancelled and completed are terminal
MEETING_STATUS_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "pending": frozenset({"confirmed", "cancelled"}),
    "confirmed": frozenset({"completed", "cancelled", "pending"}),
    "cancelled": frozenset(),
    "completed": frozenset(),
}


def is_valid_transition(current: str, target: str) -> bool:
    if current == target:
        return True
    return target in MEETING_STATUS_TRANSITIONS.get(current, frozenset())


class MeetingCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=16384)
    parent_id: Optional[str] = Field(None, description="Defaults to the requesting parent")
    teacher_id: Optional[str] = Field(None, description="Defaults to the requesting teacher")
    student_id: str = Field(description="Student record id or business studentId")
    scheduled_date: datetime
    duration: int = Field(30, gt=0, description="Minutes")
    location: MeetingLocationEnum = MeetingLocationEnum.in_person
    meeting_link: Optional[str] = Field(None, max_length=2048)
    notes: Optional[str] = Field(None, max_length=16384)


class MeetingUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=16384)
    scheduled_date: Optional[datetime] = None
    duration: Optional[int] = Field(None, gt=0)
    location: Optional[MeetingLocationEnum] = None
    meeting_link: Optional[str] = Field(None, max_length=2048)
    notes: Optional[str] = Field(None, max_length=16384)

    @field_validator('title', 'scheduled_date', 'duration', 'location')
    @classmethod
    def reject_null_fields(cls, v):
        return reject_null(v)


class MeetingStatusUpdate(CamelModel):
    status: MeetingStatusEnum


class MeetingGet(BaseEntityGet):
    title: str
    description: Optional[str] = None
    parent_id: str
    teacher_id: str
    student_id: str
    parent: Optional[UserRef] = None
    teacher: Optional[UserRef] = None
    student: Optional[StudentRef] = None
    scheduled_date: datetime
    duration: int
    status: MeetingStatusEnum
    location: MeetingLocationEnum
    meeting_link: Optional[str] = None
    notes: Optional[str] = None
    requested_by: str


class MeetingList(MeetingGet):
    pass


class MeetingQuery(ListQuery):
    status: Optional[MeetingStatusEnum] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


def meeting_search(db: Session, query, params: Optional[MeetingQuery]):

    if params.status is not None:
        query = query.filter(Meeting.status == params.status)
    if params.start_date is not None:
        query = query.filter(Meeting.scheduled_date >= params.start_date)
    if params.end_date is not None:
        query = query.filter(Meeting.scheduled_date <= params.end_date)

    return query.order_by(Meeting.scheduled_date.asc())


class MeetingInterface(EntityInterface):
    create = MeetingCreate
    get = MeetingGet
    list = MeetingList
    update = MeetingUpdate
    query = MeetingQuery
    search = meeting_search
    endpoint = "meetings"
    model = Meeting
