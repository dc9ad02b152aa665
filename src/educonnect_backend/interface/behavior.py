from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import Field, field_validator
from sqlalchemy.orm import Session
from educonnect_backend.interface.base import (
    BaseEntityGet, CamelModel, EntityInterface, ListQuery, StudentRef, UserRef, reject_null
)
from educonnect_backend.model.academics import Behavior


class BehaviorTypeEnum(str, Enum):
    positive = "positive"
    negative = "negative"
    neutral = "neutral"


class BehaviorCategoryEnum(str, Enum):
    academic = "academic"
    social = "social"
    behavioral = "behavioral"
    participation = "participation"
    other = "other"


class SeverityEnum(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


class BehaviorCreate(CamelModel):
    student_id: str = Field(description="Student record id or business studentId")
    type: BehaviorTypeEnum
    category: BehaviorCategoryEnum
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1, max_length=16384)
    date: Optional[datetime] = None
    severity: SeverityEnum = SeverityEnum.medium
    subject: Optional[str] = Field(None, max_length=255)


class BehaviorUpdate(CamelModel):
    type: Optional[BehaviorTypeEnum] = None
    category: Optional[BehaviorCategoryEnum] = None
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1, max_length=16384)
    date: Optional[datetime] = None
    severity: Optional[SeverityEnum] = None
    subject: Optional[str] = Field(None, max_length=255)

    @field_validator('type', 'category', 'title', 'description', 'date', 'severity')
    @classmethod
    def reject_null_fields(cls, v):
        return reject_null(v)


class BehaviorGet(BaseEntityGet):
    student_id: str
    teacher_id: str
    student: Optional[StudentRef] = None
    teacher: Optional[UserRef] = None
    type: BehaviorTypeEnum
    category: BehaviorCategoryEnum
    title: str
    description: str
    date: datetime
    severity: SeverityEnum
    subject: Optional[str] = None


class BehaviorList(BehaviorGet):
    pass


class BehaviorQuery(ListQuery):
    student_id: Optional[str] = None
    type: Optional[BehaviorTypeEnum] = None
    category: Optional[BehaviorCategoryEnum] = None
    subject: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


def behavior_search(db: Session, query, params: Optional[BehaviorQuery]):

    if params.student_id is not None:
        query = query.filter(Behavior.student_id == params.student_id)
    if params.type is not None:
        query = query.filter(Behavior.type == params.type)
    if params.category is not None:
        query = query.filter(Behavior.category == params.category)
    if params.subject is not None:
        query = query.filter(Behavior.subject == params.subject)
    if params.start_date is not None:
        query = query.filter(Behavior.date >= params.start_date)
    if params.end_date is not None:
        query = query.filter(Behavior.date <= params.end_date)

    return query.order_by(Behavior.date.desc())


class BehaviorInterface(EntityInterface):
    create = BehaviorCreate
    get = BehaviorGet
    list = BehaviorList
    update = BehaviorUpdate
    query = BehaviorQuery
    search = behavior_search
    endpoint = "behavior"
    model = Behavior
