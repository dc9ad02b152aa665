from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import Field, field_validator, model_validator
from sqlalchemy.orm import Session
from educonnect_backend.interface.base import (
    Attachment, BaseEntityGet, CamelModel, EntityInterface, ListQuery, StudentRef, UserRef, reject_null
)
from educonnect_backend.model.announcement import Announcement
from educonnect_backend.permissions.query_builders import AnnouncementQueryBuilder


class AudienceEnum(str, Enum):
    all = "all"
    parents = "parents"
    teachers = "teachers"
    specific = "specific"


class PriorityEnum(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"


class AnnouncementCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1, max_length=16384)
    target_audience: AudienceEnum = AudienceEnum.all
    target_student_ids: List[str] = Field(default_factory=list, description="Record ids or business studentIds")
    priority: PriorityEnum = PriorityEnum.medium
    attachments: List[Attachment] = Field(default_factory=list)
    expires_at: Optional[datetime] = None

    @model_validator(mode='after')
    def check_specific_targets(self):
        if self.target_audience == AudienceEnum.specific.value and not self.target_student_ids:
            raise ValueError('targetStudentIds is required when targetAudience is specific')
        return self


class AnnouncementUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1, max_length=16384)
    target_audience: Optional[AudienceEnum] = None
    target_student_ids: Optional[List[str]] = None
    priority: Optional[PriorityEnum] = None
    attachments: Optional[List[Attachment]] = None
    is_active: Optional[bool] = None
    expires_at: Optional[datetime] = None

    @field_validator('title', 'content', 'target_audience', 'priority', 'attachments', 'is_active')
    @classmethod
    def reject_null_fields(cls, v):
        return reject_null(v)


class AnnouncementGet(BaseEntityGet):
    title: str
    content: str
    author_id: str
    author: Optional[UserRef] = None
    target_audience: AudienceEnum
    target_student_ids: List[str] = Field(default_factory=list)
    target_students: List[StudentRef] = Field(default_factory=list)
    priority: PriorityEnum
    attachments: List[Attachment] = Field(default_factory=list)
    is_active: bool = True
    expires_at: Optional[datetime] = None


class AnnouncementList(AnnouncementGet):
    pass


class AnnouncementQuery(ListQuery):
    priority: Optional[PriorityEnum] = None
    target_audience: Optional[AudienceEnum] = None


def announcement_search(db: Session, query, params: Optional[AnnouncementQuery]):

    query = query.filter(AnnouncementQueryBuilder.active_criterion())

    if params.priority is not None:
        query = query.filter(Announcement.priority == params.priority)
    if params.target_audience is not None:
        query = query.filter(Announcement.target_audience == params.target_audience)

    return query.order_by(Announcement.created_at.desc())


class AnnouncementInterface(EntityInterface):
    create = AnnouncementCreate
    get = AnnouncementGet
    list = AnnouncementList
    update = AnnouncementUpdate
    query = AnnouncementQuery
    search = announcement_search
    endpoint = "announcements"
    model = Announcement
