from typing import Annotated, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from educonnect_backend.api.crud import create_db, delete_db, get_id_db, list_db, update_db
from educonnect_backend.api.exceptions import BadRequestException
from educonnect_backend.api.utils import resolve_students
from educonnect_backend.database import get_db
from educonnect_backend.interface.announcements import (
    AnnouncementCreate, AnnouncementGet, AnnouncementInterface, AnnouncementList,
    AnnouncementQuery, AnnouncementUpdate, AudienceEnum, PriorityEnum
)
from educonnect_backend.interface.base import MessageResponse, dump_attachments
from educonnect_backend.model.announcement import Announcement
from educonnect_backend.permissions.auth import get_current_permissions
from educonnect_backend.permissions.core import check_action
from educonnect_backend.permissions.principal import Principal

announcements_router = APIRouter()


@announcements_router.get("", response_model=list[AnnouncementList])
async def list_announcements(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    response: Response,
    priority: Optional[PriorityEnum] = Query(None),
    target_audience: Optional[AudienceEnum] = Query(None, alias="targetAudience"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1),
    db: Session = Depends(get_db),
):
    params = AnnouncementQuery(priority=priority, target_audience=target_audience, skip=skip, limit=limit)
    items, total = await list_db(permissions, db, params, AnnouncementInterface)
    response.headers["X-Total-Count"] = str(total)
    return items


@announcements_router.get("/{id}", response_model=AnnouncementGet)
async def get_announcement(
    id: str,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    return await get_id_db(permissions, db, id, AnnouncementInterface)


@announcements_router.post("", response_model=AnnouncementGet, status_code=status.HTTP_201_CREATED)
async def create_announcement(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    payload: AnnouncementCreate,
    db: Session = Depends(get_db),
):
    check_action(permissions, Announcement, "create")

    entity = payload.model_dump(exclude_unset=True, exclude={"target_student_ids", "attachments"})
    entity["target_students"] = resolve_students(db, payload.target_student_ids)
    entity["attachments"] = dump_attachments(payload.attachments)
    entity["author_id"] = permissions.get_user_id_or_throw()

    return await create_db(permissions, db, entity, AnnouncementInterface.model, AnnouncementInterface.get)


@announcements_router.put("/{id}", response_model=AnnouncementGet)
def update_announcement(
    id: str,
    payload: AnnouncementUpdate,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    entity = payload.model_dump(exclude_unset=True, exclude={"target_student_ids", "attachments"})
    if payload.attachments is not None:
        entity["attachments"] = dump_attachments(payload.attachments)

    def update_targets(announcement: Announcement, db: Session):
        if payload.target_student_ids is not None:
            announcement.target_students = resolve_students(db, payload.target_student_ids)
        if announcement.target_audience == AudienceEnum.specific.value and not announcement.target_students:
            raise BadRequestException(detail="targetStudentIds is required when targetAudience is specific")

    return update_db(permissions, db, id, entity, AnnouncementInterface.model, AnnouncementInterface.get, post_update=update_targets)


@announcements_router.delete("/{id}", response_model=MessageResponse)
def delete_announcement(
    id: str,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    return delete_db(permissions, db, id, AnnouncementInterface.model)
