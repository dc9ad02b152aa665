from datetime import datetime
from typing import Annotated, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from educonnect_backend.api.crud import create_db, delete_db, get_id_db, list_db, update_db
from educonnect_backend.api.utils import resolve_student, student_filter_id
from educonnect_backend.database import get_db
from educonnect_backend.interface.base import MessageResponse
from educonnect_backend.interface.behavior import (
    BehaviorCategoryEnum, BehaviorCreate, BehaviorGet, BehaviorInterface, BehaviorList,
    BehaviorQuery, BehaviorTypeEnum, BehaviorUpdate
)
from educonnect_backend.model.academics import Behavior
from educonnect_backend.permissions.auth import get_current_permissions
from educonnect_backend.permissions.core import check_action
from educonnect_backend.permissions.principal import Principal

behavior_router = APIRouter()


@behavior_router.get("", response_model=list[BehaviorList])
async def list_behavior(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    response: Response,
    student_id: Optional[str] = Query(None, alias="studentId"),
    type: Optional[BehaviorTypeEnum] = Query(None),
    category: Optional[BehaviorCategoryEnum] = Query(None),
    subject: Optional[str] = Query(None),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1),
    db: Session = Depends(get_db),
):
    params = BehaviorQuery(
        student_id=student_filter_id(db, student_id),
        type=type,
        category=category,
        subject=subject,
        start_date=start_date,
        end_date=end_date,
        skip=skip,
        limit=limit,
    )
    items, total = await list_db(permissions, db, params, BehaviorInterface)
    response.headers["X-Total-Count"] = str(total)
    return items


@behavior_router.get("/{id}", response_model=BehaviorGet)
async def get_behavior(
    id: str,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    return await get_id_db(permissions, db, id, BehaviorInterface)


@behavior_router.post("", response_model=BehaviorGet, status_code=status.HTTP_201_CREATED)
async def create_behavior(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    payload: BehaviorCreate,
    db: Session = Depends(get_db),
):
    check_action(permissions, Behavior, "create")
    student = resolve_student(db, payload.student_id)

    entity = payload.model_dump(exclude_unset=True)
    entity["student_id"] = student.id
    entity["teacher_id"] = permissions.get_user_id_or_throw()

    return await create_db(permissions, db, entity, BehaviorInterface.model, BehaviorInterface.get)


@behavior_router.put("/{id}", response_model=BehaviorGet)
def update_behavior(
    id: str,
    payload: BehaviorUpdate,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    return update_db(permissions, db, id, payload, BehaviorInterface.model, BehaviorInterface.get)


@behavior_router.delete("/{id}", response_model=MessageResponse)
def delete_behavior(
    id: str,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    return delete_db(permissions, db, id, BehaviorInterface.model)
