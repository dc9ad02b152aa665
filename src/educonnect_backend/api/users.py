from typing import Annotated, Optional
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session
from educonnect_backend.api.crud import commit_or_raise, get_id_db, list_db, update_db
from educonnect_backend.api.exceptions import NotFoundException, UnauthorizedException
from educonnect_backend.database import get_db
from educonnect_backend.interface.base import MessageResponse
from educonnect_backend.interface.tokens import hash_password, verify_password
from educonnect_backend.interface.users import (
    PasswordChange, ProfileUpdate, UserGet, UserInterface, UserList, UserQuery, UserRoleEnum, UserUpdate
)
from educonnect_backend.model.auth import User
from educonnect_backend.permissions.auth import get_current_permissions
from educonnect_backend.permissions.principal import Principal

users_router = APIRouter()


@users_router.get("", response_model=list[UserList])
async def list_users(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    response: Response,
    role: Optional[UserRoleEnum] = Query(None),
    search: Optional[str] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1),
    db: Session = Depends(get_db),
):
    params = UserQuery(role=role, search=search, skip=skip, limit=limit)
    items, total = await list_db(permissions, db, params, UserInterface)
    response.headers["X-Total-Count"] = str(total)
    return items


@users_router.put("/profile", response_model=UserGet)
def update_profile(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
):
    return update_db(permissions, db, permissions.get_user_id_or_throw(), payload, User, UserGet, action="update_self")


@users_router.put("/password", response_model=MessageResponse)
def change_password(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    payload: PasswordChange,
    db: Session = Depends(get_db),
):
    user = db.query(User).filter(User.id == permissions.get_user_id_or_throw()).first()

    if user is None:
        raise NotFoundException(detail="User not found")

    if not verify_password(payload.current_password, user.password):
        raise UnauthorizedException("Current password is incorrect")

    user.password = hash_password(payload.new_password)
    commit_or_raise(db, user, "changing password")

    return {"message": "Password updated successfully"}


@users_router.get("/{id}", response_model=UserGet)
async def get_user(
    id: str,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    return await get_id_db(permissions, db, id, UserInterface)


@users_router.put("/{id}", response_model=UserGet)
def update_user(
    id: str,
    payload: UserUpdate,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    return update_db(permissions, db, id, payload, UserInterface.model, UserInterface.get)
