from enum import Enum
from typing import List, Optional
from pydantic import EmailStr, Field, field_validator
from sqlalchemy import or_
from sqlalchemy.orm import Session
from educonnect_backend.interface.base import BaseEntityGet, CamelModel, EntityInterface, ListQuery, reject_null
from educonnect_backend.model.auth import User


class UserRoleEnum(str, Enum):
    parent = "parent"
    teacher = "teacher"
    admin = "admin"


class RegisterRoleEnum(str, Enum):
    parent = "parent"
    teacher = "teacher"


def _strip_name(v):
    if v is not None and not v.strip():
        raise ValueError('Name cannot be empty or only whitespace')
    return v.strip() if v else v


class UserRegister(CamelModel):
    first_name: str = Field(min_length=1, max_length=255, description="User's first name")
    last_name: str = Field(min_length=1, max_length=255, description="User's last name")
    email: EmailStr = Field(description="User's email address")
    password: str = Field(min_length=6, max_length=72, description="Plain text password, stored hashed")
    role: RegisterRoleEnum = Field(RegisterRoleEnum.parent, description="Self-registration is limited to parents and teachers")
    phone: Optional[str] = Field(None, max_length=63)
    address: Optional[str] = Field(None, max_length=1024)

    @field_validator('first_name', 'last_name')
    @classmethod
    def validate_names(cls, v):
        return _strip_name(v)

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.lower()


class UserLogin(CamelModel):
    email: str
    password: str


class UserGet(BaseEntityGet):
    first_name: str
    last_name: str
    email: str
    role: str
    phone: Optional[str] = None
    address: Optional[str] = None
    profile_picture: Optional[str] = None
    is_active: bool = True
    associated_ids: List[str] = Field(default_factory=list, description="Student ids of a parent's children")


class UserList(UserGet):
    pass


class LoginResponse(CamelModel):
    token: str
    user: UserGet


class ProfileUpdate(CamelModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=255)
    last_name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=63)
    address: Optional[str] = Field(None, max_length=1024)
    profile_picture: Optional[str] = Field(None, max_length=2048)

    @field_validator('first_name', 'last_name')
    @classmethod
    def validate_names(cls, v):
        return _strip_name(v)

    @field_validator('first_name', 'last_name', 'profile_picture')
    @classmethod
    def reject_null_fields(cls, v):
        return reject_null(v)


class UserUpdate(ProfileUpdate):
    """Administrative update of any user"""
    role: Optional[UserRoleEnum] = None
    is_active: Optional[bool] = None
    associated_ids: Optional[List[str]] = None

    @field_validator('role', 'is_active', 'associated_ids')
    @classmethod
    def reject_null_admin_fields(cls, v):
        return reject_null(v)


class PasswordChange(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6, max_length=72)


class UserQuery(ListQuery):
    role: Optional[UserRoleEnum] = None
    search: Optional[str] = None


def user_search(db: Session, query, params: Optional[UserQuery]):

    query = query.filter(User.is_active.is_(True))

    if params.role is not None:
        query = query.filter(User.role == params.role)
    if params.search:
        pattern = f"%{params.search}%"
        query = query.filter(or_(
            User.first_name.ilike(pattern),
            User.last_name.ilike(pattern),
            User.email.ilike(pattern),
        ))

    return query.order_by(User.last_name, User.first_name)


class UserInterface(EntityInterface):
    create = UserRegister
    get = UserGet
    list = UserList
    update = UserUpdate
    query = UserQuery
    search = user_search
    endpoint = "users"
    model = User
