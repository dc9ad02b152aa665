from abc import ABC
from datetime import datetime
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for all DTOs: snake_case in Python, camelCase on the wire"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
    )


class ListQuery(CamelModel):
    skip: Optional[int] = 0
    limit: Optional[int] = 100


class EntityInterface(ABC):
    create: BaseModel = None
    get: BaseModel = None
    list: BaseModel = None
    update: BaseModel = None
    query: BaseModel = None
    search: Any = None
    endpoint: str = None
    model: Any = None


class BaseEntityList(CamelModel):
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Update timestamp")


class BaseEntityGet(BaseEntityList):
    id: str


class Attachment(CamelModel):
    filename: str
    url: str
    uploaded_at: Optional[datetime] = None


class UserRef(CamelModel):
    """Display subset of a user embedded in other records"""
    id: str
    first_name: str
    last_name: str
    email: str
    role: str
    phone: Optional[str] = None


class StudentRef(CamelModel):
    """Display subset of a student embedded in other records"""
    id: str
    first_name: str
    last_name: str
    student_id: str
    grade: str


class MessageResponse(CamelModel):
    message: str


def dump_attachments(attachments: Optional[List[Attachment]]) -> list:
    # stored as JSON, so datetimes are serialized here
    return [attachment.model_dump(mode="json", by_alias=True) for attachment in attachments or []]


def to_date(value: Any) -> Any:
    """Truncate datetimes (or ISO datetime strings) to their calendar day"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    return value


def reject_null(value: Any) -> Any:
    """Update fields may be omitted but not cleared"""
    if value is None:
        raise ValueError('Value cannot be null')
    return value
