from datetime import datetime
from typing import List, Optional
from pydantic import Field, field_validator
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session
from educonnect_backend.interface.base import (
    Attachment, CamelModel, EntityInterface, ListQuery, StudentRef, UserRef
)
from educonnect_backend.model.message import Message


class MessageCreate(CamelModel):
    # sender is always the current user; set in API
    receiver_id: str
    student_id: Optional[str] = Field(None, description="Student the conversation is about")
    subject: str = Field('', max_length=255)
    content: str = Field(min_length=1, max_length=16384)
    attachments: List[Attachment] = Field(default_factory=list)

    @field_validator('content')
    @classmethod
    def validate_content(cls, v):
        if not v.strip():
            raise ValueError('Message content cannot be empty')
        return v


class MessageGet(CamelModel):
    id: str
    created_at: Optional[datetime] = None
    sender_id: str
    receiver_id: str
    student_id: Optional[str] = None
    sender: Optional[UserRef] = Field(None, description="Sender details")
    receiver: Optional[UserRef] = Field(None, description="Receiver details")
    student: Optional[StudentRef] = None
    subject: str = ''
    content: str
    attachments: List[Attachment] = Field(default_factory=list)
    is_read: bool = False
    read_at: Optional[datetime] = None


class MessageList(MessageGet):
    pass


class ConversationGet(CamelModel):
    partner: UserRef
    last_message: MessageGet
    unread_count: int = 0


class UnreadCount(CamelModel):
    unread_count: int


class MessageQuery(ListQuery):
    conversation_with: Optional[str] = Field(None, description="Only messages exchanged with this user")
    student_id: Optional[str] = None
    # set by the API to the requesting user
    principal_id: Optional[str] = Field(None, exclude=True)


def message_search(db: Session, query, params: Optional[MessageQuery]):

    if params.conversation_with is not None and params.principal_id is not None:
        query = query.filter(or_(
            and_(Message.sender_id == params.principal_id, Message.receiver_id == params.conversation_with),
            and_(Message.sender_id == params.conversation_with, Message.receiver_id == params.principal_id),
        ))
    if params.student_id is not None:
        query = query.filter(Message.student_id == params.student_id)

    return query.order_by(Message.created_at.desc())


class MessageInterface(EntityInterface):
    create = MessageCreate
    get = MessageGet
    list = MessageList
    query = MessageQuery
    search = message_search
    endpoint = "messages"
    model = Message
