import logging
from typing import Annotated, Dict, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from educonnect_backend.api.crud import create_db, get_for_mutation, get_id_db, list_db, update_db
from educonnect_backend.api.exceptions import ForbiddenException, NotFoundException
from educonnect_backend.api.utils import resolve_student, student_filter_id
from educonnect_backend.database import get_db
from educonnect_backend.interface.base import UserRef, dump_attachments
from educonnect_backend.interface.messages import (
    ConversationGet, MessageCreate, MessageGet, MessageInterface, MessageList, MessageQuery, UnreadCount
)
from educonnect_backend.model.auth import User
from educonnect_backend.model.base import utcnow
from educonnect_backend.model.message import Message
from educonnect_backend.permissions.auth import get_current_permissions
from educonnect_backend.permissions.core import check_action, check_permissions, get_handler
from educonnect_backend.permissions.principal import Principal

logger = logging.getLogger(__name__)

messages_router = APIRouter()


@messages_router.post("", response_model=MessageGet, status_code=status.HTTP_201_CREATED)
async def create_message(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    payload: MessageCreate,
    db: Session = Depends(get_db),
):
    check_action(permissions, Message, "create")

    receiver = db.query(User).filter(User.id == payload.receiver_id).first()
    if receiver is None:
        raise NotFoundException(detail="Receiver not found")

    if not get_handler(Message).can_message(permissions.role, receiver.role):
        logger.warning("Rejected message from %s (%s) to %s (%s)", permissions.user_id, permissions.role, receiver.id, receiver.role)
        raise ForbiddenException(detail="Parents can only message teachers and teachers can only message parents")

    model_dump = payload.model_dump(exclude_unset=True, exclude={"attachments"})
    model_dump["attachments"] = dump_attachments(payload.attachments)
    # sender is always the current user
    model_dump["sender_id"] = permissions.get_user_id_or_throw()
    if payload.student_id is not None:
        model_dump["student_id"] = resolve_student(db, payload.student_id).id

    return await create_db(permissions, db, model_dump, MessageInterface.model, MessageInterface.get)


@messages_router.get("", response_model=list[MessageList])
async def list_messages(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    response: Response,
    conversation_with: Optional[str] = Query(None, alias="conversationWith"),
    student_id: Optional[str] = Query(None, alias="studentId"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1),
    db: Session = Depends(get_db),
):
    params = MessageQuery(
        conversation_with=conversation_with,
        student_id=student_filter_id(db, student_id),
        principal_id=permissions.user_id,
        skip=skip,
        limit=limit,
    )
    items, total = await list_db(permissions, db, params, MessageInterface)
    response.headers["X-Total-Count"] = str(total)
    return items


@messages_router.get("/conversations", response_model=list[ConversationGet])
def list_conversations(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    """One entry per conversation partner, most recently active first"""
    user_id = permissions.get_user_id_or_throw()

    messages = (
        check_permissions(permissions, Message, "list", db)
        .order_by(Message.created_at.desc())
        .all()
    )

    conversations: Dict[str, dict] = {}
    for message in messages:
        partner = message.receiver if message.sender_id == user_id else message.sender
        entry = conversations.get(partner.id)
        if entry is None:
            # newest first, so the first message seen is the latest
            entry = conversations[partner.id] = {
                "partner": UserRef.model_validate(partner),
                "last_message": MessageGet.model_validate(message),
                "unread_count": 0,
            }
        if message.receiver_id == user_id and not message.is_read:
            entry["unread_count"] += 1

    return [ConversationGet(**entry) for entry in conversations.values()]


@messages_router.get("/unread-count", response_model=UnreadCount)
def get_unread_count(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    count = (
        check_permissions(permissions, Message, "list", db)
        .filter(Message.receiver_id == permissions.get_user_id_or_throw(), Message.is_read.is_(False))
        .count()
    )
    return UnreadCount(unread_count=count)


@messages_router.get("/{id}", response_model=MessageGet)
async def get_message(
    id: str,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    return await get_id_db(permissions, db, id, MessageInterface)


@messages_router.put("/{id}/read", response_model=MessageGet)
def mark_message_read(
    id: str,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    message = get_for_mutation(permissions, db, id, Message, "read")

    return update_db(
        permissions, db, None, {"is_read": True, "read_at": utcnow()},
        Message, MessageGet, db_item=message,
    )
