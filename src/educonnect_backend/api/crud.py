import logging
from enum import Enum
from typing import Any, Callable, Optional
from fastapi import HTTPException
from pydantic import BaseModel
from sqlalchemy import exc
from sqlalchemy.orm import Session
from educonnect_backend.api.exceptions import BadRequestException, NotFoundException, InternalServerException
from educonnect_backend.permissions.core import check_permissions, check_action
from educonnect_backend.permissions.principal import Principal
from educonnect_backend.interface.base import EntityInterface, ListQuery
from educonnect_backend.model.base import utcnow

logger = logging.getLogger(__name__)


def _column_values(entity: BaseModel | dict) -> dict:
    if isinstance(entity, BaseModel):
        entity = entity.model_dump(exclude_unset=True)

    values = {}
    for key, value in entity.items():
        values[key] = value.value if isinstance(value, Enum) else value
    return values


def _integrity_message(e: exc.IntegrityError) -> str:
    # first line of the driver message, without the statement
    error_msg = str(e.orig) if getattr(e, 'orig', None) is not None else str(e)
    if 'DETAIL:' in error_msg:
        main_error = error_msg.split('\n')[0]
        detail_part = error_msg.split('DETAIL:')[1].split('\n')[0].strip()
        return f"{main_error}. {detail_part}"
    return error_msg.split('\n')[0]


def commit_or_raise(db: Session, db_item: Any = None, action: str = "saving"):
    """Commit the session, mapping database failures onto HTTP exceptions"""
    try:
        db.commit()
        if db_item is not None:
            db.refresh(db_item)
    except exc.IntegrityError as e:
        db.rollback()
        raise BadRequestException(detail=_integrity_message(e))
    except exc.SQLAlchemyError:
        db.rollback()
        logger.exception(f"Database error while {action}")
        raise InternalServerException(detail=f"An unexpected database error occurred while {action}.")


async def create_db(permissions: Principal, db: Session, entity: BaseModel | dict, db_type: Any, response_type: BaseModel, post_create: Optional[Callable] = None, action: str = "create"):
    """Create a record; post_create runs inside the same transaction before the commit"""

    check_action(permissions, db_type, action)

    model_dump = _column_values(entity)

    try:
        db_item = db_type(**model_dump)
        db.add(db_item)
        db.flush()

        if post_create is not None:
            post_create(db_item, db)

    except HTTPException:
        db.rollback()
        raise
    except exc.IntegrityError as e:
        db.rollback()
        raise BadRequestException(detail=_integrity_message(e))
    except exc.SQLAlchemyError:
        db.rollback()
        logger.exception("Database error while creating %s", db_type.__tablename__)
        raise InternalServerException(detail="An unexpected database error occurred while creating.")

    commit_or_raise(db, db_item, "creating")

    return response_type.model_validate(db_item, from_attributes=True)


def get_db_item(permissions: Principal, db: Session, id: str, db_type: Any, scope: str = "get"):
    """Fetch a single visible record; invisible records are reported as missing"""

    query = check_permissions(permissions, db_type, scope, db)

    item = query.filter(db_type.id == id).first()

    if item is None:
        raise NotFoundException(detail=f"{db_type.__name__} not found")

    return item


async def get_id_db(permissions: Principal, db: Session, id: str, interface: EntityInterface, scope: str = "get"):

    item = get_db_item(permissions, db, id, interface.model, scope)

    return interface.get.model_validate(item, from_attributes=True)


async def list_db(permissions: Principal, db: Session, params: ListQuery, interface: EntityInterface):

    db_type = interface.model
    query_func = interface.search

    query = check_permissions(permissions, db_type, "list", db)

    query = query_func(db, query, params)

    total = query.order_by(None).count()

    if params.limit is not None:
        query = query.limit(params.limit)
    if params.skip is not None:
        query = query.offset(params.skip)

    query_result = [interface.list.model_validate(entity, from_attributes=True) for entity in query.all()]

    return query_result, total


def get_for_mutation(permissions: Principal, db: Session, id: str, db_type: Any, action: str):
    """Existence first (404), then role and ownership (403)"""

    db_item = db.query(db_type).filter(db_type.id == id).first()

    if db_item is None:
        raise NotFoundException(detail=f"{db_type.__name__} not found")

    check_action(permissions, db_type, action, db_item)

    return db_item


def update_db(permissions: Principal, db: Session, id: str | None, entity: BaseModel | dict, db_type: Any, response_type: BaseModel, db_item=None, post_update: Optional[Callable] = None, action: str = "update"):
    """Shallow merge of the supplied fields; post_update may validate the merged record or adjust relations"""

    if id is not None:
        db_item = get_for_mutation(permissions, db, id, db_type, action)

    values = _column_values(entity)

    try:
        for key, attr in values.items():
            setattr(db_item, key, attr)

        if hasattr(db_item, "updated_at"):
            db_item.updated_at = utcnow()

        if post_update is not None:
            post_update(db_item, db)

    except HTTPException:
        db.rollback()
        raise

    commit_or_raise(db, db_item, "updating")

    return response_type.model_validate(db_item, from_attributes=True)


def delete_db(permissions: Principal, db: Session, id: str, db_type: Any):

    entity = get_for_mutation(permissions, db, id, db_type, "delete")

    db.delete(entity)
    commit_or_raise(db, action="deleting")

    return {"message": f"{db_type.__name__} deleted successfully"}
