from typing import Any, Dict, Optional, Tuple, Type
from sqlalchemy import false
from sqlalchemy.orm import Session, Query
from educonnect_backend.permissions.principal import Principal
from educonnect_backend.api.exceptions import ForbiddenException


class PermissionHandler:
    """Base class for entity-specific permission handlers.

    Visibility is table driven: ``VISIBILITY`` maps a role to the name of a method
    building the SQL criterion for that role, or to ``None`` for unrestricted access.
    Roles missing from the table see nothing.
    """

    VISIBILITY: Dict[str, Optional[str]] = {}

    # Columns holding the id of a user owning a record
    OWNER_FIELDS: Tuple[str, ...] = ()

    # Actions on an existing record that additionally require ownership
    OWNERSHIP_ACTIONS: Tuple[str, ...] = ("update", "delete")

    # Whether admins bypass the visibility table
    ADMIN_UNRESTRICTED: bool = True

    def __init__(self, entity: Type[Any], resource_name: Optional[str] = None):
        self.entity = entity
        self.resource_name = resource_name or entity.__tablename__

    def check_admin(self, principal: Principal) -> bool:
        """Check if principal has admin privileges"""
        return principal.is_admin

    def check_general_permission(self, principal: Principal, action: str) -> bool:
        """Check if principal's role grants action on this resource"""
        return principal.permitted(self.resource_name, action)

    def visibility_filter(self, principal: Principal, db: Session):
        """Criterion restricting reads to records visible to principal, None when unrestricted"""
        if self.ADMIN_UNRESTRICTED and self.check_admin(principal):
            return None

        if principal.role not in self.VISIBILITY:
            return false()

        builder = self.VISIBILITY[principal.role]
        if builder is None:
            return None

        return getattr(self, builder)(principal, db)

    def build_query(self, principal: Principal, action: str, db: Session) -> Query:
        """Build a query filtered down to the records visible to principal"""
        if not self.check_general_permission(principal, action):
            raise ForbiddenException(detail=f"Not allowed to {action} {self.resource_name}")

        query = db.query(self.entity)
        criterion = self.visibility_filter(principal, db)

        if criterion is not None:
            query = query.filter(criterion)

        return query

    def is_owner(self, principal: Principal, record: Any) -> bool:
        return any(
            getattr(record, field, None) is not None and str(getattr(record, field)) == str(principal.user_id)
            for field in self.OWNER_FIELDS
        )

    def can_perform_action(self, principal: Principal, action: str, record: Optional[Any] = None) -> bool:
        """Check if principal can perform an action, on a concrete record when given.

        Args:
            principal: Current principal
            action: Action to perform (e.g., create, update, delete)
            record: Existing record the action targets, None for create
        """
        if not self.check_general_permission(principal, action):
            return False

        if record is None or self.check_admin(principal):
            return True

        if action in self.OWNERSHIP_ACTIONS:
            return self.is_owner(principal, record)

        return True


class PermissionRegistry:
    """Registry for managing entity permission handlers"""

    _instance = None
    _handlers: Dict[Type[Any], PermissionHandler] = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def register(self, entity: Type[Any], handler: PermissionHandler):
        """Register a permission handler for an entity"""
        self._handlers[entity] = handler

    def get_handler(self, entity: Type[Any]) -> Optional[PermissionHandler]:
        """Get the permission handler for an entity"""
        return self._handlers.get(entity)

    def check_permissions(self, principal: Principal, entity: Type[Any], action: str, db: Session) -> Query:
        """Check permissions and return filtered query"""
        handler = self.get_handler(entity)
        if handler is None:
            raise ForbiddenException(detail=f"No permission handler for {entity.__tablename__}")
        return handler.build_query(principal, action, db)


# Global registry instance
permission_registry = PermissionRegistry()
