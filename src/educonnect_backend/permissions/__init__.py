"""
Role-scoped permission system for the EduConnect backend.

Main components:
- principal: Principal carrying identity, role and children, with role claims
- handlers: Base permission handler and registry
- handlers_impl: Concrete permission handlers, one per resource family
- query_builders: Reusable criteria over children and announcement expiry
- core: Registration and permission checking entry points
- auth: Authentication and principal creation
"""

from .principal import (
    Principal,
    Claims,
    build_claims,
    ROLE_PARENT,
    ROLE_TEACHER,
    ROLE_ADMIN,
)

from .core import (
    check_permissions,
    check_action,
    initialize_permission_handlers,
)

from .auth import (
    get_current_principal,
    get_current_permissions,
    get_current_user,
    AuthenticationService,
    PrincipalBuilder,
)

from .handlers import (
    PermissionHandler,
    PermissionRegistry,
    permission_registry,
)

__all__ = [
    "Principal",
    "Claims",
    "build_claims",
    "ROLE_PARENT",
    "ROLE_TEACHER",
    "ROLE_ADMIN",
    "check_permissions",
    "check_action",
    "initialize_permission_handlers",
    "get_current_principal",
    "get_current_permissions",
    "get_current_user",
    "AuthenticationService",
    "PrincipalBuilder",
    "PermissionHandler",
    "PermissionRegistry",
    "permission_registry",
]
