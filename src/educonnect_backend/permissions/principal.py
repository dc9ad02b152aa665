from collections import defaultdict
from typing import Optional, Dict, List, Set, Tuple
from pydantic import BaseModel, ConfigDict, model_validator, Field, PrivateAttr
from educonnect_backend.api.exceptions import UnauthorizedException

ROLE_PARENT = "parent"
ROLE_TEACHER = "teacher"
ROLE_ADMIN = "admin"

ROLES = (ROLE_PARENT, ROLE_TEACHER, ROLE_ADMIN)

_READ = ["list", "get"]
_WRITE = ["list", "get", "create", "update", "delete"]

# General claims per role as resource -> actions. Admins bypass this table.
ROLE_CLAIMS: Dict[str, Dict[str, List[str]]] = {
    ROLE_PARENT: {
        "user": _READ + ["update_self"],
        "student": _READ + ["add_child"],
        "grade": _READ,
        "attendance": _READ,
        "behavior": _READ,
        "assignment": _READ,
        "announcement": _READ,
        "meeting": _WRITE + ["update_status"],
        "message": ["list", "get", "create", "read"],
    },
    ROLE_TEACHER: {
        "user": _READ + ["update_self"],
        "student": ["list", "get", "create", "update"],
        "grade": _WRITE,
        "attendance": _WRITE,
        "behavior": _WRITE,
        "assignment": _WRITE,
        "announcement": _WRITE,
        "meeting": _WRITE + ["update_status"],
        "message": ["list", "get", "create", "read"],
    },
}


def role_claim_values(role: Optional[str]) -> List[Tuple[str, str]]:
    """Flatten the role table into ("permissions", "resource:action") claim tuples"""
    values = []
    for resource, actions in ROLE_CLAIMS.get(role, {}).items():
        for action in actions:
            values.append(("permissions", f"{resource}:{action}"))
    return values


class Claims(BaseModel):
    """Structured claims for permission management"""
    general: Dict[str, Set[str]] = Field(default_factory=dict)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def has_general_permission(self, resource: str, action: str) -> bool:
        """Check if claims include general permission for resource and action"""
        return resource in self.general and action in self.general[resource]


def build_claims(claim_values: List[Tuple[str, str]]) -> Claims:
    """Build structured claims from claim value tuples"""

    general: Dict[str, Set[str]] = defaultdict(set)

    for claim_type, resource_string in claim_values:
        if claim_type != "permissions":
            continue

        parts = resource_string.split(":")

        if len(parts) == 2:
            resource, action = parts
            general[resource].add(action)

    return Claims(general=dict(general))


class Principal(BaseModel):
    """Authenticated actor of a request: identity, role and the children it relates to"""

    is_admin: bool = False
    user_id: Optional[str] = None
    role: Optional[str] = None

    # Student ids of a parent's children, in the order they were linked
    associated_ids: List[str] = Field(default_factory=list)
    claims: Claims = Field(default_factory=Claims)

    _permission_cache: Dict[str, bool] = PrivateAttr(default_factory=dict)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @model_validator(mode='after')
    def set_claims_from_role(self):
        """Derive the admin flag and general claims from the role"""
        if self.role == ROLE_ADMIN:
            self.is_admin = True
        if not self.claims.general and self.role is not None:
            self.claims = build_claims(role_claim_values(self.role))
        return self

    @property
    def is_parent(self) -> bool:
        return self.role == ROLE_PARENT

    @property
    def is_teacher(self) -> bool:
        return self.role == ROLE_TEACHER

    def get_user_id_or_throw(self) -> str:
        if self.user_id is None:
            raise UnauthorizedException("User ID not found")
        return self.user_id

    def permitted(self, resource: str, action: str | List[str]) -> bool:
        """
        Check a general (role-level) permission.

        Args:
            resource: The resource type (e.g., "grade", "meeting")
            action: Single action or list of actions, any of which suffices

        Returns:
            True if permission is granted, False otherwise
        """

        if self.is_admin:
            return True

        if isinstance(action, list):
            return any(self.permitted(resource, a) for a in action)

        cache_key = f"{resource}:{action}"
        if cache_key in self._permission_cache:
            return self._permission_cache[cache_key]

        result = self.claims.has_general_permission(resource, action)
        self._permission_cache[cache_key] = result

        return result
