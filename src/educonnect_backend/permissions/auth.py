"""
Authentication and principal creation.

Bearer tokens are JWTs issued at login; HTTP Basic with email/password is
accepted as well. The principal is always rebuilt from the stored user so
role changes and deactivation apply to tokens already issued.
"""

import base64
import binascii
import logging
from typing import Annotated, Optional
from pydantic import BaseModel
from sqlalchemy.orm import Session
from fastapi import Depends, Request
from fastapi.security import HTTPBasicCredentials
from fastapi.security.utils import get_authorization_scheme_param

from educonnect_backend.database import get_db
from educonnect_backend.interface.tokens import TokenError, decode_access_token, verify_password
from educonnect_backend.model.auth import User
from educonnect_backend.api.exceptions import UnauthorizedException
from educonnect_backend.permissions.principal import Principal

logger = logging.getLogger(__name__)


class BearerCredentials(BaseModel):
    """Bearer token credentials"""
    token: str
    scheme: str = "Bearer"


class AuthenticationService:
    """Service for handling the supported authentication methods"""

    @staticmethod
    def authenticate_basic(email: str, password: str, db: Session) -> User:
        """Authenticate using basic auth credentials"""

        user = db.query(User).filter(User.email == email.lower()).first()

        if user is None or not verify_password(password, user.password):
            logger.warning("Basic authentication failed for %s", email)
            raise UnauthorizedException("Invalid credentials")

        return user

    @staticmethod
    def authenticate_token(token: str, db: Session) -> User:
        """Authenticate using a bearer token issued at login"""

        try:
            payload = decode_access_token(token)
        except TokenError as e:
            logger.warning("Token authentication failed: %s", e)
            raise UnauthorizedException("Token is not valid")

        user = db.query(User).filter(User.id == payload["sub"]).first()

        if user is None:
            raise UnauthorizedException("Token is not valid")

        return user


class PrincipalBuilder:
    """Builder for creating Principal objects from stored users"""

    @staticmethod
    def build(user: User) -> Principal:
        if not user.is_active:
            raise UnauthorizedException("Account is deactivated")

        return Principal(
            user_id=user.id,
            role=user.role,
            associated_ids=list(user.associated_ids or []),
        )


def parse_authorization_header(request: Request) -> Optional[HTTPBasicCredentials | BearerCredentials]:
    """Parse authorization header to determine auth type"""

    authorization = request.headers.get("Authorization")
    if not authorization:
        raise UnauthorizedException("No token, authorization denied")

    scheme, param = get_authorization_scheme_param(authorization)

    if not param:
        raise UnauthorizedException("Invalid authorization format")

    if scheme.lower() == "bearer":
        return BearerCredentials(token=param, scheme="Bearer")

    elif scheme.lower() == "basic":
        try:
            data = base64.b64decode(param).decode("utf-8")
        except (ValueError, UnicodeDecodeError, binascii.Error) as e:
            logger.error(f"Failed to decode Basic auth: {e}")
            raise UnauthorizedException("Invalid Basic auth encoding")

        username, separator, password = data.partition(":")
        if not separator:
            raise UnauthorizedException("Invalid Basic auth format")
        return HTTPBasicCredentials(username=username, password=password)

    raise UnauthorizedException(f"Unsupported auth scheme: {scheme}")


def get_current_user(
    credentials: Annotated[
        HTTPBasicCredentials | BearerCredentials,
        Depends(parse_authorization_header)
    ],
    db: Session = Depends(get_db),
) -> User:
    """Resolve the stored user behind the request credentials"""

    if isinstance(credentials, HTTPBasicCredentials):
        return AuthenticationService.authenticate_basic(credentials.username, credentials.password, db)

    elif isinstance(credentials, BearerCredentials):
        return AuthenticationService.authenticate_token(credentials.token, db)

    raise UnauthorizedException("Unknown authentication type")


def get_current_principal(
    user: Annotated[User, Depends(get_current_user)]
) -> Principal:
    """
    Main dependency for getting the current authenticated principal.
    """
    return PrincipalBuilder.build(user)


get_current_permissions = get_current_principal
