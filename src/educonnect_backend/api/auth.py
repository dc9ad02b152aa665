import logging
from typing import Annotated
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from educonnect_backend.api.crud import commit_or_raise
from educonnect_backend.api.exceptions import BadRequestException, UnauthorizedException
from educonnect_backend.database import get_db
from educonnect_backend.interface.tokens import create_access_token, hash_password, verify_password
from educonnect_backend.interface.users import LoginResponse, UserGet, UserLogin, UserRegister
from educonnect_backend.model.auth import User
from educonnect_backend.permissions.auth import get_current_user

logger = logging.getLogger(__name__)

auth_router = APIRouter()


def _login_response(user: User) -> LoginResponse:
    token = create_access_token(user.id, user.role)
    return LoginResponse(token=token, user=UserGet.model_validate(user, from_attributes=True))


@auth_router.post("/register", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
def register(payload: UserRegister, db: Session = Depends(get_db)):

    if db.query(User).filter(User.email == payload.email).first() is not None:
        raise BadRequestException(detail="User already exists")

    user = User(
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        password=hash_password(payload.password),
        role=payload.role,
        phone=payload.phone,
        address=payload.address,
    )
    db.add(user)
    commit_or_raise(db, user, "registering")

    logger.info("Registered %s account %s", user.role, user.id)

    return _login_response(user)


@auth_router.post("/login", response_model=LoginResponse)
def login(payload: UserLogin, db: Session = Depends(get_db)):

    user = db.query(User).filter(User.email == payload.email.lower()).first()

    if user is None or not verify_password(payload.password, user.password):
        logger.warning("Failed login for %s", payload.email)
        raise UnauthorizedException("Invalid credentials")

    if not user.is_active:
        raise UnauthorizedException("Account is deactivated")

    return _login_response(user)


@auth_router.get("/me", response_model=UserGet)
def get_me(user: Annotated[User, Depends(get_current_user)]):
    """Get the current authenticated user"""
    if not user.is_active:
        raise UnauthorizedException("Account is deactivated")
    return user
