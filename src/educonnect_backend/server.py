import logging
from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException
from educonnect_backend.api.exceptions import error_message
from educonnect_backend.api.announcements import announcements_router
from educonnect_backend.api.assignments import assignments_router
from educonnect_backend.api.attendance import attendance_router
from educonnect_backend.api.auth import auth_router
from educonnect_backend.api.behavior import behavior_router
from educonnect_backend.api.grades import grades_router
from educonnect_backend.api.meetings import meetings_router
from educonnect_backend.api.messages import messages_router
from educonnect_backend.api.students import students_router
from educonnect_backend.api.users import users_router
from educonnect_backend.database import get_db
from educonnect_backend.interface.tokens import hash_password
from educonnect_backend.model.auth import User
from educonnect_backend.permissions.auth import get_current_permissions
from educonnect_backend.permissions.principal import ROLE_ADMIN
from educonnect_backend.settings import settings

logger = logging.getLogger(__name__)


def init_admin_user(db: Session):
    """Create the configured admin account when it does not exist yet"""

    email = settings.ADMIN_EMAIL
    password = settings.ADMIN_PASSWORD

    if not email or not password:
        logger.info("ADMIN_EMAIL/ADMIN_PASSWORD not set, skipping admin bootstrap")
        return

    admin = db.query(User).filter(User.email == email.lower()).first()

    if admin is not None:
        return

    db.add(User(
        first_name="Admin",
        last_name="System",
        email=email.lower(),
        password=hash_password(password),
        role=ROLE_ADMIN,
    ))
    db.commit()
    logger.info("Created admin account %s", email)


def startup_logic():

    db_gen = get_db()
    db = next(db_gen)
    try:
        init_admin_user(db)
    finally:
        db_gen.close()


@asynccontextmanager
async def lifespan(app: FastAPI):

    startup_logic()

    yield


app = FastAPI(lifespan=lifespan, title="EduConnect")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Total-Count"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": error_message(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def _validation_message(errors) -> str:
    if not errors:
        return "Validation failed"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"message": _validation_message(exc.errors())})


@app.exception_handler(ValidationError)
async def validation_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"message": _validation_message(exc.errors())})


@app.exception_handler(Exception)
async def unexpected_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Server error"})


app.include_router(
    auth_router,
    prefix="/api/auth",
    tags=["auth"]
)

app.include_router(
    users_router,
    prefix="/api/users",
    tags=["users"],
    dependencies=[Depends(get_current_permissions)]
)

app.include_router(
    students_router,
    prefix="/api/students",
    tags=["students"],
    dependencies=[Depends(get_current_permissions)]
)

app.include_router(
    grades_router,
    prefix="/api/grades",
    tags=["grades"],
    dependencies=[Depends(get_current_permissions)]
)

app.include_router(
    assignments_router,
    prefix="/api/assignments",
    tags=["assignments"],
    dependencies=[Depends(get_current_permissions)]
)

app.include_router(
    attendance_router,
    prefix="/api/attendance",
    tags=["attendance"],
    dependencies=[Depends(get_current_permissions)]
)

app.include_router(
    behavior_router,
    prefix="/api/behavior",
    tags=["behavior"],
    dependencies=[Depends(get_current_permissions)]
)

app.include_router(
    meetings_router,
    prefix="/api/meetings",
    tags=["meetings"],
    dependencies=[Depends(get_current_permissions)]
)

app.include_router(
    messages_router,
    prefix="/api/messages",
    tags=["messages"],
    dependencies=[Depends(get_current_permissions)]
)

app.include_router(
    announcements_router,
    prefix="/api/announcements",
    tags=["announcements"],
    dependencies=[Depends(get_current_permissions)]
)

@app.head("/", status_code=204)
def get_status_head():
    return
