import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from eduportal_backend.api.api_builder import CrudRouter
from eduportal_backend.api.class_subjects import class_subjects_router
from eduportal_backend.api.classes import classes_router
from eduportal_backend.api.grade_types import grade_types_router
from eduportal_backend.api.grades import grades_router
from eduportal_backend.api.grading_scale import grading_scale_router
from eduportal_backend.api.my import my_router
from eduportal_backend.api.provider_auth import provider_auth_router
from eduportal_backend.api.provider_tenants import provider_tenants_router
from eduportal_backend.api.roles import roles_router
from eduportal_backend.api.students import students_router
from eduportal_backend.api.subjects import subjects_router
from eduportal_backend.api.teachers import teachers_router
from eduportal_backend.api.term_reports import term_reports_router
from eduportal_backend.api.tenant_auth import tenant_auth_router
from eduportal_backend.api.terms import terms_router
from eduportal_backend.api.users import users_router
from eduportal_backend.database import get_engine
from eduportal_backend.interface.attendance import AttendanceInterface
from eduportal_backend.interface.behavior_records import BehaviorRecordInterface
from eduportal_backend.interface.fees import FeeInterface
from eduportal_backend.interface.notifications import NotificationInterface
from eduportal_backend.interface.payments import PaymentInterface
from eduportal_backend.interface.term_reports import TermReportInterface
from eduportal_backend.model.base import Base
from eduportal_backend.settings import settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):

    if settings.DEBUG_MODE != "production":
        Base.metadata.create_all(bind=get_engine())

    yield

app = FastAPI(title="EduPortal", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Total-Count"],
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": {"message": "Validation failed", "errors": jsonable_encoder(exc.errors())}},
    )


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning(f"Integrity error on {request.url.path}: {exc.orig}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Duplicate or conflicting record"},
    )


app.include_router(
    tenant_auth_router,
    prefix="/api/auth",
    tags=["auth"]
)

app.include_router(
    provider_auth_router,
    prefix="/api/provider-auth",
    tags=["provider auth"]
)

app.include_router(
    provider_tenants_router,
    prefix="/api/provider/tenants",
    tags=["provider tenants"]
)

app.include_router(
    roles_router,
    prefix="/api/roles",
    tags=["roles"]
)

app.include_router(
    users_router,
    prefix="/api/users",
    tags=["users"]
)

app.include_router(
    students_router,
    prefix="/api/portal/students",
    tags=["portal", "students"]
)

app.include_router(
    classes_router,
    prefix="/api/portal/classes",
    tags=["portal", "classes"]
)

app.include_router(
    subjects_router,
    prefix="/api/portal/subjects",
    tags=["portal", "subjects"]
)

app.include_router(
    class_subjects_router,
    prefix="/api/portal/class-subjects",
    tags=["portal", "class subjects"]
)

app.include_router(
    my_router,
    prefix="/api/portal/my",
    tags=["portal", "me"]
)

app.include_router(
    teachers_router,
    prefix="/api/portal/teachers",
    tags=["portal", "teachers"]
)

app.include_router(
    grade_types_router,
    prefix="/api/portal/grade-types",
    tags=["portal", "grades"]
)

app.include_router(
    terms_router,
    prefix="/api/portal/terms",
    tags=["portal", "terms"]
)

app.include_router(
    grading_scale_router,
    prefix="/api/portal/grading-scale",
    tags=["portal", "grades"]
)

app.include_router(
    grades_router,
    prefix="/api/portal/grades",
    tags=["portal", "grades"]
)

app.include_router(
    term_reports_router,
    prefix="/api/term-reports",
    tags=["term reports"]
)

CrudRouter(FeeInterface).register_routes(app)
CrudRouter(PaymentInterface).register_routes(app)
CrudRouter(AttendanceInterface).register_routes(app)
CrudRouter(BehaviorRecordInterface).register_routes(app)
CrudRouter(NotificationInterface).register_routes(app)
CrudRouter(TermReportInterface).register_routes(app)


@app.head("/", status_code=204)
def get_status_head():
    return
