import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shiftdesk.core.config import settings
from shiftdesk.core.errors import SchedulingError, ValidationError
from shiftdesk.routers.applications import router as applications_router
from shiftdesk.routers.assignments import router as assignments_router
from shiftdesk.routers.auth import router as auth_router
from shiftdesk.routers.shifts import router as shifts_router
from shiftdesk.routers.staff import router as staff_router
from shiftdesk.routers.time_off import router as time_off_router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Shift Desk API")

# Comma-separated list, e.g.:
# CORS_ORIGINS="http://localhost:8081,http://127.0.0.1:8081,https://shift-desk-web.onrender.com"
allow_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]

# Safe fallback for local dev if env var not set
if not allow_origins:
    allow_origins = [
        "http://localhost:8081",
        "http://127.0.0.1:8081",
        "http://localhost:8082",
        "http://127.0.0.1:8082",
    ]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SchedulingError)
async def scheduling_error_handler(request: Request, exc: SchedulingError):
    logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ())[1:]) or None
    err = ValidationError(
        first.get("msg", "Invalid request"),
        field=field,
        details={"errors": [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errors]},
    )
    return JSONResponse(status_code=err.status_code, content=err.to_dict())


app.include_router(auth_router, prefix="/auth", tags=["auth"])
app.include_router(shifts_router, prefix="/shifts", tags=["shifts"])
app.include_router(applications_router, prefix="/applications", tags=["applications"])
app.include_router(assignments_router, prefix="/assignments", tags=["assignments"])
app.include_router(time_off_router, prefix="/timeoff", tags=["time-off"])
app.include_router(staff_router, prefix="/staff", tags=["staff"])


@app.get("/health")
def health():
    return {"status": "ok"}
