# type: ignore
# pyright: reportGeneralTypeIssues=false
# pyright: reportOptionalMemberAccess=false
"""
Clubflow Service
================
Membership & course workflow for a club: track applications and decisions,
course tasks with submissions and ratings, and announcements broadcast to
every member inbox.

Applicant state machine:
    pending ─► accepted
    pending ─► rejected

Port: 8010
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from clubflow.controllers import (
    announcement_controller,
    course_controller,
    member_controller,
    system_controller,
    track_controller,
    tracksys_controller,
)
from clubflow.core.config import settings
from clubflow.core.database import engine, init_schema
from clubflow.core.dependencies import get_announcement_service, get_member_service
from clubflow.core.errors import ClubflowError
from clubflow.core.logging import get_logger
from clubflow.middleware import MetricsMiddleware, RequestIDMiddleware
from clubflow.schemas import ErrorResponse

logger = get_logger("clubflow")


# ── Lifespan ──────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    init_schema(engine)
    if settings.SEED_HEADS:
        get_member_service().seed_heads(settings.SEED_HEADS)
    resumed = get_announcement_service().resume_pending_broadcasts()
    logger.info("Clubflow service starting — %d unfinished broadcast(s) resumed", len(resumed))
    yield
    engine.dispose()
    logger.info("Shutting down — connection pool disposed")


# ── FastAPI App ───────────────────────────────────────────────────────────
app = FastAPI(
    title="Clubflow Service",
    description="Tracks, applicants, courses, tasks and announcements for a club.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
    responses={
        400: {"model": ErrorResponse, "description": "Validation error"},
        401: {"model": ErrorResponse, "description": "Missing or invalid bearer credential"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestIDMiddleware)


# ── Exception handlers ────────────────────────────────────────────────────
def _error(request: Request, status_code: int, message: str, data=None) -> JSONResponse:
    req_id = getattr(request.state, "request_id", None)
    content = {"success": False, "message": message, "request_id": req_id}
    if data:
        content["data"] = data
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(ClubflowError)
async def clubflow_error_handler(request: Request, exc: ClubflowError):
    if exc.status_code >= 500:
        req_id = getattr(request.state, "request_id", None)
        logger.error("%s: %s", type(exc).__name__, exc.message, extra={"request_id": req_id})
    return _error(request, exc.status_code, exc.message, getattr(exc, "committed", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'][1:]) or 'body'}: {err['msg']}"
        for err in exc.errors()
    )
    return _error(request, 400, f"Validation failed: {details}")


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    response = _error(request, exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    req_id = getattr(request.state, "request_id", None)
    logger.exception("Unhandled exception", extra={"request_id": req_id})
    return _error(request, 500, "Internal server error")


# ── Routers ───────────────────────────────────────────────────────────────
app.include_router(system_controller.router)
app.include_router(member_controller.router)
app.include_router(track_controller.router)
app.include_router(course_controller.router)
app.include_router(announcement_controller.router)
app.include_router(tracksys_controller.router)


# ── Entrypoint ────────────────────────────────────────────────────────────
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.SERVICE_PORT, log_level="info")
