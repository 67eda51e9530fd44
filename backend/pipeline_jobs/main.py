import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from . import models  # noqa: F401  (registers tables on Base.metadata)
from .config import settings
from .db import Base, engine
from .errors import AppError
from .routes import admin, applications, auth, credits, feedback, jobs, messages, notifications, profiles, referrals, reports

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Pipeline Jobs API", version="0.1.0")

app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SECRET_KEY,
    session_cookie=settings.SESSION_COOKIE,
    max_age=settings.SESSION_MAX_AGE,
    https_only=settings.SESSION_HTTPS_ONLY,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Stale-Views"],
)

Base.metadata.create_all(bind=engine)


# -----------------------------
# Errors
# -----------------------------
@app.exception_handler(AppError)
def handle_app_error(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
def handle_request_validation(request: Request, exc: RequestValidationError):
    errors = {}
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        errors[".".join(loc) or "body"] = err.get("msg", "Invalid value")
    return JSONResponse(status_code=400, content={"message": "Invalid request data", "errors": errors})


@app.exception_handler(Exception)
def handle_unexpected(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


# -----------------------------
# Routes
# -----------------------------
app.include_router(auth.router, prefix="/api", tags=["Auth"])
app.include_router(jobs.router, prefix="/api/jobs", tags=["Jobs"])
app.include_router(applications.router, prefix="/api/applications", tags=["Applications"])
app.include_router(credits.router, prefix="/api/credits", tags=["Credits"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["Notifications"])
app.include_router(reports.router, prefix="/api/job-reports", tags=["Job reports"])
app.include_router(feedback.router, prefix="/api/feedback", tags=["Feedback"])
app.include_router(referrals.router, prefix="/api", tags=["Referrals"])
app.include_router(profiles.router, prefix="/api/profiles", tags=["Profiles"])
app.include_router(messages.router, prefix="/api", tags=["Messages"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])


@app.get("/api/health")
def health():
    return {"status": "ok"}


def run():
    import uvicorn

    port = int(os.getenv("PORT", 5000))
    uvicorn.run("pipeline_jobs.main:app", host="0.0.0.0", port=port)
