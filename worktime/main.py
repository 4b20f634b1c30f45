from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from worktime import models  # noqa: F401
from worktime.core.errors import WorktimeError
from worktime.core.logging import configure_logging
from worktime.routers.auth import router as auth_router
from worktime.routers.invites import router as invites_router
from worktime.routers.sessions import router as sessions_router
from worktime.routers.stats import router as stats_router
from worktime.routers.time_entries import router as time_entries_router
from worktime.routers.users import router as users_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    yield


app = FastAPI(
    title="Worktime",
    lifespan=lifespan,
)


@app.exception_handler(WorktimeError)
async def handle_domain_error(request: Request, exc: WorktimeError):
    logger.info(
        "Request rejected",
        extra={
            "path": request.url.path,
            "error": type(exc).__name__,
            "status_code": exc.status_code,
        },
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error": type(exc).__name__},
    )


@app.middleware("http")
async def catch_unhandled_exceptions(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception:
        logger.exception("Unhandled exception")
        return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


app.include_router(auth_router)
app.include_router(sessions_router)
app.include_router(time_entries_router)
app.include_router(stats_router)
app.include_router(invites_router)
app.include_router(users_router)


@app.get("/")
def root():
    return {"status": "Worktime running"}


@app.get("/health")
def health():
    return {
        "status": "ok",
        "version": "1.0.0",
    }
