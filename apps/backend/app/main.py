from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from .core.config import settings
from .core.logger import setup_logger
from .recurrence import (
    ConflictError,
    IdConflictError,
    MalformedTemplateError,
    NotFoundError,
    QueryCancelled,
    RangeError,
    RecurrenceError,
)
from .routers import router

setup_logger(level=settings.LOG_LEVEL, log_file=settings.LOG_FILE)

app = FastAPI(title=settings.APP_NAME, version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_STATUS_BY_ERROR: list[tuple[type[RecurrenceError], int]] = [
    (RangeError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
    (IdConflictError, 409),
    (MalformedTemplateError, 422),
    (QueryCancelled, 503),
]


@app.exception_handler(RecurrenceError)
def recurrence_error_handler(request: Request, exc: RecurrenceError):
    status_code = next((code for cls, code in _STATUS_BY_ERROR if isinstance(exc, cls)), 500)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(router, prefix="/api")
