"""FastAPI entrypoint for the PEC Pulse back end."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Header, Request
from fastapi.responses import JSONResponse

from apps.api.routes import dashboards, functions, meetings, minutes, reports, workbodies
from lib.config import SUPABASE_REALTIME_ENABLED
from lib.roles import home_path, navigation_for
from services.meetings.store import ScheduledMeetingStore
from services.meetings.subscription import MeetingSubscription
from utils.errors import (
    DuplicateMeetingError,
    ExtractionError,
    LLMError,
    NotFoundError,
    PecPulseError,
    PermissionDeniedError,
    SupabaseError,
    ToolExecutionError,
    ValidationError,
)
from utils.logging import configure_logging

load_dotenv()
configure_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Keep one meeting store fresh over realtime when it is switched on."""
    subscription = None
    if SUPABASE_REALTIME_ENABLED:
        store = ScheduledMeetingStore()
        store.refetch()
        subscription = MeetingSubscription(store)
        await subscription.start()
        app.state.meeting_store = store
        logger.info("Realtime meeting subscription started")
    try:
        yield
    finally:
        if subscription is not None:
            await subscription.stop()
            app.state.meeting_store = None


app = FastAPI(title="PEC Pulse API", lifespan=lifespan)

app.include_router(workbodies.router)
app.include_router(meetings.router)
app.include_router(minutes.router)
app.include_router(functions.router)
app.include_router(dashboards.router)
app.include_router(reports.router)


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


@app.exception_handler(DuplicateMeetingError)
async def duplicate_handler(request: Request, exc: DuplicateMeetingError) -> JSONResponse:
    return _error(409, str(exc), existingId=exc.existing_id)


@app.exception_handler(ValidationError)
async def validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return _error(400, str(exc), errors=exc.errors, warnings=exc.warnings)


@app.exception_handler(PermissionDeniedError)
async def permission_handler(request: Request, exc: PermissionDeniedError) -> JSONResponse:
    return _error(403, str(exc))


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error(404, str(exc))


@app.exception_handler(LLMError)
async def llm_handler(request: Request, exc: LLMError) -> JSONResponse:
    logger.error(f"LLM failure on {request.url.path}: {exc}")
    return _error(502, str(exc))


@app.exception_handler(ExtractionError)
async def extraction_handler(request: Request, exc: ExtractionError) -> JSONResponse:
    logger.error(f"Extraction failure on {request.url.path}: {exc}")
    return _error(500, str(exc))


@app.exception_handler(SupabaseError)
async def supabase_handler(request: Request, exc: SupabaseError) -> JSONResponse:
    logger.error(f"Supabase failure on {request.url.path}: {exc}")
    return _error(502, str(exc))


@app.exception_handler(ToolExecutionError)
async def tool_handler(request: Request, exc: ToolExecutionError) -> JSONResponse:
    logger.error(f"External service failure on {request.url.path}: {exc}")
    return _error(502, str(exc))


@app.exception_handler(PecPulseError)
async def app_error_handler(request: Request, exc: PecPulseError) -> JSONResponse:
    logger.error(f"Unhandled application error on {request.url.path}: {exc}")
    return _error(500, str(exc))


@app.get("/health")
def health_check() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/navigation")
def navigation(x_user_role: Optional[str] = Header(default=None)) -> dict:
    return {
        "role": x_user_role,
        "home": home_path(x_user_role),
        "items": [item.to_view() for item in navigation_for(x_user_role)],
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
