"""FastAPI REST API server for RemindMe Service.

Exposes the "Remind me" menu entry and the two form submissions to the UI
layer. The UI renders the returned forms and toasts.
"""

from contextlib import asynccontextmanager

import redis.asyncio as redis
from fastapi import FastAPI, Depends, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

import database
import remind_me_flow
import schemas
from config import settings
from handoff_store import HandoffStore
from logger_config import setup_logger
from reminder_job import REMINDER_JOB_NAME
from scheduler import JobScheduler

logger = setup_logger(__name__, 'api.log')


@asynccontextmanager
async def lifespan(app: FastAPI):
    database.init_db()
    yield


# Create FastAPI application
app = FastAPI(
    title="RemindMe Service API",
    description="Natural-language reminders on posts, delivered as private messages",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


async def get_handoff_store():
    """Handoff store dependency; one Redis client per request."""
    client = redis.from_url(settings.REDIS_URL, decode_responses=True)
    try:
        yield HandoffStore(client)
    finally:
        await client.aclose()


def get_scheduler() -> JobScheduler:
    return JobScheduler(database.SessionLocal)


@app.get("/")
def root():
    """Root endpoint - service information"""
    return {
        "service": "RemindMe Service API",
        "version": "1.0.0",
        "status": "healthy",
        "endpoints": {
            "docs": "/docs",
            "health": "/health",
            "menu": "/remind-me/menu",
            "time_input": "/remind-me/time",
            "confirmation": "/remind-me/confirm"
        }
    }


@app.get("/health")
def health_check():
    """Health check endpoint for monitoring"""
    return {
        "status": "healthy",
        "service": "remindme_service",
        "database": settings.DATABASE_URL.split("://")[0]
    }


@app.get("/remind-me/menu")
def get_menu():
    """Menu entry and the time input form it opens."""
    return {
        "menu_item": remind_me_flow.MENU_ITEM,
        "form": remind_me_flow.TIME_INPUT_FORM
    }


@app.post("/remind-me/time", response_model=schemas.FlowResponse)
async def submit_time(
    submission: schemas.TimeInputSubmission,
    store: HandoffStore = Depends(get_handoff_store)
):
    """Submit the time input form.

    Request body example:
    ```json
    {"actor_id": "t2_abc", "target_id": "t3_xyz", "time": "in one hour"}
    ```

    Returns the confirmation form, or a toast if the time was not understood.
    """
    context = schemas.FlowContext(actor_id=submission.actor_id, target_id=submission.target_id)
    try:
        return await remind_me_flow.submit_time_input(context, submission.time, store)
    except RedisError as e:
        logger.error(f"Handoff store unavailable: {str(e)}")
        raise HTTPException(status_code=503, detail="Reminder storage is unavailable")


@app.post("/remind-me/confirm", response_model=schemas.FlowResponse)
async def confirm_time(
    submission: schemas.ConfirmationSubmission,
    store: HandoffStore = Depends(get_handoff_store),
    scheduler: JobScheduler = Depends(get_scheduler)
):
    """Submit the confirmation form (Confirm or Cancel).

    Returns a toast describing the outcome.
    """
    context = schemas.FlowContext(actor_id=submission.actor_id, target_id=submission.target_id)
    try:
        if not submission.confirmed:
            return await remind_me_flow.cancel_time_confirmation(context, store)
        return await remind_me_flow.submit_time_confirmation(context, store, scheduler)
    except RedisError as e:
        logger.error(f"Handoff store unavailable: {str(e)}")
        raise HTTPException(status_code=503, detail="Reminder storage is unavailable")
    except SQLAlchemyError as e:
        logger.error(f"Failed to schedule reminder: {str(e)}")
        raise HTTPException(status_code=503, detail="Could not schedule the reminder")


@app.get("/jobs/pending/count")
def pending_jobs(scheduler: JobScheduler = Depends(get_scheduler)):
    """Number of reminders waiting to fire."""
    return {"name": REMINDER_JOB_NAME, "pending": scheduler.pending_count(REMINDER_JOB_NAME)}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host=settings.API_HOST,
        port=settings.API_PORT,
        log_level="info"
    )
