import logging

from fastapi import FastAPI

from .config import settings
from .redis_client import redis_client
from .routers import (
    availability,
    global_settings,
    holidays,
    lesson_requests,
    lessons,
    scheduling,
    users,
)

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Music School API")

app.include_router(users.router)
app.include_router(availability.router)
app.include_router(holidays.router)
app.include_router(global_settings.router)
app.include_router(lessons.router)
app.include_router(lesson_requests.router)
app.include_router(scheduling.router)


@app.get("/health")
def health():
    try:
        redis_ok = bool(redis_client.ping())
    except Exception as e:
        logger.warning(f"Redis ping failed: {e}")
        redis_ok = False
    return {"redis": redis_ok}
