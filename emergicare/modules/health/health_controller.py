# emergicare/modules/health/health_controller.py

from datetime import datetime

from fastapi import APIRouter
from pydantic import BaseModel

from emergicare.common.config import settings
from emergicare.common.database.database import check_db_connection
from emergicare.common.realtime.change_feed import change_feed

router = APIRouter(prefix="/health", tags=["Health"])

DAY_START_HOUR = 8
DAY_END_HOUR = 20


class HealthResponse(BaseModel):
    status: str
    environment: str
    database: str
    realtime_subscribers: int
    after_hours: bool


def is_after_hours(moment: datetime) -> bool:
    """Outside 08:00-20:00 regular clinic hours."""
    return moment.hour < DAY_START_HOUR or moment.hour >= DAY_END_HOUR


@router.get("", response_model=HealthResponse)
async def health():
    database_ok = await check_db_connection()
    return HealthResponse(
        status="ok" if database_ok else "degraded",
        environment=settings.APP_ENV,
        database="connected" if database_ok else "unavailable",
        realtime_subscribers=change_feed.subscriber_count,
        after_hours=is_after_hours(datetime.now()),
    )
