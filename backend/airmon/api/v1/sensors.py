"""
sensors.py — Sensor Ingestion & Query Endpoints (API Layer)

Purpose:
- Accept readings pushed by devices (API-key gated).
- Serve latest / history / 24h statistics views to signed-in users.

Key Interactions:
- airmon.core.security → `require_api_key`, `get_current_user`
- airmon.services.readings → all storage and aggregate queries

This file should be thin: request parameters → store calls → JSON.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from airmon.api.v1.schemas import ReadingOut
from airmon.core.database import get_db
from airmon.core.errors import InternalError
from airmon.core.logging import get_logger
from airmon.core.security import get_current_user, require_api_key
from airmon.services import readings

logger = get_logger(__name__)

router = APIRouter(
    prefix="/sensor-data",
    tags=["sensor-data"]
)

# -----------------------------------------------------------------------------
# Request / Response Schemas
# -----------------------------------------------------------------------------

class ReadingIn(BaseModel):
    """
    Body posted by a device. All five measurement fields are required.
    `api_key` may travel here instead of in the query string.
    """
    sensor_id: str = Field(..., min_length=1, max_length=50)
    temperature: float
    humidity: float
    air_quality: int
    category: str = Field(..., min_length=1, max_length=20)
    api_key: Optional[str] = None


class ReadingCreated(BaseModel):
    message: str
    data: ReadingOut


class LatestResponse(BaseModel):
    data: Optional[ReadingOut] = None


class HistoryResponse(BaseModel):
    data: List[ReadingOut]


class Stats(BaseModel):
    avgTemperature: Optional[float] = None
    minTemperature: Optional[float] = None
    maxTemperature: Optional[float] = None
    avgHumidity: Optional[float] = None
    avgAirQuality: Optional[float] = None
    maxAirQuality: Optional[int] = None
    count: int = 0


class StatsResponse(BaseModel):
    stats: Stats


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------

@router.post(
    "",
    status_code=201,
    response_model=ReadingCreated,
    dependencies=[Depends(require_api_key)],
)
def receive_reading(payload: ReadingIn, db: Session = Depends(get_db)):
    """
    POST /sensor-data

    Store one reading from a device. Responds with the stored record,
    including its generated id and timestamps.
    """
    try:
        reading = readings.insert_reading(
            db,
            sensor_id=payload.sensor_id,
            temperature=payload.temperature,
            humidity=payload.humidity,
            air_quality=payload.air_quality,
            category=payload.category,
        )
    except Exception as e:
        logger.error(f"Error saving sensor data from {payload.sensor_id}: {e}")
        raise InternalError("Error saving sensor data", error=str(e))

    logger.debug("Stored reading %s from %s", reading.id, reading.sensor_id)
    return ReadingCreated(message="Data received successfully", data=ReadingOut.model_validate(reading))


@router.get("/latest", response_model=LatestResponse)
def latest_reading(db: Session = Depends(get_db), user=Depends(get_current_user)):
    """
    GET /sensor-data/latest

    Most recent reading, or `data: null` when nothing has been stored.
    """
    try:
        reading = readings.find_latest(db)
    except Exception as e:
        logger.error(f"Error fetching latest reading: {e}")
        raise InternalError("Error fetching data", error=str(e))
    return LatestResponse(
        data=ReadingOut.model_validate(reading) if reading is not None else None
    )


@router.get("/history", response_model=HistoryResponse)
def reading_history(
    limit: int = Query(50, ge=1),
    hours: float = Query(24, gt=0),
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    """
    GET /sensor-data/history?limit=50&hours=24

    Readings from the last `hours` hours, newest first, at most `limit`.
    """
    try:
        rows = readings.find_history(db, since_hours=hours, limit=limit)
    except Exception as e:
        logger.error(f"Error fetching history: {e}")
        raise InternalError("Error fetching history", error=str(e))
    return HistoryResponse(data=[ReadingOut.model_validate(r) for r in rows])


@router.get("/stats", response_model=StatsResponse)
def reading_stats(db: Session = Depends(get_db), user=Depends(get_current_user)):
    """
    GET /sensor-data/stats

    Aggregates over the last 24 hours. An empty window yields null
    aggregates and a zero count, not an error.
    """
    try:
        stats = readings.aggregate_stats(db)
    except Exception as e:
        logger.error(f"Error fetching stats: {e}")
        raise InternalError("Error fetching stats", error=str(e))
    return StatsResponse(stats=Stats(**stats))
