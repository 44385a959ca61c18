"""
readings.py — Sensor Reading Store

Queries over the `sensor_data` table. All windows are computed against the
current UTC time; results are ordered newest first with id as tie-breaker.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from airmon.core.database import utcnow
from airmon.models.sensor_reading import SensorReading

STATS_WINDOW_HOURS = 24

# Window start used when a lookback reaches past the representable range
EARLIEST = datetime.min.replace(tzinfo=timezone.utc)

_NEWEST_FIRST = (SensorReading.created_at.desc(), SensorReading.id.desc())


def window_start(hours: float = 0, days: float = 0) -> datetime:
    """Now minus the lookback, clamped to EARLIEST for very large lookbacks."""
    try:
        return utcnow() - timedelta(days=days, hours=hours)
    except OverflowError:
        return EARLIEST


def insert_reading(
    db: Session,
    sensor_id: str,
    temperature: float,
    humidity: float,
    air_quality: int,
    category: str,
) -> SensorReading:
    reading = SensorReading(
        sensor_id=sensor_id,
        temperature=temperature,
        humidity=humidity,
        air_quality=air_quality,
        category=category,
    )
    db.add(reading)
    db.commit()
    db.refresh(reading)
    return reading


def find_latest(db: Session) -> Optional[SensorReading]:
    return db.scalars(select(SensorReading).order_by(*_NEWEST_FIRST).limit(1)).first()


def find_history(db: Session, since_hours: float = 24, limit: int = 50) -> List[SensorReading]:
    """Readings from the last `since_hours` hours, newest first, at most `limit`."""
    start_time = window_start(hours=since_hours)
    stmt = (
        select(SensorReading)
        .where(SensorReading.created_at >= start_time)
        .order_by(*_NEWEST_FIRST)
        .limit(limit)
    )
    return list(db.scalars(stmt))


def find_by_sensor(db: Session, sensor_id: str, limit: int = 1000) -> List[SensorReading]:
    stmt = (
        select(SensorReading)
        .where(SensorReading.sensor_id == sensor_id)
        .order_by(*_NEWEST_FIRST)
        .limit(limit)
    )
    return list(db.scalars(stmt))


def aggregate_stats(db: Session, window_hours: float = STATS_WINDOW_HOURS) -> Dict[str, Any]:
    """
    Summary over the last `window_hours` hours.

    Always returns every key; with no rows in the window the aggregates are
    None and `count` is 0.
    """
    start_time = window_start(hours=window_hours)
    stmt = select(
        func.avg(SensorReading.temperature).label("avgTemperature"),
        func.avg(SensorReading.humidity).label("avgHumidity"),
        func.avg(SensorReading.air_quality).label("avgAirQuality"),
        func.max(SensorReading.air_quality).label("maxAirQuality"),
        func.max(SensorReading.temperature).label("maxTemperature"),
        func.min(SensorReading.temperature).label("minTemperature"),
        func.count(SensorReading.id).label("count"),
    ).where(SensorReading.created_at >= start_time)

    row = db.execute(stmt).mappings().one()
    stats = {
        key: (float(value) if value is not None else None)
        for key, value in row.items()
        if key != "count"
    }
    if stats["maxAirQuality"] is not None:
        stats["maxAirQuality"] = int(stats["maxAirQuality"])
    stats["count"] = int(row["count"] or 0)
    return stats


def delete_older_than(db: Session, cutoff: datetime) -> int:
    """Bulk delete readings created strictly before `cutoff`; returns rows removed."""
    result = db.execute(
        delete(SensorReading)
        .where(SensorReading.created_at < cutoff)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    return result.rowcount
