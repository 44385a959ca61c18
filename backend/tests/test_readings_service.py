"""
Tests for the sensor reading store (airmon.services.readings).
"""

from datetime import timedelta

from airmon.core.database import utcnow
from airmon.services import readings

from conftest import add_reading


def test_insert_assigns_id_and_timestamp(db):
    reading = readings.insert_reading(
        db, sensor_id="s1", temperature=25.5, humidity=60, air_quality=42, category="good"
    )

    assert reading.id is not None
    assert reading.created_at is not None
    assert reading.sensor_id == "s1"


def test_find_latest_on_empty_store(db):
    assert readings.find_latest(db) is None


def test_find_latest_returns_newest(db):
    add_reading(db, age=timedelta(hours=2), temperature=10)
    newest = add_reading(db, age=timedelta(minutes=5), temperature=30)
    add_reading(db, age=timedelta(hours=1), temperature=20)

    assert readings.find_latest(db).id == newest.id


def test_history_respects_window_order_and_limit(db):
    recent = add_reading(db, age=timedelta(hours=1))
    older = add_reading(db, age=timedelta(hours=5))
    add_reading(db, age=timedelta(hours=30))

    rows = readings.find_history(db, since_hours=24, limit=50)
    assert [r.id for r in rows] == [recent.id, older.id]

    rows = readings.find_history(db, since_hours=24, limit=1)
    assert [r.id for r in rows] == [recent.id]

    rows = readings.find_history(db, since_hours=2, limit=50)
    assert [r.id for r in rows] == [recent.id]


def test_stats_over_window(db):
    add_reading(db, age=timedelta(hours=1), temperature=20, humidity=40, air_quality=30)
    add_reading(db, age=timedelta(hours=2), temperature=30, humidity=60, air_quality=50)
    add_reading(db, age=timedelta(hours=48), temperature=99, humidity=99, air_quality=999)

    stats = readings.aggregate_stats(db)

    assert stats["count"] == 2
    assert stats["avgTemperature"] == 25
    assert stats["minTemperature"] == 20
    assert stats["maxTemperature"] == 30
    assert stats["avgHumidity"] == 50
    assert stats["avgAirQuality"] == 40
    assert stats["maxAirQuality"] == 50


def test_stats_on_empty_window_are_null(db):
    add_reading(db, age=timedelta(hours=30))

    stats = readings.aggregate_stats(db)

    assert stats["count"] == 0
    for key in (
        "avgTemperature",
        "minTemperature",
        "maxTemperature",
        "avgHumidity",
        "avgAirQuality",
        "maxAirQuality",
    ):
        assert stats[key] is None


def test_delete_older_than_is_strict(db):
    add_reading(db, age=timedelta(days=100))
    add_reading(db, age=timedelta(days=91))
    keep = add_reading(db, age=timedelta(days=10))

    deleted = readings.delete_older_than(db, utcnow() - timedelta(days=90))

    assert deleted == 2
    remaining = readings.find_history(db, since_hours=24 * 365, limit=100)
    assert [r.id for r in remaining] == [keep.id]


def test_find_by_sensor_filters_and_orders(db):
    a_old = add_reading(db, age=timedelta(hours=3), sensor_id="a")
    add_reading(db, age=timedelta(hours=2), sensor_id="b")
    a_new = add_reading(db, age=timedelta(hours=1), sensor_id="a")

    rows = readings.find_by_sensor(db, "a", limit=10)
    assert [r.id for r in rows] == [a_new.id, a_old.id]


def test_window_start_clamps_huge_lookbacks():
    assert readings.window_start(days=1000000) == readings.EARLIEST
    assert readings.window_start(hours=float("inf")) == readings.EARLIEST
    assert readings.window_start(hours=1) < utcnow()


def test_delete_with_clamped_cutoff_removes_nothing(db):
    add_reading(db, age=timedelta(days=3650))

    assert readings.delete_older_than(db, readings.window_start(days=10 ** 12)) == 0
