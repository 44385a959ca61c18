from airmon.models.sensor_reading import SensorReading
from airmon.models.user import User

__all__ = ["SensorReading", "User"]
