"""Data models for the home security system."""

from .sensor import Sensor, SensorType
from .status import AlarmStatus, ArmingStatus, SystemState
from .config import SystemConfig

__all__ = ['Sensor', 'SensorType', 'AlarmStatus', 'ArmingStatus', 'SystemState', 'SystemConfig']
