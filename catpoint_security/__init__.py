"""
Catpoint Home Security

Alarm decision engine for a home security controller: sensors, arming modes
and camera cat detection drive the alarm state, and every change is pushed to
registered status listeners.
"""

__version__ = "1.0.0"
__author__ = "Catpoint Home Security"

from .config_manager import ConfigManager
from .exceptions import (
    SecuritySystemError,
    UnknownSensorError,
    ClassifierUnavailableError,
    StoreUnavailableError
)
from .models import (
    Sensor,
    SensorType,
    AlarmStatus,
    ArmingStatus,
    SystemState,
    SystemConfig
)
from .services import (
    SensorStoreInterface,
    CatClassifierInterface,
    StatusListener,
    SecurityService,
    StatusListenerRegistry
)

__all__ = [
    # Core management
    'ConfigManager',
    'SecurityService',
    'StatusListenerRegistry',

    # Errors
    'SecuritySystemError',
    'UnknownSensorError',
    'ClassifierUnavailableError',
    'StoreUnavailableError',

    # Data models
    'Sensor',
    'SensorType',
    'AlarmStatus',
    'ArmingStatus',
    'SystemState',
    'SystemConfig',

    # Service interfaces
    'SensorStoreInterface',
    'CatClassifierInterface',
    'StatusListener'
]
