"""Services for the home security system."""

from .interfaces import (
    SensorStoreInterface,
    CatClassifierInterface,
    StatusListener
)
from .security_service import SecurityService
from .status_listeners import StatusListenerRegistry

__all__ = [
    'SensorStoreInterface',
    'CatClassifierInterface',
    'StatusListener',
    'SecurityService',
    'StatusListenerRegistry'
]
