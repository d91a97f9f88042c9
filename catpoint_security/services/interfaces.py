"""Service interfaces and abstract base classes."""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator, List, Union

import numpy as np

from ..models.sensor import Sensor
from ..models.status import AlarmStatus, ArmingStatus

# Raw encoded image bytes (JPEG, PNG...) or a decoded numpy pixel array.
ImageInput = Union[bytes, bytearray, memoryview, np.ndarray]


class SensorStoreInterface(ABC):
    """Interface for the sensor and status store."""

    @abstractmethod
    def add_sensor(self, sensor: Sensor) -> None:
        """Add a sensor to the store."""
        pass

    @abstractmethod
    def remove_sensor(self, sensor: Sensor) -> None:
        """Remove a sensor from the store."""
        pass

    @abstractmethod
    def update_sensor(self, sensor: Sensor) -> None:
        """Insert or replace a sensor by identity."""
        pass

    @abstractmethod
    def get_sensors(self) -> List[Sensor]:
        """Get copies of all stored sensors."""
        pass

    @abstractmethod
    def get_alarm_status(self) -> AlarmStatus:
        """Get the persisted alarm status."""
        pass

    @abstractmethod
    def set_alarm_status(self, status: AlarmStatus) -> None:
        """Persist the alarm status."""
        pass

    @abstractmethod
    def get_arming_status(self) -> ArmingStatus:
        """Get the persisted arming status."""
        pass

    @abstractmethod
    def set_arming_status(self, status: ArmingStatus) -> None:
        """Persist the arming status."""
        pass

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Group writes so they commit or roll back together.

        Stores without transactional support apply writes immediately.
        """
        yield


class CatClassifierInterface(ABC):
    """Interface for cat image classification."""

    @abstractmethod
    def image_contains_cat(self, image: ImageInput, confidence_threshold: float) -> bool:
        """Return True if a cat is present with at least the given confidence.

        Args:
            image: Encoded image bytes or a decoded pixel array
            confidence_threshold: Minimum confidence in percent (0-100)

        Raises:
            ClassifierUnavailableError: The image could not be decoded or the
                backend could not be reached.
        """
        pass


class StatusListener(ABC):
    """Interface for components that react to security system changes."""

    @abstractmethod
    def notify(self, status: AlarmStatus) -> None:
        """Called when the alarm status changes."""
        pass

    @abstractmethod
    def cat_detected(self, cat_detected: bool) -> None:
        """Called after every processed image with the detection result."""
        pass

    @abstractmethod
    def sensor_status_changed(self) -> None:
        """Called when sensor states may have changed in bulk."""
        pass
