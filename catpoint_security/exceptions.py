"""Exceptions raised by the home security system."""


class SecuritySystemError(Exception):
    """Base class for all security system errors."""


class UnknownSensorError(SecuritySystemError):
    """An operation referenced a sensor that is not in the store."""

    def __init__(self, sensor_id):
        self.sensor_id = sensor_id
        super().__init__(f"Unknown sensor: {sensor_id}")


class ClassifierUnavailableError(SecuritySystemError):
    """The cat classifier could not be reached or could not decode the image."""


class StoreUnavailableError(SecuritySystemError):
    """A read or write against the sensor store failed."""
