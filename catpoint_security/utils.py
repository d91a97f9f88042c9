"""Utility functions for the home security system."""

import os
import uuid
from typing import Union


def ensure_directory_exists(path: str) -> None:
    """Ensure a directory exists, create if it doesn't."""
    if not os.path.exists(path):
        os.makedirs(path, exist_ok=True)


def parse_sensor_id(value: Union[str, uuid.UUID]) -> uuid.UUID:
    """Parse a sensor identifier, raising ValueError if it is malformed."""
    if isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value).strip())

