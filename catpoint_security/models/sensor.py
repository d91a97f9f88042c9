"""Sensor data models."""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from functools import total_ordering
from typing import Any, Dict


class SensorType(Enum):
    """Kinds of sensor the system can monitor."""
    DOOR = "DOOR"
    WINDOW = "WINDOW"
    MOTION = "MOTION"


@total_ordering
@dataclass(eq=False)
class Sensor:
    """A binary input device reporting active or inactive.

    Identity is the ``sensor_id``: two sensors are equal when their ids match,
    whatever their name, type or activation. Sorting is by name, then sensor
    type, then id so that listings stay stable.
    """
    name: str
    sensor_type: SensorType
    sensor_id: uuid.UUID = field(default_factory=uuid.uuid4)
    active: bool = False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Sensor):
            return NotImplemented
        return self.sensor_id == other.sensor_id

    def __hash__(self) -> int:
        return hash(self.sensor_id)

    def __lt__(self, other: "Sensor") -> bool:
        if not isinstance(other, Sensor):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def _sort_key(self):
        return (self.name, self.sensor_type.name, str(self.sensor_id))

    def copy(self) -> "Sensor":
        """Return an independent copy of this sensor."""
        return Sensor(name=self.name, sensor_type=self.sensor_type,
                      sensor_id=self.sensor_id, active=self.active)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sensor_id': str(self.sensor_id),
            'name': self.name,
            'sensor_type': self.sensor_type.value,
            'active': self.active
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Sensor":
        """Build a sensor from a dictionary produced by ``to_dict``."""
        sensor_id = data.get('sensor_id')
        return cls(
            name=data['name'],
            sensor_type=SensorType(str(data['sensor_type']).upper()),
            sensor_id=uuid.UUID(str(sensor_id)) if sensor_id else uuid.uuid4(),
            active=bool(data.get('active', False))
        )
