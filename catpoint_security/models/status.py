"""Alarm and arming state models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List

from .sensor import Sensor


class AlarmStatus(Enum):
    """Escalation level of the alarm, from calm to full alarm."""
    NO_ALARM = "NO_ALARM"
    PENDING_ALARM = "PENDING_ALARM"
    ALARM = "ALARM"


class ArmingStatus(Enum):
    """Operating posture of the security system."""
    DISARMED = "DISARMED"
    ARMED_HOME = "ARMED_HOME"
    ARMED_AWAY = "ARMED_AWAY"

    def is_armed(self) -> bool:
        return self is not ArmingStatus.DISARMED


@dataclass
class SystemState:
    """Point-in-time snapshot of the security system."""
    alarm_status: AlarmStatus = AlarmStatus.NO_ALARM
    arming_status: ArmingStatus = ArmingStatus.DISARMED
    cat_detected: bool = False
    sensors: List[Sensor] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'alarm_status': self.alarm_status.value,
            'arming_status': self.arming_status.value,
            'cat_detected': self.cat_detected,
            'sensors': [sensor.to_dict() for sensor in self.sensors]
        }
