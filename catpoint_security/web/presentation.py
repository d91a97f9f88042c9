"""Display text and colors for alarm and arming states."""

from typing import Dict, Tuple

from ..models.status import AlarmStatus, ArmingStatus

RGB = Tuple[int, int, int]

ALARM_STATUS_DISPLAY: Dict[AlarmStatus, Tuple[str, RGB]] = {
    AlarmStatus.NO_ALARM: ("Cool and Good", (120, 200, 30)),
    AlarmStatus.PENDING_ALARM: ("I'm in Danger...", (200, 150, 20)),
    AlarmStatus.ALARM: ("Awooga!", (250, 80, 50)),
}

ARMING_STATUS_DISPLAY: Dict[ArmingStatus, Tuple[str, RGB]] = {
    ArmingStatus.DISARMED: ("Disarmed", (120, 200, 30)),
    ArmingStatus.ARMED_HOME: ("Armed - At Home", (190, 180, 50)),
    ArmingStatus.ARMED_AWAY: ("Armed - Away", (170, 30, 150)),
}

CAT_DETECTED_HEADER = "DANGER - CAT DETECTED"
NO_CAT_HEADER = "Camera Feed - No Cats Detected"
DEFAULT_CAMERA_HEADER = "Camera Feed"


def to_hex(color: RGB) -> str:
    return "#{:02x}{:02x}{:02x}".format(*color)


def describe_alarm_status(status: AlarmStatus) -> Dict[str, str]:
    description, color = ALARM_STATUS_DISPLAY[status]
    return {'value': status.value, 'description': description, 'color': to_hex(color)}


def describe_arming_status(status: ArmingStatus) -> Dict[str, str]:
    description, color = ARMING_STATUS_DISPLAY[status]
    return {'value': status.value, 'description': description, 'color': to_hex(color)}
