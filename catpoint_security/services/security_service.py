"""Security service: decides and transitions the alarm state."""

import threading
import uuid
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Tuple, Union

from ..models.sensor import Sensor
from ..models.status import AlarmStatus, ArmingStatus, SystemState
from ..exceptions import ClassifierUnavailableError, UnknownSensorError
from ..config.defaults import SYSTEM_CONSTANTS
from ..utils import parse_sensor_id
from .interfaces import CatClassifierInterface, ImageInput, SensorStoreInterface, StatusListener
from .status_listeners import StatusListenerRegistry
from .error_handler import ErrorHandler, ErrorSeverity, global_error_handler
from ..logging_config import get_logger

logger = get_logger("security_service")

CAT_CONFIDENCE_THRESHOLD = SYSTEM_CONSTANTS["CAT_CONFIDENCE_THRESHOLD"]

SensorRef = Union[Sensor, uuid.UUID, str]

_ALARM_EVENT = "alarm_status"
_CAT_EVENT = "cat_detected"
_SENSORS_EVENT = "sensor_status_changed"


class SecurityService:
    """Receives sensor, arming and camera events and decides the alarm status.

    Every state change goes through the injected store. Each public operation
    is one exclusive, atomic unit: it runs under a single lock inside a store
    transaction, and the listener notifications it produces are delivered, in
    order, only after the transaction commits. If the store fails part way, the
    transaction is rolled back, the cat flag is restored and nobody is
    notified.
    """

    def __init__(self,
                 store: SensorStoreInterface,
                 classifier: CatClassifierInterface,
                 error_handler: Optional[ErrorHandler] = None):
        self.store = store
        self.classifier = classifier
        self.error_handler = error_handler or global_error_handler
        self.listeners = StatusListenerRegistry(self.error_handler)

        self._cat_detected = False
        self._lock = threading.RLock()
        self._operation_depth = 0
        self._pending_events: List[Tuple[str, Any]] = []

        self.error_handler.register_component("security_service")
        self.error_handler.register_component("cat_classifier")

    # Listener registration

    def add_status_listener(self, listener: StatusListener) -> None:
        self.listeners.add(listener)

    def remove_status_listener(self, listener: StatusListener) -> None:
        self.listeners.remove(listener)

    # Queries

    def get_alarm_status(self) -> AlarmStatus:
        return self.store.get_alarm_status()

    def get_arming_status(self) -> ArmingStatus:
        return self.store.get_arming_status()

    def get_sensors(self) -> List[Sensor]:
        return self.store.get_sensors()

    def is_cat_detected(self) -> bool:
        return self._cat_detected

    def get_state(self) -> SystemState:
        """Return a consistent snapshot of the whole system state."""
        with self._lock:
            return SystemState(
                alarm_status=self.store.get_alarm_status(),
                arming_status=self.store.get_arming_status(),
                cat_detected=self._cat_detected,
                sensors=self.store.get_sensors()
            )

    # Sensor management

    def add_sensor(self, sensor: Sensor) -> None:
        """Add a sensor; adding an already known id is a no-op."""
        with self._operation():
            self.store.add_sensor(sensor)
        logger.info(f"Sensor added: {sensor.name} ({sensor.sensor_type.value})")

    def remove_sensor(self, sensor: SensorRef) -> None:
        """Remove a known sensor.

        Raises:
            UnknownSensorError: No sensor with that id is stored.
        """
        with self._operation():
            stored = self._find_sensor(sensor)
            self.store.remove_sensor(stored)
        logger.info(f"Sensor removed: {stored.name}")

    # State transitions

    def set_alarm_status(self, status: AlarmStatus) -> None:
        """Change the alarm status and notify every listener."""
        with self._operation():
            self._apply_alarm_status(status)

    def set_arming_status(self, arming_status: ArmingStatus) -> None:
        """Change the arming mode.

        A detected cat raises the alarm when arming at home, before any
        sensor is touched. Disarming clears the alarm. Arming resets every
        active sensor through the normal deactivation rules.
        """
        with self._operation():
            if self._cat_detected and arming_status == ArmingStatus.ARMED_HOME:
                self._apply_alarm_status(AlarmStatus.ALARM)

            if arming_status == ArmingStatus.DISARMED:
                self._apply_alarm_status(AlarmStatus.NO_ALARM)
            else:
                for sensor in self.store.get_sensors():
                    if sensor.active:
                        self._change_sensor_activation(sensor, False)

            self.store.set_arming_status(arming_status)
            self._queue_event(_SENSORS_EVENT)
        logger.info(f"Arming status set to {arming_status.value}")

    def change_sensor_activation_status(self, sensor: SensorRef, active: bool) -> None:
        """Record a sensor activation change and update the alarm if needed.

        Raises:
            UnknownSensorError: No sensor with that id is stored. Nothing is
                written in that case.
        """
        with self._operation():
            stored = self._find_sensor(sensor)
            self._change_sensor_activation(stored, bool(active))

    def process_image(self, image: ImageInput) -> bool:
        """Classify a camera image and update the alarm for the result.

        The classifier runs outside the service lock; only applying the result
        is exclusive.

        Returns:
            True if a cat was detected.

        Raises:
            ClassifierUnavailableError: The classifier failed. State is left
                untouched and listeners are not notified.
        """
        cat = self._classify(image)

        with self._operation():
            self._cat_detected = cat

            if cat and self.store.get_arming_status() == ArmingStatus.ARMED_HOME:
                self._apply_alarm_status(AlarmStatus.ALARM)
            elif not cat and self._all_sensors_inactive():
                self._apply_alarm_status(AlarmStatus.NO_ALARM)

            self._queue_event(_CAT_EVENT, cat)

        logger.info(f"Image processed: cat {'detected' if cat else 'not detected'}")
        return cat

    # Internals

    def _classify(self, image: ImageInput) -> bool:
        try:
            result = self.classifier.image_contains_cat(image, CAT_CONFIDENCE_THRESHOLD)
        except ClassifierUnavailableError as e:
            self.error_handler.handle_error("cat_classifier", e, ErrorSeverity.HIGH)
            raise
        except Exception as e:
            self.error_handler.handle_error("cat_classifier", e, ErrorSeverity.HIGH)
            raise ClassifierUnavailableError(f"Cat classifier failed: {e}") from e

        self.error_handler.mark_healthy("cat_classifier")
        return bool(result)

    def _change_sensor_activation(self, sensor: Sensor, active: bool) -> None:
        alarm_status = self.store.get_alarm_status()
        arming_status = self.store.get_arming_status()

        if alarm_status != AlarmStatus.ALARM:
            if active:
                self._handle_sensor_activated()
            elif sensor.active:
                self._handle_sensor_deactivated()

        sensor.active = active
        self.store.update_sensor(sensor)
        logger.debug(f"Sensor {sensor.name} set {'active' if active else 'inactive'}")

        # Runs even when the transitions above were skipped because of ALARM.
        if arming_status.is_armed() and self._all_sensors_inactive():
            if self.store.get_alarm_status() != AlarmStatus.NO_ALARM:
                self._apply_alarm_status(AlarmStatus.NO_ALARM)

    def _handle_sensor_activated(self) -> None:
        if self.store.get_arming_status() == ArmingStatus.DISARMED:
            return

        if self.store.get_alarm_status() == AlarmStatus.NO_ALARM:
            self._apply_alarm_status(AlarmStatus.PENDING_ALARM)
        else:
            self._apply_alarm_status(AlarmStatus.ALARM)

    def _handle_sensor_deactivated(self) -> None:
        if self.store.get_alarm_status() == AlarmStatus.PENDING_ALARM:
            self._apply_alarm_status(AlarmStatus.NO_ALARM)
        else:
            # A deactivation without a pending alarm is treated as tampering.
            self._apply_alarm_status(AlarmStatus.ALARM)

    def _apply_alarm_status(self, status: AlarmStatus) -> None:
        self.store.set_alarm_status(status)
        self._queue_event(_ALARM_EVENT, status)
        logger.info(f"Alarm status set to {status.value}")

    def _all_sensors_inactive(self) -> bool:
        return all(not sensor.active for sensor in self.store.get_sensors())

    def _find_sensor(self, sensor: SensorRef) -> Sensor:
        sensor_id = sensor.sensor_id if isinstance(sensor, Sensor) else self._parse_id(sensor)
        for stored in self.store.get_sensors():
            if stored.sensor_id == sensor_id:
                return stored
        raise UnknownSensorError(sensor_id)

    @staticmethod
    def _parse_id(value: Union[uuid.UUID, str]) -> uuid.UUID:
        try:
            return parse_sensor_id(value)
        except ValueError:
            raise UnknownSensorError(value)

    def _queue_event(self, event: str, payload: Any = None) -> None:
        self._pending_events.append((event, payload))

    @contextmanager
    def _operation(self) -> Iterator[None]:
        """Run one exclusive, atomic operation and then deliver its events."""
        with self._lock:
            outermost = self._operation_depth == 0
            cat_detected = self._cat_detected
            if outermost:
                self._pending_events = []

            self._operation_depth += 1
            try:
                with self.store.transaction():
                    yield
            except BaseException:
                if outermost:
                    self._cat_detected = cat_detected
                    self._pending_events = []
                raise
            finally:
                self._operation_depth -= 1

            if outermost:
                events, self._pending_events = self._pending_events, []
                self._dispatch(events)

    def _dispatch(self, events: List[Tuple[str, Any]]) -> None:
        for event, payload in events:
            if event == _ALARM_EVENT:
                self.listeners.broadcast_alarm_status(payload)
            elif event == _CAT_EVENT:
                self.listeners.broadcast_cat_detected(payload)
            elif event == _SENSORS_EVENT:
                self.listeners.broadcast_sensor_status_changed()
