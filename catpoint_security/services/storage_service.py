"""Sensor store implementations for sensors and system status."""

import os
import sqlite3
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, TypeVar

from ..models.sensor import Sensor
from ..models.status import AlarmStatus, ArmingStatus
from ..exceptions import StoreUnavailableError
from .interfaces import SensorStoreInterface
from .error_handler import ErrorHandler, ErrorSeverity, global_error_handler
from ..utils import ensure_directory_exists
from ..logging_config import get_logger

logger = get_logger("storage_service")

ALARM_STATUS_KEY = "alarm_status"
ARMING_STATUS_KEY = "arming_status"

T = TypeVar("T")


class InMemorySensorStore(SensorStoreInterface):
    """Non-durable store kept in process memory.

    Transactions take a snapshot on entry and restore it if the block raises.
    """

    def __init__(self,
                 sensors: Optional[List[Sensor]] = None,
                 alarm_status: AlarmStatus = AlarmStatus.NO_ALARM,
                 arming_status: ArmingStatus = ArmingStatus.DISARMED):
        self._sensors: Dict = {sensor.sensor_id: sensor.copy() for sensor in sensors or []}
        self._alarm_status = alarm_status
        self._arming_status = arming_status
        self._lock = threading.RLock()
        self._transaction_depth = 0

    def add_sensor(self, sensor: Sensor) -> None:
        with self._lock:
            self._sensors.setdefault(sensor.sensor_id, sensor.copy())

    def remove_sensor(self, sensor: Sensor) -> None:
        with self._lock:
            self._sensors.pop(sensor.sensor_id, None)

    def update_sensor(self, sensor: Sensor) -> None:
        with self._lock:
            self._sensors[sensor.sensor_id] = sensor.copy()

    def get_sensors(self) -> List[Sensor]:
        with self._lock:
            return sorted(sensor.copy() for sensor in self._sensors.values())

    def get_alarm_status(self) -> AlarmStatus:
        return self._alarm_status

    def set_alarm_status(self, status: AlarmStatus) -> None:
        self._alarm_status = status

    def get_arming_status(self) -> ArmingStatus:
        return self._arming_status

    def set_arming_status(self, status: ArmingStatus) -> None:
        self._arming_status = status

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            snapshot = self._snapshot()
            self._transaction_depth += 1
            try:
                yield
            except BaseException:
                if self._transaction_depth == 1:
                    self._restore(snapshot)
                raise
            finally:
                self._transaction_depth -= 1

    def _snapshot(self) -> Tuple[Dict, AlarmStatus, ArmingStatus]:
        sensors = {sensor_id: sensor.copy() for sensor_id, sensor in self._sensors.items()}
        return sensors, self._alarm_status, self._arming_status

    def _restore(self, snapshot: Tuple[Dict, AlarmStatus, ArmingStatus]) -> None:
        self._sensors, self._alarm_status, self._arming_status = snapshot
        logger.debug("In-memory store rolled back")


class SqliteSensorStore(SensorStoreInterface):
    """Durable store backed by a SQLite database file."""

    def __init__(self, database_path: str = "data/security.db",
                 error_handler: Optional[ErrorHandler] = None):
        """
        Initialize the store.

        Args:
            database_path: Path to SQLite database file, or ":memory:"
            error_handler: Error handler to report storage failures to
        """
        self.database_path = database_path
        self.error_handler = error_handler or global_error_handler
        self._lock = threading.RLock()
        self._transaction_depth = 0
        self._conn: Optional[sqlite3.Connection] = None

        self.error_handler.register_component("storage_service")

        self._initialize_storage()

    def _initialize_storage(self) -> None:
        """Create the database directory, connection and tables."""
        if self.database_path != ":memory:":
            directory = os.path.dirname(self.database_path)
            if directory:
                ensure_directory_exists(directory)

        try:
            # Autocommit mode; transactions are opened explicitly with BEGIN.
            self._conn = sqlite3.connect(self.database_path, isolation_level=None,
                                         check_same_thread=False)
            cursor = self._conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS sensors (
                    sensor_id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    sensor_type TEXT NOT NULL,
                    active INTEGER NOT NULL DEFAULT 0
                )
            """)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS system_status (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
        except sqlite3.Error as e:
            self._report(e)
            raise StoreUnavailableError(f"Failed to initialize database {self.database_path}: {e}") from e

        logger.info(f"Sensor store initialized: {self.database_path}")

    def add_sensor(self, sensor: Sensor) -> None:
        self._execute("""
            INSERT OR IGNORE INTO sensors (sensor_id, name, sensor_type, active)
            VALUES (?, ?, ?, ?)
        """, self._sensor_row(sensor))

    def remove_sensor(self, sensor: Sensor) -> None:
        self._execute("DELETE FROM sensors WHERE sensor_id = ?", (str(sensor.sensor_id),))

    def update_sensor(self, sensor: Sensor) -> None:
        self._execute("""
            INSERT OR REPLACE INTO sensors (sensor_id, name, sensor_type, active)
            VALUES (?, ?, ?, ?)
        """, self._sensor_row(sensor))

    def get_sensors(self) -> List[Sensor]:
        rows = self._query("SELECT sensor_id, name, sensor_type, active FROM sensors")
        sensors = []
        for sensor_id, name, sensor_type, active in rows:
            sensors.append(self._parse_row(Sensor.from_dict, {
                'sensor_id': sensor_id,
                'name': name,
                'sensor_type': sensor_type,
                'active': bool(active)
            }))
        return sorted(sensors)

    def get_alarm_status(self) -> AlarmStatus:
        return self._parse_row(AlarmStatus, self._get_status(ALARM_STATUS_KEY, AlarmStatus.NO_ALARM.value))

    def set_alarm_status(self, status: AlarmStatus) -> None:
        self._set_status(ALARM_STATUS_KEY, status.value)

    def get_arming_status(self) -> ArmingStatus:
        return self._parse_row(ArmingStatus, self._get_status(ARMING_STATUS_KEY, ArmingStatus.DISARMED.value))

    def set_arming_status(self, status: ArmingStatus) -> None:
        self._set_status(ARMING_STATUS_KEY, status.value)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Run the enclosed writes in one SQLite transaction.

        Nested blocks join the outermost transaction.
        """
        with self._lock:
            outermost = self._transaction_depth == 0
            if outermost:
                self._execute("BEGIN")
            self._transaction_depth += 1
            try:
                yield
            except BaseException:
                self._transaction_depth -= 1
                if outermost:
                    self._rollback()
                raise
            else:
                self._transaction_depth -= 1
                if outermost:
                    try:
                        self._execute("COMMIT")
                    except StoreUnavailableError:
                        self._rollback()
                        raise

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def _rollback(self) -> None:
        try:
            self._conn.execute("ROLLBACK")
            logger.warning("Sensor store transaction rolled back")
        except sqlite3.Error as e:
            self._report(e)
            logger.error(f"Failed to roll back transaction: {e}")

    def _parse_row(self, parse: Callable[[Any], T], value: Any) -> T:
        """Convert a stored value, treating malformed data as a store failure."""
        try:
            return parse(value)
        except (ValueError, TypeError) as e:
            self._report(e)
            raise StoreUnavailableError(f"Corrupt value in sensor store: {e}") from e

    def _get_status(self, key: str, default: str) -> str:
        rows = self._query("SELECT value FROM system_status WHERE key = ?", (key,))
        return rows[0][0] if rows else default

    def _set_status(self, key: str, value: str) -> None:
        self._execute("INSERT OR REPLACE INTO system_status (key, value) VALUES (?, ?)", (key, value))

    @staticmethod
    def _sensor_row(sensor: Sensor) -> Tuple[str, str, str, int]:
        return (str(sensor.sensor_id), sensor.name, sensor.sensor_type.value, int(sensor.active))

    def _execute(self, sql: str, params: tuple = ()) -> None:
        with self._lock:
            if self._conn is None:
                raise StoreUnavailableError("Sensor store is closed")
            try:
                self._conn.execute(sql, params)
            except sqlite3.Error as e:
                self._report(e)
                raise StoreUnavailableError(f"Sensor store write failed: {e}") from e

    def _query(self, sql: str, params: tuple = ()) -> list:
        with self._lock:
            if self._conn is None:
                raise StoreUnavailableError("Sensor store is closed")
            try:
                return self._conn.execute(sql, params).fetchall()
            except sqlite3.Error as e:
                self._report(e)
                raise StoreUnavailableError(f"Sensor store read failed: {e}") from e

    def _report(self, error: Exception) -> None:
        self.error_handler.handle_error("storage_service", error, ErrorSeverity.HIGH)
