"""Unit tests for data models."""

import unittest
import uuid
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from catpoint_security.models.sensor import Sensor, SensorType
from catpoint_security.models.status import AlarmStatus, ArmingStatus, SystemState
from catpoint_security.models.config import SystemConfig
from catpoint_security.config.defaults import DEFAULT_CONFIG


class TestSensor(unittest.TestCase):
    """Test cases for Sensor."""

    def test_defaults(self):
        sensor = Sensor(name="Front Door", sensor_type=SensorType.DOOR)
        self.assertFalse(sensor.active)
        self.assertIsInstance(sensor.sensor_id, uuid.UUID)

    def test_equality_by_id_only(self):
        sensor = Sensor(name="Front Door", sensor_type=SensorType.DOOR)
        same = Sensor(name="Renamed", sensor_type=SensorType.WINDOW,
                      sensor_id=sensor.sensor_id, active=True)
        other = Sensor(name="Front Door", sensor_type=SensorType.DOOR)

        self.assertEqual(sensor, same)
        self.assertEqual(hash(sensor), hash(same))
        self.assertNotEqual(sensor, other)
        self.assertEqual(len({sensor, same, other}), 2)

    def test_ordering(self):
        sensor_id = uuid.UUID("00000000-0000-0000-0000-000000000001")
        later_id = uuid.UUID("00000000-0000-0000-0000-000000000002")
        sensors = [
            Sensor(name="Window", sensor_type=SensorType.WINDOW),
            Sensor(name="Door", sensor_type=SensorType.WINDOW, sensor_id=later_id),
            Sensor(name="Door", sensor_type=SensorType.WINDOW, sensor_id=sensor_id),
            Sensor(name="Door", sensor_type=SensorType.MOTION),
        ]

        ordered = sorted(sensors)

        self.assertEqual([(s.name, s.sensor_type) for s in ordered], [
            ("Door", SensorType.MOTION),
            ("Door", SensorType.WINDOW),
            ("Door", SensorType.WINDOW),
            ("Window", SensorType.WINDOW),
        ])
        self.assertEqual(ordered[1].sensor_id, sensor_id)

    def test_copy_is_independent(self):
        sensor = Sensor(name="Hall", sensor_type=SensorType.MOTION)
        copy = sensor.copy()
        copy.active = True

        self.assertEqual(copy, sensor)
        self.assertFalse(sensor.active)

    def test_dict_conversion(self):
        sensor = Sensor(name="Hall", sensor_type=SensorType.MOTION, active=True)
        data = sensor.to_dict()

        self.assertEqual(data['sensor_type'], 'MOTION')
        self.assertEqual(data['sensor_id'], str(sensor.sensor_id))

        restored = Sensor.from_dict(data)
        self.assertEqual(restored, sensor)
        self.assertTrue(restored.active)

    def test_from_dict_without_id(self):
        sensor = Sensor.from_dict({'name': 'Garage', 'sensor_type': 'door'})
        self.assertEqual(sensor.sensor_type, SensorType.DOOR)
        self.assertFalse(sensor.active)

    def test_from_dict_invalid_type(self):
        with self.assertRaises(ValueError):
            Sensor.from_dict({'name': 'Garage', 'sensor_type': 'laser'})


class TestStatus(unittest.TestCase):
    """Test cases for status enums and state snapshot."""

    def test_is_armed(self):
        self.assertFalse(ArmingStatus.DISARMED.is_armed())
        self.assertTrue(ArmingStatus.ARMED_HOME.is_armed())
        self.assertTrue(ArmingStatus.ARMED_AWAY.is_armed())

    def test_default_state(self):
        state = SystemState()
        self.assertEqual(state.to_dict(), {
            'alarm_status': AlarmStatus.NO_ALARM.value,
            'arming_status': ArmingStatus.DISARMED.value,
            'cat_detected': False,
            'sensors': []
        })


class TestSystemConfig(unittest.TestCase):
    """Test cases for SystemConfig."""

    def test_defaults_match_default_config(self):
        config = SystemConfig()
        for key, value in DEFAULT_CONFIG.items():
            self.assertEqual(getattr(config, key), value)


if __name__ == '__main__':
    unittest.main()
