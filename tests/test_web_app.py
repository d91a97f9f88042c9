"""Unit tests for web application."""

import unittest
import io
import json
from unittest.mock import Mock
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from catpoint_security.web.app import SecurityWebApp, WebStatusListener, create_app
from catpoint_security.web.presentation import CAT_DETECTED_HEADER, NO_CAT_HEADER
from catpoint_security.services.security_service import SecurityService
from catpoint_security.services.storage_service import InMemorySensorStore
from catpoint_security.services.interfaces import CatClassifierInterface
from catpoint_security.services.error_handler import ErrorHandler
from catpoint_security.models.sensor import Sensor, SensorType
from catpoint_security.models.status import AlarmStatus, ArmingStatus
from catpoint_security.exceptions import ClassifierUnavailableError, StoreUnavailableError


class TestSecurityWebApp(unittest.TestCase):
    """Test cases for SecurityWebApp."""

    def setUp(self):
        """Set up test fixtures."""
        self.door = Sensor(name="Front Door", sensor_type=SensorType.DOOR)
        self.store = InMemorySensorStore([self.door])
        self.classifier = Mock(spec=CatClassifierInterface)
        self.classifier.image_contains_cat.return_value = False
        self.service = SecurityService(self.store, self.classifier, ErrorHandler())

        self.web_app = SecurityWebApp(self.service)
        self.web_app.app.config['TESTING'] = True
        self.client = self.web_app.app.test_client()

    def put_json(self, url, payload):
        return self.client.put(url, data=json.dumps(payload), content_type='application/json')

    def post_json(self, url, payload):
        return self.client.post(url, data=json.dumps(payload), content_type='application/json')

    def test_web_app_initialization(self):
        """Test web application initialization."""
        self.assertIsNotNone(self.web_app.app)
        self.assertIs(self.web_app.service, self.service)
        self.assertIn(self.web_app.listener, self.service.listeners)

    def test_api_status(self):
        """Test API status endpoint."""
        response = self.client.get('/api/status')
        self.assertEqual(response.status_code, 200)

        data = json.loads(response.data)
        self.assertTrue(data['success'])
        self.assertEqual(data['data']['alarm_status'], 'NO_ALARM')
        self.assertEqual(data['data']['arming_status'], 'DISARMED')
        self.assertFalse(data['data']['cat_detected'])
        self.assertEqual(len(data['data']['sensors']), 1)
        self.assertEqual(data['data']['arming']['description'], 'Disarmed')
        self.assertEqual(data['data']['display']['alarm']['value'], 'NO_ALARM')

    def test_api_set_arming(self):
        response = self.post_json('/api/arming', {'arming_status': 'armed_away'})
        self.assertEqual(response.status_code, 200)

        data = json.loads(response.data)
        self.assertEqual(data['data']['arming_status'], 'ARMED_AWAY')
        self.assertEqual(self.service.get_arming_status(), ArmingStatus.ARMED_AWAY)

    def test_api_set_arming_invalid(self):
        response = self.post_json('/api/arming', {'arming_status': 'ARMED_MOON'})
        self.assertEqual(response.status_code, 400)
        self.assertFalse(json.loads(response.data)['success'])

        response = self.client.post('/api/arming')
        self.assertEqual(response.status_code, 400)

    def test_non_object_json_body_rejected(self):
        routes = [
            (self.post_json, '/api/arming'),
            (self.post_json, '/api/sensors'),
            (self.put_json, f'/api/sensors/{self.door.sensor_id}/active'),
        ]
        for send, url in routes:
            for payload in (["ARMED_HOME"], "ARMED_HOME", 5, [True]):
                with self.subTest(url=url, payload=payload):
                    response = send(url, payload)
                    self.assertEqual(response.status_code, 400)
                    data = json.loads(response.data)
                    self.assertFalse(data['success'])
                    self.assertEqual(data['error'], "JSON object body required")

        self.assertEqual(self.service.get_arming_status(), ArmingStatus.DISARMED)
        self.assertEqual(self.service.get_sensors(), [self.door])
        self.assertFalse(self.service.get_sensors()[0].active)

    def test_api_list_sensors(self):
        response = self.client.get('/api/sensors')
        self.assertEqual(response.status_code, 200)

        data = json.loads(response.data)
        self.assertEqual(data['data'][0]['sensor_id'], str(self.door.sensor_id))
        self.assertEqual(data['data'][0]['sensor_type'], 'DOOR')
        self.assertFalse(data['data'][0]['active'])

    def test_api_add_sensor(self):
        response = self.post_json('/api/sensors', {'name': 'Garage', 'sensor_type': 'window'})
        self.assertEqual(response.status_code, 201)

        data = json.loads(response.data)
        self.assertEqual(data['data']['name'], 'Garage')
        self.assertEqual(data['data']['sensor_type'], 'WINDOW')
        self.assertEqual(len(self.service.get_sensors()), 2)

    def test_api_add_sensor_invalid(self):
        response = self.post_json('/api/sensors', {'name': '', 'sensor_type': 'DOOR'})
        self.assertEqual(response.status_code, 400)

        response = self.post_json('/api/sensors', {'name': 'Garage', 'sensor_type': 'LASER'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(len(self.service.get_sensors()), 1)

    def test_api_remove_sensor(self):
        response = self.client.delete(f'/api/sensors/{self.door.sensor_id}')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.service.get_sensors(), [])

    def test_api_remove_unknown_sensor(self):
        response = self.client.delete('/api/sensors/not-a-sensor')
        self.assertEqual(response.status_code, 404)
        self.assertFalse(json.loads(response.data)['success'])

    def test_api_set_sensor_active(self):
        self.service.set_arming_status(ArmingStatus.ARMED_HOME)

        response = self.put_json(f'/api/sensors/{self.door.sensor_id}/active', {'active': True})
        self.assertEqual(response.status_code, 200)

        data = json.loads(response.data)
        self.assertTrue(data['data']['active'])
        self.assertEqual(data['data']['alarm_status'], 'PENDING_ALARM')
        self.assertEqual(self.web_app.listener.alarm_status, AlarmStatus.PENDING_ALARM)

    def test_api_set_sensor_active_requires_bool(self):
        response = self.put_json(f'/api/sensors/{self.door.sensor_id}/active', {'active': 'yes'})
        self.assertEqual(response.status_code, 400)
        self.assertFalse(self.service.get_sensors()[0].active)

    def test_api_set_unknown_sensor_active(self):
        response = self.put_json('/api/sensors/00000000-0000-0000-0000-000000000000/active',
                                 {'active': True})
        self.assertEqual(response.status_code, 404)

    def test_api_process_image_upload(self):
        self.service.set_arming_status(ArmingStatus.ARMED_HOME)
        self.classifier.image_contains_cat.return_value = True

        response = self.client.post('/api/image', data={
            'image': (io.BytesIO(b'jpeg-bytes'), 'cat.jpg')
        }, content_type='multipart/form-data')
        self.assertEqual(response.status_code, 200)

        data = json.loads(response.data)
        self.assertTrue(data['data']['cat_detected'])
        self.assertEqual(data['data']['camera_header'], CAT_DETECTED_HEADER)
        self.assertEqual(data['data']['alarm_status'], 'ALARM')
        self.classifier.image_contains_cat.assert_called_once_with(b'jpeg-bytes', 50.0)

    def test_api_process_image_raw_body(self):
        response = self.client.post('/api/image', data=b'raw-bytes',
                                    content_type='application/octet-stream')
        self.assertEqual(response.status_code, 200)

        data = json.loads(response.data)
        self.assertFalse(data['data']['cat_detected'])
        self.assertEqual(data['data']['camera_header'], NO_CAT_HEADER)

    def test_api_process_image_missing(self):
        response = self.client.post('/api/image')
        self.assertEqual(response.status_code, 400)
        self.classifier.image_contains_cat.assert_not_called()

    def test_api_process_image_classifier_unavailable(self):
        self.classifier.image_contains_cat.side_effect = ClassifierUnavailableError("offline")

        response = self.client.post('/api/image', data=b'raw-bytes',
                                    content_type='application/octet-stream')
        self.assertEqual(response.status_code, 503)
        self.assertFalse(json.loads(response.data)['success'])

    def test_api_store_failure(self):
        self.service.store = Mock(spec=InMemorySensorStore)
        self.service.store.get_sensors.side_effect = StoreUnavailableError("database locked")

        response = self.client.get('/api/sensors')
        self.assertEqual(response.status_code, 500)
        self.assertIn('database locked', json.loads(response.data)['error'])

    def test_create_app_factory(self):
        """Test create_app factory function."""
        app = create_app(self.service)
        self.assertIsNotNone(app)
        self.assertEqual(app.config['MAX_CONTENT_LENGTH'], 16 * 1024 * 1024)

    def test_get_app_method(self):
        self.assertIs(self.web_app.get_app(), self.web_app.app)


class TestWebStatusListener(unittest.TestCase):
    """Test cases for WebStatusListener."""

    def test_tracks_notifications(self):
        listener = WebStatusListener()

        listener.notify(AlarmStatus.ALARM)
        listener.cat_detected(True)
        listener.sensor_status_changed()

        data = listener.to_dict()
        self.assertEqual(data['alarm']['value'], 'ALARM')
        self.assertEqual(data['alarm']['description'], 'Awooga!')
        self.assertEqual(data['camera_header'], CAT_DETECTED_HEADER)
        self.assertEqual(data['sensor_revision'], 1)


if __name__ == '__main__':
    unittest.main()
