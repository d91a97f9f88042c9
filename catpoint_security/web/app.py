"""Flask JSON API for controlling the home security system."""

import threading
from typing import Any, Dict, Optional, Tuple

from flask import Flask, jsonify, request

from ..models.sensor import Sensor, SensorType
from ..models.status import AlarmStatus, ArmingStatus
from ..services.interfaces import StatusListener
from ..services.security_service import SecurityService
from ..exceptions import (
    ClassifierUnavailableError,
    SecuritySystemError,
    UnknownSensorError
)
from ..config.defaults import SYSTEM_CONSTANTS
from .presentation import (
    CAT_DETECTED_HEADER,
    DEFAULT_CAMERA_HEADER,
    NO_CAT_HEADER,
    describe_alarm_status,
    describe_arming_status
)
from ..logging_config import get_logger

logger = get_logger("web")


class WebStatusListener(StatusListener):
    """Keeps the display values the dashboard shows between requests."""

    def __init__(self, alarm_status: AlarmStatus = AlarmStatus.NO_ALARM):
        self._lock = threading.Lock()
        self.alarm_status = alarm_status
        self.camera_header = DEFAULT_CAMERA_HEADER
        self.sensor_revision = 0

    def notify(self, status: AlarmStatus) -> None:
        with self._lock:
            self.alarm_status = status

    def cat_detected(self, cat_detected: bool) -> None:
        with self._lock:
            self.camera_header = CAT_DETECTED_HEADER if cat_detected else NO_CAT_HEADER

    def sensor_status_changed(self) -> None:
        with self._lock:
            self.sensor_revision += 1

    def to_dict(self) -> Dict[str, Any]:
        with self._lock:
            return {
                'alarm': describe_alarm_status(self.alarm_status),
                'camera_header': self.camera_header,
                'sensor_revision': self.sensor_revision
            }


class SecurityWebApp:
    """Flask application exposing the security service as a JSON API."""

    def __init__(self, service: SecurityService):
        self.app = Flask(__name__)
        self.service = service

        self.app.config['MAX_CONTENT_LENGTH'] = SYSTEM_CONSTANTS["MAX_IMAGE_UPLOAD_MB"] * 1024 * 1024

        self.listener = WebStatusListener(service.get_alarm_status())
        self.service.add_status_listener(self.listener)

        self._setup_routes()

        logger.info("Security web application initialized")

    def _setup_routes(self):
        """Setup Flask routes."""

        @self.app.route('/api/status')
        def api_status():
            """Get the full system state."""
            try:
                state = self.service.get_state()
                data = state.to_dict()
                data['arming'] = describe_arming_status(state.arming_status)
                data['display'] = self.listener.to_dict()
                return self._success(data)
            except SecuritySystemError as e:
                return self._failure(e)

        @self.app.route('/api/arming', methods=['POST'])
        def api_set_arming():
            """Change the arming mode."""
            data = self._json_body()
            if data is None:
                return self._bad_request("JSON object body required")
            try:
                arming_status = ArmingStatus(str(data.get('arming_status', '')).upper())
            except ValueError:
                return self._bad_request(
                    f"arming_status must be one of {[s.value for s in ArmingStatus]}")

            try:
                self.service.set_arming_status(arming_status)
            except SecuritySystemError as e:
                return self._failure(e)

            return self._success({
                'arming_status': arming_status.value,
                'alarm_status': self.service.get_alarm_status().value
            })

        @self.app.route('/api/sensors', methods=['GET'])
        def api_list_sensors():
            """List sensors in display order."""
            try:
                sensors = self.service.get_sensors()
            except SecuritySystemError as e:
                return self._failure(e)
            return self._success([sensor.to_dict() for sensor in sensors])

        @self.app.route('/api/sensors', methods=['POST'])
        def api_add_sensor():
            """Add a new, inactive sensor."""
            data = self._json_body()
            if data is None:
                return self._bad_request("JSON object body required")
            name = str(data.get('name', '')).strip()
            if not name:
                return self._bad_request("name is required")

            try:
                sensor_type = SensorType(str(data.get('sensor_type', '')).upper())
            except ValueError:
                return self._bad_request(
                    f"sensor_type must be one of {[t.value for t in SensorType]}")

            sensor = Sensor(name=name, sensor_type=sensor_type)
            try:
                self.service.add_sensor(sensor)
            except SecuritySystemError as e:
                return self._failure(e)

            return self._success(sensor.to_dict(), 201)

        @self.app.route('/api/sensors/<sensor_id>', methods=['DELETE'])
        def api_remove_sensor(sensor_id):
            """Remove a sensor."""
            try:
                self.service.remove_sensor(sensor_id)
            except SecuritySystemError as e:
                return self._failure(e)
            return self._success({'sensor_id': sensor_id})

        @self.app.route('/api/sensors/<sensor_id>/active', methods=['PUT'])
        def api_set_sensor_active(sensor_id):
            """Activate or deactivate a sensor."""
            data = self._json_body()
            if data is None:
                return self._bad_request("JSON object body required")
            active = data.get('active')
            if not isinstance(active, bool):
                return self._bad_request("active must be true or false")

            try:
                self.service.change_sensor_activation_status(sensor_id, active)
            except SecuritySystemError as e:
                return self._failure(e)

            return self._success({
                'sensor_id': sensor_id,
                'active': active,
                'alarm_status': self.service.get_alarm_status().value
            })

        @self.app.route('/api/image', methods=['POST'])
        def api_process_image():
            """Scan an uploaded camera image for cats."""
            upload = request.files.get('image')
            image = upload.read() if upload is not None else request.get_data()
            if not image:
                return self._bad_request("No image provided")

            try:
                cat_detected = self.service.process_image(image)
            except SecuritySystemError as e:
                return self._failure(e)

            return self._success({
                'cat_detected': cat_detected,
                'camera_header': self.listener.camera_header,
                'alarm_status': self.service.get_alarm_status().value
            })

    @staticmethod
    def _json_body() -> Optional[Dict[str, Any]]:
        """Return the JSON object body, {} when there is none, or None if it is not an object."""
        data = request.get_json(silent=True)
        if data is None:
            return {}
        return data if isinstance(data, dict) else None

    @staticmethod
    def _success(data: Any, status_code: int = 200) -> Tuple[Any, int]:
        return jsonify({'success': True, 'data': data}), status_code

    @staticmethod
    def _bad_request(message: str) -> Tuple[Any, int]:
        return jsonify({'success': False, 'error': message}), 400

    @staticmethod
    def _failure(error: SecuritySystemError) -> Tuple[Any, int]:
        if isinstance(error, UnknownSensorError):
            status_code = 404
        elif isinstance(error, ClassifierUnavailableError):
            status_code = 503
        else:
            status_code = 500

        if status_code >= 500:
            logger.error(f"Request failed: {error}", extra={'context': {
                'method': request.method,
                'path': request.path
            }})
        return jsonify({'success': False, 'error': str(error)}), status_code

    def run(self, host: str = '127.0.0.1', port: int = 5000, debug: bool = False):
        """Run the Flask application."""
        logger.info(f"Starting security web interface on {host}:{port}")
        self.app.run(host=host, port=port, debug=debug, threaded=True)

    def get_app(self) -> Flask:
        """Get the Flask app instance for external WSGI servers."""
        return self.app


def create_app(service: SecurityService) -> Flask:
    """Factory function to create Flask app."""
    web_app = SecurityWebApp(service)
    return web_app.get_app()
