"""Default configuration values and constants."""

from typing import Dict, Any

# Default system configuration
DEFAULT_CONFIG: Dict[str, Any] = {
    # Persistence settings
    "database_path": "data/security.db",

    # Classifier settings
    "classifier_backend": "fake",
    "classifier_endpoint": "",
    "classifier_api_key": "",
    "classifier_timeout_seconds": 10.0,
    "cascade_path": "",

    # Logging settings
    "log_level": "INFO",
    "log_dir": "logs",

    # Web control surface
    "web_host": "127.0.0.1",
    "web_port": 5000
}

# System constants
SYSTEM_CONSTANTS = {
    "CAT_CONFIDENCE_THRESHOLD": 50.0,  # Percent
    "MAX_IMAGE_UPLOAD_MB": 16,
    "LOG_ROTATION_SIZE_MB": 10,
    "LOG_BACKUP_COUNT": 5
}

CLASSIFIER_BACKENDS = ("fake", "haar", "remote")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# File paths and directories
DEFAULT_PATHS = {
    "config_file": "config.json",
    "data_dir": "data",
    "logs_dir": "logs",
    "database_file": "data/security.db"
}

# Haar cascade settings for the local classifier
CASCADE_SETTINGS = {
    "cascade_files": (
        "haarcascade_frontalcatface_extended.xml",
        "haarcascade_frontalcatface.xml"
    ),
    "scale_factor": 1.1,
    "min_neighbors": 3,
    "min_size": (30, 30),
    "neighbors_for_full_confidence": 12
}
