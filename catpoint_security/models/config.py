"""Configuration data models."""

from dataclasses import dataclass


@dataclass
class SystemConfig:
    """System configuration settings."""
    # Persistence settings
    database_path: str = "data/security.db"

    # Classifier settings
    classifier_backend: str = "fake"  # fake, haar, remote
    classifier_endpoint: str = ""
    classifier_api_key: str = ""
    classifier_timeout_seconds: float = 10.0
    cascade_path: str = ""

    # Logging settings
    log_level: str = "INFO"
    log_dir: str = "logs"

    # Web control surface
    web_host: str = "127.0.0.1"
    web_port: int = 5000
