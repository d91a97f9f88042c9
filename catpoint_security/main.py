"""Entry point for the home security system."""

import argparse
import logging
import sys
from typing import List, Optional

from .config_manager import ConfigManager
from .logging_config import LoggingManager, setup_logging, get_logger
from .models.config import SystemConfig
from .services.image_service import create_classifier
from .services.security_service import SecurityService
from .services.storage_service import SqliteSensorStore
from .exceptions import SecuritySystemError


def build_service(config_manager: ConfigManager) -> SecurityService:
    """Wire the store and classifier selected by configuration into a service."""
    config = config_manager.get_config()
    store = SqliteSensorStore(config.database_path)
    classifier = create_classifier(config)
    return SecurityService(store, classifier)


def watch_log_level(config_manager: ConfigManager, logging_manager: LoggingManager) -> None:
    """Apply log level changes from the configuration while running."""
    def apply_log_level(config: SystemConfig) -> None:
        logging_manager.set_log_level(getattr(logging, str(config.log_level).upper(), logging.INFO))

    config_manager.register_change_callback(apply_log_level)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Home security controller with cat detection")
    parser.add_argument("--config", default=None, help="Path to the JSON configuration file")
    parser.add_argument("--host", default=None, help="Web API host (overrides config)")
    parser.add_argument("--port", type=int, default=None, help="Web API port (overrides config)")
    parser.add_argument("--log-level", default=None, help="Log level (overrides config)")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the security system."""
    args = parse_args(argv)

    config_manager = ConfigManager(args.config)
    config = config_manager.get_config()

    logger = get_logger("main")

    if not config_manager.validate_config():
        logger.error(f"Invalid configuration in {config_manager.config_path}")
        return 1

    logging_manager = setup_logging(args.log_level or config.log_level, config.log_dir)
    watch_log_level(config_manager, logging_manager)

    try:
        service = build_service(config_manager)
    except (SecuritySystemError, ValueError) as e:
        logger.error(f"Failed to start security system: {e}")
        return 1

    logger.info(f"Security system started: arming={service.get_arming_status().value}, "
                f"alarm={service.get_alarm_status().value}, sensors={len(service.get_sensors())}")

    from .web.app import SecurityWebApp

    web_app = SecurityWebApp(service)
    try:
        web_app.run(host=args.host or config.web_host, port=args.port or config.web_port)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        service.store.close()
        logger.info("Security system stopped")

    return 0


if __name__ == "__main__":
    sys.exit(main())
