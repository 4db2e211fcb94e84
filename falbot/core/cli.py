"""
Handles command-line interface parsing and actions.
"""
import argparse
import sys

from falbot import __version__
from falbot.config import ConfigurationError, load_config, validate_required_env
from falbot.utils.logging import get_logger

SECRET_MARKERS = ("TOKEN", "SECRET", "API_KEY")


def parse_arguments(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="fal.ai Discord generation bot")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    parser.add_argument("--config-check", action="store_true", help="Validate configuration and exit.")
    parser.add_argument("--version", action="store_true", help="Show version info and exit.")
    return parser.parse_args(argv)


def show_version_info():
    """Display version and interpreter information."""
    print(f"falbot - Version {__version__}")
    print(f"Python Version: {sys.version}")


def redact(key: str, value):
    if any(marker in key for marker in SECRET_MARKERS) and value:
        return "********"
    return value


def validate_configuration_only() -> bool:
    """Validate configuration and log the active settings; False on failure."""
    logger = get_logger(__name__)
    try:
        logger.info("--- Running Configuration-Only Validation ---", extra={"subsys": "core", "event": "config_check_start"})
        validate_required_env()
        config = load_config()
    except ConfigurationError as e:
        logger.critical(f"Configuration error: {e}", extra={"subsys": "core", "event": "config_fail"})
        return False

    logger.info("Configuration validation successful. The following settings are active:", extra={"subsys": "core", "event": "config_valid_start"})
    for key, value in config.items():
        logger.info(f"  • {key}: {redact(key, value)}", extra={"subsys": "core", "event": "config_valid"})
    return True
