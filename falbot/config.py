"""Configuration loading and environment setup."""
import os
import time
from pathlib import Path
from typing import Dict, Any, Optional

from dotenv import load_dotenv

from .exceptions import ConfigurationError
from .utils.logging import get_logger

logger = get_logger(__name__)

# Load environment variables from .env in the working directory, then the project root
load_dotenv(dotenv_path=Path.cwd() / ".env", verbose=False)
load_dotenv(dotenv_path=Path(__file__).parent.parent / ".env", verbose=False)

DEFAULT_FAL_BASE_URL = "https://queue.fal.run/fal-ai"
DEFAULT_DCR_ORACLE_URL = (
    "https://api.coingecko.com/api/v3/simple/price?ids=decred&vs_currencies=usd,btc"
)
DEFAULT_BTC_ORACLE_URL = (
    "https://api.coingecko.com/api/v3/simple/price?ids=bitcoin&vs_currencies=usd"
)

REQUIRED_VARS = ("DISCORD_TOKEN", "FAL_API_KEY")


def validate_required_env() -> None:
    """Validate that all required environment variables are present."""
    missing_vars = [var for var in REQUIRED_VARS if not os.getenv(var)]
    if missing_vars:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing_vars)}"
        )
    for var in REQUIRED_VARS:
        logger.debug(f"✅ {var} is set")


def _safe_int(value: Optional[str], default: str, var_name: str) -> int:
    """Safely convert environment variable to int, handling malformed values."""
    try:
        clean_value = value.split("#")[0].strip() if value else default
        return int(clean_value)
    except (ValueError, AttributeError):
        logger.warning(f"Invalid {var_name} value '{value}', using default {default}")
        return int(default)


def _safe_float(value: Optional[str], default: str, var_name: str) -> float:
    """Safely convert environment variable to float, handling malformed values."""
    try:
        clean_value = value.split("#")[0].strip() if value else default
        return float(clean_value)
    except (ValueError, AttributeError):
        logger.warning(f"Invalid {var_name} value '{value}', using default {default}")
        return float(default)


def _safe_bool(value: Optional[str], default: bool) -> bool:
    if value is None or not value.strip():
        return default
    return _clean_env_value(value).lower() in {"1", "true", "yes", "on"}


def _clean_env_value(value: Optional[str]) -> Optional[str]:
    """Clean environment variable value by removing inline comments."""
    if not value:
        return value
    return value.split("#")[0].strip()


# Global config cache
_config_cache: Optional[Dict[str, Any]] = None
_cache_timestamp: float = 0
CACHE_TTL = 300  # 5 minute cache TTL


def load_config() -> Dict[str, Any]:
    """
    Load configuration from environment variables with caching.
    """
    global _config_cache, _cache_timestamp

    current_time = time.time()
    if _config_cache and (current_time - _cache_timestamp) < CACHE_TTL:
        return _config_cache

    config = {
        # DISCORD
        "DISCORD_TOKEN": _clean_env_value(os.getenv("DISCORD_TOKEN")),
        "COMMAND_PREFIX": os.getenv("COMMAND_PREFIX", "!"),
        # FAL.AI QUEUE
        "FAL_API_KEY": _clean_env_value(os.getenv("FAL_API_KEY")),
        "FAL_BASE_URL": _clean_env_value(os.getenv("FAL_BASE_URL")) or DEFAULT_FAL_BASE_URL,
        "FAL_POLL_INTERVAL_S": _safe_float(os.getenv("FAL_POLL_INTERVAL_S"), "5", "FAL_POLL_INTERVAL_S"),
        "FAL_REQUEST_TIMEOUT_S": _safe_float(os.getenv("FAL_REQUEST_TIMEOUT_S"), "30", "FAL_REQUEST_TIMEOUT_S"),
        "FAL_DOWNLOAD_TIMEOUT_S": _safe_float(os.getenv("FAL_DOWNLOAD_TIMEOUT_S"), "300", "FAL_DOWNLOAD_TIMEOUT_S"),
        # BILLING
        "BILLING_ENABLED": _safe_bool(os.getenv("BILLING_ENABLED"), True),
        "BALANCE_STORE_PATH": Path(os.getenv("BALANCE_STORE_PATH", "data/balances.json")),
        "BALANCE_LEDGER_PATH": Path(os.getenv("BALANCE_LEDGER_PATH", "data/ledger.jsonl")),
        # RATE ORACLE
        "RATE_ORACLE_URL": _clean_env_value(os.getenv("RATE_ORACLE_URL")) or DEFAULT_DCR_ORACLE_URL,
        "RATE_BTC_ORACLE_URL": _clean_env_value(os.getenv("RATE_BTC_ORACLE_URL")) or DEFAULT_BTC_ORACLE_URL,
        "RATE_CACHE_TTL_S": _safe_float(os.getenv("RATE_CACHE_TTL_S"), "600", "RATE_CACHE_TTL_S"),
        "RATE_TIMEOUT_S": _safe_float(os.getenv("RATE_TIMEOUT_S"), "10", "RATE_TIMEOUT_S"),
        # PROGRESS THROTTLING
        "PROGRESS_QUEUE_INTERVAL_S": _safe_float(os.getenv("PROGRESS_QUEUE_INTERVAL_S"), "30", "PROGRESS_QUEUE_INTERVAL_S"),
        "PROGRESS_STATUS_INTERVAL_S": _safe_float(os.getenv("PROGRESS_STATUS_INTERVAL_S"), "20", "PROGRESS_STATUS_INTERVAL_S"),
        "PROGRESS_LOG_INTERVAL_S": _safe_float(os.getenv("PROGRESS_LOG_INTERVAL_S"), "15", "PROGRESS_LOG_INTERVAL_S"),
        "PROGRESS_NOTICE_INTERVAL_S": _safe_float(os.getenv("PROGRESS_NOTICE_INTERVAL_S"), "120", "PROGRESS_NOTICE_INTERVAL_S"),
        # DIAGNOSTICS
        "DEBUG": _safe_bool(os.getenv("DEBUG"), False),
        "LOG_LEVEL": os.getenv("LOG_LEVEL", "INFO"),
    }

    _config_cache = config
    _cache_timestamp = current_time
    logger.debug(f"✅ Configuration cached for {CACHE_TTL}s")

    return config


def reset_config_cache() -> None:
    """Drop the cached config so the next load_config() re-reads the environment."""
    global _config_cache, _cache_timestamp
    _config_cache = None
    _cache_timestamp = 0
