# =============================================================================
# core/config.py  —  Runtime Settings (API keys, throttle, timeouts)
# =============================================================================
#
# Settings are read ONCE at startup and handed down explicitly:
#
#     load_dotenv()                      # entry point only
#     settings = Settings.from_env()
#     executor = RequestExecutor.from_settings(settings)
#     alchemy  = AlchemyClient(settings, executor)
#
# Nothing under core/ reads os.environ on its own.
#
# ENVIRONMENT VARIABLES:
#   ALCHEMY_API_KEY               required for every Alchemy-backed tool
#   OPENSEA_API_KEY               optional (sent as X-API-KEY when present)
#   NFTSCAN_API_KEY               reserved, no calls are made with it yet
#   NFT_SCANNER_RATE_LIMIT_DELAY  seconds slept before every attempt (1.0)
#   NFT_SCANNER_MAX_RETRIES       extra attempts after the first (3)
#   NFT_SCANNER_BACKOFF_BASE      seconds; delay = base * 2^attempt (1.0)
#   NFT_SCANNER_REQUEST_TIMEOUT   per-attempt HTTP timeout, seconds (30)
#   NFT_SCANNER_LOG_LEVEL         logging level name (INFO)
#   OPENSEA_BASE_URL              https://api.opensea.io
# =============================================================================

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from core.errors import ConfigurationError

RATE_LIMIT_DELAY = 1.0
MAX_RETRIES = 3
BACKOFF_BASE = 1.0
REQUEST_TIMEOUT = 30.0

ALCHEMY_HOST_TEMPLATE = "https://{network}.g.alchemy.com"
OPENSEA_BASE_URL = "https://api.opensea.io"


@dataclass(frozen=True)
class Settings:
    """Everything the server needs to know about its environment."""

    alchemy_api_key: Optional[str] = None
    opensea_api_key: Optional[str] = None
    nftscan_api_key: Optional[str] = None

    rate_limit_delay: float = RATE_LIMIT_DELAY
    max_retries: int = MAX_RETRIES
    backoff_base: float = BACKOFF_BASE
    request_timeout: float = REQUEST_TIMEOUT

    alchemy_host_template: str = ALCHEMY_HOST_TEMPLATE
    opensea_base_url: str = OPENSEA_BASE_URL
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build Settings from environment variables.

        Args:
            environ: Mapping to read from.  Defaults to os.environ; tests
                pass a plain dict instead.

        Raises:
            ConfigurationError: if a numeric variable is not a number.
        """
        env = os.environ if environ is None else environ

        return cls(
            alchemy_api_key=_optional(env, "ALCHEMY_API_KEY"),
            opensea_api_key=_optional(env, "OPENSEA_API_KEY"),
            nftscan_api_key=_optional(env, "NFTSCAN_API_KEY"),
            rate_limit_delay=_number(env, "NFT_SCANNER_RATE_LIMIT_DELAY", RATE_LIMIT_DELAY),
            max_retries=int(_number(env, "NFT_SCANNER_MAX_RETRIES", MAX_RETRIES)),
            backoff_base=_number(env, "NFT_SCANNER_BACKOFF_BASE", BACKOFF_BASE),
            request_timeout=_number(env, "NFT_SCANNER_REQUEST_TIMEOUT", REQUEST_TIMEOUT),
            opensea_base_url=(_optional(env, "OPENSEA_BASE_URL") or OPENSEA_BASE_URL).rstrip("/"),
            log_level=(_optional(env, "NFT_SCANNER_LOG_LEVEL") or "INFO").upper(),
        )


def _optional(env: Mapping[str, str], name: str) -> Optional[str]:
    """Return a stripped value, treating blank strings as unset."""
    value = env.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _number(env: Mapping[str, str], name: str, default: float) -> float:
    raw = _optional(env, name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}", cause=exc) from exc
    if value < 0:
        raise ConfigurationError(f"{name} must not be negative, got {raw!r}")
    return value
