"""
Mixpost Configuration
=====================
Connection and resilience settings loaded from the environment.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .circuit_breaker import CircuitBreakerConfig
from .retry import RetryPolicy

REQUIRED_VARIABLES = (
    "MIXPOST_BASE_URL",
    "MIXPOST_WORKSPACE_UUID",
    "MIXPOST_API_KEY",
)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ConfigurationError(ValueError):
    """Raised when the environment does not describe a usable connection."""
    pass


def _get_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None


def _get_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _get_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


@dataclass
class MixpostConfig:
    """Configuration for the Mixpost API connection."""
    base_url: str
    workspace_uuid: str
    api_key: str
    core_path: str = "mixpost"
    timeout: float = 30.0

    # Resilience
    enable_retry: bool = True
    max_retries: int = 3
    retry_base_delay: float = 1.0
    retry_max_delay: float = 10.0
    cb_failure_threshold: int = 5
    cb_reset_timeout: float = 60.0
    cb_monitoring_period: float = 60.0

    @property
    def api_base_url(self) -> str:
        """Workspace-scoped API root, e.g. https://host/mixpost/api/<uuid>."""
        return (
            f"{self.base_url.rstrip('/')}/{self.core_path.strip('/')}"
            f"/api/{self.workspace_uuid}"
        )

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_retries=self.max_retries,
            base_delay=self.retry_base_delay,
            max_delay=self.retry_max_delay,
        )

    def circuit_breaker_config(self) -> CircuitBreakerConfig:
        return CircuitBreakerConfig(
            failure_threshold=self.cb_failure_threshold,
            reset_timeout=self.cb_reset_timeout,
            monitoring_period=self.cb_monitoring_period,
        )

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "MixpostConfig":
        """
        Build configuration from environment variables.

        Args:
            env: Mapping to read instead of os.environ

        Raises:
            ConfigurationError: If required variables are missing or a
                value cannot be parsed
        """
        env = os.environ if env is None else env

        missing = [name for name in REQUIRED_VARIABLES if not env.get(name)]
        if missing:
            raise ConfigurationError(
                "Missing required environment variables: " + ", ".join(missing)
            )

        return cls(
            base_url=env["MIXPOST_BASE_URL"],
            workspace_uuid=env["MIXPOST_WORKSPACE_UUID"],
            api_key=env["MIXPOST_API_KEY"],
            core_path=env.get("MIXPOST_CORE_PATH") or "mixpost",
            timeout=_get_float(env, "MIXPOST_TIMEOUT", 30.0),
            enable_retry=_get_bool(env, "MIXPOST_ENABLE_RETRY", True),
            max_retries=_get_int(env, "MIXPOST_MAX_RETRIES", 3),
            retry_base_delay=_get_float(env, "MIXPOST_RETRY_BASE_DELAY", 1.0),
            retry_max_delay=_get_float(env, "MIXPOST_RETRY_MAX_DELAY", 10.0),
            cb_failure_threshold=_get_int(env, "MIXPOST_CB_FAILURE_THRESHOLD", 5),
            cb_reset_timeout=_get_float(env, "MIXPOST_CB_RESET_TIMEOUT", 60.0),
            cb_monitoring_period=_get_float(env, "MIXPOST_CB_MONITORING_PERIOD", 60.0),
        )
