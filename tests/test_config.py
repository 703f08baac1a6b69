"""
Unit Tests for Configuration
============================
Environment parsing and derived policy objects.
"""

import pytest

from mixpost_mcp.config import ConfigurationError, MixpostConfig

REQUIRED = {
    "MIXPOST_BASE_URL": "https://mixpost.example.com/",
    "MIXPOST_WORKSPACE_UUID": "ws-42",
    "MIXPOST_API_KEY": "key",
}


class TestFromEnv:
    """Tests for MixpostConfig.from_env."""

    def test_defaults(self):
        """Should apply defaults for every optional variable."""
        config = MixpostConfig.from_env(REQUIRED)

        assert config.core_path == "mixpost"
        assert config.timeout == 30.0
        assert config.enable_retry is True
        assert config.max_retries == 3
        assert config.retry_base_delay == 1.0
        assert config.retry_max_delay == 10.0
        assert config.cb_failure_threshold == 5
        assert config.cb_reset_timeout == 60.0
        assert config.cb_monitoring_period == 60.0

    def test_api_base_url(self):
        """Should join base URL, core path and workspace without double slashes."""
        config = MixpostConfig.from_env({**REQUIRED, "MIXPOST_CORE_PATH": "/social/"})

        assert config.api_base_url == "https://mixpost.example.com/social/api/ws-42"

    def test_missing_variables_listed(self):
        """Should name every missing required variable."""
        with pytest.raises(ConfigurationError) as exc_info:
            MixpostConfig.from_env({"MIXPOST_BASE_URL": "https://x"})

        message = str(exc_info.value)
        assert "MIXPOST_WORKSPACE_UUID" in message
        assert "MIXPOST_API_KEY" in message
        assert "MIXPOST_BASE_URL" not in message

    def test_empty_counts_as_missing(self):
        """An empty required variable should count as missing."""
        with pytest.raises(ConfigurationError):
            MixpostConfig.from_env({**REQUIRED, "MIXPOST_API_KEY": ""})

    def test_overrides(self):
        """Should parse numeric and boolean overrides."""
        config = MixpostConfig.from_env(
            {
                **REQUIRED,
                "MIXPOST_ENABLE_RETRY": "false",
                "MIXPOST_MAX_RETRIES": "5",
                "MIXPOST_RETRY_BASE_DELAY": "0.5",
                "MIXPOST_CB_RESET_TIMEOUT": "15",
            }
        )

        assert config.enable_retry is False
        assert config.max_retries == 5
        assert config.retry_base_delay == 0.5
        assert config.cb_reset_timeout == 15.0

    @pytest.mark.parametrize(
        "name,value",
        [
            ("MIXPOST_MAX_RETRIES", "three"),
            ("MIXPOST_TIMEOUT", "soon"),
            ("MIXPOST_ENABLE_RETRY", "maybe"),
        ],
    )
    def test_malformed_values(self, name, value):
        """Malformed values should raise ConfigurationError naming the variable."""
        with pytest.raises(ConfigurationError, match=name):
            MixpostConfig.from_env({**REQUIRED, name: value})

    def test_configuration_error_is_value_error(self):
        """ConfigurationError should be catchable as ValueError."""
        assert issubclass(ConfigurationError, ValueError)

    def test_reads_os_environ(self, monkeypatch):
        """Should read os.environ when no mapping is given."""
        for name, value in REQUIRED.items():
            monkeypatch.setenv(name, value)

        assert MixpostConfig.from_env().workspace_uuid == "ws-42"


class TestDerivedPolicies:
    """Tests for retry_policy and circuit_breaker_config."""

    def test_retry_policy(self):
        """Should build a RetryPolicy from the retry fields."""
        config = MixpostConfig(
            base_url="https://x",
            workspace_uuid="w",
            api_key="k",
            max_retries=1,
            retry_base_delay=0.2,
            retry_max_delay=2.0,
        )

        policy = config.retry_policy()

        assert (policy.max_retries, policy.base_delay, policy.max_delay) == (1, 0.2, 2.0)

    def test_circuit_breaker_config(self):
        """Should build a CircuitBreakerConfig from the breaker fields."""
        config = MixpostConfig(base_url="https://x", workspace_uuid="w", api_key="k")

        breaker = config.circuit_breaker_config()

        assert breaker.failure_threshold == 5
        assert breaker.reset_timeout == 60.0
        assert breaker.success_threshold == 3
