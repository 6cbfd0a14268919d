"""
Tests for configuration loading and validation
"""

import pytest

from cached_dns_resolve.config import (
    DEFAULT_DNS_CACHE_CONFIG,
    DnsCacheConfig,
    is_ip_address,
    load_config_from_env,
    validate_config,
)


class TestDefaults:
    """Tests for DnsCacheConfig defaults"""

    def test_default_values(self):
        config = DnsCacheConfig()
        assert config.disabled is False
        assert config.ttl_seconds == 5.0
        assert config.grace_expire_multiplier == 2.0
        assert config.idle_ttl_seconds == 3600.0
        assert config.background_scan_seconds == 2.4
        assert config.max_entries == 100
        assert config.max_concurrent_refreshes == 10

    def test_cache_expire_seconds(self):
        """Should multiply TTL by the grace multiplier"""
        assert DnsCacheConfig(ttl_seconds=5.0, grace_expire_multiplier=3).cache_expire_seconds == 15.0
        assert DEFAULT_DNS_CACHE_CONFIG.cache_expire_seconds == 10.0


class TestLoadConfigFromEnv:
    """Tests for load_config_from_env"""

    def test_empty_env_gives_defaults(self):
        assert load_config_from_env({}) == DnsCacheConfig()

    def test_reads_all_variables(self):
        """Should convert millisecond variables to seconds"""
        config = load_config_from_env({
            "HTTPX_DNS_DISABLE": "true",
            "HTTPX_DNS_CACHE_TTL_MS": "10000",
            "HTTPX_DNS_CACHE_EXPIRE_MULTIPLIER": "3",
            "HTTPX_DNS_CACHE_IDLE_TTL_MS": "60000",
            "HTTPX_DNS_BACKGROUND_SCAN_MS": "500",
            "HTTPX_DNS_CACHE_SIZE": "25",
            "HTTPX_DNS_MAX_CONCURRENT_REFRESHES": "4",
        })
        assert config.disabled is True
        assert config.ttl_seconds == 10.0
        assert config.grace_expire_multiplier == 3.0
        assert config.idle_ttl_seconds == 60.0
        assert config.background_scan_seconds == 0.5
        assert config.max_entries == 25
        assert config.max_concurrent_refreshes == 4

    @pytest.mark.parametrize("value", ["false", "1", "", "yes"])
    def test_disable_requires_true(self, value):
        assert load_config_from_env({"HTTPX_DNS_DISABLE": value}).disabled is False

    def test_disable_is_case_insensitive(self):
        assert load_config_from_env({"HTTPX_DNS_DISABLE": "TRUE"}).disabled is True

    @pytest.mark.parametrize("value", ["abc", "-5", "0", "nan", "inf", "-inf", "1e400"])
    def test_invalid_values_fall_back(self, value, caplog):
        """Should use the default for unparseable, non-positive or non-finite values"""
        env = {
            "HTTPX_DNS_CACHE_TTL_MS": value,
            "HTTPX_DNS_CACHE_SIZE": value,
            "HTTPX_DNS_CACHE_EXPIRE_MULTIPLIER": value,
            "HTTPX_DNS_MAX_CONCURRENT_REFRESHES": value,
        }
        with caplog.at_level("WARNING", logger="cached_dns_resolve.config"):
            config = load_config_from_env(env)

        assert config.ttl_seconds == 5.0
        assert config.max_entries == 100
        assert config.grace_expire_multiplier == 2.0
        assert config.max_concurrent_refreshes == 10
        assert "HTTPX_DNS_CACHE_TTL_MS" in caplog.text

    def test_reads_os_environ_by_default(self, monkeypatch):
        monkeypatch.setenv("HTTPX_DNS_CACHE_SIZE", "7")
        assert load_config_from_env().max_entries == 7


class TestValidateConfig:
    """Tests for validate_config"""

    def test_accepts_defaults(self):
        config = DnsCacheConfig()
        assert validate_config(config) is config

    @pytest.mark.parametrize(
        "field_name",
        ["ttl_seconds", "grace_expire_multiplier", "idle_ttl_seconds", "background_scan_seconds"],
    )
    def test_rejects_non_positive_durations(self, field_name):
        with pytest.raises(ValueError, match=field_name):
            validate_config(DnsCacheConfig(**{field_name: 0}))

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_rejects_non_finite_durations(self, value):
        with pytest.raises(ValueError, match="ttl_seconds"):
            validate_config(DnsCacheConfig(ttl_seconds=value))

    def test_rejects_zero_capacity(self):
        with pytest.raises(ValueError, match="max_entries"):
            validate_config(DnsCacheConfig(max_entries=0))

    def test_rejects_zero_refresh_concurrency(self):
        with pytest.raises(ValueError, match="max_concurrent_refreshes"):
            validate_config(DnsCacheConfig(max_concurrent_refreshes=0))


class TestIsIpAddress:
    """Tests for is_ip_address"""

    @pytest.mark.parametrize("host", ["10.0.0.1", "127.0.0.1", "::1", "[::1]", "2001:db8::1"])
    def test_literal_addresses(self, host):
        assert is_ip_address(host) is True

    @pytest.mark.parametrize("host", ["api.example.com", "localhost", "", "10.0.0", "999.1.1.1"])
    def test_hostnames(self, host):
        assert is_ip_address(host) is False
