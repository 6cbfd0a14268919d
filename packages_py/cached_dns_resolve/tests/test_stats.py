"""
Tests for StatsRecorder
"""

from datetime import datetime

from cached_dns_resolve.errors import ResolutionError
from cached_dns_resolve.stats import StatsRecorder


class TestStatsRecorder:
    """Tests for counters and error recording"""

    def test_counters(self):
        stats = StatsRecorder()
        stats.record_hit()
        stats.record_hit()
        stats.record_miss()
        stats.record_refreshed()
        stats.record_idle_expired()

        snapshot = stats.snapshot()
        assert snapshot.hits == 2
        assert snapshot.misses == 1
        assert snapshot.refreshed == 1
        assert snapshot.idle_expired == 1
        assert snapshot.errors == 0

    def test_record_error(self, caplog):
        """Should count, remember and log the error"""
        stats = StatsRecorder()
        error = ResolutionError("lookup failed", host="api.example.com")

        with caplog.at_level("ERROR", logger="cached_dns_resolve.stats"):
            stats.record_error(error, "getting address failed for api.example.com")

        snapshot = stats.snapshot()
        assert snapshot.errors == 1
        assert snapshot.last_error is error
        assert datetime.fromisoformat(snapshot.last_error_ts).tzinfo is not None
        assert "getting address failed for api.example.com" in caplog.text
        assert caplog.records[-1].exc_info[1] is error

    def test_last_error_is_most_recent(self):
        stats = StatsRecorder()
        first, second = ValueError("first"), ValueError("second")
        stats.record_error(first, "first")
        stats.record_error(second, "second")
        snapshot = stats.snapshot()
        assert snapshot.errors == 2
        assert snapshot.last_error is second

    def test_snapshot_is_detached(self):
        """Should not change after later recording"""
        stats = StatsRecorder()
        snapshot = stats.snapshot(dns_entries=4)
        stats.record_hit()
        assert snapshot.hits == 0
        assert snapshot.dns_entries == 4

    def test_reset(self):
        stats = StatsRecorder()
        stats.record_hit()
        stats.record_error(ValueError("x"), "x")
        stats.reset()
        snapshot = stats.snapshot()
        assert snapshot.hits == 0
        assert snapshot.errors == 0
        assert snapshot.last_error is None
