"""Tests for pay helpers."""
import pytest


class TestResolveHourlyRate:
    """Tests for resolve_hourly_rate."""

    def test_valid_rate_is_kept(self):
        """Test that a usable rate is returned as a float."""
        from app.engine.pay import resolve_hourly_rate

        assert resolve_hourly_rate(32) == 32.0
        assert resolve_hourly_rate("18.5") == 18.5
        assert resolve_hourly_rate(0) == 0.0

    @pytest.mark.parametrize("rate", [None, -5, "abc", float("nan"), True])
    def test_unusable_rate_falls_back(self, rate):
        """Test that missing or invalid rates use the default."""
        from app.engine.pay import DEFAULT_HOURLY_RATE, resolve_hourly_rate

        assert resolve_hourly_rate(rate) == DEFAULT_HOURLY_RATE

    def test_custom_default(self):
        """Test that the fallback can be configured."""
        from app.engine.pay import resolve_hourly_rate

        assert resolve_hourly_rate(None, default=40) == 40.0


class TestPay:
    """Tests for daily_pay and period_pay."""

    def test_daily_pay(self):
        """Test hours times rate."""
        from app.engine.pay import daily_pay

        assert daily_pay(7.5, 20) == 150.0

    def test_period_pay_uses_last_running_total(self):
        """Test pay for a period from its running hours."""
        from app.engine.pay import period_pay

        assert period_pay([8, 16, 16, 24, 32], 25) == 800

    def test_period_pay_empty(self):
        """Test that an empty period pays nothing."""
        from app.engine.pay import period_pay

        assert period_pay([], 25) == 0.0


class TestFormatHours:
    """Tests for format_hours."""

    def test_format_hours(self):
        """Test HH:MM rendering."""
        from app.engine.pay import format_hours

        assert format_hours(7.5) == "07:30"
        assert format_hours(0) == "00:00"
        assert format_hours(40.25) == "40:15"

    def test_rounding_up_to_next_hour(self):
        """Test that 59.9 minutes rolls into the next hour."""
        from app.engine.pay import format_hours

        assert format_hours(1.999) == "02:00"
