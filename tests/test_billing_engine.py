"""
Tests del motor de cobro de checkout (utils/billing_engine.py)
"""
from datetime import datetime, timedelta
from decimal import Decimal

from utils.billing_engine import (
    _safe_decimal,
    compute_checkout_bill,
    compute_hours_used,
    compute_total,
    quantize_money,
)

CHECK_IN = datetime(2025, 3, 1, 14, 0, 0)


class TestHelperFunctions:

    def test_safe_decimal_with_valid_values(self):
        assert _safe_decimal(10) == Decimal("10")
        assert _safe_decimal("25.50") == Decimal("25.50")
        assert _safe_decimal(Decimal("100.99")) == Decimal("100.99")

    def test_safe_decimal_with_none_or_garbage(self):
        assert _safe_decimal(None) == Decimal("0")
        assert _safe_decimal(None, Decimal("10")) == Decimal("10")
        assert _safe_decimal("not a number") == Decimal("0")

    def test_quantize_rounds_half_up(self):
        assert quantize_money("10.005") == Decimal("10.01")
        assert quantize_money(7) == Decimal("7.00")


class TestHoursUsed:

    def test_exactly_one_hour_is_one(self):
        assert compute_hours_used(CHECK_IN, CHECK_IN + timedelta(minutes=60)) == 1

    def test_started_hour_counts(self):
        assert compute_hours_used(CHECK_IN, CHECK_IN + timedelta(minutes=61)) == 2
        assert compute_hours_used(CHECK_IN, CHECK_IN + timedelta(minutes=90)) == 2

    def test_minimum_one_hour(self):
        assert compute_hours_used(CHECK_IN, CHECK_IN) == 1
        assert compute_hours_used(CHECK_IN, CHECK_IN + timedelta(minutes=5)) == 1

    def test_checkout_before_checkin_still_bills_one_hour(self):
        assert compute_hours_used(CHECK_IN, CHECK_IN - timedelta(minutes=30)) == 1


class TestComputeTotal:

    def test_standard_rate_within_hours_is_flat(self):
        assert compute_total(3, Decimal("300"), 3, Decimal("100")) == Decimal("300.00")

    def test_standard_rate_charges_excess_hours(self):
        assert compute_total(5, Decimal("300"), 3, Decimal("100")) == Decimal("500.00")

    def test_standard_rate_without_excess_price_stays_flat(self):
        assert compute_total(10, Decimal("300"), 3, None) == Decimal("300.00")
        assert compute_total(10, Decimal("300"), 3, Decimal("0")) == Decimal("300.00")

    def test_hourly_rate_multiplies(self):
        assert compute_total(4, Decimal("0"), 0, Decimal("120")) == Decimal("480.00")

    def test_hourly_rate_without_excess_price_is_base_price(self):
        assert compute_total(4, Decimal("50"), 0, None) == Decimal("50.00")

    def test_accepts_floats_and_strings(self):
        assert compute_total(2, "500", 1, 200.0) == Decimal("700.00")


class TestCheckoutBill:

    def test_ninety_minutes_on_one_hour_rate(self):
        bill = compute_checkout_bill(
            CHECK_IN, CHECK_IN + timedelta(minutes=90), Decimal("500"), 1, Decimal("200")
        )
        assert bill["hours_used"] == 2
        assert bill["total_amount"] == Decimal("700.00")
        assert bill["excess_hours"] == 1

    def test_exactly_sixty_minutes_on_one_hour_rate(self):
        bill = compute_checkout_bill(
            CHECK_IN, CHECK_IN + timedelta(minutes=60), Decimal("500"), 1, Decimal("200")
        )
        assert bill["hours_used"] == 1
        assert bill["total_amount"] == Decimal("500.00")
        assert bill["excess_hours"] == 0

    def test_hourly_rate_reports_no_excess_hours(self):
        bill = compute_checkout_bill(
            CHECK_IN, CHECK_IN + timedelta(hours=3), Decimal("0"), 0, Decimal("120")
        )
        assert bill["hours_used"] == 3
        assert bill["total_amount"] == Decimal("360.00")
        assert bill["excess_hours"] == 0
