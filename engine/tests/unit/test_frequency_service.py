"""Unit tests for frequency conversion and money rounding."""

from decimal import Decimal

import pytest

from services.frequency_service import (
    MONTHLY_VISITS,
    CleaningFrequency,
    add_on_for,
    frequency_label,
    monthly_visits,
    multiplier_for,
    parse_frequency,
    proposal_frequency_for,
    round_money,
    service_type_for,
)


class TestMonthlyVisits:
    """Tests for the canonical visit table."""

    @pytest.mark.parametrize(
        "token,expected",
        [
            ("1x_week", 4.33),
            ("2x_week", 8.67),
            ("3x_week", 13.0),
            ("4x_week", 17.33),
            ("5x_week", 21.67),
            ("daily", 30.0),
            ("weekly", 4.33),
            ("biweekly", 2.17),
            ("monthly", 1.0),
            ("quarterly", 0.33),
        ],
    )
    def test_known_tokens(self, token, expected):
        assert monthly_visits(token) == expected

    def test_every_enum_member_has_visits(self):
        assert set(MONTHLY_VISITS) == {f.value for f in CleaningFrequency}

    def test_unknown_token_falls_back_to_default(self):
        assert monthly_visits("every_full_moon") == 4.33
        assert monthly_visits(None) == 4.33

    def test_parse_frequency(self):
        assert parse_frequency("daily") == CleaningFrequency.DAILY
        assert parse_frequency("nope") is None
        assert parse_frequency("") is None


class TestLabels:
    def test_labels(self):
        assert frequency_label("1x_week") == "Weekly (1x)"
        assert frequency_label("5x_week") == "5x Weekly"
        assert frequency_label("custom") == "custom"

    def test_service_types(self):
        assert service_type_for("5x_week") == "daily"
        assert service_type_for("3x_week") == "weekly"
        assert service_type_for("unknown") == "monthly"

    def test_proposal_frequencies(self):
        assert proposal_frequency_for("5x_week") == "weekly"
        assert proposal_frequency_for("daily") == "daily"
        assert proposal_frequency_for("unknown") == "monthly"


class TestLookups:
    """Multiplier lookups are total: missing means neutral."""

    def test_multiplier_present(self):
        assert multiplier_for({"carpet": 1.15}, "carpet") == 1.15

    def test_multiplier_missing_key_is_neutral(self):
        assert multiplier_for({"carpet": 1.15}, "tile") == 1.0

    def test_multiplier_missing_map_is_neutral(self):
        assert multiplier_for(None, "carpet") == 1.0
        assert multiplier_for({}, "carpet") == 1.0

    def test_add_on_missing_is_zero(self):
        assert add_on_for({"sanitization": 0.15}, "biohazard") == 0.0
        assert add_on_for(None, "sanitization") == 0.0
        assert add_on_for({"sanitization": 0.15}, "sanitization") == 0.15


class TestRoundMoney:
    """Half-up rounding to cents."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (0.005, 0.01),
            (1.005, 1.01),
            (2.675, 2.68),
            (10.0, 10.0),
            (99.994, 99.99),
            (Decimal("0.125"), 0.13),
            (-1.005, -1.01),
        ],
    )
    def test_half_up(self, value, expected):
        assert round_money(value) == expected
