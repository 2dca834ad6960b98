"""
Payload validation tests (column-driven coercion and policy allowlists).
"""

from datetime import datetime
from decimal import Decimal

import pytest

from cargobid.models import Bid, Company, Quote
from cargobid.time_utils import parse_iso_datetime, to_utc_z
from cargobid.validation import (
    ModelValidationPolicy,
    ValidationError,
    enforce_rules_bid,
    enforce_rules_quote,
    json_object,
    require_choice,
    validate_payload,
)


QUOTE_POLICY = ModelValidationPolicy(
    writable_fields=("origin", "destination", "weight", "volume", "cargo_type", "deadline"),
    required_on_create=("origin", "destination", "weight", "cargo_type"),
    aliases={"cargoType": "cargo_type"},
)


def _quote(payload, partial=False):
    return validate_payload(model=Quote, payload=payload, policy=QUOTE_POLICY, partial=partial)


class TestValidatePayload:

    def test_coerces_types(self):
        patch = _quote({
            "origin": "  São Paulo ",
            "destination": "Rio",
            "weight": "100.5",
            "cargoType": "General",
            "deadline": "2026-11-01",
        })
        assert patch == {
            "origin": "São Paulo",
            "destination": "Rio",
            "weight": Decimal("100.5"),
            "cargo_type": "General",
            "deadline": datetime(2026, 11, 1),
        }

    def test_drops_unknown_fields(self):
        patch = _quote({"origin": "a", "destination": "b", "weight": 1, "cargo_type": "c", "status": "closed"})
        assert "status" not in patch

    def test_first_missing_field_named(self):
        with pytest.raises(ValidationError, match="origin is required"):
            _quote({"destination": "b", "weight": 1})

    def test_blank_string_counts_as_missing(self):
        with pytest.raises(ValidationError, match="origin is required"):
            _quote({"origin": "   ", "destination": "b", "weight": 1, "cargo_type": "c"})

    def test_partial_skips_required(self):
        assert _quote({"destination": "Recife"}, partial=True) == {"destination": "Recife"}

    def test_non_nullable_cannot_be_cleared(self):
        with pytest.raises(ValidationError, match="origin cannot be null"):
            _quote({"origin": None}, partial=True)

    def test_max_length(self):
        with pytest.raises(ValidationError, match="max length"):
            _quote({"origin": "x" * 300}, partial=True)

    @pytest.mark.parametrize("value", ["abc", True, "NaN", "Infinity"])
    def test_bad_numbers(self, value):
        with pytest.raises(ValidationError, match="weight"):
            _quote({"weight": value}, partial=True)

    def test_integer_rejects_decimal_strings(self):
        policy = ModelValidationPolicy(writable_fields=("estimated_days",))
        with pytest.raises(ValidationError, match="plain integer"):
            validate_payload(model=Bid, payload={"estimated_days": "2.0"}, policy=policy, partial=True)

    @pytest.mark.parametrize("value", [10**30, -(10**30), "99999999999", 2**31])
    def test_integer_out_of_range(self, value):
        policy = ModelValidationPolicy(writable_fields=("estimated_days",))
        with pytest.raises(ValidationError, match="estimated_days is too large"):
            validate_payload(model=Bid, payload={"estimated_days": value}, policy=policy, partial=True)

    def test_integer_upper_bound_accepted(self):
        policy = ModelValidationPolicy(writable_fields=("estimated_days",))
        patch = validate_payload(model=Bid, payload={"estimated_days": 2**31 - 1}, policy=policy, partial=True)
        assert patch["estimated_days"] == 2**31 - 1

    @pytest.mark.parametrize("payload", [["x"], "text", 3])
    def test_non_object_payload(self, payload):
        with pytest.raises(ValidationError, match="Invalid JSON payload"):
            _quote(payload, partial=True)

    def test_json_object_treats_missing_body_as_empty(self):
        assert json_object(None) == {}
        assert json_object({"a": 1}) == {"a": 1}

    def test_json_list_field(self):
        policy = ModelValidationPolicy(writable_fields=("regions",))
        patch = validate_payload(model=Company, payload={"regions": "SP, RJ,"}, policy=policy, partial=True)
        assert patch == {"regions": ["SP", "RJ"]}


class TestBusinessRules:

    def test_quote_rules(self):
        enforce_rules_quote({"weight": Decimal("1"), "volume": Decimal("0")})
        with pytest.raises(ValidationError):
            enforce_rules_quote({"weight": Decimal("0")})
        with pytest.raises(ValidationError):
            enforce_rules_quote({"volume": Decimal("-1")})

    def test_bid_rules(self):
        enforce_rules_bid({"amount": Decimal("0.01"), "estimated_days": 1})
        with pytest.raises(ValidationError):
            enforce_rules_bid({"amount": Decimal("-1")})
        with pytest.raises(ValidationError):
            enforce_rules_bid({"estimated_days": 0})

    def test_require_choice(self):
        require_choice({"type": "client"}, "type", ("client", "carrier"))
        require_choice({}, "type", ("client", "carrier"))
        with pytest.raises(ValidationError, match="type must be one of"):
            require_choice({"type": "shipper"}, "type", ("client", "carrier"))


class TestTimestamps:

    def test_date_only_is_midnight(self):
        assert parse_iso_datetime("2026-11-01") == datetime(2026, 11, 1)

    def test_offset_folded_into_utc(self):
        assert parse_iso_datetime("2026-11-01T08:30:00-03:00") == datetime(2026, 11, 1, 11, 30)
        assert parse_iso_datetime("2026-11-01T08:30:00Z") == datetime(2026, 11, 1, 8, 30)

    def test_blank_is_none(self):
        assert parse_iso_datetime(None) is None
        assert parse_iso_datetime("  ") is None

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            parse_iso_datetime("next tuesday")

    def test_serialized_with_z(self):
        assert to_utc_z(datetime(2026, 11, 1, 8, 30, 15, 999)) == "2026-11-01T08:30:15Z"
        assert to_utc_z(None) is None
