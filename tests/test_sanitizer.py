"""Tests for the context sanitizer and prompt trimming."""

from __future__ import annotations

import math

import pytest

from farmassist.models import FarmContext
from farmassist.sanitizer import RECORD_CAPS, sanitize_context, sanitize_prompt


class TestSanitizePrompt:
    def test_trims_whitespace(self):
        assert sanitize_prompt("  hello  ") == "hello"

    def test_truncates_to_1500(self):
        assert len(sanitize_prompt("x" * 2000)) == 1500

    def test_trims_before_truncating(self):
        result = sanitize_prompt("   " + "y" * 1600)
        assert result == "y" * 1500

    @pytest.mark.parametrize("raw", [None, 42, ["hi"], {"prompt": "hi"}])
    def test_non_string_is_empty(self, raw):
        assert sanitize_prompt(raw) == ""

    def test_whitespace_only_is_empty(self):
        assert sanitize_prompt(" \n\t ") == ""


class TestSanitizeContextShape:
    @pytest.mark.parametrize("raw", [None, "farm", 12, [1, 2], True])
    def test_non_object_gives_defaults(self, raw):
        ctx = sanitize_context(raw)
        assert isinstance(ctx, FarmContext)
        assert ctx.farm_count == 0
        assert ctx.farms == []
        assert ctx.profile_mode == "general"
        assert ctx.location is None
        assert ctx.weather is None
        assert ctx.generated_at

    def test_keeps_known_fields(self, raw_context):
        ctx = sanitize_context(raw_context)
        assert ctx.farm_count == 1
        assert ctx.crop_count == 2
        assert ctx.active_crop_count == 1
        assert ctx.profile_mode == "smallholder"
        assert ctx.farms[0]["name"] == "Green Valley Farm"
        assert ctx.generated_at == "2025-01-20T08:00:00Z"

    def test_unknown_fields_dropped(self):
        ctx = sanitize_context({"farmCount": 2, "secret": "x", "__proto__": {}})
        payload = ctx.to_payload()
        assert "secret" not in payload
        assert "__proto__" not in payload

    def test_payload_uses_camel_case(self, raw_context):
        payload = sanitize_context(raw_context).to_payload()
        assert payload["farmCount"] == 1
        assert payload["activeCropCount"] == 1
        assert payload["cropPatterns"] == []
        assert payload["generatedAt"] == "2025-01-20T08:00:00Z"
        assert "location" not in payload
        assert "weather" not in payload


class TestSanitizeContextCoercion:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (3, 3),
            (3.9, 3),
            ("7", 7),
            (-4, 0),
            ("lots", 0),
            (None, 0),
            (True, 0),
            (math.inf, 0),
            (float("nan"), 0),
            (10**400, 0),
        ],
    )
    def test_counts(self, value, expected):
        assert sanitize_context({"farmCount": value}).farm_count == expected

    def test_record_lists_are_capped_in_order(self):
        raw = {
            "farms": [{"i": i} for i in range(50)],
            "crops": [{"i": i} for i in range(100)],
            "cropPatterns": [{"i": i} for i in range(20)],
            "monitoring": [{"i": i} for i in range(10)],
        }
        ctx = sanitize_context(raw)
        assert [f["i"] for f in ctx.farms] == list(range(RECORD_CAPS["farms"]))
        assert len(ctx.farms) == 30
        assert len(ctx.crops) == 80
        assert len(ctx.crop_patterns) == 12
        assert len(ctx.monitoring) == 6
        assert ctx.crops[-1] == {"i": 79}

    def test_non_list_records_become_empty(self):
        ctx = sanitize_context({"farms": "Green Valley", "crops": {"name": "Maize"}})
        assert ctx.farms == []
        assert ctx.crops == []

    def test_non_record_entries_skipped(self):
        ctx = sanitize_context({"farms": ["x", 1, None, {"name": "A"}, {2: "bad key"}]})
        assert ctx.farms == [{"name": "A"}]

    def test_blank_profile_mode_defaults(self):
        assert sanitize_context({"profileMode": "   "}).profile_mode == "general"
        assert sanitize_context({"profileMode": 5}).profile_mode == "general"

    def test_invalid_generated_at_replaced(self):
        ctx = sanitize_context({"generatedAt": "yesterday"})
        assert ctx.generated_at != "yesterday"
        assert ctx.generated_at.endswith("Z")


class TestSanitizeLocation:
    def test_valid_location(self):
        ctx = sanitize_context({"location": {"name": "Mazowe", "latitude": -17.5, "longitude": "30.97"}})
        assert ctx.location is not None
        assert ctx.location.name == "Mazowe"
        assert ctx.location.latitude == -17.5
        assert ctx.location.longitude == 30.97
        assert ctx.location.source == "client"

    @pytest.mark.parametrize(
        "location",
        [
            {"latitude": -17.5},
            {"latitude": "north", "longitude": 30.0},
            {"latitude": float("nan"), "longitude": 30.0},
            {"latitude": math.inf, "longitude": 30.0},
            "Mazowe",
        ],
    )
    def test_location_requires_two_finite_coordinates(self, location):
        assert sanitize_context({"location": location}).location is None


class TestSanitizeWeather:
    def test_weather_kept_when_meaningful(self):
        ctx = sanitize_context({"weather": {"temperatureC": 24.5, "condition": "Clear", "bogus": 1}})
        assert ctx.weather is not None
        assert ctx.weather.temperature_c == 24.5
        assert ctx.weather.condition == "Clear"
        assert ctx.weather.wind_speed_kph is None

    def test_field_health_alone_is_meaningful(self):
        ctx = sanitize_context({"weather": {"fieldHealth": "good"}})
        assert ctx.weather is not None
        assert ctx.weather.field_health == "good"

    @pytest.mark.parametrize(
        "weather",
        [
            {},
            {"condition": "   ", "temperatureC": "hot"},
            {"source": "open-meteo", "fetchedAt": "2025-01-01T00:00:00Z"},
            "sunny",
        ],
    )
    def test_empty_weather_dropped(self, weather):
        assert sanitize_context({"weather": weather}).weather is None


class TestSanitizeNeverRaises:
    @pytest.mark.parametrize(
        "raw",
        [
            {"farms": None, "crops": 5, "cropPatterns": "x", "monitoring": object()},
            {"farmCount": object(), "location": {"latitude": object(), "longitude": []}},
            {"weather": {"temperatureC": [], "windSpeedKph": {}, "condition": 3}},
            {"generatedAt": 12345, "profileMode": ["a"]},
            {"crops": [{"name": object()}] * 200},
        ],
    )
    def test_malformed_inputs(self, raw):
        ctx = sanitize_context(raw)
        assert len(ctx.farms) <= 30
        assert len(ctx.crops) <= 80
        assert len(ctx.crop_patterns) <= 12
        assert len(ctx.monitoring) <= 6
