"""Tests for unit conversion and dimension parsing."""

import pytest

from solarplace.layout.abstraction import MeasurementSystem
from solarplace.layout.units import (
    format_length,
    from_inches,
    inches_to_feet,
    parse_dimension,
    parse_spacing,
    to_inches,
    unit_label,
)


class TestConversion:

    def test_metric_to_inches(self):
        assert to_inches(25.4, MeasurementSystem.METRIC) == pytest.approx(1.0)
        assert to_inches(40, "imperial") == 40

    def test_from_inches(self):
        assert from_inches(1.0, "metric") == pytest.approx(25.4)

    def test_feet(self):
        assert inches_to_feet(18) == 1.5

    def test_labels(self):
        assert unit_label("imperial") == "in"
        assert unit_label("imperial", short=False) == "inches"
        assert unit_label("metric") == "mm"

    def test_format(self):
        assert format_length(40, "imperial") == "40.00 in"
        assert format_length(40, "metric") == "1016.0 mm"


class TestParsing:
    """User-entered values are validated before use."""

    def test_parse_dimension(self):
        assert parse_dimension(" 40 ", "imperial") == 40.0
        assert parse_dimension("1016", "metric") == pytest.approx(40.0)

    @pytest.mark.parametrize("text", ["", "  ", "forty", "0", "-1", "nan", "inf"])
    def test_invalid_dimension(self, text):
        with pytest.raises(ValueError):
            parse_dimension(text, "imperial")

    def test_spacing_allows_zero(self):
        assert parse_spacing("0", "imperial") == 0.0

    def test_negative_spacing(self):
        with pytest.raises(ValueError, match="negative"):
            parse_spacing("-0.5", "imperial")
