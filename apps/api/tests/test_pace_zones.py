"""
Tests for PaceZoneCalculator

Zones must be strictly ordered and non-overlapping for every capacity
index in the supported range, and never crash outside it.
"""

import pytest

from services.training_plan.constants import ZoneName
from services.training_plan.pace_zones import (
    FALLBACK_PACE_RANGE,
    TRAINING_ZONES,
    PaceRange,
    PaceZoneCalculator,
    format_pace,
    resolve_pace_range,
)

ORDER_FASTEST_FIRST = ["vo2max", "threshold", "tempo", "steady", "easy", "recovery"]


@pytest.fixture
def calculator():
    return PaceZoneCalculator()


class TestZoneOrdering:

    @pytest.mark.parametrize("index", [30, 35, 40, 45.5, 50, 55, 60, 65, 70])
    def test_zones_ordered_and_non_overlapping(self, calculator, index):
        paces = calculator.pace_ranges(index)
        for zone in ORDER_FASTEST_FIRST:
            assert paces[zone].min < paces[zone].max
        for faster, slower in zip(ORDER_FASTEST_FIRST, ORDER_FASTEST_FIRST[1:]):
            assert paces[faster].max <= paces[slower].min

    def test_anchor_easy_pace(self, calculator):
        assert calculator.easy_pace(30) == pytest.approx(10.5)
        assert calculator.easy_pace(50) == pytest.approx(8.5)

    @pytest.mark.parametrize("index,expected", [(5, 11.5), (200, 5.0)])
    def test_out_of_range_index_is_clamped(self, calculator, index, expected):
        assert calculator.easy_pace(index) == pytest.approx(expected)
        assert len(calculator.pace_ranges(index)) == 6

    def test_zone_bands(self, calculator):
        paces = calculator.pace_ranges(30)
        assert paces["easy"] == PaceRange(10.5, 11.5)
        assert paces["recovery"] == PaceRange(11.5, 12.5)
        assert paces["threshold"] == PaceRange(9.2, 9.5)

    def test_calculate_carries_static_zone_data(self, calculator):
        zones = calculator.calculate(40)
        assert zones[ZoneName.THRESHOLD].rpe == 5
        assert zones[ZoneName.THRESHOLD].heart_rate_range.min == 87
        assert ZoneName.NEUROMUSCULAR not in zones


class TestZoneCatalog:

    def test_rpe_runs_one_to_seven(self):
        assert [TRAINING_ZONES[z].rpe for z in ZoneName] == [1, 2, 3, 4, 5, 6, 7]

    def test_catalog_is_read_only(self):
        with pytest.raises(TypeError):
            TRAINING_ZONES[ZoneName.EASY] = None


class TestResolvePaceRange:

    def test_neuromuscular_borrows_vo2max(self, calculator):
        paces = calculator.pace_ranges(45)
        assert resolve_pace_range(paces, ZoneName.NEUROMUSCULAR) == paces["vo2max"]

    def test_missing_zone_uses_fallback(self):
        assert resolve_pace_range({}, ZoneName.TEMPO) == FALLBACK_PACE_RANGE

    def test_mid(self):
        assert PaceRange(5.0, 6.0).mid == pytest.approx(5.5)


class TestFormatPace:

    @pytest.mark.parametrize("pace,text", [
        (5.5, "5:30"),
        (4.0, "4:00"),
        (4.999, "5:00"),
        (10.25, "10:15"),
    ])
    def test_format(self, pace, text):
        assert format_pace(pace) == text
