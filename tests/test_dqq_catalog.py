"""
DQQ Engine - Indicator Catalog Tests
====================================
Display rows, badge formatting and diversity bands.
"""

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from dqq_engine.catalog import (
    INDICATOR_ROWS,
    DiversityBand,
    IndicatorKind,
    diversity_band,
    format_indicator_value,
    get_indicator_row,
    render_indicator_rows,
)
from dqq_engine.indicators import INDICATOR_KEYS, calculate_dqq_indicators


class TestIndicatorRows:

    def test_every_composite_has_a_row(self):
        assert {row.key for row in INDICATOR_ROWS} == set(INDICATOR_KEYS)

    def test_row_ids_unique(self):
        ids = [row.row_id for row in INDICATOR_ROWS]
        assert len(ids) == len(set(ids))

    def test_scores_are_score_kind(self):
        for key in ("fgds", "ncdp", "ncdr", "gdr"):
            assert get_indicator_row(key).kind == IndicatorKind.SCORE

    def test_lookup_unknown(self):
        assert get_indicator_row("DQQ1") is None


class TestFormatIndicatorValue:

    def test_mddw_none_is_na(self):
        assert format_indicator_value("mddw", None) == "N/A"

    def test_other_none_is_none(self):
        assert format_indicator_value("all5", None) is None

    def test_scores_one_decimal(self):
        assert format_indicator_value("fgds", 7) == "7.0"
        assert format_indicator_value("gdr", 9) == "9.0"
        assert format_indicator_value("ncdr", 1) == "1.0"

    def test_binary_yes_no(self):
        assert format_indicator_value("all5", 1) == "Yes"
        assert format_indicator_value("mddw", 0) == "No"

    def test_other_numbers(self):
        assert format_indicator_value("custom", 0.333) == "0.33"
        assert format_indicator_value("custom", 4) == "4"


class TestDiversityBand:

    @pytest.mark.parametrize("score,band", [
        (0, DiversityBand.LOW),
        (3, DiversityBand.LOW),
        (4, DiversityBand.MODERATE),
        (7, DiversityBand.MODERATE),
        (8, DiversityBand.HIGH),
        (10, DiversityBand.HIGH),
        (15, DiversityBand.HIGH),
        (-2, DiversityBand.LOW),
    ])
    def test_bands(self, score, band):
        assert diversity_band(score) == band

    @pytest.mark.parametrize("value", [None, "8", float("nan"), True])
    def test_invalid_is_low(self, value):
        assert diversity_band(value) == DiversityBand.LOW


class TestRenderIndicatorRows:

    def test_rows_follow_catalog_order(self):
        results = calculate_dqq_indicators({"DQQ6": True}, {"age": 60, "gender": 0})
        rows = render_indicator_rows(results)
        assert [r["key"] for r in rows] == [row.key for row in INDICATOR_ROWS]

    def test_values_formatted(self):
        results = calculate_dqq_indicators({"DQQ6": True}, {"age": 60, "gender": 0})
        rows = {r["key"]: r for r in render_indicator_rows(results)}
        assert rows["mddw"]["value"] is None
        assert rows["mddw"]["display"] == "N/A"
        assert rows["fgds"]["display"] == "1.0"
        assert rows["dveg_consumption"]["display"] == "Yes"
        assert rows["zvegfr"]["display"] == "No"
