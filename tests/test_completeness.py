"""Tests for required-field completeness."""

import pytest

from humdata_pipeline.validators.completeness import CompletenessResult, measure_completeness


class TestMeasureCompleteness:
    """completeness = records carrying every required field / total records."""

    def test_all_complete(self, casualty_records):
        result = measure_completeness(casualty_records, ("date", "killed", "injured"))
        assert result.completeness == 1.0
        assert result.complete_records == 3
        assert result.total_records == 3
        assert result.missing_fields == {"date": 0, "killed": 0, "injured": 0}

    def test_partial(self):
        records = [{"a": 1, "b": None}, {"a": "", "b": 2}, {"a": 1, "b": 2}]
        result = measure_completeness(records, ["a", "b"])
        assert result.complete_records == 1
        assert result.completeness == pytest.approx(1 / 3)
        assert result.missing_fields == {"a": 1, "b": 1}

    def test_record_missing_several_fields_counts_once(self):
        records = [{}, {"a": 1, "b": 1}]
        result = measure_completeness(records, ["a", "b"])
        assert result.completeness == pytest.approx(0.5)
        assert result.missing_fields == {"a": 1, "b": 1}

    def test_zero_and_false_are_present(self):
        result = measure_completeness([{"a": 0, "b": False}], ["a", "b"])
        assert result.completeness == 1.0

    def test_non_object_record_misses_everything(self):
        result = measure_completeness(["junk", {"a": 1}], ["a"])
        assert result.completeness == pytest.approx(0.5)
        assert result.missing_fields == {"a": 1}

    def test_no_required_fields(self):
        result = measure_completeness([{"x": 1}], [])
        assert result.completeness == 1.0
        assert result.missing_fields == {}

    @pytest.mark.parametrize("records", [[], None, "records", {"data": []}])
    def test_degenerate_input(self, records):
        result = measure_completeness(records, ["a"])
        assert result == CompletenessResult()
        assert result.completeness == 0.0

    def test_to_dict(self):
        data = measure_completeness([{"a": 1}, {}], ["a"]).to_dict()
        assert data == {"completeness": 0.5, "missing_fields": {"a": 1}, "total_records": 2, "complete_records": 1}
