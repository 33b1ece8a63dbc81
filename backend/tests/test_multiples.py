"""
Unit tests for multiples.py (reference table model and loader)
"""

import json

import pytest

from valuation_engine.core.config import DEFAULT_MULTIPLES_PATH
from valuation_engine.core.exceptions import ReferenceDataError
from valuation_engine.valuation.multiples import (
    IndustryMultiple,
    MultipleBand,
    MultipleTable,
    get_multiple_table,
    load_multiple_table,
)


def _write(tmp_path, payload, name="multiples.json"):
    path = tmp_path / name
    if isinstance(payload, str):
        path.write_text(payload, encoding="utf-8")
    else:
        path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_band_interpolation_is_clamped():
    band = MultipleBand(min=4.0, max=6.0)
    assert band.interpolate(0.0) == 4.0
    assert band.interpolate(0.5) == 5.0
    assert band.interpolate(1.0) == 6.0
    assert band.interpolate(1.7) == 6.0
    assert band.interpolate(-0.3) == 4.0
    assert band.contains(5.5)
    assert not band.contains(6.01)


def test_load_valid_table(tmp_path):
    path = _write(
        tmp_path,
        {
            "238160": {
                "industry": "Roofing Contractors",
                "base_range": {"min": 5.9, "max": 8.4},
                "premium_range": {"min": 8.5, "max": 11.0},
            },
            "221118": {"base_range": {"min": "6", "max": 8}},
        },
    )

    table = load_multiple_table(path)

    assert len(table) == 2
    assert table.source == str(path)
    roofing = table["238160"]
    assert isinstance(roofing, IndustryMultiple)
    assert roofing.base_range == MultipleBand(5.9, 8.4)
    assert roofing.premium_range == MultipleBand(8.5, 11.0)
    assert roofing.industry == "Roofing Contractors"
    assert table["221118"].premium_range is None
    assert table["221118"].base_range.min == 6.0


def test_missing_file_raises_reference_data_error(tmp_path):
    with pytest.raises(ReferenceDataError) as exc_info:
        load_multiple_table(tmp_path / "nope.json")
    assert exc_info.value.reason == "file not found"
    assert "nope.json" in exc_info.value.message


def test_invalid_json_raises_reference_data_error(tmp_path):
    path = _write(tmp_path, "{not json")
    with pytest.raises(ReferenceDataError, match="invalid JSON"):
        load_multiple_table(path)


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"238160": "5.9-8.4"},
        {"238160": {"premium_range": {"min": 8.5, "max": 11.0}}},
        {"238160": {"base_range": {"min": 5.9}}},
        {"238160": {"base_range": {"min": "low", "max": 8.4}}},
        {"238160": {"base_range": {"min": 8.4, "max": 5.9}}},
        {"238160": {"base_range": {"min": 0, "max": 5.9}}},
        {"238160": {"base_range": {"min": 5.9, "max": 8.4}, "premium_range": {"min": -1, "max": 2}}},
    ],
)
def test_malformed_table_raises_reference_data_error(tmp_path, payload):
    path = _write(tmp_path, payload)
    with pytest.raises(ReferenceDataError):
        load_multiple_table(path)


def test_table_is_read_only(synthetic_table):
    with pytest.raises(TypeError):
        synthetic_table["999999"] = synthetic_table["238160"]
    assert "238160" in synthetic_table
    assert "999999" not in synthetic_table


def test_from_dict_strips_keys():
    table = MultipleTable.from_dict({" 5112 ": {"base_range": {"min": 8, "max": 12}}})
    assert "5112" in table
    assert table.source == "<memory>"


def test_packaged_table_loads():
    table = load_multiple_table(DEFAULT_MULTIPLES_PATH)

    assert "238160" in table
    assert "31-33" in table
    assert "technology" in table
    assert table["221118"].premium_range is None
    for entry in table.values():
        assert 0 < entry.base_range.min <= entry.base_range.max
        if entry.premium_range is not None:
            assert 0 < entry.premium_range.min <= entry.premium_range.max


def test_get_multiple_table_is_cached(tmp_path):
    path = _write(tmp_path, {"5112": {"base_range": {"min": 8, "max": 12}}})

    first = get_multiple_table(path)
    second = get_multiple_table(str(path))

    assert first is second


def test_get_multiple_table_does_not_cache_failures(tmp_path):
    path = tmp_path / "later.json"
    with pytest.raises(ReferenceDataError):
        get_multiple_table(path)

    path.write_text(json.dumps({"5112": {"base_range": {"min": 8, "max": 12}}}), encoding="utf-8")
    assert "5112" in get_multiple_table(path)
