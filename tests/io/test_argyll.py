from __future__ import annotations

import io
import logging

import pytest

from specread import (
    EmptyDatasetError,
    MalformedDataRowError,
    MalformedDocumentError,
    MalformedHeaderError,
    read,
)
from specread.io.argyll import parse_argyll

AMBIENT = """\
SPECT

DESCRIPTOR "Argyll Spectral"
ORIGINATOR "Argyll CMS"
SPECTRAL_BANDS "3"
SPECTRAL_START_NM "380.0"
SPECTRAL_END_NM "400.0"
MEAS_TYPE "AMBIENT"

NUMBER_OF_FIELDS 3
BEGIN_DATA_FORMAT
SPEC_380 SPEC_390 SPEC_400
END_DATA_FORMAT

NUMBER_OF_SETS 1
BEGIN_DATA
0.1 0.2 0.3
END_DATA
"""


def test_single_set_file(write_file) -> None:
    path = write_file("ambient.sp", AMBIENT)
    dataset = read(path)
    assert dataset.format == "argyll"
    assert dataset.series_names == ("Set 1",)
    assert dataset["Set 1"].pairs() == [(380.0, 0.1), (390.0, 0.2), (400.0, 0.3)]
    meta = dataset.metadata
    assert meta.units == "ambient illuminance"
    assert meta.wavelength_unit == "nm"
    assert meta.sample_id == "Argyll CMS"
    assert meta.declared_range == (380.0, 400.0)
    assert meta["descriptor"] == "Argyll Spectral"
    assert meta["file_type"] == "SPECT"
    assert dataset.step == pytest.approx(10.0)


def test_named_sets_become_series() -> None:
    text = """\
CTI3
BEGIN_DATA_FORMAT
SAMPLE_ID SPEC_400 SPEC_500 SPEC_600
END_DATA_FORMAT
BEGIN_DATA
A1 0.1 0.2 0.3
B1 0.4 0.5 0.6
END_DATA
"""
    dataset = parse_argyll(text)
    assert dataset.series_names == ("A1", "B1")
    assert dataset["B1"].values.tolist() == [0.4, 0.5, 0.6]
    assert dataset.value_max == 0.6


def test_axis_from_band_keywords() -> None:
    text = """\
SPECT
SPECTRAL_BANDS 5
SPECTRAL_START_NM 400
SPECTRAL_END_NM 440
BEGIN_DATA
1 2 3 4 5
END_DATA
"""
    dataset = read(io.StringIO(text))
    assert dataset.format == "argyll"
    assert dataset["Set 1"].wavelengths.tolist() == [400.0, 410.0, 420.0, 430.0, 440.0]


def test_bad_rows_are_collected() -> None:
    text = """\
SPECT
BEGIN_DATA_FORMAT
SPEC_380 SPEC_390 SPEC_400
END_DATA_FORMAT
BEGIN_DATA
0.1 0.2 0.3
0.1 x 0.3
0.1 0.2
END_DATA
"""
    with pytest.raises(MalformedDataRowError) as info:
        parse_argyll(text)
    assert [err.line for err in info.value.diagnostics] == [7, 8]
    assert info.value.diagnostics[1].reason == "expected 3 fields, found 2"


def test_non_integer_band_count() -> None:
    text = AMBIENT.replace('SPECTRAL_BANDS "3"', 'SPECTRAL_BANDS "three"')
    with pytest.raises(MalformedHeaderError) as info:
        parse_argyll(text)
    assert info.value.key == "SPECTRAL_BANDS"
    assert info.value.line == 5


def test_set_count_mismatch_warns(caplog: pytest.LogCaptureFixture) -> None:
    text = AMBIENT.replace("NUMBER_OF_SETS 1", "NUMBER_OF_SETS 2")
    with caplog.at_level(logging.WARNING, logger="specread.io.argyll"):
        parse_argyll(text)
    assert any("NUMBER_OF_SETS" in record.getMessage() for record in caplog.records)


def test_no_data_rows() -> None:
    with pytest.raises(EmptyDatasetError):
        parse_argyll("SPECT\nSPECTRAL_BANDS 3\n")


def test_no_usable_axis() -> None:
    with pytest.raises(MalformedDocumentError):
        parse_argyll("SPECT\nBEGIN_DATA\n1 2 3\nEND_DATA\n")


def test_every_bad_keyword_is_reported() -> None:
    text = AMBIENT.replace('SPECTRAL_BANDS "3"', 'SPECTRAL_BANDS "three"').replace(
        'SPECTRAL_END_NM "400.0"', 'SPECTRAL_END_NM "end"'
    )
    with pytest.raises(MalformedHeaderError) as info:
        parse_argyll(text)
    assert [(err.key, err.line) for err in info.value.diagnostics] == [
        ("SPECTRAL_BANDS", 5),
        ("SPECTRAL_END_NM", 7),
    ]
