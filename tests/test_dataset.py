from __future__ import annotations

import numpy as np
import pytest

from specread.builder import assemble_dataset, build_dataset
from specread.config import ReaderConfig
from specread.errors import (
    EmptyDatasetError,
    MalformedDataRowError,
    MalformedHeaderError,
    NonMonotonicWavelengthError,
)
from specread.io.table import parse_table
from specread.io.tokenizer import Tokenizer
from specread.types import Metadata, SampleSeries


def _series(name: str, wl, values) -> SampleSeries:
    return SampleSeries(name=name, wavelengths=np.asarray(wl), values=np.asarray(values))


def test_series_arrays_are_read_only_copies() -> None:
    wl = np.array([380.0, 390.0])
    series = _series("s", wl, [0.1, 0.2])
    wl[0] = 0.0
    assert series.wavelengths[0] == 380.0
    with pytest.raises(ValueError):
        series.values[0] = 5.0
    assert series.pairs() == [(380.0, 0.1), (390.0, 0.2)]
    assert list(series) == series.pairs()
    assert len(series) == 2


@pytest.mark.parametrize(
    "wl, values",
    [
        ([380.0, 370.0], [0.1, 0.2]),
        ([380.0, 380.0], [0.1, 0.2]),
        ([380.0, 390.0], [0.1, np.nan]),
        ([380.0, 390.0], [0.1]),
        ([[380.0, 390.0]], [[0.1, 0.2]]),
    ],
)
def test_series_rejects_broken_invariants(wl, values) -> None:
    with pytest.raises(ValueError):
        _series("s", wl, values)


def test_series_equality_and_step() -> None:
    a = _series("s", [380.0, 390.0, 400.0], [1.0, 2.0, 3.0])
    b = _series("s", [380.0, 390.0, 400.0], [1.0, 2.0, 3.0])
    assert a == b
    assert a != _series("t", [380.0, 390.0, 400.0], [1.0, 2.0, 3.0])
    assert a.step == pytest.approx(10.0)
    assert a.is_uniform
    assert not _series("s", [380.0, 385.0, 400.0], [1.0, 2.0, 3.0]).is_uniform


def test_interpolate_fills_outside_range() -> None:
    series = _series("s", [400.0, 500.0], [0.0, 1.0])
    out = series.interpolate([350.0, 450.0, 550.0])
    assert np.isnan(out[0]) and np.isnan(out[2])
    assert out[1] == pytest.approx(0.5)
    held = series.interpolate([350.0, 550.0], extrapolate=True)
    np.testing.assert_allclose(held, [0.0, 1.0])


def test_assemble_computes_statistics() -> None:
    dataset = assemble_dataset(
        Metadata(),
        {
            "a": _series("a", [380.0, 390.0, 400.0], [0.1, 0.5, 0.2]),
            "b": _series("b", [380.0, 390.0, 400.0], [-0.3, 0.0, 0.9]),
        },
    )
    assert dataset.series_names == ("a", "b")
    assert dataset.wavelength_min == 380.0
    assert dataset.wavelength_max == 400.0
    assert dataset.value_min == -0.3
    assert dataset.value_max == 0.9
    assert dataset.uniform
    assert dataset.step == pytest.approx(10.0)
    assert len(dataset) == 2
    assert [s.name for s in dataset] == ["a", "b"]


def test_dataset_is_not_uniform_when_steps_differ() -> None:
    dataset = assemble_dataset(
        Metadata(),
        {
            "a": _series("a", [380.0, 390.0, 400.0], [0.1, 0.5, 0.2]),
            "b": _series("b", [380.0, 385.0, 390.0], [0.1, 0.5, 0.2]),
        },
    )
    assert not dataset.uniform
    assert dataset.step is None


def test_dataset_is_immutable() -> None:
    dataset = assemble_dataset(Metadata(), {"a": _series("a", [1.0, 2.0], [1.0, 2.0])})
    with pytest.raises(AttributeError):
        dataset.value_max = 5.0  # type: ignore[misc]
    with pytest.raises(TypeError):
        dataset.series["b"] = dataset["a"]  # type: ignore[index]
    with pytest.raises(TypeError):
        dataset.metadata.fields["x"] = "y"  # type: ignore[index]


def test_resample_returns_new_dataset() -> None:
    dataset = assemble_dataset(
        Metadata(), {"a": _series("a", [380.0, 400.0, 420.0], [0.0, 1.0, 0.0])}
    )
    resampled = dataset.resample([380.0, 390.0, 400.0, 410.0, 420.0])
    assert resampled is not dataset
    np.testing.assert_allclose(resampled["a"].values, [0.0, 0.5, 1.0, 0.5, 0.0])
    assert resampled.step == pytest.approx(10.0)
    np.testing.assert_array_equal(dataset["a"].wavelengths, [380.0, 400.0, 420.0])
    with pytest.raises(ValueError, match="outside the sampled range"):
        dataset.resample([370.0, 380.0])


def test_to_nm_converts_wavelengths_and_bounds() -> None:
    meta = Metadata(wavelength_unit="um", wavelength_min=0.38, wavelength_max=0.40)
    dataset = assemble_dataset(meta, {"a": _series("a", [0.38, 0.39, 0.40], [1.0, 2.0, 3.0])})
    converted = dataset.to_nm()
    np.testing.assert_allclose(converted["a"].wavelengths, [380.0, 390.0, 400.0])
    assert converted.metadata.wavelength_unit == "nm"
    assert converted.metadata.declared_range == pytest.approx((380.0, 400.0))
    assert dataset.metadata.wavelength_unit == "um"

    plain = assemble_dataset(Metadata(), {"a": _series("a", [1.0, 2.0], [1.0, 2.0])})
    assert plain.to_nm() is plain


def test_build_dataset_raises_all_problems_in_file_order() -> None:
    text = "380 0.1\n390 x\n370 0.3\n"
    table = parse_table(Tokenizer(text))
    header_error = MalformedHeaderError("range", "wide", "bad", 1)
    with pytest.raises(MalformedHeaderError) as info:
        build_dataset(Metadata(), table, header_errors=[header_error])
    kinds = [type(err) for err in info.value.diagnostics]
    assert kinds == [MalformedHeaderError, MalformedDataRowError, NonMonotonicWavelengthError]
    assert "3 problems found" in info.value.summary()


def test_build_dataset_empty_table() -> None:
    table = parse_table(Tokenizer("# nothing\n"))
    with pytest.raises(EmptyDatasetError):
        build_dataset(Metadata(), table)


def test_build_dataset_respects_step_tolerance() -> None:
    table = parse_table(Tokenizer("380 1\n390.001 1\n400 1\n"))
    strict = build_dataset(Metadata(), table)
    loose = build_dataset(Metadata(), table, config=ReaderConfig(uniform_step_rtol=1e-3))
    assert not strict.uniform
    assert loose.uniform
