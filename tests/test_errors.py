from __future__ import annotations

from specread import (
    DuplicateWavelengthError,
    MalformedDataRowError,
    NonMonotonicWavelengthError,
    RangeMismatchError,
    ReadError,
    SourceReadError,
)


def test_single_error_reports_itself() -> None:
    err = MalformedDataRowError(4, "420 abc", "'abc' is not a number")
    assert err.diagnostics == (err,)
    assert str(err) == "line 4: malformed data row '420 abc': 'abc' is not a number"
    assert err.summary().startswith("1 problem found:")


def test_collected_errors_keep_file_order() -> None:
    first = NonMonotonicWavelengthError("main", 2, 390.0, 3)
    second = DuplicateWavelengthError("main", 400.0, 4, 5)
    third = RangeMismatchError("main", 410.0, (360.0, 400.0), 6)
    raised = first.with_diagnostics([first, second, third])
    assert raised is first
    assert raised.diagnostics == (first, second, third)
    assert str(raised).endswith("(and 2 more)")
    lines = raised.summary().splitlines()
    assert lines[0] == "3 problems found:"
    assert lines[3].endswith("lies outside the declared range [360, 400]")


def test_messages_without_line_numbers() -> None:
    err = DuplicateWavelengthError("R", 380.0, 1)
    assert not err.message.startswith("line")
    assert "'R'" in err.message


def test_source_errors_are_os_errors() -> None:
    err = SourceReadError("spectrum.txt", "No such file or directory")
    assert isinstance(err, OSError)
    assert isinstance(err, ReadError)
    assert "spectrum.txt" in str(err)
