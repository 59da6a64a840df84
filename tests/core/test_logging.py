from __future__ import annotations

import logging

import pytest

from lms.core.logging import (
    NOISY_LOGGERS,
    JsonLinesFormatter,
    TextFormatter,
    resolve_level,
    setup_logging,
)


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    saved = (root.level, list(root.handlers))
    yield
    root.setLevel(saved[0])
    root.handlers[:] = saved[1]


def _line(level: int, *, filename: str = "enrollment.py", lineno: int = 31) -> str:
    record = logging.LogRecord(
        name="lms.services.enrollment",
        level=level,
        pathname=f"lms/services/{filename}",
        lineno=lineno,
        msg="enrolled %s",
        args=("learner-1",),
        exc_info=None,
    )
    return TextFormatter().format(record)


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("debug", logging.DEBUG),
        ("INFO", logging.INFO),
        ("warning", logging.WARNING),
        ("error", logging.ERROR),
        ("verbose", logging.INFO),
    ],
)
def test_resolve_level(name: str, expected: int) -> None:
    assert resolve_level(name) == expected


def test_setup_installs_a_single_stdout_handler() -> None:
    setup_logging("debug")
    setup_logging("debug")

    (handler,) = logging.getLogger().handlers
    assert logging.getLogger().level == logging.DEBUG
    assert isinstance(handler.formatter, TextFormatter)


def test_setup_with_json_uses_json_lines() -> None:
    setup_logging("info", json_format=True)

    (handler,) = logging.getLogger().handlers
    assert isinstance(handler.formatter, JsonLinesFormatter)


@pytest.mark.parametrize(
    ("name", "floor"), [("debug", logging.WARNING), ("error", logging.ERROR)]
)
def test_noisy_loggers_never_drop_below_warning(name: str, floor: int) -> None:
    setup_logging(name)

    assert {logging.getLogger(n).level for n in NOISY_LOGGERS} == {floor}


def test_text_line_has_level_logger_and_message() -> None:
    line = _line(logging.INFO)

    assert " INFO     lms.services.enrollment  enrolled learner-1" in line
    assert "[enrollment.py:" not in line


@pytest.mark.parametrize("level", [logging.WARNING, logging.ERROR, logging.CRITICAL])
def test_text_line_points_at_source_from_warning_up(level: int) -> None:
    assert _line(level, filename="payments.py", lineno=88).endswith(
        "  [payments.py:88]"
    )


def test_text_timestamp_is_utc_with_milliseconds() -> None:
    stamp = _line(logging.INFO).split(" ", 1)[0]

    assert stamp.endswith("+00:00")
    assert len(stamp.split(".")[1]) == len("123+00:00")
