from __future__ import annotations

import logging
from datetime import date, datetime

import pytest

from src.headcount_workflow.headcount_workflow.common.datetime_utils import as_date, now_utc, to_db_datetime
from src.headcount_workflow.headcount_workflow.common.validators import optional_text, require_bool, require_non_negative_int
from src.headcount_workflow.headcount_workflow.core.exceptions import DomainError, ValidationError
from src.headcount_workflow.headcount_workflow.core.logging_config import KeyValueFormatter, get_logger


def test_get_logger_is_namespaced():
    assert get_logger("headcount.service").name == "headcount_workflow.headcount.service"


def test_formatter_appends_extra_fields():
    record = logging.LogRecord("headcount_workflow.x", logging.INFO, __file__, 1, "Request %s", ("approved",), None)
    record.request_id = "r1"
    record.actor_id = "u1"

    line = KeyValueFormatter().format(record)

    assert "INFO headcount_workflow.x: Request approved" in line
    assert line.endswith("| actor_id=u1 request_id=r1")


def test_validation_error_is_a_domain_error():
    assert issubclass(ValidationError, DomainError)


@pytest.mark.parametrize("value,expected", [(0, 0), ("12", 12), (3.0, 3)])
def test_require_non_negative_int_accepts(value, expected):
    assert require_non_negative_int(value, "Headcount") == expected


@pytest.mark.parametrize("value", [True, -1, "1.5", "", 1.5])
def test_require_non_negative_int_rejects(value):
    with pytest.raises(ValidationError):
        require_non_negative_int(value, "Headcount")


def test_optional_text():
    assert optional_text("  ") is None
    assert optional_text(" hi ") == "hi"
    assert optional_text(None) is None


def test_datetime_helpers():
    now = now_utc()
    assert now.microsecond % 1000 == 0
    assert to_db_datetime(now).tzinfo is None
    assert as_date("2026-02-01") == date(2026, 2, 1)
    assert as_date(datetime(2026, 2, 1, 9, 0)) == date(2026, 2, 1)
    assert as_date("") is None


def test_require_bool():
    assert require_bool(True, "Flag") is True
    assert require_bool(False, "Flag", default=True) is False
    assert require_bool(None, "Flag", default=True) is True
    for value in ("true", "false", 1, 0, None):
        with pytest.raises(ValidationError):
            require_bool(value, "Flag")
