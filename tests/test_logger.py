from __future__ import annotations

import logging

from demand_pacing.utils.logger import get_logger, summary_line


def test_summary_line_joins_fields_in_order() -> None:
    line = summary_line("Pace computed", city="paris", rows=3, ratio=1.23456)
    assert line == "Pace computed | city=paris | rows=3 | ratio=1.23"


def test_summary_line_without_fields_is_event_only() -> None:
    assert summary_line("Startup complete") == "Startup complete"


def test_get_logger_returns_named_logger() -> None:
    logger = get_logger("demand_pacing.tests")
    assert isinstance(logger, logging.Logger)
    assert logger.name == "demand_pacing.tests"
