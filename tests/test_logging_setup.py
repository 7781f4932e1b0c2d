import json
import logging

import structlog

from prunewalk import __version__
from prunewalk.logging_setup import configure_logging


def _json_lines(text: str) -> list:
    return [json.loads(line) for line in text.splitlines() if line.startswith("{")]


def test_json_logs_carry_app_version(capsys):
    configure_logging("info", force_json_logs=True)
    structlog.get_logger("prunewalk.tests").warning("walk_check", root="/tmp/x")

    records = _json_lines(capsys.readouterr().err)
    record = next(r for r in records if r["event"] == "walk_check")
    assert record["prunewalk_version"] == __version__
    assert record["level"] == "warning"
    assert record["root"] == "/tmp/x"


def test_stdlib_records_get_app_version(capsys):
    configure_logging("warning", force_json_logs=True)
    logging.getLogger("prunewalk.plain").warning("plain stdlib message")

    records = _json_lines(capsys.readouterr().err)
    record = next(r for r in records if r["event"] == "plain stdlib message")
    assert record["prunewalk_version"] == __version__


def test_level_filters_below_threshold(capsys):
    configure_logging("error", force_json_logs=True)
    structlog.get_logger("prunewalk.tests").warning("should_not_appear")
    assert "should_not_appear" not in capsys.readouterr().err
