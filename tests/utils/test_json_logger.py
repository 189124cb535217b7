import json
import logging
import sys

import pytest

from impersonate.utils.loggers.json_logger import JsonLogger, get_logger, log_json


@pytest.fixture
def record():
    return logging.LogRecord(
        name="json_logger_test", level=logging.INFO, pathname=__file__,
        lineno=10, msg="Training %s", args=("completed",), exc_info=None)


def test_format_basic_fields(record):
    data = json.loads(JsonLogger().format(record))

    assert data["level"] == "INFO"
    assert data["logger"] == "json_logger_test"
    assert data["message"] == "Training completed"
    assert data["line"] == 10
    assert "metrics" not in data


def test_format_metrics(record):
    record.metrics = {"states": 3}
    data = json.loads(JsonLogger().format(record))
    assert data["metrics"] == {"states": 3}


def test_format_exception(record):
    try:
        raise ValueError("boom")
    except ValueError:
        record.exc_info = sys.exc_info()

    data = json.loads(JsonLogger().format(record))
    assert data["exception"]["type"] == "ValueError"
    assert data["exception"]["message"] == "boom"


def test_get_logger_console_goes_to_stderr(capsys):
    logger = get_logger("json_logger_test.console", console_level="INFO")
    logger.info("hello")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert json.loads(captured.err)["message"] == "hello"


def test_get_logger_console_level(capsys):
    logger = get_logger("json_logger_test.level")
    logger.info("hidden")
    logger.warning("shown")

    lines = capsys.readouterr().err.splitlines()
    assert [json.loads(line)["message"] for line in lines] == ["shown"]


def test_get_logger_clears_handlers():
    first = get_logger("json_logger_test.clear")
    second = get_logger("json_logger_test.clear")
    assert first is second
    assert len(second.handlers) == 1


def test_get_logger_log_file(tmp_path):
    log_file = tmp_path / "logs" / "impersonate.log"
    logger = get_logger("json_logger_test.file", log_file=str(log_file))
    log_json(logger, "Generation finished", {"generated": 2})

    for handler in logger.handlers:
        handler.flush()

    data = json.loads(log_file.read_text().splitlines()[-1])
    assert data["message"] == "Generation finished"
    assert data["metrics"] == {"generated": 2}
