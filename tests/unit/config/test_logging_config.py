"""
Unit tests for JSON logger setup.
"""

import json
import logging

from pythonjsonlogger import jsonlogger

from src.config.logging_config import SERVICE_NAME, route_server_logs, setup_logger


class TestSetupLogger:
    def test_single_json_handler(self) -> None:
        log = setup_logger("test_drive_notes.single")
        assert len(log.handlers) == 1
        assert isinstance(log.handlers[0].formatter, jsonlogger.JsonFormatter)

    def test_repeated_setup_does_not_duplicate_handlers(self) -> None:
        setup_logger("test_drive_notes.repeat")
        log = setup_logger("test_drive_notes.repeat")
        assert len(log.handlers) == 1

    def test_level_from_argument(self) -> None:
        log = setup_logger("test_drive_notes.level", level="WARNING")
        assert log.level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self) -> None:
        log = setup_logger("test_drive_notes.bogus", level="LOUD")
        assert log.level == logging.INFO

    def test_records_are_tagged_with_service_name(self) -> None:
        log = setup_logger("test_drive_notes.tagged")
        record = logging.LogRecord(
            "test_drive_notes.tagged", logging.INFO, __file__, 1, "Created file id=%s", ("abc",), None
        )

        payload = json.loads(log.handlers[0].formatter.format(record))

        assert payload["service"] == SERVICE_NAME
        assert payload["message"] == "Created file id=abc"
        assert payload["levelname"] == "INFO"


class TestServerLogs:
    def test_uvicorn_loggers_use_json_and_stop_propagating(self) -> None:
        route_server_logs()
        for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
            log = logging.getLogger(name)
            assert log.propagate is False
            assert any(isinstance(h.formatter, jsonlogger.JsonFormatter) for h in log.handlers)
