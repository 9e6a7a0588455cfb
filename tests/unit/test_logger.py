"""
Park Fan Sync - Logger Unit Tests

Tests structured JSON logging functionality:
- Logger setup and configuration
- Sync event logging (start, complete, error)
- API request and database error logging
"""

import json
import logging
from io import StringIO

from parkfan.utils.logger import (
    setup_logger, logger, log_sync_start, log_sync_complete, log_sync_error,
    log_api_request, log_database_error
)


class TestSetupLogger:

    def test_returns_logger_instance(self):
        test_logger = setup_logger("parkfan_test_logger")

        assert isinstance(test_logger, logging.Logger)
        assert test_logger.name == "parkfan_test_logger"
        assert test_logger.propagate is False

    def test_prevents_duplicate_handlers(self):
        first = len(setup_logger("parkfan_test_duplicate").handlers)
        second = len(setup_logger("parkfan_test_duplicate").handlers)

        assert first == second == 1

    def test_global_logger(self):
        assert logger.name == "parkfan"

    def test_output_is_json(self):
        test_logger = setup_logger("parkfan_test_json")
        stream = StringIO()
        test_logger.handlers[0].setStream(stream)

        test_logger.info("Sync completed", extra={"job": "wait_times", "parks": 85})

        payload = json.loads(stream.getvalue().strip())
        assert payload["message"] == "Sync completed"
        assert payload["job"] == "wait_times"
        assert payload["parks"] == 85
        assert payload["levelname"] == "INFO"


class TestSyncLogging:

    def test_log_sync_start(self, parkfan_caplog):
        log_sync_start("parks", 42)

        record = parkfan_caplog.records[-1]
        assert record.message == "Sync started"
        assert record.job == "parks"
        assert record.item_count == 42

    def test_log_sync_complete(self, parkfan_caplog):
        log_sync_complete("parks", 12.5, succeeded=40, failed=2)

        record = parkfan_caplog.records[-1]
        assert record.message == "Sync completed"
        assert record.succeeded == 40
        assert record.failed == 2

    def test_log_sync_error(self, parkfan_caplog):
        try:
            raise ValueError("API timeout")
        except ValueError as e:
            log_sync_error(e, "full_sync", item="park mk")

        record = parkfan_caplog.records[-1]
        assert record.levelname == "ERROR"
        assert record.error_type == "ValueError"
        assert record.item == "park mk"
        assert record.exc_info is not None


class TestOtherLogging:

    def test_log_api_request(self, parkfan_caplog):
        log_api_request("GET", "/api/health", 200, 3.2)

        record = parkfan_caplog.records[-1]
        assert record.message == "API request"
        assert record.status_code == 200

    def test_log_database_error(self, parkfan_caplog):
        log_database_error(RuntimeError("gone away"), "upsert park")

        record = parkfan_caplog.records[-1]
        assert record.levelname == "ERROR"
        assert record.query_context == "upsert park"
