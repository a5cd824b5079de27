# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Unit Tests for Error Types and Structured Logging
"""

import json
import logging

from module_resolver.core.errors import (
    CyclicDependencyError,
    InstallStepTimeoutError,
    MissingModuleError,
    ResolutionError,
    VersionConflictError,
    sanitize_error_for_user,
)
from module_resolver.core.logging import JSONFormatter, TextFormatter, get_logger, log_event


class TestErrors:
    """Test suite for the error hierarchy"""

    def test_resolution_errors_share_a_base(self):
        """Test that resolution failures can be caught together"""
        for error in (
            MissingModuleError("x"),
            CyclicDependencyError(["a", "b", "a"]),
            VersionConflictError("q", "2.1", [{"required_by": "r", "version_range": "<2.0"}]),
        ):
            assert isinstance(error, ResolutionError)

    def test_error_to_dict(self):
        """Test the serializable error form"""
        data = MissingModuleError("ghost", required_by="housing").to_dict()

        assert data["error"] == "MissingModuleError"
        assert data["details"] == {"module": "ghost", "required_by": "housing"}
        assert "required by housing" in data["message"]

    def test_version_conflict_message(self):
        """Test that the conflict message names the module and the range"""
        error = VersionConflictError("q", "2.1", [{"required_by": "r", "version_range": "<2.0"}])

        assert str(error) == "Version conflict on q: registered version 2.1 does not satisfy r requires <2.0"

    def test_sanitize_truncates(self):
        """Test that long messages are truncated and typed"""
        message = sanitize_error_for_user(RuntimeError("x" * 1000))

        assert message.startswith("RuntimeError: ")
        assert message.endswith("...")
        assert len(message) < 600

    def test_timeout_error(self):
        """Test the timeout error message"""
        error = InstallStepTimeoutError("payments", 2.5)

        assert error.module_name == "payments"
        assert "2.5s" in str(error)


class TestStructuredLogging:
    """Test suite for JSON logging"""

    def test_json_formatter_includes_extras(self):
        """Test that extra fields appear in the JSON record"""
        record = logging.LogRecord("module_resolver.test", logging.INFO, __file__, 1, "module_installed", (), None)
        record.module_name = "payments"

        data = json.loads(JSONFormatter().format(record))

        assert data["message"] == "module_installed"
        assert data["level"] == "INFO"
        assert data["module_name"] == "payments"

    def test_json_formatter_groups_context(self):
        """Test that module_name and error stay top-level and other extras go under context"""
        record = logging.LogRecord("module_resolver.test", logging.ERROR, __file__, 1, "module_install_failed", (), None)
        record.module_name = "payments"
        record.error = "boom"
        record.run_id = "r-1"

        data = json.loads(JSONFormatter().format(record))

        assert data["module_name"] == "payments"
        assert data["error"] == "boom"
        assert data["context"] == {"run_id": "r-1"}

    def test_json_formatter_without_extras(self):
        """Test that a plain record has no context group"""
        record = logging.LogRecord("module_resolver.test", logging.INFO, __file__, 1, "ready", (), None)

        data = json.loads(JSONFormatter().format(record))

        assert "context" not in data
        assert "module_name" not in data

    def test_text_formatter_prefixes_module(self):
        """Test that the text format leads with the module and ends with the error"""
        record = logging.LogRecord("module_resolver.test", logging.ERROR, __file__, 1, "module_install_failed", (), None)
        record.module_name = "payments"
        record.error = "boom"

        line = TextFormatter().format(record)

        assert line.endswith(" - module_resolver.test - ERROR - [payments] module_install_failed: boom")

    def test_text_formatter_plain_message(self):
        """Test that records without a module are left as-is"""
        record = logging.LogRecord("module_resolver.test", logging.INFO, __file__, 1, "ready", (), None)

        assert TextFormatter().format(record).endswith(" - INFO - ready")

    def test_log_event(self, caplog):
        """Test that log_event attaches fields to the record"""
        logger = logging.getLogger("module_resolver.test_events")

        with caplog.at_level(logging.INFO, logger="module_resolver.test_events"):
            log_event(logger, "module_rolled_back", module_name="housing")

        assert caplog.records[0].module_name == "housing"

    def test_get_logger_replaces_handlers(self):
        """Test that reconfiguring a logger does not stack handlers"""
        get_logger("module_resolver.test_handlers", log_format="text")
        logger = get_logger("module_resolver.test_handlers", log_level="DEBUG")

        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)
        assert logger.level == logging.DEBUG
        logger.handlers = []
