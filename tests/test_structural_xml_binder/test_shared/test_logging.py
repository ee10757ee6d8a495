"""Tests for correlation-aware logging."""

import logging

from structural_xml_binder.shared.logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)


class TestCorrelationLogger:
    """Test records carry component and correlation ID."""

    def test_extras_on_records(self, caplog):
        logger = get_logger("structural_xml_binder.test", "abc", "binder")

        with caplog.at_level(logging.INFO, logger="structural_xml_binder.test"):
            logger.info("Starting bind", extra={"target_type": "Zone"})

        record = caplog.records[-1]
        assert record.component == "binder"
        assert record.correlation_id == "abc"
        assert record.target_type == "Zone"

    def test_default_component_from_name(self):
        logger = CorrelationLogger("structural_xml_binder.binding.descriptors")

        assert logger.component == "descriptors"
        assert logger.correlation_id is None

    def test_bind_new_correlation_id(self):
        logger = get_logger("structural_xml_binder.test", "first", "binder")

        rebound = logger.bind("second")

        assert rebound.correlation_id == "second"
        assert rebound.component == "binder"
        assert logger.correlation_id == "first"

    def test_debug_enabled(self, caplog):
        logger = get_logger("structural_xml_binder.test")

        with caplog.at_level(logging.DEBUG, logger="structural_xml_binder.test"):
            assert logger.is_debug_enabled()
        with caplog.at_level(logging.WARNING, logger="structural_xml_binder.test"):
            assert not logger.is_debug_enabled()

    def test_exception_includes_traceback(self, caplog):
        logger = get_logger("structural_xml_binder.test")

        with caplog.at_level(logging.ERROR, logger="structural_xml_binder.test"):
            try:
                raise ValueError("boom")
            except ValueError:
                logger.exception("Bind failed")

        assert caplog.records[-1].exc_info is not None


class TestConfigureLogging:
    """Test the root handler setup."""

    def test_foreign_records_get_component(self):
        root = logging.getLogger()
        handlers_before = list(root.handlers)
        level_before = root.level
        try:
            for handler in handlers_before:
                root.removeHandler(handler)
            configure_logging("DEBUG")
            handler = root.handlers[0]
            record = logging.LogRecord("thirdparty.module", logging.INFO, __file__, 1,
                                       "hello", None, None)

            assert handler.filter(record)
            assert record.component == "module"
        finally:
            for handler in list(root.handlers):
                root.removeHandler(handler)
            for handler in handlers_before:
                root.addHandler(handler)
            root.setLevel(level_before)
