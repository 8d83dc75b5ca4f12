import logging

from relamap.utils.logging import get_correlation_id, get_logger, set_correlation_id, time_call


def test_correlation_id_round_trip():
    token = set_correlation_id("test-token")
    assert token == "test-token"
    assert get_correlation_id() == "test-token"


def test_loggers_live_under_package_namespace():
    assert get_logger("persistence.session").name == "relamap.persistence.session"
    assert logging.getLogger("relamap").handlers


def test_time_call_logs_duration(caplog):
    logger = get_logger("tests.logging")
    caplog.set_level(logging.DEBUG, logger=logger.name)
    with time_call("unit-test", logger, sql="SELECT 1", params=[], threshold_ms=10_000):
        pass
    records = [record for record in caplog.records if record.name == logger.name]
    assert any("unit-test took" in record.message for record in records)
    assert all(record.levelno == logging.DEBUG for record in records)
    assert records[-1].sql == "SELECT 1"


def test_time_call_escalates_slow_calls(caplog):
    logger = get_logger("tests.slow")
    caplog.set_level(logging.DEBUG, logger=logger.name)
    with time_call("slow-call", logger, threshold_ms=0) as timer:
        pass
    assert timer.elapsed_ms >= 0
    assert any(
        record.levelno == logging.WARNING and "slow-call took" in record.message
        for record in caplog.records
    )
