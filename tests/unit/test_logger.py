import logging

from pmd_dx_api.logger import access_logger, caller_context, error_logger, init_logging, log_error


def _failing_lookup():
    raise ValueError("lookup failed")


def test_caller_context_names_the_raising_frame():
    try:
        _failing_lookup()
    except ValueError as e:
        context = caller_context(e)

    assert context.startswith("_failing_lookup(test_logger.py:")


def test_caller_context_without_traceback():
    assert caller_context(ValueError("never raised")) == "unknown"


def test_log_error_writes_context_and_message(caplog):
    try:
        _failing_lookup()
    except ValueError as e:
        with caplog.at_level(logging.ERROR, logger=error_logger.name):
            log_error(e)

    assert "_failing_lookup(test_logger.py:" in caplog.text
    assert "lookup failed" in caplog.text


def test_init_logging_replaces_file_handlers(tmp_path):
    init_logging(str(tmp_path / "first"))
    init_logging(str(tmp_path / "second"))
    try:
        assert len(access_logger.handlers) == 1
        assert len(error_logger.handlers) == 1
        log_error(ValueError("disk full"))
        for handler in error_logger.handlers:
            handler.flush()
        assert "disk full" in (tmp_path / "second" / "error.log").read_text()
        assert (tmp_path / "second" / "access.log").exists()
    finally:
        for log in (access_logger, error_logger):
            for handler in list(log.handlers):
                log.removeHandler(handler)
                handler.close()
