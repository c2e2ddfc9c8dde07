import logging

from todo_demo.logging_config import HANDLER_NAME, configure_logging


def _installed_handlers():
    return [h for h in logging.getLogger().handlers if h.get_name() == HANDLER_NAME]


class TestConfigureLogging:
    def test_repeated_calls_install_one_handler(self):
        configure_logging("INFO")
        configure_logging("INFO")
        assert len(_installed_handlers()) == 1

    def test_later_call_applies_new_level(self):
        try:
            configure_logging("INFO")
            configure_logging("WARNING")
            assert logging.getLogger().level == logging.WARNING
            assert logging.getLogger("uvicorn.access").level == logging.WARNING
            assert len(_installed_handlers()) == 1
        finally:
            configure_logging("INFO")

    def test_unknown_level_falls_back_to_info(self):
        configure_logging("chatty")
        assert logging.getLogger().level == logging.INFO

    def test_uvicorn_loggers_share_the_handler(self):
        configure_logging("INFO")
        handler = _installed_handlers()[0]
        for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
            logger = logging.getLogger(name)
            assert logger.handlers == [handler]
            assert logger.propagate is False
