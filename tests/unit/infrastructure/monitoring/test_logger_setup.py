import logging

import pytest

from vaultcache.infrastructure.monitoring.logger_setup import level_from_name, setup_logging

@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)

@pytest.mark.parametrize("name, expected", [
    ("debug", logging.DEBUG),
    ("WARNING", logging.WARNING),
    (None, logging.INFO),
    ("chatty", logging.INFO),
])
def test_level_from_name(name, expected):
    assert level_from_name(name) == expected

def test_setup_logging_replaces_handlers(restore_root_logger):
    setup_logging(log_level=logging.DEBUG)
    assert restore_root_logger.level == logging.DEBUG
    assert len(restore_root_logger.handlers) == 1

def test_setup_logging_writes_to_file(restore_root_logger, tmp_path):
    log_file = tmp_path / "cache.log"
    setup_logging(log_level=logging.INFO, log_file=str(log_file))
    logging.getLogger("vaultcache.test").info("hello from the test")
    for handler in restore_root_logger.handlers:
        handler.flush()
    assert "hello from the test" in log_file.read_text(encoding="utf-8")
