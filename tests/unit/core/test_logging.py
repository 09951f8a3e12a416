"""core/logging.py 테스트"""

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

import pytest

from core.logging import NOISY_LOGGERS, get_log_file_path, setup_logging


@pytest.fixture
def restore_root_logger():
    """테스트 후 루트 로거 핸들러 복원"""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:
    """setup_logging 테스트"""

    def test_log_file_path(self, temp_dir: Path) -> None:
        assert get_log_file_path("web", temp_dir) == temp_dir / "web.log"

    def test_handlers_configured(self, temp_dir: Path, restore_root_logger) -> None:
        root = setup_logging("test_proc", log_dir=temp_dir)

        assert len(root.handlers) == 2
        file_handlers = [h for h in root.handlers if isinstance(h, TimedRotatingFileHandler)]
        assert len(file_handlers) == 1
        assert (temp_dir / "test_proc.log").exists()

    def test_repeated_setup_does_not_duplicate(self, temp_dir: Path, restore_root_logger) -> None:
        setup_logging("test_proc", log_dir=temp_dir)
        root = setup_logging("test_proc", log_dir=temp_dir)

        assert len(root.handlers) == 2

    def test_noisy_loggers_quieted(self, temp_dir: Path, restore_root_logger) -> None:
        setup_logging("test_proc", log_dir=temp_dir)

        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING
