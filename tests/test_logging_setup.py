import faulthandler
import logging
import sys
import time
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _isolate_logging():
    """
    Reset logging after each test so handlers do not leak between tests.
    """
    yield
    logging.shutdown()
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)


@pytest.fixture
def tmp_log_dir(tmp_path: Path):
    d = tmp_path / "logs"
    d.mkdir(parents=True, exist_ok=True)
    return d


@pytest.fixture
def module(tmp_log_dir, monkeypatch):
    """
    logging_setup with default_log_dir pointed at a temporary directory.
    :param tmp_log_dir:
    :param monkeypatch:
    :return: logging_setup
    """
    from vcx.app import logging_setup
    monkeypatch.setattr(logging_setup, "default_log_dir", lambda app_name: tmp_log_dir)
    return logging_setup


def _read_text(path: Path) -> str:
    "Retry briefly in case the listener thread is still writing."
    for _ in range(10):
        try:
            return path.read_text(encoding="utf-8", errors="replace")
        except OSError:
            time.sleep(0.02)
    return path.read_text(encoding="utf-8", errors="replace")


def test_info_level_writes_file(module, tmp_log_dir):
    """test at INFO level"""
    logs = module.LogSystem.from_levels("vcx", root_level=logging.INFO, console_level=logging.INFO)
    logger = logging.getLogger("vcx.test")

    logger.debug("debug should NOT appear")
    logger.info("info should appear")
    logger.warning("warning should appear")
    logs.stop()

    log_file = tmp_log_dir / "vcx.log"
    assert log_file.exists(), "log file was not created"
    assert logs.log_file == log_file

    text = _read_text(log_file)
    assert "info should appear" in text
    assert "warning should appear" in text
    assert "debug should NOT appear" not in text

    assert " INFO " in text or " WARNING " in text
    assert "vcx.test" in text


def test_debug_level_outputs_debug(module, tmp_log_dir):
    """test at DEBUG level"""
    logs = module.LogSystem.from_levels("vcx", root_level=logging.DEBUG, console_level=logging.DEBUG)
    logger = logging.getLogger("vcx.core.alignment_detector")

    logger.debug("debug visible")
    logger.info("info visible")
    logs.stop()

    text = _read_text(tmp_log_dir / "vcx.log")
    assert "debug visible" in text
    assert "info visible" in text


def test_queue_listener_flush_on_stop(module, tmp_log_dir):
    logs = module.LogSystem.from_levels("vcx", root_level=logging.INFO, console_level=logging.INFO)
    logger = logging.getLogger("vcx.bulk")

    for i in range(200):
        logger.info("line %04d", i)

    # stop() drains the queue before returning
    logs.stop()

    text = _read_text(tmp_log_dir / "vcx.log")

    assert "line 0000" in text
    assert "line 0199" in text
    assert "line 0200" not in text
    assert text.count("vcx.bulk") == 200


def test_stop_is_idempotent(module):
    logs = module.LogSystem.from_levels("vcx", root_level=logging.INFO)
    logs.stop()
    logs.stop()


def test_env_level_is_used(module, monkeypatch):
    monkeypatch.setenv("VCX_LOG_LEVEL", "warning")
    cfg = module.build_config("vcx")
    assert cfg["root"]["level"] == "WARNING"


def test_rotation_by_small_max_bytes(module, tmp_log_dir, monkeypatch):
    """
    Shrink maxBytes in build_config so the file rotates.
    """
    monkeypatch.setenv("VCX_LOG_BACKUP_COUNT", "2")

    orig_build = module.build_config

    def tiny_build_config(app_name: str, level: str | None = None, log_dir: Path | None = None):
        cfg = orig_build(app_name, level, log_dir)
        cfg["_file_settings"]["maxBytes"] = 100
        return cfg

    monkeypatch.setattr(module, "build_config", tiny_build_config)

    logs = module.LogSystem.from_levels("vcx", root_level=logging.INFO, console_level=logging.INFO)
    logger = logging.getLogger("vcx.rotate")

    payload = "X" * 180
    for i in range(200):
        logger.info("i=%03d %s", i, payload)

    logs.stop()

    base = tmp_log_dir / "vcx.log"
    rot1 = tmp_log_dir / "vcx.log.1"
    rot3 = tmp_log_dir / "vcx.log.3"

    assert base.exists()
    assert rot1.exists()
    assert not rot3.exists()
    assert "i=199" in _read_text(base)


class _Settings:
    def __init__(self, run_mode, logging_level="INFO"):
        self.run_mode = run_mode
        self.logging_level = logging_level


@pytest.mark.parametrize("mode, level, expected_console", [
    ("development", "ERROR", logging.DEBUG),
    ("verbose", "ERROR", logging.DEBUG),
    ("production", "WARNING", logging.WARNING),
    ("production", "ERROR", logging.ERROR),
])
def test_apply_logging_policy(module, mode, level, expected_console):
    from vcx.app.app_settings_manager import RunMode

    logs = module.LogSystem("vcx")
    try:
        module.apply_logging_policy(logs, _Settings(RunMode(mode), level))
        assert logging.getLogger().level == logging.DEBUG
        assert logs._console_handler.level == expected_console
        assert logs._file_handler.level == logging.DEBUG
    finally:
        logs.stop()


def test_install_crash_handlers(module, tmp_log_dir, monkeypatch):
    monkeypatch.setattr(module, "_crash_stream", None)
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)

    try:
        crash_file = module.install_crash_handlers(tmp_log_dir, "vcx")
        assert crash_file == tmp_log_dir / "vcx.crash.log"
        assert crash_file.exists()
        assert faulthandler.is_enabled()
        # second call reuses the open crash file
        assert module.install_crash_handlers(tmp_log_dir, "vcx") == crash_file
    finally:
        faulthandler.disable()
        if module._crash_stream is not None:
            module._crash_stream.close()


def test_uncaught_exception_is_logged_critical(module, tmp_log_dir, monkeypatch, caplog):
    monkeypatch.setattr(module, "_crash_stream", None)
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)

    try:
        module.install_crash_handlers(tmp_log_dir, "vcx")
        try:
            raise ValueError("unhandled boom")
        except ValueError:
            exc_info = sys.exc_info()
        with caplog.at_level(logging.CRITICAL):
            sys.excepthook(*exc_info)
        records = [r for r in caplog.records if r.levelno == logging.CRITICAL]
        assert len(records) == 1
        assert "unhandled boom" in caplog.text
    finally:
        faulthandler.disable()
        if module._crash_stream is not None:
            module._crash_stream.close()
