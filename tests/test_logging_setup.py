import time
import logging
from pathlib import Path

import pytest

from cubeview.app import logging_setup
from cubeview.app.app_settings_manager import AppSettingsManager


@pytest.fixture(autouse=True)
def _isolate_logging():
    """
    各テストの前後で logging を初期化して汚染を防ぐ
    """
    yield
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()


@pytest.fixture
def tmp_log_dir(tmp_path: Path):
    d = tmp_path / "logs"
    d.mkdir(parents=True, exist_ok=True)
    return d


@pytest.fixture
def module(tmp_log_dir, monkeypatch):
    """default_log_dir をテンポラリディレクトリへ向ける"""
    monkeypatch.setattr(logging_setup, "default_log_dir", lambda app_name: tmp_log_dir)
    return logging_setup


def _read_text(path: Path) -> str:
    "macOS 等での同時書き出しに備え、短いリトライを入れる"
    for _ in range(10):
        try:
            return path.read_text(encoding="utf-8", errors="replace")
        except OSError:
            time.sleep(0.02)
    return path.read_text(encoding="utf-8", errors="replace")


def test_info_level_writes_file(module, tmp_log_dir):
    logs = module.LogSystem.from_levels("cubeview", root_level=logging.INFO, console_level=logging.INFO)
    logger = logging.getLogger("cubeview.test")

    logger.debug("debug should NOT appear")
    logger.info("info should appear")
    logger.warning("warning should appear")
    logs.stop()  # フラッシュ

    log_file = tmp_log_dir / "cubeview.log"
    assert log_file.exists(), "ログファイルが作成されていません"
    assert logs.log_file == log_file

    text = _read_text(log_file)
    assert "info should appear" in text
    assert "warning should appear" in text
    assert "debug should NOT appear" not in text
    assert "cubeview.test" in text


def test_debug_level_outputs_debug(module, tmp_log_dir):
    logs = module.LogSystem.from_levels("cubeview", root_level=logging.DEBUG, console_level=logging.DEBUG)
    logger = logging.getLogger("cubeview.core.rotation_controller")

    logger.debug("debug visible")
    logger.info("info visible")
    logs.stop()

    text = _read_text(tmp_log_dir / "cubeview.log")
    assert "debug visible" in text
    assert "info visible" in text


def test_queue_listener_flush_on_stop(module, tmp_log_dir):
    logs = module.LogSystem.from_levels("cubeview", root_level=logging.INFO, console_level=logging.INFO)
    logger = logging.getLogger("cubeview.bulk")

    for i in range(200):
        logger.info("line %04d", i)

    # stop() で QueueListener がフラッシュして終了すること
    logs.stop()
    logs.stop()

    text = _read_text(tmp_log_dir / "cubeview.log")
    assert "line 0000" in text
    assert "line 0199" in text
    assert "line 0200" not in text


def test_rotation_by_small_max_bytes(module, tmp_log_dir, monkeypatch):
    """build_config の maxBytes を小さくしてローテーションを発生させる"""
    monkeypatch.setenv("CUBEVIEW_LOG_BACKUP_COUNT", "2")
    orig_build = module.build_config

    def tiny_build_config(app_name, root_level=None, console_level=logging.INFO, log_dir=None):
        cfg = orig_build(app_name, root_level, console_level, log_dir)
        cfg["_file_settings"]["maxBytes"] = 1000
        return cfg

    monkeypatch.setattr(module, "build_config", tiny_build_config)

    logs = module.LogSystem.from_levels("cubeview", root_level=logging.INFO, console_level=logging.WARNING)
    logger = logging.getLogger("cubeview.rotate")
    payload = "X" * 180
    for i in range(200):
        logger.info("i=%03d %s", i, payload)
    logs.stop()

    assert (tmp_log_dir / "cubeview.log").exists()
    assert (tmp_log_dir / "cubeview.log.1").exists()
    assert not (tmp_log_dir / "cubeview.log.3").exists()

    text_all = "".join(
        _read_text(p) for p in tmp_log_dir.glob("cubeview.log*")
    )
    assert "i=199" in text_all


def test_apply_logging_policy_follows_run_mode(module, tmp_settings):
    logs = module.LogSystem.from_levels("cubeview", root_level=logging.INFO, console_level=logging.INFO)
    settings = AppSettingsManager()

    settings.set_run_mode("development")
    module.apply_logging_policy(logs, settings)
    assert logging.getLogger().level == logging.DEBUG
    assert logs._console_handler.level == logging.DEBUG

    settings.set_run_mode("production")
    settings.set_logging_level("WARNING")
    module.apply_logging_policy(logs, settings)
    assert logs._console_handler.level == logging.WARNING
    logs.stop()
