import logging
import sys

from photo_smith import logger as ps_logger


def _stderr_handlers(base: logging.Logger) -> list[logging.Handler]:
    return [h for h in base.handlers if isinstance(h, logging.StreamHandler) and h.stream is sys.stderr]


def test_setup_logger_idempotent_handlers(monkeypatch):
    """Calling setup_logger() repeatedly should leave exactly one stderr StreamHandler."""
    monkeypatch.delenv("PHOTO_SMITH_LOG_LEVEL", raising=False)
    base = ps_logger.setup_logger(level=logging.DEBUG)
    _ = ps_logger.setup_logger(level=logging.DEBUG)

    assert len(_stderr_handlers(base)) == 1
    assert base.propagate is False


def test_env_level_overrides_argument(monkeypatch):
    monkeypatch.setenv("PHOTO_SMITH_LOG_LEVEL", "error")
    base = ps_logger.setup_logger(level=logging.DEBUG)
    assert base.level == logging.ERROR
    monkeypatch.delenv("PHOTO_SMITH_LOG_LEVEL")
    ps_logger.setup_logger()


def test_category_filter_passes_only_listed_modules(monkeypatch):
    monkeypatch.setenv("PHOTO_SMITH_LOG_CATS", "editor, history")
    base = ps_logger.setup_logger()
    handler = _stderr_handlers(base)[0]

    def _record(name: str) -> logging.LogRecord:
        return logging.LogRecord(name, logging.INFO, __file__, 1, "msg", None, None)

    assert handler.filter(_record("photo_smith.editor"))
    assert handler.filter(_record("photo_smith.history"))
    assert not handler.filter(_record("photo_smith.protocol"))

    monkeypatch.delenv("PHOTO_SMITH_LOG_CATS")
    base = ps_logger.setup_logger()
    assert _stderr_handlers(base)[0].filter(_record("photo_smith.protocol"))


def test_get_logger_returns_child():
    log = ps_logger.get_logger("editor")
    assert log.name == "photo_smith.editor"
    assert ps_logger.get_logger() is logging.getLogger("photo_smith")
