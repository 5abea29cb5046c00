from __future__ import annotations

import logging
from pathlib import Path

import pytest
from rich.logging import RichHandler

from skyjo import actions, state
from skyjo.logs import setup_logging
from skyjo.state import SkyjoConfig


@pytest.fixture(autouse=True)
def _restore_skyjo_logger():
    logger = logging.getLogger("skyjo")
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = propagate


def test_file_logging_records_engine_events(tmp_path: Path) -> None:
    log_file = tmp_path / "skyjo.log"
    setup_logging("INFO", log_file)

    actions.tick(state.new_game(SkyjoConfig(seed=1)))

    text = log_file.read_text(encoding="utf-8")
    assert "round 1 dealt" in text
    assert "skyjo.rules" in text


def test_console_logging_uses_rich_handler() -> None:
    setup_logging("debug")

    handlers = logging.getLogger("skyjo").handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0], RichHandler)
    assert logging.getLogger("skyjo").level == logging.DEBUG


def test_repeated_setup_replaces_handlers(tmp_path: Path) -> None:
    setup_logging("INFO", tmp_path / "one.log")
    setup_logging("INFO", tmp_path / "two.log")

    assert len(logging.getLogger("skyjo").handlers) == 1


def test_unknown_level_is_rejected() -> None:
    with pytest.raises(ValueError):
        setup_logging("LOUD")
