from __future__ import annotations

import logging

import pytest

from logging_setup import level_for_verbosity, setup_logging


@pytest.mark.parametrize(
    ("verbosity", "level"),
    [(0, logging.WARNING), (1, logging.INFO), (2, logging.DEBUG), (5, logging.DEBUG)],
)
def test_level_for_verbosity(verbosity: int, level: int) -> None:
    assert level_for_verbosity(verbosity) == level


def test_setup_logging_replaces_root_handlers() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging(1)
        setup_logging(1)

        assert len(root.handlers) == 1
        assert root.level == logging.INFO
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
