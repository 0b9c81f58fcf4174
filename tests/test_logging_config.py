"""Tests for logging_config.py."""

import logging

from sixnations.logging_config import setup_logging


def test_setup_logging_single_stdout_handler(capsys):
    root = setup_logging(logging.DEBUG)
    setup_logging(logging.DEBUG)
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1

    logging.getLogger("sixnations.test").debug("round %d placed", 3)
    out = capsys.readouterr().out
    assert "sixnations.test - DEBUG - round 3 placed" in out
    for handler in root.handlers[:]:
        root.removeHandler(handler)
