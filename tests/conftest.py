"""Shared fixtures"""

import logging

import pytest


@pytest.fixture
def restore_root_logger():
    """main() installs a log file handler on the root logger; drop it afterwards"""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if isinstance(handler, logging.FileHandler) and handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
