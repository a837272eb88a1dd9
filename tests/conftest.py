"""
Pytest configuration and fixtures.
"""

import logging
from pathlib import Path

import pytest

from libcfg.config import Config
from libcfg.logging import ROOT_LOGGER

SERVER_TEXT = """
# example server configuration
server = {
    port = 8080;
    host = "localhost";
    flags = [1, 2, 3];
};
"""


@pytest.fixture
def server_text() -> str:
    """Small document with one group, used across tests."""
    return SERVER_TEXT


@pytest.fixture
def server_config(server_text: str) -> Config:
    config = Config()
    config.read_string(server_text)
    return config


@pytest.fixture
def example_config_path() -> Path:
    """Path to the example config shipped with the repository."""
    return Path(__file__).parent.parent / "config.example.cfg"


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by setup_logging() during a test."""
    yield
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
