import logging

import pytest

from meshport import config


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Run every test against the bundled defaults and a clean logger."""
    monkeypatch.delenv(config.MESHPORT_CONFIG, raising=False)
    config.clear_cache()
    yield
    config.clear_cache()
    logger = logging.getLogger("meshport")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
