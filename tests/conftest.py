from __future__ import annotations

import logging
from pathlib import Path

import pytest

from tests._fixtures.artifact_builder import ArtifactBuilder


@pytest.fixture
def artifacts(tmp_path: Path) -> ArtifactBuilder:
    """Provide a reusable artifact builder rooted at the pytest tmp_path."""
    return ArtifactBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _propagate_autodoc_logs():
    """Let caplog see autodoc records even after a CLI test configured logging."""
    logger = logging.getLogger("autodoc")
    handlers = list(logger.handlers)
    propagate = logger.propagate
    level = logger.level
    logger.propagate = True
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.propagate = propagate
    logger.setLevel(level)
