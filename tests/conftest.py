from __future__ import annotations

import sys
from collections.abc import Iterator

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def _reset_loguru() -> Iterator[None]:
    yield
    # CliRunner swaps sys.stderr; drop any sink bound to its closed stream.
    logger.remove()
    logger.add(sys.stderr, level="WARNING")
