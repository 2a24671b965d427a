from __future__ import annotations  # noqa: D100

import pytest


@pytest.fixture(autouse=True, scope="session")
def anyio_backend():
    "never use asyncio for testing"
    return "trio"
