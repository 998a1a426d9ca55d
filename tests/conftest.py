"""
Shared pytest fixtures and configuration.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from cognicap.api.app import create_app
from cognicap.experiments.clock import VirtualClock


class FixedRng:
    """Stands in for numpy's Generator: uniform draws return the low bound."""

    def __init__(self, random_value: float = 0.5):
        self.random_value = random_value

    def uniform(self, low, high):
        return low

    def random(self):
        return self.random_value


@pytest.fixture()
def fixed_rng():
    return FixedRng()


@pytest.fixture()
def app(tmp_path):
    """Fresh app per test: own journal file, virtual clock, fixed seed."""
    return create_app(db_path=tmp_path / "journal.db", clock=VirtualClock(), seed=7)


@pytest_asyncio.fixture()
async def client(app):
    """Async HTTP client wired directly to the ASGI app (no server needed)."""
    async with app.router.lifespan_context(app):
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac


@pytest.fixture()
def rng_factory():
    """Build a FixedRng with a chosen `random()` value."""
    return FixedRng
