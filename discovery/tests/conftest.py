import pytest

from discovery.core.cache import QueryCache
from discovery.tests.factories import FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return QueryCache(max_entries=16, clock=clock)
