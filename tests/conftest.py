import pytest

from tests.fakes import FakePopulation, FakeFacility, FakeFacilities


@pytest.fixture
def population_factory():
    def _factory(workers=None):
        return FakePopulation(workers)

    return _factory


@pytest.fixture
def facility_factory():
    """Return a factory building a FakeFacilities locator around one FakeFacility.

    Usage:
        facilities = facility_factory(busy=True)
        facilities = facility_factory(missing=True)
    """

    def _factory(missing: bool = False, **kwargs):
        return FakeFacilities(None if missing else FakeFacility(**kwargs))

    return _factory
