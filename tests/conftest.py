import pytest

from census_mcp.client import CensusClient
from census_mcp.formatter import TextFormatter
from census_mcp.models import (
    CustomQuerySpec,
    DatasetDescriptor,
    GeographyLevelDescriptor,
    PopulationRecord,
    VariableDescriptor,
)


TEST_API_KEY = "test-census-api-key"


@pytest.fixture(autouse=True)
def _set_default_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CENSUS_API_KEY", TEST_API_KEY)


@pytest.fixture(autouse=True)
def _disable_live_network(respx_mock) -> None:
    # Prevent accidental real HTTP calls: unmatched requests fail the test.
    respx_mock.assert_all_mocked = True
    respx_mock.assert_all_called = False


@pytest.fixture
def census_client() -> CensusClient:
    return CensusClient(TEST_API_KEY)


@pytest.fixture
def formatter() -> TextFormatter:
    return TextFormatter()


class RecordingClient:
    """Client double that records calls and returns canned results."""

    def __init__(self, **results):
        self.calls: list[tuple[str, tuple]] = []
        self.results = results

    async def _answer(self, method: str, *args):
        self.calls.append((method, args))
        result = self.results.get(method)
        if isinstance(result, Exception):
            raise result
        return result

    async def get_state_population(self, state_id: str = "") -> list[PopulationRecord]:
        return await self._answer("get_state_population", state_id)

    async def get_county_population(self, state_id: str = "") -> list[PopulationRecord]:
        return await self._answer("get_county_population", state_id)

    async def search_state_by_name(self, name: str) -> list[PopulationRecord]:
        return await self._answer("search_state_by_name", name)

    async def get_available_datasets(self) -> list[DatasetDescriptor]:
        return await self._answer("get_available_datasets")

    async def get_variables(self, dataset: str, year: str) -> dict[str, VariableDescriptor]:
        return await self._answer("get_variables", dataset, year)

    async def get_geography_levels(
        self, dataset: str, year: str
    ) -> list[GeographyLevelDescriptor]:
        return await self._answer("get_geography_levels", dataset, year)

    async def get_custom_data(self, spec: CustomQuerySpec) -> list[dict[str, str]]:
        return await self._answer("get_custom_data", spec)


@pytest.fixture
def recording_client_factory():
    return RecordingClient
