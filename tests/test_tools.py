import httpx
import pytest

from census_mcp.client import CENSUS_API_BASE, CensusClient
from census_mcp.errors import DecodeError, EmptyResultError, UpstreamError, ValidationError
from census_mcp.formatter import TextFormatter
from census_mcp.mock import MockCensusClient
from census_mcp.models import CustomQuerySpec, PopulationRecord, VariableDescriptor
from census_mcp.tools import TOOL_SPECS, CensusToolHandler, ToolResult


pytestmark = pytest.mark.asyncio

CALIFORNIA = PopulationRecord("California", "39538223", "06")


def _handler(client) -> CensusToolHandler:
    return CensusToolHandler(client, TextFormatter())


async def test_state_population_success(recording_client_factory) -> None:
    client = recording_client_factory(get_state_population=[CALIFORNIA])

    result = await _handler(client).get_state_population({"stateID": "06"})

    assert result.is_error is False
    assert "California (state 06)" in result.text
    assert client.calls == [("get_state_population", ("06",))]


@pytest.mark.parametrize("arguments", [None, {}, {"stateID": 6}, {"stateID": None}])
async def test_state_population_treats_bad_state_id_as_absent(
    recording_client_factory, arguments
) -> None:
    client = recording_client_factory(get_state_population=[CALIFORNIA])

    result = await _handler(client).get_state_population(arguments)

    assert result.is_error is False
    assert client.calls == [("get_state_population", ("",))]


async def test_county_population_error_uses_prefix(recording_client_factory) -> None:
    client = recording_client_factory(
        get_county_population=UpstreamError("API вернул статус 503", status_code=503)
    )

    result = await _handler(client).get_county_population({"stateID": "06"})

    assert result == ToolResult(
        "Ошибка при получении данных о населении округов: API вернул статус 503",
        is_error=True,
    )


@pytest.mark.parametrize("arguments", [{}, {"name": ""}, {"name": 12}])
async def test_search_requires_name(recording_client_factory, arguments) -> None:
    client = recording_client_factory()

    result = await _handler(client).search_state_by_name(arguments)

    assert result.is_error is True
    assert result.text == "Необходимо указать параметр 'name'"
    assert client.calls == []


async def test_search_without_matches_is_a_success(recording_client_factory) -> None:
    client = recording_client_factory(search_state_by_name=[])

    result = await _handler(client).search_state_by_name({"name": "Atlantis"})

    assert result == ToolResult("Штаты не найдены по запросу: Atlantis")


async def test_search_with_matches_formats_table(recording_client_factory) -> None:
    client = recording_client_factory(search_state_by_name=[CALIFORNIA])

    result = await _handler(client).search_state_by_name({"name": "calif"})

    assert result.is_error is False
    assert result.text.startswith("| Region | Population |")


async def test_datasets_error_uses_prefix(recording_client_factory) -> None:
    client = recording_client_factory(get_available_datasets=DecodeError("bad catalog"))

    result = await _handler(client).get_available_datasets({})

    assert result.is_error is True
    assert result.text == (
        "Ошибка при получении данных о доступных наборах данных: bad catalog"
    )


@pytest.mark.parametrize(
    "arguments",
    [{"dataset": "", "year": "2021"}, {"dataset": "acs/acs1"}, {"dataset": "acs/acs1", "year": 2021}],
)
@pytest.mark.parametrize("tool", ["get_variables", "get_geography_levels"])
async def test_dataset_tools_validate_before_client(
    recording_client_factory, tool: str, arguments
) -> None:
    client = recording_client_factory()

    result = await getattr(_handler(client), tool)(arguments)

    assert result == ToolResult(
        "Необходимо указать параметры 'dataset' и 'year'", is_error=True
    )
    assert client.calls == []


async def test_variables_success(recording_client_factory) -> None:
    client = recording_client_factory(
        get_variables={"B01001_001E": VariableDescriptor("B01001_001E", "Total")}
    )

    result = await _handler(client).get_variables({"dataset": "acs/acs1", "year": "2021"})

    assert "## B01001_001E: Total" in result.text
    assert client.calls == [("get_variables", ("acs/acs1", "2021"))]


async def test_geography_levels_error_uses_prefix(recording_client_factory) -> None:
    client = recording_client_factory(get_geography_levels=EmptyResultError("пусто"))

    result = await _handler(client).get_geography_levels(
        {"dataset": "acs/acs1", "year": "2021"}
    )

    assert result.text == (
        "Ошибка при получении данных о доступных географических уровнях: пусто"
    )
    assert result.is_error is True


async def test_custom_data_synthesizes_wildcard_filter(recording_client_factory) -> None:
    client = recording_client_factory(get_custom_data=[{"NAME": "Texas", "state": "48"}])

    result = await _handler(client).get_custom_data(
        {
            "dataset": "acs/acs1",
            "year": "2021",
            "geoLevel": "state",
            "variables": ["NAME", 7, None, "B01001_001E", {"x": 1}],
        }
    )

    assert result.is_error is False
    (method, (spec,)), = client.calls
    assert method == "get_custom_data"
    assert spec == CustomQuerySpec(
        variables=("NAME", "B01001_001E"),
        dataset="acs/acs1",
        year="2021",
        geo_level="state",
        geo_filter={"state": "*"},
    )


async def test_custom_data_keeps_string_filter_values(recording_client_factory) -> None:
    client = recording_client_factory(get_custom_data=[{"NAME": "Harris County"}])

    await _handler(client).get_custom_data(
        {
            "dataset": "acs/acs1",
            "year": "2021",
            "geoLevel": "county",
            "variables": ["NAME"],
            "geoFilter": {"state": "48", "county": "*", "tract": 5},
        }
    )

    spec = client.calls[0][1][0]
    assert spec.geo_filter == {"state": "48", "county": "*"}


@pytest.mark.parametrize(
    "arguments",
    [
        {"year": "2021", "geoLevel": "state", "variables": ["NAME"]},
        {"dataset": "acs/acs1", "geoLevel": "state", "variables": ["NAME"]},
        {"dataset": "acs/acs1", "year": "2021", "variables": ["NAME"]},
        {"dataset": "acs/acs1", "year": "2021", "geoLevel": "state"},
        {"dataset": "acs/acs1", "year": "2021", "geoLevel": "state", "variables": []},
        {"dataset": "acs/acs1", "year": "2021", "geoLevel": "state", "variables": "NAME"},
    ],
)
async def test_custom_data_requires_all_parameters(recording_client_factory, arguments) -> None:
    client = recording_client_factory()

    result = await _handler(client).get_custom_data(arguments)

    assert result == ToolResult(
        "Необходимо указать параметры 'dataset', 'year', 'geoLevel' и 'variables'",
        is_error=True,
    )
    assert client.calls == []


@pytest.mark.parametrize("variables", [[7], [7, None]])
async def test_custom_data_without_string_variables_reports_client_error_with_prefix(
    respx_mock, variables
) -> None:
    handler = _handler(CensusClient("test-key"))

    result = await handler.get_custom_data(
        {"dataset": "acs/acs1", "year": "2021", "geoLevel": "state", "variables": variables}
    )

    assert result == ToolResult(
        "Ошибка при получении пользовательских данных: "
        "необходимо указать хотя бы одну переменную",
        is_error=True,
    )
    assert not respx_mock.calls


async def test_client_validation_error_keeps_operation_prefix(recording_client_factory) -> None:
    client = recording_client_factory(
        get_variables=ValidationError("необходимо указать параметр 'year'")
    )

    result = await _handler(client).get_variables({"dataset": "acs/acs1", "year": "2021"})

    assert result == ToolResult(
        "Ошибка при получении данных о доступных переменных: "
        "необходимо указать параметр 'year'",
        is_error=True,
    )


async def test_unexpected_client_failure_becomes_error_result(recording_client_factory) -> None:
    client = recording_client_factory(get_state_population=RuntimeError("kaboom"))

    result = await _handler(client).get_state_population({})

    assert result == ToolResult(
        "Ошибка при получении данных о населении: kaboom", is_error=True
    )


async def test_http_500_surfaces_as_error_result(respx_mock) -> None:
    respx_mock.get(f"{CENSUS_API_BASE}/2021/acs/acs1").mock(
        return_value=httpx.Response(500)
    )
    handler = _handler(CensusClient("test-key"))

    result = await handler.get_state_population({"stateID": "06"})

    assert result.is_error is True
    assert result.text.startswith("Ошибка при получении данных о населении: ")
    assert "500" in result.text


async def test_custom_data_end_to_end_with_real_client(respx_mock) -> None:
    route = respx_mock.get(f"{CENSUS_API_BASE}/2021/acs/acs1").mock(
        return_value=httpx.Response(
            200,
            json=[
                ["NAME", "B01001_001E", "state"],
                ["California", "39237836", "06"],
                ["Texas", "29527941", "48"],
            ],
        )
    )
    handler = _handler(CensusClient("test-key"))

    result = await handler.get_custom_data(
        {
            "dataset": "acs/acs1",
            "year": "2021",
            "geoLevel": "state",
            "variables": ["NAME", "B01001_001E"],
        }
    )

    assert result.is_error is False
    assert "| 39237836 | California | 06 |" in result.text
    assert route.calls.last.request.url.params["for"] == "state:*"


async def test_handler_with_mock_client_serves_every_tool() -> None:
    handler = _handler(MockCensusClient())
    calls = {
        "get_state_population": {},
        "get_county_population": {"stateID": "48"},
        "search_state_by_name": {"name": "york"},
        "get_available_datasets": {},
        "get_variables": {"dataset": "acs/acs1", "year": "2021"},
        "get_geography_levels": {"dataset": "acs/acs1", "year": "2021"},
        "get_custom_data": {
            "dataset": "acs/acs1",
            "year": "2021",
            "geoLevel": "state",
            "variables": ["B19013_001E"],
        },
    }

    assert {spec.handler for spec in TOOL_SPECS} == set(calls)
    for spec in TOOL_SPECS:
        result = await getattr(handler, spec.handler)(calls[spec.handler])
        assert result.is_error is False, spec.name
        assert result.text, spec.name
