import logging
from dataclasses import dataclass
from typing import Any, Mapping

from .client import CensusAPIClient
from .errors import _tool_error_boundary
from .formatter import (
    CustomRowList,
    DatasetList,
    GeographyLevelList,
    PopulationList,
    TextFormatter,
    VariableMap,
)
from .validation import (
    parse_custom_query,
    parse_dataset_query,
    parse_name_query,
    parse_state_query,
)

Arguments = Mapping[str, Any] | None


@dataclass(frozen=True)
class ToolResult:
    text: str
    is_error: bool = False


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    handler: str


TOOL_SPECS = (
    ToolSpec(
        "get_state_population",
        "Get population data for a U.S. state. stateID is the FIPS code "
        "(for example '06' for California); omit it to list every state.",
        "get_state_population",
    ),
    ToolSpec(
        "get_county_population",
        "Get population data for counties. stateID limits the result to one "
        "state (for example '06'); omit it to list counties in every state.",
        "get_county_population",
    ),
    ToolSpec(
        "search_state_by_name",
        "Find states whose name contains the given text (case-insensitive).",
        "search_state_by_name",
    ),
    ToolSpec(
        "get_available_datasets",
        "List the datasets published by the Census API with their years.",
        "get_available_datasets",
    ),
    ToolSpec(
        "get_variables",
        "List the variables of a dataset (for example dataset 'acs/acs1', year '2021').",
        "get_variables",
    ),
    ToolSpec(
        "get_geography_levels",
        "List the geography levels of a dataset (for example dataset 'acs/acs1', year '2021').",
        "get_geography_levels",
    ),
    ToolSpec(
        "get_custom_data",
        "Run a custom Census API query: dataset, year, variables (for example "
        "['NAME', 'B01001_001E']) and geography level. geoFilter such as "
        '{"state": "06", "county": "*"} narrows the geography; without it every '
        "entity at geoLevel is returned.",
        "get_custom_data",
    ),
)


class CensusToolHandler:
    """Runs one tool call: parse arguments, query the client, format the result.

    Every method returns a :class:`ToolResult`; failures are reported in the
    result text and never raised to the transport.
    """

    def __init__(
        self,
        client: CensusAPIClient,
        formatter: TextFormatter,
        logger: logging.Logger | None = None,
    ):
        self._client = client
        self._formatter = formatter
        self._logger = logger or logging.getLogger(__name__)

    def _error_result(self, text: str) -> ToolResult:
        return ToolResult(text=text, is_error=True)

    def _text_result(self, text: str) -> ToolResult:
        return ToolResult(text=text)

    @_tool_error_boundary("Ошибка при получении данных о населении: ")
    async def get_state_population(self, arguments: Arguments = None) -> ToolResult:
        query = parse_state_query(arguments)
        self._logger.info("Handling get_state_population", extra={"state_id": query.state_id})
        records = await self._client.get_state_population(query.state_id)
        self._logger.debug("State population received", extra={"count": len(records)})
        return self._text_result(self._formatter.format(PopulationList(records)))

    @_tool_error_boundary("Ошибка при получении данных о населении округов: ")
    async def get_county_population(self, arguments: Arguments = None) -> ToolResult:
        query = parse_state_query(arguments)
        self._logger.info("Handling get_county_population", extra={"state_id": query.state_id})
        records = await self._client.get_county_population(query.state_id)
        self._logger.debug("County population received", extra={"count": len(records)})
        return self._text_result(self._formatter.format(PopulationList(records)))

    @_tool_error_boundary("Ошибка при поиске штата: ")
    async def search_state_by_name(self, arguments: Arguments = None) -> ToolResult:
        query = parse_name_query(arguments)
        self._logger.info("Handling search_state_by_name", extra={"search_name": query.name})
        states = await self._client.search_state_by_name(query.name)
        if not states:
            self._logger.info("No states matched", extra={"search_name": query.name})
            return self._text_result(f"Штаты не найдены по запросу: {query.name}")
        return self._text_result(self._formatter.format(PopulationList(states)))

    @_tool_error_boundary("Ошибка при получении данных о доступных наборах данных: ")
    async def get_available_datasets(self, arguments: Arguments = None) -> ToolResult:
        self._logger.info("Handling get_available_datasets")
        datasets = await self._client.get_available_datasets()
        self._logger.debug("Datasets received", extra={"count": len(datasets)})
        return self._text_result(self._formatter.format(DatasetList(datasets)))

    @_tool_error_boundary("Ошибка при получении данных о доступных переменных: ")
    async def get_variables(self, arguments: Arguments = None) -> ToolResult:
        query = parse_dataset_query(arguments)
        self._logger.info(
            "Handling get_variables", extra={"dataset": query.dataset, "year": query.year}
        )
        variables = await self._client.get_variables(query.dataset, query.year)
        return self._text_result(self._formatter.format(VariableMap(variables)))

    @_tool_error_boundary("Ошибка при получении данных о доступных географических уровнях: ")
    async def get_geography_levels(self, arguments: Arguments = None) -> ToolResult:
        query = parse_dataset_query(arguments)
        self._logger.info(
            "Handling get_geography_levels",
            extra={"dataset": query.dataset, "year": query.year},
        )
        levels = await self._client.get_geography_levels(query.dataset, query.year)
        return self._text_result(self._formatter.format(GeographyLevelList(levels)))

    @_tool_error_boundary("Ошибка при получении пользовательских данных: ")
    async def get_custom_data(self, arguments: Arguments = None) -> ToolResult:
        spec = parse_custom_query(arguments)
        self._logger.info(
            "Handling get_custom_data",
            extra={
                "dataset": spec.dataset,
                "year": spec.year,
                "geo_level": spec.geo_level,
                "geo_filter": spec.geo_filter,
            },
        )
        rows = await self._client.get_custom_data(spec)
        return self._text_result(self._formatter.format(CustomRowList(rows)))
