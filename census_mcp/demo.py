import logging
import sys
from typing import TextIO

from .client import CensusAPIClient
from .formatter import (
    CustomRowList,
    DatasetList,
    GeographyLevelList,
    PopulationList,
    TextFormatter,
    VariableMap,
)
from .models import CustomQuerySpec

DEMO_SEARCH_TERM = "york"
DEMO_DATASET = "acs/acs1"
DEMO_YEAR = "2021"

EXAMPLE_REQUESTS = (
    '{"jsonrpc":"2.0","id":"test","method":"tools/call","params":{"name":"get_state_population","arguments":{}}}',
    '{"jsonrpc":"2.0","id":"test","method":"tools/call","params":{"name":"get_state_population","arguments":{"stateID":"06"}}}',
    '{"jsonrpc":"2.0","id":"test","method":"tools/call","params":{"name":"search_state_by_name","arguments":{"name":"california"}}}',
    '{"jsonrpc":"2.0","id":"test","method":"tools/call","params":{"name":"get_available_datasets","arguments":{}}}',
    '{"jsonrpc":"2.0","id":"test","method":"tools/call","params":{"name":"get_variables","arguments":{"dataset":"acs/acs1","year":"2021"}}}',
    '{"jsonrpc":"2.0","id":"test","method":"tools/call","params":{"name":"get_geography_levels","arguments":{"dataset":"acs/acs1","year":"2021"}}}',
    '{"jsonrpc":"2.0","id":"test","method":"tools/call","params":{"name":"get_custom_data","arguments":{"dataset":"acs/acs1","year":"2021","geoLevel":"state","variables":["NAME","B01001_001E"]}}}',
)


async def run_demo(
    client: CensusAPIClient,
    formatter: TextFormatter,
    out: TextIO | None = None,
    logger: logging.Logger | None = None,
) -> None:
    """Print every tool's output for the sample data, then example requests."""
    out = out or sys.stdout
    logger = logger or logging.getLogger(__name__)
    logger.info("Running demonstration examples")

    def emit(text: str = "") -> None:
        print(text, file=out)

    emit("### ЗАПУСК ТЕСТОВЫХ ПРИМЕРОВ ###")

    emit("=== Тестирование получения данных о населении штатов ===")
    states = await client.get_state_population("")
    emit(formatter.format(PopulationList(states[:3])))

    emit("=== Тестирование поиска штата по названию ===")
    matches = await client.search_state_by_name(DEMO_SEARCH_TERM)
    emit(formatter.format(PopulationList(matches)))

    emit("=== Тестирование получения доступных наборов данных ===")
    emit(formatter.format(DatasetList(await client.get_available_datasets())))

    emit("=== Тестирование получения переменных набора данных ===")
    emit(formatter.format(VariableMap(await client.get_variables(DEMO_DATASET, DEMO_YEAR))))

    emit("=== Тестирование получения географических уровней ===")
    levels = await client.get_geography_levels(DEMO_DATASET, DEMO_YEAR)
    emit(formatter.format(GeographyLevelList(levels)))

    emit("=== Тестирование получения пользовательских данных ===")
    spec = CustomQuerySpec(
        variables=("NAME", "B01001_001E", "B19013_001E"),
        dataset=DEMO_DATASET,
        year=DEMO_YEAR,
        geo_level="state",
        geo_filter={"state": "*"},
    )
    emit(formatter.format(CustomRowList(await client.get_custom_data(spec))))

    emit()
    emit("=== Тестирование через MCP сервер ===")
    emit("Для тестирования через MCP клиент можно использовать запросы:")
    for number, request in enumerate(EXAMPLE_REQUESTS, start=1):
        emit(f"{number}. {request}")
    emit()
    emit("Запустите сервер без флага --test и отправьте запрос через клиент MCP")
    logger.info("Demonstration finished")
