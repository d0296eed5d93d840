from typing import Any, Callable

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.tools import Tool
from mcp.types import CallToolResult, TextContent
from starlette.requests import Request
from starlette.responses import JSONResponse

from .config import ServerConfig
from .tools import TOOL_SPECS, CensusToolHandler, ToolResult
from .validation import input_schema

SERVER_NAME = "census-api"
HEALTH_BODY = {"status": "ok"}


def to_call_result(result: ToolResult) -> CallToolResult:
    return CallToolResult(
        content=[TextContent(type="text", text=result.text)],
        isError=result.is_error,
    )


def build_tools(handler: CensusToolHandler) -> list[Tool]:
    """Wrap every handler method as a FastMCP tool.

    Tool parameters accept any JSON value so that the handler sees the
    arguments as sent and applies its own checks. The advertised input
    schema comes from the argument tables in ``validation``.
    """
    specs = {spec.name: spec for spec in TOOL_SPECS}

    async def _run(name: str, /, **arguments: Any) -> CallToolResult:
        method = getattr(handler, specs[name].handler)
        received = {key: value for key, value in arguments.items() if value is not None}
        return to_call_result(await method(received))

    async def get_state_population(stateID: Any = None) -> CallToolResult:
        return await _run("get_state_population", stateID=stateID)

    async def get_county_population(stateID: Any = None) -> CallToolResult:
        return await _run("get_county_population", stateID=stateID)

    async def search_state_by_name(name: Any = None) -> CallToolResult:
        return await _run("search_state_by_name", name=name)

    async def get_available_datasets() -> CallToolResult:
        return await _run("get_available_datasets")

    async def get_variables(dataset: Any = None, year: Any = None) -> CallToolResult:
        return await _run("get_variables", dataset=dataset, year=year)

    async def get_geography_levels(dataset: Any = None, year: Any = None) -> CallToolResult:
        return await _run("get_geography_levels", dataset=dataset, year=year)

    async def get_custom_data(
        dataset: Any = None,
        year: Any = None,
        geoLevel: Any = None,
        variables: Any = None,
        geoFilter: Any = None,
    ) -> CallToolResult:
        return await _run(
            "get_custom_data",
            dataset=dataset,
            year=year,
            geoLevel=geoLevel,
            variables=variables,
            geoFilter=geoFilter,
        )

    functions: dict[str, Callable[..., Any]] = {
        "get_state_population": get_state_population,
        "get_county_population": get_county_population,
        "search_state_by_name": search_state_by_name,
        "get_available_datasets": get_available_datasets,
        "get_variables": get_variables,
        "get_geography_levels": get_geography_levels,
        "get_custom_data": get_custom_data,
    }
    return [
        Tool.from_function(
            functions[spec.name], name=spec.name, description=spec.description
        ).model_copy(update={"parameters": input_schema(spec.name)})
        for spec in TOOL_SPECS
    ]


def create_app(handler: CensusToolHandler, config: ServerConfig) -> FastMCP:
    mcp = FastMCP(
        SERVER_NAME,
        instructions=(
            "Query the U.S. Census Bureau data API: population by state and county, "
            "dataset catalog, variables, geography levels and custom tabular queries."
        ),
        host=config.host,
        port=config.port,
        tools=build_tools(handler),
    )

    @mcp.custom_route("/health", methods=["GET"])
    async def health(request: Request) -> JSONResponse:
        return JSONResponse(HEALTH_BODY)

    return mcp
