from dataclasses import dataclass
from typing import Any, Mapping

from .errors import ToolArgumentError
from .models import CustomQuerySpec

WILDCARD = "*"


@dataclass(frozen=True)
class ToolArgument:
    kind: type
    required: bool
    description: str = ""


STATE_ARGUMENTS = {
    "stateID": ToolArgument(str, False, "State FIPS code, for example '06'"),
}
NAME_ARGUMENTS = {
    "name": ToolArgument(str, True, "Text to look for in state names"),
}
DATASET_ARGUMENTS = {
    "dataset": ToolArgument(str, True, "Dataset path, for example 'acs/acs1'"),
    "year": ToolArgument(str, True, "Dataset vintage, for example '2021'"),
}
CUSTOM_ARGUMENTS = {
    **DATASET_ARGUMENTS,
    "geoLevel": ToolArgument(str, True, "Geography level, for example 'state'"),
    "variables": ToolArgument(list, True, "Variable codes, for example ['NAME', 'B01001_001E']"),
    "geoFilter": ToolArgument(dict, False, "Geography filter, for example {'state': '06'}"),
}

# Tool name -> argument name -> ToolArgument.
TOOL_ARGUMENTS: dict[str, dict[str, ToolArgument]] = {
    "get_state_population": STATE_ARGUMENTS,
    "get_county_population": STATE_ARGUMENTS,
    "search_state_by_name": NAME_ARGUMENTS,
    "get_available_datasets": {},
    "get_variables": DATASET_ARGUMENTS,
    "get_geography_levels": DATASET_ARGUMENTS,
    "get_custom_data": CUSTOM_ARGUMENTS,
}

_JSON_SCHEMA_TYPES: dict[type, dict[str, Any]] = {
    str: {"type": "string"},
    list: {"type": "array", "items": {"type": "string"}},
    dict: {"type": "object", "additionalProperties": {"type": "string"}},
}


def input_schema(tool_name: str) -> dict[str, Any]:
    """JSON schema advertised for a tool, built from its argument table."""
    table = TOOL_ARGUMENTS[tool_name]
    properties = {
        name: {**_JSON_SCHEMA_TYPES[argument.kind], "description": argument.description}
        for name, argument in table.items()
    }
    required = [name for name, argument in table.items() if argument.required]
    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


@dataclass(frozen=True)
class StateQuery:
    state_id: str = ""


@dataclass(frozen=True)
class NameQuery:
    name: str


@dataclass(frozen=True)
class DatasetQuery:
    dataset: str
    year: str


def _typed(
    table: Mapping[str, ToolArgument], arguments: Mapping[str, Any] | None, key: str
) -> Any:
    if not arguments:
        return None
    value = arguments.get(key)
    return value if isinstance(value, table[key].kind) else None


def _check_required(
    table: Mapping[str, ToolArgument], arguments: Mapping[str, Any] | None, message: str
) -> None:
    # Wrong-typed and empty values count as missing.
    for name, argument in table.items():
        if argument.required and not _typed(table, arguments, name):
            raise ToolArgumentError(message)


def _string_items(values: list[Any] | None) -> tuple[str, ...]:
    return tuple(value for value in values or [] if isinstance(value, str))


def _string_values(mapping: dict[str, Any] | None) -> dict[str, str]:
    return {
        str(key): value for key, value in (mapping or {}).items() if isinstance(value, str)
    }


def parse_state_query(arguments: Mapping[str, Any] | None) -> StateQuery:
    return StateQuery(state_id=_typed(STATE_ARGUMENTS, arguments, "stateID") or "")


def parse_name_query(arguments: Mapping[str, Any] | None) -> NameQuery:
    _check_required(NAME_ARGUMENTS, arguments, "Необходимо указать параметр 'name'")
    return NameQuery(name=_typed(NAME_ARGUMENTS, arguments, "name"))


def parse_dataset_query(arguments: Mapping[str, Any] | None) -> DatasetQuery:
    _check_required(
        DATASET_ARGUMENTS, arguments, "Необходимо указать параметры 'dataset' и 'year'"
    )
    return DatasetQuery(
        dataset=_typed(DATASET_ARGUMENTS, arguments, "dataset"),
        year=_typed(DATASET_ARGUMENTS, arguments, "year"),
    )


def parse_custom_query(arguments: Mapping[str, Any] | None) -> CustomQuerySpec:
    _check_required(
        CUSTOM_ARGUMENTS,
        arguments,
        "Необходимо указать параметры 'dataset', 'year', 'geoLevel' и 'variables'",
    )
    geo_level = _typed(CUSTOM_ARGUMENTS, arguments, "geoLevel")

    raw_filter = _typed(CUSTOM_ARGUMENTS, arguments, "geoFilter")
    if raw_filter is None:
        geo_filter = {geo_level: WILDCARD}
    else:
        geo_filter = _string_values(raw_filter)

    return CustomQuerySpec(
        variables=_string_items(_typed(CUSTOM_ARGUMENTS, arguments, "variables")),
        dataset=_typed(CUSTOM_ARGUMENTS, arguments, "dataset"),
        year=_typed(CUSTOM_ARGUMENTS, arguments, "year"),
        geo_level=geo_level,
        geo_filter=geo_filter,
    )
