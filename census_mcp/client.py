import logging
import re
from typing import Any, Protocol, Sequence

import httpx

from .errors import DecodeError, EmptyResultError, UpstreamError, ValidationError
from .models import (
    CustomQuerySpec,
    DatasetDescriptor,
    GeographyLevelDescriptor,
    PopulationRecord,
    VariableDescriptor,
)

CENSUS_API_BASE = "https://api.census.gov/data"
CENSUS_CATALOG_URL = "https://api.census.gov/data.json"
POPULATION_DATASET = "2021/acs/acs1"
POPULATION_VARIABLES = ("NAME", "B01001_001E")

HTTP_TIMEOUT_SECONDS = 30.0


class CensusAPIClient(Protocol):
    async def get_state_population(self, state_id: str = "") -> list[PopulationRecord]: ...

    async def get_county_population(self, state_id: str = "") -> list[PopulationRecord]: ...

    async def search_state_by_name(self, name: str) -> list[PopulationRecord]: ...

    async def get_available_datasets(self) -> list[DatasetDescriptor]: ...

    async def get_variables(self, dataset: str, year: str) -> dict[str, VariableDescriptor]: ...

    async def get_geography_levels(
        self, dataset: str, year: str
    ) -> list[GeographyLevelDescriptor]: ...

    async def get_custom_data(self, spec: CustomQuerySpec) -> list[dict[str, str]]: ...


def _redact_api_key_text(value: str) -> str:
    return re.sub(r"\b(key=)[^&\s]+", r"\1***", value)


def _sanitize_log_params(params: Sequence[tuple[str, str]]) -> list[tuple[str, str]]:
    return [(key, "***" if key == "key" else value) for key, value in params]


def rows_to_records(
    headers: Sequence[str], data_rows: Sequence[Sequence[str]]
) -> list[dict[str, str]]:
    """Zip the header row with each data row.

    Rows whose length differs from the header are dropped.
    """
    width = len(headers)
    return [dict(zip(headers, row)) for row in data_rows if len(row) == width]


def matches_name(candidate: str, query: str) -> bool:
    return query.lower() in candidate.lower()


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (str, int, float)):
        return str(value)
    raise DecodeError(f"неожиданное значение ячейки: {value!r}")


def _parse_table(payload: Any) -> tuple[list[str], list[list[str]]]:
    if not isinstance(payload, list) or not all(isinstance(row, list) for row in payload):
        raise DecodeError("ошибка при декодировании ответа: ожидался массив массивов")
    if len(payload) < 2:
        raise EmptyResultError("API вернул пустой результат")
    rows = [[_cell_text(cell) for cell in row] for row in payload]
    return rows[0], rows[1:]


def _population_record(row: dict[str, str]) -> PopulationRecord:
    return PopulationRecord(
        name=row.get("NAME", ""),
        population=row.get("B01001_001E", ""),
        state=row.get("state") or None,
        county=row.get("county") or None,
    )


def _require(**values: str) -> None:
    for name, value in values.items():
        if not value:
            raise ValidationError(f"необходимо указать параметр '{name}'")


def _catalog_entries(payload: dict[str, Any]) -> list[dict[str, Any]]:
    # Older catalog dumps nest datasets under "c_dataset" objects; the live
    # catalog lists each vintage directly with "c_dataset" as path segments.
    entries: list[dict[str, Any]] = []
    datasets = payload.get("dataset")
    if not isinstance(datasets, list):
        raise DecodeError("ошибка при декодировании ответа: нет списка 'dataset'")
    for item in datasets:
        if not isinstance(item, dict):
            continue
        nested = [sub for sub in item.get("c_dataset") or [] if isinstance(sub, dict)]
        entries.extend(nested or [item])
    return entries


def _split_access_url(access_url: str) -> tuple[str, str] | None:
    parts = access_url.split("/data/")
    if len(parts) != 2:
        return None
    path_parts = parts[1].split("/")
    if len(path_parts) < 2:
        return None
    return path_parts[0], "/".join(path_parts[1:])


def _geography_items(fips: Any) -> list[dict[str, Any]]:
    if isinstance(fips, dict):
        items = list(fips.values())
    elif isinstance(fips, list):
        items = fips
    else:
        raise DecodeError("ошибка при декодировании ответа: нет раздела 'fips'")
    return [item for item in items if isinstance(item, dict)]


def _string_list(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(str(item) for item in value if isinstance(item, (str, int)))


class CensusClient:
    """Async client for the Census Bureau data API."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = CENSUS_API_BASE,
        catalog_url: str = CENSUS_CATALOG_URL,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        logger: logging.Logger | None = None,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._catalog_url = catalog_url
        self._timeout = timeout
        self._logger = logger or logging.getLogger(__name__)

    async def _http_get_json(
        self, url: str, params: Sequence[tuple[str, str]] | None = None
    ) -> Any:
        safe_query = _sanitize_log_params(params or [])
        self._logger.debug(
            "Sending Census API request", extra={"endpoint": url, "query": safe_query}
        )
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(url, params=list(params or []))
        except httpx.RequestError as exc:
            reason = _redact_api_key_text(str(exc))
            self._logger.error(
                "Census API network request failed",
                extra={"endpoint": url, "query": safe_query, "reason": reason},
            )
            raise UpstreamError(
                f"ошибка при отправке запроса: {reason}", endpoint=url
            ) from exc

        if response.status_code != httpx.codes.OK:
            self._logger.error(
                "Census API returned unsuccessful status",
                extra={
                    "endpoint": url,
                    "status_code": response.status_code,
                    "query": safe_query,
                },
            )
            raise UpstreamError(
                f"API вернул статус {response.status_code}",
                status_code=response.status_code,
                endpoint=url,
            )

        try:
            return response.json()
        except ValueError as exc:
            self._logger.error(
                "Census API response JSON decode failed",
                extra={"endpoint": url, "query": safe_query},
            )
            raise DecodeError(f"ошибка при декодировании ответа: {exc}") from exc

    async def _get_table(
        self, url: str, params: Sequence[tuple[str, str]]
    ) -> list[dict[str, str]]:
        payload = await self._http_get_json(url, params)
        headers, data_rows = _parse_table(payload)
        records = rows_to_records(headers, data_rows)
        dropped = len(data_rows) - len(records)
        if dropped:
            self._logger.warning(
                "Skipped rows with mismatched width",
                extra={"endpoint": url, "dropped": dropped},
            )
        self._logger.debug(
            "Received Census API rows", extra={"endpoint": url, "count": len(records)}
        )
        return records

    async def _get_population(
        self, params: list[tuple[str, str]]
    ) -> list[PopulationRecord]:
        query = [("get", ",".join(POPULATION_VARIABLES)), *params, ("key", self._api_key)]
        rows = await self._get_table(f"{self._base_url}/{POPULATION_DATASET}", query)
        return [_population_record(row) for row in rows]

    async def get_state_population(self, state_id: str = "") -> list[PopulationRecord]:
        self._logger.info("Fetching state population", extra={"state_id": state_id})
        return await self._get_population([("for", f"state:{state_id or '*'}")])

    async def get_county_population(self, state_id: str = "") -> list[PopulationRecord]:
        self._logger.info("Fetching county population", extra={"state_id": state_id})
        params = [("for", "county:*")]
        if state_id:
            params.append(("in", f"state:{state_id}"))
        return await self._get_population(params)

    async def search_state_by_name(self, name: str) -> list[PopulationRecord]:
        self._logger.info("Searching states by name", extra={"search_name": name})
        states = await self.get_state_population("")
        return [state for state in states if matches_name(state.name, name)]

    async def get_available_datasets(self) -> list[DatasetDescriptor]:
        self._logger.info("Fetching dataset catalog")
        payload = await self._http_get_json(self._catalog_url)
        if not isinstance(payload, dict):
            raise DecodeError("ошибка при декодировании ответа: ожидался объект")

        years: dict[str, list[str]] = {}
        info: dict[str, tuple[str, str]] = {}
        for entry in _catalog_entries(payload):
            for dist in entry.get("distribution") or []:
                if not isinstance(dist, dict):
                    continue
                access_url = dist.get("accessURL")
                if not isinstance(access_url, str) or not access_url:
                    continue
                split = _split_access_url(access_url)
                if split is None:
                    continue
                year, dataset = split
                years.setdefault(dataset, []).append(year)
                info.setdefault(
                    dataset,
                    (str(entry.get("title") or dataset), str(entry.get("description") or "")),
                )

        return [
            DatasetDescriptor(
                title=info[dataset][0],
                description=info[dataset][1],
                dataset=dataset,
                years_available=tuple(dataset_years),
            )
            for dataset, dataset_years in years.items()
        ]

    async def get_variables(self, dataset: str, year: str) -> dict[str, VariableDescriptor]:
        self._logger.info(
            "Fetching variables", extra={"dataset": dataset, "year": year}
        )
        _require(dataset=dataset, year=year)
        payload = await self._http_get_json(
            f"{self._base_url}/{year}/{dataset}/variables.json"
        )
        variables = payload.get("variables") if isinstance(payload, dict) else None
        if not isinstance(variables, dict):
            raise DecodeError("ошибка при декодировании ответа: нет раздела 'variables'")

        result: dict[str, VariableDescriptor] = {}
        for code, item in variables.items():
            if not isinstance(item, dict):
                continue
            result[code] = VariableDescriptor(
                name=code,
                label=str(item.get("label") or ""),
                description=str(item.get("description") or ""),
                concept=str(item.get("concept") or ""),
                group=str(item.get("group") or ""),
            )
        return result

    async def get_geography_levels(
        self, dataset: str, year: str
    ) -> list[GeographyLevelDescriptor]:
        self._logger.info(
            "Fetching geography levels", extra={"dataset": dataset, "year": year}
        )
        _require(dataset=dataset, year=year)
        payload = await self._http_get_json(
            f"{self._base_url}/{year}/{dataset}/geography.json"
        )
        if not isinstance(payload, dict):
            raise DecodeError("ошибка при декодировании ответа: ожидался объект")

        levels = []
        for item in _geography_items(payload.get("fips")):
            required = item.get("required_for", item.get("requires"))
            wildcards = item.get("wildcards", item.get("wildcard"))
            levels.append(
                GeographyLevelDescriptor(
                    name=str(item.get("name") or ""),
                    description=str(item.get("description") or ""),
                    required_for=_string_list(required),
                    wildcards=bool(wildcards),
                )
            )
        return levels

    async def get_custom_data(self, spec: CustomQuerySpec) -> list[dict[str, str]]:
        self._logger.info(
            "Fetching custom data",
            extra={
                "dataset": spec.dataset,
                "year": spec.year,
                "geo_level": spec.geo_level,
                "variables": list(spec.variables),
            },
        )
        if not spec.variables:
            raise ValidationError("необходимо указать хотя бы одну переменную")
        if not spec.dataset:
            raise ValidationError("необходимо указать набор данных")
        if not spec.year:
            raise ValidationError("необходимо указать год")
        if not spec.geo_level:
            raise ValidationError("необходимо указать географический уровень")

        target = spec.geo_filter.get(spec.geo_level) or "*"
        params = [
            ("get", ",".join(spec.variables)),
            ("for", f"{spec.geo_level}:{target}"),
        ]
        params.extend(
            ("in", f"{level}:{value}")
            for level, value in spec.geo_filter.items()
            if level != spec.geo_level
        )
        params.append(("key", self._api_key))
        return await self._get_table(f"{self._base_url}/{spec.year}/{spec.dataset}", params)
