import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence

from .models import (
    DatasetDescriptor,
    GeographyLevelDescriptor,
    PopulationRecord,
    VariableDescriptor,
)

MISSING_CELL = "N/A"


@dataclass(frozen=True)
class PopulationList:
    records: Sequence[PopulationRecord]


@dataclass(frozen=True)
class DatasetList:
    datasets: Sequence[DatasetDescriptor]


@dataclass(frozen=True)
class VariableMap:
    variables: Mapping[str, VariableDescriptor]


@dataclass(frozen=True)
class GeographyLevelList:
    levels: Sequence[GeographyLevelDescriptor]


@dataclass(frozen=True)
class CustomRowList:
    rows: Sequence[Mapping[str, str]]


FormattableResult = PopulationList | DatasetList | VariableMap | GeographyLevelList | CustomRowList


def _region_label(record: PopulationRecord) -> str:
    if record.county:
        return f"{record.name} (county {record.county}, state {record.state})"
    return f"{record.name} (state {record.state})"


class TextFormatter:
    """Renders client results as markdown text. Never raises."""

    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or logging.getLogger(__name__)
        self._renderers: dict[type, Callable[[Any], str]] = {
            PopulationList: self._format_population,
            DatasetList: self._format_datasets,
            VariableMap: self._format_variables,
            GeographyLevelList: self._format_geography_levels,
            CustomRowList: self._format_custom_rows,
        }

    def format(self, result: FormattableResult | Any) -> str:
        if result is None:
            self._logger.warning("Formatting called without data")
            return "No data"
        render = self._renderers.get(type(result))
        if render is None:
            self._logger.warning(
                "Unknown result type for formatting",
                extra={"type": type(result).__name__},
            )
            return str(result)
        try:
            return render(result)
        except Exception:
            self._logger.exception(
                "Failed to format result", extra={"type": type(result).__name__}
            )
            return str(result)

    def _format_population(self, result: PopulationList) -> str:
        if not result.records:
            return "No population data"
        lines = ["| Region | Population |", "|--------|------------|"]
        lines.extend(
            f"| {_region_label(record)} | {record.population} |" for record in result.records
        )
        return "\n".join(lines) + "\n"

    def _format_datasets(self, result: DatasetList) -> str:
        if not result.datasets:
            return "No dataset information"
        parts = ["# Available datasets\n"]
        for item in result.datasets:
            years = ", ".join(item.years_available) or "No information"
            parts.append(
                f"## {item.title}\n"
                f"- **Dataset ID**: {item.dataset}\n"
                f"- **Description**: {item.description}\n"
                f"- **Available years**: {years}\n"
            )
        return "\n".join(parts)

    def _format_variables(self, result: VariableMap) -> str:
        if not result.variables:
            return "No variable information"
        parts = ["# Available variables\n"]
        for code in sorted(result.variables):
            item = result.variables[code]
            section = [f"## {code}: {item.label}"]
            if item.description:
                section.append(f"- **Description**: {item.description}")
            if item.concept:
                section.append(f"- **Concept**: {item.concept}")
            if item.group:
                section.append(f"- **Group**: {item.group}")
            parts.append("\n".join(section) + "\n")
        return "\n".join(parts)

    def _format_geography_levels(self, result: GeographyLevelList) -> str:
        if not result.levels:
            return "No geography level information"
        parts = ["# Available geography levels\n"]
        for item in result.levels:
            section = [f"## {item.name}", f"- **Description**: {item.description}"]
            if item.required_for:
                section.append(f"- **Required for**: {', '.join(item.required_for)}")
            section.append(f"- **Supports wildcards**: {str(item.wildcards).lower()}")
            parts.append("\n".join(section) + "\n")
        return "\n".join(parts)

    def _format_custom_rows(self, result: CustomRowList) -> str:
        if not result.rows:
            return "No data"
        headers = sorted({str(key) for row in result.rows for key in row})
        lines = [
            "| " + " | ".join(headers) + " |",
            "| " + " | ".join("---" for _ in headers) + " |",
        ]
        for row in result.rows:
            cells = [str(row.get(header, MISSING_CELL)) for header in headers]
            lines.append("| " + " | ".join(cells) + " |")
        self._logger.debug(
            "Formatted custom rows",
            extra={"item_count": len(result.rows), "columns": len(headers)},
        )
        return "\n".join(lines) + "\n"
