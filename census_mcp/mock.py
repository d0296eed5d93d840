"""In-memory stand-in for :class:`census_mcp.client.CensusClient`.

Used in test mode and by the demonstration script. Lookups that miss fall back
to the first table entry so every call returns something to show.
"""

from .client import matches_name
from .models import (
    CustomQuerySpec,
    DatasetDescriptor,
    GeographyLevelDescriptor,
    PopulationRecord,
    VariableDescriptor,
)

MOCK_STATES = (
    PopulationRecord("Alabama", "5024279", "01"),
    PopulationRecord("Alaska", "733391", "02"),
    PopulationRecord("Arizona", "7151502", "04"),
    PopulationRecord("California", "39538223", "06"),
    PopulationRecord("New York", "20201249", "36"),
    PopulationRecord("Texas", "29145505", "48"),
)

MOCK_COUNTIES = (
    PopulationRecord("Los Angeles County", "10014009", "06", "037"),
    PopulationRecord("San Diego County", "3298634", "06", "073"),
    PopulationRecord("Orange County", "3186989", "06", "059"),
    PopulationRecord("King County", "2252782", "53", "033"),
    PopulationRecord("Harris County", "4713325", "48", "201"),
)

MOCK_DATASETS = (
    DatasetDescriptor(
        title="American Community Survey 1-Year Estimates",
        description="Annual survey covering demographic, social, economic, and housing data",
        dataset="acs/acs1",
        years_available=("2019", "2020", "2021"),
    ),
    DatasetDescriptor(
        title="Decennial Census",
        description="Complete count of the US population conducted every 10 years",
        dataset="dec/sf1",
        years_available=("2000", "2010", "2020"),
    ),
    DatasetDescriptor(
        title="Population Estimates Program",
        description="Annual population estimates between decennial censuses",
        dataset="pep/population",
        years_available=("2018", "2019", "2020", "2021"),
    ),
)

MOCK_VARIABLES = (
    VariableDescriptor(
        name="B01001_001E",
        label="Total Population",
        description="Total population count",
        concept="SEX BY AGE",
        group="B01001",
    ),
    VariableDescriptor(
        name="B01002_001E",
        label="Median Age",
        description="Median age of total population",
        concept="MEDIAN AGE BY SEX",
        group="B01002",
    ),
    VariableDescriptor(
        name="B02001_001E",
        label="Total Race Population",
        description="Total population count for race estimates",
        concept="RACE",
        group="B02001",
    ),
    VariableDescriptor(
        name="B19013_001E",
        label="Median Household Income",
        description="Median household income in the past 12 months (in inflation-adjusted dollars)",
        concept="MEDIAN HOUSEHOLD INCOME IN THE PAST 12 MONTHS",
        group="B19013",
    ),
)

MOCK_GEOGRAPHY_LEVELS = (
    GeographyLevelDescriptor("state", "States and Equivalents", ("county", "tract", "block"), True),
    GeographyLevelDescriptor("county", "Counties and Equivalents", ("tract", "block"), True),
    GeographyLevelDescriptor("tract", "Census Tracts", ("block",), True),
    GeographyLevelDescriptor("block", "Census Blocks", (), True),
    GeographyLevelDescriptor("us", "United States", (), False),
)

MOCK_CUSTOM_ROWS = (
    {"NAME": "California", "B01001_001E": "39538223", "B19013_001E": "78672", "state": "06"},
    {"NAME": "New York", "B01001_001E": "20201249", "B19013_001E": "71117", "state": "36"},
    {"NAME": "Texas", "B01001_001E": "29145505", "B19013_001E": "63826", "state": "48"},
)


class MockCensusClient:
    async def get_state_population(self, state_id: str = "") -> list[PopulationRecord]:
        if not state_id:
            return list(MOCK_STATES)
        for state in MOCK_STATES:
            if state.state == state_id:
                return [state]
        return [MOCK_STATES[0]]

    async def get_county_population(self, state_id: str = "") -> list[PopulationRecord]:
        if not state_id:
            return list(MOCK_COUNTIES)
        counties = [county for county in MOCK_COUNTIES if county.state == state_id]
        return counties or [MOCK_COUNTIES[0]]

    async def search_state_by_name(self, name: str) -> list[PopulationRecord]:
        return [state for state in MOCK_STATES if matches_name(state.name, name)]

    async def get_available_datasets(self) -> list[DatasetDescriptor]:
        return list(MOCK_DATASETS)

    async def get_variables(self, dataset: str, year: str) -> dict[str, VariableDescriptor]:
        return {variable.name: variable for variable in MOCK_VARIABLES}

    async def get_geography_levels(
        self, dataset: str, year: str
    ) -> list[GeographyLevelDescriptor]:
        return list(MOCK_GEOGRAPHY_LEVELS)

    async def get_custom_data(self, spec: CustomQuerySpec) -> list[dict[str, str]]:
        rows = [dict(row) for row in MOCK_CUSTOM_ROWS]
        if not spec.variables:
            return rows
        wanted = {"NAME", spec.geo_level, *spec.variables}
        return [{key: value for key, value in row.items() if key in wanted} for row in rows]
