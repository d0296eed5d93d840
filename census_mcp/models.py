from dataclasses import dataclass, field


@dataclass(frozen=True)
class PopulationRecord:
    name: str
    population: str
    state: str | None = None
    county: str | None = None

    def __post_init__(self) -> None:
        # Counties are always nested under a state.
        if self.county and not self.state:
            raise ValueError(f"County '{self.county}' has no state code")


@dataclass(frozen=True)
class DatasetDescriptor:
    title: str
    description: str
    dataset: str
    years_available: tuple[str, ...] = ()


@dataclass(frozen=True)
class VariableDescriptor:
    name: str
    label: str
    description: str = ""
    concept: str = ""
    group: str = ""


@dataclass(frozen=True)
class GeographyLevelDescriptor:
    name: str
    description: str
    required_for: tuple[str, ...] = ()
    wildcards: bool = False


@dataclass(frozen=True)
class CustomQuerySpec:
    """A tabular query against ``/data/<year>/<dataset>``.

    ``geo_filter`` maps geography level names to an id or ``*``. The entry for
    ``geo_level`` selects the rows, every other entry is sent as an ancestor
    constraint (``in=<level>:<value>``).
    """

    variables: tuple[str, ...]
    dataset: str
    year: str
    geo_level: str
    geo_filter: dict[str, str] = field(default_factory=dict)
