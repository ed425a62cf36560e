"""Aggregation query DTOs."""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from biodem_charts.domain.entities import BrushSelection, StatisticSpec
from biodem_charts.domain.enums import Statistic


class YearRange(BaseModel):
    """Inclusive year range."""

    model_config = ConfigDict(frozen=True)

    start: int
    end: int

    @model_validator(mode="after")
    def _ordered(self) -> "YearRange":
        if self.start > self.end:
            raise ValueError(f"start {self.start} is after end {self.end}")
        return self

    def to_selection(self) -> BrushSelection:
        return BrushSelection(self.start, self.end)


class AggregationQuery(BaseModel):
    """Parameters for one aggregation pass of the bubble chart."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    key: str = "country"
    x: str = Field(alias="xVariable")
    y: str = Field(alias="yVariable")
    magnitude: str = "records"
    color: str = "v2x_regime"
    statistics: dict[str, Statistic] = Field(default_factory=dict)
    year_range: YearRange = Field(alias="yearRange")
    # 0 disables the region filter
    region: int = Field(0, ge=0)
    x_log: bool = Field(False, alias="xLog")
    y_log: bool = Field(False, alias="yLog")

    def resolved_statistics(self) -> dict[str, StatisticSpec]:
        """Medians for indicators and a sum of records, with overrides applied.

        The record sum skips missing years; indicator medians do not.
        """
        specs = {
            self.x: StatisticSpec(self.x, Statistic.MEDIAN),
            self.y: StatisticSpec(self.y, Statistic.MEDIAN),
            self.color: StatisticSpec(self.color, Statistic.MEDIAN),
            self.magnitude: StatisticSpec(self.magnitude, Statistic.SUM, skip_missing=True),
        }
        for name, statistic in self.statistics.items():
            specs[name] = StatisticSpec(name, statistic, skip_missing=name == self.magnitude)
        return specs
