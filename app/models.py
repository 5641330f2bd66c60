"""Pydantic models describing scan results and library views."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .services.aggregator import SeriesResult


class ScanSummary(BaseModel):
    """Totals gathered over one scan run."""

    model_config = ConfigDict(populate_by_name=True)

    series_count: int = Field(default=0, alias="seriesCount")
    season_count: int = Field(default=0, alias="seasonCount")
    episode_count: int = Field(default=0, alias="episodeCount")

    def record(self, result: SeriesResult) -> None:
        self.series_count += 1
        self.season_count += result.season_count
        self.episode_count += result.episode_count

    def message(self) -> str:
        return (
            f"Scan complete. Processed {self.series_count} series, "
            f"{self.season_count} seasons, and {self.episode_count} episodes."
        )

    def to_payload(self) -> dict[str, object]:
        return {"message": self.message(), **self.model_dump(by_alias=True)}


class UserView(BaseModel):
    """A top-level collection visible to a user."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    collection_type: str | None = Field(default=None, alias="collectionType")
    dubbed_status: int | None = Field(default=None, alias="dubbedStatus")
    subbed_status: int | None = Field(default=None, alias="subbedStatus")


class GroupingOption(BaseModel):
    """A collection that can be used to group a user's home views."""

    name: str
    id: str
