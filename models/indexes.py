"""Index definitions sent to the document database."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class IndexDefinition(BaseModel):
    """Wire shape of a map-reduce index definition."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., alias="Name", min_length=1)
    maps: List[str] = Field(..., alias="Maps", min_length=1)
    reduce: Optional[str] = Field(default=None, alias="Reduce")
    output_reduce_to_collection: Optional[str] = Field(
        default=None, alias="OutputReduceToCollection"
    )


def daily_report_index(
    name: str, collection: str, output_collection: str
) -> IndexDefinition:
    """Build the index that averages measurements of ``collection`` per day."""
    map_source = (
        f"from measurement in docs.{collection} select new {{ "
        "Day = measurement.Time, "
        "Temperature = measurement.Temperature, "
        "Salinity = measurement.Salinity }"
    )
    reduce_source = (
        "from result in results group result by result.Day into g select new { "
        "Day = g.Key, "
        "Temperature = g.Average(x => x.Temperature), "
        "Salinity = g.Average(x => x.Salinity) }"
    )
    return IndexDefinition(
        name=name,
        maps=[map_source],
        reduce=reduce_source,
        output_reduce_to_collection=output_collection,
    )
