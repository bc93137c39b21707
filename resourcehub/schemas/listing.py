from typing import Literal

from pydantic import BaseModel, Field

FrameworkFacet = Literal["ESX", "QBCore", "Standalone", "all"]
CategoryFacet = Literal["Police", "Civilian", "UI", "Jobs", "Vehicles", "all"]
ResourceTypeFacet = Literal["escrow", "direct", "all"]
RecencyFacet = Literal["week", "month", "3months", "older", "all"]
PopularityFacet = Literal["high", "medium", "new", "all"]
SortOption = Literal["newest", "oldest", "price-asc", "price-desc", "popular", "alphabetical"]


class ListingFilters(BaseModel):
    framework: FrameworkFacet = "all"
    category: CategoryFacet = "all"
    resource_type: ResourceTypeFacet = "all"
    price_ceiling: float | None = Field(default=None, ge=0)
    free_only: bool = False
    recency: RecencyFacet = "all"
    popularity: PopularityFacet = "all"
    sort: SortOption = "newest"
