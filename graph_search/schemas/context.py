"""
Schemas - Search Context

Per-invocation search intent: query text, paging, filters and sort selection.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from graph_search.schemas.source import SortFieldDirection


DATE_INTERVAL_TEMPLATE = "DateIntervalFilterTemplate"


class FilterSortType(str, Enum):
    BY_COUNT = "byCount"
    BY_NAME = "byName"


class FilterSortDirection(str, Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"


class FilterOperator(str, Enum):
    """Boolean operator joining filter conditions."""
    AND = "and"
    OR = "or"


class FilterConfiguration(BaseModel):
    """One configured facet."""
    filter_name: str
    sort_by: FilterSortType = FilterSortType.BY_COUNT
    sort_direction: FilterSortDirection = FilterSortDirection.DESCENDING
    max_buckets: Optional[int] = Field(default=None, ge=1)
    selected_template: Optional[str] = None


class FilterValue(BaseModel):
    """A selected facet value."""
    name: str = ""
    value: str


class DataFilter(BaseModel):
    """Selected values for one facet dimension."""
    filter_name: str
    values: List[FilterValue] = []
    operator: FilterOperator = FilterOperator.OR


class FiltersContext(BaseModel):
    """Facet configuration and current selections."""
    filters_configuration: List[FilterConfiguration] = []
    selected_filters: List[DataFilter] = []
    filter_operator: FilterOperator = FilterOperator.AND


class SortingContext(BaseModel):
    """Explicit user sort selection."""
    selected_sort_field_name: Optional[str] = None
    selected_sort_direction: Optional[SortFieldDirection] = None


class SearchContext(BaseModel):
    """One search invocation's input."""
    input_query_text: Optional[str] = None
    page_number: int = Field(default=1, ge=1)
    items_count_per_page: int = Field(default=10, gt=0)
    filters: FiltersContext = Field(default_factory=FiltersContext)
    sorting: Optional[SortingContext] = None
