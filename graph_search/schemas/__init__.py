"""
Schemas Module - Pydantic Models

Data models for connector configuration, search context and the Graph wire format.
"""

from graph_search.schemas.source import (
    EntityType,
    SortFieldDirection,
    SortFieldSpec,
    CollapseSpec,
    QueryAlterationOptions,
    SourceConfig,
)
from graph_search.schemas.context import (
    FilterSortType,
    FilterSortDirection,
    FilterOperator,
    FilterConfiguration,
    FilterValue,
    DataFilter,
    FiltersContext,
    SortingContext,
    SearchContext,
)
from graph_search.schemas.request import SearchRequest, SearchQuery
from graph_search.schemas.response import (
    SearchResponse,
    FilterResult,
    FilterResultValue,
    NormalizedResultSet,
)

__all__ = [
    "EntityType",
    "SortFieldDirection",
    "SortFieldSpec",
    "CollapseSpec",
    "QueryAlterationOptions",
    "SourceConfig",
    "FilterSortType",
    "FilterSortDirection",
    "FilterOperator",
    "FilterConfiguration",
    "FilterValue",
    "DataFilter",
    "FiltersContext",
    "SortingContext",
    "SearchContext",
    "SearchRequest",
    "SearchQuery",
    "SearchResponse",
    "FilterResult",
    "FilterResultValue",
    "NormalizedResultSet",
]
