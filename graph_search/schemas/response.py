"""
Schemas - Search Response

Wire models for the Graph search reply and the normalized result set.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class AggregationBucket(BaseModel):
    key: str
    count: int = 0
    aggregation_filter_token: Optional[str] = Field(default=None, alias="aggregationFilterToken")

    model_config = {"populate_by_name": True}


class SearchAggregation(BaseModel):
    field: str
    buckets: List[AggregationBucket] = []


class HitsContainer(BaseModel):
    """Hits stay raw mappings: their shape depends on the entity type."""
    hits: Optional[List[Dict[str, Any]]] = None
    total: int = 0
    more_results_available: bool = Field(default=False, alias="moreResultsAvailable")
    aggregations: Optional[List[SearchAggregation]] = None

    model_config = {"populate_by_name": True}


class SearchResultSet(BaseModel):
    search_terms: List[str] = Field(default=[], alias="searchTerms")
    hits_containers: List[HitsContainer] = Field(default=[], alias="hitsContainers")
    query_alteration_response: Optional[Dict[str, Any]] = Field(
        default=None, alias="queryAlterationResponse"
    )
    result_templates: Optional[Dict[str, Any]] = Field(default=None, alias="resultTemplates")

    model_config = {"populate_by_name": True}


class SearchResponse(BaseModel):
    """Full Graph reply to a `/search/query` POST."""
    value: List[SearchResultSet] = []


class FilterComparisonOperator(str, Enum):
    CONTAINS = "contains"


class FilterResultValue(BaseModel):
    """One facet bucket: display name, opaque filter token and count."""
    name: str
    value: Optional[str] = None
    count: int = 0
    operator: FilterComparisonOperator = FilterComparisonOperator.CONTAINS


class FilterResult(BaseModel):
    """Facet buckets for one field, in the order the service returned them."""
    filter_name: str
    values: List[FilterResultValue] = []


class NormalizedResultSet(BaseModel):
    """Flattened items, facets and total count for one search."""
    items: List[Dict[str, Any]] = []
    filters: List[FilterResult] = []
    total_count: int = 0
    query_alteration_response: Optional[Dict[str, Any]] = None
    result_templates: Optional[Dict[str, Any]] = None
