"""
Schemas - Search Request

Wire models for the Microsoft Graph `/search/query` request body.
Python names are snake_case; the payload uses the Graph camelCase names.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class SearchAggregationSortBy(str, Enum):
    COUNT = "count"
    KEY_AS_STRING = "keyAsString"


class _WireModel(BaseModel):
    model_config = {"frozen": True, "populate_by_name": True}


class DateRange(_WireModel):
    """Half-open bucket range; a missing bound is unbounded."""
    from_: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None


class BucketDefinition(_WireModel):
    sort_by: SearchAggregationSortBy = Field(alias="sortBy")
    is_descending: bool = Field(alias="isDescending")
    minimum_count: int = Field(default=1, alias="minimumCount")
    ranges: Optional[List[DateRange]] = None


class SearchRequestAggregation(_WireModel):
    field: str
    size: int = 10
    bucket_definition: BucketDefinition = Field(alias="bucketDefinition")


class SearchSortProperty(_WireModel):
    name: str
    is_descending: bool = Field(alias="isDescending")


class SearchQueryString(_WireModel):
    query_string: str = Field(alias="queryString")
    query_template: Optional[str] = Field(default=None, alias="queryTemplate")


class SharePointOneDriveOptions(_WireModel):
    include_hidden_content: bool = Field(default=False, alias="includeHiddenContent")


class CollapseProperty(_WireModel):
    fields: List[str]
    limit: int


class QueryAlterationOptionsPayload(_WireModel):
    enable_modification: bool = Field(default=False, alias="enableModification")
    enable_suggestion: bool = Field(default=False, alias="enableSuggestion")


class ResultTemplateOptions(_WireModel):
    enable_result_template: bool = Field(default=True, alias="enableResultTemplate")


class SearchRequest(_WireModel):
    """One compiled search request. Unset members are left out of the payload."""
    entity_types: List[str] = Field(alias="entityTypes")
    query: SearchQueryString
    size: int
    from_: Optional[int] = Field(default=None, alias="from")
    fields: Optional[List[str]] = None
    aggregations: Optional[List[SearchRequestAggregation]] = None
    aggregation_filters: Optional[List[str]] = Field(default=None, alias="aggregationFilters")
    sort_properties: Optional[List[SearchSortProperty]] = Field(default=None, alias="sortProperties")
    content_sources: Optional[List[str]] = Field(default=None, alias="contentSources")
    share_point_one_drive_options: SharePointOneDriveOptions = Field(
        default_factory=SharePointOneDriveOptions, alias="sharePointOneDriveOptions"
    )
    enable_top_results: Optional[bool] = Field(default=None, alias="enableTopResults")
    trim_duplicates: Optional[bool] = Field(default=None, alias="trimDuplicates")
    collapse_properties: Optional[List[CollapseProperty]] = Field(
        default=None, alias="collapseProperties"
    )
    query_alteration_options: Optional[QueryAlterationOptionsPayload] = Field(
        default=None, alias="queryAlterationOptions"
    )
    result_template_options: Optional[ResultTemplateOptions] = Field(
        default=None, alias="resultTemplateOptions"
    )

    def to_payload(self) -> Dict[str, Any]:
        """Serialize to the Graph JSON shape."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class SearchQuery(_WireModel):
    """Request body envelope: Graph accepts a list of requests."""
    requests: List[SearchRequest]

    def to_payload(self) -> Dict[str, Any]:
        return {"requests": [request.to_payload() for request in self.requests]}
