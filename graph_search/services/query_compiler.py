"""
Services - Query Compiler

Turns a search context into a Microsoft Graph search request, applying the
entity-type rules for paging, projection, sorting and hidden content.
"""

import calendar
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Tuple

from graph_search.schemas.context import (
    DATE_INTERVAL_TEMPLATE,
    FilterSortDirection,
    FilterSortType,
    SearchContext,
)
from graph_search.schemas.request import (
    BucketDefinition,
    CollapseProperty,
    DateRange,
    QueryAlterationOptionsPayload,
    ResultTemplateOptions,
    SearchAggregationSortBy,
    SearchQuery,
    SearchQueryString,
    SearchRequest,
    SearchRequestAggregation,
    SearchSortProperty,
    SharePointOneDriveOptions,
)
from graph_search.schemas.source import (
    LOOKUP_ENTITY_TYPES,
    SORTABLE_ENTITY_TYPES,
    EntityType,
    SortFieldDirection,
    SourceConfig,
)
from graph_search.services.refinement import build_refinement_strings
from graph_search.services.token_service import BaseTokenResolver

logger = logging.getLogger(__name__)

MATCH_ALL_QUERY = "*"
DEFAULT_MAX_BUCKETS = 10
ARCHIVED_ONLY_CLAUSE = " AND isarchived:true"
EXCLUDE_ARCHIVED_CLAUSE = " AND NOT isarchived:true"
BOUNDARY_BACKOFF = timedelta(minutes=1)


def _subtract_months(moment: datetime, months: int) -> datetime:
    """Calendar month arithmetic, clamping to the last day of the target month."""
    month_index = moment.month - 1 - months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def _to_iso(moment: datetime) -> str:
    """
    UTC ISO-8601 with millisecond precision, e.g. 2024-05-01T10:00:00.000Z.

    Naive datetimes are taken to be UTC already.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    utc = moment.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


class QueryCompiler:
    """Compiles `SourceConfig x SearchContext` into a `SearchRequest`."""

    def __init__(
        self,
        config: SourceConfig,
        token_resolver: BaseTokenResolver,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.config = config
        self.token_resolver = token_resolver
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    async def compile(self, context: SearchContext) -> SearchRequest:
        """
        Build the request for one search invocation.

        The caller must not compile for a configuration without entity types.

        Args:
            context: Query text, paging, filters and sort selection

        Returns:
            Immutable SearchRequest

        Raises:
            Whatever the token resolver raises, unmodified
        """
        query_text = await self.resolve_query_text(context)
        query_string, query_template = await self.resolve_query_template(context, query_text)
        include_hidden, query_template = self.determine_hidden_content_settings(query_template)

        request = self.build_search_request(
            query_string=query_string,
            query_template=query_template,
            offset=self.calculate_paging_offset(context),
            size=context.items_count_per_page,
            aggregations=self.build_aggregations(context),
            aggregation_filters=self.build_aggregation_filters(context),
            sort_properties=self.build_sort_properties(context),
            content_sources=self.build_content_sources(),
            include_hidden_content=include_hidden,
        )
        logger.debug(f"Compiled search request: {request.to_payload()}")
        return request

    async def compile_query(self, context: SearchContext) -> SearchQuery:
        """Compile and wrap in the `{"requests": [...]}` envelope."""
        return SearchQuery(requests=[await self.compile(context)])

    async def resolve_query_text(self, context: SearchContext) -> str:
        """Resolve tokens in the free text, or match everything."""
        if context.input_query_text:
            return await self.token_resolver.resolve_tokens(context.input_query_text)
        return MATCH_ALL_QUERY

    async def resolve_query_template(
        self,
        context: SearchContext,
        query_text: str,
    ) -> Tuple[str, str]:
        """
        Resolve the query template.

        Bookmarks and acronyms are looked up in curated lists: with no free
        text, a non-empty template becomes the query string itself and the
        template is cleared.

        Returns:
            (query_string, query_template)
        """
        template = await self.token_resolver.resolve_tokens(self.config.query_template)

        if (
            self.config.has_entity_type(*LOOKUP_ENTITY_TYPES)
            and not context.input_query_text
            and template
            and template.strip()
        ):
            return template, ""

        return query_text, template

    def calculate_paging_offset(self, context: SearchContext) -> int:
        if context.page_number > 1:
            return (context.page_number - 1) * context.items_count_per_page
        return 0

    def build_aggregations(self, context: SearchContext) -> List[SearchRequestAggregation]:
        """One aggregation per configured facet."""
        aggregations = []

        for filter_config in context.filters.filters_configuration:
            ranges = None
            if filter_config.selected_template == DATE_INTERVAL_TEMPLATE:
                ranges = self.build_date_ranges()

            sort_by = (
                SearchAggregationSortBy.COUNT
                if filter_config.sort_by == FilterSortType.BY_COUNT
                else SearchAggregationSortBy.KEY_AS_STRING
            )

            aggregations.append(SearchRequestAggregation(
                field=filter_config.filter_name,
                size=filter_config.max_buckets or DEFAULT_MAX_BUCKETS,
                bucket_definition=BucketDefinition(
                    sort_by=sort_by,
                    is_descending=filter_config.sort_direction != FilterSortDirection.ASCENDING,
                    minimum_count=1,
                    ranges=ranges,
                ),
            ))

        return aggregations

    def build_date_ranges(self) -> List[DateRange]:
        """
        Seven contiguous buckets anchored on now: older than a year, 1 year to
        3 months, 3 months to 1 month, 1 month to 1 week, 1 week to 24 hours,
        last 24 hours, and future. Each past anchor is backed off by a minute.
        """
        now = self.clock()
        past_year = _to_iso(_subtract_months(now, 12) - BOUNDARY_BACKOFF)
        past_3_months = _to_iso(_subtract_months(now, 3) - BOUNDARY_BACKOFF)
        past_month = _to_iso(_subtract_months(now, 1) - BOUNDARY_BACKOFF)
        past_week = _to_iso(now - timedelta(weeks=1) - BOUNDARY_BACKOFF)
        past_24_hours = _to_iso(now - timedelta(hours=24) - BOUNDARY_BACKOFF)
        today = _to_iso(now)

        return [
            DateRange(to=past_year),
            DateRange(from_=past_year, to=past_3_months),
            DateRange(from_=past_3_months, to=past_month),
            DateRange(from_=past_month, to=past_week),
            DateRange(from_=past_week, to=past_24_hours),
            DateRange(from_=past_24_hours, to=today),
            DateRange(from_=today),
        ]

    def build_aggregation_filters(self, context: SearchContext) -> List[str]:
        """
        Selected facet values as refinement expressions.

        With more than one active dimension, the expressions are combined
        under the context's filter operator, e.g. `and(a,b)`.
        """
        selected = context.filters.selected_filters
        if not selected:
            return []

        active = [f for f in selected if f.values]
        if len(selected) > 1 and len(active) > 1:
            refinement = ",".join(build_refinement_strings(selected))
            if refinement:
                return [f"{context.filters.filter_operator.value}({refinement})"]
            return []

        return build_refinement_strings(selected)

    def build_content_sources(self) -> List[str]:
        if not self.config.has_entity_type(EntityType.EXTERNAL_ITEM):
            return []
        return [
            f"/external/connections/{connection_id}"
            for connection_id in self.config.content_source_connection_ids
        ]

    def build_sort_properties(self, context: SearchContext) -> List[SearchSortProperty]:
        """
        The explicit user sort wins; otherwise every default sort spec in
        declared order. Only list items and external items support sorting.
        """
        if not self.config.has_entity_type(*SORTABLE_ENTITY_TYPES):
            return []

        sorting = context.sorting
        if sorting and sorting.selected_sort_field_name and sorting.selected_sort_direction:
            return [SearchSortProperty(
                name=sorting.selected_sort_field_name,
                is_descending=sorting.selected_sort_direction == SortFieldDirection.DESCENDING,
            )]

        return [
            SearchSortProperty(
                name=spec.sort_field,
                is_descending=spec.sort_direction == SortFieldDirection.DESCENDING,
            )
            for spec in self.config.sort_properties
            if spec.is_default_sort
        ]

    def determine_hidden_content_settings(self, query_template: str) -> Tuple[bool, str]:
        """
        Hidden content visibility from the archived/embedded toggles.

        Returns:
            (include_hidden_content, query_template)
        """
        archived = self.config.show_ms_archived_content
        embedded = self.config.show_sp_embedded_content

        if archived and embedded:
            return True, query_template
        if archived:
            return True, query_template + ARCHIVED_ONLY_CLAUSE
        if embedded:
            return True, query_template + EXCLUDE_ARCHIVED_CLAUSE
        return False, query_template

    def build_search_request(
        self,
        query_string: str,
        query_template: str,
        offset: int,
        size: int,
        aggregations: List[SearchRequestAggregation],
        aggregation_filters: List[str],
        sort_properties: List[SearchSortProperty],
        content_sources: List[str],
        include_hidden_content: bool,
    ) -> SearchRequest:
        """Assemble the payload, gating each member on the entity types."""
        config = self.config
        request = {
            "entity_types": [et.value for et in config.entity_types],
            "query": SearchQueryString(
                query_string=query_string,
                query_template=query_template,
            ),
            "size": size,
            "share_point_one_drive_options": SharePointOneDriveOptions(
                include_hidden_content=include_hidden_content,
            ),
            "query_alteration_options": QueryAlterationOptionsPayload(
                enable_modification=config.query_alteration_options.enable_modification,
                enable_suggestion=config.query_alteration_options.enable_suggestion,
            ),
        }

        # Paging is not supported for bookmark + acronym lookups
        if set(config.entity_types) != LOOKUP_ENTITY_TYPES:
            request["from_"] = offset

        fields = [f for f in config.fields if f]
        if fields and not config.has_entity_type(*LOOKUP_ENTITY_TYPES):
            request["fields"] = fields

        if aggregations:
            request["aggregations"] = aggregations
        if aggregation_filters:
            request["aggregation_filters"] = aggregation_filters
        if sort_properties:
            request["sort_properties"] = sort_properties
        if content_sources:
            request["content_sources"] = content_sources

        if config.enable_top_results and config.has_entity_type(
            EntityType.MESSAGE, EntityType.TEAMS_MESSAGE
        ):
            request["enable_top_results"] = True

        if config.use_beta_endpoint:
            if config.trim_duplicates:
                request["trim_duplicates"] = True
            if config.collapse_properties:
                request["collapse_properties"] = [
                    CollapseProperty(fields=list(spec.fields), limit=spec.limit)
                    for spec in config.collapse_properties
                ]

        if config.enable_result_types:
            request["result_template_options"] = ResultTemplateOptions(
                enable_result_template=True,
            )

        return SearchRequest(**request)
