"""
Services - Result Normalizer

Flattens entity-typed Graph hits into uniform items, derives author and file
type aliases, computes preview URLs and thumbnails, and extracts facets.
"""

import copy
import logging
from typing import Any, Dict, List, Optional, Union

from graph_search.config import get_settings
from graph_search.preview import get_entity_type, get_strategy
from graph_search.preview.urls import by_path
from graph_search.schemas.response import (
    FilterResult,
    FilterResultValue,
    NormalizedResultSet,
    SearchAggregation,
    SearchResponse,
)
from graph_search.schemas.slots import (
    AUTHOR_ALIAS_FIELD,
    AUTO_PREVIEW_IMAGE_URL,
    AUTO_PREVIEW_URL,
    FILE_TYPE_ALIAS_FIELD,
    SlotMapping,
    TemplateSlot,
)
from graph_search.schemas.source import EntityType

logger = logging.getLogger(__name__)

ODATA_TYPE_KEY = "@odata.type"


def _text(value: Any) -> Optional[str]:
    """Stripped string, or None for blanks and non-strings."""
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class ResultNormalizer:
    """Turns a SearchResponse into a NormalizedResultSet."""

    def __init__(self, settings=None):
        self.settings = settings or get_settings()
        self._strategies = {
            entity_type: get_strategy(entity_type, self.settings)
            for entity_type in EntityType
        }

    def normalize(
        self,
        response: Union[SearchResponse, Dict[str, Any]],
        slots: Optional[SlotMapping] = None,
    ) -> NormalizedResultSet:
        """
        Normalize a full search reply.

        The response is left untouched; every hit is copied before it is
        flattened. Counts add up over every hits container of every result
        set.

        Args:
            response: Parsed reply or its raw JSON
            slots: Optional slot mapping; auto slots get computed

        Returns:
            NormalizedResultSet
        """
        if not isinstance(response, SearchResponse):
            response = SearchResponse.model_validate(response)

        items: List[Dict[str, Any]] = []
        filters: List[FilterResult] = []
        total_count = 0
        query_alteration_response = None
        result_templates = None

        for result_set in response.value:
            for container in result_set.hits_containers:
                total_count += container.total

                if container.hits:
                    items.extend(self.process_hit(hit) for hit in container.hits)

                if container.aggregations:
                    filters.extend(
                        self.map_aggregation(aggregation)
                        for aggregation in container.aggregations
                    )

            if result_set.query_alteration_response:
                query_alteration_response = result_set.query_alteration_response
            if result_set.result_templates:
                result_templates = result_set.result_templates

        result = NormalizedResultSet(
            items=items,
            filters=filters,
            total_count=total_count,
            query_alteration_response=query_alteration_response,
            result_templates=result_templates,
        )

        if slots:
            result = self.apply_previews(result, slots)

        return result

    def process_hit(self, hit: Dict[str, Any]) -> Dict[str, Any]:
        """Flatten one hit and add its aliases. Returns a new dict."""
        item = copy.deepcopy(hit)
        self.flatten_resource_properties(item)
        self.flatten_list_item_fields(item)
        self.build_author_alias(item)
        self.create_file_type_alias(item)
        return item

    def flatten_resource_properties(self, item: Dict[str, Any]) -> None:
        """
        Copy entity data to the top level.

        External items keep it under `resource.properties`, SharePoint items
        under `resource.fields`. Flat resources (people, messages, events,
        bookmarks, acronyms) are copied key by key without overwriting.
        """
        resource = item.get("resource")
        if not isinstance(resource, dict):
            return

        container = None
        if isinstance(resource.get("properties"), dict):
            container = resource["properties"]
        elif isinstance(resource.get("fields"), dict):
            container = resource["fields"]

        if container is not None:
            item.update(container)
            return

        for key, value in resource.items():
            if key != ODATA_TYPE_KEY and key not in item:
                item[key] = value

    def flatten_list_item_fields(self, item: Dict[str, Any]) -> None:
        """List item metadata of drive items wins over drive metadata."""
        fields = by_path(item, "resource.listItem.fields")
        if isinstance(fields, dict):
            item.update(fields)

    def build_author_alias(self, item: Dict[str, Any]) -> None:
        """
        Add `AuthorOWSUSER` as `email|display name|object id|principal name`.

        Messages carry their author in `from.emailAddress` rather than
        `createdBy.user`. Nothing is added if no component resolves.
        """
        resource = item.get("resource")
        if not isinstance(resource, dict):
            resource = {}

        email = _text(by_path(resource, "createdBy.user.email"))
        display_name = _text(by_path(resource, "createdBy.user.displayName"))
        object_id = _text(by_path(resource, "createdBy.user.id"))
        principal_name = _text(item.get("userPrincipalName")) or email

        if not email:
            email = (
                _text(by_path(resource, "from.emailAddress.address"))
                or _text(item.get("mail"))
            )
        if not display_name:
            display_name = _text(by_path(resource, "from.emailAddress.name"))
        if not principal_name:
            principal_name = email

        if email or display_name or object_id or principal_name:
            item[AUTHOR_ALIAS_FIELD] = "|".join([
                email or "",
                display_name or "",
                object_id or "",
                principal_name or "",
            ])

    def create_file_type_alias(self, item: Dict[str, Any]) -> None:
        if item.get("filetype"):
            item[FILE_TYPE_ALIAS_FIELD] = item["filetype"]

    def map_aggregation(self, aggregation: SearchAggregation) -> FilterResult:
        """Buckets map 1:1 and keep the service's order."""
        return FilterResult(
            filter_name=aggregation.field,
            values=[
                FilterResultValue(
                    name=bucket.key,
                    value=bucket.aggregation_filter_token,
                    count=bucket.count,
                )
                for bucket in aggregation.buckets
            ],
        )

    def apply_previews(
        self,
        result: NormalizedResultSet,
        slots: SlotMapping,
    ) -> NormalizedResultSet:
        """
        Compute preview and thumbnail URLs for slots mapped to the auto fields.

        A slot mapped to any other field belongs to the caller and is left
        alone.
        """
        compute_url = slots.get(TemplateSlot.PREVIEW_URL) == AUTO_PREVIEW_URL
        compute_image = slots.get(TemplateSlot.PREVIEW_IMAGE_URL) == AUTO_PREVIEW_IMAGE_URL
        if not (compute_url or compute_image):
            return result

        items = [
            self.enrich_item(item, slots, compute_url, compute_image)
            for item in result.items
        ]
        return result.model_copy(update={"items": items})

    def enrich_item(
        self,
        item: Dict[str, Any],
        slots: SlotMapping,
        compute_url: bool = True,
        compute_image: bool = True,
    ) -> Dict[str, Any]:
        enriched = dict(item)
        strategy = self._strategies.get(get_entity_type(item))
        if strategy is None:
            return enriched

        if compute_url:
            preview_url = strategy.preview_url(enriched, slots)
            if preview_url:
                enriched[AUTO_PREVIEW_URL] = preview_url

        if compute_image:
            image_url = strategy.preview_image_url(enriched, slots)
            if image_url:
                enriched[AUTO_PREVIEW_IMAGE_URL] = image_url

        return enriched
