"""
Services - Microsoft Search Service

Data source facade: compiles the request, runs the single round trip to the
Graph search endpoint and normalizes the reply.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from graph_search.config import get_settings
from graph_search.schemas.context import SearchContext
from graph_search.schemas.response import NormalizedResultSet
from graph_search.schemas.slots import (
    AUTHOR_ALIAS_FIELD,
    AUTO_PREVIEW_IMAGE_URL,
    AUTO_PREVIEW_URL,
    FILE_TYPE_ALIAS_FIELD,
    SlotMapping,
    TemplateSlot,
)
from graph_search.schemas.source import SHAREPOINT_ENTITY_TYPES, EntityType, SourceConfig
from graph_search.services.graph_client import GraphSearchClient
from graph_search.services.query_compiler import QueryCompiler
from graph_search.services.result_normalizer import ResultNormalizer
from graph_search.services.token_service import BaseTokenResolver

logger = logging.getLogger(__name__)

SDK_VERSION_PREFIX = "pnpmodernsearch/"

PERSON_SLOTS = {
    TemplateSlot.TITLE: "displayName",
    TemplateSlot.SUMMARY: "jobTitle",
    TemplateSlot.PREVIEW_URL: AUTO_PREVIEW_URL,
    TemplateSlot.ID: "id",
    "Department": "department",
    "Office": "officeLocation",
    "Email": "userPrincipalName",
    "Phone": "phones",
}

BOOKMARK_SLOTS = {
    TemplateSlot.TITLE: "displayName",
    TemplateSlot.SUMMARY: "description",
    TemplateSlot.PREVIEW_URL: AUTO_PREVIEW_URL,
    TemplateSlot.ID: "id",
    "Categories": "categories",
}

ACRONYM_SLOTS = {
    TemplateSlot.TITLE: "displayName",
    TemplateSlot.SUMMARY: "description",
    TemplateSlot.PREVIEW_URL: AUTO_PREVIEW_URL,
}

SHAREPOINT_SLOTS = {
    TemplateSlot.TITLE: "title",
    TemplateSlot.PATH: "resource.webUrl",
    TemplateSlot.SUMMARY: "summary",
    TemplateSlot.FILE_TYPE: FILE_TYPE_ALIAS_FIELD,
    TemplateSlot.PREVIEW_IMAGE_URL: AUTO_PREVIEW_IMAGE_URL,
    TemplateSlot.PREVIEW_URL: AUTO_PREVIEW_URL,
    TemplateSlot.TAGS: "owstaxidmetadataalltagsinfo",
    TemplateSlot.DATE: "resource.createdDateTime",
    TemplateSlot.SITE_ID: "resource.listItem.fields.siteId",
    TemplateSlot.WEB_ID: "resource.fields.normWebID",
    TemplateSlot.LIST_ID: "resource.parentReference.sharepointIds.listId",
    TemplateSlot.ITEM_ID: "resource.listItem.id",
    TemplateSlot.IS_FOLDER: "resource.fields.contentTypeId",
    TemplateSlot.DRIVE_ID: "resource.parentReference.driveId",
    TemplateSlot.ID: "hitId",
    TemplateSlot.AUTHOR: AUTHOR_ALIAS_FIELD,
    TemplateSlot.CONTENT_CLASS: "resource.fields.contentClass",
    "SPWebURL": "sitePath",
    "SiteTitle": "siteTitle",
}


class MicrosoftSearchService:
    """Microsoft Search data source."""

    FILTER_BEHAVIOR = "dynamic"
    PAGING_BEHAVIOR = "dynamic"

    def __init__(
        self,
        config: SourceConfig,
        token_resolver: BaseTokenResolver,
        client: Optional[GraphSearchClient] = None,
        settings=None,
        clock: Optional[Callable[[], datetime]] = None,
        locale: Optional[str] = None,
    ):
        self.settings = settings or get_settings()
        self.token_resolver = token_resolver
        self.client = client or GraphSearchClient(self.settings)
        self.clock = clock
        self.locale = locale or self.settings.graph.locale
        self.normalizer = ResultNormalizer(self.settings)
        self._items_count = 0
        self.update_config(config)

    @property
    def item_count(self) -> int:
        """Total reported by the last search."""
        return self._items_count

    def update_config(self, config: SourceConfig) -> None:
        """Swap the configuration and recompute the endpoint."""
        self.config = config
        self.search_url = self._resolve_search_url()

    def _resolve_search_url(self) -> str:
        base_url = self.settings.graph.endpoint_url.rstrip("/")
        version = "beta" if self.config.use_beta_endpoint else "v1.0"
        return f"{base_url}/{version}/search/query"

    def _headers(self) -> Dict[str, str]:
        return {
            "SdkVersion": f"{SDK_VERSION_PREFIX}{self.settings.graph.sdk_version}",
            "accept-language": self.locale,
        }

    async def get_data(
        self,
        context: SearchContext,
        slots: Optional[SlotMapping] = None,
    ) -> NormalizedResultSet:
        """
        Run one search.

        Without any entity type selected, no request is sent and an empty
        result with a zero count comes back.

        Args:
            context: Search intent for this invocation
            slots: Slot mapping for preview computation (optional)

        Returns:
            NormalizedResultSet

        Raises:
            Token resolution and transport errors, unmodified
        """
        if not self.config.entity_types:
            logger.warning("No entity type selected, search skipped")
            self._items_count = 0
            return NormalizedResultSet()

        compiler = QueryCompiler(self.config, self.token_resolver, self.clock)
        query = await compiler.compile_query(context)

        logger.info(
            f"Searching {self.search_url} for "
            f"{', '.join(et.value for et in self.config.entity_types)}"
        )
        raw_response = await self.client.post(
            self.search_url,
            query.to_payload(),
            self._headers(),
        )

        result = self.normalizer.normalize(raw_response, slots)
        self._items_count = result.total_count
        logger.info(f"Search returned {len(result.items)} of {result.total_count} items")
        return result

    def get_items_preview(
        self,
        result: NormalizedResultSet,
        slots: SlotMapping,
    ) -> NormalizedResultSet:
        """Add auto-computed preview fields to an existing result."""
        return self.normalizer.apply_previews(result, slots)

    def get_template_slots(self) -> SlotMapping:
        """
        Default slot mapping for the selected entity types.

        People, bookmarks and acronyms get their own mapping when no
        SharePoint-backed type is selected alongside them.
        """
        if not self.config.has_entity_type(*SHAREPOINT_ENTITY_TYPES):
            if self.config.has_entity_type(EntityType.PERSON):
                return dict(PERSON_SLOTS)
            if self.config.has_entity_type(EntityType.BOOKMARK):
                return dict(BOOKMARK_SLOTS)
            if self.config.has_entity_type(EntityType.ACRONYM):
                return dict(ACRONYM_SLOTS)
        return dict(SHAREPOINT_SLOTS)

    def get_sortable_fields(self) -> List[str]:
        """Sort fields exposed to end users."""
        return [spec.sort_field for spec in self.config.sort_properties if spec.is_user_sort]
