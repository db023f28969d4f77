"""
Preview - SharePoint Strategy

Preview and thumbnail resolution for SharePoint / OneDrive backed items:
drive items, list items, drives, lists, sites and external items.
"""

import logging
from typing import Any, Dict, Optional

from graph_search.preview.base_strategy import BasePreviewStrategy, get_entity_type
from graph_search.preview.urls import (
    by_path,
    enhance_thumbnail_url,
    generate_graph_thumbnail_url,
    generate_preview_url,
    generate_sharepoint_thumbnail_url,
    is_container_content_type,
    is_container_type,
    tenant_url_from_web_url,
    validate_preview_image_url,
)
from graph_search.schemas.slots import SlotMapping, TemplateSlot
from graph_search.schemas.source import SHAREPOINT_ENTITY_TYPES, EntityType

logger = logging.getLogger(__name__)

SITE_CONTENT_CLASSES = ("sts_site", "sts_web")
CONTAINER_ENTITY_TYPES = frozenset({EntityType.DRIVE, EntityType.LIST, EntityType.SITE})


class SharePointPreviewStrategy(BasePreviewStrategy):
    """Builds SharePoint preview URLs and thumbnails."""

    entity_types = SHAREPOINT_ENTITY_TYPES

    def preview_url(self, item: Dict[str, Any], slots: SlotMapping) -> Optional[str]:
        """
        Preview URL from the site web URL, list item unique id and file type.

        The path prefers the caller's path slot, then the stored site path,
        then `DefaultEncodingURL`. Hits without list item fields get none.
        """
        list_item = by_path(item, "resource.listItem")
        list_item_fields = by_path(list_item, "fields")
        if not isinstance(list_item_fields, dict):
            return None

        content_type_id = list_item_fields.get("contentTypeId")
        is_container = (
            is_container_content_type(content_type_id)
            or get_entity_type(item) in CONTAINER_ENTITY_TYPES
        )

        web_url = list_item_fields.get("sitePath")
        path = (
            by_path(item, slots.get(TemplateSlot.PATH))
            or web_url
            or item.get("DefaultEncodingURL")
        )
        file_type = (
            by_path(item, slots.get(TemplateSlot.FILE_TYPE))
            or list_item_fields.get("filetype")
        )

        return generate_preview_url(
            web_url=web_url,
            unique_id=by_path(list_item, "id"),
            file_type=file_type if isinstance(file_type, str) else None,
            path=path if isinstance(path, str) else None,
            is_container=is_container,
        )

    def preview_image_url(self, item: Dict[str, Any], slots: SlotMapping) -> Optional[str]:
        """
        Thumbnail URL, kept only when it resolves to a trusted domain.

        Sites and webs use their logo. Other items try, in order: the stored
        thumbnail, a list item thumbnail, then a drive item thumbnail.
        """
        content_class = by_path(item, slots.get(TemplateSlot.CONTENT_CLASS))

        if self._is_site_content_class(content_class):
            candidate = by_path(item, "SiteLogo")
        else:
            candidate = self._non_site_thumbnail(item, slots)

        validated = validate_preview_image_url(candidate, self.settings.preview.trusted_domains)
        if candidate and not validated:
            logger.debug(f"Discarded thumbnail from untrusted domain: {candidate}")
        return validated

    def _is_site_content_class(self, content_class: Any) -> bool:
        return isinstance(content_class, str) and content_class.lower() in SITE_CONTENT_CLASSES

    def _non_site_thumbnail(self, item: Dict[str, Any], slots: SlotMapping) -> Optional[str]:
        site_id = by_path(item, slots.get(TemplateSlot.SITE_ID))
        web_id = by_path(item, slots.get(TemplateSlot.WEB_ID))
        list_id = by_path(item, slots.get(TemplateSlot.LIST_ID))
        item_id = by_path(item, slots.get(TemplateSlot.ITEM_ID))
        is_container = is_container_type(by_path(item, slots.get(TemplateSlot.IS_FOLDER)))

        thumbnail_url = enhance_thumbnail_url(by_path(item, "PictureThumbnailURL"))
        if thumbnail_url:
            return thumbnail_url

        if site_id and list_id and item_id and not is_container:
            return self._list_item_thumbnail(item, site_id, web_id, list_id, item_id)

        return self._drive_item_thumbnail(item, site_id, item_id, slots)

    def _list_item_thumbnail(
        self,
        item: Dict[str, Any],
        site_id: str,
        web_id: Optional[str],
        list_id: str,
        item_id: str,
    ) -> Optional[str]:
        """Only file types the thumbnail service can render get a URL."""
        file_type = by_path(item, "resource.listItem.fields.filetype")
        valid_extensions = {ext.upper() for ext in self.settings.preview.valid_extensions}
        if not isinstance(file_type, str) or file_type.upper() not in valid_extensions:
            return None

        tenant_url = self._tenant_url(item)
        if not tenant_url:
            return None

        return generate_sharepoint_thumbnail_url(
            base_url=tenant_url,
            site_id=by_path(item, "resource.listItem.fields.siteId") or site_id,
            web_id=web_id,
            list_id=by_path(item, "resource.parentReference.sharepointIds.listId") or list_id,
            item_id=(
                by_path(item, "resource.parentReference.sharepointIds.listItemUniqueId")
                or item_id
            ),
            size=self.settings.preview.thumbnail_size,
        )

    def _drive_item_thumbnail(
        self,
        item: Dict[str, Any],
        site_id: Optional[str],
        item_id: Optional[str],
        slots: SlotMapping,
    ) -> Optional[str]:
        drive_id = by_path(item, slots.get(TemplateSlot.DRIVE_ID))
        if not (site_id and drive_id and item_id):
            return None

        tenant_url = self._tenant_url(item)
        if not tenant_url:
            return None

        return generate_graph_thumbnail_url(
            base_url=tenant_url,
            site_id=site_id,
            drive_id=drive_id,
            item_id=item_id,
            size=self.settings.preview.thumbnail_size,
        )

    def _tenant_url(self, item: Dict[str, Any]) -> Optional[str]:
        """Tenant root from the item URL, else from its site URL."""
        for key in ("resource.webUrl", "sitePath", "SPWebURL"):
            tenant_url = tenant_url_from_web_url(by_path(item, key))
            if tenant_url:
                return tenant_url
        return None
