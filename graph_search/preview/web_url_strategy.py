"""
Preview - Web URL Strategy

Bookmarks and acronyms link straight to their configured web URL.
"""

from typing import Any, Dict, Optional

from graph_search.preview.base_strategy import BasePreviewStrategy
from graph_search.preview.urls import by_path
from graph_search.schemas.slots import SlotMapping
from graph_search.schemas.source import EntityType


class WebUrlPreviewStrategy(BasePreviewStrategy):
    """Uses `resource.webUrl` verbatim."""

    entity_types = frozenset({EntityType.BOOKMARK, EntityType.ACRONYM})

    def preview_url(self, item: Dict[str, Any], slots: SlotMapping) -> Optional[str]:
        return by_path(item, "resource.webUrl") or None
