"""
Preview - Message Strategy

Outlook messages, Teams messages and calendar events open through their web link.
"""

from typing import Any, Dict, Optional

from graph_search.preview.base_strategy import BasePreviewStrategy
from graph_search.preview.urls import by_path
from graph_search.schemas.slots import SlotMapping
from graph_search.schemas.source import EntityType


class MessagePreviewStrategy(BasePreviewStrategy):
    """Uses `resource.webLink` verbatim."""

    entity_types = frozenset({
        EntityType.MESSAGE,
        EntityType.TEAMS_MESSAGE,
        EntityType.EVENT,
    })

    def preview_url(self, item: Dict[str, Any], slots: SlotMapping) -> Optional[str]:
        return by_path(item, "resource.webLink") or None
