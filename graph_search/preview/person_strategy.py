"""
Preview - Person Strategy

People open as a mail link, falling back to their instant message address.
"""

from typing import Any, Dict, Optional

from graph_search.preview.base_strategy import BasePreviewStrategy
from graph_search.preview.urls import by_path
from graph_search.schemas.slots import SlotMapping
from graph_search.schemas.source import EntityType


class PersonPreviewStrategy(BasePreviewStrategy):

    entity_types = frozenset({EntityType.PERSON})

    def preview_url(self, item: Dict[str, Any], slots: SlotMapping) -> Optional[str]:
        email = by_path(item, "resource.userPrincipalName") or by_path(item, "resource.mail")
        if email:
            return f"mailto:{email}"

        return by_path(item, "resource.imAddress") or None
