"""
Preview - Base Strategy

Entity type classification and the abstract preview strategy.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, FrozenSet, Optional

from graph_search.config import get_settings
from graph_search.schemas.slots import SlotMapping
from graph_search.schemas.source import EntityType


ODATA_TYPE_KEY = "@odata.type"
ODATA_TYPE_PREFIX = "#microsoft.graph."

# Provider type names that differ from the entity type values
ODATA_TYPE_ALIASES = {
    "search.acronym": EntityType.ACRONYM,
    "search.bookmark": EntityType.BOOKMARK,
}


def get_entity_type(hit: Dict[str, Any]) -> Optional[EntityType]:
    """
    Classify a hit from its resource's `@odata.type`.

    Returns None when the discriminator is missing or unknown.
    """
    resource = hit.get("resource")
    if not isinstance(resource, dict):
        return None

    odata_type = resource.get(ODATA_TYPE_KEY)
    if not isinstance(odata_type, str) or not odata_type:
        return None

    normalized = odata_type.replace(ODATA_TYPE_PREFIX, "")
    if normalized in ODATA_TYPE_ALIASES:
        return ODATA_TYPE_ALIASES[normalized]

    try:
        return EntityType(normalized)
    except ValueError:
        return None


class BasePreviewStrategy(ABC):
    """Base class for per-entity-type preview resolution."""

    entity_types: FrozenSet[EntityType] = frozenset()

    def __init__(self, settings=None):
        self.settings = settings or get_settings()

    @abstractmethod
    def preview_url(self, item: Dict[str, Any], slots: SlotMapping) -> Optional[str]:
        """
        Compute the preview URL of a flattened item.

        Args:
            item: Flattened hit
            slots: Slot name to field name mapping

        Returns:
            URL, or None when it cannot be resolved
        """
        pass

    def preview_image_url(self, item: Dict[str, Any], slots: SlotMapping) -> Optional[str]:
        """Compute the thumbnail URL. Most entity types have none."""
        return None
