"""
Preview Module - Entity Type Strategies

Preview URL and thumbnail resolution, one strategy per entity type group.
"""

from typing import Optional

from graph_search.preview.base_strategy import BasePreviewStrategy, get_entity_type
from graph_search.preview.message_strategy import MessagePreviewStrategy
from graph_search.preview.person_strategy import PersonPreviewStrategy
from graph_search.preview.web_url_strategy import WebUrlPreviewStrategy
from graph_search.preview.sharepoint_strategy import SharePointPreviewStrategy
from graph_search.schemas.source import EntityType

__all__ = [
    "BasePreviewStrategy",
    "MessagePreviewStrategy",
    "PersonPreviewStrategy",
    "WebUrlPreviewStrategy",
    "SharePointPreviewStrategy",
    "get_entity_type",
    "get_strategy",
]

STRATEGY_CLASSES = (
    MessagePreviewStrategy,
    PersonPreviewStrategy,
    WebUrlPreviewStrategy,
    SharePointPreviewStrategy,
)


def get_strategy(
    entity_type: Optional[EntityType],
    settings=None,
) -> Optional[BasePreviewStrategy]:
    """Factory function to get the strategy for an entity type, if any."""
    if entity_type is None:
        return None

    for strategy_class in STRATEGY_CLASSES:
        if entity_type in strategy_class.entity_types:
            return strategy_class(settings)

    return None
