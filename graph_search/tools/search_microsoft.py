"""
MCP Tool - search_microsoft

Search Microsoft 365 content through the Microsoft Search API.
"""

from fastmcp import FastMCP
from typing import Optional

from graph_search.schemas import SearchContext, SourceConfig
from graph_search.services import MicrosoftSearchService, TokenResolver

router = FastMCP("search_microsoft")


async def run_search(
    query: str,
    entity_types: str = "driveItem",
    page: int = 1,
    page_size: int = 10,
    use_beta_endpoint: bool = False,
    locale: Optional[str] = None,
    service_factory=MicrosoftSearchService,
) -> dict:
    """Build config and context from tool arguments and run one search."""
    config = SourceConfig.initialize(use_beta_endpoint=use_beta_endpoint).with_entity_types(
        et.strip() for et in entity_types.split(",") if et.strip()
    )
    context = SearchContext(
        input_query_text=query or None,
        page_number=page,
        items_count_per_page=min(page_size, 50),
    )

    service = service_factory(
        config=config,
        token_resolver=TokenResolver(query_text=query),
        locale=locale,
    )
    result = await service.get_data(context, slots=service.get_template_slots())

    return {
        "results": result.items,
        "filters": [f.model_dump() for f in result.filters],
        "count": len(result.items),
        "total_count": service.item_count,
        "query": query,
    }


@router.tool()
async def search_microsoft(
    query: str,
    entity_types: str = "driveItem",
    page: int = 1,
    page_size: int = 10,
    use_beta_endpoint: bool = False,
) -> dict:
    """
    Search Microsoft 365 content (files, sites, mail, people, bookmarks...).

    Args:
        query: Free text query, supports KQL
        entity_types: Comma-separated entity types, e.g. "driveItem,listItem"
        page: Page number, starting at 1
        page_size: Results per page (1-50, default 10)
        use_beta_endpoint: Use the Graph beta endpoint

    Returns:
        Flattened result items with preview URLs, facets and total count
    """
    return await run_search(
        query=query,
        entity_types=entity_types,
        page=page,
        page_size=page_size,
        use_beta_endpoint=use_beta_endpoint,
    )
