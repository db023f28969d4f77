"""
Services Module - Business Logic Layer

Provides query compilation, result normalization, token resolution and the
Microsoft Search data source.
"""

from graph_search.services.query_compiler import QueryCompiler
from graph_search.services.result_normalizer import ResultNormalizer
from graph_search.services.token_service import BaseTokenResolver, TokenResolver
from graph_search.services.graph_client import GraphSearchClient
from graph_search.services.search_service import MicrosoftSearchService

__all__ = [
    "QueryCompiler",
    "ResultNormalizer",
    "BaseTokenResolver",
    "TokenResolver",
    "GraphSearchClient",
    "MicrosoftSearchService",
]
