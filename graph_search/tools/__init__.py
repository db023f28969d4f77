"""
Tools Module - MCP Tool Implementations
"""

from graph_search.tools import search_microsoft

__all__ = [
    "search_microsoft",
]
