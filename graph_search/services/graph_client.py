"""
Services - Graph Client

Thin async transport for the Microsoft Graph search endpoint.
"""

from typing import Any, Dict, Optional

import httpx

from graph_search.config import get_settings


class GraphSearchClient:
    """POSTs search payloads to Microsoft Graph."""

    def __init__(self, settings=None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings or get_settings()
        self.timeout = self.settings.graph.timeout_ms / 1000
        self._transport = transport

    async def post(
        self,
        url: str,
        payload: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """
        Send one request and return the decoded JSON body.

        Args:
            url: Absolute endpoint URL
            payload: JSON request body
            headers: Extra request headers

        Returns:
            Response JSON

        Raises:
            httpx.HTTPStatusError: On a non-success status
            httpx.RequestError: On network failures
        """
        request_headers = {"Content-Type": "application/json"}
        if self.settings.graph.access_token:
            request_headers["Authorization"] = f"Bearer {self.settings.graph.access_token}"
        request_headers.update(headers or {})

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(url, json=payload, headers=request_headers)
            response.raise_for_status()
            return response.json()
