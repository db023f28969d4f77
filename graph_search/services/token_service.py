"""
Services - Token Service

Placeholder substitution for query text and query templates.
"""

import re
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, Dict, Optional


TOKEN_PATTERN = re.compile(r"\{([A-Za-z][\w.]*)\}")


class BaseTokenResolver(ABC):
    """Base class for token resolution implementations."""

    @abstractmethod
    async def resolve_tokens(self, text: str) -> str:
        """
        Replace `{Token}` placeholders in a string.

        Args:
            text: Text that may contain placeholders

        Returns:
            Text with every known placeholder substituted
        """
        pass


class TokenResolver(BaseTokenResolver):
    """
    Resolves the query tokens plus any caller-supplied values.

    `{searchTerms}` and `{inputQueryText}` become the current query text,
    `{Today}` the current date. Unknown tokens are left in place so the
    search service can report them.
    """

    def __init__(
        self,
        query_text: str = "",
        tokens: Optional[Dict[str, str]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.query_text = query_text
        self.tokens = dict(tokens or {})
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    async def resolve_tokens(self, text: str) -> str:
        if not text:
            return text

        values = {
            "searchterms": self.query_text,
            "inputquerytext": self.query_text,
            "today": self.clock().strftime("%Y-%m-%d"),
        }
        values.update({key.lower(): value for key, value in self.tokens.items()})

        def substitute(match: re.Match) -> str:
            replacement = values.get(match.group(1).lower())
            return match.group(0) if replacement is None else replacement

        return TOKEN_PATTERN.sub(substitute, text)
