# -*- coding: utf-8 -*-
"""Web research for the body stage (Tavily search API).

Returns plain-text context that can be injected into LLM prompts. Research is
optional: every failure yields an empty context.
"""

import logging
from typing import Dict, List, Optional

import httpx

from basedlink.config import Settings


logger = logging.getLogger("basedlink.search")


class TavilySearchClient:
    def __init__(
        self,
        api_key: str,
        api_url: str = "https://api.tavily.com/search",
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "TavilySearchClient":
        return cls(api_key=settings.tavily_api_key, api_url=settings.tavily_api_url)

    async def search(self, query: str, max_results: int = 2) -> List[Dict[str, str]]:
        """Run a search and return the raw result objects."""
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(
                self.api_url,
                json={"query": query, "max_results": max_results},
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
            response.raise_for_status()
            data = response.json()
        results = data.get("results") if isinstance(data, dict) else None
        return [r for r in (results or []) if isinstance(r, dict)]

    async def build_research_context(self, query: str, max_results: int = 2) -> str:
        if not self.api_key or not (query or "").strip():
            return ""
        try:
            results = await self.search(query, max_results=max_results)
        except (httpx.HTTPError, ValueError) as exc:
            logger.info("Research failed: %s", exc)
            return ""

        lines = []
        for r in results:
            title = (r.get("title") or "").strip()
            content = (r.get("content") or "").strip()
            if title or content:
                lines.append(f"- {title}: {content}")
        return "\n".join(lines)
