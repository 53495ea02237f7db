"""Grant-message issuance proxy."""

import logging
from typing import Optional

import httpx


logger = logging.getLogger("basedlink.grant")


class GrantServiceError(Exception):
    pass


class GrantClient:
    def __init__(
        self,
        api_url: str,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def fetch_grant_message(self, address: str) -> str:
        """Ask the grant API for the message the wallet has to sign."""
        logger.info("Fetching grant message for: %s", address)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(f"{self.api_url}/message", params={"address": address})
        except httpx.HTTPError as exc:
            raise GrantServiceError(f"Eigen API Error: {exc}") from exc

        if response.status_code >= 400:
            raise GrantServiceError(f"Eigen API Error: {response.text}")
        return response.text
