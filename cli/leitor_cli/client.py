"""HTTP gateway to the Leitor functions service."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from reader.kernel.gateway import ContentGateway, GatewayError

logger = logging.getLogger(__name__)


class HttpGateway(ContentGateway):
    """
    ContentGateway over HTTP.

    Each function is a POST to {api_url}/functions/v1/{function}; the key
    is sent both as a Bearer token and in the apikey header.
    """

    def __init__(
        self,
        api_url: str,
        api_key: str | None = None,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.api_key = api_key
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
            headers["apikey"] = self.api_key
        return headers

    async def invoke(self, function: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.api_url}/functions/v1/{function}"
        try:
            res = await self.client.post(url, json=payload, headers=self._headers())
        except httpx.TimeoutException as e:
            raise GatewayError("Request timed out.") from e
        except httpx.HTTPError as e:
            logger.warning("client: %s %s failed: %s", function, payload.get("action"), e)
            raise GatewayError(f"Could not reach {self.api_url}.") from e

        try:
            body = res.json()
        except ValueError as e:
            raise GatewayError(f"Unexpected response from server (HTTP {res.status_code}).") from e

        if res.is_error:
            message = None
            if isinstance(body, dict):
                message = body.get("error") or body.get("detail")
            raise GatewayError(str(message or f"HTTP {res.status_code}"))
        return body

    async def aclose(self):
        await self.client.aclose()

    async def __aenter__(self) -> HttpGateway:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
