"""HTTP edges: fetching spec text and sending built requests."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .errors import ExecutionError, SpecFetchError
from .logging import redact_payload
from .models import RequestDescription

logger = logging.getLogger(__name__)


async def fetch_spec(url: str, timeout: float = 30, verify: bool = True) -> str:
    """Fetch spec text; the body is returned as-is whatever its content type."""
    try:
        async with httpx.AsyncClient(timeout=timeout, verify=verify) as client:
            response = await client.get(url)
    except httpx.HTTPError as exc:
        raise SpecFetchError(f"Failed to fetch OpenAPI spec: {url} ({exc})") from exc

    if not response.is_success:
        logger.warning("Failed to fetch OpenAPI spec: %s (%s)", url, response.status_code)
        raise SpecFetchError(f"Failed to fetch OpenAPI spec: {url} ({response.status_code})")
    return response.text


class HttpTransport:
    def __init__(
        self,
        timeout: float = 30,
        verify: bool = True,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.timeout = timeout
        self.verify = verify
        self.client = client

    async def send(self, request: RequestDescription) -> Dict[str, Any]:
        kwargs = request.to_httpx_kwargs()
        logger.info(
            "Sending %s %s headers=%s",
            request.method,
            request.url,
            redact_payload(request.headers),
        )
        try:
            if self.client is not None:
                response = await self.client.request(**kwargs)
            else:
                async with httpx.AsyncClient(timeout=self.timeout, verify=self.verify) as client:
                    response = await client.request(**kwargs)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise ExecutionError(str(exc)) from exc

        return _response_payload(response)


def _response_payload(response: httpx.Response) -> Dict[str, Any]:
    if not response.content:
        return {"status": "ok"}
    try:
        result = response.json()
    except ValueError:
        return {"body": response.text}
    if isinstance(result, dict):
        return result
    return {"data": result}
