"""Shared aiohttp request helper."""
from __future__ import annotations

import ssl
from typing import Any

import aiohttp
import certifi

from ..constants import REQUEST_TIMEOUT_SECONDS


class ProviderError(RuntimeError):
    """Non-success HTTP status or an error reported in a provider response."""


async def request_json(
    method: str,
    url: str,
    *,
    params: Any = None,
    json: Any = None,
    headers: dict[str, str] | None = None,
    timeout: float = REQUEST_TIMEOUT_SECONDS,
    label: str = "",
) -> Any:
    """Issue one request and return the decoded JSON body.

    ``label`` names the provider in error messages so URLs carrying API keys
    never end up in logs.
    """
    ssl_context = ssl.create_default_context(cafile=certifi.where())
    connector = aiohttp.TCPConnector(ssl=ssl_context)

    async with aiohttp.ClientSession(connector=connector, headers=headers) as session:
        async with session.request(
            method,
            url,
            params=params,
            json=json,
            timeout=aiohttp.ClientTimeout(total=timeout),
        ) as response:
            if response.status != 200:
                raise ProviderError(f"{label or 'provider'} returned HTTP {response.status}")
            return await response.json()
