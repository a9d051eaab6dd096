# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_myinfo

"""
Bounded JSON fetching over httpx.
"""

import json
from typing import Any

import httpx

from coreason_myinfo.exceptions import CoreasonMyInfoError, OversizedResponseError

MAX_RESPONSE_BYTES = 1_000_000


async def safe_json_fetch(
    client: httpx.AsyncClient,
    url: str,
    method: str = "GET",
    max_bytes: int = MAX_RESPONSE_BYTES,
    **kwargs: Any,
) -> Any:
    """
    Issues a request and decodes the JSON body, refusing bodies larger than `max_bytes`.

    Args:
        client: The async HTTP client to use.
        url: The request URL.
        method: The HTTP method.
        max_bytes: Upper bound on the response body size.
        **kwargs: Passed through to `httpx.AsyncClient.stream` (headers, params, data, ...).

    Returns:
        Any: The decoded JSON body.

    Raises:
        httpx.HTTPError: On transport errors or non-success status codes.
        OversizedResponseError: If the body exceeds `max_bytes`.
        CoreasonMyInfoError: If the body is not valid JSON or the request fails unexpectedly.
    """
    try:
        async with client.stream(method, url, **kwargs) as response:
            response.raise_for_status()

            content_length = response.headers.get("Content-Length")
            if content_length:
                try:
                    if int(content_length) > max_bytes:
                        raise OversizedResponseError(f"Response from {url} too large ({content_length} bytes)")
                except ValueError:
                    pass

            content = bytearray()
            async for chunk in response.aiter_bytes():
                content.extend(chunk)
                if len(content) > max_bytes:
                    raise OversizedResponseError(f"Response from {url} exceeded {max_bytes} bytes")

        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise CoreasonMyInfoError(f"Invalid JSON response from {url}: {e}") from e

    except (httpx.HTTPError, CoreasonMyInfoError):
        raise
    except Exception as e:
        raise CoreasonMyInfoError(f"Failed to fetch {url}: {e}") from e
