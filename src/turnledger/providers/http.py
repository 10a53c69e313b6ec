from __future__ import annotations

import json
import logging
from typing import Any, Mapping

import httpx

from turnledger.errors import ProviderError
from turnledger.util.redaction import redact_headers

logger = logging.getLogger(__name__)

BODY_EXCERPT_LIMIT = 500


def post_json(
    url: str,
    headers: Mapping[str, str],
    body: Mapping[str, Any],
    timeout: float,
    provider_label: str,
    client: httpx.Client | None = None,
) -> dict[str, Any]:
    """POST ``body`` as JSON and return the decoded reply of an HTTP 200.

    Anything else raises ``ProviderError``; nothing is retried.
    """
    request_headers = {"Content-Type": "application/json", **headers}
    logger.debug("%s POST %s headers=%s", provider_label, url, redact_headers(request_headers))
    content = json.dumps(body, ensure_ascii=False).encode("utf-8")
    try:
        if client is None:
            response = httpx.post(url, headers=request_headers, content=content, timeout=timeout)
        else:
            response = client.post(url, headers=request_headers, content=content, timeout=timeout)
    except httpx.HTTPError as exc:
        raise ProviderError(f"{provider_label} request failed: {exc}", provider=provider_label) from exc

    logger.debug("%s responded with HTTP %s", provider_label, response.status_code)
    if response.status_code != 200:
        raise ProviderError(
            f"{provider_label} API returned an error",
            provider=provider_label,
            status_code=response.status_code,
            body_excerpt=response.text[:BODY_EXCERPT_LIMIT],
        )

    try:
        data = response.json()
    except ValueError as exc:
        raise ProviderError(
            f"{provider_label} returned invalid JSON",
            provider=provider_label,
            status_code=response.status_code,
            body_excerpt=response.text[:BODY_EXCERPT_LIMIT],
        ) from exc
    if not isinstance(data, dict):
        raise ProviderError(
            f"{provider_label} returned a non-object JSON body",
            provider=provider_label,
            status_code=response.status_code,
            body_excerpt=response.text[:BODY_EXCERPT_LIMIT],
        )
    return data
