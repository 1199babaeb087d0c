"""
Model listing over HTTP for OpenAI-compatible provider endpoints.

Requests are made with urllib in a worker thread so callers stay async.
Non-2xx answers surface as UpstreamHTTPError, unreachable endpoints as
UpstreamConnectionError; bodies that are not the expected
`{object, data: [...]}` shape surface as ModelListParseError.
"""

import asyncio
import json
import os
import socket
import urllib.error
import urllib.request
from typing import Any, Dict, List, Optional

from ..oauth.errors import ModelListParseError, UpstreamConnectionError, UpstreamHTTPError

DEFAULT_TIMEOUT = 15.0

# Set NIMAUTH_DEBUG_MODELS=1 to print detailed flow to console
_DEBUG = os.environ.get("NIMAUTH_DEBUG_MODELS", "").strip() in ("1", "true", "yes")


def _log(msg: str, *args) -> None:
    if _DEBUG:
        text = msg % args if args else msg
        print(f"[nim-models] {text}", flush=True)


def _fetch_http(
    url: str,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = DEFAULT_TIMEOUT,
    provider_name: str = "provider",
) -> Any:
    """Sync HTTP GET returning the decoded JSON body; run in a thread pool."""
    _log("_fetch_http: GET %s (headers: %s)", url, list((headers or {}).keys()))
    req = urllib.request.Request(url, headers=headers or {}, method="GET")
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            raw_bytes = resp.read()
    except urllib.error.HTTPError as e:
        body = e.read().decode("utf-8", errors="replace") if e.fp else None
        _log("_fetch_http: HTTP %s %s", e.code, e.reason)
        raise UpstreamHTTPError(provider_name, e.code, str(e.reason or ""), body) from e
    except urllib.error.URLError as e:
        _log("_fetch_http: connection failed: %s", e.reason)
        raise UpstreamConnectionError(provider_name, str(e.reason)) from e
    except (socket.timeout, TimeoutError, ConnectionError) as e:
        _log("_fetch_http: connection failed: %s", e)
        raise UpstreamConnectionError(provider_name, str(e) or type(e).__name__) from e

    _log("_fetch_http: received %d bytes", len(raw_bytes))
    body = raw_bytes.decode("utf-8", errors="replace")
    try:
        return json.loads(body)
    except json.JSONDecodeError as e:
        _log("_fetch_http: json.loads FAILED: %s", e)
        raise ModelListParseError(f"{provider_name} returned a non-JSON model list: {e}") from e


def extract_model_records(payload: Any, provider_name: str = "provider") -> List[Dict[str, Any]]:
    """Return the `data` records of a model listing, checking the shape."""
    if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
        raise ModelListParseError(f"{provider_name} model list is missing a 'data' array")
    records = payload["data"]
    for i, record in enumerate(records):
        if not isinstance(record, dict) or not isinstance(record.get("id"), str):
            raise ModelListParseError(f"{provider_name} model record {i} has no string 'id'")
        max_len = record.get("max_model_len")
        if max_len is not None and (isinstance(max_len, bool) or not isinstance(max_len, int)):
            raise ModelListParseError(f"{provider_name} model record {i} has a non-integer 'max_model_len'")
    return records


async def fetch_model_records(
    url: str,
    api_key: str,
    timeout: float = DEFAULT_TIMEOUT,
    provider_name: str = "provider",
) -> List[Dict[str, Any]]:
    """
    Fetch `url` with a bearer token and return its model records.

    Args:
        url: Full model listing URL (e.g. https://host/v1/models)
        api_key: Bearer token
        timeout: Socket timeout in seconds
        provider_name: Display name used in error messages

    Returns:
        Upstream records in upstream order

    Raises:
        UpstreamHTTPError: Non-2xx status
        UpstreamConnectionError: Endpoint unreachable or timed out
        ModelListParseError: Body is not a model listing
    """
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }
    payload = await asyncio.to_thread(_fetch_http, url, headers, timeout, provider_name)
    records = extract_model_records(payload, provider_name)
    _log("fetch_model_records: %d records from %s", len(records), url)
    return records
