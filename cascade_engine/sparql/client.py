# SPDX-License-Identifier: MIT
#
#  █████╗ ██████╗  █████╗ ███████╗
# ██╔══██╗██╔══██╗██╔══██╗██╔════╝
# ███████║██████╔╝███████║███████╗
# ██╔══██║██╔══██╗██╔══██║╚════██║
# ██║  ██║██║  ██║██║  ██║███████║
# ╚═╝  ╚═╝╚═╝  ╚═╝╚═╝  ╚═╝╚══════╝
# Copyright (C) 2026 Riza Emre ARAS <r.emrearas@proton.me>
#
# Licensed under the MIT License.
# See LICENSE and THIRD_PARTY_LICENSES for details.
"""Generic SPARQL HTTP client using urllib.

Sends POST requests to a SPARQL endpoint and returns the SPARQL JSON
document. No domain logic — pure transport layer.

Endpoint trouble (non-2xx, connection error, timeout) is a Fail. A body
that is not JSON is not: json.JSONDecodeError propagates and ends the run.
"""

from __future__ import annotations

import http.client
import json
import ssl
import time
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Callable
from functools import partial
from typing import Any

import certifi

from cascade_engine.config import RetryConfig, SparqlConfig
from cascade_engine.logger import get_logger
from cascade_engine.result import Fail, Ok, Result

log = get_logger(__name__)

QueryFn = Callable[[str], Result[dict[str, Any]]]

_ssl_ctx = ssl.create_default_context(cafile=certifi.where())

_NO_RETRY = RetryConfig(attempts=1, delay_seconds=0)


def _post(endpoint: str, body: bytes, timeout: int) -> Result[dict[str, Any]]:
    """Single POST attempt."""
    req = urllib.request.Request(
        endpoint,
        data=body,
        headers={
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/sparql-results+json",
        },
        method="POST",
    )

    try:
        with urllib.request.urlopen(req, timeout=timeout, context=_ssl_ctx) as resp:
            payload = resp.read().decode("utf-8")
    except urllib.error.HTTPError as exc:
        detail = exc.read().decode("utf-8", errors="replace")[:500]
        return Fail(
            error=f"SPARQL HTTP {exc.code}: {exc.reason}",
            context=detail,
        )
    except urllib.error.URLError as exc:
        return Fail(error=f"SPARQL connection error: {exc.reason}")
    except TimeoutError:
        return Fail(error=f"SPARQL timeout after {timeout}s")
    except (http.client.HTTPException, ConnectionError) as exc:
        return Fail(error=f"SPARQL connection error: {type(exc).__name__}: {exc}")

    raw: dict[str, Any] = json.loads(payload)
    return Ok(data=raw)


def execute_query(
    endpoint: str,
    query: str,
    timeout: int = 30,
    retry: RetryConfig = _NO_RETRY,
) -> Result[dict[str, Any]]:
    """POST a SPARQL query and return the parsed SPARQL JSON document."""
    encoded_body = urllib.parse.urlencode({"query": query}).encode("utf-8")
    log.debug("SPARQL query → %s (%d bytes)", endpoint, len(encoded_body))

    result: Result[dict[str, Any]] = Fail(error="SPARQL query not attempted")
    for attempt in range(1, retry.attempts + 1):
        result = _post(endpoint, encoded_body, timeout)
        if result.ok:
            break
        log.warning(
            "SPARQL attempt %d/%d failed: %s", attempt, retry.attempts, result.error
        )
        if attempt < retry.attempts:
            time.sleep(retry.delay_seconds)

    return result


def query_function(config: SparqlConfig) -> QueryFn:
    """Bind endpoint, timeout and retry so the traversal only passes the query."""
    return partial(
        execute_query,
        config.endpoint,
        timeout=config.timeout,
        retry=config.retry,
    )
