"""Synchronous HTTP helpers.

Used by the Lambda runtime loop, which talks to the runtime API with plain
blocking requests between invocations. Encapsulates request/timeout error
handling and DEBUG traces so callers avoid duplicating try/except blocks.
"""
from __future__ import annotations

import logging
import sys
from typing import Any, Optional

import requests

from constants import Constants, ExitCodes
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)

_DEFAULT = object()


def _request(method: str, url: str, *, context: str, timeout: Any, **kwargs: Any) -> requests.Response:
    safe_target = safe_url(url)
    if timeout is _DEFAULT:
        timeout = Constants.REQUEST_TIMEOUT
    with Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="http_client",
                    action=method,
                    target=safe_target,
                    context=context
                )
            )
        try:
            res = requests.request(method, url, timeout=timeout, **kwargs)
            if is_debug_enabled(logger):
                logger.debug(
                    "HTTP response ok",
                    extra=extra_context(
                        event="http_response",
                        component="http_client",
                        action=method,
                        outcome="success",
                        status_code=res.status_code,
                        duration_ms=t.duration_ms(),
                        target=safe_target,
                        context=context
                    )
                )
            return res
        except requests.Timeout:
            logger.error(
                "%s request timed out after %s seconds",
                context,
                timeout,
            )
            sys.exit(ExitCodes.CONNECTION_ERROR.value)
        except requests.RequestException as exc:  # includes ConnectionError
            logger.error("%s connection error: %s", context, exc)
            sys.exit(ExitCodes.CONNECTION_ERROR.value)


def safe_get(url: str, *, context: str, timeout: Any = _DEFAULT, **kwargs: Any) -> requests.Response:
    """Perform a GET request; connection failures exit the process.

    Args:
        url: Target URL.
        context: Human-readable source tag for logs (e.g., "lambda runtime").
        timeout: Seconds to wait; None waits forever (long polling).
        **kwargs: Passed through to requests.get.

    Returns:
        requests.Response: The HTTP response object.
    """
    return _request("GET", url, context=context, timeout=timeout, **kwargs)


def safe_post(url: str, *, context: str, data: Optional[str] = None, **kwargs: Any) -> requests.Response:
    """Perform a POST request; connection failures exit the process.

    Args:
        url: Target URL.
        context: Human-readable source tag for logs.
        data: Optional payload for the POST body.
        **kwargs: Passed through to requests.post (e.g. json=...).

    Returns:
        requests.Response: The HTTP response object.
    """
    return _request("POST", url, context=context, timeout=_DEFAULT, data=data, **kwargs)
