"""AWS Lambda runtime adapter.

Translates Lambda Function URL events into HTTP requests against the same
aiohttp application the listener serves, bound to a loopback port, and
translates the responses back into the Function URL response format.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

import aiohttp

from constants import Constants
from common.http_client import safe_get, safe_post

from .server import GoCloneProxyServer, ProxyConfig

logger = logging.getLogger(__name__)


@dataclass
class LambdaRequest:
    """The subset of a Function URL event needed to replay the request."""

    raw_path: str
    raw_query_string: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    method: str = "GET"

    @classmethod
    def from_event(cls, event: Mapping[str, Any]) -> "LambdaRequest":
        """Build a request from a decoded event.

        Raises:
            ValueError: If the event is not a Function URL event or its body
                is not valid base64.
        """
        if not isinstance(event, Mapping) or "rawPath" not in event:
            raise ValueError("event has no rawPath")
        body = event.get("body") or ""
        if event.get("isBase64Encoded"):
            try:
                payload = base64.b64decode(body, validate=True)
            except binascii.Error as exc:
                raise ValueError(f"invalid base64 body: {exc}") from exc
        else:
            payload = body.encode("utf-8")
        method = (event.get("requestContext") or {}).get("http", {}).get("method") or "GET"
        return cls(
            raw_path=event["rawPath"],
            raw_query_string=event.get("rawQueryString") or "",
            headers=dict(event.get("headers") or {}),
            body=payload,
            method=method,
        )

    @property
    def target(self) -> str:
        if self.raw_query_string:
            return f"{self.raw_path}?{self.raw_query_string}"
        return self.raw_path


@dataclass
class LambdaResponse:
    """A Function URL response."""

    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""
    is_base64_encoded: bool = False

    @classmethod
    def from_body(cls, status: int, headers: Dict[str, str], body: bytes) -> "LambdaResponse":
        """Encode text and JSON bodies as text, everything else as base64."""
        content_type = next((v for k, v in headers.items() if k.lower() == "content-type"), "")
        if content_type.startswith("text/") or "json" in content_type:
            return cls(status, headers, body.decode("utf-8", errors="replace"), False)
        return cls(status, headers, base64.b64encode(body).decode("ascii"), True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "statusCode": self.status_code,
            "headers": self.headers,
            "body": self.body,
            "isBase64Encoded": self.is_base64_encoded,
        }


async def dispatch(session: aiohttp.ClientSession, base_url: str, request: LambdaRequest) -> LambdaResponse:
    """Replay request against the application served at base_url."""
    headers = {k: v for k, v in request.headers.items() if k.lower() not in ("host", "content-length")}
    async with session.request(
        request.method,
        base_url + request.target,
        headers=headers,
        data=request.body or None,
        allow_redirects=False,
    ) as response:
        body = await response.read()
        # Only the first value of repeated headers fits the response format.
        out_headers: Dict[str, str] = {}
        for key, value in response.headers.items():
            out_headers.setdefault(key, value)
        return LambdaResponse.from_body(response.status, out_headers, body)


def _post_error(runtime_url: str, request_id: str, exc: Exception) -> None:
    safe_post(
        f"{runtime_url}/{request_id}/error",
        context="lambda runtime",
        json={"errorMessage": str(exc)},
    )


def run_lambda_loop(config: ProxyConfig, api: str) -> None:
    """Serve Lambda invocations until the runtime API goes away.

    Args:
        config: Server configuration; listen address is replaced by an
            ephemeral loopback port.
        api: Value of AWS_LAMBDA_RUNTIME_API (``host:port``).
    """
    server = GoCloneProxyServer(dataclasses.replace(config, listen_host="127.0.0.1", port=0))
    runtime_url = f"http://{api}/{Constants.LAMBDA_RUNTIME_VERSION}/runtime/invocation"
    loop = asyncio.new_event_loop()
    loop.run_until_complete(server.start())
    host, port = server.addresses()[0][:2]
    base_url = f"http://{host}:{port}"
    session = loop.run_until_complete(_open_session())
    logger.info("Lambda runtime loop started (%s)", base_url)

    try:
        while True:
            res = safe_get(f"{runtime_url}/next", context="lambda runtime", timeout=None)
            request_id = res.headers.get("Lambda-Runtime-Aws-Request-Id", "")
            try:
                request = LambdaRequest.from_event(res.json())
                out = loop.run_until_complete(dispatch(session, base_url, request))
            except (ValueError, aiohttp.ClientError, asyncio.TimeoutError) as exc:
                logger.error("Invocation %s failed: %s", request_id, exc)
                _post_error(runtime_url, request_id, exc)
                continue
            safe_post(
                f"{runtime_url}/{request_id}/response",
                context="lambda runtime",
                json=out.to_dict(),
            )
    finally:
        loop.run_until_complete(session.close())
        loop.run_until_complete(server.stop())
        loop.close()


async def _open_session() -> aiohttp.ClientSession:
    return aiohttp.ClientSession(auto_decompress=False)
