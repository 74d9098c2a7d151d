"""Fetch, rewrite and serve one module proxy request."""

from __future__ import annotations

import asyncio
import functools
import logging
from dataclasses import dataclass, field
from typing import Dict

from rewrite.archive import extract_manifest, rewrite_archive
from rewrite.manifest import rewrite_manifest
from rewrite.replacements import build_replacements

from .request_parser import ParsedRequest, RequestKind, RequestParser
from .upstream import UpstreamClient

logger = logging.getLogger(__name__)


@dataclass
class ProxyResponse:
    """A complete response ready to be written to the client."""

    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""


def rewrite_payload(parsed: ParsedRequest, body: bytes, host: str) -> bytes:
    """Rewrite a fetched go.mod or module zip for the vanity host.

    Raises:
        ParseError: If go.mod or a Go source file cannot be parsed.
        ArchiveError: If the module zip is malformed.
    """
    if parsed.kind == RequestKind.ZIP:
        mod_data = extract_manifest(body)
    else:
        mod_data = body
    replacements = build_replacements(
        parsed.requested_module,
        parsed.upstream_module,
        mod_data,
        host,
    )
    if parsed.kind == RequestKind.ZIP:
        return rewrite_archive(body, replacements)
    return rewrite_manifest(body, replacements)


class ProxyOrchestrator:
    """Drives a request from path parsing to a finished response.

    list and info requests (and any other operation) are passed through;
    mod and zip requests are rewritten. Failures propagate as NotFound,
    UpstreamError, ParseError or ArchiveError and never yield partial output.
    """

    def __init__(self, host: str, upstream: UpstreamClient, parser: RequestParser):
        self._host = host
        self._upstream = upstream
        self._parser = parser

    async def handle(self, path: str) -> ProxyResponse:
        """Serve a module proxy request path."""
        parsed = self._parser.parse(path)
        url = self._upstream.build_url(parsed.upstream_path, parsed.rest)

        async with self._upstream.open_response(url) as response:
            body = await self._upstream.read_body(response)
            headers = self._upstream.filter_response_headers(response.headers)
            status = response.status

        if status != 200 or not parsed.kind.is_rewritten:
            logger.debug("Passthrough %s (%s)", path, status)
            return ProxyResponse(status=status, headers=headers, body=body)

        loop = asyncio.get_running_loop()
        data = await loop.run_in_executor(
            None, functools.partial(rewrite_payload, parsed, body, self._host)
        )
        headers.pop("ETag", None)
        headers["Content-Length"] = str(len(data))
        logger.info(
            "Rewrote %s %s -> %s/%s",
            parsed.kind.value, parsed.upstream_module, self._host, parsed.requested_module,
        )
        return ProxyResponse(status=status, headers=headers, body=data)
