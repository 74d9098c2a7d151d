"""goclone proxy server package.

This package serves the Go module proxy protocol for a vanity host: requests
are forwarded to an upstream module proxy and go.mod files and module zips
are rewritten so the upstream modules appear under the vanity host.
"""

from .errors import ProxyError, NotFound, UpstreamError
from .request_parser import RequestParser, ParsedRequest, RequestKind
from .upstream import UpstreamClient
from .orchestrator import ProxyOrchestrator, ProxyResponse
from .server import GoCloneProxyServer, ProxyConfig

__all__ = [
    "ProxyError",
    "NotFound",
    "UpstreamError",
    "RequestParser",
    "ParsedRequest",
    "RequestKind",
    "UpstreamClient",
    "ProxyOrchestrator",
    "ProxyResponse",
    "GoCloneProxyServer",
    "ProxyConfig",
]
