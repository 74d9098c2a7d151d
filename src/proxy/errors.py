"""Errors raised while serving proxy requests."""

from __future__ import annotations


class ProxyError(Exception):
    """Base class for request failures that map to an HTTP status."""

    status = 500


class NotFound(ProxyError):
    """The request path is malformed or uses a reserved name."""

    status = 404


class UpstreamError(ProxyError):
    """The upstream module proxy could not be reached or misbehaved."""

    status = 502
