"""Request parser for module proxy protocol paths."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from constants import Constants

from .errors import NotFound


class RequestKind(Enum):
    """Module proxy operations."""

    LIST = "list"
    INFO = "info"
    MOD = "mod"
    ZIP = "zip"
    OTHER = "other"

    @property
    def is_rewritten(self) -> bool:
        """True for the operations whose payload is rewritten."""
        return self in (RequestKind.MOD, RequestKind.ZIP)


@dataclass
class ParsedRequest:
    """Result of parsing a module proxy request.

    Paths are kept in the protocol's case-escaped form (``!a`` for ``A``) for
    building upstream URLs; the ``*_module`` fields hold the real module
    paths used for rewriting.
    """

    requested_path: str
    upstream_path: str
    rest: str
    kind: RequestKind
    requested_module: str = ""
    upstream_module: str = ""
    raw_path: str = ""


def unescape_path(escaped: str) -> str:
    """Decode a case-escaped module path.

    Raises:
        NotFound: If the path is not validly escaped.
    """
    out = []
    bang = False
    for ch in escaped:
        if bang:
            if not ("a" <= ch <= "z"):
                raise NotFound(f"invalid escaped module path {escaped!r}")
            out.append(ch.upper())
            bang = False
        elif ch == "!":
            bang = True
        elif "A" <= ch <= "Z":
            raise NotFound(f"invalid escaped module path {escaped!r}")
        else:
            out.append(ch)
    if bang:
        raise NotFound(f"invalid escaped module path {escaped!r}")
    return "".join(out)


def classify(rest: str) -> RequestKind:
    """Classify the part of a path after ``/@v/``."""
    if rest == "list":
        return RequestKind.LIST
    if rest.endswith(".info"):
        return RequestKind.INFO
    if rest.endswith(".mod"):
        return RequestKind.MOD
    if rest.endswith(".zip"):
        return RequestKind.ZIP
    return RequestKind.OTHER


class RequestParser:
    """Splits served paths into vanity path, upstream path and operation."""

    def __init__(self, host: str, prefix: str = Constants.PROXY_PREFIX):
        """Initialize the request parser.

        Args:
            host: Public vanity host that prefixes every served module path.
            prefix: Serving prefix; reserved as an isolation segment name.
        """
        self._host = host
        self._prefix = prefix

    def parse(self, path: str) -> ParsedRequest:
        """Parse a request path such as ``/_mod/<host>/<path>/@v/v1.0.0.zip``.

        Raises:
            NotFound: If the path has no ``/@v/`` part or uses a reserved or
                incomplete isolation segment.
        """
        trimmed = path.lstrip("/")
        if trimmed.startswith(self._prefix + "/"):
            trimmed = trimmed[len(self._prefix) + 1:]
        if trimmed.startswith(self._host + "/"):
            trimmed = trimmed[len(self._host) + 1:]

        requested, sep, rest = trimmed.partition(Constants.VERSION_SEPARATOR)
        if not sep or not requested or not rest:
            raise NotFound(f"not a module proxy path: {path}")

        upstream = requested
        if requested.startswith(Constants.ISOLATION_MARKER):
            segment, slash, remainder = requested.partition("/")
            if not slash or not remainder or segment == self._prefix:
                raise NotFound(f"invalid isolation prefix in {path}")
            upstream = remainder

        return ParsedRequest(
            requested_path=requested,
            upstream_path=upstream,
            rest=rest,
            kind=classify(rest),
            requested_module=unescape_path(requested),
            upstream_module=unescape_path(upstream),
            raw_path=path,
        )
