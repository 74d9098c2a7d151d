"""Replacement map construction for one proxied module."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled

from .manifest import recursive_dependencies

logger = logging.getLogger(__name__)


def isolation_segment(requested_path: str) -> Optional[str]:
    """Return the leading ``_segment`` of a vanity path, if it has one.

    ``_bt/example.com/b`` -> ``_bt``; a lone ``_bt`` has no module below it
    and does not count.
    """
    if not requested_path.startswith(Constants.ISOLATION_MARKER):
        return None
    segment, sep, rest = requested_path.partition("/")
    if not sep or not rest:
        return None
    return segment


def build_replacements(
    requested_path: str,
    upstream_path: str,
    mod_data: bytes,
    host: str,
) -> Dict[str, str]:
    """Build the path replacements for a proxied module.

    The upstream module itself always moves to ``host/requested_path``.
    Requirements annotated with ``// goclone:recursive`` move under the host
    too, below the isolation segment of the request when there is one, so
    separate clone trees never share a relocated dependency.

    Args:
        requested_path: Module path as requested, without the host.
        upstream_path: Module path on the upstream proxy.
        mod_data: go.mod of the requested module version.
        host: Public vanity host.

    Returns:
        Mapping of old path prefix to new path prefix.

    Raises:
        ParseError: If mod_data cannot be parsed.
    """
    replacements = {upstream_path: f"{host}/{requested_path}"}
    segment = isolation_segment(requested_path)
    for dep in recursive_dependencies(mod_data):
        if segment:
            replacements[dep] = f"{host}/{segment}/{dep}"
        else:
            replacements[dep] = f"{host}/{dep}"

    if is_debug_enabled(logger):
        logger.debug(
            "Built replacements",
            extra=extra_context(
                event="replacements",
                component="replacements",
                action="build",
                module_path=upstream_path,
                count=len(replacements),
            ),
        )
    return replacements
