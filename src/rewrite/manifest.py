"""go.mod rewriting and recursion-annotation scanning."""

from __future__ import annotations

import logging
from typing import List

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled

from . import modfile
from .paths import Replacements, rewrite_path

logger = logging.getLogger(__name__)


def rewrite_manifest(data: bytes, replacements: Replacements) -> bytes:
    """Rewrite every module path in a go.mod file.

    The module path and the paths of all require, exclude and replace
    statements are passed through rewrite_path. Versions are never touched.
    Documents without any change are returned as the original bytes; changed
    documents are printed in canonical form.

    Args:
        data: go.mod content.
        replacements: Mapping of old path prefix to new path prefix.

    Returns:
        The rewritten go.mod content.

    Raises:
        ParseError: If data is not a well-formed go.mod file.
    """
    mod = modfile.parse(data)
    changed = 0

    if mod.module is not None:
        new_path = rewrite_path(mod.module.path, replacements)
        if new_path != mod.module.path:
            mod.module.set_path(new_path)
            changed += 1

    for req in mod.require:
        new_path = rewrite_path(req.path, replacements)
        if new_path != req.path:
            req.set_path(new_path)
            changed += 1

    for exc in mod.exclude:
        new_path = rewrite_path(exc.path, replacements)
        if new_path != exc.path:
            exc.set_path(new_path)
            changed += 1

    for rep in mod.replace:
        new_path = rewrite_path(rep.old_path, replacements)
        if new_path != rep.old_path:
            rep.set_old_path(new_path)
            changed += 1
        if not modfile.is_directory_path(rep.new_path):
            new_path = rewrite_path(rep.new_path, replacements)
            if new_path != rep.new_path:
                rep.set_new_path(new_path)
                changed += 1

    if not changed:
        return data

    if is_debug_enabled(logger):
        logger.debug(
            "Rewrote go.mod",
            extra=extra_context(
                event="rewrite",
                component="manifest",
                action="rewrite_manifest",
                count=changed,
            ),
        )
    return mod.format()


def recursive_dependencies(data: bytes) -> List[str]:
    """Return the required module paths marked for recursive relocation.

    A requirement is marked when one of its trailing comments contains
    ``goclone:recursive``::

        require example.com/a v1.0.0 // goclone:recursive

    Raises:
        ParseError: If data is not a well-formed go.mod file.
    """
    mod = modfile.parse(data)
    deps: List[str] = []
    for req in mod.require:
        if any(Constants.RECURSIVE_ANNOTATION in token for token in req.annotations):
            deps.append(req.path)
    return deps
