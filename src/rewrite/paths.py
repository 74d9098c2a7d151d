"""Longest-prefix substitution of module paths.

Replacement maps are plain dicts of old path prefix to new path prefix. A key
only ever matches whole path segments: ``"a/b"`` matches ``"a/b"`` and
``"a/b/c"`` but never ``"a/bc"``.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Optional

Replacements = Mapping[str, str]


def _longest_match(path: str, replacements: Replacements, boundaries: Iterable[str]) -> Optional[str]:
    best: Optional[str] = None
    for old in replacements:
        if path == old or any(path.startswith(old + sep) for sep in boundaries):
            if best is None or len(old) > len(best):
                best = old
    return best


def rewrite_path(path: str, replacements: Replacements) -> str:
    """Return path with its longest matching prefix replaced.

    Args:
        path: Module or package path, e.g. ``"example.com/mod/pkg"``.
        replacements: Mapping of old prefix to new prefix.

    Returns:
        The rewritten path, or path itself when no key matches.
    """
    best = _longest_match(path, replacements, ("/",))
    if best is None:
        return path
    return replacements[best] + path[len(best):]


def rewrite_file_name(name: str, replacements: Replacements) -> str:
    """Rewrite a module archive member name.

    Members are rooted at ``<path>@<version>/`` so ``@`` is accepted as a
    segment boundary in addition to ``/``.
    """
    best = _longest_match(name, replacements, ("/", "@"))
    if best is None:
        return name
    return replacements[best] + name[len(best):]
