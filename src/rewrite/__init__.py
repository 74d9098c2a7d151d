"""Path rewriting engine for re-published Go modules.

Every function here is a pure transformation of bytes: the same input and
replacement map always give the same output.
"""

from .errors import RewriteError, ParseError, ArchiveError
from .paths import rewrite_path, rewrite_file_name
from .manifest import rewrite_manifest, recursive_dependencies
from .gosource import rewrite_imports
from .archive import rewrite_archive, extract_manifest
from .replacements import build_replacements, isolation_segment

__all__ = [
    "RewriteError",
    "ParseError",
    "ArchiveError",
    "rewrite_path",
    "rewrite_file_name",
    "rewrite_manifest",
    "recursive_dependencies",
    "rewrite_imports",
    "rewrite_archive",
    "extract_manifest",
    "build_replacements",
    "isolation_segment",
]
