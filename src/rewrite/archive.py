"""Module zip repackaging."""

from __future__ import annotations

import io
import logging
import posixpath
import warnings
import zipfile
import zlib

from constants import Constants
from common.logging_utils import Timer, extra_context, is_debug_enabled

from .errors import ArchiveError
from .gosource import rewrite_imports
from .manifest import rewrite_manifest
from .paths import Replacements, rewrite_file_name

logger = logging.getLogger(__name__)

# Errors zipfile raises for corrupt or unsupported members.
_ZIP_ERRORS = (zipfile.BadZipFile, zlib.error, NotImplementedError, RuntimeError, EOFError, OSError, ValueError)


def _is_manifest(name: str) -> bool:
    return posixpath.basename(name) == Constants.MANIFEST_NAME


def _is_source(name: str) -> bool:
    return name.endswith(Constants.SOURCE_SUFFIX)


def _open(data: bytes) -> zipfile.ZipFile:
    try:
        return zipfile.ZipFile(io.BytesIO(data))
    except _ZIP_ERRORS as exc:
        raise ArchiveError(f"invalid module zip: {exc}") from exc


def _is_root_manifest(name: str) -> bool:
    """True for ``<module>@<version>/go.mod``, the module's own go.mod."""
    head, _, tail = name.rpartition("/")
    return tail == Constants.MANIFEST_NAME and "@" in head and "/" not in head.rpartition("@")[2]


def extract_manifest(data: bytes) -> bytes:
    """Return the content of the module's own go.mod.

    The go.mod at the module root is preferred; without one the first go.mod
    member in archive order is used.

    Raises:
        ArchiveError: If the archive is malformed or has no go.mod.
    """
    with _open(data) as zf:
        manifests = [info for info in zf.infolist() if _is_manifest(info.filename)]
        if manifests:
            info = next((m for m in manifests if _is_root_manifest(m.filename)), manifests[0])
            try:
                return zf.read(info)
            except _ZIP_ERRORS as exc:
                raise ArchiveError(f"{info.filename}: {exc}") from exc
    raise ArchiveError(f"{Constants.MANIFEST_NAME} not found in module zip")


def rewrite_archive(data: bytes, replacements: Replacements) -> bytes:
    """Rewrite a module zip.

    go.mod members are passed to rewrite_manifest, ``.go`` members to
    rewrite_imports, and every member name is renamed with rewrite_file_name.
    Member order, compression method, timestamps and attributes are kept.

    Args:
        data: Module zip content.
        replacements: Mapping of old path prefix to new path prefix.

    Returns:
        The new module zip content.

    Raises:
        ArchiveError: If the archive cannot be read or written.
        ParseError: If a go.mod or Go source member cannot be parsed.
    """
    out = io.BytesIO()
    renamed = 0
    with Timer() as t:
        with _open(data) as src, zipfile.ZipFile(out, "w") as dst:
            for info in src.infolist():
                try:
                    content = src.read(info)
                except _ZIP_ERRORS as exc:
                    raise ArchiveError(f"{info.filename}: {exc}") from exc

                if _is_manifest(info.filename):
                    content = rewrite_manifest(content, replacements)
                elif _is_source(info.filename):
                    content = rewrite_imports(content, replacements, filename=info.filename)

                name = rewrite_file_name(info.filename, replacements)
                if name != info.filename:
                    renamed += 1
                try:
                    header = zipfile.ZipInfo(name, date_time=info.date_time)
                    header.compress_type = info.compress_type
                    header.external_attr = info.external_attr
                    header.create_system = info.create_system
                    with warnings.catch_warnings():
                        # Duplicate member names are carried over as-is.
                        warnings.simplefilter("ignore", UserWarning)
                        dst.writestr(header, content)
                except _ZIP_ERRORS as exc:
                    raise ArchiveError(f"{name}: {exc}") from exc

    if is_debug_enabled(logger):
        logger.debug(
            "Rewrote module zip",
            extra=extra_context(
                event="rewrite",
                component="archive",
                action="rewrite_archive",
                renamed=renamed,
                size=out.tell(),
                duration_ms=t.duration_ms(),
            ),
        )
    return out.getvalue()
