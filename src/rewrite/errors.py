"""Errors raised by the rewrite engine."""

from __future__ import annotations


class RewriteError(Exception):
    """Base class for rewrite failures."""


class ParseError(RewriteError):
    """A manifest, source file or path could not be parsed."""


class ArchiveError(RewriteError):
    """A module archive is malformed or could not be written."""
