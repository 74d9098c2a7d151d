"""Import path rewriting for Go source files.

Only the file header is scanned: the package clause followed by the import
declarations. Everything after the last import declaration is ignored, and
rewriting only replaces the bytes of the affected import path literals, so
comments, spacing and the rest of the file stay exactly as they were.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .errors import ParseError
from .literals import quote, unquote
from .paths import Replacements, rewrite_path


@dataclass
class ImportSpec:
    """An import path literal and its position in the decoded source."""

    name: Optional[str]
    path: str
    start: int
    end: int


def _is_ident_char(ch: str) -> bool:
    return ch == "_" or ch.isalnum()


class _HeaderScanner:
    def __init__(self, text: str, filename: str):
        self._text = text
        self._filename = filename
        self._pos = 1 if text.startswith("\ufeff") else 0

    def _error(self, msg: str) -> ParseError:
        line = self._text.count("\n", 0, self._pos) + 1
        return ParseError(f"{self._filename}:{line}: {msg}")

    def _peek(self) -> str:
        return self._text[self._pos:self._pos + 1]

    def _skip(self) -> None:
        text = self._text
        while self._pos < len(text):
            ch = text[self._pos]
            if ch in " \t\r\n":
                self._pos += 1
            elif text.startswith("//", self._pos):
                end = text.find("\n", self._pos)
                self._pos = len(text) if end < 0 else end + 1
            elif text.startswith("/*", self._pos):
                end = text.find("*/", self._pos + 2)
                if end < 0:
                    raise self._error("comment not terminated")
                self._pos = end + 2
            else:
                return

    def _skip_separators(self) -> None:
        self._skip()
        while self._peek() == ";":
            self._pos += 1
            self._skip()

    def _ident(self) -> Optional[str]:
        text = self._text
        start = self._pos
        if start >= len(text) or not (text[start] == "_" or text[start].isalpha()):
            return None
        end = start
        while end < len(text) and _is_ident_char(text[end]):
            end += 1
        self._pos = end
        return text[start:end]

    def _string(self) -> str:
        text = self._text
        start = self._pos
        if text[start] == "`":
            end = text.find("`", start + 1)
            if end < 0:
                raise self._error("raw string literal not terminated")
            self._pos = end + 1
            return text[start:self._pos]
        pos = start + 1
        while True:
            if pos >= len(text) or text[pos] == "\n":
                raise self._error("string literal not terminated")
            if text[pos] == "\\":
                pos += 2
                continue
            if text[pos] == '"':
                break
            pos += 1
        self._pos = pos + 1
        return text[start:self._pos]

    def _spec(self) -> ImportSpec:
        self._skip()
        name = None
        if self._peek() == ".":
            name = "."
            self._pos += 1
            self._skip()
        else:
            save = self._pos
            name = self._ident()
            if name is not None:
                self._skip()
            else:
                self._pos = save
        if self._peek() not in ('"', "`"):
            raise self._error("missing import path")
        start = self._pos
        literal = self._string()
        try:
            path = unquote(literal)
        except ParseError as exc:
            raise self._error(str(exc)) from exc
        return ImportSpec(name=name, path=path, start=start, end=self._pos)

    def imports(self) -> List[ImportSpec]:
        self._skip()
        if self._ident() != "package":
            raise self._error("expected 'package'")
        self._skip()
        if self._ident() is None:
            raise self._error("expected package name")

        specs: List[ImportSpec] = []
        while True:
            self._skip_separators()
            save = self._pos
            if self._ident() != "import":
                self._pos = save
                return specs
            self._skip()
            if self._peek() == "(":
                self._pos += 1
                while True:
                    self._skip_separators()
                    if self._peek() == ")":
                        self._pos += 1
                        break
                    if not self._peek():
                        raise self._error("import declaration not terminated")
                    specs.append(self._spec())
            else:
                specs.append(self._spec())


def parse_imports(src: bytes, filename: str = "") -> List[ImportSpec]:
    """Return the import specs of a Go source file.

    Raises:
        ParseError: If the file header cannot be parsed.
    """
    try:
        text = src.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError(f"{filename}: invalid UTF-8") from exc
    return _HeaderScanner(text, filename).imports()


def rewrite_imports(src: bytes, replacements: Replacements, filename: str = "") -> bytes:
    """Rewrite the import paths of a Go source file.

    Args:
        src: Source file content.
        replacements: Mapping of old path prefix to new path prefix.
        filename: Used in error messages only.

    Returns:
        src itself when no import matched, otherwise the source with only the
        changed import literals replaced.

    Raises:
        ParseError: If the file header cannot be parsed.
    """
    specs = parse_imports(src, filename)
    edits = []
    for spec in specs:
        new_path = rewrite_path(spec.path, replacements)
        if new_path != spec.path:
            edits.append((spec.start, spec.end, quote(new_path)))
    if not edits:
        return src

    text = src.decode("utf-8")
    for start, end, literal in reversed(edits):
        text = text[:start] + literal + text[end:]
    return text.encode("utf-8")
