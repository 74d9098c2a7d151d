"""Parser and canonical printer for go.mod files.

The parser keeps a lossless-enough syntax tree (statements, blocks and their
comments) so a document can be edited in place and printed back in the
canonical layout used by the Go toolchain:

* top-level statements separated by one blank line;
* block contents indented with a tab;
* tokens joined by single spaces;
* comments kept where they were attached.

Only the directives understood by the Go toolchain are accepted. The typed
records (Module, Require, Exclude, Replace) point back into the syntax tree so
changing a path through them also changes what format() prints.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from .errors import ParseError
from .literals import auto_quote, unquote

KNOWN_VERBS = frozenset({
    "module",
    "go",
    "toolchain",
    "godebug",
    "require",
    "exclude",
    "replace",
    "retract",
    "tool",
    "ignore",
})
_NO_BLOCK_VERBS = frozenset({"module", "go", "toolchain"})

_WORD = "word"
_LPAREN = "("
_RPAREN = ")"
_COMMENT = "comment"
_NEWLINE = "newline"

_PUNCTUATION = "[]{},"


@dataclass
class _Token:
    kind: str
    text: str
    line: int


@dataclass
class Line:
    """A single statement line. Top-level lines include the verb token."""

    tokens: List[str]
    lineno: int
    before: List[str] = field(default_factory=list)
    suffix: List[str] = field(default_factory=list)
    in_block: bool = False
    blank_before: bool = False

    @property
    def args_offset(self) -> int:
        return 0 if self.in_block else 1


@dataclass
class LineBlock:
    """A parenthesised block: ``verb (`` lines ``)``."""

    verb: List[str]
    lineno: int
    before: List[str] = field(default_factory=list)
    lparen_suffix: List[str] = field(default_factory=list)
    lines: List[Line] = field(default_factory=list)
    rparen_before: List[str] = field(default_factory=list)
    rparen_suffix: List[str] = field(default_factory=list)
    inline: bool = False


@dataclass
class CommentBlock:
    """Free-standing comments not attached to any statement."""

    comments: List[str]


Statement = Union[Line, LineBlock, CommentBlock]


@dataclass
class FileSyntax:
    stmts: List[Statement] = field(default_factory=list)


@dataclass
class Module:
    path: str
    line: Line

    def set_path(self, path: str) -> None:
        self.path = path
        self.line.tokens[self.line.args_offset] = auto_quote(path)


@dataclass
class Require:
    path: str
    version: str
    annotations: List[str]
    line: Line

    def set_path(self, path: str) -> None:
        self.path = path
        self.line.tokens[self.line.args_offset] = auto_quote(path)


@dataclass
class Exclude:
    path: str
    version: str
    line: Line

    def set_path(self, path: str) -> None:
        self.path = path
        self.line.tokens[self.line.args_offset] = auto_quote(path)


@dataclass
class Replace:
    old_path: str
    old_version: Optional[str]
    new_path: str
    new_version: Optional[str]
    line: Line

    def set_old_path(self, path: str) -> None:
        self.old_path = path
        self.line.tokens[self.line.args_offset] = auto_quote(path)

    def set_new_path(self, path: str) -> None:
        self.new_path = path
        arrow = self.line.tokens.index("=>", self.line.args_offset)
        self.line.tokens[arrow + 1] = auto_quote(path)


class ModFile:
    """A parsed go.mod document."""

    def __init__(self, syntax: FileSyntax):
        self.syntax = syntax
        self.module: Optional[Module] = None
        self.require: List[Require] = []
        self.exclude: List[Exclude] = []
        self.replace: List[Replace] = []

    def format(self) -> bytes:
        """Print the document in canonical form."""
        out: List[str] = []
        for i, stmt in enumerate(self.syntax.stmts):
            if i:
                out.append("")
            if isinstance(stmt, CommentBlock):
                out.extend(stmt.comments)
            elif isinstance(stmt, LineBlock):
                _print_block(stmt, out)
            else:
                _print_line(stmt, out, "")
        if not out:
            return b""
        return ("\n".join(out) + "\n").encode("utf-8")


def is_directory_path(path: str) -> bool:
    """Report whether a replacement target names a local directory."""
    if path in (".", ".."):
        return True
    if path.startswith(("./", "../", "/", ".\\", "..\\", "\\")):
        return True
    return len(path) >= 3 and path[0].isalpha() and path[1] == ":" and path[2] in "\\/"


def parse(data: bytes, filename: str = "go.mod") -> ModFile:
    """Parse go.mod bytes.

    Raises:
        ParseError: If the data is not a well-formed go.mod file.
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError(f"{filename}: invalid UTF-8") from exc
    if text.startswith("\ufeff"):
        text = text[1:]
    tokens = _Lexer(text, filename).tokens()
    syntax = _Parser(tokens, filename).parse()
    mod = ModFile(syntax)
    _Interpreter(mod, filename).run()
    return mod


# Lexer


class _Lexer:
    def __init__(self, text: str, filename: str):
        self._text = text
        self._filename = filename
        self._pos = 0
        self._line = 1

    def _error(self, msg: str) -> ParseError:
        return ParseError(f"{self._filename}:{self._line}: {msg}")

    def tokens(self) -> List[_Token]:
        text = self._text
        out: List[_Token] = []
        while self._pos < len(text):
            ch = text[self._pos]
            if ch in " \t\r":
                self._pos += 1
            elif ch == "\n":
                out.append(_Token(_NEWLINE, "\n", self._line))
                self._pos += 1
                self._line += 1
            elif text.startswith("//", self._pos):
                end = text.find("\n", self._pos)
                if end < 0:
                    end = len(text)
                out.append(_Token(_COMMENT, text[self._pos:end].rstrip(), self._line))
                self._pos = end
            elif text.startswith("/*", self._pos):
                raise self._error("mod files must use // comments, not /* */ comments")
            elif ch in "()":
                out.append(_Token(ch, ch, self._line))
                self._pos += 1
            elif ch in _PUNCTUATION:
                out.append(_Token(_WORD, ch, self._line))
                self._pos += 1
            elif ch == '"':
                out.append(_Token(_WORD, self._quoted(), self._line))
            elif ch == "`":
                out.append(_Token(_WORD, self._raw(), self._line))
            elif ch.isprintable() and not ch.isspace():
                out.append(_Token(_WORD, self._ident(), self._line))
            else:
                raise self._error(f"unexpected input character {ch!r}")
        return out

    def _quoted(self) -> str:
        text = self._text
        start = self._pos
        pos = start + 1
        while True:
            if pos >= len(text) or text[pos] == "\n":
                raise self._error("unexpected newline in string")
            if text[pos] == "\\":
                pos += 2
                continue
            if text[pos] == '"':
                break
            pos += 1
        self._pos = pos + 1
        return text[start:self._pos]

    def _raw(self) -> str:
        text = self._text
        end = text.find("`", self._pos + 1)
        if end < 0 or "\n" in text[self._pos:end]:
            raise self._error("unexpected newline in string")
        start = self._pos
        self._pos = end + 1
        return text[start:self._pos]

    def _ident(self) -> str:
        text = self._text
        start = self._pos
        pos = start
        while pos < len(text):
            ch = text[pos]
            if ch.isspace() or ch in "()" or ch in _PUNCTUATION or not ch.isprintable():
                break
            if text.startswith("//", pos):
                break
            pos += 1
        self._pos = pos
        return text[start:pos]


# Parser


@dataclass
class _RawLine:
    words: List[str]
    parens: List[Tuple[int, str]]
    comment: Optional[str]
    lineno: int

    @property
    def blank(self) -> bool:
        return not self.words and not self.parens and self.comment is None

    @property
    def comment_only(self) -> bool:
        return not self.words and not self.parens and self.comment is not None


def _merge_parens(raw: _RawLine) -> List[str]:
    """Words of a line with any parentheses put back in as plain tokens."""
    words = list(raw.words)
    for pos, paren in reversed(raw.parens):
        words.insert(pos, paren)
    return words


class _Parser:
    def __init__(self, tokens: List[_Token], filename: str):
        self._lines = self._split(tokens)
        self._filename = filename
        self._index = 0

    @staticmethod
    def _split(tokens: List[_Token]) -> List[_RawLine]:
        lines: List[_RawLine] = []
        current = _RawLine([], [], None, 1)
        for tok in tokens:
            if tok.kind == _NEWLINE:
                lines.append(current)
                current = _RawLine([], [], None, tok.line + 1)
            elif tok.kind == _COMMENT:
                current.comment = tok.text
            elif tok.kind in (_LPAREN, _RPAREN):
                current.parens.append((len(current.words), tok.kind))
            else:
                current.words.append(tok.text)
        if not current.blank:
            lines.append(current)
        return lines

    def _error(self, lineno: int, msg: str) -> ParseError:
        return ParseError(f"{self._filename}:{lineno}: {msg}")

    def parse(self) -> FileSyntax:
        syntax = FileSyntax()
        pending: List[str] = []
        while self._index < len(self._lines):
            raw = self._lines[self._index]
            self._index += 1
            if raw.blank:
                if pending:
                    syntax.stmts.append(CommentBlock(pending))
                    pending = []
                continue
            if raw.comment_only:
                pending.append(raw.comment)
                continue
            suffix = [raw.comment] if raw.comment is not None else []
            end = len(raw.words)
            if raw.words and raw.parens == [(end, _LPAREN)]:
                block = LineBlock(verb=raw.words, lineno=raw.lineno, before=pending, lparen_suffix=suffix)
                self._parse_block(block)
                syntax.stmts.append(block)
            elif raw.words and raw.parens == [(end, _LPAREN), (end, _RPAREN)]:
                # "verb ()" is an empty block.
                syntax.stmts.append(LineBlock(verb=raw.words, lineno=raw.lineno, before=pending,
                                              rparen_suffix=suffix, inline=True))
            else:
                syntax.stmts.append(Line(tokens=_merge_parens(raw), lineno=raw.lineno, before=pending, suffix=suffix))
            pending = []
        if pending:
            syntax.stmts.append(CommentBlock(pending))
        return syntax

    def _parse_block(self, block: LineBlock) -> None:
        pending: List[str] = []
        blank = False
        while self._index < len(self._lines):
            raw = self._lines[self._index]
            self._index += 1
            if raw.blank:
                if pending:
                    block.lines.append(Line(tokens=[], lineno=raw.lineno, before=pending, in_block=True, blank_before=blank))
                    pending = []
                blank = bool(block.lines)
                continue
            if raw.comment_only:
                pending.append(raw.comment)
                continue
            suffix = [raw.comment] if raw.comment is not None else []
            if raw.parens:
                if raw.parens == [(0, _RPAREN)] and not raw.words:
                    block.rparen_before = pending
                    block.rparen_suffix = suffix
                    return
                if raw.parens[-1] == (len(raw.words), _LPAREN):
                    raise self._error(raw.lineno, "nested blocks are not allowed")
            block.lines.append(Line(tokens=_merge_parens(raw), lineno=raw.lineno, before=pending, suffix=suffix,
                                    in_block=True, blank_before=blank))
            pending = []
            blank = False
        raise self._error(block.lineno, "unterminated block")


# Semantic pass


class _Interpreter:
    def __init__(self, mod: ModFile, filename: str):
        self._mod = mod
        self._filename = filename

    def _error(self, line: Line, msg: str) -> ParseError:
        return ParseError(f"{self._filename}:{line.lineno}: {msg}")

    def run(self) -> None:
        for stmt in self._mod.syntax.stmts:
            if isinstance(stmt, CommentBlock):
                continue
            if isinstance(stmt, LineBlock):
                verb = stmt.verb[0]
                if len(stmt.verb) != 1 or verb not in KNOWN_VERBS:
                    raise ParseError(f"{self._filename}:{stmt.lineno}: unknown block type: {' '.join(stmt.verb)}")
                if verb in _NO_BLOCK_VERBS:
                    raise ParseError(f"{self._filename}:{stmt.lineno}: {verb} block is not allowed")
                for line in stmt.lines:
                    if line.tokens:
                        self._directive(verb, line, line.tokens)
            else:
                verb = stmt.tokens[0]
                if verb not in KNOWN_VERBS:
                    raise self._error(stmt, f"unknown directive: {verb}")
                self._directive(verb, stmt, stmt.tokens[1:])

    def _value(self, line: Line, token: str) -> str:
        if token[:1] in ('"', "`"):
            try:
                return unquote(token)
            except ParseError as exc:
                raise self._error(line, str(exc)) from exc
        return token

    def _directive(self, verb: str, line: Line, args: List[str]) -> None:
        mod = self._mod
        if verb == "module":
            if mod.module is not None:
                raise self._error(line, "repeated module statement")
            if len(args) != 1:
                raise self._error(line, "usage: module module/path")
            mod.module = Module(self._value(line, args[0]), line)
        elif verb in ("go", "toolchain"):
            if len(args) != 1:
                raise self._error(line, f"usage: {verb} version")
        elif verb == "require":
            if len(args) != 2:
                raise self._error(line, "usage: require module/path v1.2.3")
            mod.require.append(Require(self._value(line, args[0]), self._value(line, args[1]), list(line.suffix), line))
        elif verb == "exclude":
            if len(args) != 2:
                raise self._error(line, "usage: exclude module/path v1.2.3")
            mod.exclude.append(Exclude(self._value(line, args[0]), self._value(line, args[1]), line))
        elif verb == "replace":
            mod.replace.append(self._replace(line, args))
        elif not args:
            raise self._error(line, f"usage: {verb} ...")

    def _replace(self, line: Line, args: List[str]) -> Replace:
        if "=>" not in args:
            raise self._error(line, "usage: replace module/path [v1.2.3] => other/module v1.4")
        arrow = args.index("=>")
        old, new = args[:arrow], args[arrow + 1:]
        if len(old) not in (1, 2) or len(new) not in (1, 2):
            raise self._error(line, "usage: replace module/path [v1.2.3] => other/module v1.4")
        new_path = self._value(line, new[0])
        if len(new) == 2 and is_directory_path(new_path):
            raise self._error(line, "replacement module directory path cannot have version")
        return Replace(
            old_path=self._value(line, old[0]),
            old_version=self._value(line, old[1]) if len(old) == 2 else None,
            new_path=new_path,
            new_version=self._value(line, new[1]) if len(new) == 2 else None,
            line=line,
        )


# Printer


def _join_tokens(tokens: List[str]) -> str:
    out = ""
    for i, tok in enumerate(tokens):
        if i and tok not in ",]" and tokens[i - 1] != "[":
            out += " "
        out += tok
    return out


def _print_line(line: Line, out: List[str], indent: str) -> None:
    for com in line.before:
        out.append(indent + com)
    if line.tokens:
        text = indent + _join_tokens(line.tokens)
        if line.suffix:
            text += " " + " ".join(line.suffix)
        out.append(text)


def _print_block(block: LineBlock, out: List[str]) -> None:
    for com in block.before:
        out.append(com)
    if block.inline:
        tail = _join_tokens(block.verb) + " ()"
        if block.rparen_suffix:
            tail += " " + " ".join(block.rparen_suffix)
        out.append(tail)
        return
    head = _join_tokens(block.verb) + " ("
    if block.lparen_suffix:
        head += " " + " ".join(block.lparen_suffix)
    out.append(head)
    for i, line in enumerate(block.lines):
        if line.blank_before and i:
            out.append("")
        _print_line(line, out, "\t")
    for com in block.rparen_before:
        out.append("\t" + com)
    tail = ")"
    if block.rparen_suffix:
        tail += " " + " ".join(block.rparen_suffix)
    out.append(tail)
