"""A small scanner for Go source: top-level declarations and function signatures."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Optional, Union

log = logging.getLogger(__name__)

_DECL_START = re.compile(r"(func|type|var|const|import)\b")
_PACKAGE = re.compile(r"package\b")
_IDENT = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_SELECTOR = re.compile(r"^(\*?)([A-Za-z_][A-Za-z0-9_]*)\.([A-Za-z_][A-Za-z0-9_]*)$")
_NAMED_FIELD = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)\s+(.+)$")
_OPEN = "([{"
_CLOSE = ")]}"


def _code_mask(src: str) -> list[bool]:
    """True for each character of ``src`` that is code, not a literal or comment."""
    mask = [True] * len(src)
    n = len(src)
    i = 0
    while i < n:
        c = src[i]
        if c in "\"'":
            j = i + 1
            while j < n and src[j] != c and src[j] != "\n":
                j += 2 if src[j] == "\\" else 1
            if j >= n or src[j] != c:
                raise ValueError("unterminated string or rune literal")
            end = j + 1
        elif c == "`":
            j = src.find("`", i + 1)
            if j < 0:
                raise ValueError("unterminated raw string")
            end = j + 1
        elif src.startswith("//", i):
            j = src.find("\n", i)
            end = n if j < 0 else j
        elif src.startswith("/*", i):
            j = src.find("*/", i + 2)
            if j < 0:
                raise ValueError("unterminated comment")
            end = j + 2
        else:
            i += 1
            continue
        mask[i:end] = [False] * (end - i)
        i = end
    return mask


def _match(text: str, mask: list[bool], start: int) -> int:
    """Index of the bracket closing the one at ``start``."""
    depth = 0
    for pos in range(start, len(text)):
        if not mask[pos]:
            continue
        c = text[pos]
        if c in _OPEN:
            depth += 1
        elif c in _CLOSE:
            depth -= 1
            if depth == 0:
                return pos
    raise ValueError(f"unbalanced {text[start]!r}")


def _split_top(s: str) -> list[str]:
    """Split ``s`` at commas outside brackets and literals."""
    if not s.strip():
        return []
    mask = _code_mask(s)
    parts: list[str] = []
    depth = 0
    last = 0
    for pos, c in enumerate(s):
        if not mask[pos]:
            continue
        if c in _OPEN:
            depth += 1
        elif c in _CLOSE:
            depth -= 1
        elif c == "," and depth == 0:
            parts.append(s[last:pos].strip())
            last = pos + 1
    tail = s[last:].strip()
    if tail:
        parts.append(tail)
    return parts


def update_pb_field_type(expr: str, new_type: str) -> str:
    """Rewrite ``X.Sel`` or ``*X.Sel`` to use ``new_type`` as the selector."""
    m = _SELECTOR.match(expr.strip())
    if not m:
        return expr
    return f"{m.group(1)}{m.group(2)}.{new_type}"


def _retype_field(decl: str, new_type: str) -> str:
    m = _NAMED_FIELD.match(decl.strip())
    if m and not _SELECTOR.match(decl.strip()):
        return f"{m.group(1)} {update_pb_field_type(m.group(2), new_type)}"
    return update_pb_field_type(decl, new_type)


@dataclass
class FuncDecl:
    """A top-level function or method declaration."""

    name: str
    recv: Optional[str] = None
    params: list[str] = field(default_factory=list)
    results: list[str] = field(default_factory=list)
    results_paren: bool = False
    body: str = ""
    doc: str = ""

    def update_param_type(self, new_type: str) -> None:
        """Set the type of the second parameter (``in *pb.TYPE``) to ``new_type``."""
        if len(self.params) != 2:
            log.warning(
                "Function %s params signature should be func NAME(ctx context.Context, "
                "in *pb.TYPE), cannot fix",
                self.name,
            )
            return
        self.params[1] = _retype_field(self.params[1], new_type)

    def update_result_type(self, new_type: str) -> None:
        """Set the type of the first result (``*pb.TYPE``) to ``new_type``."""
        if len(self.results) != 2:
            log.warning(
                "Function %s results signature should be (*pb.TYPE, error), cannot fix",
                self.name,
            )
            return
        self.results[0] = _retype_field(self.results[0], new_type)

    def __str__(self) -> str:
        out = [self.doc + "\n"] if self.doc else []
        out.append("func ")
        if self.recv is not None:
            out.append(f"({self.recv}) ")
        out.append(f"{self.name}({', '.join(self.params)})")
        if self.results:
            if self.results_paren or len(self.results) > 1:
                out.append(f" ({', '.join(self.results)})")
            else:
                out.append(" " + self.results[0])
        if self.body:
            out.append(" " + self.body)
        return "".join(out)


@dataclass
class _RawDecl:
    text: str

    def __str__(self) -> str:
        return self.text


Decl = Union[FuncDecl, _RawDecl]


@dataclass
class GoFile:
    """A Go source file: its package clause and its top-level declarations."""

    package: str
    decls: list = field(default_factory=list)

    def render(self) -> str:
        """The source text of the file."""
        return "\n\n".join([self.package, *(str(d) for d in self.decls)]) + "\n"


def _parse_func(doc: str, code: str) -> FuncDecl:
    mask = _code_mask(code)
    pos = len("func")

    def skip_ws(p: int) -> int:
        while p < len(code) and code[p].isspace():
            p += 1
        return p

    pos = skip_ws(pos)
    recv = None
    if code.startswith("(", pos):
        end = _match(code, mask, pos)
        recv = code[pos + 1: end].strip()
        pos = skip_ws(end + 1)
    m = _IDENT.match(code, pos)
    if not m:
        raise ValueError("expected function name")
    name = m.group(0)
    pos = skip_ws(m.end())
    if not code.startswith("(", pos):
        raise ValueError(f"expected parameters of {name}")
    end = _match(code, mask, pos)
    params = _split_top(code[pos + 1: end])
    pos = skip_ws(end + 1)
    results: list[str] = []
    paren = False
    if code.startswith("(", pos):
        end = _match(code, mask, pos)
        results = _split_top(code[pos + 1: end])
        paren = True
        pos = skip_ws(end + 1)
    elif pos < len(code) and code[pos] != "{":
        brace = code.find("{", pos)
        stop = len(code) if brace < 0 else brace
        results = [code[pos:stop].strip()]
        pos = stop
    return FuncDecl(
        name=name,
        recv=recv,
        params=params,
        results=results,
        results_paren=paren,
        body=code[pos:].strip(),
        doc=doc,
    )


def _make_decl(lines: list[str]) -> Decl:
    text = "\n".join(lines).strip("\n").rstrip()
    split = 0
    for line in lines:
        if line.strip().startswith("//"):
            split += 1
        else:
            break
    code = "\n".join(lines[split:]).strip()
    if code.startswith("func") and _DECL_START.match(code).group(1) == "func":
        return _parse_func("\n".join(l.strip() for l in lines[:split]), code)
    return _RawDecl(text)


def parse_go_file(source: str) -> GoFile:
    """Split Go ``source`` into its package clause and top-level declarations."""
    mask = _code_mask(source)
    lines = source.split("\n")
    depth = 0
    offset = 0
    header: Optional[list[str]] = None
    pre: list[str] = []
    chunks: list[list[str]] = []
    for line in lines:
        continues_literal = offset > 0 and not mask[offset - 1]
        stripped = line.strip()
        if depth == 0 and not continues_literal and header is None and _PACKAGE.match(stripped):
            header = pre + [line]
            pre = []
        elif depth == 0 and not continues_literal and _DECL_START.match(stripped):
            if header is None:
                raise ValueError("expected package clause")
            current = chunks[-1] if chunks else header
            doc: list[str] = []
            while current and current[-1].strip().startswith("//"):
                doc.insert(0, current.pop())
            chunks.append(doc + [line])
        elif chunks:
            chunks[-1].append(line)
        elif header is not None:
            header.append(line)
        else:
            pre.append(line)
        for pos in range(offset, offset + len(line)):
            if mask[pos]:
                if source[pos] in _OPEN:
                    depth += 1
                elif source[pos] in _CLOSE:
                    depth -= 1
                    if depth < 0:
                        raise ValueError("unexpected closing bracket")
        offset += len(line) + 1
    if header is None:
        raise ValueError("expected package clause")
    if depth != 0:
        raise ValueError("unbalanced brackets")
    package = "\n".join(header).strip("\n").rstrip()
    return GoFile(package=package, decls=[_make_decl(c) for c in chunks])