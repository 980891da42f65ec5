"""Normalising formatter and diff helpers for generated Go code."""

from __future__ import annotations

import difflib
import re

_OPENERS = "([{"
_CLOSERS = ")]}"
_PAIRS = {")": "(", "]": "[", "}": "{"}
_KEYWORDS = {
    "func", "if", "for", "switch", "return", "go", "defer", "case", "range",
    "select", "else", "var", "const", "type", "import", "package", "chan",
}
_TRAILING_IDENT = re.compile(r"[A-Za-z_][A-Za-z0-9_]*$")


class FormatError(ValueError):
    """Raised when Go code cannot be formatted."""


class _Line:
    def __init__(self) -> None:
        self.parts: list[str] = []
        self.brackets: list[tuple[str, int]] = []
        self.first_other = -1
        self.pending_space = False

    @property
    def text(self) -> str:
        return "".join(self.parts)

    def _emit_space_for(self, c: str) -> None:
        cur = self.text
        if self.pending_space and cur and not cur.endswith(" "):
            skip = c in ")],;" or cur[-1] in "(["
            if c == "(":
                m = _TRAILING_IDENT.search(cur)
                if m and m.group(0) not in _KEYWORDS:
                    skip = True
            if not skip:
                self.parts.append(" ")
        elif c == "{" and cur.endswith(")"):
            self.parts.append(" ")
        self.pending_space = False

    def code(self, c: str) -> None:
        self._emit_space_for(c)
        pos = len(self.text)
        if c in _OPENERS or c in _CLOSERS:
            self.brackets.append((c, pos))
        if self.first_other < 0 and c not in _CLOSERS:
            self.first_other = pos
        self.parts.append(c)

    def verbatim(self, s: str, lead: str = "") -> None:
        if lead:
            self._emit_space_for(lead)
        if self.first_other < 0:
            self.first_other = len(self.text)
        self.parts.append(s)


def _scan(line: str, in_raw: bool, in_block: bool, lineno: int):
    out = _Line()
    i = 0
    n = len(line)
    if in_raw:
        end = line.find("`")
        if end < 0:
            out.verbatim(line)
            return out, True, False
        out.verbatim(line[: end + 1])
        i = end + 1
    elif in_block:
        end = line.find("*/")
        if end < 0:
            out.verbatim(line.strip())
            return out, False, True
        out.verbatim(line[: end + 2].strip())
        i = end + 2
    else:
        line = line.strip()
        n = len(line)
    while i < n:
        c = line[i]
        if c in " \t":
            out.pending_space = True
            i += 1
        elif c in "\"'":
            j = i + 1
            while j < n and line[j] != c:
                j += 2 if line[j] == "\\" else 1
            if j >= n:
                raise FormatError(f"{lineno}: unterminated literal")
            out.verbatim(line[i: j + 1], c)
            i = j + 1
        elif c == "`":
            j = line.find("`", i + 1)
            if j < 0:
                out.verbatim(line[i:], c)
                return out, True, False
            out.verbatim(line[i: j + 1], c)
            i = j + 1
        elif line.startswith("//", i):
            out.verbatim(line[i:], "/")
            break
        elif line.startswith("/*", i):
            j = line.find("*/", i + 2)
            if j < 0:
                out.verbatim(line[i:], "/")
                return out, False, True
            out.verbatim(line[i: j + 2], "/")
            i = j + 2
        else:
            out.code(c)
            i += 1
    return out, False, False


def format_source(code: str) -> str:
    """Re-indent Go code with tabs and normalise spacing; raise FormatError if malformed."""
    stack: list[list] = []
    lines: list[str] = []
    in_raw = in_block = False
    for lineno, raw in enumerate(code.splitlines(), 1):
        started_verbatim = in_raw
        scanned, in_raw, in_block = _scan(raw, in_raw, in_block, lineno)
        text = scanned.text
        first_other = scanned.first_other if scanned.first_other >= 0 else len(text)
        brackets = scanned.brackets
        k = 0
        if not started_verbatim:
            while k < len(brackets) and brackets[k][0] in _CLOSERS and brackets[k][1] < first_other:
                _pop(stack, brackets[k][0], lineno)
                k += 1
        indent = sum(w for _, w in stack)
        if re.match(r"(case\b|default\s*:)", text) and indent > 0:
            indent -= 1
        low = len(stack)
        for ch, _ in brackets[k:]:
            if ch in _OPENERS:
                stack.append([ch, 0])
            else:
                _pop(stack, ch, lineno)
                low = min(low, len(stack))
        if len(stack) > low:
            stack[low][1] = 1
        if started_verbatim:
            lines.append(text)
        elif not text:
            if lines and lines[-1] != "":
                lines.append("")
        else:
            lines.append("\t" * indent + text)
    if stack:
        raise FormatError(f"unclosed {stack[-1][0]!r}")
    if in_raw or in_block:
        raise FormatError("unterminated raw string or comment")
    while lines and lines[-1] == "":
        lines.pop()
    return "\n".join(lines) + "\n" if lines else ""


def _pop(stack: list[list], ch: str, lineno: int) -> None:
    if not stack or stack[-1][0] != _PAIRS[ch]:
        raise FormatError(f"{lineno}: unexpected {ch!r}")
    stack.pop()


def format_code(code: str) -> str:
    """Format ``code``, returning it unchanged if it cannot be formatted."""
    try:
        return format_source(code)
    except FormatError:
        return code


def diff_strings(a: str, b: str) -> str:
    """Unified diff of two strings with five lines of context."""
    return "".join(
        difflib.unified_diff(
            a.splitlines(keepends=True),
            b.splitlines(keepends=True),
            fromfile="A",
            tofile="B",
            n=5,
        )
    )


def diff_go_code(in_a: str, in_b: str) -> tuple[str, str, str]:
    """Format both inputs and return them with a diff of the formatted forms."""

    def normalise(src: str) -> str:
        out = src.strip()
        try:
            return format_source(out)
        except FormatError:
            return "FAILED TO FORMAT\n" + out

    out_a = normalise(in_a)
    out_b = normalise(in_b)
    return out_a, out_b, diff_strings(out_a, out_b)