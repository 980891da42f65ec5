"""Identifier helpers shared by the generators."""

from __future__ import annotations

DIGIT_ENGLISH = {
    "0": "zero",
    "1": "one",
    "2": "two",
    "3": "three",
    "4": "four",
    "5": "five",
    "6": "six",
    "7": "seven",
    "8": "eight",
    "9": "nine",
}


def _is_lower(c: str) -> bool:
    return "a" <= c <= "z"


def camel_case(s: str) -> str:
    """Turn a protobuf name into an exported Go identifier ("client_id" -> "ClientId")."""
    if not s:
        return ""
    out: list[str] = []
    i = 0
    if s[0] == "_":
        out.append("X")
        i = 1
    n = len(s)
    while i < n:
        c = s[i]
        if c == "_" and i + 1 < n and _is_lower(s[i + 1]):
            i += 1
            continue
        if c.isascii() and c.isdigit():
            out.append(c)
            i += 1
            continue
        out.append(c.upper() if _is_lower(c) else c)
        i += 1
        while i < n and _is_lower(s[i]):
            out.append(s[i])
            i += 1
    return "".join(out)


def english_number(i: int) -> str:
    """Spell each base-ten digit of ``i`` as a capitalised English word."""
    return "".join(DIGIT_ENGLISH[c].title() for c in str(i) if c in DIGIT_ENGLISH)


def low_camel_name(s: str) -> str:
    """Camel-case ``s`` and lower the first letter ("example_name" -> "exampleName")."""
    s = camel_case(s)
    if not s:
        return s
    return s[0].lower() + s[1:]