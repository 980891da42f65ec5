"""Path-parameter extraction for gRPC-annotation style URL templates."""

from __future__ import annotations


def remove_braces(val: str) -> str:
    """Remove every opening and closing curly brace from ``val``."""
    return val.replace("{", "").replace("}", "")


def build_param_map(url_tmpl: str) -> dict[str, int]:
    """Map each ``{param}`` in ``url_tmpl`` to its index among the slash-separated parts.

    ``"/v1/{a}/{b}"`` gives ``{"a": 2, "b": 3}``.
    """
    return {
        remove_braces(part): idx
        for idx, part in enumerate(url_tmpl.split("/"))
        if "{" in part or "}" in part
    }


def path_params(url: str, url_tmpl: str) -> dict[str, str]:
    """Return the values in ``url`` of the named parameters of ``url_tmpl``.

    Only a small subset of the URL template syntax is supported: whole path
    components written as ``{name}``. Raises ValueError when the number of
    path components differs.
    """
    param_map = build_param_map(url_tmpl)

    expected_len = len(url_tmpl.rstrip("/").split("/"))
    received_len = len(url.rstrip("/").split("/"))
    if expected_len != received_len:
        raise ValueError(
            f"expecting a path containing {expected_len} parts, "
            f"provided path contains {received_len} parts"
        )

    parts = url.split("/")
    return {name: parts[idx] for name, idx in param_map.items()}