"""Server handler rendering that keeps user code and matches the service's rpcs."""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from .data import FUNC_MAP, Data, apply_template
from .goscan import FuncDecl, GoFile, parse_go_file
from .svcmodel import Service, ServiceMethod

log = logging.getLogger(__name__)

IGNORED_FUNC = "NewService"
SERVER_HANDLER_PATH = "handlers/handlers.gotemplate"

_EXPR = re.compile(r"^\*?([A-Za-z_][A-Za-z0-9_]*\.)?[A-Za-z_][A-Za-z0-9_]*$")

HANDLER_METHODS = """
{% for m in methods %}
func (s {{ ToLower(service_name) }}Service) {{ m.name }}(ctx context.Context, in *pb.{{ GoName(m.request_type.name) }}) (*pb.{{ GoName(m.response_type.name) }}, error) {
	var resp pb.{{ GoName(m.response_type.name) }}
	return &resp, nil
}
{% endfor %}
"""

HANDLERS = """
package handlers

import (
	"context"

	pb "{{ pb_import_path }}"
)

// NewService returns a naïve, stateless implementation of Service.
func NewService() pb.{{ GoName(service.name) }}Server {
	return {{ ToLower(service.name) }}Service{}
}

type {{ ToLower(service.name) }}Service struct{}
{% for m in service.methods %}
func (s {{ ToLower(service.name) }}Service) {{ m.name }}(ctx context.Context, in *pb.{{ GoName(m.request_type.name) }}) (*pb.{{ GoName(m.response_type.name) }}, error) {
	var resp pb.{{ GoName(m.response_type.name) }}
	return &resp, nil
}
{% endfor %}
"""


def _read(prev: Any) -> Optional[str]:
    if prev is None or isinstance(prev, str):
        return prev
    return prev.read()


def _is_exported(name: str) -> bool:
    return name[:1].isupper()


def recv_type_to_string(func: FuncDecl) -> str:
    """The receiver type of ``func`` ("Foo", "*foo.Foo"), or "" if it has none."""
    if not func.recv:
        return ""
    type_text = func.recv.split()[-1] if " " in func.recv.strip() else func.recv.strip()
    return type_text if _EXPR.match(type_text) else ""


def is_valid_func(func: FuncDecl, method_map: dict[str, ServiceMethod], svc_name: str) -> bool:
    """False if ``func`` is exported but is not an rpc with receiver ``svc_name + "Service"``."""
    name = func.name
    if not _is_exported(name):
        return True
    if name not in method_map:
        log.info("Method %s does not exist in service definition as an rpc; removing", name)
        return False
    recv = recv_type_to_string(func)
    if recv != svc_name + "Service":
        log.info("Func %s is exported with improper receiver %s; removing", name, recv)
        return False
    return True


def prune_decls(decls: list, method_map: dict[str, ServiceMethod], svc_name: str) -> list:
    """Drop exported funcs that are not rpcs; remove kept rpcs from ``method_map``.

    Kept rpc handlers get their request and response types updated.
    """
    kept = []
    for decl in decls:
        if not isinstance(decl, FuncDecl):
            kept.append(decl)
            continue
        name = decl.name
        if name == IGNORED_FUNC or not _is_exported(name):
            kept.append(decl)
            continue
        if is_valid_func(decl, method_map, svc_name):
            meth = method_map.pop(name)
            decl.update_param_type(meth.request_type.name)
            decl.update_result_type(meth.response_type.name)
            kept.append(decl)
    return kept


def apply_server_templ(data: Data) -> str:
    """Render a fresh handler file for the whole service."""
    return data.apply_template(HANDLERS, "ServerTempl")


def apply_server_meths_templ(service_name: str, methods: list[ServiceMethod]) -> str:
    """Render handler methods for ``methods``."""
    return apply_template(
        HANDLER_METHODS,
        "ServerMethsTempl",
        {"service_name": service_name, "methods": methods},
        FUNC_MAP,
    )


class Handler:
    """Renders the server handler, updating a previous version when given one."""

    def __init__(self, svc: Service, prev: Any = None) -> None:
        self.service = svc
        self.method_map = {m.name: m for m in svc.methods}
        text = _read(prev)
        self.ast: Optional[GoFile] = parse_go_file(text) if text is not None else None

    def render(self, alias: str, data: Data) -> str:
        """The handler source with one method per rpc of the service."""
        if alias != SERVER_HANDLER_PATH:
            raise ValueError(f"cannot render unknown file: {alias!r}")
        if self.ast is None:
            return apply_server_templ(data)
        self.ast.decls = prune_decls(
            self.ast.decls, self.method_map, data.service.name.lower()
        )
        code = self.ast.render()
        if not self.method_map:
            return code
        for name in self.method_map:
            log.info("Generating handler %s from rpc definition", name)
        return code + apply_server_meths_templ(data.service.name, list(self.method_map.values()))