"""Template data and template application."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any

import jinja2

from .naming import camel_case
from .svcmodel import Service, Svcdef

FUNC_MAP: dict[str, Callable[..., Any]] = {
    "ToLower": str.lower,
    "GoName": camel_case,
}


class TemplateError(Exception):
    """Raised when a template cannot be parsed or executed."""


@dataclass
class Config:
    """Generation settings and previously generated files keyed by path."""

    go_package: str = ""
    pb_package: str = ""
    version: str = ""
    version_date: str = ""
    previous_files: dict[str, str] = field(default_factory=dict)


@dataclass
class Data:
    """Values handed to templates while rendering."""

    import_path: str
    pb_import_path: str
    package_name: str
    service: Service
    func_map: dict[str, Callable[..., Any]] = field(default_factory=lambda: dict(FUNC_MAP))
    version: str = ""
    version_date: str = ""

    @cached_property
    def http_helper(self):
        """Helper describing the service's HTTP bindings."""
        from .binding import new_helper

        return new_helper(self.service)

    def apply_template(self, templ: str, templ_name: str) -> str:
        """Render ``templ`` with this data and its function map."""
        return apply_template(templ, templ_name, self, self.func_map)


def new_data(sd: Svcdef, conf: Config) -> Data:
    """Build template data from a service definition and a configuration."""
    return Data(
        import_path=conf.go_package,
        pb_import_path=conf.pb_package,
        package_name=sd.pkg_name,
        service=sd.service,
        func_map=dict(FUNC_MAP),
        version=conf.version,
        version_date=conf.version_date,
    )


def _context(data: Any) -> dict[str, Any]:
    ctx: dict[str, Any] = {"data": data}
    if isinstance(data, Mapping):
        ctx.update(data)
    elif dataclasses.is_dataclass(data) and not isinstance(data, type):
        ctx.update({f.name: getattr(data, f.name) for f in dataclasses.fields(data)})
    return ctx


def apply_template(
    templ: str, templ_name: str, data: Any, func_map: Mapping[str, Callable[..., Any]]
) -> str:
    """Render ``templ`` with ``data``; the functions are usable as calls and filters."""
    env = jinja2.Environment(
        keep_trailing_newline=True,
        undefined=jinja2.StrictUndefined,
        autoescape=False,
    )
    env.globals.update(func_map)
    env.filters.update(func_map)
    try:
        template = env.from_string(templ)
    except jinja2.TemplateSyntaxError as exc:
        raise TemplateError(f"cannot create template {templ_name}: {exc}") from exc
    try:
        return template.render(_context(data))
    except Exception as exc:
        raise TemplateError(f"template error in {templ_name}: {exc}") from exc