"""Template engine collaborator backed by Jinja."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from jinja2 import (
    Environment,
    FileSystemLoader,
    TemplateNotFound,
    TemplateSyntaxError,
    UndefinedError,
)

from .exceptions import TemplateError


BUILTIN_TEMPLATES = Path(__file__).resolve().parent.parent / "builtin_templates"


@runtime_checkable
class TemplateEngine(Protocol):
    """Collaborator rendering a template reference with a data mapping."""

    def render(self, template_ref: str, data: Mapping[str, Any]) -> str: ...


def _comma_list(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return ", ".join(str(item) for item in value)


def _build_environment(search_paths: Iterable[Path]) -> Environment:
    paths = [str(path) for path in search_paths]
    paths.append(str(BUILTIN_TEMPLATES))
    loader = FileSystemLoader(paths)
    environment = Environment(
        loader=loader,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    environment.filters.setdefault("comma_list", _comma_list)
    return environment


class JinjaTemplateEngine:
    """Render templates from user search paths, then the built-in templates."""

    def __init__(self, search_paths: Iterable[Path] = ()) -> None:
        self.search_paths = [Path(path).resolve() for path in search_paths]
        self.environment = _build_environment(self.search_paths)

    def render(self, template_ref: str, data: Mapping[str, Any]) -> str:
        try:
            template = self.environment.get_template(template_ref)
        except TemplateNotFound as exc:
            raise TemplateError(f"Template '{template_ref}' could not be found") from exc
        except TemplateSyntaxError as exc:
            raise TemplateError(f"Template '{template_ref}' is invalid: {exc}") from exc
        try:
            return template.render(dict(data))
        except UndefinedError as exc:
            raise TemplateError(f"Template '{template_ref}' failed to render: {exc}") from exc


__all__ = ["JinjaTemplateEngine", "TemplateEngine"]
