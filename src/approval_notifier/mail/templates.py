from __future__ import annotations

import re
from collections.abc import Mapping
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape

_TEMPLATE_ID_RE = re.compile(r"^[a-z0-9_\-]+$")


class TemplateNotFoundError(FileNotFoundError):
    pass


class TemplateRenderer:
    """Render `<template_id>.html` Jinja templates from a directory.

    HTML templates are autoescaped. Undefined names render as empty strings.
    """

    def __init__(self, root: Path) -> None:
        self._root = root
        self._env = Environment(
            loader=FileSystemLoader(root),
            autoescape=select_autoescape(["html"]),
        )

    def path_for(self, template_id: str) -> Path:
        if not _TEMPLATE_ID_RE.match(template_id):
            raise TemplateNotFoundError(f"Invalid template id: {template_id!r}")
        return self._root / f"{template_id}.html"

    def render(self, template_id: str, model: Mapping[str, object]) -> str:
        path = self.path_for(template_id)
        try:
            template = self._env.get_template(path.name)
        except TemplateNotFound as e:
            raise TemplateNotFoundError(f"Template not found: {path}") from e
        return template.render(**model)
