"""Jinja2 rendering for template contents and template paths.

Provides the TemplateRenderer class which renders inline template text with
an answered context.  The same renderer is used for file contents and for
every individual path segment, so one run always substitutes consistently.
Autoescaping is disabled: output is raw text, never HTML/URL escaped.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from typing import Any

from jinja2 import (
    BaseLoader,
    Environment,
    StrictUndefined,
    TemplateError,
    TemplateNotFound,
)

from .errors import PathRenderError, RenderError


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders template strings with a context of answered questions.

    Referencing a variable missing from the context is an error rather than
    an empty string, so typos in templates surface immediately.
    """

    def __init__(self) -> None:
        self.env = Environment(
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            loader=_StandaloneLoader(),
        )
        # Register custom filters
        self.env.filters["slugify"] = _slugify_filter
        self.env.filters["pascal_case"] = _pascal_case_filter
        self.env.filters["snake_case"] = _snake_case_filter
        self.env.filters["camel_case"] = _camel_case_filter

    def render(self, template: str | bytes, context: Mapping[str, Any]) -> str:
        """Render *template* with the provided context.

        Args:
            template: Template text, or UTF-8 encoded bytes.
            context: Mapping of variable names available inside the template.

        Returns:
            The rendered text.

        Raises:
            RenderError: On syntax errors, unknown variables, failing
                expressions (e.g. division by zero), includes, or bytes
                that are not valid UTF-8.
        """
        if isinstance(template, bytes):
            try:
                template = template.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise RenderError(f"Template is not valid UTF-8 text: {exc}") from exc
        try:
            return self.env.from_string(template).render(dict(context))
        except TemplateError as exc:
            raise RenderError(_describe(exc)) from exc
        except (TypeError, ValueError, ArithmeticError, LookupError) as exc:
            raise RenderError(f"{type(exc).__name__}: {exc}") from exc

    def render_segment(
        self, segment: str, path: str, context: Mapping[str, Any]
    ) -> str:
        """Render one component of a template-relative path.

        Args:
            segment: The literal path component (a directory or file name).
            path: The literal full template-relative path it belongs to,
                reported on failure.
            context: Rendering context.

        Raises:
            PathRenderError: If rendering fails, or the result is not a
                usable single path component.
        """
        if "{" not in segment:
            return segment
        try:
            rendered = self.render(segment, context)
        except RenderError as exc:
            raise PathRenderError(segment, path, str(exc)) from exc

        if rendered.strip() in ("", ".", ".."):
            raise PathRenderError(segment, path, f"renders to an invalid name {rendered!r}")
        if "/" in rendered or (os.altsep and os.altsep in rendered) or os.sep in rendered:
            raise PathRenderError(
                segment, path, f"renders to {rendered!r}, which contains a path separator"
            )
        return rendered


def has_template_syntax(text: str) -> bool:
    """Return ``True`` if *text* contains Jinja2 expression or statement delimiters."""
    return any(marker in text for marker in ("{{", "{%", "{#"))


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------

def _slugify_filter(value: str) -> str:
    """Convert a string to a URL/filename-safe slug."""
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower().strip())
    return slug.strip("-")


def _pascal_case_filter(value: str) -> str:
    """Convert ``some-thing`` or ``some_thing`` to ``SomeThing``."""
    parts = re.split(r"[-_\s]+", value)
    return "".join(word.capitalize() for word in parts if word)


def _snake_case_filter(value: str) -> str:
    """Convert ``SomeThing`` or ``some-thing`` to ``some_thing``."""
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", value)
    s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
    return re.sub(r"[-\s]+", "_", s2).lower()


def _camel_case_filter(value: str) -> str:
    """Convert ``some-thing`` or ``some_thing`` to ``someThing``."""
    pascal = _pascal_case_filter(value)
    if pascal:
        return pascal[0].lower() + pascal[1:]
    return ""


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

class _StandaloneLoader(BaseLoader):
    """Rejects ``include``/``extends``/``import``: every file renders on its own."""

    def get_source(self, environment: Environment, template: str):
        raise TemplateNotFound(
            template,
            f"cannot load '{template}': include, extends and import are not supported",
        )


def _describe(exc: TemplateError) -> str:
    lineno = getattr(exc, "lineno", None)
    kind = type(exc).__name__
    if lineno:
        return f"{kind} on line {lineno}: {exc.message}"
    return f"{kind}: {exc.message}"
