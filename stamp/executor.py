"""Write planned file actions to disk.

Execution is not transactional: actions run in order and the first failure
stops the run, leaving every file written before it in place.
"""

from __future__ import annotations

import shutil
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from .errors import ExecutionError, RenderError
from .planner import FileAction
from .renderer import TemplateRenderer


def execute(
    actions: Sequence[FileAction],
    context: Mapping[str, Any],
    *,
    renderer: TemplateRenderer | None = None,
) -> list[Path]:
    """Perform every action in order.

    Template files are re-read and rendered with *context*, the same context
    used to render their paths; other files are copied verbatim.  Permission
    bits of the source are kept in both cases.

    Returns:
        The destinations written, in order.

    Raises:
        RenderError: If a template's contents cannot be rendered.
        ExecutionError: If a directory, read, write or copy fails.
    """
    renderer = renderer or TemplateRenderer()
    written: list[Path] = []

    for action in actions:
        if action.is_template:
            _render_file(action, context, renderer)
        else:
            _copy_file(action)
        written.append(action.destination)

    return written


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _make_parent(action: FileAction) -> None:
    try:
        action.destination.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise _io_error(action, exc) from exc


def _render_file(
    action: FileAction, context: Mapping[str, Any], renderer: TemplateRenderer
) -> None:
    try:
        template = action.source.read_bytes()
    except OSError as exc:
        raise _io_error(action, exc) from exc

    try:
        rendered = renderer.render(template, context)
    except RenderError as exc:
        raise RenderError(f"Failed to render {action.source}: {exc}") from exc

    _make_parent(action)
    try:
        action.destination.write_bytes(rendered.encode("utf-8"))
        shutil.copymode(action.source, action.destination)
    except OSError as exc:
        raise _io_error(action, exc) from exc


def _copy_file(action: FileAction) -> None:
    _make_parent(action)
    try:
        shutil.copy2(action.source, action.destination)
    except OSError as exc:
        raise _io_error(action, exc) from exc


def _io_error(action: FileAction, exc: OSError) -> ExecutionError:
    return ExecutionError(action.source, action.destination, exc.strerror or str(exc))
