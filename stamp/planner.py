"""Turn a template tree into an ordered list of file actions.

Every file below the template root (except the manifest and excluded paths)
becomes one :class:`FileAction`.  Destination paths are computed by
rendering each path segment on its own, so both directory and file names can
be parametrized (``{{ project }}/src/main.rs``) and a failure points at the
exact segment.  Files whose name carries the ``.tera`` marker, either as the
last extension (``README.md.tera``) or as an inner one (``config.tera.json``),
have their contents rendered and the marker removed from the output name;
all other files are copied byte for byte.

Planning never touches the destination filesystem.
"""

from __future__ import annotations

import fnmatch
import os
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any, Protocol

from .errors import PlanError
from .manifest import MANIFEST_NAMES
from .renderer import TemplateRenderer


TEMPLATE_MARKER = "tera"

# Always skipped, in addition to the manifest's own ``exclude`` patterns.
DEFAULT_EXCLUDES: tuple[str, ...] = (".git",)


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FileAction:
    """One file to produce at the destination."""

    source: Path
    destination: Path
    is_template: bool


# ---------------------------------------------------------------------------
# Template trees
# ---------------------------------------------------------------------------


class TemplateTree(Protocol):
    """Read-only view of a template directory.

    ``list_dir`` returns ``(name, is_dir)`` pairs for the entries of the
    directory at *relative* (``PurePosixPath(".")`` is the root).
    """

    def list_dir(self, relative: PurePosixPath) -> list[tuple[str, bool]]: ...


class DirectoryTree:
    """A :class:`TemplateTree` backed by a directory on disk."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def list_dir(self, relative: PurePosixPath) -> list[tuple[str, bool]]:
        directory = self.root.joinpath(*relative.parts)
        try:
            with os.scandir(directory) as entries:
                return [(entry.name, entry.is_dir()) for entry in entries]
        except OSError as exc:
            raise PlanError(f"Cannot list template directory {directory}: {exc.strerror or exc}") from exc


def walk_template(
    tree: TemplateTree, exclude: Sequence[str] = ()
) -> Iterator[PurePosixPath]:
    """Yield the template-relative path of every file to instantiate.

    Traversal is depth-first with entries visited in sorted name order, so
    a given tree always yields the same sequence.  The root manifest is
    skipped and excluded directories are pruned without being descended.
    """
    patterns = (*DEFAULT_EXCLUDES, *exclude)

    def _walk(relative: PurePosixPath) -> Iterator[PurePosixPath]:
        for name, is_dir in sorted(tree.list_dir(relative)):
            child = relative / name
            if not is_dir and len(child.parts) == 1 and name in MANIFEST_NAMES:
                continue
            if is_excluded(child, patterns):
                continue
            if is_dir:
                yield from _walk(child)
            else:
                yield child

    yield from _walk(PurePosixPath("."))


def is_excluded(relative: PurePosixPath, patterns: Sequence[str]) -> bool:
    """Return ``True`` if *relative* matches any exclude pattern.

    Patterns without a ``/`` match a single name at any depth (``.git``,
    ``*.pyc``); patterns with one match the whole template-relative path
    (``docs/drafts``, ``assets/*.psd``).
    """
    posix = relative.as_posix()
    for pattern in patterns:
        pattern = pattern.strip().rstrip("/")
        if not pattern:
            continue
        if "/" in pattern:
            if fnmatch.fnmatchcase(posix, pattern):
                return True
        elif fnmatch.fnmatchcase(relative.name, pattern):
            return True
    return False


def split_marker(name: str) -> tuple[str, bool]:
    """Strip the template marker from a file name.

    Returns:
        ``(output_name, is_template)``.  The marker is removed once, at its
        first occurrence after the stem::

            split_marker("README.md.tera")   -> ("README.md", True)
            split_marker("config.tera.json") -> ("config.json", True)
            split_marker("logo.png")         -> ("logo.png", False)
    """
    parts = name.split(".")
    for index in range(1, len(parts)):
        if parts[index] == TEMPLATE_MARKER and any(parts[:index]):
            return ".".join(parts[:index] + parts[index + 1:]), True
    return name, False


# ---------------------------------------------------------------------------
# Planner
# ---------------------------------------------------------------------------


def plan(
    template_root: str | Path,
    destination_root: str | Path,
    context: Mapping[str, Any],
    *,
    renderer: TemplateRenderer | None = None,
    tree: TemplateTree | None = None,
    exclude: Sequence[str] = (),
) -> list[FileAction]:
    """Compute the file actions needed to instantiate a template.

    Args:
        template_root: Directory holding the template and its manifest.
        destination_root: Directory the template is instantiated into.
        context: Answered questions used to render path segments.
        renderer: Renderer to use; a fresh one by default.
        tree: Tree to enumerate; the template directory on disk by default.
        exclude: Extra exclude patterns, usually ``manifest.exclude``.

    Returns:
        One action per file, in traversal order.

    Raises:
        PathRenderError: If a path segment cannot be rendered.
        PlanError: If the tree cannot be read or two files would be written
            to the same destination.
    """
    root = Path(template_root).resolve()
    dest_root = Path(destination_root).resolve()
    renderer = renderer or TemplateRenderer()
    tree = tree if tree is not None else DirectoryTree(root)

    actions: list[FileAction] = []
    sources_by_destination: dict[Path, list[Path]] = {}

    for relative in walk_template(tree, exclude):
        source = root.joinpath(*relative.parts)
        output_name, is_template = split_marker(relative.name)
        segments = [*relative.parts[:-1], output_name]
        rendered = [
            renderer.render_segment(segment, relative.as_posix(), context)
            for segment in segments
        ]
        destination = dest_root.joinpath(*rendered)

        sources_by_destination.setdefault(destination, []).append(source)
        actions.append(FileAction(source=source, destination=destination, is_template=is_template))

    collisions = {d: s for d, s in sources_by_destination.items() if len(s) > 1}
    if collisions:
        lines = [
            f"  - {dest} <- {', '.join(str(s) for s in sources)}"
            for dest, sources in collisions.items()
        ]
        raise PlanError(
            "Several template files would be written to the same destination:\n"
            + "\n".join(lines)
        )

    return actions
