"""Conflict policies applied to planned file actions.

A conflict is a planned destination that already exists.  One strategy
applies to a whole run:

- ``fail``: abort before anything is written, listing every conflict.
- ``skip``: leave existing files alone and write the rest.
- ``overwrite``: write everything, replacing existing files.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Sequence
from enum import Enum
from pathlib import Path

from .errors import ConflictError
from .planner import DirectoryTree, FileAction, split_marker, walk_template
from .renderer import has_template_syntax


class ConflictStrategy(str, Enum):
    """How existing destination files are handled."""
    FAIL = "fail"
    SKIP = "skip"
    OVERWRITE = "overwrite"


def strategy_from_flags(overwrite_conflicts: bool, skip_conflicts: bool) -> ConflictStrategy:
    """Map the CLI conflict flags to a strategy (neither flag means fail)."""
    if overwrite_conflicts and skip_conflicts:
        raise ValueError("--overwrite-conflicts and --skip-conflicts are mutually exclusive")
    if overwrite_conflicts:
        return ConflictStrategy.OVERWRITE
    if skip_conflicts:
        return ConflictStrategy.SKIP
    return ConflictStrategy.FAIL


def resolve(
    actions: Sequence[FileAction],
    strategy: ConflictStrategy,
    *,
    exists: Callable[[Path], bool] | None = None,
) -> list[FileAction]:
    """Apply *strategy* to *actions* against the current destination state.

    Args:
        actions: Planned actions, destinations already rendered.
        strategy: The run's conflict strategy.
        exists: Existence check; ``os.path.lexists`` by default.

    Returns:
        The actions that should be executed, in their original order.

    Raises:
        ConflictError: Under ``fail``, if any destination exists.
    """
    if strategy is ConflictStrategy.OVERWRITE:
        return list(actions)

    exists = exists or os.path.lexists

    if strategy is ConflictStrategy.FAIL:
        conflicts = [a.destination for a in actions if exists(a.destination)]
        if conflicts:
            raise ConflictError(conflicts)
        return list(actions)

    return [a for a in actions if not exists(a.destination)]


def precheck_conflicts(
    template_root: str | Path,
    destination_root: str | Path,
    exclude: Sequence[str] = (),
) -> None:
    """Detect conflicts on literal template paths before any question is asked.

    Only files whose relative path contains no template syntax are checked,
    since their destination is known without a context.  This is a shortcut
    for the fail strategy; :func:`resolve` remains the authoritative check.

    Raises:
        ConflictError: Listing the literal destinations that already exist.
    """
    root = Path(template_root)
    dest_root = Path(destination_root).resolve()
    if not dest_root.exists():
        return

    conflicts: list[Path] = []
    for relative in walk_template(DirectoryTree(root), exclude):
        if has_template_syntax(relative.as_posix()):
            continue
        output_name, _ = split_marker(relative.name)
        destination = dest_root.joinpath(*relative.parts[:-1], output_name)
        if os.path.lexists(destination):
            conflicts.append(destination)

    if conflicts:
        raise ConflictError(conflicts)
