"""Template instantiation pipeline.

Runs the stages in order, each consuming the previous one's complete output:

1. Load and validate the manifest.
2. Under the fail strategy, check literal destinations early so the user is
   not asked questions for a run that cannot succeed.
3. Collect answers and build the read-only context.
4. Plan file actions (rendering every path segment).
5. Apply the conflict strategy to the planned destinations.
6. Execute the remaining actions.

Any stage failing raises a :class:`~stamp.errors.StampError` and stops the
run; nothing is retried.  Files written before an execution failure stay.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

from .conflicts import ConflictStrategy, precheck_conflicts, resolve
from .context import Context, build_context
from .executor import execute
from .manifest import TemplateManifest, load_manifest
from .planner import FileAction, plan
from .renderer import TemplateRenderer

Answers = Union[Mapping[str, Any], Callable[[TemplateManifest], Mapping[str, Any]]]


@dataclass
class InstantiationResult:
    """Outcome of one successful run."""

    template_root: Path
    destination: Path
    manifest: TemplateManifest
    context: Context
    planned: list[FileAction] = field(default_factory=list)
    written: list[Path] = field(default_factory=list)

    @property
    def skipped(self) -> int:
        """Number of planned files left untouched because they existed."""
        return len(self.planned) - len(self.written)


def instantiate(
    template_root: str | Path,
    destination: str | Path,
    answers: Answers,
    *,
    strategy: ConflictStrategy = ConflictStrategy.FAIL,
    use_defaults: bool = False,
    renderer: TemplateRenderer | None = None,
) -> InstantiationResult:
    """Instantiate the template at *template_root* into *destination*.

    Args:
        template_root: Directory holding the manifest and template files.
        destination: Directory to create files in (created if missing).
        answers: Answers per question id, or a callable receiving the
            manifest and returning them (e.g. the interactive prompts).
        strategy: How existing destination files are handled.
        use_defaults: Fill unanswered questions from their defaults.
        renderer: Renderer shared by path and content rendering.

    Returns:
        What was planned and written.
    """
    root = Path(template_root).resolve()
    dest = Path(destination).resolve()
    renderer = renderer or TemplateRenderer()

    manifest = load_manifest(root)

    if strategy is ConflictStrategy.FAIL:
        precheck_conflicts(root, dest, manifest.exclude)

    raw_answers = answers(manifest) if callable(answers) else answers
    context = build_context(manifest, raw_answers, use_defaults=use_defaults)

    actions = plan(root, dest, context, renderer=renderer, exclude=manifest.exclude)
    runnable = resolve(actions, strategy)
    written = execute(runnable, context, renderer=renderer)

    return InstantiationResult(
        template_root=root,
        destination=dest,
        manifest=manifest,
        context=context,
        planned=actions,
        written=written,
    )
