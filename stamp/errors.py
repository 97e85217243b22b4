"""Exception hierarchy for stamp.

Every failure in the instantiation pipeline is fatal to the run.  Each
exception builds its message in ``__init__`` and keeps the structured data
(error lists, paths) as attributes so callers and tests can inspect it
without parsing text.
"""

from __future__ import annotations

from pathlib import Path


class StampError(Exception):
    """Base class for every error raised by stamp."""


# ---------------------------------------------------------------------------
# Manifest & context
# ---------------------------------------------------------------------------


class ManifestError(StampError):
    """Raised when a manifest is missing, malformed, or fails validation.

    All validation problems found in one pass are collected into
    :attr:`errors` so they can be reported together.
    """

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        self.errors = list(errors or [])
        if self.errors:
            details = "\n".join(f"  - {e}" for e in self.errors)
            message = f"{message}\n{details}"
        super().__init__(message)


class ContextError(StampError):
    """Raised when answers cannot be turned into a valid context."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        details = "\n".join(f"  - {e}" for e in self.errors)
        super().__init__(f"Invalid answers:\n{details}")


# ---------------------------------------------------------------------------
# Rendering & planning
# ---------------------------------------------------------------------------


class RenderError(StampError):
    """Raised when a template string cannot be rendered."""


class PathRenderError(RenderError):
    """Raised when one segment of a template path cannot be rendered."""

    def __init__(self, segment: str, path: str, reason: str) -> None:
        self.segment = segment
        self.path = path
        self.reason = reason
        super().__init__(
            f"Failed to render path segment '{segment}' of '{path}': {reason}"
        )


class PlanError(StampError):
    """Raised when the template tree cannot be turned into file actions."""


# ---------------------------------------------------------------------------
# Conflicts & execution
# ---------------------------------------------------------------------------


class ConflictError(StampError):
    """Raised under the fail strategy when destinations already exist."""

    def __init__(self, conflicts: list[Path]) -> None:
        self.conflicts = list(conflicts)
        listing = "\n".join(f"  - {p}" for p in self.conflicts)
        super().__init__(
            f"{len(self.conflicts)} destination file(s) already exist "
            "(use --overwrite-conflicts or --skip-conflicts):\n"
            f"{listing}"
        )


class ExecutionError(StampError):
    """Raised when writing one action fails.

    Files written before the failure are left in place.
    """

    def __init__(self, source: Path, destination: Path, reason: str) -> None:
        self.source = source
        self.destination = destination
        super().__init__(f"Failed to write {destination} (from {source}): {reason}")


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class RegistryError(StampError):
    """Raised when a registry lookup or update fails."""
