"""stamp configuration.

Typed configuration built once by the CLI entry point and passed explicitly
to the parts that need it (currently the template registry).  Nothing here
is global: two ``StampConfig`` instances pointing at different directories
can coexist, which is what the tests rely on.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field


def default_config_dir() -> Path:
    """Return the per-user configuration directory.

    ``$XDG_CONFIG_HOME/stamp`` when the variable is set, otherwise
    ``~/.config/stamp``.
    """
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / "stamp"


class StampConfig(BaseModel):
    """Locations of stamp's persistent state."""

    config_dir: Path = Field(default_factory=default_config_dir)
    registry_name: str = Field(default="template_registry.json", min_length=1)

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def registry_path(self) -> Path:
        """Path to the JSON file holding registered templates."""
        return self.config_dir / self.registry_name

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls, config_dir: str | Path | None = None) -> "StampConfig":
        """Build a ``StampConfig`` from the environment.

        Args:
            config_dir: Explicit directory (e.g. from ``--config-dir``); takes
                precedence over ``STAMP_CONFIG_DIR``.
        """
        if config_dir is not None:
            return cls(config_dir=Path(config_dir).expanduser())
        if os.environ.get("STAMP_CONFIG_DIR"):
            return cls(config_dir=Path(os.environ["STAMP_CONFIG_DIR"]).expanduser())
        return cls()

    def ensure_directories(self) -> None:
        """Create the configuration directory if it does not exist."""
        self.config_dir.mkdir(parents=True, exist_ok=True)
