"""Registry of named templates.

Maps template names to their directories so ``stamp use <name>`` can find
them.  The registry is a small JSON document stored in the configuration
directory::

    {
      "templates": {
        "axum_server": {"description": "Axum web server", "path": "/home/me/templates/axum_server"}
      }
    }

Reads and writes are plain file operations without locking.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from .config import StampConfig
from .errors import ManifestError, RegistryError
from .manifest import MANIFEST_NAMES, load_manifest


class RegistryEntry(BaseModel):
    """A registered template."""
    description: Optional[str] = None
    path: str


class RegistryData(BaseModel):
    """On-disk layout of the registry file."""
    templates: dict[str, RegistryEntry] = Field(default_factory=dict)


class Registry:
    """Loads, queries and updates the template registry of one configuration."""

    def __init__(self, config: StampConfig) -> None:
        self.config = config
        self.data = self._load()

    # -- Persistence -------------------------------------------------------

    def _load(self) -> RegistryData:
        path = self.config.registry_path
        if not path.exists():
            return RegistryData()
        try:
            return RegistryData.model_validate_json(path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise RegistryError(f"Cannot read registry {path}: {exc.strerror or exc}") from exc
        except ValidationError as exc:
            raise RegistryError(f"Registry file {path} is corrupt") from exc

    def save(self) -> Path:
        """Write the registry to disk and return the file path."""
        path = self.config.registry_path
        try:
            self.config.ensure_directories()
            path.write_text(self.data.model_dump_json(indent=2), encoding="utf-8")
        except OSError as exc:
            raise RegistryError(f"Cannot write registry {path}: {exc.strerror or exc}") from exc
        return path

    # -- Queries -----------------------------------------------------------

    def entries(self) -> dict[str, RegistryEntry]:
        """Return registered templates sorted by name."""
        return dict(sorted(self.data.templates.items()))

    def resolve(self, name: str) -> Path:
        """Return the directory of the template registered as *name*.

        Raises:
            RegistryError: If no template has that name.
        """
        entry = self.data.templates.get(name)
        if entry is None:
            raise RegistryError(f"Template '{name}' not found in registry")
        return Path(entry.path)

    # -- Updates -----------------------------------------------------------

    def register(self, path: str | Path) -> list[str]:
        """Register the template at *path*, or every template directly below it.

        A directory holding a manifest is registered itself; otherwise each
        immediate subdirectory holding a manifest is.  The template name is
        the manifest's ``meta.name``, falling back to the directory name.
        Existing entries with the same name are replaced.  Changes are kept
        in memory until :meth:`save`.

        Returns:
            The names registered, sorted.

        Raises:
            RegistryError: If *path* is not a directory or holds no template.
            ManifestError: If a candidate manifest is invalid.
        """
        root = Path(path).expanduser().resolve()
        if not root.is_dir():
            raise RegistryError(f"Not a directory: {root}")

        if _has_manifest(root):
            candidates = [root]
        else:
            candidates = sorted(p for p in root.iterdir() if p.is_dir() and _has_manifest(p))
        if not candidates:
            raise RegistryError(f"No templates found in {root}")

        registered: list[str] = []
        for directory in candidates:
            try:
                manifest = load_manifest(directory)
            except ManifestError as exc:
                raise ManifestError(f"Cannot register {directory}", exc.errors or [str(exc)]) from exc
            name = manifest.meta.name or directory.name
            self.data.templates[name] = RegistryEntry(
                description=manifest.meta.description,
                path=str(directory),
            )
            registered.append(name)
        return sorted(registered)

    def remove(self, name: str) -> RegistryEntry:
        """Unregister *name* and return its entry.

        Raises:
            RegistryError: If no template has that name.
        """
        try:
            return self.data.templates.pop(name)
        except KeyError:
            raise RegistryError(f"Template '{name}' not found in registry") from None


def _has_manifest(directory: Path) -> bool:
    return any((directory / name).is_file() for name in MANIFEST_NAMES)
