"""Shared pytest fixtures for the stamp test suite.

Provides reusable fixtures for:
- Writing template trees to temporary directories
- A small "README" template with a parametrized directory
- Manifest documents covering every question kind
- An isolated configuration directory for registry tests
"""

from __future__ import annotations

import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

from stamp.config import StampConfig


# ---------------------------------------------------------------------------
# Template trees
# ---------------------------------------------------------------------------

def _write_tree(root: Path, files: dict[str, str | bytes]) -> Path:
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def write_tree() -> Callable[[Path, dict[str, str | bytes]], Path]:
    """Write ``{relative_path: content}`` below a root directory."""
    return _write_tree


README_MANIFEST = textwrap.dedent("""\
    meta:
      name: readme
      description: A project with a README
    questions:
      - id: project
        kind: string
        prompt: Project name
      - id: name
        kind: string
        prompt: Your name
""")


@pytest.fixture
def readme_template(tmp_path: Path) -> Path:
    """Template with ``{{project}}/README.md.tera`` and a static sibling file."""
    return _write_tree(tmp_path / "template", {
        "stamp.yaml": README_MANIFEST,
        "{{project}}/README.md.tera": "Hello {{name}}",
        "{{project}}/LICENSE": "MIT License\n",
    })


@pytest.fixture
def readme_answers() -> dict[str, str]:
    return {"project": "demo", "name": "Ada"}


@pytest.fixture
def destination(tmp_path: Path) -> Path:
    """Empty destination directory (not created)."""
    return tmp_path / "out"


# ---------------------------------------------------------------------------
# Manifests
# ---------------------------------------------------------------------------

@pytest.fixture
def full_manifest_yaml() -> str:
    """A valid manifest using every question kind."""
    return textwrap.dedent("""\
        meta:
          name: axum_server
          description: Axum web server
        questions:
          - id: project
            kind: string
            prompt: Project name
            default: demo
          - id: use_tls
            kind: bool
            prompt: Enable TLS?
            default: false
          - id: license
            kind: select
            prompt: License
            options: [MIT, Apache-2.0]
            default: MIT
          - id: features
            kind: multiselect
            prompt: Optional features
            choices:
              - {id: docker, prompt: Dockerfile, default: true}
              - {id: ci, prompt: CI workflow}
        exclude:
          - "drafts"
    """)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@pytest.fixture
def stamp_config(tmp_path: Path) -> StampConfig:
    """Configuration pointing at a throwaway directory."""
    return StampConfig(config_dir=tmp_path / "config")
