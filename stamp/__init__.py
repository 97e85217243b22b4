"""stamp -- instantiate project templates.

A template is a directory holding a manifest (``stamp.yaml``) of questions
plus the files to produce.  File and directory names may contain Jinja2
expressions, and files marked with ``.tera`` have their contents rendered.

Quick usage::

    from stamp import ConflictStrategy, instantiate

    result = instantiate(
        "templates/axum_server",
        "/tmp/my-server",
        {"project": "demo", "name": "Ada"},
        strategy=ConflictStrategy.SKIP,
    )
    print(result.written)
"""

__version__ = "0.1.0"

from stamp.conflicts import ConflictStrategy, resolve
from stamp.context import build_context
from stamp.executor import execute
from stamp.manifest import TemplateManifest, load_manifest, parse_manifest
from stamp.pipeline import InstantiationResult, instantiate
from stamp.planner import FileAction, plan
from stamp.renderer import TemplateRenderer

__all__ = [
    "ConflictStrategy",
    "FileAction",
    "InstantiationResult",
    "TemplateManifest",
    "TemplateRenderer",
    "build_context",
    "execute",
    "instantiate",
    "load_manifest",
    "parse_manifest",
    "plan",
    "resolve",
]
