"""Template manifest loading and validation.

A template root holds exactly one manifest (``stamp.yaml``, ``stamp.yml`` or
``stamp.toml``) declaring the template's metadata and the questions whose
answers become the rendering context.  Example::

    meta:
      name: axum_server
      description: Axum web server skeleton
    questions:
      - id: project
        kind: string
        prompt: Project name
        default: demo
      - id: license
        kind: select
        prompt: License
        options: [MIT, Apache-2.0]
      - id: features
        kind: multiselect
        prompt: Optional features
        choices:
          - {id: docker, prompt: Dockerfile, default: true}
    exclude:
      - "docs/drafts"

Documents are first deserialized into permissive models, then every question
is checked and *all* problems are raised together as one
:class:`~stamp.errors.ManifestError`.  Only a manifest that passes is turned
into the typed, frozen :class:`TemplateManifest`.
"""

from __future__ import annotations

import tomllib
from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ManifestError


MANIFEST_NAMES: tuple[str, ...] = ("stamp.yaml", "stamp.yml", "stamp.toml")


# ---------------------------------------------------------------------------
# Typed manifest
# ---------------------------------------------------------------------------


class QuestionKind(str, Enum):
    """Kinds of question a manifest may declare."""
    STRING = "string"
    BOOL = "bool"
    SELECT = "select"
    MULTISELECT = "multiselect"


class Choice(BaseModel):
    """One selectable entry of a multiselect question."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., min_length=1, description="Context key set to True when selected")
    prompt: str = Field(default="", description="Text shown to the user")
    default: bool = Field(default=False, description="Whether the choice starts selected")


class _QuestionBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., min_length=1, description="Context binding name")
    prompt: str = Field(..., description="Text shown to the user")


class StringQuestion(_QuestionBase):
    """Free-text answer."""
    kind: Literal["string"] = "string"
    default: Optional[str] = None


class BoolQuestion(_QuestionBase):
    """Yes/no answer."""
    kind: Literal["bool"] = "bool"
    default: Optional[bool] = None


class SelectQuestion(_QuestionBase):
    """Exactly one of a fixed list of options."""
    kind: Literal["select"] = "select"
    options: tuple[str, ...] = Field(..., min_length=1)
    default: Optional[str] = None


class MultiSelectQuestion(_QuestionBase):
    """Any subset of a fixed list of choices."""
    kind: Literal["multiselect"] = "multiselect"
    choices: tuple[Choice, ...] = Field(..., min_length=1)


Question = Annotated[
    Union[StringQuestion, BoolQuestion, SelectQuestion, MultiSelectQuestion],
    Field(discriminator="kind"),
]


class TemplateMeta(BaseModel):
    """Identity of a template."""
    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    description: Optional[str] = None


class TemplateManifest(BaseModel):
    """Validated, immutable manifest of one template."""
    model_config = ConfigDict(frozen=True)

    meta: TemplateMeta = Field(default_factory=TemplateMeta)
    questions: tuple[Question, ...] = ()
    exclude: tuple[str, ...] = Field(
        default=(),
        description="Glob patterns (template-relative) never instantiated",
    )

    def question_ids(self) -> list[str]:
        return [q.id for q in self.questions]


# ---------------------------------------------------------------------------
# Permissive input models
# ---------------------------------------------------------------------------


class _RawChoice(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1)
    prompt: str = ""
    default: bool = False


class _RawQuestion(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1)
    kind: QuestionKind
    prompt: Optional[str] = None
    default: Any = None
    options: Optional[list[str]] = None
    choices: Optional[list[_RawChoice]] = None

    @field_validator("kind", mode="before")
    @classmethod
    def _lowercase_kind(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class _RawMeta(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None


class _RawManifest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    meta: _RawMeta = Field(default_factory=_RawMeta)
    questions: list[_RawQuestion] = Field(default_factory=list)
    exclude: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def find_manifest(template_root: str | Path) -> Path:
    """Return the path of the manifest file inside *template_root*.

    Raises:
        ManifestError: If the directory does not exist or holds no manifest.
    """
    root = Path(template_root)
    if not root.is_dir():
        raise ManifestError(f"Template directory not found: {root}")
    for name in MANIFEST_NAMES:
        candidate = root / name
        if candidate.is_file():
            return candidate
    raise ManifestError(
        f"No manifest found in {root} (expected one of: {', '.join(MANIFEST_NAMES)})"
    )


def load_manifest(template_root: str | Path) -> TemplateManifest:
    """Locate, read and validate the manifest of a template directory."""
    path = find_manifest(template_root)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise ManifestError(f"Cannot read manifest {path}: {exc.strerror or exc}") from exc
    fmt = "toml" if path.suffix == ".toml" else "yaml"
    return parse_manifest(data, fmt=fmt, source=str(path))


def parse_manifest(
    data: str | bytes,
    *,
    fmt: str = "yaml",
    source: str = "<manifest>",
) -> TemplateManifest:
    """Parse and validate a manifest document.

    Args:
        data: Raw manifest text or bytes.
        fmt: ``"yaml"`` or ``"toml"``.
        source: Name used in error messages (usually the file path).

    Returns:
        The validated manifest.

    Raises:
        ManifestError: On malformed documents, or with every semantic
            violation found when validation fails.
    """
    document = _load_document(data, fmt, source)
    if "variables" in document and "questions" not in document:
        document = _convert_legacy(document, source)

    try:
        raw = _RawManifest.model_validate(document)
    except ValidationError as exc:
        raise ManifestError(
            f"{source}: malformed manifest", _format_validation_errors(exc, document)
        ) from exc

    errors = validate_questions(raw.questions)
    if errors:
        raise ManifestError(f"{source}: invalid manifest", errors)

    return TemplateManifest(
        meta=TemplateMeta(name=raw.meta.name, description=raw.meta.description),
        questions=tuple(_to_question(q) for q in raw.questions),
        exclude=tuple(raw.exclude),
    )


def validate_questions(questions: list[_RawQuestion]) -> list[str]:
    """Return every semantic violation found in *questions* (empty if valid)."""
    errors: list[str] = []
    seen_ids: set[str] = set()

    for q in questions:
        label = f"question '{q.id}'"
        if q.id in seen_ids:
            errors.append(f"duplicate question id '{q.id}'")
        seen_ids.add(q.id)

        has_options = q.options is not None
        has_choices = q.choices is not None

        if has_options and has_choices:
            errors.append(f"{label}: cannot have both `options` and `choices`")
        elif q.kind is QuestionKind.SELECT:
            if not has_options:
                errors.append(f"{label}: select question requires `options`")
            elif not q.options:
                errors.append(f"{label}: `options` must not be empty")
            if has_choices:
                errors.append(f"{label}: select question cannot have `choices`")
        elif q.kind is QuestionKind.MULTISELECT:
            if not has_choices:
                errors.append(f"{label}: multiselect question requires `choices`")
            elif not q.choices:
                errors.append(f"{label}: `choices` must not be empty")
            if has_options:
                errors.append(f"{label}: multiselect question cannot have `options`")
        else:
            if has_options:
                errors.append(f"{label}: {q.kind.value} question cannot have `options`")
            if has_choices:
                errors.append(f"{label}: {q.kind.value} question cannot have `choices`")

        errors.extend(_default_errors(q, label))

    # Choice ids become context keys alongside question ids.
    keys = {q.id for q in questions}
    for q in questions:
        if q.kind is not QuestionKind.MULTISELECT or not q.choices:
            continue
        for choice in q.choices:
            if choice.id in keys:
                errors.append(
                    f"question '{q.id}': choice id '{choice.id}' clashes with "
                    "another question or choice id"
                )
            keys.add(choice.id)

    return errors


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _default_errors(q: _RawQuestion, label: str) -> list[str]:
    if q.default is None:
        return []
    if q.kind is QuestionKind.STRING:
        if isinstance(q.default, bool) or not isinstance(q.default, (str, int, float)):
            return [f"{label}: default must be a string"]
    elif q.kind is QuestionKind.BOOL:
        if not isinstance(q.default, bool):
            return [f"{label}: default must be a boolean"]
    elif q.kind is QuestionKind.SELECT:
        if not isinstance(q.default, str):
            return [f"{label}: default must be a string"]
        if q.options and q.default not in q.options:
            return [f"{label}: default '{q.default}' is not one of the options"]
    elif q.kind is QuestionKind.MULTISELECT:
        return [f"{label}: multiselect defaults are set per choice, not on the question"]
    return []


def _to_question(q: _RawQuestion) -> Question:
    prompt = q.prompt or q.id
    if q.kind is QuestionKind.STRING:
        default = None if q.default is None else str(q.default)
        return StringQuestion(id=q.id, prompt=prompt, default=default)
    if q.kind is QuestionKind.BOOL:
        return BoolQuestion(id=q.id, prompt=prompt, default=q.default)
    if q.kind is QuestionKind.SELECT:
        return SelectQuestion(
            id=q.id, prompt=prompt, options=tuple(q.options or ()), default=q.default
        )
    return MultiSelectQuestion(
        id=q.id,
        prompt=prompt,
        choices=tuple(
            Choice(id=c.id, prompt=c.prompt or c.id, default=c.default)
            for c in q.choices or ()
        ),
    )


def _load_document(data: str | bytes, fmt: str, source: str) -> dict[str, Any]:
    try:
        if fmt == "toml":
            text = data.decode("utf-8") if isinstance(data, bytes) else data
            document = tomllib.loads(text)
        elif fmt == "yaml":
            document = yaml.safe_load(data)
        else:
            raise ManifestError(f"{source}: unsupported manifest format '{fmt}'")
    except (yaml.YAMLError, tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
        raise ManifestError(f"{source}: cannot parse manifest: {exc}") from exc

    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ManifestError(f"{source}: manifest must be a mapping at the top level")
    return document


def _convert_legacy(document: dict[str, Any], source: str) -> dict[str, Any]:
    """Convert the flat ``name``/``description``/``variables`` layout."""
    variables = document.get("variables") or {}
    if not isinstance(variables, dict):
        raise ManifestError(f"{source}: `variables` must be a mapping of name to settings")

    errors = [
        f"variable '{key}': settings must be a mapping"
        for key, settings in variables.items()
        if settings is not None and not isinstance(settings, dict)
    ]
    if errors:
        raise ManifestError(f"{source}: malformed manifest", errors)

    questions: list[dict[str, Any]] = []
    for key, settings in variables.items():
        settings = settings or {}
        questions.append({
            "id": str(key),
            "kind": "string",
            "prompt": settings.get("description") or str(key),
            "default": settings.get("default"),
        })

    converted: dict[str, Any] = {
        "meta": {
            "name": document.get("name"),
            "description": document.get("description"),
        },
        "questions": questions,
    }
    if "exclude" in document:
        converted["exclude"] = document["exclude"]
    return converted


def _format_validation_errors(exc: ValidationError, document: dict[str, Any]) -> list[str]:
    """Turn pydantic errors into messages that name questions by id."""
    raw_questions = document.get("questions")
    messages: list[str] = []
    for err in exc.errors():
        loc = list(err["loc"])
        if (
            len(loc) >= 2
            and loc[0] == "questions"
            and isinstance(loc[1], int)
            and isinstance(raw_questions, list)
            and loc[1] < len(raw_questions)
        ):
            entry = raw_questions[loc[1]]
            qid = entry.get("id") if isinstance(entry, dict) else None
            name = f"question '{qid}'" if qid else f"question #{loc[1] + 1}"
            loc = [name, *loc[2:]]
        where = ".".join(str(part) for part in loc) or "manifest"
        messages.append(f"{where}: {err['msg']}")
    return messages
