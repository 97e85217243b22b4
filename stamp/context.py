"""Build the rendering context from answered questions.

The context maps each question id to a typed value (``str`` for string and
select questions, ``bool`` for bool questions, ``list[str]`` of selected
choice ids for multiselect questions).  Every multiselect choice id is also
bound to a ``bool`` telling whether it was selected, so templates can write
``{% if docker %}`` directly.

Answers may arrive already typed (from the interactive prompts) or as
strings (from ``--set key=value``); both are coerced here.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from .errors import ContextError
from .manifest import (
    BoolQuestion,
    MultiSelectQuestion,
    Question,
    SelectQuestion,
    StringQuestion,
    TemplateManifest,
)

Context = Mapping[str, Any]

_TRUE_WORDS = frozenset({"y", "yes", "true", "on", "1"})
_FALSE_WORDS = frozenset({"n", "no", "false", "off", "0"})


def build_context(
    manifest: TemplateManifest,
    answers: Mapping[str, Any],
    *,
    use_defaults: bool = False,
) -> Context:
    """Coerce *answers* into a read-only context for *manifest*.

    Args:
        manifest: The validated template manifest.
        answers: Answer per question id.
        use_defaults: Fill unanswered questions from their defaults instead
            of reporting them as missing.

    Returns:
        An immutable mapping suitable for rendering.

    Raises:
        ContextError: Listing every missing, unknown, or invalid answer.
    """
    errors: list[str] = []
    values: dict[str, Any] = {}
    known = set(manifest.question_ids())

    for key in answers:
        if key not in known:
            errors.append(f"'{key}' is not a question of this template")

    for question in manifest.questions:
        if question.id in answers:
            raw = answers[question.id]
        elif use_defaults and has_default(question):
            raw = default_answer(question)
        else:
            errors.append(f"no answer for '{question.id}'")
            continue

        try:
            value = coerce_answer(question, raw)
        except ValueError as exc:
            errors.append(f"'{question.id}': {exc}")
            continue

        values[question.id] = value
        if isinstance(question, MultiSelectQuestion):
            for choice in question.choices:
                values[choice.id] = choice.id in value

    if errors:
        raise ContextError(errors)
    return MappingProxyType(values)


def coerce_answer(question: Question, raw: Any) -> Any:
    """Convert one raw answer to the type required by *question*.

    Raises:
        ValueError: If the answer does not fit the question.
    """
    if isinstance(question, StringQuestion):
        if isinstance(raw, (list, tuple, dict)):
            raise ValueError("expected text")
        return str(raw)

    if isinstance(question, BoolQuestion):
        if isinstance(raw, bool):
            return raw
        word = str(raw).strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
        raise ValueError(f"expected yes/no, got {raw!r}")

    if isinstance(question, SelectQuestion):
        value = str(raw)
        if value not in question.options:
            raise ValueError(
                f"{value!r} is not one of: {', '.join(question.options)}"
            )
        return value

    # Multiselect
    if isinstance(raw, str):
        selected = [part.strip() for part in raw.split(",") if part.strip()]
    elif isinstance(raw, (list, tuple, set, frozenset)):
        selected = [str(part) for part in raw]
    else:
        raise ValueError(f"expected a list of choice ids, got {raw!r}")

    valid = [c.id for c in question.choices]
    unknown = [s for s in selected if s not in valid]
    if unknown:
        raise ValueError(
            f"unknown choice(s) {', '.join(unknown)}; valid: {', '.join(valid)}"
        )
    # Keep manifest order regardless of answer order.
    return [c for c in valid if c in selected]


def has_default(question: Question) -> bool:
    """Return ``True`` if *question* can be answered without asking."""
    if isinstance(question, MultiSelectQuestion):
        return True
    return question.default is not None


def default_answer(question: Question) -> Any:
    """Return the default answer of *question* (``None`` if it has none)."""
    if isinstance(question, MultiSelectQuestion):
        return [c.id for c in question.choices if c.default]
    return question.default
