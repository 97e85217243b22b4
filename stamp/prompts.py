"""Interactive prompts collecting answers for a template's questions.

One question is asked per manifest question, in manifest order.  Answers
given up front (``--set key=value``) are not asked again, and with
``use_defaults`` nothing is asked at all: unanswered questions fall back to
their defaults when the context is built.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from rich.console import Console
from rich.prompt import Confirm, Prompt

from .manifest import (
    BoolQuestion,
    MultiSelectQuestion,
    Question,
    SelectQuestion,
    TemplateManifest,
)
from .utils import console as default_console

_PREFIX = "🎤"


def ask_questions(
    manifest: TemplateManifest,
    preset: Mapping[str, Any] | None = None,
    *,
    use_defaults: bool = False,
    console: Console | None = None,
) -> dict[str, Any]:
    """Collect an answer for every question not already in *preset*."""
    answers: dict[str, Any] = dict(preset or {})
    if use_defaults:
        return answers

    console = console or default_console
    for question in manifest.questions:
        if question.id in answers:
            continue
        answers[question.id] = ask_question(question, console)
    return answers


def ask_question(question: Question, console: Console) -> Any:
    """Ask a single question and return the typed answer."""
    text = f"{_PREFIX} {question.prompt}"

    if isinstance(question, MultiSelectQuestion):
        console.print(text)
        return [
            choice.id
            for choice in question.choices
            if Confirm.ask(f"   {choice.prompt}", default=choice.default, console=console)
        ]

    kwargs: dict[str, Any] = {"console": console}
    if question.default is not None:
        kwargs["default"] = question.default

    if isinstance(question, BoolQuestion):
        return Confirm.ask(text, **kwargs)
    if isinstance(question, SelectQuestion):
        return Prompt.ask(text, choices=list(question.options), **kwargs)
    return Prompt.ask(text, **kwargs)
