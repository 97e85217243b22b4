"""Unit tests for context construction (stamp.context)."""

from __future__ import annotations

import pytest

from stamp.context import build_context, coerce_answer, default_answer, has_default
from stamp.errors import ContextError
from stamp.manifest import parse_manifest

pytestmark = pytest.mark.unit


@pytest.fixture
def manifest(full_manifest_yaml):
    return parse_manifest(full_manifest_yaml)


class TestBuildContext:
    def test_typed_answers(self, manifest):
        context = build_context(manifest, {
            "project": "demo",
            "use_tls": True,
            "license": "Apache-2.0",
            "features": ["ci"],
        })
        assert context["project"] == "demo"
        assert context["use_tls"] is True
        assert context["license"] == "Apache-2.0"
        assert context["features"] == ["ci"]

    def test_multiselect_injects_choice_booleans(self, manifest):
        context = build_context(manifest, {
            "project": "demo",
            "use_tls": False,
            "license": "MIT",
            "features": ["docker"],
        })
        assert context["docker"] is True
        assert context["ci"] is False

    def test_string_answers_are_coerced(self, manifest):
        context = build_context(manifest, {
            "project": "demo",
            "use_tls": "yes",
            "license": "MIT",
            "features": "ci, docker",
        })
        assert context["use_tls"] is True
        # Manifest order, not answer order
        assert context["features"] == ["docker", "ci"]

    def test_context_is_read_only(self, manifest):
        context = build_context(manifest, {}, use_defaults=True)
        with pytest.raises(TypeError):
            context["project"] = "other"  # type: ignore[index]

    def test_defaults(self, manifest):
        context = build_context(manifest, {"use_tls": True}, use_defaults=True)
        assert dict(context) == {
            "project": "demo",
            "use_tls": True,
            "license": "MIT",
            "features": ["docker"],
            "docker": True,
            "ci": False,
        }

    def test_missing_answers_without_defaults(self, manifest):
        with pytest.raises(ContextError) as exc_info:
            build_context(manifest, {"project": "demo"})
        assert exc_info.value.errors == [
            "no answer for 'use_tls'",
            "no answer for 'license'",
            "no answer for 'features'",
        ]

    def test_missing_answer_without_any_default(self):
        manifest = parse_manifest("questions:\n  - {id: name, kind: string}\n")
        with pytest.raises(ContextError, match="no answer for 'name'"):
            build_context(manifest, {}, use_defaults=True)

    def test_all_problems_reported(self, manifest):
        with pytest.raises(ContextError) as exc_info:
            build_context(
                manifest,
                {"projcet": "x", "use_tls": "perhaps", "license": "GPL", "features": ["k8s"]},
                use_defaults=True,
            )
        errors = exc_info.value.errors
        assert len(errors) == 4
        assert errors[0] == "'projcet' is not a question of this template"


class TestCoerceAnswer:
    def test_bool_words(self, manifest):
        question = manifest.questions[1]
        for word in ("y", "Yes", "TRUE", "on", "1"):
            assert coerce_answer(question, word) is True
        for word in ("n", "No", "false", "off", "0"):
            assert coerce_answer(question, word) is False

    def test_select_rejects_unknown(self, manifest):
        with pytest.raises(ValueError, match="not one of"):
            coerce_answer(manifest.questions[2], "GPL")

    def test_empty_multiselect(self, manifest):
        assert coerce_answer(manifest.questions[3], "") == []

    def test_string_rejects_lists(self, manifest):
        with pytest.raises(ValueError):
            coerce_answer(manifest.questions[0], ["a"])


class TestDefaults:
    def test_multiselect_default_is_preselected_choices(self, manifest):
        assert has_default(manifest.questions[3])
        assert default_answer(manifest.questions[3]) == ["docker"]

    def test_question_without_default(self):
        manifest = parse_manifest("questions:\n  - {id: name, kind: string}\n")
        assert not has_default(manifest.questions[0])
        assert default_answer(manifest.questions[0]) is None
