"""Tests for the command-line interface (stamp.cli)."""

from __future__ import annotations

from pathlib import Path

import pytest

from stamp import cli
from stamp.cli import build_parser, run

pytestmark = pytest.mark.unit


@pytest.fixture
def wide_console(monkeypatch):
    """Keep rich from wrapping table cells in captured output."""
    monkeypatch.setattr(cli.console, "width", 200)


@pytest.fixture
def config_args(tmp_path: Path) -> list[str]:
    return ["--config-dir", str(tmp_path / "config")]


class TestParser:
    def test_conflict_flags_are_exclusive(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(
                ["from", "src", "dst", "--overwrite-conflicts", "--skip-conflicts"]
            )
        assert exc_info.value.code == 2
        assert "not allowed with argument" in capsys.readouterr().err

    def test_set_requires_key_value(self, capsys):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["from", "src", "dst", "--set", "novalue"])
        assert "KEY=VALUE" in capsys.readouterr().err

    def test_set_collects_pairs(self):
        args = build_parser().parse_args(
            ["from", "src", "dst", "--set", "a=1", "--set", "b=x=y"]
        )
        assert args.preset == [("a", "1"), ("b", "x=y")]

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestFromCommand:
    def test_renders(self, readme_template, destination, config_args):
        code = run([
            *config_args, "from", str(readme_template), str(destination),
            "--set", "project=demo", "--set", "name=Ada",
        ])
        assert code == 0
        assert (destination / "demo" / "README.md").read_text(encoding="utf-8") == "Hello Ada"

    def test_conflict_exits_nonzero(self, readme_template, destination, config_args, capsys):
        target = destination / "demo" / "README.md"
        target.parent.mkdir(parents=True)
        target.write_text("keep me", encoding="utf-8")

        code = run([
            *config_args, "from", str(readme_template), str(destination),
            "--set", "project=demo", "--set", "name=Ada",
        ])
        assert code == 1
        assert target.read_text(encoding="utf-8") == "keep me"
        assert "Error:" in capsys.readouterr().err

    def test_missing_answers_with_defaults(self, readme_template, destination, config_args, capsys):
        code = run([*config_args, "from", str(readme_template), str(destination), "--defaults"])
        assert code == 1
        err = capsys.readouterr().err
        assert "no answer for 'project'" in err
        assert not destination.exists()

    def test_destination_with_markup_characters(
        self, readme_template, tmp_path, config_args, capsys, wide_console
    ):
        destination = tmp_path / "out[/x]"
        code = run([
            *config_args, "from", str(readme_template), str(destination),
            "--set", "project=demo", "--set", "name=Ada",
        ])
        assert code == 0
        assert "out[/x]" in capsys.readouterr().out

    def test_malformed_legacy_manifest(self, tmp_path, write_tree, destination, config_args, capsys):
        root = write_tree(tmp_path / "tpl", {
            "stamp.yaml": "name: t\nvariables:\n  project: demo\n",
            "a.txt": "x",
        })
        code = run([*config_args, "from", str(root), str(destination), "--defaults"])
        assert code == 1
        assert "variable 'project': settings must be a mapping" in capsys.readouterr().err
        assert not destination.exists()

    def test_unsupported_include(self, tmp_path, write_tree, destination, config_args, capsys):
        root = write_tree(tmp_path / "tpl", {
            "stamp.yaml": "",
            "page.txt.tera": '{% include "header.txt" %}',
        })
        code = run([*config_args, "from", str(root), str(destination), "--defaults"])
        assert code == 1
        err = capsys.readouterr().err
        assert "Error:" in err
        assert "caused by:" in err

    def test_missing_template(self, tmp_path, destination, config_args, capsys):
        code = run([*config_args, "from", str(tmp_path / "nope"), str(destination), "--defaults"])
        assert code == 1
        assert "not found" in capsys.readouterr().err


class TestRegistryCommands:
    def test_register_list_use_remove(
        self, readme_template, destination, config_args, capsys, wide_console
    ):
        assert run([*config_args, "register", str(readme_template)]) == 0
        assert "registered successfully" in capsys.readouterr().out

        assert run([*config_args, "list"]) == 0
        out = capsys.readouterr().out
        assert "readme" in out
        assert "A project with a README" in out

        code = run([
            *config_args, "use", "readme", str(destination),
            "--set", "project=demo", "--set", "name=Ada",
        ])
        assert code == 0
        assert (destination / "demo" / "README.md").exists()

        assert run([*config_args, "remove", "readme"]) == 0
        capsys.readouterr()
        assert run([*config_args, "list"]) == 0
        assert "No templates registered" in capsys.readouterr().out

    def test_use_unknown_template(self, destination, config_args, capsys):
        assert run([*config_args, "use", "ghost", str(destination)]) == 1
        assert "'ghost' not found" in capsys.readouterr().err

    def test_remove_unknown_template(self, config_args, capsys):
        assert run([*config_args, "remove", "ghost"]) == 1
        assert "not found" in capsys.readouterr().err
