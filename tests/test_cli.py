"""Tests for the wasaupdate command line."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

from wasaupdate.cli.command_handlers import STARTER_SCRIPT
from wasaupdate.cli.main import build_parser, main
from wasaupdate.core.policy import load_script

POLICY = """
def current_version():
    return "{current}"

def latest_version():
    return "{latest}"

def install_version(version):
    return "{location}"
"""


@pytest.fixture
def workdir(tmp_path, monkeypatch) -> Path:
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _write_policy(path: Path, current="1.0.0", latest="1.1.0", location="https://example.com/tool.zip") -> Path:
    path.write_text(POLICY.format(current=current, latest=latest, location=location), encoding="utf-8")
    return path


class TestParser:
    def test_run_after_collects_trailing_command(self):
        args = build_parser().parse_args(["--background", "--", "tool", "--serve", "-v"])
        assert args.background
        assert args.run_after == ["tool", "--serve", "-v"]

    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.script is None
        assert args.run_after == []
        assert not (args.dry or args.current or args.latest or args.install or args.init)


class TestInit:
    def test_creates_starter_script(self, workdir, capsys):
        assert main(["--init"]) == 0

        script = workdir / "wasaupdate.py"
        assert script.read_text(encoding="utf-8") == STARTER_SCRIPT
        assert "Initialized update script" in capsys.readouterr().out

    def test_starter_script_honours_contract(self, workdir):
        contract = load_script(STARTER_SCRIPT)
        assert contract.call("install_version", "0.1.0") == "path/to/archive-0.1.0.tar.gz"

    def test_refuses_to_overwrite(self, workdir, capsys):
        script = workdir / "custom.py"
        script.write_text("keep me", encoding="utf-8")

        assert main(["--init", "--script", str(script)]) == 1

        assert script.read_text(encoding="utf-8") == "keep me"
        assert "already exists" in capsys.readouterr().err


class TestQueries:
    def test_missing_script(self, workdir, capsys):
        assert main([]) == 1
        assert "does not exist" in capsys.readouterr().err

    def test_contract_violation(self, workdir, capsys):
        (workdir / "wasaupdate.py").write_text("def latest_version():\n    return '1.0.0'\n", encoding="utf-8")

        assert main(["--current"]) == 1

        assert "Function 'current_version' is required but not found" in capsys.readouterr().err

    def test_current_latest_install(self, workdir, capsys):
        _write_policy(workdir / "wasaupdate.py")

        assert main(["--current", "--latest", "--install"]) == 0

        out = capsys.readouterr().out.splitlines()
        assert out == [
            "Current version: 1.0.0",
            "Latest version: 1.1.0",
            "Install path for latest version: https://example.com/tool.zip",
        ]

    def test_query_as_json(self, workdir, capsys):
        _write_policy(workdir / "wasaupdate.py")

        assert main(["--latest", "--json"]) == 0

        assert json.loads(capsys.readouterr().out) == {"latest_version": "1.1.0"}

    def test_unparseable_version(self, workdir, capsys):
        _write_policy(workdir / "wasaupdate.py", current="v1")

        assert main(["--current"]) == 1

        assert "Failed to parse 'v1' as current version" in capsys.readouterr().err


class TestDryRun:
    def test_reports_pending_update(self, workdir, capsys):
        script = _write_policy(workdir / "policy.py")

        assert main(["--script", str(script), "--dry"]) == 0

        out = capsys.readouterr().out
        assert "Current version: 1.0.0" in out
        assert "Latest version: 1.1.0" in out
        assert "Install path for latest version: https://example.com/tool.zip" in out
        assert "Update will be performed." in out

    def test_up_to_date(self, workdir, capsys):
        _write_policy(workdir / "wasaupdate.py", latest="1.0.0")

        assert main(["--dry"]) == 0

        assert "No update needed." in capsys.readouterr().out

    def test_json_report(self, workdir, capsys):
        _write_policy(workdir / "wasaupdate.py")

        assert main(["--dry", "--json"]) == 0

        report = json.loads(capsys.readouterr().out)
        assert report["dry_run"] is True
        assert report["needs_update"] is True
        assert report["installed"] is False
        assert report["install_location"] == "https://example.com/tool.zip"

    def test_quiet(self, workdir, capsys):
        _write_policy(workdir / "wasaupdate.py")

        assert main(["--dry", "--quiet"]) == 0

        assert capsys.readouterr().out == ""


class TestUpdate:
    @pytest.fixture
    def artifact(self, tmp_path) -> Path:
        path = tmp_path / "dist" / "tool"
        path.parent.mkdir()
        path.write_bytes(b"new build")
        return path

    @pytest.fixture
    def configured(self, workdir, artifact) -> Path:
        (workdir / "wasaupdate.yaml").write_text("install:\n  target_dir: app\n", encoding="utf-8")
        _write_policy(workdir / "wasaupdate.py", location=artifact.as_posix())
        return workdir / "app"

    def test_installs_update(self, configured, capsys):
        assert main([]) == 0

        assert (configured / "tool").read_bytes() == b"new build"
        assert "Updated 1.0.0 -> 1.1.0" in capsys.readouterr().out

    def test_already_up_to_date(self, workdir, artifact, capsys):
        _write_policy(workdir / "wasaupdate.py", latest="1.0.0", location=artifact.as_posix())

        assert main([]) == 0

        assert "Already up to date: 1.0.0" in capsys.readouterr().out

    def test_queries_do_not_install(self, configured, capsys):
        assert main(["--current", "--install"]) == 0

        assert not (configured / "tool").exists()
        assert "Updated" not in capsys.readouterr().out

    def test_runs_post_update_command(self, configured, capsys):
        assert main(["--json", "--", sys.executable, "-c", "pass"]) == 0

        report = json.loads(capsys.readouterr().out)
        assert report["installed"] is True
        assert report["post_update"]["returncode"] == 0
        assert report["post_update"]["command"][0] == sys.executable

    def test_post_update_failure_keeps_success(self, configured, capsys):
        assert main(["wasaupdate-no-such-program"]) == 0

        captured = capsys.readouterr()
        assert "Failed to run command 'wasaupdate-no-such-program'" in captured.err
        assert (configured / "tool").exists()

    def test_invalid_location_fails(self, workdir, capsys):
        _write_policy(workdir / "wasaupdate.py", location="no such place")

        assert main([]) == 1

        assert "neither an existing file nor a valid URL" in capsys.readouterr().err
