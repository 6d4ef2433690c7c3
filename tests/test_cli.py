from __future__ import annotations

import json
import logging
from pathlib import Path
from types import SimpleNamespace

import pytest

ENV = {"TOKEN": "abc123", "TRAVIS_REPO_SLUG": "owner/repo"}


@pytest.fixture
def fake_run(monkeypatch):
    from pages_deploy import pipeline

    calls: list[list[str]] = []
    codes: dict[str, int] = {}

    def _fake_run(cmd, check=False):  # noqa: ANN001
        calls.append(list(cmd))
        for marker, rc in codes.items():
            if marker in cmd:
                return SimpleNamespace(returncode=rc)
        return SimpleNamespace(returncode=0)

    monkeypatch.setattr(pipeline.subprocess, "run", _fake_run)
    monkeypatch.setattr(pipeline.shutil, "which", lambda _name: None)
    return SimpleNamespace(calls=calls, codes=codes)


def test_help_exits_0() -> None:
    from pages_deploy.cli import main

    with pytest.raises(SystemExit) as excinfo:
        main(["--help"])
    assert excinfo.value.code == 0


def test_missing_environment_exits_2_without_running_anything(fake_run, capsys) -> None:
    from pages_deploy.cli import main

    rc = main([], environ={})

    assert rc == 2
    assert fake_run.calls == []
    assert "TOKEN" in capsys.readouterr().err


def test_full_publish_exits_0(fake_run, tmp_path: Path) -> None:
    from pages_deploy.cli import main

    rc = main(["--doc-dir", str(tmp_path)], environ=ENV)

    assert rc == 0
    assert [c[0] for c in fake_run.calls][0] == "cargo"
    assert fake_run.calls[-1] == [
        "git",
        "push",
        "-qf",
        "https://abc123@github.com/owner/repo.git",
        "gh-pages",
    ]
    assert (tmp_path / "index.html").read_text(encoding="utf-8") == (
        "<meta http-equiv=refresh content=0;url=geo/index.html>\n"
    )


def test_doc_failure_propagates_generator_exit_code(fake_run, tmp_path: Path, capsys) -> None:
    from pages_deploy.cli import main

    fake_run.codes["cargo"] = 101
    rc = main(["--doc-dir", str(tmp_path)], environ=ENV)

    assert rc == 101
    assert len(fake_run.calls) == 1
    assert not (tmp_path / "index.html").exists()
    assert "build-docs" in capsys.readouterr().err


def test_cli_overrides_and_report(fake_run, tmp_path: Path) -> None:
    from pages_deploy.cli import main

    report = tmp_path / "report.json"
    rc = main(
        [
            "--doc-dir",
            str(tmp_path),
            "--doc-command",
            "cargo doc --no-deps --all-features",
            "--redirect-target",
            "geo_types/index.html",
            "--branch",
            "pages",
            "--sudo",
            "--report",
            str(report),
        ],
        environ=ENV,
    )

    assert rc == 0
    assert fake_run.calls[0] == ["cargo", "doc", "--no-deps", "--all-features"]
    assert fake_run.calls[1][0] == "sudo"
    assert fake_run.calls[-1][-1] == "pages"
    assert "url=geo_types/index.html" in (tmp_path / "index.html").read_text(encoding="utf-8")

    data = json.loads(report.read_text(encoding="utf-8"))
    assert data["state"] == "done"
    assert data["branch"] == "pages"
    assert "abc123" not in report.read_text(encoding="utf-8")


def test_dry_run_with_verify_runs_nothing(fake_run, tmp_path: Path, monkeypatch) -> None:
    from pages_deploy import cli

    def _should_not_verify(*_args, **_kwargs):  # noqa: ANN001
        raise AssertionError("verify_published should not be called")

    monkeypatch.setattr(cli, "verify_published", _should_not_verify)

    rc = cli.main(["--doc-dir", str(tmp_path), "--dry-run", "--verify"], environ=ENV)

    assert rc == 0
    assert fake_run.calls == []


def test_verify_failure_exits_1(fake_run, tmp_path: Path, monkeypatch) -> None:
    from pages_deploy import cli

    seen: list[tuple[str, str]] = []

    def _fake_verify(url, target):  # noqa: ANN001
        seen.append((url, target))
        return False

    monkeypatch.setattr(cli, "verify_published", _fake_verify)

    rc = cli.main(["--doc-dir", str(tmp_path), "--verify"], environ=ENV)

    assert rc == 1
    assert seen == [("https://owner.github.io/repo/", "geo/index.html")]


def test_repeated_main_calls_log_to_current_stdout(fake_run, tmp_path: Path, capsys) -> None:
    from pages_deploy.cli import main

    assert main(["--doc-dir", str(tmp_path), "--dry-run"], environ=ENV) == 0
    capsys.readouterr()

    assert main(["--doc-dir", str(tmp_path), "--dry-run"], environ=ENV) == 0
    out = capsys.readouterr().out
    assert "Pipeline finished" in out

    handlers = [
        h for h in logging.getLogger("pages_deploy").handlers if getattr(h, "_pages_deploy", False)
    ]
    assert len(handlers) == 1


def test_unbalanced_doc_command_exits_2(fake_run, tmp_path: Path, capsys) -> None:
    from pages_deploy.cli import main

    rc = main(["--doc-dir", str(tmp_path), "--doc-command", 'cargo "doc', "--dry-run"], environ=ENV)

    assert rc == 2
    assert fake_run.calls == []
    assert "ERROR: Could not parse --doc-command" in capsys.readouterr().err


def test_unwritable_report_keeps_pipeline_exit_code(fake_run, tmp_path: Path, capsys) -> None:
    from pages_deploy.cli import main

    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x", encoding="utf-8")

    rc = main(["--doc-dir", str(tmp_path), "--report", str(blocker / "r.json")], environ=ENV)

    assert rc == 0
    assert len(fake_run.calls) == 4
    assert "could not write run report" in capsys.readouterr().err


def test_unwritable_report_keeps_failing_step_code(fake_run, tmp_path: Path) -> None:
    from pages_deploy.cli import main

    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x", encoding="utf-8")
    fake_run.codes["push"] = 128

    rc = main(["--doc-dir", str(tmp_path), "--report", str(blocker / "r.json")], environ=ENV)

    assert rc == 128
