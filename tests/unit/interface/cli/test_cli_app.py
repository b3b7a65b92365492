from __future__ import annotations

"""
Unit tests for the CLI controller, run in-process.
"""

import logging
from pathlib import Path

import pytest

from embedres.infra.logging import get_default_log_path, shutdown_logging
from embedres.interface.cli import app as cli_app


@pytest.fixture(autouse=True)
def detach_logging(capsys: pytest.CaptureFixture[str]):
    # Depends on capsys so the listener stops before the captured stream closes
    yield
    shutdown_logging()


def _file_handlers() -> list:
    listener = getattr(logging.getLogger(), "_embedres_queue_listener", None)
    if listener is None:
        return []
    return [h for h in listener.handlers if isinstance(h, logging.FileHandler)]


def test_merge_config_ignores_unknown_and_none() -> None:
    merged = cli_app._merge_config({"var_name": "A", "shape": "dependent"}, {"var_name": "B", "shape": None, "bogus": 1})

    assert merged == {"var_name": "B", "shape": "dependent"}


def test_stdout_receives_only_module(fixture_tree: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = cli_app.main([str(fixture_tree)])
    shutdown_logging()
    out, err = capsys.readouterr()

    assert code == cli_app.EXIT_OK
    assert out.startswith("# Code generated by embedres")
    assert "Pack complete." in err


def test_dry_run_prints_no_module(fixture_tree: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = cli_app.main([str(fixture_tree), "--dry-run"])
    shutdown_logging()
    out, err = capsys.readouterr()

    assert code == cli_app.EXIT_OK
    assert out == ""
    assert "Dry run complete." in err


def test_missing_source(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = cli_app.main([str(tmp_path / "gone")])
    shutdown_logging()
    err = capsys.readouterr().err

    assert code == cli_app.EXIT_MISSING_SOURCE
    assert "does not exist" in err
    assert "Logging error" not in err


def test_interrupt_exit_code(fixture_tree: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def interrupted(*args, **kwargs):
        raise KeyboardInterrupt

    monkeypatch.setattr(cli_app, "run_pack", interrupted)
    assert cli_app.main([str(fixture_tree)]) == cli_app.EXIT_INTERRUPTED


def test_no_log_file_by_default(fixture_tree: Path) -> None:
    cli_app.main([str(fixture_tree), "--dry-run"])

    assert _file_handlers() == []


def test_log_file_flag_uses_default_location(fixture_tree: Path) -> None:
    code = cli_app.main([str(fixture_tree), "--dry-run", "--debug", "--log-file"])
    handlers = _file_handlers()
    shutdown_logging()

    assert code == cli_app.EXIT_OK
    assert len(handlers) == 1
    assert handlers[0].baseFilename == get_default_log_path()
    content = Path(get_default_log_path()).read_text(encoding="utf-8")
    assert "CLI execution initiated" in content


def test_log_file_flag_accepts_explicit_path(fixture_tree: Path, tmp_path: Path) -> None:
    log_path = tmp_path / "diag" / "run.log"

    code = cli_app.main([str(fixture_tree), "--dry-run", "--debug", "--log-file", str(log_path)])
    shutdown_logging()

    assert code == cli_app.EXIT_OK
    assert log_path.is_file()
    assert "CLI execution initiated" in log_path.read_text(encoding="utf-8")
