"""Tests for the jumpdb inspection CLI."""
import errno
import os
import sys
from pathlib import Path

import pytest
from click.testing import CliRunner

PROJECT_ROOT = Path(__file__).resolve().parent.parent
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from jumpdb.cli.main import cli  # noqa: E402
from jumpdb.core import DatabaseFile  # noqa: E402
from jumpdb.core.constants import WEEK  # noqa: E402

pytestmark = pytest.mark.integration

NOW = 10 * WEEK


@pytest.fixture
def runner(monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    monkeypatch.delenv("JUMPDB_DATA_DIR", raising=False)
    monkeypatch.setenv("LOG_LEVEL", "ERROR")
    return CliRunner()


@pytest.fixture
def populated(data_dir: Path) -> Path:
    with DatabaseFile(data_dir).open() as db:
        for _ in range(3):
            db.add("/home/user/projects/foo", NOW)
        db.add("/home/user/projects/bar", NOW - 2 * WEEK)
        db.add("/srv/foo", NOW)
    return data_dir


def test_show_lists_best_first(runner: CliRunner, populated: Path) -> None:
    result = runner.invoke(cli, ["--data-dir", str(populated), "show", "--now", str(NOW)])

    assert result.exit_code == 0, result.output
    lines = result.stdout.splitlines()
    assert lines == [
        "  12.0 /home/user/projects/foo",
        "   4.0 /srv/foo",
        "   0.2 /home/user/projects/bar",
    ]


def test_show_keywords_and_exclude(runner: CliRunner, populated: Path) -> None:
    result = runner.invoke(
        cli,
        [
            "--data-dir",
            str(populated),
            "show",
            "--now",
            str(NOW),
            "--no-score",
            "--exclude",
            "/srv/foo",
            "foo",
        ],
    )

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == ["/home/user/projects/foo"]


def test_show_respects_configured_excludes(
    runner: CliRunner, populated: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("JUMPDB_DATA_DIR", str(populated))
    monkeypatch.setenv("JUMPDB_EXCLUDE_DIRS", "/home/user/projects/foo")

    result = runner.invoke(cli, ["show", "--now", str(NOW), "--no-score"])

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == ["/srv/foo", "/home/user/projects/bar"]


def test_show_does_not_create_database_file(runner: CliRunner, data_dir: Path) -> None:
    result = runner.invoke(cli, ["--data-dir", str(data_dir), "show"])

    assert result.exit_code == 0, result.output
    assert result.stdout == ""
    assert data_dir.is_dir()
    assert not (data_dir / "db.zo").exists()


def test_stats(runner: CliRunner, populated: Path) -> None:
    result = runner.invoke(cli, ["--data-dir", str(populated), "stats"])

    assert result.exit_code == 0, result.output
    assert "records:    3" in result.stdout
    assert "total rank: 5.0" in result.stdout


def test_maintain_ages_and_saves(runner: CliRunner, populated: Path) -> None:
    result = runner.invoke(cli, ["--data-dir", str(populated), "maintain", "--max-age", "4"])

    assert result.exit_code == 0, result.output
    assert "3 -> 1 records" in result.stdout

    db = DatabaseFile(populated).open()
    assert [d.path for d in db] == ["/home/user/projects/foo"]
    assert db.dirs[0].rank == pytest.approx(2.16, rel=1e-6)


def test_corrupt_database_exits_with_message(runner: CliRunner, data_dir: Path) -> None:
    data_dir.mkdir()
    (data_dir / "db.zo").write_bytes(b"\x01\x00\x00\x00")

    result = runner.invoke(cli, ["--data-dir", str(data_dir), "stats"])

    assert result.exit_code == 1
    assert "jumpdb: could not deserialize database" in result.output


def test_missing_data_dir_is_usage_error(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["show"])

    assert result.exit_code == 2
    assert "JUMPDB_DATA_DIR" in result.output


def test_show_keeps_logs_off_stdout(
    runner: CliRunner, populated: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    result = runner.invoke(cli, ["--data-dir", str(populated), "show", "--now", str(NOW), "--no-score"])

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == [
        "/home/user/projects/foo",
        "/srv/foo",
        "/home/user/projects/bar",
    ]
    assert "database_opened" in result.stderr


def test_show_on_fresh_data_dir_prints_nothing(runner: CliRunner, data_dir: Path) -> None:
    result = runner.invoke(cli, ["--data-dir", str(data_dir), "show"])

    assert result.exit_code == 0, result.output
    assert result.stdout == ""
    assert "database_created_data_dir" not in result.output


def test_maintain_failed_save_reports_once(
    runner: CliRunner, populated: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    previous = (populated / "db.zo").read_bytes()
    calls = []

    def failing_replace(src, dst):
        calls.append((src, dst))
        raise OSError(errno.EIO, "I/O error")

    monkeypatch.setattr(os, "replace", failing_replace)

    result = runner.invoke(cli, ["--data-dir", str(populated), "maintain", "--max-age", "4"])

    monkeypatch.undo()
    assert result.exit_code == 1
    assert len(calls) == 1
    assert result.stderr.count("jumpdb: could not write database") == 1
    assert (populated / "db.zo").read_bytes() == previous
    assert list(populated.glob(".tmp*")) == []


@pytest.mark.parametrize("max_age", ["0", "-1"])
def test_maintain_rejects_non_positive_max_age(
    runner: CliRunner, populated: Path, max_age: str
) -> None:
    result = runner.invoke(cli, ["--data-dir", str(populated), "maintain", "--max-age", max_age])

    assert result.exit_code == 2
    assert "--max-age" in result.output
