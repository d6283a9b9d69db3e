"""
Tests for the CLI command functions.

Commands are exercised through their run_* functions against an on-disk
home; a few checks go through the click group for option wiring.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from pointledger.cli import cli
from pointledger.commands.access_cmd import (
    run_admin_accept,
    run_admin_show,
    run_admin_transfer,
    run_contributor_add,
    run_contributor_list,
    run_contributor_remove,
)
from pointledger.commands.points_cmd import (
    load_batch_file,
    run_points_add,
    run_points_bulk,
    run_points_remove,
    run_points_transfer,
)
from pointledger.commands.query_cmd import (
    run_balance,
    run_history,
    run_info,
    run_init,
    run_supply,
    run_verify,
)
from pointledger.store import LedgerStore

from .conftest import ADMIN, CONTRIBUTOR


def _balances(home: Path) -> dict[str, int]:
    return dict(LedgerStore.open(home).ledger.state().balances)


def test_init_command(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    home = tmp_path / "fresh"
    assert run_init(home, ADMIN, name="Karma", symbol="KRM") == 0
    assert "KRM" in capsys.readouterr().out

    assert run_init(home, ADMIN, name="Karma", symbol="KRM") == 1
    assert "config_error" in capsys.readouterr().err


def test_contributor_commands(home: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run_contributor_add(home, ADMIN, "dave") == 0
    assert run_contributor_add(home, ADMIN, "dave") == 1
    assert "already_contributor" in capsys.readouterr().err

    assert run_contributor_add(home, CONTRIBUTOR, "eve") == 1
    assert "permission_denied" in capsys.readouterr().err

    assert run_contributor_list(home) == 0
    out = capsys.readouterr().out
    assert "dave" in out and CONTRIBUTOR in out

    assert run_contributor_remove(home, ADMIN, "dave") == 0
    assert run_contributor_remove(home, ADMIN, "dave") == 1
    assert "not_contributor" in capsys.readouterr().err


def test_admin_handoff_commands(home: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run_admin_transfer(home, ADMIN, "bob") == 0
    assert run_admin_show(home) == 0
    out = capsys.readouterr().out
    assert "administrator: admin" in out
    assert "pending: bob" in out

    assert run_admin_accept(home, "eve") == 1
    assert run_admin_accept(home, "bob") == 0
    assert LedgerStore.open(home).ledger.administrator() == "bob"


def test_points_commands(home: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run_points_add(home, CONTRIBUTOR, "user1", 100) == 0
    assert run_points_remove(home, CONTRIBUTOR, "user1", 150) == 1
    assert "insufficient_balance" in capsys.readouterr().err
    assert run_points_remove(home, CONTRIBUTOR, "user1", 40) == 0

    assert _balances(home) == {"user1": 60}


def test_bulk_command_pairs(home: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run_points_bulk(home, CONTRIBUTOR, ["u1", "u2"], [10, 20]) == 0
    assert "Bulk add" in capsys.readouterr().out

    assert run_points_bulk(home, CONTRIBUTOR, ["u1", "u2"], [1]) == 1
    assert "length_mismatch" in capsys.readouterr().err

    assert run_points_bulk(home, CONTRIBUTOR, ["u1", "u2"], [5, 50], remove=True) == 1
    assert _balances(home) == {"u1": 10, "u2": 20}

    assert run_points_bulk(home, CONTRIBUTOR, [], []) == 0
    assert "Empty batch" in capsys.readouterr().out


def test_bulk_command_file(home: Path, tmp_path: Path) -> None:
    batch = tmp_path / "batch.yaml"
    batch.write_text("accounts: [u1, u2, u1]\namounts: [1, 2, 3]\n", encoding="utf-8")

    assert run_points_bulk(home, CONTRIBUTOR, [], [], batch_file=batch) == 0
    assert _balances(home) == {"u1": 4, "u2": 2}

    assert run_points_bulk(home, CONTRIBUTOR, ["x"], [1], batch_file=batch) == 2


def test_load_batch_file_accepts_json(tmp_path: Path) -> None:
    batch = tmp_path / "batch.json"
    batch.write_text(json.dumps({"accounts": ["a"], "amounts": [5]}), encoding="utf-8")
    assert load_batch_file(batch) == (["a"], [5])

    bad = tmp_path / "bad.yaml"
    bad.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError, match="mapping"):
        load_batch_file(bad)


def test_transfer_command_always_fails(home: Path, capsys: pytest.CaptureFixture[str]) -> None:
    run_points_add(home, CONTRIBUTOR, "u1", 10)
    capsys.readouterr()

    assert run_points_transfer(home, "u1", "u2", 5) == 1
    assert "transfer_not_allowed" in capsys.readouterr().err
    assert _balances(home) == {"u1": 10}


def test_query_commands(home: Path, capsys: pytest.CaptureFixture[str]) -> None:
    run_points_bulk(home, CONTRIBUTOR, ["u1", "u2"], [10, 20])
    capsys.readouterr()

    assert run_balance(home, ["u2", "nobody"], output_json=True) == 0
    assert json.loads(capsys.readouterr().out) == [
        {"account": "u2", "balance": 20},
        {"account": "nobody", "balance": 0},
    ]

    assert run_supply(home) == 0
    assert "30 PTS" in capsys.readouterr().out

    assert run_info(home, output_json=True) == 0
    info = json.loads(capsys.readouterr().out)
    assert info["total_supply"] == 30
    assert info["contributors"] == [CONTRIBUTOR]
    assert info["holders"] == 2

    assert run_history(home, since=2, output_json=True) == 0
    records = json.loads(capsys.readouterr().out)
    assert [r["sequence"] for r in records] == [3, 4]
    assert records[0]["payload"] == {"from": None, "to": "u1", "amount": 10, "batch_index": 0}

    assert run_history(home, limit=1, output_json=True) == 0
    assert [r["sequence"] for r in json.loads(capsys.readouterr().out)] == [4]


def test_verify_command(home: Path, capsys: pytest.CaptureFixture[str]) -> None:
    run_points_add(home, CONTRIBUTOR, "u1", 10)
    capsys.readouterr()

    assert run_verify(home, output_json=True) == 0
    report = json.loads(capsys.readouterr().out)
    assert report == {"records": 3, "violations": [], "ok": True}


def test_commands_report_missing_home(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run_supply(tmp_path / "missing") == 1
    assert "config_error" in capsys.readouterr().err


def test_verify_reports_malformed_record(home: Path, capsys: pytest.CaptureFixture[str]) -> None:
    record = {
        "sequence": 3,
        "event_type": "points.transfer",
        "timestamp": "2026-01-01T00:00:00+00:00",
        "actor": CONTRIBUTOR,
        "payload": {"to": "u1"},
    }
    with (home / "events.jsonl").open("a", encoding="utf-8") as f:
        f.write(json.dumps(record) + "\n")

    assert run_verify(home, output_json=True) == 1
    err = capsys.readouterr().err
    assert "journal_error" in err
    assert "amount" in err


# -----------------------------------------------------------------------------
# Click wiring
# -----------------------------------------------------------------------------


def test_cli_end_to_end(tmp_path: Path) -> None:
    runner = CliRunner()
    home = str(tmp_path / "cli-home")

    result = runner.invoke(cli, ["--home", home, "init", "--admin", ADMIN])
    assert result.exit_code == 0, result.output

    result = runner.invoke(cli, ["--home", home, "--as", ADMIN, "contributor", "add", CONTRIBUTOR])
    assert result.exit_code == 0, result.output

    result = runner.invoke(
        cli,
        ["--home", home, "points", "bulk-add", "-a", "u1", "-n", "10", "-a", "u2", "-n", "20"],
        env={"POINTLEDGER_CALLER": CONTRIBUTOR},
    )
    assert result.exit_code == 0, result.output

    result = runner.invoke(cli, ["--home", home, "balance", "u1", "u2", "--json"])
    assert result.exit_code == 0
    assert [row["balance"] for row in json.loads(result.output)] == [10, 20]

    result = runner.invoke(cli, ["--home", home, "--as", "u1", "points", "transfer", "u2", "5"])
    assert result.exit_code == 1


def test_cli_requires_caller_for_mutations(tmp_path: Path) -> None:
    runner = CliRunner()
    home = str(tmp_path / "cli-home")
    runner.invoke(cli, ["--home", home, "init", "--admin", ADMIN])

    result = runner.invoke(cli, ["--home", home, "contributor", "add", CONTRIBUTOR], env={"POINTLEDGER_CALLER": ""})

    assert result.exit_code == 2
    assert "No caller identity" in result.output


def test_cli_renounce_needs_confirmation(tmp_path: Path) -> None:
    runner = CliRunner()
    home = str(tmp_path / "cli-home")
    runner.invoke(cli, ["--home", home, "init", "--admin", ADMIN])

    result = runner.invoke(cli, ["--home", home, "--as", ADMIN, "admin", "renounce"])
    assert result.exit_code == 2

    result = runner.invoke(cli, ["--home", home, "--as", ADMIN, "admin", "renounce", "--yes"])
    assert result.exit_code == 0
    assert LedgerStore.open(Path(home)).ledger.administrator() is None


def test_cli_rejects_negative_amounts(tmp_path: Path) -> None:
    runner = CliRunner()
    home = str(tmp_path / "cli-home")
    runner.invoke(cli, ["--home", home, "init", "--admin", ADMIN])
    runner.invoke(cli, ["--home", home, "--as", ADMIN, "contributor", "add", CONTRIBUTOR])

    result = runner.invoke(cli, ["--home", home, "--as", CONTRIBUTOR, "points", "add", "u1", "-5"])
    assert result.exit_code == 2
    assert "x>=0" in result.output

    result = runner.invoke(cli, ["--home", home, "--as", CONTRIBUTOR, "points", "bulk-add", "-a", "u1", "-n", "-1"])
    assert result.exit_code == 2
    assert LedgerStore.open(Path(home)).ledger.total_supply() == 0
