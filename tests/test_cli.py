import pandas as pd
import pytest
from click.testing import CliRunner

from cli import cli
from database.models import BetResult
from database.store import WagerStore


@pytest.fixture
def run(tmp_path):
    path = str(tmp_path / "cli.db")
    runner = CliRunner()

    def invoke(*args, **kwargs):
        return runner.invoke(cli, ["--db", path, *args], **kwargs)

    invoke.db_path = path
    result = invoke("init")
    assert result.exit_code == 0, result.output
    assert invoke("games", "add", "g1", "--home", "DUKE", "--away", "UNC",
                  "--start", "2025-07-14T18:30:00+00:00").exit_code == 0
    return invoke


def add_bet(run, kind, selection, odds, stake, user="u1", game="g1"):
    return run("bets", "add", "--user", user, "--game", game, "--kind", kind,
               "--selection", selection, "--odds", str(odds), "--stake", str(stake))


def test_track_finalize_and_report(run, tmp_path):
    result = add_bet(run, "spread", "UNC +3.5", -110, 110)
    assert result.exit_code == 0, result.output
    assert "Tracked UNC +3.5 @ -110 | Stake: $110.00 | Payout: $210.00" in result.output
    assert add_bet(run, "moneyline", "UNC ML", 150, 50).exit_code == 0

    result = run("games", "finalize", "g1", "70", "68")
    assert result.exit_code == 0, result.output
    assert "Settled:        2 (W: 1 L: 1 P: 0)" in result.output

    result = run("portfolio", "stats", "--user", "u1", "--timeframe", "all")
    assert result.exit_code == 0, result.output
    assert "Settled Bets:   2" in result.output
    assert "Total Staked:   $160.00" in result.output
    assert "Total P&L:      $+50.00" in result.output
    assert "ROI:            +31.25%" in result.output

    export = tmp_path / "equity.csv"
    result = run("portfolio", "chart", "--user", "u1", "--timeframe", "All", "--export", str(export))
    assert result.exit_code == 0, result.output
    assert "Exported" in result.output
    frame = pd.read_csv(export)
    assert list(frame.columns) == ["timestamp", "pnl"]
    assert frame["pnl"].iloc[0] == 0
    assert frame["pnl"].iloc[-1] == pytest.approx(50)


def test_settle_rerun_is_a_no_op(run):
    add_bet(run, "total", "Over 145.5", -110, 20)
    run("games", "finalize", "g1", "70", "68")

    result = run("games", "settle", "g1")
    assert result.exit_code == 0, result.output
    assert "Settled:        0" in result.output
    assert [w.result for w in WagerStore(run.db_path).list_wagers("u1")] == [BetResult.LOST]


def test_settle_requires_final_game(run):
    result = run("games", "settle", "g1")
    assert result.exit_code != 0
    assert "not final" in result.output

    result = run("games", "settle", "nope")
    assert result.exit_code != 0
    assert "not found" in result.output


def test_bad_bets_are_rejected(run):
    result = add_bet(run, "spread", "UNC", -110, 10)
    assert result.exit_code != 0
    assert "UNC" in result.output

    result = add_bet(run, "moneyline", "DUKE ML", -110, 10, game="nope")
    assert result.exit_code != 0
    assert "Game nope not found" in result.output

    result = add_bet(run, "moneyline", "DUKE ML", 0, 10)
    assert result.exit_code != 0
    assert WagerStore(run.db_path).list_wagers("u1") == []


def test_list_recent_and_delete(run):
    add_bet(run, "moneyline", "DUKE ML", -110, 10)
    wager = WagerStore(run.db_path).list_wagers("u1")[0]

    result = run("bets", "list", "--user", "u1", "--pending")
    assert wager.id in result.output
    assert "UNC @ DUKE" in result.output

    result = run("bets", "recent", "--user", "u1")
    assert "1 pending" in result.output

    assert run("bets", "delete", wager.id, "--user", "u1").exit_code == 0
    result = run("bets", "delete", wager.id, "--user", "u1")
    assert result.exit_code != 0
    assert "not found" in result.output
    assert "No bets." in run("bets", "list", "--user", "u1").output


def test_games_list_and_duplicates(run):
    result = run("games", "list")
    assert "g1" in result.output

    result = run("games", "add", "g1", "--home", "DUKE", "--away", "UNC")
    assert result.exit_code != 0
    assert "Could not add game" in result.output

    result = run("games", "add", "g3", "--home", "DUKE", "--away", "duke")
    assert result.exit_code != 0


def test_reset_clears_data(run):
    add_bet(run, "moneyline", "DUKE ML", -110, 10)
    result = run("reset", "--yes")
    assert result.exit_code == 0, result.output
    assert "No games found." in run("games", "list").output


def test_bad_start_time_is_a_usage_error(run):
    result = run("games", "add", "g9", "--home", "KU", "--away", "UK", "--start", "tomorrow")
    assert result.exit_code == 2
    assert "is not an ISO 8601 time" in result.output
    assert "g9" not in run("games", "list").output
