import logging

import pytest

from headsup.models import Bet, Call, Check, Fold, Raise, Seat
from practice.__main__ import main, parse_command, render_snapshot

from .helpers import create_engine

PLAYER = Seat.PLAYER
OPPONENT = Seat.OPPONENT


def test_parse_command_preflop():
    engine = create_engine()
    engine.start_hand(seed=1)
    obs = engine.observation(OPPONENT)

    assert parse_command("c", obs) == Call()
    assert parse_command("CALL", obs) == Call()
    assert parse_command("f", obs) == Fold()
    assert parse_command("r 40", obs) == Raise(40)
    assert parse_command("r", obs) == Raise(20)
    assert parse_command("allin", obs) == Raise(1_000)
    assert parse_command("", obs) is None
    assert parse_command("x", obs) is None
    assert parse_command("r lots", obs) is None


def test_parse_command_call_means_check_when_free():
    engine = create_engine()
    engine.start_hand(seed=2)
    engine.apply_action(OPPONENT, Call())
    engine.apply_action(PLAYER, Check())
    obs = engine.observation(PLAYER)

    assert parse_command("c", obs) == Check()
    assert parse_command("k", obs) == Check()
    assert parse_command("b 30", obs) == Bet(30)
    assert parse_command("a", obs) == Bet(990)


def test_render_snapshot_prints_board_and_result(capsys):
    engine = create_engine()
    engine.start_hand(seed=3)
    engine.apply_action(OPPONENT, Fold())

    render_snapshot(engine.snapshot(PLAYER), engine.consume_events(), PLAYER)
    out = capsys.readouterr().out
    assert "FOLD" in out
    assert "pot 0" in out
    assert "Hand over (fold): you win" in out


def test_main_auto_plays_requested_hands(caplog):
    with caplog.at_level(logging.INFO, logger="practice_cli"):
        main(["--auto", "--hands", "3", "--seed", "7", "--log-level", "WARNING"])
    assert "Simulated" in caplog.text


def test_main_rejects_bad_blinds():
    with pytest.raises(SystemExit) as excinfo:
        main(["--auto", "--sb", "20", "--bb", "10"])
    assert excinfo.value.code == 2
