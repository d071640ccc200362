import random

from headsup.models import Seat
from practice.bots import random_policy

from .helpers import create_engine, play_out, total_chips


def test_random_play_conserves_chips_over_many_hands():
    engine = create_engine()
    policy = random_policy(random.Random(1234))
    hands_played = 0

    def check() -> None:
        assert total_chips(engine) == 2_000
        assert all(state.stack >= 0 for state in engine.seats.values())

    for seed in range(1_000, 2_000):
        if engine.is_match_over():
            assert engine.match_winner() in (Seat.PLAYER, Seat.OPPONENT)
            engine.reset_session()
        engine.start_hand(seed=seed)
        check()
        play_out(engine, policy, check)

        result = engine.hand.result
        assert result is not None
        assert sum(result.payouts.values()) > 0
        if result.reason == "showdown":
            assert len(engine.hand.community) == 5
        hands_played += 1

    assert hands_played == 1_000


def test_raise_counter_never_exceeds_cap():
    engine = create_engine(max_raises_per_street=2)
    policy = random_policy(random.Random(99))

    def check() -> None:
        if engine.hand and not engine.hand.hand_over:
            assert engine.hand.raises_this_street <= 2

    for seed in range(300):
        if engine.is_match_over():
            engine.reset_session()
        engine.start_hand(seed=seed)
        play_out(engine, policy, check)
