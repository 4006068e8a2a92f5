import random

from app.services.game_state import (
    OUTCOME_DEFEAT,
    OUTCOME_VICTORY,
    ROLES,
    SPEAKER_PLAYER,
    SessionState,
)


def test_fresh_state_defaults():
    state = SessionState.fresh(rng=random.Random(7))

    assert state.secret_role in ROLES
    assert state.turn == 0
    assert state.time_remaining == 600
    assert state.conversation == []
    assert state.is_game_over is False
    assert state.outcome is None
    assert state.player_location == "bridge"
    assert state.is_alive is True


def test_role_draw_covers_every_role():
    rng = random.Random(0)
    drawn = {SessionState.fresh(rng=rng).secret_role for _ in range(200)}
    assert drawn == set(ROLES)


def test_conversation_window_keeps_last_entries_only():
    state = SessionState.fresh(rng=random.Random(1))
    for i in range(35):
        state.append(SPEAKER_PLAYER, f"msg {i}")

    window = state.conversation_window(20)

    assert len(window) == 20
    assert window[0] == {"speaker": SPEAKER_PLAYER, "text": "msg 15"}
    assert window[-1]["text"] == "msg 34"
    # le journal stocké n'est pas tronqué
    assert len(state.conversation) == 35


def test_tick_is_floored_at_zero():
    state = SessionState.fresh(duration=1, rng=random.Random(1))
    assert state.tick() == 0
    assert state.tick() == 0
    assert state.time_remaining == 0


def test_latch_is_one_way():
    state = SessionState.fresh(rng=random.Random(1))

    assert state.latch(OUTCOME_VICTORY, "won") is True
    assert state.latch(OUTCOME_DEFEAT, "lost") is False

    assert state.is_game_over is True
    assert state.outcome == OUTCOME_VICTORY
    assert state.outcome_message == "won"


def test_public_snapshot_hides_secret_until_game_over():
    state = SessionState.fresh(rng=random.Random(3))
    snapshot = state.public_snapshot()
    assert "realTraitor" not in snapshot
    assert state.secret_role not in snapshot.values()

    state.latch(OUTCOME_DEFEAT, "lost")
    assert state.public_snapshot()["realTraitor"] == state.secret_role


def test_context_snapshot_uses_wire_names():
    state = SessionState.fresh(duration=42, rng=random.Random(3))
    assert state.context_snapshot() == {"location": "bridge", "isAlive": True, "timeRemaining": 42}
