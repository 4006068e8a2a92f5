from app.services.session_store import (
    DEFAULT_SESSION_ID,
    drop_session_engine,
    get_session_engine,
    list_session_ids,
)
from app.services.ws_manager import WS, WSManager


def test_default_engine_is_cached_and_uses_shared_gateway():
    engine = get_session_engine()
    assert get_session_engine(DEFAULT_SESSION_ID) is engine
    assert get_session_engine("  ") is engine
    assert engine.gateway is WS
    assert DEFAULT_SESSION_ID in list_session_ids()


def test_isolated_sessions_have_independent_state():
    gateway = WSManager()
    try:
        other = get_session_engine("test-isolated", gateway=gateway)
        other.state.turn = 5

        assert other is not get_session_engine()
        assert other.gateway is gateway
        assert "test-isolated" in list_session_ids()
    finally:
        drop_session_engine("test-isolated")

    assert "test-isolated" not in list_session_ids()
    assert get_session_engine("test-isolated", gateway=gateway) is not other
    drop_session_engine("test-isolated")
