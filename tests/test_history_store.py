from persona_rag_server.api.models import ConversationTurn
from persona_rag_server.sessions.store import ConversationHistoryStore


def test_recent_for_caps_and_keeps_order():
    store = ConversationHistoryStore()
    for i in range(10):
        store.append("arjun", ConversationTurn(role="user", content=f"m{i}"))

    recent = store.recent_for("arjun", 6)

    assert [t.content for t in recent] == ["m4", "m5", "m6", "m7", "m8", "m9"]
    assert len(store.get_history("arjun")) == 10


def test_append_exchange_orders_user_then_assistant():
    store = ConversationHistoryStore()
    store.append_exchange("arjun", "question?", "answer!")

    assert store.get_history("arjun") == [
        ConversationTurn(role="user", content="question?"),
        ConversationTurn(role="assistant", content="answer!"),
    ]


def test_speakers_are_isolated_and_missing_speaker_is_general():
    store = ConversationHistoryStore()
    store.append_exchange(None, "q", "a")
    store.append_exchange("priya", "q2", "a2")

    assert len(store.get_history("general")) == 2
    assert [t.content for t in store.recent_for("priya")] == ["q2", "a2"]
    assert store.recent_for("unknown") == []
    assert len(store) == 2


def test_copy_on_read():
    store = ConversationHistoryStore()
    store.append_exchange("a", "q", "a")
    history = store.get_history("a")
    history.clear()
    assert len(store.get_history("a")) == 2


def test_max_turns_truncates_oldest():
    store = ConversationHistoryStore(max_turns_per_speaker=3)
    for i in range(5):
        store.append("a", ConversationTurn(role="user", content=str(i)))
    assert [t.content for t in store.get_history("a")] == ["2", "3", "4"]


def test_clear():
    store = ConversationHistoryStore()
    store.append_exchange("a", "q", "a")
    store.clear("a")
    assert not store.has_speaker("a")
    store.append_exchange("b", "q", "a")
    store.clear_all()
    assert len(store) == 0


def test_non_positive_window_is_empty():
    store = ConversationHistoryStore()
    store.append_exchange("a", "q", "a")
    assert store.recent_for("a", 0) == []
