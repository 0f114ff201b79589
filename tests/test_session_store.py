import pytest

from promptdesk.errors import InvalidInputError, NotFoundError
from promptdesk.models import UsageCounters
from promptdesk.services.session_store import SessionStore, derive_title


def test_new_store_has_one_greeted_session(session_store):
    sessions = session_store.list_sessions()
    assert len(sessions) == 1
    session = sessions[0]
    assert session_store.active_session_id == session.id
    assert session.title == "New Chat"
    assert len(session.messages) == 1

    greeting = session.messages[0]
    assert greeting.role == "assistant"
    assert greeting.content.startswith("Hello!")
    assert greeting.model_id == "gpt-4"
    assert greeting.usage == UsageCounters(prompt_units=10, completion_units=15, total_units=25)


def test_create_session_prepends_and_activates(session_store):
    first = session_store.active_session
    second = session_store.create_session()

    assert [s.id for s in session_store.list_sessions()] == [second.id, first.id]
    assert session_store.active_session_id == second.id
    assert second.messages[0].role == "assistant"


def test_first_user_message_names_the_session_once(session_store):
    session = session_store.active_session
    text = "Explain recursion with three worked examples please"

    session_store.append_user_message(session.id, text)
    assert session.title == text[:30] + "..."

    session_store.append_assistant_message(
        session.id, "reply", "gpt-4", UsageCounters.of(1, 1)
    )
    session_store.append_user_message(session.id, "Something completely different")
    assert session.title == text[:30] + "..."


def test_short_first_message_still_gets_ellipsis():
    assert derive_title("  Hi  ") == "Hi..."


def test_user_chosen_title_survives_first_message(session_store):
    session = session_store.active_session
    session_store.rename_session(session.id, "My research")
    session_store.append_user_message(session.id, "Hello there")
    assert session.title == "My research"


def test_append_updates_timestamp(session_store):
    session = session_store.active_session
    before = session.updated_at

    message = session_store.append_user_message(session.id, "  hello  ")

    assert message.content == "hello"
    assert message.model_id is None and message.usage is None
    assert session.updated_at == message.created_at
    assert session.updated_at >= before


def test_assistant_message_carries_model_and_usage(session_store):
    session = session_store.active_session
    usage = UsageCounters.of(5, 20)
    message = session_store.append_assistant_message(session.id, "reply", "claude-3-haiku", usage)

    assert message.role == "assistant"
    assert message.model_id == "claude-3-haiku"
    assert message.usage.total_units == 25
    assert session.messages[-1] is message


def test_unknown_session_leaves_store_unchanged(session_store):
    session_store.create_session()
    session_store.append_user_message(session_store.active_session_id, "hi")
    counts_before = session_store.message_counts()

    with pytest.raises(NotFoundError):
        session_store.append_user_message("missing", "hello")

    assert session_store.message_counts() == counts_before


@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_blank_user_message_is_rejected(session_store, text):
    session = session_store.active_session
    with pytest.raises(InvalidInputError):
        session_store.append_user_message(session.id, text)
    assert len(session.messages) == 1
    assert session.title == "New Chat"


def test_select_session(session_store):
    first = session_store.active_session
    session_store.create_session()

    assert session_store.select_session(first.id) is first
    assert session_store.active_session_id == first.id
    with pytest.raises(NotFoundError):
        session_store.select_session("missing")
    assert session_store.active_session_id == first.id


def test_rename_requires_title(session_store):
    session = session_store.active_session
    with pytest.raises(InvalidInputError):
        session_store.rename_session(session.id, "  ")
    with pytest.raises(NotFoundError):
        session_store.rename_session("missing", "Title")


def test_delete_active_session_moves_to_newest_remaining(session_store):
    oldest = session_store.active_session
    middle = session_store.create_session()
    newest = session_store.create_session()

    session_store.delete_session(newest.id)

    assert session_store.active_session_id == middle.id
    assert [s.id for s in session_store.list_sessions()] == [middle.id, oldest.id]


def test_deleting_last_session_creates_a_fresh_one(session_store):
    only = session_store.active_session
    session_store.delete_session(only.id)

    sessions = session_store.list_sessions()
    assert len(sessions) == 1
    assert sessions[0].id != only.id
    assert session_store.active_session_id == sessions[0].id
    with pytest.raises(NotFoundError):
        session_store.delete_session(only.id)


def test_export_session(session_store):
    session = session_store.active_session
    session_store.append_user_message(session.id, "hello")

    exported = session_store.export_session(session.id)

    assert [m["role"] for m in exported["messages"]] == ["assistant", "user"]
    assert "createdAt" in exported["messages"][0]
    assert "usage" not in exported["messages"][1]
    assert exported["exportedAt"]


def test_listeners_receive_sessions_after_each_change():
    store = SessionStore()
    calls = []
    store.subscribe(calls.append)

    session = store.active_session
    store.append_user_message(session.id, "hi")
    store.create_session()
    with pytest.raises(NotFoundError):
        store.append_user_message("missing", "hi")

    assert len(calls) == 2
    assert len(calls[-1]) == 2


def test_store_restored_from_sessions_keeps_order():
    original = SessionStore()
    original.create_session()
    sessions = original.list_sessions()

    restored = SessionStore(sessions)

    assert [s.id for s in restored.list_sessions()] == [s.id for s in sessions]
    assert restored.active_session_id == sessions[0].id


def test_export_single_message():
    store = SessionStore()
    session = store.active_session
    message = store.append_user_message(session.id, "Keep this one")

    exported = store.export_message(session.id, message.id)
    assert exported["id"] == message.id
    assert exported["role"] == "user"
    assert exported["content"] == "Keep this one"
    assert "createdAt" in exported
    assert "usage" not in exported

    greeting = store.export_message(session.id, session.messages[0].id)
    assert greeting["modelId"] == "gpt-4"
    assert greeting["usage"]["totalUnits"] == 25

    with pytest.raises(NotFoundError):
        store.export_message(session.id, "missing")
    with pytest.raises(NotFoundError):
        store.export_message("missing", message.id)
