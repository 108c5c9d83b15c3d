import pytest
from sqlalchemy.exc import OperationalError

from alumnet.modules.connections.models import Message
from alumnet.modules.connections.service import ConnectionManager
from alumnet.modules.messaging.service import NOT_A_PARTY, MessagingService
from alumnet.schemas.enums import ErrorKind


@pytest.fixture
def people(make_profile):
    make_profile("xavier", "Xavier", "Xu", photo_url="https://cdn.example.com/x.png")
    make_profile("yasmin", "Yasmin", "Young")
    make_profile("zoe", "Zoe", "Zhang")


@pytest.fixture
def messaging(db, sessions_for):
    def _service(user_id, **kwargs):
        return MessagingService(db, sessions_for(user_id, **kwargs))

    return _service


@pytest.fixture
def accepted(db, people):
    ConnectionManager(db, "xavier").connect("yasmin")
    return ConnectionManager(db, "yasmin").accept("xavier")


def test_full_conversation(db, messaging, accepted):
    sent = messaging("xavier").send_message(accepted.id, "  hello  ")
    assert sent.success
    assert sent.data.content == "hello"
    assert sent.data.is_read is False

    fetched = messaging("yasmin").fetch_messages(accepted.id)
    assert fetched.success
    assert [(m.content, m.is_read) for m in fetched.data] == [("hello", False)]

    first = messaging("yasmin").mark_messages_as_read(accepted.id)
    assert first.success and first.data == {"updated": 1}
    assert [m.is_read for m in messaging("yasmin").fetch_messages(accepted.id).data] == [True]

    again = messaging("yasmin").mark_messages_as_read(accepted.id)
    assert again.success and again.data == {"updated": 0}
    assert [m.is_read for m in messaging("yasmin").fetch_messages(accepted.id).data] == [True]


def test_messages_come_back_in_send_order(messaging, accepted):
    for text in ("one", "two", "three"):
        messaging("xavier").send_message(accepted.id, text)
    messaging("yasmin").send_message(accepted.id, "four")

    result = messaging("xavier").fetch_messages(accepted.id)
    assert [m.content for m in result.data] == ["one", "two", "three", "four"]
    assert isinstance(result.data, list)


def test_mark_read_skips_own_messages(messaging, accepted):
    messaging("xavier").send_message(accepted.id, "from x")
    messaging("yasmin").send_message(accepted.id, "from y")

    messaging("xavier").mark_messages_as_read(accepted.id)

    by_content = {m.content: m.is_read for m in messaging("xavier").fetch_messages(accepted.id).data}
    assert by_content == {"from x": False, "from y": True}


def test_send_on_pending_connection_is_unauthorized(db, messaging, people):
    conn = ConnectionManager(db, "xavier").connect("yasmin")

    for user in ("xavier", "yasmin"):
        result = messaging(user).send_message(conn.id, "hi")
        assert not result.success
        assert result.code == ErrorKind.unauthorized
        assert result.error == NOT_A_PARTY

    assert db.query(Message).count() == 0


def test_send_on_rejected_connection_is_unauthorized(db, messaging, people):
    conn = ConnectionManager(db, "xavier").connect("yasmin")
    ConnectionManager(db, "yasmin").reject("xavier")

    result = messaging("xavier").send_message(conn.id, "hi")
    assert result.code == ErrorKind.unauthorized


def test_outsider_cannot_read_or_write(messaging, accepted):
    messaging("xavier").send_message(accepted.id, "private")
    outsider = messaging("zoe")

    assert outsider.fetch_messages(accepted.id).code == ErrorKind.unauthorized
    assert outsider.send_message(accepted.id, "let me in").code == ErrorKind.unauthorized
    assert outsider.mark_messages_as_read(accepted.id).code == ErrorKind.unauthorized


def test_removed_connection_blocks_both_parties(db, messaging, accepted):
    messaging("xavier").send_message(accepted.id, "before")
    ConnectionManager(db, "xavier").remove("yasmin")

    for user in ("xavier", "yasmin"):
        result = messaging(user).send_message(accepted.id, "after")
        assert not result.success
        assert result.code == ErrorKind.unauthorized
        assert messaging(user).fetch_messages(accepted.id).code == ErrorKind.unauthorized


def test_new_connection_after_removal_does_not_see_old_messages(db, messaging, accepted):
    messaging("xavier").send_message(accepted.id, "old")
    ConnectionManager(db, "xavier").remove("yasmin")

    ConnectionManager(db, "yasmin").connect("xavier")
    fresh = ConnectionManager(db, "xavier").accept("yasmin")

    assert fresh.id != accepted.id
    assert messaging("xavier").fetch_messages(fresh.id).data == []


def test_empty_content_fails_before_any_backend_call(db, messaging, accepted):
    service = messaging("xavier")
    result = service.send_message(accepted.id, "   ")

    assert not result.success
    assert result.code == ErrorKind.validation
    assert service.sessions.auth.calls == []
    assert db.query(Message).count() == 0


def test_no_session_is_unauthenticated(messaging, accepted):
    result = messaging(None).fetch_messages(accepted.id)

    assert not result.success
    assert result.code == ErrorKind.unauthenticated
    assert result.error == "No valid authentication token found"


def test_rejected_token_is_unauthenticated(messaging, accepted):
    service = messaging("xavier")
    service.sessions.auth.user = None

    result = service.send_message(accepted.id, "hi")
    assert result.code == ErrorKind.unauthenticated
    assert result.error == "Invalid or expired authentication token"


def test_backend_failure_becomes_result(db, messaging, accepted, monkeypatch):
    def broken_commit():
        raise OperationalError("INSERT", {}, Exception("database is locked"))

    monkeypatch.setattr(db, "commit", broken_commit)

    result = messaging("xavier").send_message(accepted.id, "hi")
    assert not result.success
    assert result.code == ErrorKind.backend
    assert result.error == "Failed to send message"


def test_fetch_connections_joins_names(db, messaging, accepted, people):
    ConnectionManager(db, "zoe").connect("xavier")

    result = messaging("xavier").fetch_connections()
    assert result.success
    assert len(result.data) == 1

    conv = result.data[0]
    assert conv.id == accepted.id
    assert (conv.requester.first_name, conv.requester.last_name) == ("Xavier", "Xu")
    assert conv.requester.photo_url == "https://cdn.example.com/x.png"
    assert (conv.addressee.first_name, conv.addressee.last_name) == ("Yasmin", "Young")


def test_fetch_connections_most_recent_first(db, messaging, accepted):
    from datetime import datetime, timedelta

    ConnectionManager(db, "zoe").connect("xavier")
    newer = ConnectionManager(db, "xavier").accept("zoe")

    accepted.updated_at = datetime(2024, 1, 1)
    newer.updated_at = datetime(2024, 1, 1) + timedelta(days=1)
    db.commit()

    ids = [c.id for c in messaging("xavier").fetch_connections().data]
    assert ids == [newer.id, accepted.id]
