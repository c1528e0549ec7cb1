import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from giftdraw.db.models import Base
from giftdraw.services.draw_engine import Assignment
from giftdraw.services.draw_store import DrawResult, MemoryDrawStore, SqlDrawStore


def create_session():
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)()


def make_draw(draw_id, tokens=("t1", "t2"), name=None, created_at=None):
    names = ["Ana", "Luis", "Carlos", "Rosa"][: len(tokens)]
    assignments = [
        Assignment(giver=giver, receiver=names[(i + 1) % len(names)], token=token)
        for i, (giver, token) in enumerate(zip(names, tokens))
    ]
    return DrawResult(
        id=draw_id,
        assignments=assignments,
        created_at=created_at
        or datetime.datetime(2025, 12, 1, 18, 30, 15, 123456, tzinfo=datetime.timezone.utc),
        name=name,
    )


@pytest.fixture(params=["memory", "sql"])
def store(request):
    if request.param == "memory":
        return MemoryDrawStore()
    return SqlDrawStore(create_session())


def test_append_and_list_round_trip(store):
    draw = make_draw("draw-1", tokens=("a", "b", "c"), name="Christmas")
    draw.assignments[1].accessed = True
    store.append(draw)

    [loaded] = store.list_draws()
    assert loaded.id == "draw-1"
    assert loaded.name == "Christmas"
    assert loaded.created_at == draw.created_at
    assert loaded.created_at.tzinfo is not None
    assert loaded.assignments == draw.assignments


def test_list_is_in_creation_order(store):
    base = datetime.datetime(2025, 12, 1, tzinfo=datetime.timezone.utc)
    store.append(make_draw("draw-b", tokens=("b1", "b2"), created_at=base + datetime.timedelta(hours=1)))
    store.append(make_draw("draw-a", tokens=("a1", "a2"), created_at=base))
    assert [draw.id for draw in store.list_draws()] == ["draw-a", "draw-b"]


def test_active_pointer(store):
    assert store.get_active_id() is None
    store.append(make_draw("draw-1", tokens=("x1", "x2")))
    store.set_active("draw-1")
    assert store.get_active_id() == "draw-1"
    with pytest.raises(KeyError):
        store.set_active("draw-missing")
    assert store.get_active_id() == "draw-1"


def test_claim_token_only_once(store):
    store.append(make_draw("draw-1", tokens=("x1", "x2")))
    assert store.claim_token("draw-1", "x1")
    assert not store.claim_token("draw-1", "x1")
    assert not store.claim_token("draw-1", "unknown")
    assert not store.claim_token("draw-other", "x2")

    [loaded] = store.list_draws()
    assert [a.accessed for a in loaded.assignments] == [True, False]


def test_clear_removes_draws_and_pointer(store):
    store.append(make_draw("draw-1", tokens=("x1", "x2")))
    store.set_active("draw-1")
    store.clear()
    assert store.list_draws() == []
    assert store.get_active_id() is None


def test_memory_store_hands_out_copies():
    store = MemoryDrawStore()
    store.append(make_draw("draw-1", tokens=("x1", "x2")))
    store.list_draws()[0].assignments[0].accessed = True
    assert store.list_draws()[0].assignments[0].accessed is False


def test_sql_store_naive_timestamp_is_read_as_utc():
    session = create_session()
    store = SqlDrawStore(session)
    naive = datetime.datetime(2025, 12, 24, 20, 0, 0)
    store.append(make_draw("draw-1", tokens=("x1", "x2"), created_at=naive))
    session.commit()
    session.expire_all()

    [loaded] = store.list_draws()
    assert loaded.created_at == naive.replace(tzinfo=datetime.timezone.utc)


def test_sql_store_survives_new_session():
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, expire_on_commit=False)

    first = factory()
    draw = make_draw("draw-1", tokens=("x1", "x2"), name="Office")
    SqlDrawStore(first).append(draw)
    SqlDrawStore(first).set_active("draw-1")
    first.commit()
    first.close()

    second = factory()
    store = SqlDrawStore(second)
    assert store.get_active_id() == "draw-1"
    [loaded] = store.list_draws()
    assert loaded == draw


def test_find_assignment(store):
    store.append(make_draw("draw-1", tokens=("x1", "x2")))
    store.append(make_draw("draw-2", tokens=("y1", "y2")))

    found = store.find_assignment("draw-1", "x2")
    assert found == Assignment(giver="Luis", receiver="Ana", token="x2", accessed=False)
    assert store.find_assignment("draw-1", "y1") is None
    assert store.find_assignment("draw-missing", "x1") is None

    store.claim_token("draw-1", "x2")
    assert store.find_assignment("draw-1", "x2").accessed is True


def test_find_assignment_returns_a_copy():
    store = MemoryDrawStore()
    store.append(make_draw("draw-1", tokens=("x1", "x2")))
    store.find_assignment("draw-1", "x1").accessed = True
    assert store.find_assignment("draw-1", "x1").accessed is False
