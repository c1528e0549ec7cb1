import pytest

from giftdraw.services.draw_engine import Restriction
from giftdraw.services.roster import Roster, RosterError


def make_roster(*names, capacity=13):
    roster = Roster(capacity=capacity)
    for name in names:
        roster.add_participant(name)
    return roster


def test_add_participant_strips_name_and_assigns_unique_ids():
    roster = make_roster("  Ana ", "Luis")
    participants = roster.participants
    assert [p.name for p in participants] == ["Ana", "Luis"]
    assert participants[0].id != participants[1].id
    assert participants[0].id.startswith("p-")


def test_add_participant_rejects_blank_name():
    roster = Roster(capacity=3)
    with pytest.raises(RosterError):
        roster.add_participant("   ")


def test_add_participant_rejects_when_full():
    roster = make_roster("A", "B", capacity=2)
    assert roster.is_full
    with pytest.raises(RosterError, match="already have 2"):
        roster.add_participant("C")


def test_restriction_replaces_instead_of_merging():
    roster = make_roster("P", "A", "B")
    p, a, b = roster.participants
    roster.set_restriction(p.id, [a.id])
    roster.set_restriction(p.id, [b.id])
    assert roster.forbidden_for(p.id) == (b.id,)
    assert roster.restrictions == [Restriction(p.id, (b.id,))]


def test_restriction_drops_self_and_duplicates():
    roster = make_roster("P", "A")
    p, a = roster.participants
    restriction = roster.set_restriction(p.id, [p.id, a.id, a.id])
    assert restriction.cannot_give_to == (a.id,)


def test_restriction_requires_known_ids_and_a_receiver():
    roster = make_roster("P", "A")
    p, a = roster.participants
    with pytest.raises(RosterError):
        roster.set_restriction("p-missing", [a.id])
    with pytest.raises(RosterError):
        roster.set_restriction(p.id, [])
    with pytest.raises(RosterError):
        roster.set_restriction(p.id, ["p-missing"])


def test_remove_participant_scrubs_restrictions():
    roster = make_roster("A", "B", "C")
    a, b, c = roster.participants
    roster.set_restriction(a.id, [b.id, c.id])
    roster.set_restriction(b.id, [a.id])
    roster.set_restriction(c.id, [b.id])

    assert roster.remove_participant(b.id)
    assert [p.name for p in roster.participants] == ["A", "C"]
    assert roster.forbidden_for(a.id) == (c.id,)
    assert roster.forbidden_for(b.id) == ()
    assert roster.forbidden_for(c.id) == ()
    assert not roster.remove_participant(b.id)


def test_remove_restriction():
    roster = make_roster("A", "B")
    a, b = roster.participants
    roster.set_restriction(a.id, [b.id])
    assert roster.remove_restriction(a.id)
    assert not roster.remove_restriction(a.id)
    assert roster.restrictions == []


def test_participant_at_is_one_based():
    roster = make_roster("A", "B")
    assert roster.participant_at(1).name == "A"
    assert roster.participant_at(2).name == "B"
    with pytest.raises(RosterError):
        roster.participant_at(0)
    with pytest.raises(RosterError):
        roster.participant_at(3)


def test_dict_form_restores_roster():
    roster = make_roster("A", "B", "C", capacity=5)
    roster.list_name = "Christmas 2025"
    a, b, _ = roster.participants
    roster.set_restriction(a.id, [b.id])

    restored = Roster.from_dict(roster.to_dict(), capacity=5)
    assert restored.list_name == "Christmas 2025"
    assert restored.participants == roster.participants
    assert restored.restrictions == roster.restrictions
    assert restored.capacity == 5


def test_from_empty_dict_and_clear():
    assert Roster.from_dict(None).participants == []
    roster = make_roster("A")
    roster.list_name = "x"
    roster.clear()
    assert roster.participants == []
    assert roster.list_name is None
