import json

from turntimer import db
from turntimer.models import Campaign, Character, Token
from turntimer.services.timer import turn_order
from turntimer.services.timer.turn_order import TurnEntry

from conftest import make_turn_order


def _ids():
    return [entry.id for entry in turn_order.get_turn_order()]


def test_empty_and_missing_order(flask_app):
    campaign = Campaign.current()
    assert turn_order.get_turn_order() == []
    campaign.turnorder = ''
    db.session.commit()
    assert turn_order.get_turn_order() == []
    assert turn_order.current_turn_name() == "No Turn"


def test_corrupt_order_reads_as_empty(flask_app):
    campaign = Campaign.current()
    campaign.turnorder = '{not json'
    db.session.commit()
    assert turn_order.get_turn_order() == []


def test_rotate_forward_moves_head_to_tail(flask_app):
    entries = make_turn_order('Alice', 'Bob', 'Cara')
    assert turn_order.rotate_forward() is True
    assert _ids() == [entries[1].id, entries[2].id, entries[0].id]
    assert turn_order.current_turn_name() == "Bob"


def test_full_cycle_restores_order(flask_app):
    entries = make_turn_order('Alice', 'Bob', 'Cara', 'Dane')
    original = [e.id for e in entries]
    for _ in range(len(entries)):
        assert turn_order.rotate_forward()
    assert _ids() == original


def test_backward_is_inverse_of_forward(flask_app):
    entries = make_turn_order('Alice', 'Bob', 'Cara')
    original = [e.id for e in entries]
    turn_order.rotate_forward()
    turn_order.rotate_backward()
    assert _ids() == original
    turn_order.rotate_backward()
    assert _ids() == [original[2], original[0], original[1]]
    turn_order.rotate_forward()
    assert _ids() == original


def test_rotation_needs_two_entries(flask_app):
    entries = make_turn_order('Alice')
    assert turn_order.rotate_forward() is False
    assert turn_order.rotate_backward() is False
    assert _ids() == [entries[0].id]

    turn_order.set_turn_order([])
    assert turn_order.rotate_forward() is False


def test_rotation_preserves_unknown_keys(flask_app):
    make_turn_order('Alice', 'Bob')
    campaign = Campaign.current()
    raw = json.loads(campaign.turnorder)
    raw[0]['_pageid'] = 'page-x'
    campaign.turnorder = json.dumps(raw)
    db.session.commit()

    turn_order.rotate_forward()
    stored = json.loads(Campaign.current().turnorder)
    assert stored[1]['_pageid'] == 'page-x'
    assert stored[1]['pr'] == '20'


def test_rotation_keeps_foreign_items_and_absent_keys(flask_app):
    alice, bob = make_turn_order('Alice', 'Bob')
    campaign = Campaign.current()
    campaign.turnorder = json.dumps([{'id': alice.id, 'pr': '20'}, 'marker', {'id': bob.id, 'pr': '19'}])
    db.session.commit()

    assert turn_order.rotate_forward() is True
    stored = json.loads(Campaign.current().turnorder)
    assert stored == ['marker', {'id': bob.id, 'pr': '19'}, {'id': alice.id, 'pr': '20'}]
    assert turn_order.current_turn_name() == 'Unknown'

    assert turn_order.rotate_backward() is True
    stored = json.loads(Campaign.current().turnorder)
    assert stored == [{'id': alice.id, 'pr': '20'}, 'marker', {'id': bob.id, 'pr': '19'}]
    assert turn_order.current_turn_name() == 'Alice'


def test_name_resolution_chain(flask_app):
    character = Character(name='Sir Galahad')
    named = Token(name='Knight', represents=character.id)
    orphan = Token(name='Goblin', represents='-missing')
    blank = Token(name='')
    db.session.add_all([character, named, orphan, blank])
    db.session.commit()

    assert turn_order.resolve_name(TurnEntry(id=named.id)) == 'Sir Galahad'
    assert turn_order.resolve_name(TurnEntry(id=orphan.id)) == 'Goblin'
    assert turn_order.resolve_name(TurnEntry(id=blank.id)) == 'Unnamed Token'
    assert turn_order.resolve_name(TurnEntry(id='-gone', custom='Ghost')) == 'Ghost'
    assert turn_order.resolve_name(TurnEntry(id='-gone')) == 'Unknown'
    assert turn_order.resolve_name(TurnEntry(id='-1', custom='Lair Action')) == 'Lair Action'
    assert turn_order.resolve_name(TurnEntry(id='-1')) == 'Custom Turn'
