import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from flask import current_app

from turntimer import db, socketio
from turntimer.models import Campaign, Character, Token

FREE_TEXT_ID = "-1"


@dataclass
class TurnEntry:
    """One slot of the host's turn order.

    Keys the timer does not use (initiative ``pr``, ``_pageid``...) are kept
    in ``extra`` so that writing the order back does not lose them.
    """

    id: str
    custom: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TurnEntry":
        data = dict(data)
        entry_id = str(data.pop('id', FREE_TEXT_ID))
        custom = data.pop('custom', None)
        return cls(id=entry_id, custom=None if custom is None else str(custom), extra=data)

    def to_dict(self) -> Dict[str, Any]:
        out = {'id': self.id}
        out.update(self.extra)
        if self.custom is not None:
            out['custom'] = self.custom
        return out

    @property
    def is_free_text(self) -> bool:
        return self.id == FREE_TEXT_ID


def get_raw_turn_order(campaign: Optional[Campaign] = None) -> List[Any]:
    """The stored list exactly as the host wrote it, items of any shape included."""
    campaign = campaign or Campaign.current()
    raw = campaign.turnorder
    if not raw or raw == "[]":
        return []
    try:
        items = json.loads(raw)
    except ValueError:
        current_app.logger.warning(f"[turnorder-corrupt] campaign={campaign.id} value={raw[:80]!r}")
        return []
    if not isinstance(items, list):
        return []
    return items


def get_turn_order(campaign: Optional[Campaign] = None) -> List[TurnEntry]:
    return [TurnEntry.from_dict(item) for item in get_raw_turn_order(campaign) if isinstance(item, dict)]


def _write(items: List[Any], campaign: Campaign) -> None:
    campaign.turnorder = json.dumps(items)
    db.session.add(campaign)
    db.session.commit()
    socketio.emit('turnorder_update', {'turnorder': items}, to='campaign', namespace='/ws')


def set_turn_order(entries: List[TurnEntry], campaign: Optional[Campaign] = None) -> None:
    _write([entry.to_dict() for entry in entries], campaign or Campaign.current())


def rotate_forward(campaign: Optional[Campaign] = None) -> bool:
    """Move the head entry to the tail. Returns False for orders shorter than two."""
    campaign = campaign or Campaign.current()
    items = get_raw_turn_order(campaign)
    if len(items) <= 1:
        return False
    items.append(items.pop(0))
    _write(items, campaign)
    return True


def rotate_backward(campaign: Optional[Campaign] = None) -> bool:
    """Move the tail entry to the head. Returns False for orders shorter than two."""
    campaign = campaign or Campaign.current()
    items = get_raw_turn_order(campaign)
    if len(items) <= 1:
        return False
    items.insert(0, items.pop())
    _write(items, campaign)
    return True


def resolve_name(entry: TurnEntry) -> str:
    if entry.is_free_text:
        return entry.custom or "Custom Turn"

    token = Token.query.get(entry.id)
    if token is None:
        return entry.custom or "Unknown"

    if token.represents:
        character = Character.query.get(token.represents)
        if character is not None:
            return character.name

    return token.name or "Unnamed Token"


def current_turn_name(campaign: Optional[Campaign] = None) -> str:
    items = get_raw_turn_order(campaign)
    if not items:
        return "No Turn"
    if not isinstance(items[0], dict):
        return "Unknown"
    return resolve_name(TurnEntry.from_dict(items[0]))
