"""Scene-graph text objects as seen by scripts.

Every mutation is committed and broadcast to the campaign room so that
connected tabletop clients can redraw.
"""

from typing import Optional

from flask import current_app

from turntimer import db, socketio
from turntimer.models import TextObject


def _broadcast(event: str, payload: dict) -> None:
    socketio.emit(event, payload, to='campaign', namespace='/ws')


def get_text(object_id: Optional[str]) -> Optional[TextObject]:
    if not object_id:
        return None
    return TextObject.query.get(object_id)


def create_text(**props) -> TextObject:
    obj = TextObject(**props)
    db.session.add(obj)
    db.session.commit()
    current_app.logger.debug(f"[scene-add] text={obj.id} left={obj.left} top={obj.top}")
    _broadcast('object_added', obj.to_dict())
    return obj


def update_text(obj: TextObject, **props) -> TextObject:
    for name, value in props.items():
        setattr(obj, name, value)
    db.session.add(obj)
    db.session.commit()
    _broadcast('object_changed', obj.to_dict())
    return obj


def move_text(object_id: str, left: float, top: float) -> Optional[TextObject]:
    """Reposition a text object, as a user dragging it on the table would."""
    obj = get_text(object_id)
    if obj is None:
        return None
    return update_text(obj, left=float(left), top=float(top))


def remove_text(obj: TextObject) -> None:
    payload = {'id': obj.id}
    db.session.delete(obj)
    db.session.commit()
    current_app.logger.debug(f"[scene-remove] text={payload['id']}")
    _broadcast('object_removed', payload)
