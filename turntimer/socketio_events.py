from flask_socketio import join_room, emit
from flask_login import current_user
from flask import current_app
from typing import Any, Dict

from turntimer import socketio
from turntimer.chat import whisper_room
from turntimer import scene
from turntimer.services.timer import ChatMessage, dispatcher, turn_timer
from turntimer.services.timer.turn_order import TurnEntry, set_turn_order


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def _identity(data: Dict[str, Any]):
    """Who is speaking: the logged-in user, else the name the client sent."""
    if current_user and current_user.is_authenticated:
        return current_user.username, bool(current_user.is_gm)
    return (data.get('who') or '').strip(), bool(data.get('is_gm'))


def handle_join_campaign(data):
    who, is_gm = _identity(data or {})
    rooms = ['campaign']
    if who:
        rooms.append(whisper_room(who))
    if is_gm:
        rooms.append('gm')
    for room in rooms:
        join_room(room)
    emit('joined', {'rooms': rooms})


def handle_chat_message(data):
    data = data or {}
    content = data.get('content')
    who, _ = _identity(data)
    if not content or not who:
        emit('error', {'message': 'content and who are required'})
        return
    dispatcher.handle_chat_message(ChatMessage(content=content, who=who, type=data.get('type') or 'api'))


def handle_move_object(data):
    data = data or {}
    object_id = data.get('id')
    try:
        left = float(data.get('left'))
        top = float(data.get('top'))
    except (TypeError, ValueError):
        emit('error', {'message': 'id, left and top are required'})
        return
    if scene.move_text(object_id, left, top) is None:
        emit('error', {'message': f'Unknown object: {object_id}'})


def handle_turnorder_change(data):
    items = (data or {}).get('turnorder')
    if not isinstance(items, list):
        emit('error', {'message': 'turnorder must be a list'})
        return
    set_turn_order([TurnEntry.from_dict(item) for item in items if isinstance(item, dict)])
    changed = turn_timer.handle_turn_order_change()
    current_app.logger.info(f"[turnorder-change] entries={len(items)} turn_changed={changed}")


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    handlers = [
        ('connect', handle_connect),
        ('join_campaign', handle_join_campaign),
        ('chat_message', handle_chat_message),
        ('move_object', handle_move_object),
        ('turnorder_change', handle_turnorder_change),
        ('ping', handle_ping),
    ]
    for event, handler in handlers:
        socketio.on_event(event, handler, namespace='/ws')

    if testing:
        for event, handler in handlers:
            socketio.on_event(event, handler, namespace='/')
