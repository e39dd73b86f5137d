import re

from flask import current_app

from turntimer import socketio

# "/w gm text", "/w Alice text" or '/w "Jane Doe" text'
_WHISPER_RE = re.compile(r'^/w\s+("[^"]+"|\S+)\s+(.*)$', re.DOTALL)


def whisper_room(target: str) -> str:
    target = target.strip().lower()
    if target == 'gm':
        return 'gm'
    return f"player:{target}"


def send_chat(speaker: str, content: str) -> None:
    """Post a chat message, honouring a leading ``/w <target>`` directive."""
    match = _WHISPER_RE.match(content or '')
    if match:
        target = match.group(1).strip('"')
        payload = {'who': speaker, 'content': match.group(2), 'whisper': target}
        room = whisper_room(target)
    else:
        payload = {'who': speaker, 'content': content}
        room = 'campaign'
    current_app.logger.debug(f"[chat] to={room} who={speaker} content={payload['content']!r}")
    socketio.emit('chat', payload, to=room, namespace='/ws')
