from flask import current_app

from turntimer.chat import send_chat
from .state import TimerState


class Notifier:
    """Formats and sends every user-visible message of the timer."""

    def __init__(self, state: TimerState):
        self._state = state

    @property
    def speaker(self) -> str:
        return current_app.config.get('CHAT_SPEAKER', 'Turn Timer')

    def notify(self, message: str) -> bool:
        """Announce publicly or to the GM; silent when both channels are off."""
        config = self._state.config
        if not config.announce_in_chat and not config.whisper_to_gm:
            return False
        prefix = "/w gm " if config.whisper_to_gm else ""
        send_chat(self.speaker, prefix + message)
        return True

    def reply(self, who: str, message: str) -> None:
        """Whisper a response to the user who issued a command."""
        if ' ' in who:
            who = f'"{who}"'
        send_chat(self.speaker, f"/w {who} {message}")
