"""Chat command decoding and dispatch for ``!tt`` / ``!turntimer``."""

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Union

from flask import current_app

from .display import format_time
from .engine import DEFAULT_ADD_SECONDS, TurnTimer
from .state import ConfigKey, parse_int

PREFIXES = ('!tt', '!turntimer')


@dataclass(frozen=True)
class ChatMessage:
    content: str
    who: str
    type: str = 'api'


@dataclass(frozen=True)
class StartCommand:
    duration: Optional[int] = None


@dataclass(frozen=True)
class StopCommand:
    pass


@dataclass(frozen=True)
class PauseCommand:
    pass


@dataclass(frozen=True)
class NextCommand:
    pass


@dataclass(frozen=True)
class PreviousCommand:
    pass


@dataclass(frozen=True)
class AddTimeCommand:
    seconds: int = DEFAULT_ADD_SECONDS


@dataclass(frozen=True)
class SetTimeCommand:
    seconds: Optional[int] = None


@dataclass(frozen=True)
class ConfigCommand:
    setting: Optional[str] = None
    value: Optional[str] = None


@dataclass(frozen=True)
class StatusCommand:
    pass


@dataclass(frozen=True)
class HelpCommand:
    pass


Command = Union[
    StartCommand, StopCommand, PauseCommand, NextCommand, PreviousCommand,
    AddTimeCommand, SetTimeCommand, ConfigCommand, StatusCommand, HelpCommand,
]


def parse_command(content: str) -> Optional[Command]:
    """Decode a chat line; None when it is not addressed to the timer."""
    args = (content or '').split()
    if not args or args[0].lower() not in PREFIXES:
        return None

    sub = args[1].lower() if len(args) > 1 else 'help'
    arg = args[2] if len(args) > 2 else None

    if sub == 'start':
        return StartCommand(duration=parse_int(arg) or None)
    if sub == 'stop':
        return StopCommand()
    if sub in ('pause', 'resume'):
        return PauseCommand()
    if sub == 'next':
        return NextCommand()
    if sub in ('prev', 'previous'):
        return PreviousCommand()
    if sub == 'add':
        return AddTimeCommand(seconds=parse_int(arg) or DEFAULT_ADD_SECONDS)
    if sub == 'set':
        return SetTimeCommand(seconds=parse_int(arg))
    if sub == 'config':
        return ConfigCommand(
            setting=arg.lower() if arg else None,
            value=args[3] if len(args) > 3 else None,
        )
    if sub == 'status':
        return StatusCommand()
    return HelpCommand()


HELP_TEXT = (
    "&{template:default} {{name=Turn Timer Help}}"
    " {{!tt start [seconds]=Start timer (default: 60s)}}"
    " {{!tt stop=Stop timer and remove overlay}}"
    " {{!tt pause=Pause/Resume timer}}"
    " {{!tt next=Advance to next turn}}"
    " {{!tt prev=Go to previous turn}}"
    " {{!tt add [seconds]=Add time to current timer}}"
    " {{!tt set [seconds]=Set timer to specific time}}"
    " {{!tt status=Show current status}}"
    " {{!tt config=Show/change settings}}"
    " {{Config Options=" + ", ".join([k.token for k in ConfigKey] + ['reset']) + "}}"
)


class CommandDispatcher:
    """Turns chat messages into timer operations and whispers the results back."""

    def __init__(self, timer: TurnTimer):
        self.timer = timer
        self._handlers: Dict[type, Callable[[Command, ChatMessage], None]] = {
            StartCommand: self._start,
            StopCommand: self._stop,
            PauseCommand: self._pause,
            NextCommand: self._next,
            PreviousCommand: self._previous,
            AddTimeCommand: self._add,
            SetTimeCommand: self._set,
            ConfigCommand: self._config,
            StatusCommand: self._status,
            HelpCommand: self._help,
        }

    def handle_chat_message(self, msg: ChatMessage) -> Optional[Command]:
        if msg.type != 'api':
            return None
        command = parse_command(msg.content)
        if command is None:
            return None
        current_app.logger.info(f"[command] who={msg.who} command={command}")
        self.dispatch(command, msg)
        return command

    def dispatch(self, command: Command, msg: ChatMessage) -> None:
        handler = self._handlers[type(command)]
        handler(command, msg)

    def _start(self, command: StartCommand, msg: ChatMessage) -> None:
        self.timer.start(command.duration)

    def _stop(self, command: StopCommand, msg: ChatMessage) -> None:
        self.timer.stop()

    def _pause(self, command: PauseCommand, msg: ChatMessage) -> None:
        self.timer.toggle_pause()

    def _next(self, command: NextCommand, msg: ChatMessage) -> None:
        self.timer.next_turn()

    def _previous(self, command: PreviousCommand, msg: ChatMessage) -> None:
        self.timer.previous_turn()

    def _add(self, command: AddTimeCommand, msg: ChatMessage) -> None:
        self.timer.add_time(command.seconds)

    def _set(self, command: SetTimeCommand, msg: ChatMessage) -> None:
        self.timer.set_time(command.seconds)

    def _config(self, command: ConfigCommand, msg: ChatMessage) -> None:
        notifier = self.timer.notifier
        if not command.setting:
            config = self.timer.config
            notifier.reply(
                msg.who,
                "&{template:default} {{name=Turn Timer Config}}"
                f" {{{{Duration={config.default_duration}s}}}}"
                f" {{{{Warning={config.warning_threshold}s}}}}"
                f" {{{{Danger={config.danger_threshold}s}}}}"
                f" {{{{Auto Advance={_flag(config.auto_advance)}}}}}"
                f" {{{{Chat Announce={_flag(config.announce_in_chat)}}}}}"
                f" {{{{Whisper GM={_flag(config.whisper_to_gm)}}}}}"
                f" {{{{Time Warnings={_flag(config.show_time_warnings)}}}}}"
                f" {{{{Font Size={config.font_size}}}}}",
            )
            return

        if command.setting == 'reset':
            self.timer.reset_config()
            notifier.reply(msg.who, "Configuration reset to defaults.")
            return

        key = ConfigKey.from_token(command.setting)
        if key is None:
            notifier.reply(msg.who, f"Unknown setting: {command.setting}")
            return

        value = self.timer.update_setting(key, command.value)
        shown = _flag(value) if isinstance(value, bool) else value
        notifier.reply(msg.who, f"Setting updated: {key.token} = {shown}")

    def _status(self, command: StatusCommand, msg: ChatMessage) -> None:
        status = self.timer.status()
        self.timer.notifier.reply(
            msg.who,
            "&{template:default} {{name=Turn Timer Status}}"
            f" {{{{Running={_flag(status['running'])}}}}}"
            f" {{{{Paused={_flag(status['paused'])}}}}}"
            f" {{{{Current Turn={status['current_turn'] or 'None'}}}}}"
            f" {{{{Time Remaining={format_time(max(status['remaining_time'], 0))}}}}}",
        )

    def _help(self, command: HelpCommand, msg: ChatMessage) -> None:
        self.timer.notifier.reply(msg.who, HELP_TEXT)


def _flag(value: bool) -> str:
    return 'true' if value else 'false'
