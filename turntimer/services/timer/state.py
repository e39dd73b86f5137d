import re
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any, Dict, Optional


@dataclass
class TimerConfig:
    """Tunables of the turn timer, persisted alongside the timer state."""

    # Timer settings
    default_duration: int = 60
    warning_threshold: int = 30
    danger_threshold: int = 10
    auto_advance: bool = True

    # Display settings
    font_size: int = 56
    font_family: str = "Arial"
    default_color: str = "#00FF00"
    warning_color: str = "#FFA500"
    danger_color: str = "#FF0000"
    paused_color: str = "#AAAAAA"

    # Initial overlay placement
    initial_left: int = 200
    initial_top: int = 150

    # Notifications
    announce_in_chat: bool = True
    whisper_to_gm: bool = False
    show_time_warnings: bool = True

    # Icons
    turn_icon: str = "🎯"
    timer_icon: str = "⏱️"
    paused_icon: str = "⏸️"
    warning_icon: str = "⚠️"

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "TimerConfig":
        data = data or {}
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ConfigKey(Enum):
    """Settings that can be changed by name, with their coercion rules."""

    DURATION = ('duration', 'default_duration', 'int', 60)
    WARNING = ('warning', 'warning_threshold', 'int', 30)
    DANGER = ('danger', 'danger_threshold', 'int', 10)
    AUTO_ADVANCE = ('autoadvance', 'auto_advance', 'bool', False)
    ANNOUNCE = ('announce', 'announce_in_chat', 'bool', False)
    WHISPER = ('whisper', 'whisper_to_gm', 'bool', False)
    FONT_SIZE = ('fontsize', 'font_size', 'int', 56)
    WARNINGS = ('warnings', 'show_time_warnings', 'bool', False)

    def __init__(self, token, field_name, kind, fallback):
        self.token = token
        self.field_name = field_name
        self.kind = kind
        self.fallback = fallback

    @classmethod
    def from_token(cls, token: Optional[str]) -> Optional["ConfigKey"]:
        if not token:
            return None
        token = token.strip().lower()
        for key in cls:
            if key.token == token:
                return key
        return None


_LEADING_INT_RE = re.compile(r'^\s*([-+]?\d+)')


def parse_int(raw: Any) -> Optional[int]:
    """Parse a leading integer the way chat arguments are written (``"45s"`` -> 45)."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw)
    match = _LEADING_INT_RE.match(str(raw))
    if not match:
        return None
    return int(match.group(1))


def parse_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in ('true', 'on')


def apply_setting(config: TimerConfig, key: ConfigKey, raw: Any) -> Any:
    """Coerce ``raw`` for ``key``, store it on ``config`` and return the stored value.

    Unparseable or zero integers fall back to the key's default.
    """
    if key.kind == 'int':
        value = parse_int(raw) or key.fallback
    else:
        value = parse_bool(raw)
    setattr(config, key.field_name, value)
    return value


@dataclass
class TimerState:
    """Process-wide timer state.

    ``overlay_id`` is a weak handle: the text object it names may have been
    deleted by someone else.
    """

    is_running: bool = False
    is_paused: bool = False
    remaining_time: int = 0
    current_turn_name: str = ""
    overlay_id: Optional[str] = None
    saved_position: Optional[Dict[str, float]] = None
    config: TimerConfig = field(default_factory=TimerConfig)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "TimerState":
        data = data or {}
        is_running = bool(data.get('is_running', False))
        position = data.get('saved_position')
        if not (isinstance(position, dict) and 'left' in position and 'top' in position):
            position = None
        return cls(
            is_running=is_running,
            is_paused=is_running and bool(data.get('is_paused', False)),
            remaining_time=parse_int(data.get('remaining_time')) or 0,
            current_turn_name=data.get('current_turn_name') or "",
            overlay_id=data.get('overlay_id') or None,
            saved_position=position,
            config=TimerConfig.from_dict(data.get('config')),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'is_running': self.is_running,
            'is_paused': self.is_paused,
            'remaining_time': self.remaining_time,
            'current_turn_name': self.current_turn_name,
            'overlay_id': self.overlay_id,
            'saved_position': self.saved_position,
            'config': self.config.to_dict(),
        }
