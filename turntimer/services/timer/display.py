"""Pure formatting helpers for the overlay text."""

from .state import TimerConfig


def format_time(seconds: int) -> str:
    """Render seconds as ``M:SS``. Callers must not pass negative values."""
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}:{secs:02d}"


def color_for_remaining(seconds: int, config: TimerConfig, paused: bool = False) -> str:
    if paused:
        return config.paused_color
    if seconds <= config.danger_threshold:
        return config.danger_color
    if seconds <= config.warning_threshold:
        return config.warning_color
    return config.default_color


def build_display_text(name: str, seconds: int, paused: bool, config: TimerConfig) -> str:
    time_str = format_time(seconds)
    text = f"{config.turn_icon} {name}\n"
    if paused:
        text += f"{config.paused_icon} {time_str} (PAUSED)"
    else:
        text += f"{config.timer_icon} {time_str}"
    return text
