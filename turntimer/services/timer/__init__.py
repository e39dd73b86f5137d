"""Turn timer script: countdown state machine, overlay and chat commands.

This package holds the script logic; HTTP routes and socket handlers
import the shared ``turn_timer`` and ``dispatcher`` instances from here,
keeping transport concerns out of the timer itself.
"""

from .commands import ChatMessage, CommandDispatcher, parse_command
from .engine import TurnTimer

turn_timer = TurnTimer()
dispatcher = CommandDispatcher(turn_timer)

__all__ = [
    'ChatMessage',
    'CommandDispatcher',
    'TurnTimer',
    'dispatcher',
    'parse_command',
    'turn_timer',
]
