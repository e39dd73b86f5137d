import json

from flask import current_app
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from turntimer import db
from turntimer.models import ScriptState
from .state import TimerState


class TimerStore:
    """Loads and saves the timer state blob in the script key-value store."""

    def __init__(self, key: str = 'TurnTimerOverlay'):
        self.key = key

    def load(self) -> TimerState:
        row = ScriptState.query.get(self.key)
        if row is None:
            state = TimerState()
            self.save(state)
            current_app.logger.info(f"[state-init] key={self.key} created with defaults")
            return state
        try:
            data = json.loads(row.data or '{}')
        except ValueError:
            current_app.logger.warning(f"[state-corrupt] key={self.key} unreadable, using defaults")
            data = {}
        return TimerState.from_dict(data)

    def save(self, state: TimerState) -> None:
        row = ScriptState.query.get(self.key)
        if row is None:
            row = ScriptState(key=self.key)
        row.data = json.dumps(state.to_dict())
        try:
            db.session.add(row)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.exception(f"[state-save-failed] key={self.key}")

    def ready(self) -> bool:
        """True once the script_state table exists (migrations have run)."""
        return inspect(db.engine).has_table(ScriptState.__tablename__)
