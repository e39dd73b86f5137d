import threading
from typing import Any, Dict, Optional

from flask import current_app

from . import turn_order
from .display import format_time
from .notifications import Notifier
from .overlay import OverlayManager
from .scheduler import ScheduledTask, TaskScheduler
from .state import ConfigKey, TimerConfig, TimerState, apply_setting
from .store import TimerStore

VERSION = "1.0"
DEFAULT_ADD_SECONDS = 30


class TurnTimer:
    """Countdown state machine for the head of the turn order.

    States are Stopped, Running and Paused (``is_paused`` implies
    ``is_running``). The state is loaded from the script store when the app
    starts, or on first use, and saved after every mutation. Public
    operations hold a re-entrant lock, so ticks from background tasks never
    interleave with commands.
    """

    def __init__(self, app=None):
        self._lock = threading.RLock()
        self._state: Optional[TimerState] = None
        self._overlay: Optional[OverlayManager] = None
        self._notifier: Optional[Notifier] = None
        self._tick_task: Optional[ScheduledTask] = None
        self._advance_task: Optional[ScheduledTask] = None
        self._advance_held = False
        self._store = TimerStore()
        self.scheduler: Optional[TaskScheduler] = None
        self.tick_interval = 1.0
        self.advance_delay = 1.0
        if app is not None:
            self.init_app(app)

    def init_app(self, app) -> None:
        with self._lock:
            if self.scheduler is not None:
                self.scheduler.cancel(self._tick_task)
                self.scheduler.cancel(self._advance_task)
            self._state = None
            self._overlay = None
            self._notifier = None
            self._tick_task = None
            self._advance_task = None
            self._advance_held = False
            self._store = TimerStore(app.config.get('TURN_TIMER_STATE_KEY', 'TurnTimerOverlay'))
            self.scheduler = TaskScheduler(app)
            self.tick_interval = float(app.config.get('TICK_INTERVAL_SEC', 1))
            self.advance_delay = float(app.config.get('AUTO_ADVANCE_DELAY_SEC', 1))
            app.extensions['turn_timer'] = self

            # Pick up a turn that was running when the process stopped
            with app.app_context():
                if self._store.ready():
                    self._ensure_loaded()

        app.logger.info("=" * 50)
        app.logger.info(f"Turn Timer Overlay v{VERSION} loaded successfully!")
        app.logger.info("Type !tt help for commands")
        app.logger.info("=" * 50)

    # ---- State access ----

    def _ensure_loaded(self) -> None:
        if self._state is None:
            with self._lock:
                if self._state is None:
                    self._load()

    @property
    def state(self) -> TimerState:
        self._ensure_loaded()
        return self._state

    @property
    def config(self) -> TimerConfig:
        return self.state.config

    @property
    def overlay(self) -> OverlayManager:
        self._ensure_loaded()
        return self._overlay

    @property
    def notifier(self) -> Notifier:
        self._ensure_loaded()
        return self._notifier

    def _load(self) -> None:
        state = self._store.load()
        self._state = state
        self._overlay = OverlayManager(state)
        self._notifier = Notifier(state)
        if state.is_running and not state.is_paused:
            # The process stopped mid-turn; keep counting from where it was
            current_app.logger.info(
                f"[timer-restore] turn={state.current_turn_name} remaining={state.remaining_time}s"
            )
            if state.remaining_time <= 0 and state.config.auto_advance:
                # Stopped during the auto-advance delay
                self._schedule_advance()
            else:
                self._start_ticking()

    def _save(self) -> None:
        self._store.save(self.state)

    def _start_ticking(self) -> None:
        self.scheduler.cancel(self._tick_task)
        self._tick_task = self.scheduler.call_every(self.tick_interval, self._on_tick, name='tick')

    def _cancel_tasks(self) -> None:
        self.scheduler.cancel(self._tick_task)
        self._tick_task = None
        self.scheduler.cancel(self._advance_task)
        self._advance_task = None
        self._advance_held = False

    def _schedule_advance(self) -> None:
        self._advance_task = self.scheduler.call_later(
            self.advance_delay, self._on_auto_advance, name='auto-advance'
        )

    def _refresh_overlay(self) -> None:
        state = self.state
        self.overlay.update(state.current_turn_name, max(state.remaining_time, 0), state.is_paused)

    # ---- Timer control ----

    def start(self, duration: Optional[int] = None) -> bool:
        with self._lock:
            state = self.state
            if not turn_order.get_turn_order():
                self.notifier.notify("Cannot start timer: Turn order is empty!")
                return False

            self.stop(silent=True)

            name = turn_order.current_turn_name()
            seconds = duration if duration and duration > 0 else state.config.default_duration

            state.is_running = True
            state.is_paused = False
            state.remaining_time = seconds
            state.current_turn_name = name

            self.overlay.create(name, seconds, False)

            if state.config.announce_in_chat:
                self.notifier.notify(f"{name}'s turn has started! ({format_time(seconds)})")

            self._start_ticking()
            self._save()
            current_app.logger.info(f"[timer-start] turn={name} duration={seconds}s")
            return True

    def stop(self, silent: bool = False) -> None:
        with self._lock:
            state = self.state
            self._cancel_tasks()

            state.is_running = False
            state.is_paused = False
            state.remaining_time = 0

            self.overlay.remove()
            self._save()
            current_app.logger.info(f"[timer-stop] silent={silent}")

            if not silent:
                self.notifier.notify("Timer stopped.")

    def toggle_pause(self) -> bool:
        """Pause a running timer or resume a paused one. Returns the new paused flag."""
        with self._lock:
            state = self.state
            if not state.is_running:
                self.notifier.notify("No timer is running.")
                return False

            if state.is_paused:
                state.is_paused = False
                # The order may have moved on while we were paused
                if not self._detect_turn_change():
                    if self._advance_held or (state.remaining_time <= 0 and state.config.auto_advance):
                        # The turn already ended; only the advance is left
                        self._advance_held = False
                        self._schedule_advance()
                    else:
                        self._start_ticking()
                    self._refresh_overlay()
                self._save()
                current_app.logger.info(f"[timer-resume] remaining={state.remaining_time}s")
                self.notifier.notify("Timer resumed.")
                return False

            state.is_paused = True
            self.scheduler.cancel(self._tick_task)
            self._tick_task = None
            if self._advance_task is not None:
                self.scheduler.cancel(self._advance_task)
                self._advance_task = None
                self._advance_held = True
            self._refresh_overlay()
            self._save()
            current_app.logger.info(f"[timer-pause] remaining={state.remaining_time}s")
            self.notifier.notify(f"Timer paused at {format_time(max(state.remaining_time, 0))}")
            return True

    def _on_tick(self, task: ScheduledTask) -> None:
        with self._lock:
            if task is not self._tick_task or task.cancelled:
                current_app.logger.debug(f"[timer-tick-skip] task={task.id} stale")
                return
            self.tick()

    def tick(self) -> None:
        with self._lock:
            state = self.state
            if not state.is_running or state.is_paused:
                return

            config = state.config
            state.remaining_time -= 1
            remaining = state.remaining_time
            name = state.current_turn_name

            self.overlay.update(name, max(remaining, 0), False)

            if config.show_time_warnings and remaining in (config.warning_threshold, config.danger_threshold):
                self.notifier.notify(f"{config.warning_icon} {name} - {remaining} seconds remaining!")

            if remaining <= 0:
                self._expire()

            self._save()

    def _expire(self) -> None:
        state = self.state
        name = state.current_turn_name

        self.scheduler.cancel(self._tick_task)
        self._tick_task = None
        self.scheduler.cancel(self._advance_task)
        self._advance_task = None

        self.notifier.notify(f"{name}'s turn has ended!")
        current_app.logger.info(f"[timer-expire] turn={name} auto_advance={state.config.auto_advance}")

        if state.config.auto_advance:
            state.remaining_time = 0
            self._schedule_advance()
        else:
            # The overlay stays on screen at 0:00 until someone stops the timer
            state.is_running = False
            state.is_paused = False
            state.remaining_time = 0

    def _on_auto_advance(self, task: ScheduledTask) -> None:
        with self._lock:
            if task is not self._advance_task or task.cancelled:
                current_app.logger.info(f"[timer-advance-abort] task={task.id} superseded")
                return
            self._advance_task = None
            if not self.state.is_running:
                current_app.logger.info("[timer-advance-abort] timer stopped during delay")
                return
            if self._rotate_forward():
                self.start()
            else:
                self.stop(silent=True)

    # ---- Turn navigation ----

    def _rotate_forward(self) -> bool:
        if turn_order.rotate_forward():
            return True
        self.notifier.notify("No more turns in the turn order!")
        return False

    def next_turn(self) -> bool:
        with self._lock:
            if not self._rotate_forward():
                return False
            if self.state.is_running:
                self.start()
            else:
                self.notifier.notify(f"Advanced to: {turn_order.current_turn_name()}")
            return True

    def previous_turn(self) -> bool:
        with self._lock:
            if not turn_order.rotate_backward():
                self.notifier.notify("No previous turns available!")
                return False
            if self.state.is_running:
                self.start()
            else:
                self.notifier.notify(f"Went back to: {turn_order.current_turn_name()}")
            return True

    def current_turn_name(self) -> str:
        return turn_order.current_turn_name()

    def handle_turn_order_change(self) -> bool:
        """React to the turn order being changed by someone else.

        Detection compares display names, so two adjacent entries with the
        same name look like no change at all.
        """
        with self._lock:
            state = self.state
            if not state.is_running or state.is_paused:
                return False
            return self._detect_turn_change()

    def _detect_turn_change(self) -> bool:
        state = self.state
        name = turn_order.current_turn_name()
        if name == state.current_turn_name:
            return False

        if self._advance_task is not None:
            self.scheduler.cancel(self._advance_task)
            self._advance_task = None
        self._advance_held = False
        if self._tick_task is None:
            self._start_ticking()

        state.current_turn_name = name
        state.remaining_time = state.config.default_duration
        self.overlay.update(name, state.remaining_time, False)
        self._save()
        current_app.logger.info(f"[timer-external-change] turn={name}")
        self.notifier.notify(f"{name}'s turn! ({format_time(state.remaining_time)})")
        return True

    # ---- Time adjustments ----

    def add_time(self, seconds: Optional[int] = None) -> bool:
        with self._lock:
            state = self.state
            if seconds is None:
                seconds = DEFAULT_ADD_SECONDS
            if not state.is_running:
                return False
            state.remaining_time += seconds
            self._refresh_overlay()
            self._save()
            self.notifier.notify(f"Added {seconds} seconds.")
            return True

    def set_time(self, seconds: Optional[int]) -> bool:
        with self._lock:
            state = self.state
            if not seconds or seconds <= 0 or not state.is_running:
                return False
            state.remaining_time = seconds
            self._refresh_overlay()
            self._save()
            self.notifier.notify(f"Timer set to {format_time(seconds)}")
            return True

    # ---- Configuration ----

    def update_setting(self, key: ConfigKey, raw: Any) -> Any:
        with self._lock:
            value = apply_setting(self.state.config, key, raw)
            self._save()
            current_app.logger.info(f"[config-set] {key.field_name}={value!r}")
            return value

    def reset_config(self) -> TimerConfig:
        with self._lock:
            self.state.config = TimerConfig()
            self._save()
            current_app.logger.info("[config-reset] defaults restored")
            return self.state.config

    def status(self) -> Dict[str, Any]:
        state = self.state
        return {
            'running': state.is_running,
            'paused': state.is_paused,
            'current_turn': state.current_turn_name or None,
            'remaining_time': state.remaining_time,
            'remaining_display': format_time(max(state.remaining_time, 0)),
            'overlay_id': state.overlay_id,
        }
