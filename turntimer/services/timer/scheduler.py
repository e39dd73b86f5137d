import itertools
from typing import Callable, Dict, List, Optional

from turntimer import socketio


class ScheduledTask:
    """A one-shot or repeating deferred callback."""

    def __init__(self, task_id: int, name: str, callback: Callable[["ScheduledTask"], None],
                 delay: float, repeat: bool):
        self.id = task_id
        self.name = name
        self.callback = callback
        self.delay = delay
        self.repeat = repeat
        self.cancelled = False
        # Virtual due time, only used in manual mode
        self.due = 0.0

    def __repr__(self):
        return f"<ScheduledTask {self.id} {self.name} delay={self.delay} repeat={self.repeat}>"


class TaskScheduler:
    """Runs deferred callbacks as Socket.IO background tasks.

    - In TESTING mode (unless ENABLE_SCHEDULER_IN_TESTS is set) tasks are
      queued on a virtual clock and only run when ``advance()`` is called
    - Cancelling is idempotent; a cancelled task never runs again
    - Callbacks receive their task so they can check it is still current
    """

    def __init__(self, app, manual: Optional[bool] = None):
        self._app = app
        if manual is None:
            manual = bool(app.config.get('TESTING')) and not app.config.get('ENABLE_SCHEDULER_IN_TESTS')
        self.manual = manual
        self._ids = itertools.count(1)
        self._pending: Dict[int, ScheduledTask] = {}
        self.clock = 0.0

    def call_later(self, delay: float, callback, name: str = 'task') -> ScheduledTask:
        return self._schedule(name, callback, delay, repeat=False)

    def call_every(self, interval: float, callback, name: str = 'interval') -> ScheduledTask:
        return self._schedule(name, callback, interval, repeat=True)

    def cancel(self, task: Optional[ScheduledTask]) -> None:
        if task is None or task.cancelled:
            return
        task.cancelled = True
        self._pending.pop(task.id, None)
        self._app.logger.debug(f"[task-cancel] id={task.id} name={task.name}")

    def pending(self) -> List[ScheduledTask]:
        return sorted(self._pending.values(), key=lambda t: (t.due, t.id))

    def advance(self, seconds: float) -> None:
        """Move the virtual clock forward, running every task that falls due."""
        if not self.manual:
            raise RuntimeError("advance() is only available in manual mode")
        target = self.clock + seconds
        while True:
            due = [t for t in self._pending.values() if t.due <= target]
            if not due:
                break
            task = min(due, key=lambda t: (t.due, t.id))
            self.clock = task.due
            if task.repeat:
                task.due += task.delay
            else:
                self._pending.pop(task.id, None)
            task.callback(task)
        self.clock = target

    def _schedule(self, name, callback, delay, repeat) -> ScheduledTask:
        task = ScheduledTask(next(self._ids), name, callback, float(delay), repeat)
        self._pending[task.id] = task
        self._app.logger.debug(f"[task-set] id={task.id} name={name} delay={delay}s repeat={repeat}")
        if self.manual:
            task.due = self.clock + task.delay
        else:
            socketio.start_background_task(self._worker, task)
        return task

    def _worker(self, task: ScheduledTask) -> None:
        while not task.cancelled:
            socketio.sleep(task.delay)
            if task.cancelled:
                self._app.logger.debug(f"[task-abort] id={task.id} name={task.name} cancelled while sleeping")
                return
            if not task.repeat:
                self._pending.pop(task.id, None)
            with self._app.app_context():
                try:
                    task.callback(task)
                except Exception:
                    self._app.logger.exception(f"[task-error] id={task.id} name={task.name}")
            if not task.repeat:
                return
