import itertools
from typing import Callable, List, Optional


class ScheduledTask:
    """Handle for a pending callback. cancel() is safe to call any number of times."""

    def __init__(self, name: str = ''):
        self.name = name
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class SocketIOScheduler:
    """Runs callbacks as Flask-SocketIO background tasks."""

    def __init__(self, socketio, logger=None):
        self._socketio = socketio
        self._logger = logger

    def call_later(self, delay: float, fn: Callable, *args, name: str = '') -> ScheduledTask:
        task = ScheduledTask(name)

        def _runner():
            self._socketio.sleep(delay)
            if task.cancelled:
                return
            task.fired = True
            self._run(task, fn, args)

        self._socketio.start_background_task(_runner)
        return task

    def call_every(self, interval: float, fn: Callable, *args, name: str = '') -> ScheduledTask:
        task = ScheduledTask(name)

        def _runner():
            while True:
                self._socketio.sleep(interval)
                if task.cancelled:
                    return
                task.fired = True
                self._run(task, fn, args)

        self._socketio.start_background_task(_runner)
        return task

    def _run(self, task, fn, args):
        try:
            fn(task, *args)
        except Exception:
            if self._logger:
                self._logger.exception(f"[timer-error] task={task.name}")
            task.cancel()


class ManualScheduler:
    """Deterministic clock used when TESTING; time only moves on advance()."""

    def __init__(self):
        self.now = 0.0
        self._pending: List[list] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, fn: Callable, *args, name: str = '') -> ScheduledTask:
        return self._add(delay, None, fn, args, name)

    def call_every(self, interval: float, fn: Callable, *args, name: str = '') -> ScheduledTask:
        return self._add(interval, interval, fn, args, name)

    def _add(self, delay, interval, fn, args, name) -> ScheduledTask:
        task = ScheduledTask(name)
        self._pending.append([self.now + delay, next(self._seq), task, interval, fn, args])
        return task

    @property
    def pending(self) -> List[ScheduledTask]:
        return [entry[2] for entry in self._pending if not entry[2].cancelled]

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            entry = self._next_due(target)
            if entry is None:
                break
            due, _, task, interval, fn, args = entry
            self.now = due
            if task.cancelled:
                continue
            task.fired = True
            if interval is not None:
                self._pending.append([due + interval, next(self._seq), task, interval, fn, args])
            fn(task, *args)
        self.now = target

    def _next_due(self, target: float) -> Optional[list]:
        self._pending = [e for e in self._pending if not e[2].cancelled]
        due = [e for e in self._pending if e[0] <= target]
        if not due:
            return None
        entry = min(due, key=lambda e: (e[0], e[1]))
        self._pending.remove(entry)
        return entry


def make_scheduler(app, socketio):
    if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        return ManualScheduler()
    return SocketIOScheduler(socketio, logger=app.logger)
