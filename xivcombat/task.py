"""Event system for handling time-based callbacks in combat sessions."""

import heapq
import itertools
from typing import Any, Callable, Dict, List, Optional, Tuple

_sequence = itertools.count()


class Task:
    """A callback that fires at a specific time unless it has been cancelled.

    The task carries an owner token. Cancelling clears the token, and a task
    without a token does nothing when it fires.
    """

    def __init__(
        self,
        time: int,
        callback: Callable,
        args: Tuple[Any, ...] = (),
        kwargs: Dict[str, Any] = None,
        token: Any = True,
    ):
        self.time = time
        self.callback = callback
        self.args = args
        self.kwargs = kwargs or {}
        self.token = token
        self.sequence = next(_sequence)

    def __lt__(self, other):
        return (self.time, self.sequence) < (other.time, other.sequence)

    @property
    def cancelled(self) -> bool:
        return self.token is None

    def cancel(self):
        """Cancel the task so that it becomes a no-op when it fires."""
        self.token = None

    def execute(self):
        """Execute the callback function with the provided args and kwargs."""
        if self.cancelled:
            return None
        return self.callback(*self.args, **self.kwargs)


class Scheduler:
    """
    Discrete event clock for a combat session.

    Time only moves when the owner steps the scheduler; every task due at or
    before the new time fires in (time, scheduling order).

    Attributes:
        task_queue (list): Priority queue of scheduled tasks
        current_time (int): Current time in milliseconds
    """

    def __init__(self, time: int = 0):
        self.task_queue: List[Task] = []
        self.current_time = time

    def schedule_task(self, delay: int, callback: Callable, *args, **kwargs) -> Task:
        """
        Schedule a task to execute after a specified delay.

        Args:
            delay: Time in milliseconds until the task should fire
            callback: Function to call when the task fires
            *args: Positional arguments to pass to the callback function
            **kwargs: Keyword arguments to pass to the callback function

        Returns:
            Task: Handle that can be used to cancel the task
        """
        task = Task(self.current_time + max(0, delay), callback, args, kwargs)
        heapq.heappush(self.task_queue, task)
        return task

    def step(self, frame_delta: int):
        """
        Advance the clock by the given duration, firing due tasks on the way.

        Args:
            frame_delta: Time in milliseconds to advance
        """
        self.advance_to(self.current_time + max(0, frame_delta))

    def advance_to(self, time: int):
        """
        Advance the clock to an absolute time. Time never moves backwards.

        Args:
            time: Target time in milliseconds
        """
        while True:
            next_time = self.next_event_time()
            if next_time is None or next_time > time:
                break

            self.current_time = max(self.current_time, next_time)
            self._process_events()

        self.current_time = max(self.current_time, time)

    def _process_events(self):
        """Execute every task that is due at the current time."""
        while self.task_queue and self.task_queue[0].time <= self.current_time:
            task = heapq.heappop(self.task_queue)
            task.execute()

    def next_event_time(self) -> Optional[int]:
        """Get the fire time of the earliest live task, or None if nothing is pending."""
        while self.task_queue and self.task_queue[0].cancelled:
            heapq.heappop(self.task_queue)

        if self.task_queue:
            return self.task_queue[0].time
        return None

    def pending(self) -> int:
        """Number of scheduled tasks that have not been cancelled."""
        return sum(1 for task in self.task_queue if not task.cancelled)

    def clear(self):
        """Cancel and drop every scheduled task."""
        for task in self.task_queue:
            task.cancel()
        self.task_queue.clear()
