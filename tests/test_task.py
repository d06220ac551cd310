"""Tests for the scheduler and cancellable tasks."""

from xivcombat.task import Scheduler


class TestScheduler:
    def test_task_fires_when_due(self):
        scheduler = Scheduler()
        fired = []
        scheduler.schedule_task(1000, fired.append, "a")

        scheduler.step(999)
        assert fired == []

        scheduler.step(1)
        assert fired == ["a"]
        assert scheduler.current_time == 1000

    def test_same_instant_tasks_fire_in_scheduling_order(self):
        scheduler = Scheduler()
        fired = []
        for name in "abc":
            scheduler.schedule_task(500, fired.append, name)

        scheduler.advance_to(500)

        assert fired == ["a", "b", "c"]

    def test_clock_is_at_task_time_while_firing(self):
        scheduler = Scheduler(time=100)
        seen = []
        scheduler.schedule_task(200, lambda: seen.append(scheduler.current_time))

        scheduler.advance_to(1000)

        assert seen == [300]
        assert scheduler.current_time == 1000

    def test_task_scheduled_at_same_instant_fires_in_same_step(self):
        scheduler = Scheduler()
        fired = []
        scheduler.schedule_task(100, lambda: scheduler.schedule_task(0, fired.append, "chained"))

        scheduler.step(100)

        assert fired == ["chained"]

    def test_cancelled_task_is_noop(self):
        scheduler = Scheduler()
        fired = []
        task = scheduler.schedule_task(100, fired.append, "x")

        task.cancel()
        scheduler.step(200)

        assert task.cancelled
        assert fired == []
        assert scheduler.pending() == 0

    def test_negative_delay_clamps_to_now(self):
        scheduler = Scheduler(time=50)
        task = scheduler.schedule_task(-10, lambda: None)
        assert task.time == 50

    def test_time_never_moves_backwards(self):
        scheduler = Scheduler(time=1000)
        scheduler.advance_to(10)
        assert scheduler.current_time == 1000

    def test_next_event_time_skips_cancelled(self):
        scheduler = Scheduler()
        first = scheduler.schedule_task(10, lambda: None)
        scheduler.schedule_task(20, lambda: None)

        first.cancel()

        assert scheduler.next_event_time() == 20

    def test_clear(self):
        scheduler = Scheduler()
        task = scheduler.schedule_task(10, lambda: None)

        scheduler.clear()

        assert task.cancelled
        assert scheduler.next_event_time() is None
