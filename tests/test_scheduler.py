"""Tests for the simulated batch scheduler."""

import pytest
from Floyd import (
    BatchSchedule,
    BatchScheduler,
    InvalidConfigError,
    SleepPacer,
    UpdateOperation,
    partition,
)


def make_operations(count):
    """Distinct dummy operations in a known order."""
    return [UpdateOperation(i=idx, j=idx + 1, k=0, old_dist=10, new_dist=idx, updated=idx < 10) for idx in range(count)]


class CountingPacer:
    def __init__(self):
        self.calls = 0

    def wait(self):
        self.calls += 1


class TestPartition:
    """Tests for splitting operations into fixed-size batches."""

    @pytest.mark.parametrize("count,W", [(6, 2), (20, 4), (30, 7), (5, 8), (12, 1)])
    def test_concatenation_reconstructs_operations(self, count, W):
        """Batches in order give back the original list exactly."""
        ops = make_operations(count)
        batches = partition(ops, W)

        assert [op for batch in batches for op in batch.operations] == ops

    @pytest.mark.parametrize("count,W", [(6, 2), (20, 4), (30, 7), (5, 8)])
    def test_batch_sizes(self, count, W):
        """All batches are full except possibly the last; count is ceil(count / W)."""
        batches = partition(make_operations(count), W)

        assert len(batches) == -(-count // W)
        assert all(len(b) == W for b in batches[:-1])
        assert 1 <= len(batches[-1]) <= W

    def test_batch_bounds(self):
        """Batch b covers [b*W, min((b+1)*W, len))."""
        batches = partition(make_operations(10), 4)

        assert [(b.index, b.start, len(b)) for b in batches] == [(0, 0, 4), (1, 4, 4), (2, 8, 2)]

    def test_thread_ids(self):
        """Thread id is the position within the batch."""
        batches = partition(make_operations(7), 3)

        assert batches[0].thread_ids == [0, 1, 2]
        assert batches[2].thread_ids == [0]
        assert [a.thread_id for a in batches[1].assignments()] == [0, 1, 2]

    def test_empty(self):
        """No operations means no batches."""
        assert partition([], 4) == []

    def test_invalid_worker_count(self):
        """W must be at least 1."""
        with pytest.raises(InvalidConfigError):
            partition(make_operations(3), 0)


class TestBatchSchedule:
    """Tests for the restartable batch sequence and progress replay."""

    def test_restartable(self):
        """Iterating twice yields the same batches."""
        schedule = BatchSchedule(make_operations(9), worker_count=4)

        assert list(schedule) == list(schedule)
        assert len(schedule) == 3

    def test_frames_progress_ticks(self):
        """Each batch runs 0, 20, 40, 60, 80, 100."""
        schedule = BatchSchedule(make_operations(5), worker_count=2)
        frames = list(schedule.frames())

        per_batch = [[f.progress for f in frames if f.batch_index == b] for b in range(len(schedule))]
        assert per_batch == [[0, 20, 40, 60, 80, 100]] * 3
        assert all(a.status == "completed" for a in frames[5].assignments)
        assert all(a.status == "running" for a in frames[4].assignments)
        assert frames[-1].done

    def test_frames_custom_ticks(self):
        """Tick count is configurable and always ends at 100."""
        schedule = BatchSchedule(make_operations(2), worker_count=2, ticks_per_batch=3)

        assert [f.progress for f in schedule.frames()] == [0, 33, 66, 100]

    def test_pacer_called_between_ticks(self):
        """The pacer waits once per tick."""
        pacer = CountingPacer()
        schedule = BatchSchedule(make_operations(6), worker_count=2, pacer=pacer)
        list(schedule.frames())

        assert pacer.calls == 3 * 5

    def test_abandoned_replay(self):
        """Stopping a replay early and restarting starts from the first batch."""
        schedule = BatchSchedule(make_operations(6), worker_count=2)
        frames = schedule.frames()
        next(frames)
        next(frames)
        frames.close()

        first = next(schedule.frames())
        assert first.batch_index == 0
        assert first.progress == 0

    def test_sequential_mode(self):
        """Disabled scheduler: one completed batch, every operation on worker 0."""
        ops = make_operations(6)
        schedule = BatchSchedule(ops, worker_count=4, parallel=False)
        frames = list(schedule.frames())

        assert len(schedule) == 1
        assert list(schedule)[0].operations == tuple(ops)
        assert len(frames) == 1
        assert frames[0].progress == 100
        assert [a.thread_id for a in frames[0].assignments] == [0] * 6
        assert all(a.status == "completed" for a in frames[0].assignments)

    def test_empty_schedule(self):
        """No operations gives no batches and no frames in either mode."""
        for parallel in (True, False):
            schedule = BatchSchedule([], worker_count=3, parallel=parallel)
            assert len(schedule) == 0
            assert list(schedule.frames()) == []


class TestBatchScheduler:
    """Tests for the scheduler factory."""

    def test_schedule_uses_settings(self):
        """Schedules inherit worker count and mode."""
        scheduler = BatchScheduler(worker_count=3, parallel_enabled=True)
        schedule = scheduler.schedule(make_operations(7))

        assert schedule.worker_count == 3
        assert len(schedule) == 3

    def test_invalid_worker_count(self):
        """W < 1 is rejected."""
        with pytest.raises(InvalidConfigError):
            BatchScheduler(worker_count=0)

    def test_sleep_pacer_rejects_negative(self):
        """Negative intervals are invalid."""
        with pytest.raises(InvalidConfigError):
            SleepPacer(-0.1)
