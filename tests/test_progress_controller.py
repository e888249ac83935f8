import asyncio
import pytest
from core.entities import StageDefinition
from core.progress_controller import ProgressController
from util.constants import JobMessages, PROGRESS_MESSAGES
from util.enums import JobState
from util.errors import InvalidDuration, JobAlreadyStarted


class Recorder:
    def __init__(self) -> None:
        self.progress = []
        self.stages = []
        self.logs = []
        self.completed = 0

    def callbacks(self):
        return dict(
            on_progress=self.progress.append,
            on_stage_change=self.stages.append,
            on_log=self.logs.append,
            on_complete=self._complete,
        )

    def _complete(self):
        self.completed += 1


def test_end_to_end_with_fake_clock(clock):
    rec = Recorder()
    ctl = ProgressController(clock=clock)
    ctl.start(
        1000,
        [StageDefinition("X", 50), StageDefinition("Y", 50)],
        **rec.callbacks(),
    )

    seen = []
    keep_going = []
    for _ in range(11):
        keep_going.append(ctl.tick())
        seen.append((ctl.percent, ctl.stage, rec.completed))
        clock.advance(100)

    assert rec.progress == list(range(0, 101, 10))
    for percent, stage, _ in seen:
        assert stage == ("X" if percent <= 50 else "Y")
    assert rec.stages == ["X", "Y"]
    # on_complete fires exactly once, at the first tick reaching 100
    assert [c for _, _, c in seen] == [0] * 10 + [1]
    assert keep_going == [True] * 10 + [False]
    assert ctl.state == JobState.COMPLETED

    assert ctl.tick() is False
    assert rec.completed == 1
    assert rec.progress[-1] == 100
    assert rec.logs[0] == JobMessages.STARTED
    assert rec.logs[-1] == JobMessages.COMPLETED


def test_percent_is_monotonic_while_running(clock):
    rec = Recorder()
    ctl = ProgressController(clock=clock)
    ctl.start(700, **rec.callbacks())
    for step in (13, 0, 7, 91, 3, 250, 1, 400):
        clock.advance(step)
        ctl.tick()
    assert rec.progress == sorted(rec.progress)
    assert len(set(rec.progress)) == len(rec.progress)


def test_pause_freezes_and_resume_keeps_accounting(clock):
    rec = Recorder()
    ctl = ProgressController(clock=clock)
    ctl.start(1000, **rec.callbacks())
    clock.advance(300)
    ctl.tick()
    assert ctl.percent == 30

    assert ctl.pause() is True
    clock.advance(5000)
    assert ctl.tick() is True
    assert ctl.percent == 30
    assert rec.progress[-1] == 30

    assert ctl.resume() is True
    clock.advance(699)
    ctl.tick()
    assert ctl.percent == 99
    assert rec.completed == 0
    clock.advance(1)
    assert ctl.tick() is False
    assert rec.completed == 1
    assert JobMessages.PAUSED in rec.logs
    assert JobMessages.RESUMED in rec.logs


def test_repeated_pause_and_stray_resume_log_once(clock):
    rec = Recorder()
    ctl = ProgressController(clock=clock)
    ctl.start(1000, **rec.callbacks())
    assert ctl.resume() is False
    assert ctl.pause() is True
    clock.advance(100)
    assert ctl.pause() is False
    assert ctl.resume() is True
    assert ctl.resume() is False
    assert rec.logs.count(JobMessages.PAUSED) == 1
    assert rec.logs.count(JobMessages.RESUMED) == 1
    assert ctl.run_state.paused_accumulated_ms == 100


def test_cancel_suppresses_completion(clock):
    rec = Recorder()
    ctl = ProgressController(clock=clock)
    ctl.start(1000, **rec.callbacks())
    clock.advance(500)
    ctl.tick()
    assert ctl.percent == 50

    assert ctl.cancel() is True
    assert rec.logs[-1] == JobMessages.STOPPED
    progress_before = list(rec.progress)
    logs_before = list(rec.logs)
    for _ in range(5):
        clock.advance(1000)
        assert ctl.tick() is False

    assert rec.completed == 0
    assert rec.progress == progress_before
    assert rec.logs == logs_before
    assert ctl.state == JobState.STOPPED
    assert ctl.cancel() is False


def test_cancel_from_inside_a_callback_stops_the_tick(clock):
    ctl = ProgressController(clock=clock)
    stages = []

    def on_progress(percent):
        if percent >= 40:
            ctl.cancel()

    ctl.start(100, on_progress=on_progress, on_stage_change=stages.append)
    ctl.tick()
    clock.advance(50)
    assert ctl.tick() is False
    assert ctl.state == JobState.STOPPED
    assert stages == ["default"]


def test_cadence_logs_every_bucket_and_stage_starts(clock):
    rec = Recorder()
    ctl = ProgressController(clock=clock, log_every_percent=7)
    stages = [
        StageDefinition("load", 50, "Loading products"),
        StageDefinition("score", 50),
    ]
    ctl.start(100, stages, **rec.callbacks())
    while ctl.tick():
        clock.advance(1)

    cadence = [m for m in rec.logs if m in PROGRESS_MESSAGES]
    # Buckets 0..13 each log their catalogue line once; bucket 14 (98-99) logs nothing
    assert cadence == list(PROGRESS_MESSAGES)
    assert len(set(cadence)) == len(cadence)
    assert "Starting stage: Loading products" in rec.logs
    assert "Starting stage: score" in rec.logs
    assert rec.logs.count(JobMessages.COMPLETED) == 1


def test_callback_errors_propagate(clock):
    def boom(_percent):
        raise RuntimeError("caller bug")

    ctl = ProgressController(clock=clock)
    ctl.start(1000, on_progress=boom)
    with pytest.raises(RuntimeError, match="caller bug"):
        ctl.tick()


def test_invalid_duration_creates_nothing(clock):
    async def scenario():
        ctl = ProgressController(clock=clock)
        with pytest.raises(InvalidDuration):
            ctl.run(0)
        return ctl

    ctl = asyncio.run(scenario())
    assert ctl.state == JobState.IDLE
    assert ctl.run_state is None
    assert ctl.logs == ()
    assert ctl.is_scheduled is False


def test_finished_controller_cannot_be_restarted(clock):
    ctl = ProgressController(clock=clock)
    ctl.start(10)
    clock.advance(10)
    ctl.tick()
    with pytest.raises(JobAlreadyStarted):
        ctl.start(10)


def test_run_schedules_ticks_until_completion():
    rec = Recorder()

    async def scenario():
        ctl = ProgressController(tick_interval_ms=5)
        task = ctl.run(60, **rec.callbacks())
        await asyncio.wait_for(task, timeout=5)
        return ctl

    ctl = asyncio.run(scenario())
    assert rec.completed == 1
    assert rec.progress[-1] == 100
    assert ctl.state == JobState.COMPLETED
    assert ctl.is_scheduled is False


def test_cancel_releases_the_tick_task():
    rec = Recorder()

    async def scenario():
        ctl = ProgressController(tick_interval_ms=5)
        task = ctl.run(10_000, **rec.callbacks())
        await asyncio.sleep(0.03)
        ctl.cancel()
        await asyncio.sleep(0.03)
        return ctl, task

    ctl, task = asyncio.run(scenario())
    assert task.cancelled()
    assert ctl.is_scheduled is False
    assert rec.completed == 0
    assert rec.logs[-1] == JobMessages.STOPPED


def test_close_drops_ticks_without_changing_state():
    async def scenario():
        ctl = ProgressController(tick_interval_ms=5)
        task = ctl.run(10_000)
        await asyncio.sleep(0.02)
        ctl.close()
        await asyncio.sleep(0.01)
        return ctl, task

    ctl, task = asyncio.run(scenario())
    assert task.done()
    assert ctl.state == JobState.RUNNING


def test_start_rejects_a_bad_duration_before_arming(clock):
    ctl = ProgressController(clock=clock)
    with pytest.raises(InvalidDuration):
        ctl.start("100")
    assert ctl.state == JobState.IDLE
    assert ctl.tick() is False

    ctl.start(100)
    assert ctl.state == JobState.RUNNING


def test_ticks_after_a_terminal_state_are_inert(clock):
    rec = Recorder()
    ctl = ProgressController(clock=clock)
    ctl.start(10, **rec.callbacks())
    clock.advance(10)
    assert ctl.tick() is False
    assert ctl.state.is_terminal
    logs_before = list(rec.logs)

    clock.advance(10)
    assert ctl.tick() is False
    assert rec.logs == logs_before
    assert rec.completed == 1
