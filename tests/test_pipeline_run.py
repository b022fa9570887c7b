import asyncio
import threading
import time

import pytest

from model import ExecutionMode, Stage, Task
from stagerunner.context import current_context
from stagerunner.exceptions import PipelineFailure
from stagerunner.models import PipelineState
from stagerunner.services.executor import PipelineRun


def _stage(name, outcome, calls, mode=ExecutionMode.PARALLEL, env=()):
    def action(task_name):
        calls.append(f"{name}/{task_name}")
        return outcome

    return Stage(
        name=name,
        mode=mode,
        env=list(env),
        tasks=[Task(name="one", action=action), Task(name="two", action=action)],
    )


def test_all_stages_succeed(root):
    calls = []
    run = PipelineRun([_stage("A", True, calls), _stage("B", True, calls)])
    report = asyncio.run(run.execute(root))

    assert report.state == PipelineState.COMPLETED
    assert report.stage_index is None
    assert [s.name for s in report.stages] == ["A", "B"]
    assert sorted(calls) == ["A/one", "A/two", "B/one", "B/two"]
    report.raise_for_failure()


def test_halts_at_first_failing_stage(root):
    calls = []
    run = PipelineRun(
        [_stage("A", True, calls), _stage("B", False, calls), _stage("C", True, calls)]
    )
    report = asyncio.run(run.execute(root))

    assert report.state == PipelineState.FAILED
    assert report.stage_index == 1
    assert report.failed_stage == "B"
    assert report.failed_tasks == ["one", "two"]
    assert not any(call.startswith("C/") for call in calls)
    assert [s.name for s in report.stages] == ["A", "B"]

    with pytest.raises(PipelineFailure) as ei:
        report.raise_for_failure()
    assert ei.value.stage_index == 1
    assert ei.value.stage == "B"


def test_next_stage_starts_after_previous_joined(root):
    events = []
    lock = threading.Lock()

    def slow(name):
        time.sleep(0.1 if name == "slow" else 0.01)
        with lock:
            events.append(("first-done", name))

    def record(name):
        with lock:
            events.append(("second-start", name))

    run = PipelineRun(
        [
            Stage(name="first", tasks=[Task(name="slow", action=slow), Task(name="fast", action=slow)]),
            Stage(name="second", tasks=[Task(name="x", action=record)]),
        ]
    )
    asyncio.run(run.execute(root))

    kinds = [kind for kind, _ in events]
    assert kinds == ["first-done", "first-done", "second-start"]


def test_stage_env_is_applied_to_tasks_only(root):
    seen = {}

    def action(name):
        seen[name] = current_context().env.get("DMD")

    run = PipelineRun(
        [
            Stage(name="tools", env=["DMD=/ws/dmd"], tasks=[Task(name="dub", action=action)]),
            Stage(name="after", tasks=[Task(name="plain", action=action)]),
        ]
    )
    asyncio.run(run.execute(root))

    assert seen == {"dub": "/ws/dmd", "plain": None}


def test_stage_error_marks_run_failed(root):
    run = PipelineRun(
        [
            Stage(name="ok", tasks=[Task(name="one", action=lambda n: True)]),
            Stage(name="broken", env=["BROKEN"], tasks=[Task(name="two", action=lambda n: True)]),
        ]
    )
    with pytest.raises(ValueError):
        asyncio.run(run.execute(root))

    assert run.state == PipelineState.FAILED
    assert run.stage_index == 1
    report = run.report()
    assert report.state == PipelineState.FAILED
    assert report.failed_stage == "broken"
    assert report.failed_tasks == []


def test_empty_pipeline_completes(root):
    report = asyncio.run(PipelineRun([]).execute(root))
    assert report.state == PipelineState.COMPLETED


def test_run_cannot_be_reused(root):
    run = PipelineRun([])
    asyncio.run(run.execute(root))
    with pytest.raises(RuntimeError):
        asyncio.run(run.execute(root))


def test_stage_rejects_duplicate_task_names():
    with pytest.raises(ValueError):
        Stage(
            name="Clone",
            tasks=[Task(name="dmd", action=lambda n: None), Task(name="dmd", action=lambda n: None)],
        )
