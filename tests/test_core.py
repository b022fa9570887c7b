import asyncio

import pytest

from model import ArtifactSpec, ExecutionMode, PipelineDefinition, Stage, Task
from stagerunner.core import StageRunnerCore
from stagerunner.models import Outcome, PipelineState
from stagerunner.shell import script_action


class RecordingTrigger:
    def __init__(self, outcome=Outcome.SUCCESS):
        self.outcome = outcome
        self.calls = []

    def __call__(self, job_name):
        self.calls.append(job_name)
        return self.outcome


def _pipeline(test_ok: bool) -> PipelineDefinition:
    return PipelineDefinition(
        stages=[
            Stage(
                name="Package",
                mode=ExecutionMode.SEQUENTIAL,
                tasks=[
                    Task(
                        name="distribution",
                        directory=".",
                        action=script_action(["echo data > distribution.tar.xz"]),
                    )
                ],
            ),
            Stage(name="Test", tasks=[Task(name="phobos", action=lambda n: test_ok)]),
        ],
        artifacts=[ArtifactSpec(path="distribution.tar.xz", only_if_successful=True)],
        downstream_job="dlang/downstream",
    )


def _core(workspace, tmp_path, trigger):
    return StageRunnerCore(
        workspace=workspace,
        artifacts_dir=tmp_path / "artifacts",
        trigger=trigger,
        environ={"PATH": "/usr/bin:/bin"},
    )


def test_successful_run_publishes_and_triggers_once(workspace, tmp_path):
    trigger = RecordingTrigger()
    report = asyncio.run(_core(workspace, tmp_path, trigger).run_pipeline(_pipeline(True)))

    assert report.state == PipelineState.COMPLETED
    assert trigger.calls == ["dlang/downstream"]
    assert report.trigger_outcome == Outcome.SUCCESS
    assert (tmp_path / "artifacts" / "distribution.tar.xz").read_text() == "data\n"
    assert report.published == [str(tmp_path / "artifacts" / "distribution.tar.xz")]


def test_failed_run_skips_artifacts_but_still_triggers(workspace, tmp_path):
    trigger = RecordingTrigger()
    report = asyncio.run(_core(workspace, tmp_path, trigger).run_pipeline(_pipeline(False)))

    assert report.state == PipelineState.FAILED
    assert report.stage_index == 1
    assert report.failed_tasks == ["phobos"]
    assert trigger.calls == ["dlang/downstream"]
    assert report.published == []
    assert not (tmp_path / "artifacts").exists()


def test_trigger_runs_even_if_stage_machinery_raises(workspace, tmp_path, monkeypatch):
    trigger = RecordingTrigger()

    async def explode(self, context):
        raise RuntimeError("engine crashed")

    monkeypatch.setattr("stagerunner.core.PipelineRun.execute", explode)
    with pytest.raises(RuntimeError):
        asyncio.run(_core(workspace, tmp_path, trigger).run_pipeline(_pipeline(True)))

    assert trigger.calls == ["dlang/downstream"]


def test_trigger_failure_is_reported_as_warning(workspace, tmp_path):
    trigger = RecordingTrigger(Outcome.FAILURE)
    report = asyncio.run(_core(workspace, tmp_path, trigger).run_pipeline(_pipeline(True)))

    assert report.state == PipelineState.COMPLETED
    assert report.trigger_outcome == Outcome.FAILURE
    assert any("dlang/downstream" in w for w in report.warnings)


def test_no_downstream_job_means_no_trigger(workspace, tmp_path):
    trigger = RecordingTrigger()
    pipeline = PipelineDefinition(stages=[])
    report = asyncio.run(_core(workspace, tmp_path, trigger).run_pipeline(pipeline))

    assert trigger.calls == []
    assert report.trigger_outcome is None


class RaisingTrigger:
    def __init__(self):
        self.calls = []

    def __call__(self, job_name):
        self.calls.append(job_name)
        raise OSError("ci unreachable")


def test_raising_trigger_keeps_the_report(workspace, tmp_path):
    trigger = RaisingTrigger()
    report = asyncio.run(_core(workspace, tmp_path, trigger).run_pipeline(_pipeline(True)))

    assert trigger.calls == ["dlang/downstream"]
    assert report.state == PipelineState.COMPLETED
    assert report.trigger_outcome == Outcome.FAILURE
    assert any("dlang/downstream" in w for w in report.warnings)
    assert any("ci unreachable" in line for line in report.logs)


def test_repeated_runs_do_not_accumulate_logs(workspace, tmp_path):
    core = _core(workspace, tmp_path, RecordingTrigger(Outcome.FAILURE))
    pipeline = PipelineDefinition(
        stages=[Stage(name="Test", tasks=[Task(name="phobos", action=lambda n: True)])],
        artifacts=[ArtifactSpec(path="missing.tar.xz")],
        downstream_job="dlang/downstream",
    )

    first = asyncio.run(core.run_pipeline(pipeline))
    second = asyncio.run(core.run_pipeline(pipeline))

    assert second.logs == first.logs
    assert second.warnings == first.warnings
    assert len(second.warnings) == 2
