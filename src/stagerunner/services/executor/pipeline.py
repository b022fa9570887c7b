from typing import List, Optional, Sequence

import click

from model import Stage
from stagerunner.context import TaskContext
from stagerunner.models import PipelineReport, PipelineState, StageResult

from .task_group import run_all


class PipelineRun:
    """
    Последовательный прогон стадий.

    Состояния: not_started -> running(i) -> completed | failed(i).
    Стадия i+1 стартует только после того, как все задачи стадии i
    завершились и стадия успешна. Первая упавшая стадия останавливает прогон.
    """

    def __init__(self, stages: Sequence[Stage]) -> None:
        self.stages: List[Stage] = list(stages)
        self.state = PipelineState.NOT_STARTED
        self.stage_index: Optional[int] = None
        self.results: List[StageResult] = []
        self.logs: List[str] = []

    def _start(self) -> None:
        if self.state != PipelineState.NOT_STARTED:
            raise RuntimeError(f"Пайплайн уже запускался (состояние {self.state.value})")
        if self.stages:
            self.state = PipelineState.RUNNING
            self.stage_index = 0
        else:
            self.state = PipelineState.COMPLETED

    def _advance(self, result: StageResult) -> None:
        self.results.append(result)
        if not result.succeeded:
            self.state = PipelineState.FAILED
            return

        next_index = result.index + 1
        if next_index < len(self.stages):
            self.stage_index = next_index
        else:
            self.state = PipelineState.COMPLETED
            self.stage_index = None

    async def execute(self, context: TaskContext) -> PipelineReport:
        self._start()

        while self.state == PipelineState.RUNNING:
            index = self.stage_index
            stage = self.stages[index]

            click.echo(f"==> Стадия {stage.name} ({stage.mode.value}, задач: {len(stage.tasks)})")
            self.logs.append(f"Стадия {stage.name!r} запущена.")

            try:
                stage_context = context.overlay(stage.env) if stage.env else context
                aggregate = await run_all(stage.tasks, stage.mode, stage_context)
            except Exception as e:
                # stage_index остаётся на упавшей стадии
                self.state = PipelineState.FAILED
                self.logs.append(f"Стадия {stage.name!r} прервана: {type(e).__name__}: {e}")
                raise

            if aggregate.succeeded:
                self.logs.append(f"Стадия {stage.name!r} завершена успешно.")
            else:
                self.logs.append(
                    f"Стадия {stage.name!r} упала, задачи: {', '.join(aggregate.failed_tasks)}"
                )
            self._advance(StageResult(name=stage.name, index=index, aggregate=aggregate))

        return self.report()

    def report(self) -> PipelineReport:
        failed = None
        failed_stage = None
        if self.state == PipelineState.FAILED:
            failed_stage = self.stages[self.stage_index].name
            if self.results and self.results[-1].index == self.stage_index:
                failed = self.results[-1]
        return PipelineReport(
            state=self.state,
            stage_index=self.stage_index,
            stages=list(self.results),
            failed_stage=failed_stage,
            failed_tasks=failed.aggregate.failed_tasks if failed else [],
            logs=list(self.logs),
        )
