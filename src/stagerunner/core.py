from pathlib import Path
from typing import Callable, List, Mapping, Optional

import click

from model import PipelineDefinition
from .artifacts import ArtifactStore
from .config import ARTIFACTS_DIR, WORKSPACE_DIR
from .context import root_context
from .downstream import EchoTrigger
from .models import Outcome, PipelineReport
from .services.executor.pipeline import PipelineRun


class StageRunnerCore:
    """
    Прогон пайплайна целиком: стадии -> публикация артефактов -> downstream-триггер.
    Триггер срабатывает ровно один раз при любом исходе стадий.
    Логи и предупреждения собираются заново на каждый вызов run_pipeline.
    """

    def __init__(
        self,
        workspace: Path = WORKSPACE_DIR,
        artifacts_dir: Optional[Path] = None,
        trigger: Optional[Callable[[str], Outcome]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.workspace = Path(workspace)
        self.artifacts_dir = Path(artifacts_dir) if artifacts_dir is not None else ARTIFACTS_DIR
        self.trigger = trigger or EchoTrigger()
        self.environ = environ

    def _fire_trigger(self, job: str, logs: List[str], warnings: List[str]) -> Outcome:
        try:
            outcome = self.trigger(job)
        except Exception as e:
            outcome = Outcome.FAILURE
            logs.append(f"Downstream-задача {job!r}: {type(e).__name__}: {e}")
        else:
            logs.append(f"Downstream-задача {job!r}: {outcome.value}")

        if outcome == Outcome.FAILURE:
            warnings.append(f"Не удалось запустить downstream-задачу {job!r}.")
            click.echo(warnings[-1], err=True)
        return outcome

    async def run_pipeline(self, pipeline: PipelineDefinition) -> PipelineReport:
        report = PipelineReport()
        trigger_outcome: Optional[Outcome] = None
        logs: List[str] = []
        warnings: List[str] = []

        try:
            context = root_context(self.workspace, self.environ)
            logs.append(f"Рабочее пространство: {context.workspace}")

            report = await PipelineRun(pipeline.stages).execute(context)
            logs.extend(report.logs)

            store = ArtifactStore(context.workspace, self.artifacts_dir)
            published: List[str] = []
            for artifact in pipeline.artifacts:
                published.extend(
                    str(path)
                    for path in store.publish(
                        artifact.path,
                        only_if_successful=artifact.only_if_successful,
                        pipeline_failed=not report.succeeded,
                    )
                )
            logs.extend(store.logs)
            warnings.extend(store.warnings)
            report.published = published
        finally:
            if pipeline.downstream_job:
                trigger_outcome = self._fire_trigger(pipeline.downstream_job, logs, warnings)

        report.trigger_outcome = trigger_outcome
        report.logs = logs
        report.warnings = warnings

        click.echo(report.description, err=not report.succeeded)
        return report
