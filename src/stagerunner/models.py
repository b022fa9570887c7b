from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import PipelineFailure, StageAggregateFailure


class Outcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class PipelineState(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class CheckoutRef(BaseModel):
    """
    Ссылка, которую нужно выкачать.
    url     - адрес remote; None => строится из шаблона по имени репозитория
    branch  - ветка (по умолчанию master)
    refspec - явный refspec для fetch (например, +refs/pull/42/head)
    commit  - конкретный коммит, если хост уже его зафиксировал
    """

    model_config = ConfigDict(frozen=True)

    url: Optional[str] = None
    branch: str = "master"
    refspec: Optional[str] = None
    commit: Optional[str] = None


class RepositoryOverride(BaseModel):
    model_config = ConfigDict(frozen=True)

    repository: str
    ref: CheckoutRef


class CheckoutContext(BaseModel):
    """
    Метаданные запуска: не более одного репозитория, который
    выкачивается не с ветки по умолчанию. Считается один раз на запуск.
    """

    model_config = ConfigDict(frozen=True)

    override: Optional[RepositoryOverride] = None

    def ref_for(self, name: str) -> Optional[CheckoutRef]:
        if self.override is not None and self.override.repository == name:
            return self.override.ref
        return None


class ChangeMatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    owner: str
    repository: str
    number: int


class TaskResult(BaseModel):
    name: str
    outcome: Outcome
    error: Optional[str] = None
    logs: List[str] = Field(default_factory=list)
    started_at: float = 0.0
    finished_at: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.outcome == Outcome.SUCCESS


class AggregateResult(BaseModel):
    results: List[TaskResult] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return all(result.succeeded for result in self.results)

    @property
    def failed_tasks(self) -> List[str]:
        return [result.name for result in self.results if not result.succeeded]

    def raise_for_failure(self, stage: str) -> None:
        if not self.succeeded:
            raise StageAggregateFailure(stage=stage, failed_tasks=self.failed_tasks)


class StageResult(BaseModel):
    name: str
    index: int
    aggregate: AggregateResult

    @property
    def succeeded(self) -> bool:
        return self.aggregate.succeeded


class PipelineReport(BaseModel):
    state: PipelineState = PipelineState.NOT_STARTED
    # индекс текущей/упавшей стадии; None до старта и после успешного завершения
    stage_index: Optional[int] = None
    stages: List[StageResult] = Field(default_factory=list)
    failed_stage: Optional[str] = None
    failed_tasks: List[str] = Field(default_factory=list)
    published: List[str] = Field(default_factory=list)
    trigger_outcome: Optional[Outcome] = None
    logs: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state == PipelineState.COMPLETED

    @property
    def description(self) -> str:
        if self.state == PipelineState.COMPLETED:
            return f"Пайплайн успешно завершён: {len(self.stages)} стадий."
        if self.state == PipelineState.FAILED:
            return (
                f"Пайплайн упал на стадии {self.failed_stage!r} (#{self.stage_index}): "
                f"задачи {', '.join(self.failed_tasks)}."
            )
        return f"Пайплайн в состоянии {self.state.value}."

    def raise_for_failure(self) -> None:
        if self.state == PipelineState.FAILED:
            raise PipelineFailure(
                stage_index=self.stage_index,
                stage=self.failed_stage,
                failed_tasks=self.failed_tasks,
            )


class PipelineSummary(BaseModel):
    stages_count: int
    tasks_count: int
    stages: List[str]
    task_names: List[str]
    # Короткое текстовое описание для CLI
    description: str
