from enum import Enum
from typing import Any, Callable, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class ExecutionMode(str, Enum):
    PARALLEL = "parallel"
    SEQUENTIAL = "sequential"


class Task(BaseModel):
    """
    Задача пайплайна: имя + действие.
    Действие получает имя задачи и возвращает исход (см. TaskGroup).

    directory - рабочая директория задачи относительно workspace.
                По умолчанию совпадает с именем задачи, "." - корень workspace.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    action: Callable[[str], Any]
    directory: Optional[str] = None

    @property
    def workdir(self) -> str:
        return self.directory if self.directory is not None else self.name


class Stage(BaseModel):
    """
    Именованная стадия: группа задач + режим запуска.
    env - записи вида KEY=value / KEY+TAG=value, накладываются на все задачи стадии.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    tasks: List[Task]
    mode: ExecutionMode = ExecutionMode.PARALLEL
    env: List[str] = []

    @field_validator("tasks")
    @classmethod
    def _unique_names(cls, tasks: List[Task]) -> List[Task]:
        seen = set()
        for task in tasks:
            if task.name in seen:
                raise ValueError(f"Задача {task.name!r} объявлена в стадии дважды")
            seen.add(task.name)
        return tasks


class ArtifactSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    only_if_successful: bool = True


class PipelineDefinition(BaseModel):
    """
    Абстрактный пайплайн: порядок стадий, артефакты и downstream-задача.
    На этом уровне не привязан к конкретному CI.
    """

    model_config = ConfigDict(frozen=True)

    stages: List[Stage]
    artifacts: List[ArtifactSpec] = []
    downstream_job: Optional[str] = None
