from typing import List, Optional

from exception import CLIException


class StageRunnerError(CLIException):
    """
    Базовое исключение раннера.
    Дополнительно хранит логи, накопленные во время операции.
    """

    def __init__(
        self,
        *args,
        description: str = "Something happend when run pipeline",
        logs: Optional[List[str]] = None,
    ) -> None:
        super().__init__(*args, description=description)
        self.logs: List[str] = logs or []


class TaskExecutionFailure(StageRunnerError):
    """
    Ошибка выполнения отдельной задачи (например, ненулевой код shell-команды).
    """

    def __init__(
        self,
        task_name: str,
        reason: str,
        logs: Optional[List[str]] = None,
        *args,
    ) -> None:
        description = f"Task {task_name} failed: {reason}"
        super().__init__(*args, description=description, logs=logs)
        self.task_name = task_name
        self.reason = reason


class StageAggregateFailure(StageRunnerError):
    def __init__(self, stage: str, failed_tasks: List[str], *args) -> None:
        description = f"Stage {stage} failed, tasks: {', '.join(failed_tasks)}"
        super().__init__(*args, description=description)
        self.stage = stage
        self.failed_tasks = list(failed_tasks)


class PipelineFailure(StageRunnerError):
    """
    Пайплайн остановлен на первой упавшей стадии.
    """

    def __init__(
        self,
        stage_index: Optional[int],
        stage: Optional[str],
        failed_tasks: List[str],
        *args,
    ) -> None:
        description = (
            f"Pipeline failed at stage #{stage_index} {stage}, "
            f"tasks: {', '.join(failed_tasks)}"
        )
        super().__init__(*args, description=description)
        self.stage_index = stage_index
        self.stage = stage
        self.failed_tasks = list(failed_tasks)
