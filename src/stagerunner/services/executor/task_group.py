import asyncio
import time
from typing import Any, List, Mapping, Optional, Sequence, Union

import click

from model import ExecutionMode, Task
from stagerunner.context import TaskContext, bind_context, current_context
from stagerunner.models import AggregateResult, Outcome, TaskResult


TaskSet = Union[Sequence[Task], Mapping[str, Any]]


def _as_tasks(tasks: TaskSet) -> List[Task]:
    # mapping name -> action тоже принимаем, порядок - порядок вставки
    if isinstance(tasks, Mapping):
        return [Task(name=name, action=action) for name, action in tasks.items()]

    result = list(tasks)
    names = [task.name for task in result]
    if len(names) != len(set(names)):
        raise ValueError(f"Имена задач в группе должны быть уникальны: {names}")
    return result


def _outcome_of(value: Any) -> Outcome:
    if isinstance(value, Outcome):
        return value
    if value is False:
        return Outcome.FAILURE
    return Outcome.SUCCESS


def _run_task(task: Task, parent: TaskContext) -> TaskResult:
    """
    Выполняет одну задачу в её собственной директории.
    Любое исключение превращается в проваленный TaskResult, ничего не теряется.
    """
    logs: List[str] = []
    started_at = time.monotonic()
    error: Optional[str] = None

    try:
        with bind_context(parent.enter(task.workdir)) as context:
            logs.append(f"Задача {task.name!r} запущена в {context.cwd}")
            outcome = _outcome_of(task.action(task.name))
    except Exception as e:
        outcome = Outcome.FAILURE
        error = getattr(e, "description", None) or f"{type(e).__name__}: {e}"
        logs.extend(getattr(e, "logs", []) or [])

    finished_at = time.monotonic()

    if outcome == Outcome.SUCCESS:
        logs.append(f"Задача {task.name!r} завершена успешно.")
    else:
        logs.append(f"Задача {task.name!r} завершилась ошибкой" + (f": {error}" if error else "."))
    click.echo(logs[-1], err=outcome != Outcome.SUCCESS)

    return TaskResult(
        name=task.name,
        outcome=outcome,
        error=error,
        logs=logs,
        started_at=started_at,
        finished_at=finished_at,
    )


async def run_all(
    tasks: TaskSet,
    mode: ExecutionMode = ExecutionMode.PARALLEL,
    context: Optional[TaskContext] = None,
) -> AggregateResult:
    """
    Запускает группу задач и ждёт, пока ВСЕ дойдут до терминального состояния.

    parallel   - каждая задача в своём потоке, join по всем, без fail-fast;
    sequential - по одной в порядке объявления, упавшая задача не отменяет следующие.
    """
    group = _as_tasks(tasks)
    parent = context or current_context()

    if mode == ExecutionMode.PARALLEL:
        results = await asyncio.gather(
            *(asyncio.to_thread(_run_task, task, parent) for task in group)
        )
        return AggregateResult(results=list(results))

    if mode == ExecutionMode.SEQUENTIAL:
        sequential: List[TaskResult] = []
        for task in group:
            sequential.append(await asyncio.to_thread(_run_task, task, parent))
        return AggregateResult(results=sequential)

    raise ValueError(f"Unsupported execution mode: {mode}")
