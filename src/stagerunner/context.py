"""
Контекст выполнения задачи: рабочая директория + окружение.

Вместо os.chdir()/os.environ (общих на весь процесс) каждая задача получает
собственное неизменяемое значение TaskContext. Текущее значение лежит в
ContextVar: asyncio.to_thread копирует contextvars в поток, поэтому
параллельные задачи не видят привязок друг друга, а вложенные области
восстанавливаются в порядке LIFO.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Sequence, TypeVar

R = TypeVar("R")


@dataclass(frozen=True)
class TaskContext:
    """
    workspace - корень рабочего пространства пайплайна
    cwd       - текущая директория задачи
    env       - окружение, которое получат дочерние процессы
    """

    workspace: Path
    cwd: Path
    env: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def enter(self, directory: str, create: bool = True) -> "TaskContext":
        target = (self.cwd / directory).resolve()
        if create:
            target.mkdir(parents=True, exist_ok=True)
        return TaskContext(workspace=self.workspace, cwd=target, env=self.env)

    def overlay(self, overrides: Sequence[str]) -> "TaskContext":
        return TaskContext(
            workspace=self.workspace,
            cwd=self.cwd,
            env=MappingProxyType(apply_overrides(self.env, overrides)),
        )


def apply_overrides(env: Mapping[str, str], overrides: Sequence[str]) -> Dict[str, str]:
    """
    Накладывает записи вида:
      KEY=value      - заменить значение
      KEY+TAG=value  - дописать value в начало KEY через os.pathsep
                       (PATH+DMD=/ws/distribution/bin)
    """
    result = dict(env)
    for entry in overrides:
        key, sep, value = entry.partition("=")
        if not sep or not key:
            raise ValueError(f"Некорректная запись окружения: {entry!r}")

        if "+" in key:
            key = key.split("+", 1)[0]
            if not key:
                raise ValueError(f"Некорректная запись окружения: {entry!r}")
            if not value:
                # пустой элемент PATH означает текущую директорию
                continue
            previous = result.get(key)
            result[key] = value + os.pathsep + previous if previous else value
        else:
            result[key] = value
    return result


def root_context(
    workspace: os.PathLike | str,
    environ: Optional[Mapping[str, str]] = None,
) -> TaskContext:
    workspace_path = Path(workspace).resolve()
    workspace_path.mkdir(parents=True, exist_ok=True)
    env = dict(os.environ if environ is None else environ)
    return TaskContext(
        workspace=workspace_path,
        cwd=workspace_path,
        env=MappingProxyType(env),
    )


_current: ContextVar[TaskContext] = ContextVar("stagerunner_task_context")


def current_context() -> TaskContext:
    """
    Текущий контекст задачи. Вне пайплайна - процессная директория и окружение.
    """
    try:
        return _current.get()
    except LookupError:
        cwd = Path.cwd()
        return TaskContext(
            workspace=cwd, cwd=cwd, env=MappingProxyType(dict(os.environ))
        )


@contextmanager
def bind_context(context: TaskContext) -> Iterator[TaskContext]:
    token = _current.set(context)
    try:
        yield context
    finally:
        _current.reset(token)


@contextmanager
def working_directory(name: str, create: bool = True) -> Iterator[TaskContext]:
    with bind_context(current_context().enter(name, create=create)) as context:
        yield context


@contextmanager
def environment_overlay(overrides: Sequence[str]) -> Iterator[TaskContext]:
    with bind_context(current_context().overlay(overrides)) as context:
        yield context


def with_directory(name: str, action: Callable[..., R], *args: Any, **kwargs: Any) -> R:
    with working_directory(name):
        return action(*args, **kwargs)


def with_env(overrides: Sequence[str], action: Callable[..., R], *args: Any, **kwargs: Any) -> R:
    with environment_overlay(overrides):
        return action(*args, **kwargs)
