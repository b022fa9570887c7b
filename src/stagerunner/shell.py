import subprocess
from typing import Callable, List, Sequence

import click

from .context import current_context
from .exceptions import TaskExecutionFailure
from .models import Outcome


def sh(command: str, label: str | None = None) -> str:
    """
    Запускает shell-команду в директории и окружении текущей задачи.
    Вывод печатается с префиксом задачи, чтобы параллельные логи не смешивались.

    :raises TaskExecutionFailure: если команда завершилась с ненулевым кодом.
    """
    context = current_context()
    prefix = f"[{label or context.cwd.name}]"
    click.echo(f"{prefix} $ {command}")

    completed = subprocess.run(
        command,
        shell=True,
        cwd=context.cwd,
        env=dict(context.env),
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
    )

    output_lines = completed.stdout.splitlines() if completed.stdout else []
    for line in output_lines:
        click.echo(f"{prefix} {line}")

    if completed.returncode != 0:
        raise TaskExecutionFailure(
            task_name=label or context.cwd.name,
            reason=f"команда {command!r} завершилась с кодом {completed.returncode}",
            logs=[f"$ {command}", *output_lines[-20:]],
        )

    return completed.stdout or ""


def script_action(commands: Sequence[str]) -> Callable[[str], Outcome]:
    """
    Действие задачи из списка команд: выполняются по порядку,
    первая упавшая команда валит задачу.
    """
    script: List[str] = list(commands)

    def action(name: str) -> Outcome:
        for command in script:
            sh(command, label=name)
        return Outcome.SUCCESS

    return action
