import shlex
import subprocess
from typing import List

import click

from .models import Outcome


class EchoTrigger:
    """
    Триггер без внешнего CI: только фиксирует, что downstream-задача запрошена.
    """

    def __init__(self) -> None:
        self.logs: List[str] = []
        self.triggered: List[str] = []

    def __call__(self, job_name: str) -> Outcome:
        self.triggered.append(job_name)
        self.logs.append(f"Downstream-задача {job_name!r} запрошена (команда триггера не настроена).")
        click.echo(self.logs[-1])
        return Outcome.SUCCESS


class CommandTrigger:
    """
    Запускает downstream-задачу внешней командой, например:
    curl -fsS -X POST https://ci.example.org/job/{job}/build
    """

    def __init__(self, command_template: str, timeout: float = 300.0) -> None:
        self.command_template = command_template
        self.timeout = timeout
        self.logs: List[str] = []

    def __call__(self, job_name: str) -> Outcome:
        command = self.command_template.format(job=shlex.quote(job_name))
        self.logs.append(f"Запускаем downstream-задачу {job_name!r}: {command}")
        click.echo(self.logs[-1])

        try:
            completed = subprocess.run(
                command,
                shell=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            self.logs.append(f"Триггер {job_name!r} не ответил за {self.timeout} c.")
            click.echo(self.logs[-1], err=True)
            return Outcome.FAILURE

        if completed.stdout:
            self.logs.extend(completed.stdout.splitlines())
        if completed.returncode != 0:
            self.logs.append(f"Триггер {job_name!r} завершился с кодом {completed.returncode}.")
            click.echo(self.logs[-1], err=True)
            return Outcome.FAILURE

        return Outcome.SUCCESS
