import settings
import click

from pathlib import Path

from utils import async_click
from stagerunner import config
from stagerunner.core import StageRunnerCore
from stagerunner.downstream import CommandTrigger, EchoTrigger
from stagerunner.exceptions import PipelineFailure
from stagerunner.models import CheckoutRef
from stagerunner.services.builders import pipeline as builder
from stagerunner.services.git_module import GitCheckout, resolve_checkout_context


@click.command()
@click.option("-w", "--workspace", default=str(config.WORKSPACE_DIR), help="Рабочее пространство пайплайна")
@click.option("--artifacts-dir", default=str(config.ARTIFACTS_DIR), help="Куда публиковать артефакты")
@click.option("--repo-url", default=config.REPO_URL_TEMPLATE, help="Шаблон URL репозитория, {name} - имя")
@click.option("--change-url", envvar="CHANGE_URL", default=None, help="URL PR, запустившего сборку")
@click.option("--ref-url", envvar="GIT_URL", default=None, help="Remote ссылки запуска")
@click.option("--ref-branch", envvar="CHANGE_BRANCH", default=None, help="Ветка ссылки запуска")
@click.option("--ref-commit", envvar="GIT_COMMIT", default=None, help="Коммит ссылки запуска")
@click.option("--change-fork", envvar="CHANGE_FORK", default=None, help="Форк, из которого пришёл PR")
@click.option("--downstream", default=config.DOWNSTREAM_JOB, help="Downstream-задача, запускается в конце")
@click.option("--trigger-cmd", default=config.TRIGGER_COMMAND, help="Команда триггера, {job} - имя задачи")
@click.option("-j", "--jobs", default=config.BUILD_JOBS, type=int, help="Параллельность make")
@click.option("--dry-run", is_flag=True, help="Только показать план пайплайна")
@async_click
async def main(
    workspace: str,
    artifacts_dir: str,
    repo_url: str,
    change_url: str | None,
    ref_url: str | None,
    ref_branch: str | None,
    ref_commit: str | None,
    change_fork: str | None,
    downstream: str,
    trigger_cmd: str | None,
    jobs: int,
    dry_run: bool,
):
    click.echo(settings.LOGO + "\n")

    # ветка PR из форка не живёт в GIT_URL: тогда берём +refs/pull/<n>/head
    ambient_ref = None
    if not change_fork and (ref_url or ref_branch or ref_commit):
        ambient_ref = CheckoutRef(
            url=ref_url,
            branch=ref_branch or config.DEFAULT_REF,
            commit=ref_commit,
        )
    checkout_context = resolve_checkout_context(change_url, ambient_ref)

    pipeline, logs, warnings = builder.build_pipeline(
        Path(workspace),
        checkout_context=checkout_context,
        git=GitCheckout(repo_url_template=repo_url),
        jobs=jobs,
        downstream_job=downstream,
    )
    for line in logs:
        click.echo(line)
    for line in warnings:
        click.echo(line, err=True)

    summary = builder.summarize_pipeline(pipeline)
    click.echo(summary.description)

    if dry_run:
        for stage in pipeline.stages:
            click.echo(f"- {stage.name} ({stage.mode.value})")
            for task in stage.tasks:
                click.echo(f"    {task.name} -> {task.workdir}")
        if pipeline.downstream_job:
            click.echo(f"- downstream: {pipeline.downstream_job}")
        return

    trigger = CommandTrigger(trigger_cmd) if trigger_cmd else EchoTrigger()
    runner = StageRunnerCore(
        workspace=Path(workspace),
        artifacts_dir=Path(artifacts_dir),
        trigger=trigger,
    )
    report = await runner.run_pipeline(pipeline)

    for line in report.warnings:
        click.echo(line, err=True)

    try:
        report.raise_for_failure()
    except PipelineFailure as e:
        raise click.ClickException(e.description)


if __name__ == "__main__":
    main()
