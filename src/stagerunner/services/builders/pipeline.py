import click

from pathlib import Path
from typing import Callable, List, Optional, Tuple

from model import ArtifactSpec, ExecutionMode, PipelineDefinition, Stage, Task
from stagerunner import ci_scripts
from stagerunner.config import BUILD_JOBS, DOWNSTREAM_JOB
from stagerunner.models import CheckoutContext, Outcome, PipelineSummary
from stagerunner.services.git_module import GitCheckout
from stagerunner.shell import script_action


# Репозитории, из которых собирается дистрибутив
PROJECTS = ["dmd", "druntime", "phobos", "tools", "dub"]

ARCHIVE_NAME = "distribution.tar.xz"


def _clone_action(git: GitCheckout, context: CheckoutContext) -> Callable[[str], Outcome]:
    def action(name: str) -> Outcome:
        cloned = git.checkout(name, context)
        for line in cloned.logs:
            click.echo(f"[{name}] {line}")
        return Outcome.SUCCESS

    return action


def build_pipeline(
    workspace: Path,
    checkout_context: Optional[CheckoutContext] = None,
    git: Optional[GitCheckout] = None,
    jobs: int = BUILD_JOBS,
    os_name: str = "linux",
    model: str = "64",
    downstream_job: Optional[str] = DOWNSTREAM_JOB,
) -> Tuple[PipelineDefinition, List[str], List[str]]:
    """
    Строим пайплайн сборки D-тулчейна.

    Clone -> Build Compiler -> Build Tools -> Package -> Test, затем downstream-триггер.

    Возвращает (PipelineDefinition, logs, warnings).
    """
    logs: List[str] = []
    warnings: List[str] = []

    checkout_context = checkout_context or CheckoutContext()
    git = git or GitCheckout()
    workspace = Path(workspace).resolve()

    override = checkout_context.override
    if override is not None:
        logs.append(
            f"Репозиторий {override.repository!r} выкачивается по ссылке запуска: "
            f"{override.ref.refspec or override.ref.branch}"
        )
        if override.repository not in PROJECTS:
            warnings.append(
                f"Запуск привязан к репозиторию {override.repository!r}, "
                f"но он не входит в сборку ({', '.join(PROJECTS)}). Все репозитории идут с master."
            )

    # --- Clone: всё параллельно ---
    clone = _clone_action(git, checkout_context)
    clone_stage = Stage(
        name="Clone",
        mode=ExecutionMode.PARALLEL,
        tasks=[Task(name=name, action=clone) for name in PROJECTS],
    )

    # --- Build Compiler: druntime и phobos зависят от dmd, строго по очереди ---
    compiler_stage = Stage(
        name="Build Compiler",
        mode=ExecutionMode.SEQUENTIAL,
        tasks=[
            Task(name="dmd", action=script_action(ci_scripts.make_dmd_script("build", jobs))),
            Task(
                name="druntime",
                action=script_action(ci_scripts.make_runtime_script("druntime", "build", jobs)),
            ),
            Task(
                name="phobos",
                action=script_action(ci_scripts.make_runtime_script("phobos", "build", jobs)),
            ),
        ],
    )

    # --- Build Tools: свежий dmd первым в PATH ---
    fresh_dmd = workspace / "dmd" / "generated" / os_name / "release" / model
    tools_stage = Stage(
        name="Build Tools",
        mode=ExecutionMode.SEQUENTIAL,
        env=[f"PATH+DMD={fresh_dmd}"],
        tasks=[
            Task(name="tools", action=script_action(ci_scripts.make_tools_script("build", jobs))),
            Task(name="dub", action=script_action(ci_scripts.make_dub_script("build"))),
        ],
    )

    package_stage = Stage(
        name="Package",
        mode=ExecutionMode.SEQUENTIAL,
        tasks=[
            Task(
                name="distribution",
                directory=".",
                action=script_action(
                    ci_scripts.make_package_script(os_name=os_name, model=model, archive=ARCHIVE_NAME)
                ),
            ),
        ],
    )

    # --- Test: параллельно, против собранного дистрибутива ---
    distribution_bin = workspace / "distribution" / "bin"
    test_stage = Stage(
        name="Test",
        mode=ExecutionMode.PARALLEL,
        env=[f"PATH+DISTRIBUTION={distribution_bin}"],
        tasks=[
            Task(
                name="druntime",
                action=script_action(ci_scripts.make_runtime_script("druntime", "tests", jobs)),
            ),
            Task(
                name="phobos",
                action=script_action(ci_scripts.make_runtime_script("phobos", "tests", jobs)),
            ),
            Task(name="dub", action=script_action(ci_scripts.make_dub_script("tests"))),
        ],
    )

    stages = [clone_stage, compiler_stage, tools_stage, package_stage, test_stage]

    if not downstream_job:
        warnings.append("Downstream-задача не указана - триггер будет пропущен.")

    pipeline = PipelineDefinition(
        stages=stages,
        artifacts=[ArtifactSpec(path=ARCHIVE_NAME, only_if_successful=True)],
        downstream_job=downstream_job or None,
    )
    logs.append(
        f"Пайплайн сформирован: {len(pipeline.stages)} стадий и "
        f"{sum(len(stage.tasks) for stage in pipeline.stages)} задач."
    )

    return pipeline, logs, warnings


def summarize_pipeline(pipeline: PipelineDefinition) -> PipelineSummary:
    """
    Строит краткое резюме пайплайна для CLI.
    """
    stages = [stage.name for stage in pipeline.stages]
    task_names = [f"{stage.name}/{task.name}" for stage in pipeline.stages for task in stage.tasks]
    stages_count = len(stages)
    tasks_count = len(task_names)

    if stages_count == 0:
        description = "Пайплайн пустой. Отредактируйте конфигурацию."
    else:
        description = (
            f"Пайплайн из {stages_count} стадий и {tasks_count} задач: "
            f"стадии {', '.join(stages)}."
        )

    return PipelineSummary(
        stages_count=stages_count,
        tasks_count=tasks_count,
        stages=stages,
        task_names=task_names,
        description=description,
    )
