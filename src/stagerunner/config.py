from pathlib import Path
import os

"""
Базовая настройка раннера.

workspace по умолчанию - WORKSPACE (как в CI-хостах) или текущая директория.
Всё можно переопределить переменными окружения STAGERUNNER_*.
"""

WORKSPACE_DIR = Path(
    os.getenv("STAGERUNNER_WORKSPACE", os.getenv("WORKSPACE", os.getcwd()))
)

# {name} подставляется именем репозитория
REPO_URL_TEMPLATE = os.getenv(
    "STAGERUNNER_REPO_URL", "https://github.com/dlang/{name}.git"
)

DEFAULT_REF = os.getenv("STAGERUNNER_DEFAULT_REF", "master")

ARTIFACTS_DIR = Path(
    os.getenv("STAGERUNNER_ARTIFACTS_DIR", str(WORKSPACE_DIR / "artifacts"))
)

DOWNSTREAM_JOB = os.getenv("STAGERUNNER_DOWNSTREAM_JOB", "dlang/downstream")

# например: "curl -fsS -X POST https://ci.example.org/job/{job}/build"
TRIGGER_COMMAND = os.getenv("STAGERUNNER_TRIGGER_CMD")

BUILD_JOBS = int(os.getenv("STAGERUNNER_JOBS", str(os.cpu_count() or 1)))
