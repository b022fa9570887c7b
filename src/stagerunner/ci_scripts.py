# stagerunner/ci_scripts.py
from __future__ import annotations

from typing import List, Literal


DmdKind = Literal["build", "tests"]
RuntimeKind = Literal["build", "tests"]
ToolsKind = Literal["build"]
DubKind = Literal["build", "tests"]


def _normalize_kind(kind: str) -> str:
    """
    Нормализуем суффикс job'а:
    'tests' -> 'test', остальные без изменений.
    """
    if kind == "tests":
        return "test"
    return kind


def _make(target: str = "", jobs: int = 1, extra: str = "") -> str:
    parts = ["make", "-f", "posix.mak", f"-j{jobs}"]
    if extra:
        parts.append(extra)
    if target:
        parts.append(target)
    return " ".join(parts)


# ===
# dmd
# ===

def make_dmd_script(kind: DmdKind, jobs: int = 1) -> List[str]:
    """
    Генерирует script для компилятора dmd.
    kind:
      - 'build' -> сборка с AUTO_BOOTSTRAP=1 (хост-компилятор скачивается сам)
      - 'tests' -> быстрый прогон тестсьюта
    """
    normalized = _normalize_kind(kind)
    job_name = f"dmd_{kind}"

    cmds: List[str] = [f"echo 'Job: {job_name}'"]

    if normalized == "build":
        cmds.append(f"make -C src -f posix.mak -j{jobs} AUTO_BOOTSTRAP=1")
    elif normalized == "test":
        cmds.append(f"make -C test -j{jobs} quick")
    else:
        raise ValueError(f"Unsupported dmd job kind: {kind}")

    return cmds


# ==================
# druntime / phobos
# ==================

def make_runtime_script(project: str, kind: RuntimeKind, jobs: int = 1) -> List[str]:
    """
    Генерирует script для druntime/phobos (одинаковый posix.mak-интерфейс).
    kind:
      - 'build' -> make -f posix.mak
      - 'tests' -> make -f posix.mak unittest
    """
    if project not in ("druntime", "phobos"):
        raise ValueError(f"Unsupported runtime project: {project}")

    normalized = _normalize_kind(kind)
    job_name = f"{project}_{kind}"

    cmds: List[str] = [f"echo 'Job: {job_name}'"]

    if normalized == "build":
        cmds.append(_make(jobs=jobs))
    elif normalized == "test":
        cmds.append(_make("unittest", jobs=jobs))
    else:
        raise ValueError(f"Unsupported {project} job kind: {kind}")

    return cmds


# =====
# tools
# =====

def make_tools_script(kind: ToolsKind, jobs: int = 1) -> List[str]:
    normalized = _normalize_kind(kind)
    if normalized != "build":
        raise ValueError(f"Unsupported tools job kind: {kind}")

    return [
        "echo 'Job: tools_build'",
        _make("rdmd", jobs=jobs, extra="DMD=dmd"),
    ]


# ===
# dub
# ===

def make_dub_script(kind: DubKind) -> List[str]:
    """
    Генерирует script для dub.
    Ожидается, что свежесобранный dmd уже стоит первым в PATH.
    kind:
      - 'build' -> ./build.sh
      - 'tests' -> bin/dub test
    """
    normalized = _normalize_kind(kind)
    job_name = f"dub_{kind}"

    cmds: List[str] = [f"echo 'Job: {job_name}'", "dmd --version"]

    if normalized == "build":
        cmds.append("DMD=dmd ./build.sh")
    elif normalized == "test":
        cmds.append("./bin/dub test --compiler=dmd")
    else:
        raise ValueError(f"Unsupported dub job kind: {kind}")

    return cmds


# ============
# distribution
# ============

def make_package_script(
    os_name: str = "linux",
    model: str = "64",
    archive: str = "distribution.tar.xz",
) -> List[str]:
    """
    Собирает каталог distribution/ (bin, imports, libs) и упаковывает его в tar.xz.
    Запускается из корня workspace.
    """
    dmd_dir = f"dmd/generated/{os_name}/release/{model}"
    phobos_dir = f"phobos/generated/{os_name}/release/{model}"
    tools_dir = f"tools/generated/{os_name}/{model}"

    return [
        "echo 'Job: package'",
        "rm -rf distribution",
        "mkdir -p distribution/bin distribution/imports distribution/libs",
        f"cp {dmd_dir}/dmd distribution/bin/",
        f"cp {tools_dir}/rdmd distribution/bin/",
        "cp dub/bin/dub distribution/bin/",
        "cp -r phobos/std phobos/etc distribution/imports/",
        "cp -r druntime/import/* distribution/imports/",
        f"cp {phobos_dir}/libphobos2.a distribution/libs/",
        "printf '[Environment]\\nDFLAGS=-I%%@P%%/../imports -L-L%%@P%%/../libs -L--export-dynamic -fPIC\\n'"
        " > distribution/bin/dmd.conf",
        f"rm -f {archive}",
        f"tar -Jcf {archive} distribution",
    ]
