import shutil
from pathlib import Path
from typing import List, Tuple

import click


class ArtifactStore:
    """
    Публикация артефактов сборки: копирует файлы из workspace в target_dir,
    сохраняя относительные пути. Файлы по абсолютному пути кладутся
    в корень target_dir под своим именем.
    """

    def __init__(self, workspace: Path, target_dir: Path) -> None:
        self.workspace = Path(workspace)
        self.target_dir = Path(target_dir)
        self.logs: List[str] = []
        self.warnings: List[str] = []

    def _warn(self, message: str) -> List[Path]:
        self.warnings.append(message)
        click.echo(message, err=True)
        return []

    def _match(self, artifact_path: str) -> Tuple[List[Tuple[Path, Path]], List[Path]]:
        """
        :return: пары (источник, путь внутри target_dir) и файлы, вышедшие за workspace.
        """
        pattern = Path(artifact_path)
        if pattern.is_absolute():
            sources = sorted(p for p in pattern.parent.glob(pattern.name) if p.is_file())
            return [(source, Path(source.name)) for source in sources], []

        root = self.workspace.resolve()
        matches, outside = [], []
        for source in sorted(p for p in self.workspace.glob(artifact_path) if p.is_file()):
            resolved = source.resolve()
            if resolved.is_relative_to(root):
                matches.append((source, resolved.relative_to(root)))
            else:
                outside.append(resolved)
        return matches, outside

    def publish(
        self,
        artifact_path: str,
        only_if_successful: bool = True,
        pipeline_failed: bool = False,
    ) -> List[Path]:
        """
        :param artifact_path:      Путь или glob-шаблон относительно workspace, либо абсолютный путь.
        :param only_if_successful: Не публиковать, если пайплайн упал.
        :param pipeline_failed:    Итог пайплайна на момент публикации.
        :return: Список опубликованных файлов (пустой, если публикация пропущена).
        """
        if only_if_successful and pipeline_failed:
            self.logs.append(f"Артефакт {artifact_path!r} пропущен: пайплайн упал.")
            click.echo(self.logs[-1])
            return []

        try:
            matches, outside = self._match(artifact_path)
        except (NotImplementedError, ValueError) as e:
            return self._warn(f"Артефакт {artifact_path!r} отклонён: {e}.")

        if outside:
            return self._warn(
                f"Артефакт {artifact_path!r} отклонён: файлы вне рабочего пространства {self.workspace}."
            )
        if not matches:
            return self._warn(f"Артефакт {artifact_path!r} не найден в {self.workspace}.")

        published: List[Path] = []
        for source, relative in matches:
            target = self.target_dir / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)
            published.append(target)
            self.logs.append(f"Артефакт опубликован: {target}")
            click.echo(self.logs[-1])

        return published
