from git import (
    Repo as GitRepo,
    GitCommandError,
)

from pathlib import Path
from typing import List, Optional

from stagerunner.config import DEFAULT_REF, REPO_URL_TEMPLATE
from stagerunner.context import current_context
from stagerunner.models import CheckoutContext, CheckoutRef

from .models import CheckedOutRepo
from .utils import ensure_dir, PathLike
from .exceptions import CheckoutFailure


class GitCheckout:
    """
    Clean checkout именованного репозитория в рабочую директорию (через GitPython).

    Выбор ссылки:
    - CheckoutContext переопределяет ссылку для своего репозитория - берём её как есть;
    - иначе - default_ref из remote, построенного по repo_url_template.

    Политика clean checkout: до применения ссылки удаляем неверсионированные
    файлы и сбрасываем отслеживаемые, после - ещё раз чистим дерево.
    Директория в итоге совпадает с деревом целевой ссылки.
    """

    def __init__(
        self,
        repo_url_template: str = REPO_URL_TEMPLATE,
        default_ref: str = DEFAULT_REF,
    ) -> None:
        self.repo_url_template = repo_url_template
        self.default_ref = default_ref

    def remote_url(self, name: str) -> str:
        return self.repo_url_template.format(name=name)

    def resolve_ref(self, name: str, context: Optional[CheckoutContext] = None) -> CheckoutRef:
        override = (context or CheckoutContext()).ref_for(name)
        if override is not None:
            return override
        return CheckoutRef(branch=self.default_ref)

    def checkout(
        self,
        name: str,
        context: Optional[CheckoutContext] = None,
        directory: Optional[PathLike] = None,
    ) -> CheckedOutRepo:
        """
        :param name:      Имя репозитория (часть URL и имя задачи).
        :param context:   CheckoutContext текущего запуска.
        :param directory: Куда выкачивать; по умолчанию - текущая директория задачи.
        :raises CheckoutFailure: при любых ошибках git/IO.
        """
        context = context or CheckoutContext()
        ref = self.resolve_ref(name, context)
        overridden = context.ref_for(name) is not None
        url = ref.url or self.remote_url(name)
        fetch_spec = ref.refspec or ref.branch
        repo_dir = Path(directory) if directory is not None else current_context().cwd

        logs: List[str] = []
        logs.append(
            f"Выкачиваем {name!r} из {url} ({fetch_spec}"
            + (f", коммит {ref.commit}" if ref.commit else "")
            + (", ссылка из контекста запуска" if overridden else "")
            + f") в {repo_dir}"
        )

        repo_obj: GitRepo | None = None
        try:
            ensure_dir(repo_dir)
            if (repo_dir / ".git").exists():
                repo_obj = GitRepo(repo_dir)
                logs.append("Найден существующий git-репозиторий, переиспользуем его.")
            else:
                repo_obj = GitRepo.init(repo_dir)
                logs.append("Инициализирован новый git-репозиторий.")

            if "origin" in [remote.name for remote in repo_obj.remotes]:
                repo_obj.remotes.origin.set_url(url)
            else:
                repo_obj.create_remote("origin", url)

            # чистим остатки прошлых запусков
            if repo_obj.head.is_valid():
                repo_obj.git.reset("--hard")
            repo_obj.git.clean("-ffdx")

            repo_obj.git.fetch("--force", "origin", fetch_spec)
            target = ref.commit or "FETCH_HEAD"
            repo_obj.git.checkout("--force", "--detach", target)
            repo_obj.git.clean("-ffdx")

            commit = repo_obj.head.commit.hexsha
            logs.append(f"Репозиторий {name!r} на коммите {commit}")
        except GitCommandError as e:
            logs.append("GitPython: ошибка при выполнении git-команды.")
            logs.append(str(e))
            raise CheckoutFailure(repository=name, ref=fetch_spec, logs=logs) from e
        except Exception as e:  # любые IO-ошибки тоже валят задачу
            logs.append("Непредвиденная ошибка при выкачивании репозитория.")
            logs.append(repr(e))
            raise CheckoutFailure(repository=name, ref=fetch_spec, logs=logs) from e
        finally:
            if repo_obj is not None:
                repo_obj.close()

        return CheckedOutRepo(
            name=name,
            repo_path=repo_dir,
            url=url,
            ref=fetch_spec,
            commit=commit,
            overridden=overridden,
            logs=logs,
        )
