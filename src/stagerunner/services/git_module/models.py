from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional


@dataclass
class CheckedOutRepo:
    """
    Результат clean checkout.

    name       - имя репозитория
    repo_path  - директория, совпадающая с деревом целевой ссылки
    url        - remote, из которого выкачивали
    ref        - ветка/refspec, которую применили
    commit     - итоговый HEAD
    overridden - True, если использована ссылка из CheckoutContext
    logs       - текстовые логи шагов
    """

    name: str
    repo_path: Path
    url: str
    ref: str
    commit: Optional[str]
    overridden: bool
    logs: List[str]
