from pathlib import Path
from typing import Union


PathLike = Union[str, Path]

def ensure_dir(path: PathLike) -> Path:
    """
    Гарантирует, что директория существует, и возвращает её как Path.
    """
    base = Path(path)
    base.mkdir(parents=True, exist_ok=True)
    return base
