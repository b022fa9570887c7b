from typing import List, Optional

from exception import CLIException


class GitExceptions(CLIException):
    """
    Базовое исключение для работы с Git/репозиториями.

    Дополнительно хранит логи (steps), накопленные во время операции.
    """

    def __init__(
        self,
        *args,
        description: str = "Something happend when work with Git",
        logs: Optional[List[str]] = None,
    ) -> None:
        super().__init__(*args, description=description)
        self.logs: List[str] = logs or []


class CheckoutFailure(GitExceptions):
    """
    Ошибка при выкачивании репозитория в рабочую директорию.
    """

    def __init__(
        self,
        repository: str,
        ref: str,
        logs: Optional[List[str]] = None,
        *args,
    ) -> None:
        description = f"Error to checkout repository {repository} at {ref}"
        super().__init__(*args, description=description, logs=logs)
        self.repository = repository
        self.ref = ref
