import re
from typing import Optional

from stagerunner.models import ChangeMatch, CheckoutContext, CheckoutRef, RepositoryOverride


# .../<owner>/<repo>/pull/<number>
CHANGE_URL_PATTERN = re.compile(
    r"^.*/(?P<owner>[^/]+)/(?P<repository>[^/]+)/pull/(?P<number>\d+)/?$"
)


def parse_change_url(url: Optional[str]) -> Optional[ChangeMatch]:
    """
    Разбирает URL запроса на изменение (PR). None - если это не PR-сборка.
    """
    if not url:
        return None

    match = CHANGE_URL_PATTERN.match(url.strip())
    if match is None:
        return None

    return ChangeMatch(
        owner=match.group("owner"),
        repository=match.group("repository"),
        number=int(match.group("number")),
    )


def resolve_checkout_context(
    change_url: Optional[str],
    ambient_ref: Optional[CheckoutRef] = None,
) -> CheckoutContext:
    """
    Строит CheckoutContext на запуск.

    Если change_url указывает на PR, репозиторий из URL выкачивается по
    ambient_ref (ссылка, уже привязанная хостом к этому запуску). Если хост
    ссылку не передал, берём голову PR: +refs/pull/<number>/head.
    Все остальные репозитории идут с ветки по умолчанию.
    """
    change = parse_change_url(change_url)
    if change is None:
        return CheckoutContext()

    ref = ambient_ref
    if ref is None:
        ref = CheckoutRef(
            branch=f"pull/{change.number}/head",
            refspec=f"+refs/pull/{change.number}/head",
        )

    return CheckoutContext(
        override=RepositoryOverride(repository=change.repository, ref=ref)
    )
