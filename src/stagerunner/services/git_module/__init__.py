from .core import GitCheckout
from .change import parse_change_url, resolve_checkout_context
from .models import CheckedOutRepo

from .exceptions import (
    GitExceptions,
    CheckoutFailure,
)

__all__ = [
    "GitCheckout",
    "CheckedOutRepo",
    "parse_change_url",
    "resolve_checkout_context",
    "GitExceptions",
    "CheckoutFailure",
]
