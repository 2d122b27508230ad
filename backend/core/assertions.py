from __future__ import annotations
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from backend.core.config import settings

_enabled = settings.assertions

class InvariantError(AssertionError):
    pass

def assertions_active() -> bool:
    return _enabled

def set_assertions(value: bool) -> None:
    global _enabled
    _enabled = value

@contextmanager
def assertions_enabled(value: bool = True) -> Iterator[None]:
    """Temporarily switch invariant checking, restoring the previous setting on exit."""
    saved = _enabled
    set_assertions(value)
    try:
        yield
    finally:
        set_assertions(saved)

def check(condition: Callable[[], bool], message: Optional[str] = None) -> None:
    # condition is a callable so that disabled checks cost nothing
    if _enabled and not condition():
        raise InvariantError("assertion failed" + (": " + message if message else ""))
